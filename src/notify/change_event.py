"""Change-stream payload parsing.

This module validates stream delivery batches at the boundary and
projects each item's new image into a typed change event.
"""

from __future__ import annotations

from typing import Any

from core.constants import OPTIONAL_FIELDS, PRIMARY_KEY_FIELD, STREAM_EVENTS_WITH_IMAGE
from core.errors import MalformedChangeEventError, MalformedEventError
from core.field_names import canonical_field_name
from core.types import ChangeEvent
from store.item_codec import decode_image


def stream_records(payload: Any) -> list[Any]:
    """Return the raw item list of a delivery batch.

    Raises:
        MalformedEventError: If the payload has no ``Records`` list.
    """
    records = payload.get("Records") if isinstance(payload, dict) else None
    if not isinstance(records, list):
        raise MalformedEventError("Invalid change-stream payload: expected a 'Records' list.")
    return records


def has_new_image(record: Any) -> bool:
    """Return whether a stream item is expected to carry a new image."""
    if not isinstance(record, dict):
        return False
    return record.get("eventName", "INSERT") in STREAM_EVENTS_WITH_IMAGE


def parse_change_event(record: Any) -> ChangeEvent:
    """Project one stream item into a change event.

    Optional attributes missing from the image become None.

    Args:
        record: One stream item with ``dynamodb.NewImage``.

    Returns:
        Typed change event.

    Raises:
        MalformedChangeEventError: If the image or its primary key is missing.
    """
    if not isinstance(record, dict):
        raise MalformedChangeEventError("Change-stream item is not an object.")
    stream_payload = record.get("dynamodb")
    image = stream_payload.get("NewImage") if isinstance(stream_payload, dict) else None
    if not isinstance(image, dict):
        raise MalformedChangeEventError(
            f"Change-stream item {record.get('eventID', '?')} has no dynamodb.NewImage."
        )
    try:
        values = decode_image(image)
    except Exception as error:
        raise MalformedChangeEventError(
            f"Change-stream item {record.get('eventID', '?')} has an undecodable image: {error}"
        ) from error
    food_name = values.get(canonical_field_name(PRIMARY_KEY_FIELD))
    if not isinstance(food_name, str) or not food_name:
        raise MalformedChangeEventError(
            f"Change-stream item {record.get('eventID', '?')} has no {PRIMARY_KEY_FIELD}."
        )
    optional_values = {
        name: _optional_string(values.get(canonical_field_name(name))) for name in OPTIONAL_FIELDS
    }
    return ChangeEvent(
        food_name=food_name,
        event_name=str(record.get("eventName", "INSERT")),
        event_id=record.get("eventID"),
        **optional_values,
    )


def _optional_string(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)

"""Change observer for committed food items.

This module logs one structured event per changed item. Problems with
one item are logged and counted without affecting the rest of the
delivery batch.
"""

from __future__ import annotations

from typing import Any

from core.constants import NOT_PRESENT
from core.errors import MalformedChangeEventError
from core.logging_config import get_logger
from core.types import ChangeEvent, ObserverSummary
from notify.change_event import has_new_image, parse_change_event, stream_records

_LOGGER = get_logger(__name__)


class ChangeObserver:
    """Project change-stream items into ``food_item_changed`` log events."""

    def __init__(self, logger: Any | None = None) -> None:
        self._logger = logger or _LOGGER

    def observe(self, payload: Any) -> ObserverSummary:
        """Handle one delivery batch.

        Args:
            payload: Stream delivery with a ``Records`` list.

        Returns:
            Per-item outcome counts.

        Raises:
            MalformedEventError: If the payload has no ``Records`` list.
        """
        records = stream_records(payload)
        logged_count = 0
        skipped_count = 0
        failed_count = 0
        for index, record in enumerate(records):
            if isinstance(record, dict) and not has_new_image(record):
                skipped_count += 1
                self._logger.debug("change_event_skipped", index=index)
                continue
            try:
                event = parse_change_event(record)
            except MalformedChangeEventError as error:
                failed_count += 1
                self._logger.warning("change_event_malformed", index=index, error=str(error))
                continue
            self.log_change(event)
            logged_count += 1
        return ObserverSummary(
            event_count=len(records),
            logged_count=logged_count,
            skipped_count=skipped_count,
            failed_count=failed_count,
        )

    def log_change(self, event: ChangeEvent) -> dict[str, str]:
        """Emit the fixed field projection for one event.

        Returns:
            The logged fields, with absent values shown as ``"not present"``.
        """
        fields = project_change(event)
        self._logger.info("food_item_changed", event_name=event.event_name, **fields)
        return fields


def project_change(event: ChangeEvent) -> dict[str, str]:
    """Return the logged field projection of a change event."""
    return {
        "food_name": event.food_name,
        "scientific_name": _or_not_present(event.scientific_name),
        "group": _or_not_present(event.group),
        "sub_group": _or_not_present(event.sub_group),
    }


def _or_not_present(value: str | None) -> str:
    return NOT_PRESENT if value is None else value

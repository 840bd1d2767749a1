"""Native item encoding for food records.

This module converts FoodRecord values to and from the store's typed
attribute representation. Attribute names always come from
``canonical_field_name`` so parsing, keys, and writes agree.
"""

from __future__ import annotations

from decimal import DecimalException
from typing import Any, Mapping

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from core.constants import OPTIONAL_FIELDS, PRIMARY_KEY_FIELD
from core.errors import RecordStructureError
from core.field_names import canonical_field_name
from core.types import FoodRecord

_SERIALIZER = TypeSerializer()
_DESERIALIZER = TypeDeserializer()


def food_record_to_item(record: FoodRecord) -> dict[str, dict[str, Any]]:
    """Serialize a record into a native typed item.

    Optional attributes that are None are omitted from the item.

    Args:
        record: Record to serialize.

    Returns:
        Item mapping attribute names to typed values.

    Raises:
        RecordStructureError: If the primary key is blank.
    """
    if not record.food_name or not record.food_name.strip():
        raise RecordStructureError(
            f"Record has a blank {PRIMARY_KEY_FIELD}; it cannot be stored. "
            f"Fill the {PRIMARY_KEY_FIELD} column for every row."
        )
    item = {canonical_field_name(PRIMARY_KEY_FIELD): _SERIALIZER.serialize(record.food_name)}
    for field_name in OPTIONAL_FIELDS:
        value = getattr(record, field_name)
        if value is not None:
            item[canonical_field_name(field_name)] = _SERIALIZER.serialize(value)
    return item


def item_key(item: Mapping[str, Any]) -> str | None:
    """Return the primary key value of a native item, if present."""
    key_attribute = item.get(canonical_field_name(PRIMARY_KEY_FIELD))
    if not isinstance(key_attribute, Mapping):
        return None
    value = key_attribute.get("S")
    return value if isinstance(value, str) else None


def decode_image(image: Mapping[str, Any]) -> dict[str, Any]:
    """Decode a typed stream image into plain Python values.

    Attributes with unsupported type descriptors, or numbers the store
    context cannot represent exactly, are dropped.

    Args:
        image: Mapping of attribute names to typed values.

    Returns:
        Mapping of canonical attribute names to plain values.
    """
    decoded: dict[str, Any] = {}
    for name, typed_value in image.items():
        try:
            decoded[canonical_field_name(name)] = _DESERIALIZER.deserialize(typed_value)
        except (TypeError, ValueError, AttributeError, DecimalException):
            continue
    return decoded

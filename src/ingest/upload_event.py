"""Object-created trigger payload parsing.

This module validates S3 notification payloads at the boundary and
turns them into typed upload events.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import unquote_plus

from core.errors import MalformedEventError
from core.types import RawUploadEvent


def parse_upload_events(payload: Any) -> list[RawUploadEvent]:
    """Parse an S3 notification into upload events.

    Args:
        payload: Decoded notification with a ``Records`` list.

    Returns:
        One event per notification record, in delivery order.

    Raises:
        MalformedEventError: If the payload or any record has the wrong shape.
    """
    records = payload.get("Records") if isinstance(payload, dict) else None
    if not isinstance(records, list) or not records:
        raise MalformedEventError(
            "Invalid object-created payload: expected a non-empty 'Records' list."
        )
    return [_parse_record(record, index) for index, record in enumerate(records)]


def _parse_record(record: Any, index: int) -> RawUploadEvent:
    """Parse one notification record.

    Object keys arrive URL-encoded with ``+`` for spaces.
    """
    try:
        s3_payload = record["s3"]
        bucket = s3_payload["bucket"]["name"]
        key = s3_payload["object"]["key"]
    except (KeyError, TypeError) as error:
        raise MalformedEventError(
            f"Invalid object-created record {index}: missing s3.bucket.name or s3.object.key."
        ) from error
    if not isinstance(bucket, str) or not isinstance(key, str) or not bucket or not key:
        raise MalformedEventError(
            f"Invalid object-created record {index}: bucket and key must be non-empty strings."
        )
    return RawUploadEvent(bucket=bucket, key=unquote_plus(key))

"""S3 URI parsing helpers.

This module turns ``s3://bucket/key`` strings into upload events so the
CLI and the trigger handler share one event model.
"""

from __future__ import annotations

from core.errors import MalformedEventError
from core.types import RawUploadEvent


def is_s3_uri(uri: str) -> bool:
    """Return whether a source string names an S3 object."""
    return uri.startswith("s3://")


def parse_s3_uri(uri: str) -> RawUploadEvent:
    """Parse and validate an S3 object URI.

    Args:
        uri: URI in format ``s3://bucket/key``.

    Returns:
        Upload event referencing the object.

    Raises:
        MalformedEventError: If bucket or key is missing.
    """
    stripped_uri = uri.removeprefix("s3://")
    bucket, _, key = stripped_uri.partition("/")
    if not bucket or not key or key.endswith("/"):
        raise MalformedEventError(
            f"Invalid S3 URI '{uri}': expected s3://bucket/key. "
            "Provide both bucket and object key."
        )
    return RawUploadEvent(bucket=bucket, key=key)

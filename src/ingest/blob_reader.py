"""Blob storage readers for uploaded objects.

This module loads raw object bytes from S3 or the local filesystem.
Both readers fail loudly with BlobReadError when an object is missing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.errors import BlobReadError


class BlobReader(ABC):
    """Read one object's raw bytes by bucket and key."""

    @abstractmethod
    def read(self, bucket: str, key: str) -> bytes:
        """Return the full object body.

        Raises:
            BlobReadError: If the object is missing or unreadable.
        """


class S3BlobReader(BlobReader):
    """Blob reader backed by a boto3 S3 client."""

    def __init__(self, s3_client: Any) -> None:
        self._s3_client = s3_client

    def read(self, bucket: str, key: str) -> bytes:
        try:
            response = self._s3_client.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()
        except ClientError as error:
            error_code = error.response.get("Error", {}).get("Code", "Unknown")
            raise BlobReadError(
                f"Failed to read s3://{bucket}/{key}: {error_code}. "
                "Check that the object exists and the reader has access."
            ) from error
        except BotoCoreError as error:
            raise BlobReadError(f"Failed to read s3://{bucket}/{key}: {error}.") from error


class LocalBlobReader(BlobReader):
    """Blob reader treating the bucket as a local directory."""

    def read(self, bucket: str, key: str) -> bytes:
        object_path = Path(bucket).expanduser() / key
        try:
            return object_path.read_bytes()
        except OSError as error:
            raise BlobReadError(
                f"Failed to read {object_path}: {error.strerror or error}. "
                "Provide an existing, readable file."
            ) from error

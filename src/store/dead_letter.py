"""Dead-letter publishing for permanently failed records.

This module persists records that an upload could not commit so they
can be inspected and re-uploaded after the defect is fixed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict
import json
from typing import Any, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from core.errors import DeadLetterPublishError
from core.types import DeadLetter, RawUploadEvent


class DeadLetterSink(ABC):
    """Destination for records abandoned by an upload."""

    @abstractmethod
    def publish(self, source: RawUploadEvent, dead_letters: Sequence[DeadLetter]) -> None:
        """Persist dead letters for one source object.

        Raises:
            DeadLetterPublishError: If the destination rejects the write.
        """


class S3DeadLetterSink(DeadLetterSink):
    """Write dead letters as one JSONL object per source object."""

    def __init__(self, s3_client: Any, bucket: str, prefix: str) -> None:
        self._s3_client = s3_client
        self._bucket = bucket
        self._prefix = prefix.strip("/")

    def object_key(self, source: RawUploadEvent) -> str:
        """Return the dead-letter key for a source object."""
        return f"{self._prefix}/{source.bucket}/{source.key}.jsonl"

    def publish(self, source: RawUploadEvent, dead_letters: Sequence[DeadLetter]) -> None:
        if not dead_letters:
            return
        body = "".join(
            json.dumps(dead_letter_to_payload(dead_letter), sort_keys=True) + "\n"
            for dead_letter in dead_letters
        )
        object_key = self.object_key(source)
        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=object_key,
                Body=body.encode("utf-8"),
                ContentType="application/x-ndjson",
            )
        except (ClientError, BotoCoreError) as error:
            raise DeadLetterPublishError(
                f"Failed to publish {len(dead_letters)} dead letters to "
                f"s3://{self._bucket}/{object_key}: {error}. "
                "Check the dead-letter bucket and its write permissions."
            ) from error


def dead_letter_to_payload(dead_letter: DeadLetter) -> dict[str, object]:
    """Serialize a dead letter into a JSON-safe payload."""
    return {
        "record": asdict(dead_letter.record),
        "attempts": dead_letter.attempts,
        "reason": dead_letter.reason,
    }

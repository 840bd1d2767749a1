"""Shared typed models.

This module defines immutable data models used by ingest, store,
and notify layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class FoodRecord:
    """Canonical food item record.

    Attributes:
        food_name: Primary key of the item.
        scientific_name: Optional scientific name, None when the column was absent.
        group: Optional food group.
        sub_group: Optional food sub-group.
    """

    food_name: str
    scientific_name: str | None = None
    group: str | None = None
    sub_group: str | None = None


@dataclass(frozen=True)
class RawUploadEvent:
    """One object-created trigger.

    Attributes:
        bucket: Blob storage bucket name.
        key: Decoded object key inside the bucket.
    """

    bucket: str
    key: str

    @property
    def source_uri(self) -> str:
        """Return a printable URI for logs and summaries."""
        return f"s3://{self.bucket}/{self.key}"


@dataclass(frozen=True)
class ChangeEvent:
    """Projection of one change-stream item.

    Attributes:
        food_name: Primary key of the changed item.
        scientific_name: Optional attribute from the new image.
        group: Optional attribute from the new image.
        sub_group: Optional attribute from the new image.
        event_name: Stream event name (INSERT, MODIFY, REMOVE).
        event_id: Stream event id when provided.
    """

    food_name: str
    scientific_name: str | None = None
    group: str | None = None
    sub_group: str | None = None
    event_name: str = "INSERT"
    event_id: str | None = None


@dataclass(frozen=True)
class BatchWriteResult:
    """Outcome of one accepted batch write call.

    Attributes:
        unprocessed_items: Native items the store did not commit.
    """

    unprocessed_items: tuple[Mapping[str, Any], ...] = ()


@dataclass(frozen=True)
class DeadLetter:
    """Record that will not be committed by this invocation.

    Attributes:
        record: The record that failed.
        attempts: Number of write calls that included the record.
        reason: Human-readable failure reason.
    """

    record: FoodRecord
    attempts: int
    reason: str


@dataclass(frozen=True)
class UploadSummary:
    """Result of one upload invocation.

    Attributes:
        source_uri: Object the records were read from.
        record_count: Records produced by the normalizer.
        batch_count: Write calls issued.
        committed_count: Records confirmed committed.
        superseded_count: Failed records skipped because a later row shares the key.
        dead_letters: Records routed to the dead-letter path.
    """

    source_uri: str
    record_count: int
    batch_count: int
    committed_count: int
    superseded_count: int = 0
    dead_letters: tuple[DeadLetter, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        """Return whether no record was dead-lettered."""
        return not self.dead_letters


@dataclass(frozen=True)
class ObserverSummary:
    """Result of one change-feed delivery.

    Attributes:
        event_count: Items in the delivery batch.
        logged_count: Items projected and logged.
        skipped_count: Items without a new image (removals).
        failed_count: Items that could not be projected.
    """

    event_count: int
    logged_count: int
    skipped_count: int
    failed_count: int

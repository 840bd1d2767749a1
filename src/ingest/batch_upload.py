"""Batch upload coordination.

This module writes an ordered record sequence to the food table in
size-bounded batches. Unprocessed or throttled records are re-queued
with bounded attempts; records that cannot be committed are routed to
the dead-letter path. A failed batch never stops later batches.
"""

from __future__ import annotations

import time
from typing import Callable, Sequence

from core.config import LarderConfig
from core.constants import DEFAULT_EXECUTION_BUDGET_SECONDS, MAX_BATCH_WRITE_ITEMS
from core.errors import BatchWriteError, ExecutionBudgetExceeded, RecordStructureError
from core.logging_config import get_logger
from core.types import DeadLetter, FoodRecord, RawUploadEvent, UploadSummary
from ingest.record_queue import Batch, QueuedRecord, RecordQueue
from store.batch_writer import BatchWriter
from store.dead_letter import DeadLetterSink
from store.item_codec import food_record_to_item, item_key

_LOGGER = get_logger(__name__)
_SUPERSEDED_REASON = "superseded by a later row with the same food_name"


class BatchUploadCoordinator:
    """Sequential batch writer with retry and dead-letter handling."""

    def __init__(
        self,
        writer: BatchWriter,
        table_name: str,
        batch_size: int = MAX_BATCH_WRITE_ITEMS,
        max_attempts: int = 3,
        retry_base_delay: float = 0.0,
        execution_budget: float = DEFAULT_EXECUTION_BUDGET_SECONDS,
        dead_letter_sink: DeadLetterSink | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not 1 <= batch_size <= MAX_BATCH_WRITE_ITEMS:
            raise ValueError(f"batch_size must be within 1..{MAX_BATCH_WRITE_ITEMS}")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._writer = writer
        self._table_name = table_name
        self._batch_size = batch_size
        self._max_attempts = max_attempts
        self._retry_base_delay = retry_base_delay
        self._execution_budget = execution_budget
        self._dead_letter_sink = dead_letter_sink
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        writer: BatchWriter,
        config: LarderConfig,
        dead_letter_sink: DeadLetterSink | None = None,
    ) -> "BatchUploadCoordinator":
        """Build a coordinator from validated runtime config.

        Raises:
            LarderConfigError: If no target table is configured.
        """
        return cls(
            writer=writer,
            table_name=config.require_table_name(),
            batch_size=config.batch_size,
            max_attempts=config.max_attempts,
            retry_base_delay=config.retry_base_delay,
            execution_budget=config.execution_budget,
            dead_letter_sink=dead_letter_sink,
        )

    def run(self, records: Sequence[FoodRecord], source: RawUploadEvent) -> UploadSummary:
        """Write every record, batching and retrying as needed.

        Args:
            records: Fully materialized records in upload order.
            source: Object the records came from.

        Returns:
            Counts of committed, superseded, and dead-lettered records.

        Raises:
            ExecutionBudgetExceeded: If the run exceeds its time budget. Dead letters
                collected before the abort are published first.
            DeadLetterPublishError: If the dead-letter sink rejects the write.
        """
        started_at = self._clock()
        dead_letters: list[DeadLetter] = []
        queue = RecordQueue(self._prepare_entries(records, source, dead_letters))
        _LOGGER.info(
            "batch_upload_started",
            source_uri=source.source_uri,
            table_name=self._table_name,
            record_count=len(records),
            batch_size=self._batch_size,
        )
        committed_count = 0
        superseded_count = 0
        sequence = 0
        try:
            while queue:
                self._check_budget(started_at, sequence, len(queue), source)
                batch = queue.next_batch(sequence, self._batch_size)
                self._backoff(batch)
                committed_count += self._write_batch(batch, source)
                for entry in batch.entries:
                    if entry.state == "failed_retryable":
                        if queue.is_superseded(entry):
                            entry.transition("failed_permanent", _SUPERSEDED_REASON)
                            superseded_count += 1
                        elif entry.attempts >= self._max_attempts:
                            entry.transition("failed_permanent")
                            dead_letters.append(_dead_letter(entry, source))
                        else:
                            queue.requeue(entry)
                    elif entry.state == "failed_permanent":
                        dead_letters.append(_dead_letter(entry, source))
                sequence += 1
        except ExecutionBudgetExceeded:
            self._publish_dead_letters(source, dead_letters)
            raise
        self._publish_dead_letters(source, dead_letters)
        summary = UploadSummary(
            source_uri=source.source_uri,
            record_count=len(records),
            batch_count=sequence,
            committed_count=committed_count,
            superseded_count=superseded_count,
            dead_letters=tuple(dead_letters),
        )
        _LOGGER.info(
            "batch_upload_completed",
            source_uri=source.source_uri,
            record_count=summary.record_count,
            batch_count=summary.batch_count,
            committed_count=summary.committed_count,
            superseded_count=summary.superseded_count,
            dead_letter_count=len(summary.dead_letters),
        )
        return summary

    def _publish_dead_letters(
        self, source: RawUploadEvent, dead_letters: list[DeadLetter]
    ) -> None:
        if dead_letters and self._dead_letter_sink is not None:
            self._dead_letter_sink.publish(source, dead_letters)

    def _prepare_entries(
        self,
        records: Sequence[FoodRecord],
        source: RawUploadEvent,
        dead_letters: list[DeadLetter],
    ) -> list[QueuedRecord]:
        """Encode records, dead-lettering those with structural defects."""
        entries: list[QueuedRecord] = []
        for position, record in enumerate(records):
            entry = QueuedRecord(record=record, position=position)
            try:
                entry.item = food_record_to_item(record)
            except RecordStructureError as error:
                entry.transition("failed_permanent", str(error))
                dead_letters.append(_dead_letter(entry, source))
                continue
            entries.append(entry)
        return entries

    def _write_batch(self, batch: Batch, source: RawUploadEvent) -> int:
        """Issue one write call and apply its outcome to every entry.

        Returns:
            Number of entries committed by the call.
        """
        for entry in batch.entries:
            entry.transition("in_flight")
        _LOGGER.info(
            "batch_write_attempted",
            source_uri=source.source_uri,
            batch=batch.sequence,
            size=len(batch.entries),
            retried=sum(1 for entry in batch.entries if entry.attempts > 1),
        )
        items = [entry.item for entry in batch.entries if entry.item is not None]
        try:
            result = self._writer.batch_write(self._table_name, items)
        except BatchWriteError as error:
            _LOGGER.warning(
                "batch_write_rejected",
                source_uri=source.source_uri,
                batch=batch.sequence,
                error_code=error.error_code,
                retryable=error.retryable,
                error=str(error),
            )
            next_state = "failed_retryable" if error.retryable else "failed_permanent"
            for entry in batch.entries:
                entry.transition(next_state, str(error))
            return 0
        unprocessed_keys = {item_key(item) for item in result.unprocessed_items}
        committed_count = 0
        for entry in batch.entries:
            if entry.record.food_name in unprocessed_keys:
                entry.transition("failed_retryable", "unprocessed by the store")
                continue
            entry.transition("committed")
            committed_count += 1
        if unprocessed_keys:
            _LOGGER.warning(
                "batch_write_partial",
                source_uri=source.source_uri,
                batch=batch.sequence,
                committed=committed_count,
                unprocessed=len(batch.entries) - committed_count,
            )
        return committed_count

    def _backoff(self, batch: Batch) -> None:
        """Wait before re-sending records that already failed."""
        prior_attempts = batch.max_attempt
        if prior_attempts == 0 or self._retry_base_delay <= 0:
            return
        self._sleep(self._retry_base_delay * 2 ** (prior_attempts - 1))

    def _check_budget(
        self,
        started_at: float,
        sequence: int,
        pending_count: int,
        source: RawUploadEvent,
    ) -> None:
        elapsed = self._clock() - started_at
        if elapsed <= self._execution_budget:
            return
        _LOGGER.error(
            "batch_upload_budget_exceeded",
            source_uri=source.source_uri,
            elapsed_seconds=round(elapsed, 3),
            batches_attempted=sequence,
            pending_count=pending_count,
        )
        raise ExecutionBudgetExceeded(
            f"Upload of {source.source_uri} exceeded its {self._execution_budget:.0f}s "
            f"budget after {sequence} batches with {pending_count} records pending. "
            "Split the file or raise LARDER_EXECUTION_BUDGET."
        )


def _dead_letter(entry: QueuedRecord, source: RawUploadEvent) -> DeadLetter:
    """Build and log a dead letter for a permanently failed record."""
    reason = entry.last_error or "unknown failure"
    _LOGGER.error(
        "record_dead_lettered",
        source_uri=source.source_uri,
        food_name=entry.record.food_name,
        attempts=entry.attempts,
        reason=reason,
    )
    return DeadLetter(record=entry.record, attempts=entry.attempts, reason=reason)

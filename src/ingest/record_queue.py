"""Pending-record queue and per-record write lifecycle.

This module tracks every record of one upload through its write states
and forms size-bounded batches from the front of a FIFO queue.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Iterable, Literal

from core.errors import LarderError
from core.types import FoodRecord

RecordState = Literal[
    "pending",
    "in_flight",
    "committed",
    "failed_retryable",
    "failed_permanent",
]
ALLOWED_STATE_TRANSITIONS: dict[RecordState, tuple[RecordState, ...]] = {
    "pending": ("in_flight", "failed_permanent"),
    "in_flight": ("committed", "failed_retryable", "failed_permanent"),
    "failed_retryable": ("pending", "failed_permanent"),
    "committed": (),
    "failed_permanent": (),
}


def validate_transition(current: RecordState, next_state: RecordState) -> None:
    """Validate one record transition against allowed state machine edges."""
    allowed_states = ALLOWED_STATE_TRANSITIONS[current]
    if next_state not in allowed_states:
        raise LarderError(
            f"Invalid record state transition {current!r} -> {next_state!r}. "
            f"Allowed: {', '.join(allowed_states) or 'none'}."
        )


@dataclass
class QueuedRecord:
    """Mutable write state of one record within an upload."""

    record: FoodRecord
    position: int
    item: dict[str, Any] | None = None
    state: RecordState = "pending"
    attempts: int = 0
    last_error: str | None = None

    def transition(self, next_state: RecordState, error: str | None = None) -> None:
        """Move to a new state, recording the failure reason when given."""
        validate_transition(self.state, next_state)
        self.state = next_state
        if next_state == "in_flight":
            self.attempts += 1
        if error is not None:
            self.last_error = error


@dataclass(frozen=True)
class Batch:
    """Ordered group of records written by one store call."""

    sequence: int
    entries: tuple[QueuedRecord, ...]

    @property
    def max_attempt(self) -> int:
        """Return the highest prior attempt count among the entries."""
        return max((entry.attempts for entry in self.entries), default=0)


class RecordQueue:
    """FIFO of records that are not yet committed or abandoned."""

    def __init__(self, entries: Iterable[QueuedRecord]) -> None:
        self._pending: deque[QueuedRecord] = deque(entries)
        self._latest_position: dict[str, int] = {}
        for entry in self._pending:
            self._latest_position[entry.record.food_name] = entry.position

    def __len__(self) -> int:
        return len(self._pending)

    def next_batch(self, sequence: int, batch_size: int) -> Batch:
        """Remove up to ``batch_size`` records from the front of the queue.

        A record whose key is already in the batch is held back, in order,
        for the next batch. The scan stops once ``batch_size`` records
        are held back, which bounds the work spent on runs of one key.

        Args:
            sequence: Batch sequence number for diagnostics.
            batch_size: Maximum records per batch.

        Returns:
            The formed batch.
        """
        entries: list[QueuedRecord] = []
        held_back: list[QueuedRecord] = []
        batch_keys: set[str] = set()
        while self._pending and len(entries) < batch_size and len(held_back) < batch_size:
            entry = self._pending.popleft()
            if entry.record.food_name in batch_keys:
                held_back.append(entry)
                continue
            batch_keys.add(entry.record.food_name)
            entries.append(entry)
        self._pending.extendleft(reversed(held_back))
        return Batch(sequence=sequence, entries=tuple(entries))

    def requeue(self, entry: QueuedRecord) -> None:
        """Return a retryable record to the back of the queue."""
        entry.transition("pending")
        self._pending.append(entry)

    def is_superseded(self, entry: QueuedRecord) -> bool:
        """Return whether a later record in the upload shares this key."""
        return self._latest_position.get(entry.record.food_name, entry.position) > entry.position

"""Unit tests for batch upload coordination."""

from __future__ import annotations

import math

import pytest

from core.config import LarderConfig
from core.errors import BatchWriteError, ExecutionBudgetExceeded, LarderConfigError
from core.types import FoodRecord, RawUploadEvent
from ingest.batch_upload import BatchUploadCoordinator
from tests.fakes import FakeBatchWriter, RecordingDeadLetterSink

SOURCE = RawUploadEvent(bucket="uploads", key="foods.csv")


def _records(count: int, prefix: str = "food") -> list[FoodRecord]:
    return [
        FoodRecord(
            food_name=f"{prefix}-{index}",
            scientific_name=f"species {index}",
            group="Fruits",
            sub_group="Berries",
        )
        for index in range(count)
    ]


def _coordinator(writer: FakeBatchWriter, **overrides: object) -> BatchUploadCoordinator:
    options: dict[str, object] = {"table_name": "foods", "retry_base_delay": 0.0}
    options.update(overrides)
    return BatchUploadCoordinator(writer, **options)  # type: ignore[arg-type]


@pytest.mark.parametrize("record_count", [0, 1, 24, 25, 26, 50, 51, 120])
def test_run_issues_ceil_of_length_over_batch_limit_calls(record_count: int) -> None:
    """Every batch but the last should hold exactly 25 records, order preserved."""
    writer = FakeBatchWriter()
    records = _records(record_count)

    summary = _coordinator(writer).run(records, SOURCE)

    batch_keys = writer.batch_keys()
    assert len(batch_keys) == math.ceil(record_count / 25) == summary.batch_count
    assert all(len(keys) == 25 for keys in batch_keys[:-1])
    assert [key for keys in batch_keys for key in keys] == [r.food_name for r in records]


def test_run_writes_native_items_to_configured_table() -> None:
    """Each record should be sent as a typed item to the target table."""
    writer = FakeBatchWriter()

    _coordinator(writer).run([FoodRecord(food_name="Apple", group="Fruits")], SOURCE)

    assert writer.calls == [
        ("foods", [{"food_name": {"S": "Apple"}, "group": {"S": "Fruits"}}])
    ]


def test_run_reports_all_records_committed() -> None:
    """A clean run should commit every record without dead letters."""
    writer = FakeBatchWriter()

    summary = _coordinator(writer).run(_records(30), SOURCE)

    assert (summary.committed_count, summary.succeeded) == (30, True)
    assert len(writer.table) == 30


def test_run_retries_unprocessed_items_in_a_later_batch() -> None:
    """Items reported unprocessed should be re-sent and then committed."""
    writer = FakeBatchWriter(outcomes=[{"food-22", "food-23", "food-24"}])
    sleeps: list[float] = []

    summary = _coordinator(writer, retry_base_delay=0.1, sleep=sleeps.append).run(
        _records(25), SOURCE
    )

    assert writer.batch_keys()[1] == ["food-22", "food-23", "food-24"]
    assert summary.committed_count == 25 and summary.succeeded
    assert sleeps == [pytest.approx(0.1)]


def test_run_dead_letters_items_after_retry_ceiling() -> None:
    """Items that stay unprocessed should be abandoned after max_attempts."""
    writer = FakeBatchWriter(always_unprocessed={"food-22", "food-23", "food-24"})
    sink = RecordingDeadLetterSink()

    summary = _coordinator(writer, max_attempts=3, dead_letter_sink=sink).run(
        _records(25), SOURCE
    )

    assert writer.batch_keys()[1:] == [["food-22", "food-23", "food-24"]] * 2
    assert [letter.record.food_name for letter in summary.dead_letters] == [
        "food-22",
        "food-23",
        "food-24",
    ]
    assert all(letter.attempts == 3 for letter in summary.dead_letters)
    assert sink.published[0][0] == SOURCE and len(sink.published[0][1]) == 3


def test_run_backs_off_exponentially_between_retries() -> None:
    """Retry delays should double with each prior attempt."""
    writer = FakeBatchWriter(always_unprocessed={"food-0"})
    sleeps: list[float] = []

    _coordinator(writer, max_attempts=4, retry_base_delay=1.0, sleep=sleeps.append).run(
        _records(1), SOURCE
    )

    assert sleeps == [1.0, 2.0, 4.0]


def test_run_requeues_whole_batch_after_retryable_rejection() -> None:
    """A throttled call should not abort later batches and should be retried."""
    throttled = BatchWriteError("throttled", retryable=True, error_code="ThrottlingException")
    writer = FakeBatchWriter(outcomes=[throttled])

    summary = _coordinator(writer).run(_records(30), SOURCE)

    assert [len(keys) for keys in writer.batch_keys()] == [25, 25, 5]
    assert summary.committed_count == 30 and summary.succeeded


def test_run_dead_letters_batch_after_permanent_rejection() -> None:
    """A non-retryable rejection should dead-letter its batch and continue."""
    rejected = BatchWriteError("bad item", retryable=False, error_code="ValidationException")
    writer = FakeBatchWriter(outcomes=[rejected])

    summary = _coordinator(writer).run(_records(27), SOURCE)

    assert summary.batch_count == 2
    assert summary.committed_count == 2
    assert len(summary.dead_letters) == 25
    assert summary.dead_letters[0].reason == "bad item"


def test_run_dead_letters_blank_keys_without_writing_them() -> None:
    """Records with a blank food_name are structural defects, never retried."""
    writer = FakeBatchWriter()
    records = [
        FoodRecord(food_name="Apple"),
        FoodRecord(food_name="  "),
        FoodRecord(food_name=""),
    ]

    summary = _coordinator(writer).run(records, SOURCE)

    assert writer.batch_keys() == [["Apple"]]
    assert [letter.attempts for letter in summary.dead_letters] == [0, 0]


def test_run_keeps_last_write_for_repeated_keys() -> None:
    """Repeated food names should end with the value from the latest row."""
    writer = FakeBatchWriter()
    records = [
        FoodRecord(food_name="Apple", group="old"),
        FoodRecord(food_name="Pear", group="Fruits"),
        FoodRecord(food_name="Apple", group="new"),
    ]

    summary = _coordinator(writer).run(records, SOURCE)

    assert writer.table["Apple"]["group"] == "new"
    assert writer.batch_keys() == [["Apple", "Pear"], ["Apple"]]
    assert summary.committed_count == 3


def test_run_skips_retry_of_superseded_record() -> None:
    """A failed row replaced by a later row should not be retried."""
    writer = FakeBatchWriter(outcomes=[{"Apple"}])
    records = [
        FoodRecord(food_name="Apple", group="old"),
        FoodRecord(food_name="Apple", group="new"),
    ]

    summary = _coordinator(writer).run(records, SOURCE)

    assert writer.batch_keys() == [["Apple"], ["Apple"]]
    assert writer.table["Apple"]["group"] == "new"
    assert (summary.superseded_count, summary.succeeded) == (1, True)


def test_run_raises_when_execution_budget_is_exceeded() -> None:
    """The run should abort between batches once the budget is spent."""
    ticks = iter([0.0, 0.0, 11.0])
    writer = FakeBatchWriter()

    with pytest.raises(ExecutionBudgetExceeded):
        _coordinator(writer, execution_budget=10.0, clock=lambda: next(ticks)).run(
            _records(50), SOURCE
        )

    assert len(writer.calls) == 1


def test_run_publishes_collected_dead_letters_before_budget_abort() -> None:
    """Dead letters gathered before an abort should still reach the sink."""
    ticks = iter([0.0, 0.0, 11.0])
    sink = RecordingDeadLetterSink()
    records = [FoodRecord(food_name=""), *_records(50)]

    with pytest.raises(ExecutionBudgetExceeded):
        _coordinator(
            FakeBatchWriter(),
            execution_budget=10.0,
            clock=lambda: next(ticks),
            dead_letter_sink=sink,
        ).run(records, SOURCE)

    assert len(sink.published) == 1
    source, letters = sink.published[0]
    assert source == SOURCE
    assert [(letter.record.food_name, letter.attempts) for letter in letters] == [("", 0)]


def test_from_config_requires_table_name() -> None:
    """Coordinator construction should fail without a target table."""
    with pytest.raises(LarderConfigError):
        BatchUploadCoordinator.from_config(FakeBatchWriter(), LarderConfig(table_name=None))


def test_constructor_rejects_batches_above_store_limit() -> None:
    """Batch size cannot exceed the store's per-call item limit."""
    with pytest.raises(ValueError):
        _coordinator(FakeBatchWriter(), batch_size=26)

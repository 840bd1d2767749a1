"""Integration tests for upload and change observation."""

from __future__ import annotations

from handlers.change_handler import handle_change_stream
from handlers.upload_handler import UploadRuntime, handle_object_created
from ingest.batch_upload import BatchUploadCoordinator
from notify.change_observer import ChangeObserver
from tests.fakes import FakeBatchWriter, FakeBlobReader, RecordingLogger


def _notification(key: str) -> dict[str, object]:
    return {"Records": [{"s3": {"bucket": {"name": "uploads"}, "object": {"key": key}}}]}


def _csv(rows: list[str]) -> bytes:
    return ("Food Name,Scientific Name,Group,Sub Group\n" + "\n".join(rows) + "\n").encode()


def _stream_from_calls(writer: FakeBatchWriter) -> dict[str, object]:
    """Build the change-stream delivery the store would emit for committed items."""
    records = []
    for _, items in writer.calls:
        for item in items:
            if item["food_name"]["S"] in writer.table:
                records.append({"eventName": "INSERT", "dynamodb": {"NewImage": item}})
    return {"Records": records}


def test_upload_then_observe_flow() -> None:
    """Uploaded rows should be committed, observed, and overwritten on re-upload."""
    rows = [f"food-{index},species {index},Group {index % 3}," for index in range(60)]
    reader = FakeBlobReader(
        {
            ("uploads", "first.csv"): _csv(rows),
            ("uploads", "second.csv"): _csv(["food-7,Updated species,Group 9,Sub"]),
        }
    )
    writer = FakeBatchWriter(outcomes=[None, {"food-30", "food-31"}])
    runtime = UploadRuntime(
        reader=reader,
        coordinator=BatchUploadCoordinator(writer, table_name="foods"),
    )

    first = handle_object_created(_notification("first.csv"), None, runtime)
    second = handle_object_created(_notification("second.csv"), None, runtime)
    logger = RecordingLogger()
    observed = handle_change_stream(
        _stream_from_calls(writer), None, ChangeObserver(logger)
    )

    assert (first["statusCode"], second["statusCode"], observed["statusCode"]) == (200, 200, 200)
    assert len(writer.table) == 60
    assert writer.table["food-7"]["scientific_name"] == "Updated species"
    assert writer.batch_keys()[2][-2:] == ["food-30", "food-31"]
    assert writer.batch_keys()[3] == ["food-7"]
    assert logger.named("food_item_changed")[0]["sub_group"] == ""

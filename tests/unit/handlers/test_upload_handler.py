"""Unit tests for the object-created handler."""

from __future__ import annotations

import pytest

from core.errors import MalformedEventError, ParseError
from handlers.upload_handler import UploadRuntime, handle_object_created
from ingest.batch_upload import BatchUploadCoordinator
from tests.fakes import FakeBatchWriter, FakeBlobReader


def _notification(*keys: str) -> dict[str, object]:
    return {
        "Records": [
            {"s3": {"bucket": {"name": "uploads"}, "object": {"key": key}}} for key in keys
        ]
    }


def _runtime(objects: dict[tuple[str, str], bytes], writer: FakeBatchWriter) -> UploadRuntime:
    coordinator = BatchUploadCoordinator(writer, table_name="foods", max_attempts=2)
    return UploadRuntime(reader=FakeBlobReader(objects), coordinator=coordinator)


def test_handle_object_created_returns_ok_with_summary() -> None:
    """A clean upload should return 200 with per-upload counts."""
    writer = FakeBatchWriter()
    runtime = _runtime({("uploads", "my foods.csv"): b"food_name\nApple\nPear\n"}, writer)

    response = handle_object_created(_notification("my+foods.csv"), None, runtime)

    assert response["statusCode"] == 200
    assert response["body"]["uploads"][0]["committed_count"] == 2  # type: ignore[index]


def test_handle_object_created_reports_partial_failure() -> None:
    """Dead-lettered records should surface as a 207 response."""
    writer = FakeBatchWriter(always_unprocessed={"Pear"})
    runtime = _runtime({("uploads", "foods.csv"): b"food_name\nApple\nPear\n"}, writer)

    response = handle_object_created(_notification("foods.csv"), None, runtime)

    upload = response["body"]["uploads"][0]  # type: ignore[index]
    assert response["statusCode"] == 207
    assert upload["dead_letters"][0]["record"]["food_name"] == "Pear"


def test_handle_object_created_propagates_parse_errors() -> None:
    """Malformed CSV should fail the invocation for redelivery."""
    writer = FakeBatchWriter()
    runtime = _runtime({("uploads", "bad.csv"): b"food_name,group\nApple\n"}, writer)

    with pytest.raises(ParseError):
        handle_object_created(_notification("bad.csv"), None, runtime)

    assert writer.calls == []


def test_handle_object_created_rejects_malformed_payload() -> None:
    """Payload shape errors should fail before any read."""
    runtime = _runtime({}, FakeBatchWriter())

    with pytest.raises(MalformedEventError):
        handle_object_created({"detail": {}}, None, runtime)

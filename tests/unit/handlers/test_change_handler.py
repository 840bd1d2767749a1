"""Unit tests for the change-stream handler."""

from __future__ import annotations

import json

from handlers.change_handler import handle_change_stream
from notify.change_observer import ChangeObserver
from tests.fakes import RecordingLogger
from tests.fixture_paths import fixture_path


def test_handle_change_stream_reports_counts() -> None:
    """Malformed items should yield a 207 with per-outcome counts."""
    payload = json.loads(fixture_path("change_stream.json").read_text(encoding="utf-8"))

    response = handle_change_stream(payload, None, ChangeObserver(RecordingLogger()))

    assert response == {
        "statusCode": 207,
        "body": {"event_count": 4, "logged_count": 2, "skipped_count": 1, "failed_count": 1},
    }


def test_handle_change_stream_returns_ok_for_clean_delivery() -> None:
    """A delivery with only valid items should return 200."""
    payload = {
        "Records": [
            {"eventName": "INSERT", "dynamodb": {"NewImage": {"food_name": {"S": "kale"}}}}
        ]
    }

    response = handle_change_stream(payload, None, ChangeObserver(RecordingLogger()))

    assert response["statusCode"] == 200

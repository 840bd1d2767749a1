"""Handler response payloads.

This module serializes summaries into the status-and-body contract
returned to trigger mechanisms and printed by the CLI.
"""

from __future__ import annotations

from typing import Sequence

from core.types import ObserverSummary, UploadSummary
from store.dead_letter import dead_letter_to_payload

STATUS_OK = 200
STATUS_PARTIAL = 207


def upload_summary_to_payload(summary: UploadSummary) -> dict[str, object]:
    """Serialize an upload summary into a JSON-safe payload."""
    return {
        "source_uri": summary.source_uri,
        "record_count": summary.record_count,
        "batch_count": summary.batch_count,
        "committed_count": summary.committed_count,
        "superseded_count": summary.superseded_count,
        "dead_letters": [dead_letter_to_payload(item) for item in summary.dead_letters],
    }


def upload_response(summaries: Sequence[UploadSummary]) -> dict[str, object]:
    """Build the handler response for one or more uploads.

    Status is 207 when any record was dead-lettered.
    """
    status = STATUS_OK if all(summary.succeeded for summary in summaries) else STATUS_PARTIAL
    return {
        "statusCode": status,
        "body": {"uploads": [upload_summary_to_payload(summary) for summary in summaries]},
    }


def observer_response(summary: ObserverSummary) -> dict[str, object]:
    """Build the handler response for one change-feed delivery.

    Status is 207 when any item could not be projected.
    """
    return {
        "statusCode": STATUS_PARTIAL if summary.failed_count else STATUS_OK,
        "body": {
            "event_count": summary.event_count,
            "logged_count": summary.logged_count,
            "skipped_count": summary.skipped_count,
            "failed_count": summary.failed_count,
        },
    }

"""Upload ingest orchestration.

This module runs one object-created event through the full pipeline:
blob read, CSV normalization, record building, and batch upload.
Read and parse failures propagate before any store write happens.
"""

from __future__ import annotations

from core.logging_config import get_logger
from core.types import RawUploadEvent, UploadSummary
from ingest.batch_upload import BatchUploadCoordinator
from ingest.blob_reader import BlobReader
from ingest.csv_normalizer import build_food_records, normalize_csv

_LOGGER = get_logger(__name__)


def ingest_upload(
    event: RawUploadEvent,
    reader: BlobReader,
    coordinator: BatchUploadCoordinator,
) -> UploadSummary:
    """Ingest one uploaded CSV object into the food table.

    Args:
        event: Object-created trigger.
        reader: Blob reader for the source object.
        coordinator: Batch coordinator bound to the target table.

    Returns:
        Upload summary with committed and dead-lettered counts.

    Raises:
        BlobReadError: If the object cannot be read.
        ParseError: If the CSV is malformed.
        ExecutionBudgetExceeded: If the upload runs past its budget.
    """
    raw = reader.read(event.bucket, event.key)
    rows = normalize_csv(raw)
    records = build_food_records(rows)
    _LOGGER.info(
        "upload_parsed",
        source_uri=event.source_uri,
        byte_count=len(raw),
        record_count=len(records),
    )
    return coordinator.run(records, event)

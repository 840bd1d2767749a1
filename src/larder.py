"""Public SDK surface for Larder.

This module provides a stable import path for pipeline users.
It re-exports the primary entry points and typed models.
"""

from __future__ import annotations

from core.config import LarderConfig
from core.field_names import canonical_field_name
from core.types import ChangeEvent, FoodRecord, ObserverSummary, RawUploadEvent, UploadSummary
from handlers.change_handler import handle_change_stream
from handlers.upload_handler import handle_object_created
from ingest.batch_upload import BatchUploadCoordinator
from ingest.blob_reader import BlobReader, LocalBlobReader, S3BlobReader
from ingest.csv_normalizer import build_food_records, normalize_csv
from ingest.pipeline import ingest_upload
from notify.change_observer import ChangeObserver
from store.batch_writer import BatchWriter, DynamoDbBatchWriter

__all__ = [
    "BatchUploadCoordinator",
    "BatchWriter",
    "BlobReader",
    "ChangeEvent",
    "ChangeObserver",
    "DynamoDbBatchWriter",
    "FoodRecord",
    "LarderConfig",
    "LocalBlobReader",
    "ObserverSummary",
    "RawUploadEvent",
    "S3BlobReader",
    "UploadSummary",
    "build_food_records",
    "canonical_field_name",
    "handle_change_stream",
    "handle_object_created",
    "ingest_upload",
    "normalize_csv",
]

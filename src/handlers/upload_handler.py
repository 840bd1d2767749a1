"""Object-created trigger entry point.

This module wires S3, DynamoDB, and dead-letter collaborators from the
environment once per process and runs each notified upload in order.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from core.aws_session import create_aws_client
from core.config import LarderConfig
from core.logging_config import get_logger
from handlers.responses import upload_response
from ingest.batch_upload import BatchUploadCoordinator
from ingest.blob_reader import BlobReader, S3BlobReader
from ingest.pipeline import ingest_upload
from ingest.upload_event import parse_upload_events
from store.batch_writer import DynamoDbBatchWriter
from store.dead_letter import DeadLetterSink, S3DeadLetterSink

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class UploadRuntime:
    """Collaborators shared by every upload handled in this process."""

    reader: BlobReader
    coordinator: BatchUploadCoordinator


def build_upload_runtime(config: LarderConfig) -> UploadRuntime:
    """Construct the reader and coordinator for a runtime config.

    Raises:
        LarderConfigError: If no target table is configured.
    """
    s3_client = create_aws_client(config, "s3")
    dead_letter_sink: DeadLetterSink | None = None
    if config.dead_letter_bucket:
        dead_letter_sink = S3DeadLetterSink(
            s3_client, config.dead_letter_bucket, config.dead_letter_prefix
        )
    writer = DynamoDbBatchWriter(create_aws_client(config, "dynamodb"))
    coordinator = BatchUploadCoordinator.from_config(writer, config, dead_letter_sink)
    return UploadRuntime(reader=S3BlobReader(s3_client), coordinator=coordinator)


@lru_cache(maxsize=1)
def _default_runtime() -> UploadRuntime:
    return build_upload_runtime(LarderConfig.from_env())


def handle_object_created(
    event: Any,
    context: Any = None,
    runtime: UploadRuntime | None = None,
) -> dict[str, object]:
    """Ingest every object named by an S3 notification.

    Args:
        event: S3 notification payload.
        context: Unused invocation context.
        runtime: Optional collaborators; built from the environment when omitted.

    Returns:
        Status-and-body response; 207 when records were dead-lettered.

    Raises:
        MalformedEventError: If the notification has the wrong shape.
        BlobReadError: If an object cannot be read.
        ParseError: If an object is not valid CSV.
    """
    upload_events = parse_upload_events(event)
    active_runtime = runtime or _default_runtime()
    summaries = []
    for upload_event in upload_events:
        _LOGGER.info("upload_received", source_uri=upload_event.source_uri)
        summaries.append(
            ingest_upload(upload_event, active_runtime.reader, active_runtime.coordinator)
        )
    return upload_response(summaries)

"""Larder CLI entry points.
This module exposes operator commands for uploads, normalization checks,
and change-stream replay. It maps argparse commands onto pipeline calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import json
from pathlib import Path
from typing import Any, Sequence

from core.aws_session import create_aws_client
from core.config import LarderConfig
from core.constants import EXIT_CODE_DEAD_LETTERS
from core.errors import LarderError
from core.s3_uri import is_s3_uri, parse_s3_uri
from core.types import RawUploadEvent
from handlers.responses import upload_summary_to_payload
from ingest.batch_upload import BatchUploadCoordinator
from ingest.blob_reader import BlobReader, LocalBlobReader, S3BlobReader
from ingest.csv_normalizer import normalize_csv
from ingest.pipeline import ingest_upload
from notify.change_observer import ChangeObserver
from store.batch_writer import BatchWriter, DynamoDbBatchWriter
from store.dead_letter import DeadLetterSink, S3DeadLetterSink


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="larder", description="Larder food ingest CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_upload_command(subparsers)
    _add_normalize_command(subparsers)
    _add_observe_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Larder CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        if args.command == "upload":
            return _run_upload_command(args)
        if args.command == "normalize":
            return _run_normalize_command(args)
        if args.command == "observe":
            return _run_observe_command(args)
    except LarderError as error:
        print(f"error={error}")
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_upload_command(args: argparse.Namespace) -> int:
    """Handle upload command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code, 3 when records were dead-lettered.
    """
    config = LarderConfig.from_env()
    if args.table:
        config = replace(config, table_name=args.table)
    event, reader = _resolve_source(args.source, config)
    coordinator = BatchUploadCoordinator.from_config(
        _build_writer(config), config, _build_dead_letter_sink(config)
    )
    summary = ingest_upload(event, reader, coordinator)
    print(json.dumps(upload_summary_to_payload(summary), sort_keys=True))
    return 0 if summary.succeeded else EXIT_CODE_DEAD_LETTERS


def _run_normalize_command(args: argparse.Namespace) -> int:
    """Handle normalize command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    source_path = Path(args.file).expanduser()
    raw = LocalBlobReader().read(str(source_path.parent), source_path.name)
    for row in normalize_csv(raw):
        print(json.dumps(row, sort_keys=True))
    return 0


def _run_observe_command(args: argparse.Namespace) -> int:
    """Handle observe command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code, 1 when any change event was malformed.
    """
    try:
        payload = json.loads(Path(args.file).expanduser().read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        print(f"error=Failed to load change payload {args.file}: {error}")
        return 1
    summary = ChangeObserver().observe(payload)
    print(
        f"event_count={summary.event_count}\t"
        f"logged_count={summary.logged_count}\t"
        f"skipped_count={summary.skipped_count}\t"
        f"failed_count={summary.failed_count}"
    )
    return 1 if summary.failed_count else 0


def _resolve_source(source: str, config: LarderConfig) -> tuple[RawUploadEvent, BlobReader]:
    """Build the upload event and reader for an S3 URI or local path."""
    if is_s3_uri(source):
        return parse_s3_uri(source), S3BlobReader(create_aws_client(config, "s3"))
    source_path = Path(source).expanduser().resolve()
    event = RawUploadEvent(bucket=str(source_path.parent), key=source_path.name)
    return event, LocalBlobReader()


def _build_writer(config: LarderConfig) -> BatchWriter:
    """Build the DynamoDB batch writer for a runtime config."""
    return DynamoDbBatchWriter(create_aws_client(config, "dynamodb"))


def _build_dead_letter_sink(config: LarderConfig) -> DeadLetterSink | None:
    """Build the optional S3 dead-letter sink."""
    if not config.dead_letter_bucket:
        return None
    return S3DeadLetterSink(
        create_aws_client(config, "s3"), config.dead_letter_bucket, config.dead_letter_prefix
    )


def _add_upload_command(subparsers: Any) -> None:
    """Register upload subcommand."""
    parser = subparsers.add_parser("upload", help="Upload a CSV file into the food table")
    parser.add_argument("source", help="Local CSV path or s3://bucket/key")
    parser.add_argument("--table", help="Override LARDER_TABLE_NAME for this command")


def _add_normalize_command(subparsers: Any) -> None:
    """Register normalize subcommand."""
    parser = subparsers.add_parser("normalize", help="Print normalized CSV rows as JSON lines")
    parser.add_argument("file", help="Local CSV path")


def _add_observe_command(subparsers: Any) -> None:
    """Register observe subcommand."""
    parser = subparsers.add_parser("observe", help="Replay a change-stream payload file")
    parser.add_argument("file", help="JSON file holding a change-stream delivery")

"""CSV normalization for uploaded food files.

This module parses raw comma-delimited bytes into ordered row mappings
keyed by canonical field names, then builds typed food records.
Parsing is all-or-nothing: a malformed row fails the whole input.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, Mapping

from core.constants import CSV_ENCODING, OPTIONAL_FIELDS, PRIMARY_KEY_FIELD
from core.errors import ParseError
from core.field_names import canonical_field_name
from core.types import FoodRecord


def normalize_csv(raw: bytes) -> list[dict[str, str]]:
    """Parse CSV bytes into row mappings with canonical keys.

    Args:
        raw: Raw object body. The first non-blank line is the header.

    Returns:
        One mapping per data row, in input order. Values are unchanged.

    Raises:
        ParseError: If the input cannot be decoded or any row is malformed.
    """
    text = _decode(raw)
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    header: list[str] | None = None
    rows: list[dict[str, str]] = []
    try:
        for row in reader:
            if not row:
                continue
            if header is None:
                header = _normalize_header(row, reader.line_num)
                continue
            if len(row) != len(header):
                raise ParseError(
                    f"Malformed CSV row at line {reader.line_num}: expected "
                    f"{len(header)} columns, found {len(row)}. Quote values that "
                    "contain commas and keep every row aligned with the header."
                )
            rows.append(dict(zip(header, row)))
    except csv.Error as error:
        raise ParseError(
            f"Malformed CSV near line {reader.line_num}: {error}. "
            "Check for unbalanced quotes and retry the upload."
        ) from error
    if header is None:
        raise ParseError("CSV input has no header row. Add a header line and retry the upload.")
    return rows


def build_food_records(rows: Iterable[Mapping[str, str]]) -> list[FoodRecord]:
    """Build food records from normalized row mappings.

    Missing columns become None; the primary key defaults to an empty
    string so structural defects surface at write time.

    Args:
        rows: Mappings produced by ``normalize_csv``.

    Returns:
        Records in the same order.
    """
    key_field = canonical_field_name(PRIMARY_KEY_FIELD)
    optional_fields = [canonical_field_name(name) for name in OPTIONAL_FIELDS]
    records: list[FoodRecord] = []
    for row in rows:
        optional_values = {name: row.get(name) for name in optional_fields}
        records.append(FoodRecord(food_name=row.get(key_field, ""), **optional_values))
    return records


def _decode(raw: bytes) -> str:
    try:
        return raw.decode(CSV_ENCODING)
    except UnicodeDecodeError as error:
        raise ParseError(
            f"CSV input is not valid UTF-8 (byte offset {error.start}). "
            "Re-export the file as UTF-8 and retry the upload."
        ) from error


def _normalize_header(row: list[str], line_number: int) -> list[str]:
    """Normalize and validate the header row.

    Raises:
        ParseError: If a header is blank or two headers collide.
    """
    header = [canonical_field_name(value) for value in row]
    seen: set[str] = set()
    for raw_value, name in zip(row, header):
        if not name:
            raise ParseError(
                f"Blank column header at line {line_number}. Name every column and retry."
            )
        if name in seen:
            raise ParseError(
                f"Duplicate column header '{raw_value}' at line {line_number}: "
                f"it normalizes to '{name}', which is already used."
            )
        seen.add(name)
    return header

"""
Row extraction for blob-style product exports.

Reads the first row as headers, resolves the identifier column and the blob
column, and yields one ``RawRow`` per non-empty data row. Parsing the blob
itself is left to ``catalog_common``.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

import openpyxl
from openpyxl.cell.rich_text import CellRichText
from rapidfuzz import fuzz, process

from catalog_common import ParseOptions, parse_record

from .config import CleanerConfig

LOGGER = logging.getLogger(__name__)

EXCEL_SUFFIXES = (".xlsx", ".xlsm")


class ExtractionError(RuntimeError):
    """Fatal input problem: missing file, sheet or identifier column."""


@dataclass(frozen=True)
class RawRow:
    position: int
    identifier: str
    blob: str


@dataclass(frozen=True)
class Row:
    position: int
    identifier: str
    record: Dict[str, str] = field(default_factory=dict)


def flatten_cell(value: Any) -> str:
    """Plain text for any cell value; rich text runs are concatenated."""

    if value is None:
        return ""
    if isinstance(value, CellRichText):
        return "".join(getattr(part, "text", str(part)) for part in value)
    if isinstance(value, str):
        return value
    return str(value)


def _get_worksheet(wb, sheet_name):
    try:
        if sheet_name is None:
            return wb.worksheets[0]
        if isinstance(sheet_name, int):
            return wb.worksheets[sheet_name]
        return wb[sheet_name]
    except (IndexError, KeyError) as exc:
        raise ExtractionError(f"Worksheet not found: {sheet_name!r}") from exc


def read_sheet_rows(path: Path, sheet: str | int | None = None) -> Iterator[tuple]:
    """
    Stream raw row tuples (header first) from an Excel sheet or a CSV file.

    Excel is read with openpyxl in read-only mode so large exports are not
    materialized as a full workbook.
    """

    path = Path(path)
    if not path.exists():
        raise ExtractionError(f"Input file not found: {path}")

    if path.suffix.lower() == ".csv":
        with path.open("r", encoding="utf-8-sig", newline="") as handle:
            for row in csv.reader(handle):
                yield tuple(row)
        return

    if path.suffix.lower() not in EXCEL_SUFFIXES:
        raise ExtractionError(f"Unsupported input type: {path.suffix or path.name}")

    wb = openpyxl.load_workbook(path, read_only=True, data_only=True, rich_text=True)
    try:
        ws = _get_worksheet(wb, sheet)
        for row in ws.iter_rows(values_only=True):
            yield row
    finally:
        wb.close()


def build_header_index(header: Sequence[Any]) -> Dict[str, int]:
    """Lower-cased, trimmed header text -> 0-based column index (first wins)."""

    index: Dict[str, int] = {}
    for idx, value in enumerate(header):
        name = flatten_cell(value).strip().lower()
        if name and name not in index:
            index[name] = idx
    return index


def _suggest_header(name: str, headers: Iterable[str]) -> str:
    choices = list(headers)
    if not choices:
        return ""
    match = process.extractOne(name, choices, scorer=fuzz.WRatio)
    if match and match[1] > 60:
        return f" Did you mean {match[0]!r}?"
    return ""


def _cell(row: Sequence[Any], idx: Optional[int]) -> str:
    if idx is None or idx >= len(row):
        return ""
    return flatten_cell(row[idx])


def _find_blob(row: Sequence[Any], blob_idx: Optional[int], fallback_idx: Optional[int], id_idx: Optional[int]) -> str:
    for idx in (blob_idx, fallback_idx):
        text = _cell(row, idx)
        if text:
            return text
    for idx, value in enumerate(row):
        if idx == id_idx:
            continue
        text = flatten_cell(value)
        if "=" in text:
            return text
    return ""


def extract_rows(rows: Iterable[Sequence[Any]], config: CleanerConfig) -> Iterator[RawRow]:
    """
    Resolve columns from the header row and yield a ``RawRow`` per data row.

    Rows with no content are skipped. In attrs format the identifier column
    is mandatory and rows without an identifier are skipped; otherwise a
    missing identifier renders as blank.
    """

    iterator = iter(rows)
    header = next(iterator, None)
    if header is None:
        return
    headers = build_header_index(header)
    require_id = config.format == "attrs"

    id_idx: Optional[int] = None
    if config.id_column:
        id_idx = headers.get(config.id_column.strip().lower())
    if id_idx is None and (require_id or config.id_column):
        hint = _suggest_header(config.id_column, headers) if config.id_column else ""
        message = f"Identifier column {config.id_column!r} not found.{hint}"
        if require_id:
            raise ExtractionError(message)
        LOGGER.warning("%s Identifiers will be blank.", message)

    blob_idx: Optional[int] = None
    if config.blob_column:
        blob_idx = headers.get(config.blob_column.strip().lower())
        if blob_idx is None:
            hint = _suggest_header(config.blob_column, headers)
            raise ExtractionError(f"Blob column {config.blob_column!r} not found.{hint}")
    fallback_idx = config.blob_index - 1 if config.blob_index else None

    for position, row in enumerate(iterator, start=2):
        if not any(flatten_cell(value).strip() for value in row):
            continue
        identifier = _cell(row, id_idx).strip()
        if require_id and not identifier:
            LOGGER.debug("Row %d has no identifier; skipping", position)
            continue
        blob = _find_blob(row, blob_idx, fallback_idx, id_idx)
        if not blob:
            LOGGER.debug("Row %d has no blob cell", position)
        yield RawRow(position=position, identifier=identifier, blob=blob)


def parse_rows(raw_rows: Iterable[RawRow], options: ParseOptions) -> List[Row]:
    """Parse every extracted blob independently into a ``Row``."""

    return [
        Row(position=raw.position, identifier=raw.identifier, record=parse_record(raw.blob, options))
        for raw in raw_rows
    ]

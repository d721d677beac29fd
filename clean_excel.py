#!/usr/bin/env python3
"""Flatten key=value/HTML blob cells from a product export into clean tables.

Each data row carries one "blob" cell such as::

    color=Blue,ram=8GB,specifications="<p>CPU: Octa-core<br>GPU: Adreno 610</p>"

The blob is split into fields, HTML is stripped (keeping line breaks), and
``label: value`` lines inside values become attributes of their own. Output
shapes:

- ``wide``  one row per input row, one column per attribute
- ``long``  SKU / Row / Attribute / Value, blank line between rows
- ``attrs`` SKU / Attribute / Value (+ ParentSKU with ``--include-parent``)

Settings can also live in a YAML file (``--config`` or ``CATALOG_CLEAN_CONFIG``);
explicit flags win over the file.

Example::

    python clean_excel.py export.xlsx cleaned.xlsx --format=attrs --include-parent
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from catalog_io import (
    AttributeIndex,
    CleanerConfig,
    ConfigError,
    ExtractionError,
    extract_rows,
    load_config,
    parse_rows,
    read_sheet_rows,
    shape_rows,
    write_table,
)


def configure_logging(verbosity: int) -> None:
    level = logging.DEBUG if verbosity > 0 else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Normalize key=value/HTML blob cells from an Excel or CSV export into wide, long or per-SKU tables.",
    )
    parser.add_argument("input", nargs="?", default=None, help="Input .xlsx/.xlsm/.csv (default: input.xlsx)")
    parser.add_argument("output", nargs="?", default=None, help="Output .xlsx/.csv (default: output.xlsx)")
    parser.add_argument("--config", type=Path, default=None, help="YAML file with cleaner settings.")
    parser.add_argument(
        "--format",
        default=None,
        help="Output shape: wide, long (alias stacked) or attrs (alias sku-attrs).",
    )
    parser.add_argument("--sheet", default=None, help="Sheet name or 0-based index (default: first sheet).")
    parser.add_argument(
        "--sku-col",
        "--id-col",
        dest="id_column",
        default=None,
        help="Header of the identifier column, case-insensitive (default: sku).",
    )
    parser.add_argument(
        "--blob-col",
        dest="blob_column",
        default=None,
        help="Header of the column holding the key=value blob. Without it the first cell containing '=' is used.",
    )
    parser.add_argument(
        "--col",
        dest="blob_index",
        type=int,
        default=None,
        help="1-based column index of the blob column.",
    )
    parser.add_argument(
        "--include-parent",
        dest="include_parent",
        action="store_true",
        default=None,
        help="Add a parent identifier column in attrs output.",
    )
    parser.add_argument(
        "--suffixes",
        default=None,
        help="Comma-separated variant suffixes stripped to derive the parent identifier.",
    )
    parser.add_argument(
        "--sub-lines",
        dest="sub_line_mode",
        default=None,
        help="'always' lifts 'label: value' lines from every field; 'specOnly' only from *spec* fields.",
    )
    parser.add_argument(
        "--exclude-key",
        dest="excluded_keys",
        action="append",
        default=None,
        help="Extra blob key to drop (repeatable). The identifier column is always dropped.",
    )
    parser.add_argument("--separator", dest="merge_separator", default=None, help="Join string for repeated keys.")
    parser.add_argument("--note-key", dest="note_key", default=None, help="Bucket for colon-less spec lines.")
    parser.add_argument("--id-label", dest="id_label", default=None, help="Identifier header in the output.")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable).",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> CleanerConfig:
    keys = (
        "input",
        "output",
        "format",
        "sheet",
        "id_column",
        "blob_column",
        "blob_index",
        "include_parent",
        "suffixes",
        "sub_line_mode",
        "excluded_keys",
        "merge_separator",
        "note_key",
        "id_label",
    )
    overrides: Dict[str, Any] = {k: getattr(args, k) for k in keys if getattr(args, k) is not None}
    return load_config(args.config, overrides)


def run(config: CleanerConfig) -> int:
    """Execute one cleaning pass. Returns the number of records processed."""

    logging.info(f"Reading {config.input}")
    raw_rows = extract_rows(read_sheet_rows(config.input, config.sheet), config)
    rows = parse_rows(raw_rows, config.parse_options())

    if not rows:
        logging.info("No records found.")
        return 0

    index = AttributeIndex.from_rows(rows)
    frame, sheet_name = shape_rows(
        rows,
        config.format,
        id_label=config.id_label,
        include_parent=config.include_parent,
        suffixes=config.suffixes,
        index=index,
    )
    write_table(frame, config.output, sheet_name)
    logging.info(f"Processed {len(rows)} record(s). Format={config.format}")
    return len(rows)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = build_config(args)
    except ConfigError as e:
        logging.error(f"Invalid configuration: {e}")
        return 1

    try:
        run(config)
    except ExtractionError as e:
        logging.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import polars as pl
import xlsxwriter

from catalog_common import derive_parent

from .extract import Row

LOGGER = logging.getLogger(__name__)

ROW_NUMBER_COL = "__rowNumber"
CLEANED_SHEET = "Cleaned"
ATTRS_SHEET = "SKU_Attributes"


class AttributeIndex:
    """
    Append-only, first-seen ordered set of attribute names across rows.

    Passed explicitly to the shapers so parsing stays free of run-wide state.
    """

    def __init__(self, names: Iterable[str] = ()):
        self._names: Dict[str, None] = {}
        self.extend(names)

    def add(self, record: Mapping[str, str]) -> "AttributeIndex":
        return self.extend(record.keys())

    def extend(self, names: Iterable[str]) -> "AttributeIndex":
        for name in names:
            self._names.setdefault(name, None)
        return self

    @property
    def names(self) -> List[str]:
        return list(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self):
        return iter(self._names)

    @classmethod
    def from_rows(cls, rows: Iterable[Row]) -> "AttributeIndex":
        index = cls()
        for row in rows:
            index.add(row.record)
        return index


def _unique_columns(reserved: Sequence[str], names: Sequence[str]) -> List[str]:
    seen = set(reserved)
    out: List[str] = []
    for name in names:
        candidate = name
        n = 2
        while candidate in seen:
            candidate = f"{name}_{n}"
            n += 1
        seen.add(candidate)
        out.append(candidate)
    return out


def shape_wide(rows: Sequence[Row], index: AttributeIndex, id_label: str = "SKU") -> pl.DataFrame:
    """One row per record, one column per attribute name (blank when missing)."""

    names = index.names
    columns = _unique_columns([id_label, ROW_NUMBER_COL], names)
    schema = {id_label: pl.Utf8, ROW_NUMBER_COL: pl.Int64, **{c: pl.Utf8 for c in columns}}
    data = [
        [row.identifier, row.position, *[row.record.get(name, "") for name in names]]
        for row in rows
    ]
    return pl.DataFrame(data, schema=schema, orient="row")


def shape_long(rows: Sequence[Row], index: AttributeIndex, id_label: str = "SKU") -> pl.DataFrame:
    """
    One output row per present attribute, iterated in global first-seen
    order, followed by a blank separator row per record.
    """

    schema = {id_label: pl.Utf8, "Row": pl.Int64, "Attribute": pl.Utf8, "Value": pl.Utf8}
    data: List[list] = []
    for row in rows:
        for name in index:
            value = row.record.get(name)
            if value:
                data.append([row.identifier, row.position, name, value])
        data.append([None, None, None, None])
    return pl.DataFrame(data, schema=schema, orient="row")


def shape_attrs(
    rows: Sequence[Row],
    id_label: str = "SKU",
    include_parent: bool = False,
    suffixes: Sequence[str] = (),
) -> pl.DataFrame:
    """
    Identifier/attribute/value triples in record order, optionally with the
    derived parent identifier. Records without values still get one row.
    """

    schema = {id_label: pl.Utf8, "Attribute": pl.Utf8, "Value": pl.Utf8}
    if include_parent:
        schema[f"Parent{id_label}"] = pl.Utf8

    data: List[list] = []
    for row in rows:
        if not row.identifier:
            continue
        parent = [derive_parent(row.identifier, suffixes)] if include_parent else []
        entries = [(k, v) for k, v in row.record.items() if v and str(v).strip()]
        if not entries:
            data.append([row.identifier, "", "", *parent])
            continue
        for attr, value in entries:
            data.append([row.identifier, attr, value, *parent])
    return pl.DataFrame(data, schema=schema, orient="row")


def shape_rows(
    rows: Sequence[Row],
    fmt: str,
    *,
    id_label: str = "SKU",
    include_parent: bool = False,
    suffixes: Sequence[str] = (),
    index: Optional[AttributeIndex] = None,
) -> tuple[pl.DataFrame, str]:
    """Dispatch to the requested shape. Returns (frame, sheet_name)."""

    if fmt == "attrs":
        return shape_attrs(rows, id_label, include_parent, suffixes), ATTRS_SHEET
    index = index if index is not None else AttributeIndex.from_rows(rows)
    if fmt == "long":
        return shape_long(rows, index, id_label), CLEANED_SHEET
    if fmt == "wide":
        return shape_wide(rows, index, id_label), CLEANED_SHEET
    raise ValueError(f"Unknown output format: {fmt!r}")


def write_table(df: pl.DataFrame, output_path: Path, sheet_name: str = CLEANED_SHEET) -> Path:
    """
    Write a shaped frame to ``.xlsx`` (xlsxwriter) or ``.csv``.

    Excel strings are written with ``write_string`` so values that start
    with ``=`` stay literal text instead of becoming formulas.
    """

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if output_path.suffix.lower() == ".csv":
        df.write_csv(output_path)
        LOGGER.info("Wrote CSV to %s", output_path)
        return output_path

    workbook = xlsxwriter.Workbook(str(output_path))
    try:
        worksheet = workbook.add_worksheet(sheet_name)
        fmt_header = workbook.add_format({"bold": True, "bg_color": "#D3D3D3", "border": 1})
        for col, name in enumerate(df.columns):
            worksheet.write_string(0, col, name, fmt_header)
        for r, values in enumerate(df.iter_rows(), start=1):
            for col, value in enumerate(values):
                if value is None or value == "":
                    continue
                if isinstance(value, (int, float)):
                    worksheet.write_number(r, col, value)
                else:
                    worksheet.write_string(r, col, str(value))
        worksheet.freeze_panes(1, 0)
    finally:
        workbook.close()
    LOGGER.info("Wrote Excel to %s", output_path)
    return output_path

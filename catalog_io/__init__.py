"""
Spreadsheet-facing collaborators: configuration, row extraction and output
shaping around the ``catalog_common`` parser.
"""

from .config import (  # noqa: F401
    CONFIG_ENV_KEY,
    CleanerConfig,
    ConfigError,
    load_config,
)

from .extract import (  # noqa: F401
    ExtractionError,
    RawRow,
    Row,
    build_header_index,
    extract_rows,
    flatten_cell,
    parse_rows,
    read_sheet_rows,
)

from .shape import (  # noqa: F401
    ATTRS_SHEET,
    CLEANED_SHEET,
    ROW_NUMBER_COL,
    AttributeIndex,
    shape_attrs,
    shape_long,
    shape_rows,
    shape_wide,
    write_table,
)

__all__ = [
    "CONFIG_ENV_KEY",
    "CleanerConfig",
    "ConfigError",
    "load_config",
    "ExtractionError",
    "RawRow",
    "Row",
    "build_header_index",
    "extract_rows",
    "flatten_cell",
    "parse_rows",
    "read_sheet_rows",
    "ATTRS_SHEET",
    "CLEANED_SHEET",
    "ROW_NUMBER_COL",
    "AttributeIndex",
    "shape_attrs",
    "shape_long",
    "shape_rows",
    "shape_wide",
    "write_table",
]

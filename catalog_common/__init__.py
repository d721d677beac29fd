"""
Core blob parsing helpers shared by the cleaning CLI and its tests.

Nothing in here touches the filesystem; rows come in as strings and leave as
ordered dicts.
"""

from .text import (  # noqa: F401
    MOJIBAKE_MARKER,
    normalize_html,
)

from .record import (  # noqa: F401
    DEFAULT_MERGE_SEPARATOR,
    DEFAULT_NOTE_KEY,
    ParseOptions,
    SubLineMode,
    merge_value,
    parse_record,
    split_fields,
)

from .parent import (  # noqa: F401
    DEFAULT_SUFFIXES,
    derive_parent,
    parse_suffixes,
)

__all__ = [
    "MOJIBAKE_MARKER",
    "normalize_html",
    "DEFAULT_MERGE_SEPARATOR",
    "DEFAULT_NOTE_KEY",
    "ParseOptions",
    "SubLineMode",
    "merge_value",
    "parse_record",
    "split_fields",
    "DEFAULT_SUFFIXES",
    "derive_parent",
    "parse_suffixes",
]

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, MutableMapping

from .text import normalize_html

LOGGER = logging.getLogger(__name__)

DEFAULT_MERGE_SEPARATOR = " | "
DEFAULT_NOTE_KEY = "Note"

# A comma only starts a new field when the text after it looks like "key=".
# Values that happen to contain ", word=" are still split there.
FIELD_SPLIT_RE = re.compile(r",(?=\s*[A-Za-z0-9_\-]+\s*=)")
LINE_SPLIT_RE = re.compile(r"\n+")
SPEC_KEY_RE = re.compile(r"spec", re.IGNORECASE)


class SubLineMode(str, Enum):
    """Which field values get ``label: value`` lines lifted into the record."""

    ALWAYS = "always"
    SPEC_ONLY = "specOnly"

    @classmethod
    def parse(cls, value: "str | SubLineMode") -> "SubLineMode":
        if isinstance(value, SubLineMode):
            return value
        token = str(value).strip().replace("_", "").replace("-", "").lower()
        for mode in cls:
            if mode.value.lower() == token:
                return mode
        raise ValueError(f"Unknown sub-line mode: {value!r} (expected 'always' or 'specOnly')")


@dataclass(frozen=True)
class ParseOptions:
    excluded_keys: FrozenSet[str] = frozenset()
    sub_line_mode: SubLineMode = SubLineMode.ALWAYS
    merge_separator: str = DEFAULT_MERGE_SEPARATOR
    note_key: str = DEFAULT_NOTE_KEY

    @classmethod
    def build(
        cls,
        excluded_keys: Iterable[str] = (),
        sub_line_mode: "str | SubLineMode" = SubLineMode.ALWAYS,
        merge_separator: str = DEFAULT_MERGE_SEPARATOR,
        note_key: str = DEFAULT_NOTE_KEY,
    ) -> "ParseOptions":
        return cls(
            excluded_keys=frozenset(str(k).strip().lower() for k in excluded_keys if str(k).strip()),
            sub_line_mode=SubLineMode.parse(sub_line_mode),
            merge_separator=merge_separator,
            note_key=note_key,
        )


def split_fields(raw) -> List[str]:
    """Split a blob into trimmed ``key=value`` chunks, dropping empty ones."""

    if not raw:
        return []
    return [part.strip() for part in FIELD_SPLIT_RE.split(str(raw)) if part.strip()]


def merge_value(out: MutableMapping[str, str], key: str, value: str, separator: str = DEFAULT_MERGE_SEPARATOR) -> None:
    """
    Record ``key -> value``, appending to an existing value on repeats.

    An existing empty value is replaced rather than joined, so a blank first
    occurrence never leaves a dangling separator.
    """

    existing = out.get(key)
    out[key] = f"{existing}{separator}{value}" if existing else value


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _wants_sub_lines(key: str, mode: SubLineMode) -> bool:
    if mode is SubLineMode.ALWAYS:
        return True
    return bool(SPEC_KEY_RE.search(key))


def _extract_sub_lines(clean: str, out: Dict[str, str], options: ParseOptions) -> None:
    lines = [line.strip() for line in LINE_SPLIT_RE.split(clean)]
    for line in lines:
        if not line:
            continue
        if ":" in line:
            sub_key, sub_value = line.split(":", 1)
            sub_key = sub_key.strip()
            if sub_key:
                merge_value(out, sub_key, sub_value.strip(), options.merge_separator)
        elif options.sub_line_mode is SubLineMode.SPEC_ONLY:
            merge_value(out, options.note_key, line, options.merge_separator)


def parse_record(raw, options: ParseOptions | None = None) -> Dict[str, str]:
    """
    Parse one blob cell into an ordered attribute mapping.

    Top-level ``key=value`` fields are normalized and recorded; sub-lines of
    the form ``label: value`` inside eligible values become extra attributes.
    Repeated names are joined with the merge separator. Keys listed in
    ``options.excluded_keys`` (case-insensitive) are removed at the end.
    """

    options = options or ParseOptions()
    out: Dict[str, str] = {}

    for field in split_fields(raw):
        key, sep, value = field.partition("=")
        if not sep:
            LOGGER.debug("Dropping malformed field without '=': %r", field)
            continue
        key = key.strip()
        clean = normalize_html(_strip_quotes(value.strip()))

        if key:
            merge_value(out, key, clean, options.merge_separator)

        if _wants_sub_lines(key, options.sub_line_mode):
            _extract_sub_lines(clean, out, options)

    if options.excluded_keys:
        for key in [k for k in out if k.lower() in options.excluded_keys]:
            del out[key]
    return out

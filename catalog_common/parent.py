from __future__ import annotations

from typing import Iterable, List, Sequence

DEFAULT_SUFFIXES: Sequence[str] = (
    "BLACK",
    "BLUE",
    "GREEN",
    "RED",
    "WHITE",
    "SILVER",
    "GOLD",
    "GRAY",
    "GREY",
)


def parse_suffixes(value: str | Iterable[str] | None) -> List[str]:
    """Accept a comma-separated string or an iterable; trim and drop blanks, keep order."""

    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [str(item).strip() for item in items if str(item).strip()]


def derive_parent(identifier, suffixes: Sequence[str]) -> str:
    """
    Strip the first matching variant suffix from an identifier.

    Matching is case-insensitive and follows list order (first match wins,
    not longest). Returns an empty string when nothing matches; the
    identifier is never treated as its own parent.
    """

    if not identifier:
        return ""
    ident = str(identifier)
    for suffix in suffixes:
        token = str(suffix).strip()
        if not token or len(token) > len(ident):
            continue
        if ident[-len(token):].upper() == token.upper():
            return ident[: len(ident) - len(token)]
    return ""

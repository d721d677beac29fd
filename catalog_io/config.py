from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from catalog_common import (
    DEFAULT_MERGE_SEPARATOR,
    DEFAULT_NOTE_KEY,
    DEFAULT_SUFFIXES,
    ParseOptions,
    SubLineMode,
    parse_suffixes,
)

CONFIG_ENV_KEY = "CATALOG_CLEAN_CONFIG"

FORMAT_ALIASES: Dict[str, str] = {
    "wide": "wide",
    "long": "long",
    "stacked": "long",
    "attrs": "attrs",
    "sku-attrs": "attrs",
    "sku_attrs": "attrs",
}


class ConfigError(ValueError):
    """Raised when the YAML configuration or CLI overrides are invalid."""


@dataclass
class CleanerConfig:
    input: Path = Path("input.xlsx")
    output: Path = Path("output.xlsx")
    sheet: str | int | None = None
    format: str = "wide"
    id_column: str = "sku"
    blob_column: str = ""
    blob_index: Optional[int] = None
    include_parent: bool = False
    suffixes: List[str] = field(default_factory=lambda: list(DEFAULT_SUFFIXES))
    sub_line_mode: SubLineMode = SubLineMode.ALWAYS
    excluded_keys: List[str] = field(default_factory=list)
    merge_separator: str = DEFAULT_MERGE_SEPARATOR
    note_key: str = DEFAULT_NOTE_KEY
    id_label: str = "SKU"

    def parse_options(self) -> ParseOptions:
        """Parser settings; the identifier column is always stripped from blobs."""

        excluded = [*self.excluded_keys]
        if self.id_column:
            excluded.append(self.id_column)
        return ParseOptions.build(
            excluded_keys=excluded,
            sub_line_mode=self.sub_line_mode,
            merge_separator=self.merge_separator,
            note_key=self.note_key,
        )


def _parse_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _parse_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item).strip() for item in value if str(item).strip()]


def _parse_sheet(value: Any) -> str | int | None:
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return int(text) if text.isdigit() else text


def _resolve_path(base: Path, value: Any) -> Path:
    return (base / str(value)).expanduser()


def coerce_settings(raw: Mapping[str, Any], base: Path | None = None) -> Dict[str, Any]:
    """
    Convert loosely-typed settings (YAML values or CLI strings) into
    ``CleanerConfig`` field values. Unknown keys raise ``ConfigError``.
    """

    known = {f.name for f in fields(CleanerConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    base = base or Path.cwd()
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        if value is None:
            continue
        if key in ("input", "output"):
            out[key] = _resolve_path(base, value)
        elif key == "sheet":
            out[key] = _parse_sheet(value)
        elif key == "format":
            fmt = str(value).strip().lower()
            if fmt not in FORMAT_ALIASES:
                raise ConfigError(f"Unknown output format: {value!r} (expected wide, long or attrs)")
            out[key] = FORMAT_ALIASES[fmt]
        elif key == "blob_index":
            try:
                index = int(value)
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"blob_index must be an integer, got {value!r}") from exc
            if index < 1:
                raise ConfigError("blob_index is 1-based and must be >= 1")
            out[key] = index
        elif key == "include_parent":
            out[key] = _parse_bool(value)
        elif key == "suffixes":
            out[key] = parse_suffixes(value)
        elif key == "excluded_keys":
            out[key] = _parse_list(value)
        elif key == "sub_line_mode":
            try:
                out[key] = SubLineMode.parse(value)
            except ValueError as exc:
                raise ConfigError(str(exc)) from exc
        else:
            out[key] = str(value)
    return out


def load_config(
    path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> CleanerConfig:
    """
    Build the run configuration: defaults, then YAML (``path`` or the
    ``CATALOG_CLEAN_CONFIG`` env var), then explicit overrides.
    """

    config = CleanerConfig()

    if path is None and os.environ.get(CONFIG_ENV_KEY):
        path = Path(os.environ[CONFIG_ENV_KEY])

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        with path.open("r", encoding="utf-8") as handle:
            try:
                raw = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"{path} must contain a mapping at the top level")
        config = replace(config, **coerce_settings(raw, base=path.parent))

    if overrides:
        config = replace(config, **coerce_settings(overrides))

    return config

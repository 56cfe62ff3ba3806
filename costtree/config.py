"""Configuration loading utilities for the cost tree converter."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

DEFAULT_PROJECT_NAME = "项目一"


@dataclass
class ColumnLayout:
    """Zero-based column offsets of the source cost sheet."""

    sequence: int = 2
    name: int = 3
    category: int = 4
    unit: int = 5
    quantity: int = 6
    contract_price: int = 7
    professional_price: int = 8
    labor_price: int = 9

    def as_dict(self) -> Dict[str, int]:
        return {info.name: getattr(self, info.name) for info in fields(self)}


@dataclass
class InputConfig:
    """Checks applied to a workbook before any conversion work starts."""

    extensions: List[str] = field(default_factory=lambda: [".xls", ".xlsx"])
    max_file_size: int = 20 * 1024 * 1024
    sheet_hint: str = "表1"
    min_rows: int = 10


@dataclass
class ConversionConfig:
    """Tweaks influencing tree building and the emitted rows."""

    default_project_name: str = DEFAULT_PROJECT_NAME
    final_group_count: int = 2
    decimals: int = 3
    preview_limit: int = 10


@dataclass
class StyleHints:
    """Opaque styling passed through to the workbook writer."""

    header_font_color: str = "FFFFFF"
    header_fill_color: str = "2C3E50"
    border_color: str = "CCCCCC"
    column_widths: List[int] = field(
        default_factory=lambda: [15, 15, 40, 12, 12, 12, 15, 8, 12, 12, 15]
    )


@dataclass
class OutputConfig:
    """Paths describing where converted workbooks should be written."""

    directory: Path = Path("output")
    sheet_name: str = "转换结果"
    audit_log: str = "conversion_audit.json"
    style: StyleHints = field(default_factory=StyleHints)

    def resolved(self, base_path: Path) -> "OutputConfig":
        return OutputConfig(
            directory=_resolve_path(self.directory, base_path),
            sheet_name=self.sheet_name,
            audit_log=self.audit_log,
            style=self.style,
        )


@dataclass
class AppConfig:
    """Container for all configuration required by the conversion pipeline."""

    columns: ColumnLayout = field(default_factory=ColumnLayout)
    input: InputConfig = field(default_factory=InputConfig)
    conversion: ConversionConfig = field(default_factory=ConversionConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def resolved(self, base_path: Path) -> "AppConfig":
        return AppConfig(
            columns=self.columns,
            input=self.input,
            conversion=self.conversion,
            output=self.output.resolved(base_path),
        )


def load_config(path: Path) -> AppConfig:
    """Load :class:`AppConfig` from a YAML file."""

    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file '{config_path}' does not exist")

    with config_path.open("r", encoding="utf-8") as stream:
        raw_config: Mapping[str, Any] = yaml.safe_load(stream) or {}

    if not isinstance(raw_config, Mapping):
        raise ValueError("Configuration root must be a mapping")

    columns = ColumnLayout(**_parse_columns(raw_config.get("columns") or {}))
    input_config = InputConfig(**(raw_config.get("input") or {}))
    conversion = ConversionConfig(**(raw_config.get("conversion") or {}))
    output = OutputConfig(**_parse_output_section(raw_config.get("output") or {}))

    _validate(input_config, conversion)

    config = AppConfig(
        columns=columns,
        input=input_config,
        conversion=conversion,
        output=output,
    )
    return config.resolved(config_path.parent)


def _parse_columns(section: Mapping[str, Any]) -> Dict[str, int]:
    known = {info.name for info in fields(ColumnLayout)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError("Unknown column keys: " + ", ".join(unknown))

    parsed: Dict[str, int] = {}
    for key, value in section.items():
        try:
            index = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"Column offset for '{key}' must be an integer") from None
        if index < 0:
            raise ValueError(f"Column offset for '{key}' must not be negative")
        parsed[key] = index
    return parsed


def _parse_output_section(section: Mapping[str, Any]) -> Dict[str, Any]:
    parsed: Dict[str, Any] = {}
    if "directory" in section:
        parsed["directory"] = Path(section["directory"])
    for key in ("sheet_name", "audit_log"):
        if key in section:
            parsed[key] = section[key]
    if "style" in section:
        parsed["style"] = StyleHints(**(section["style"] or {}))
    return parsed


def _validate(input_config: InputConfig, conversion: ConversionConfig) -> None:
    if input_config.max_file_size <= 0:
        raise ValueError("input.max_file_size must be positive")
    if conversion.final_group_count < 0:
        raise ValueError("conversion.final_group_count must not be negative")
    input_config.extensions = [_normalise_extension(ext) for ext in input_config.extensions]


def _normalise_extension(value: Optional[str]) -> str:
    text = str(value or "").strip().lower()
    if text and not text.startswith("."):
        text = "." + text
    return text


def _resolve_path(path: Path, base_path: Path) -> Path:
    expanded = Path(path).expanduser()
    if expanded.is_absolute():
        return expanded
    return (base_path / expanded).resolve()


__all__ = [
    "AppConfig",
    "ColumnLayout",
    "ConversionConfig",
    "DEFAULT_PROJECT_NAME",
    "InputConfig",
    "OutputConfig",
    "StyleHints",
    "load_config",
]

"""Command line interface for the cost tree converter."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, Optional

from tabulate import tabulate

from .config import AppConfig, load_config
from .errors import CostTreeError
from .pipeline import ConversionResult, convert_file
from .reporting import export_conversion

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert a flat cost sheet into a hierarchical cost breakdown"
    )
    parser.add_argument("input", type=Path, help="Source workbook (.xls/.xlsx)")
    parser.add_argument("--config", type=Path, help="Path to YAML configuration")
    parser.add_argument("--output-dir", type=Path, help="Directory for the converted workbook")
    parser.add_argument("--sheet", help="Substring identifying the source worksheet")
    parser.add_argument("--project-name", help="Project name used when the sheet has no title row")
    parser.add_argument("--preview", type=int, help="Number of rows to print after conversion")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING)")
    parser.add_argument("--quiet", action="store_true", help="Suppress console summary output")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    try:
        config = load_config(args.config) if args.config else AppConfig()
        _apply_overrides(config, args)
    except Exception as exc:  # pragma: no cover - CLI validation
        logger.error("Failed to load configuration: %s", exc)
        return 1

    try:
        result = convert_file(args.input, config)
    except (CostTreeError, FileNotFoundError) as exc:
        logger.error("Conversion failed: %s", exc)
        return 1

    try:
        paths = export_conversion(result, config.output, args.input.name)
    except Exception as exc:
        logger.exception("Failed to export conversion results: %s", exc)
        return 1

    if not args.quiet:
        _print_summary(result, paths["workbook"], config.conversion.preview_limit)

    return 0


def _apply_overrides(config: AppConfig, args: argparse.Namespace) -> None:
    if args.output_dir:
        config.output.directory = _resolve_override_path(args.output_dir)

    if args.sheet:
        config.input.sheet_hint = args.sheet

    if args.project_name:
        config.conversion.default_project_name = args.project_name

    if args.preview is not None:
        config.conversion.preview_limit = args.preview


def _resolve_override_path(path: Path) -> Path:
    path = Path(path).expanduser()
    if path.is_absolute():
        return path
    return (Path.cwd() / path).resolve()


def _print_summary(result: ConversionResult, workbook: Path, limit: int) -> None:
    stats = result.stats()
    print(f"Project: {stats['project_name']}")
    preview = result.preview(limit)
    if preview:
        print(tabulate(preview, headers="keys", tablefmt="github"))
    print(
        f"Rows: {stats['total_rows']}  Warnings: {stats['warning_count']}  "
        f"Time: {stats['process_time']:.2f}s"
    )
    print(f"Written: {workbook}")


if __name__ == "__main__":  # pragma: no cover - manual execution entry point
    raise SystemExit(main())

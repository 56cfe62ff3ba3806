"""Utilities for exporting conversion outputs to disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict

from .config import OutputConfig
from .io import rows_to_excel_bytes
from .pipeline import ConversionResult

logger = logging.getLogger(__name__)


def export_conversion(
    result: ConversionResult, output: OutputConfig, source_name: str
) -> Dict[str, Path]:
    """Persist the converted workbook and an audit log to the output directory."""

    output_dir = output.directory
    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Writing results to %s", output_dir)

    paths: Dict[str, Path] = {}

    workbook_path = output_dir / result.output_filename(source_name)
    workbook_path.write_bytes(
        rows_to_excel_bytes(result.to_frame(), output.sheet_name, output.style)
    )
    paths["workbook"] = workbook_path

    audit_payload = result.stats()
    audit_payload["source"] = str(source_name)
    audit_payload["sheet_name"] = result.sheet_name
    audit_payload["final_groups"] = list(result.final_groups)
    audit_payload["warnings"] = [warning.as_dict() for warning in result.warnings]
    audit_path = output_dir / output.audit_log
    with audit_path.open("w", encoding="utf-8") as handle:
        json.dump(audit_payload, handle, ensure_ascii=False, indent=2)
    paths["audit"] = audit_path

    return paths


__all__ = ["export_conversion"]

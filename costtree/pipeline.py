"""Conversion pipeline: raw worksheet in, sorted cost rows out."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from .aggregate import AmountMap, aggregate
from .codes import NumeralDecoder
from .config import AppConfig
from .emit import OUTPUT_HEADERS, OutputRow, emit_rows
from .errors import ConversionEmptyError, RowValidationWarning
from .io import read_workbook, select_sheet, validate_input
from .policy import mark_final_groups
from .rows import normalize_rows
from .tree import CostTree, build_tree, describe_tree

logger = logging.getLogger(__name__)

PREVIEW_FIELDS = (
    "item_code",
    "hierarchy_code",
    "item_name",
    "estimate_amount",
    "contract_amount",
)


@dataclass
class ConversionResult:
    """Structured output from :func:`convert_matrix`."""

    rows: List[OutputRow]
    project_name: str
    tree: CostTree
    amounts: AmountMap
    warnings: List[RowValidationWarning] = field(default_factory=list)
    final_groups: List[str] = field(default_factory=list)
    sheet_name: Optional[str] = None
    started_at: float = 0.0
    finished_at: float = 0.0

    @property
    def process_time(self) -> float:
        return max(0.0, self.finished_at - self.started_at)

    def stats(self) -> Dict[str, Any]:
        return {
            "total_rows": len(self.rows),
            "project_name": self.project_name,
            "process_time": round(self.process_time, 3),
            "has_data": bool(self.rows),
            "warning_count": len(self.warnings),
        }

    def preview(self, limit: int = 10) -> List[Dict[str, str]]:
        """First ``limit`` rows reduced to codes, name and the two amounts."""

        return [
            {OUTPUT_HEADERS[key]: getattr(row, key) for key in PREVIEW_FIELDS}
            for row in self.rows[: max(0, limit)]
        ]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [row.as_record() for row in self.rows],
            columns=list(OUTPUT_HEADERS.values()),
        )

    def output_filename(self, source_name: str) -> str:
        stem = Path(source_name).stem or "output"
        return f"转换结果_{stem}_{int(self.finished_at * 1000)}.xlsx"


def convert_matrix(
    matrix: Sequence[Sequence[Any]],
    config: Optional[AppConfig] = None,
    decoder: Optional[NumeralDecoder] = None,
) -> ConversionResult:
    """Run normalise, build, policy, aggregate and emit over one worksheet."""

    config = config or AppConfig()
    conversion = config.conversion
    started = time.time()

    scan = normalize_rows(
        matrix,
        config.columns,
        min_rows=config.input.min_rows,
        default_project_name=conversion.default_project_name,
    )
    built = build_tree(scan.rows, scan.project_name, decoder)
    tree = built.tree
    if len(tree.root.children) == 0:
        raise ConversionEmptyError("No row carried a valid sequence code")

    final_groups = mark_final_groups(tree, conversion.final_group_count)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Cost tree:\n%s", describe_tree(tree))

    amounts = aggregate(tree)
    rows = emit_rows(tree, amounts, conversion.decimals)

    result = ConversionResult(
        rows=rows,
        project_name=scan.project_name,
        tree=tree,
        amounts=amounts,
        warnings=built.warnings,
        final_groups=final_groups,
        started_at=started,
        finished_at=time.time(),
    )
    logger.info(
        "Conversion finished: %d rows, %d warnings, %.2fs",
        len(rows),
        len(result.warnings),
        result.process_time,
    )
    return result


def convert_bytes(
    data: bytes,
    filename: str,
    config: Optional[AppConfig] = None,
    decoder: Optional[NumeralDecoder] = None,
) -> ConversionResult:
    """Validate and convert an uploaded workbook held in memory."""

    config = config or AppConfig()
    validate_input(filename, len(data), config.input)
    sheet_name, matrix = select_sheet(read_workbook(data), config.input.sheet_hint)
    result = convert_matrix(matrix, config, decoder)
    result.sheet_name = sheet_name
    return result


def convert_file(
    path: Path,
    config: Optional[AppConfig] = None,
    decoder: Optional[NumeralDecoder] = None,
) -> ConversionResult:
    """Validate and convert the workbook stored at ``path``."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Workbook '{path}' does not exist")
    logger.info("Converting %s", path)
    return convert_bytes(path.read_bytes(), path.name, config, decoder)


__all__ = [
    "ConversionResult",
    "convert_bytes",
    "convert_file",
    "convert_matrix",
]

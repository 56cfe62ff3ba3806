"""Extraction of typed cost rows from a raw worksheet cell matrix."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

import numpy as np
import pandas as pd

from .config import DEFAULT_PROJECT_NAME, ColumnLayout
from .errors import ConversionEmptyError, InputFormatError

logger = logging.getLogger(__name__)

TITLE_LABEL = "一"
START_LABELS = {TITLE_LABEL, "1"}
HEADER_MARKER = ("1", "2")
MIN_ROW_WIDTH = 5

_NUMBER_PATTERN = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")


@dataclass
class CostRow:
    """One line item of the source sheet with typed numeric columns."""

    sequence_label: str
    item_name: str = ""
    cost_category: str = ""
    unit: str = ""
    quantity: Optional[float] = None
    contract_unit_price: Optional[float] = None
    professional_sub_price: Optional[float] = None
    labor_sub_price: Optional[float] = None
    source_row: Optional[int] = None

    @property
    def has_labor_subcontract(self) -> bool:
        return _is_nonzero(self.labor_sub_price)

    @property
    def has_professional_subcontract(self) -> bool:
        return _is_nonzero(self.professional_sub_price)


@dataclass
class RowScan:
    """Result of scanning a worksheet: the rows and the discovered title."""

    rows: List[CostRow] = field(default_factory=list)
    project_name: str = DEFAULT_PROJECT_NAME
    start_row: Optional[int] = None


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if not pd.api.types.is_scalar(value):
        return False
    return bool(pd.isna(value))


def _is_nonzero(value: Optional[float]) -> bool:
    return value is not None and value != 0


def cell_text(value: Any) -> str:
    """Render a cell as stripped text; integral floats lose their ``.0``."""

    if _is_missing(value):
        return ""
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    text = str(value).strip()
    if text.lower() == "nan":
        return ""
    return text


def parse_number(value: Any) -> Optional[float]:
    """Parse a numeric cell; blanks and unparsable text become ``None``."""

    if _is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        return float(value)

    text = str(value).strip()
    if not text or text.lower() == "nan":
        return None
    cleaned = re.sub(r"[^\d.\-]", "", text)
    match = _NUMBER_PATTERN.match(cleaned)
    if match is None:
        return None
    return float(match.group(0))


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def to_cost_row(row: Sequence[Any], layout: ColumnLayout, source_row: Optional[int] = None) -> CostRow:
    return CostRow(
        sequence_label=cell_text(_cell(row, layout.sequence)),
        item_name=cell_text(_cell(row, layout.name)),
        cost_category=cell_text(_cell(row, layout.category)),
        unit=cell_text(_cell(row, layout.unit)),
        quantity=parse_number(_cell(row, layout.quantity)),
        contract_unit_price=parse_number(_cell(row, layout.contract_price)),
        professional_sub_price=parse_number(_cell(row, layout.professional_price)),
        labor_sub_price=parse_number(_cell(row, layout.labor_price)),
        source_row=source_row,
    )


def normalize_rows(
    matrix: Sequence[Sequence[Any]],
    layout: Optional[ColumnLayout] = None,
    *,
    min_rows: int = 10,
    default_project_name: str = DEFAULT_PROJECT_NAME,
) -> RowScan:
    """Locate the first data row and extract :class:`CostRow` records.

    Data starts at the first row labelled ``一`` or ``1``.  The ``一`` row names
    the project and the ``1``/``2`` column-number row is a header marker; both
    are consumed here and never forwarded.
    """

    layout = layout or ColumnLayout()
    if matrix is None or len(matrix) < min_rows:
        raise InputFormatError(
            f"Worksheet has {0 if matrix is None else len(matrix)} rows; "
            f"at least {min_rows} are required"
        )

    scan = RowScan(project_name=default_project_name)
    for index, raw in enumerate(matrix):
        raw = list(raw or [])
        if len(raw) < MIN_ROW_WIDTH:
            continue

        row = to_cost_row(raw, layout, source_row=index + 1)
        label = row.sequence_label
        if scan.start_row is None:
            if label not in START_LABELS:
                continue
            scan.start_row = index + 1
            logger.debug("Data starts at sheet row %d", scan.start_row)

        if not label:
            continue
        if label == TITLE_LABEL:
            if row.item_name:
                scan.project_name = row.item_name
                logger.info("Found project name: %s", scan.project_name)
            continue
        if (label, row.item_name) == HEADER_MARKER:
            continue
        scan.rows.append(row)

    if not scan.rows:
        raise ConversionEmptyError("No valid data rows found; check the sheet layout")

    logger.info("Extracted %d cost rows", len(scan.rows))
    return scan


__all__ = [
    "CostRow",
    "RowScan",
    "cell_text",
    "normalize_rows",
    "parse_number",
    "to_cost_row",
]

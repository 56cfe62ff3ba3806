"""IO helpers for reading cost workbooks and writing converted sheets."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .config import InputConfig, StyleHints
from .errors import InputFormatError

logger = logging.getLogger(__name__)

Matrix = List[List[Any]]
WorkbookSource = Union[str, Path, bytes]


def validate_input(filename: str, size: int, config: Optional[InputConfig] = None) -> None:
    """Reject files with the wrong extension or above the size limit."""

    config = config or InputConfig()
    ext = Path(filename).suffix.lower()
    if ext not in config.extensions:
        raise InputFormatError(
            f"Unsupported file extension '{ext}'; expected one of "
            + ", ".join(config.extensions)
        )
    if size > config.max_file_size:
        limit_mb = config.max_file_size / (1024 * 1024)
        raise InputFormatError(f"File '{filename}' exceeds the {limit_mb:g} MB limit")


def _cell_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (float, np.floating)) and np.isnan(value):
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, np.generic):
        return value.item()
    return value


def _frame_to_matrix(frame: pd.DataFrame) -> Matrix:
    return [
        [_cell_value(value) for value in row]
        for row in frame.itertuples(index=False, name=None)
    ]


def read_workbook(source: WorkbookSource) -> Dict[str, Matrix]:
    """Read every worksheet of ``source`` as a matrix of raw cell values."""

    if isinstance(source, (bytes, bytearray)):
        handle: Any = io.BytesIO(source)
        logger.debug("Reading workbook from %d bytes", len(source))
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Workbook '{path}' does not exist")
        handle = path
        logger.debug("Reading workbook %s", path)

    sheets: Dict[str, Matrix] = {}
    try:
        with pd.ExcelFile(handle) as excel:
            for sheet_name in excel.sheet_names:
                frame = excel.parse(sheet_name, header=None, dtype=object)
                sheets[str(sheet_name)] = _frame_to_matrix(frame)
    except Exception as exc:
        raise InputFormatError(f"Unable to read workbook: {exc}") from exc
    logger.info("Read %d worksheet(s): %s", len(sheets), ", ".join(sheets))
    return sheets


def select_sheet(sheets: Dict[str, Matrix], hint: str = "表1") -> tuple[str, Matrix]:
    """Return the first worksheet whose name contains ``hint``."""

    for name, matrix in sheets.items():
        if hint in name:
            logger.info("Using worksheet '%s' (%d rows)", name, len(matrix))
            return name, matrix
    raise InputFormatError(f"Workbook has no worksheet named like '{hint}'")


def _style_worksheet(worksheet, style: StyleHints) -> None:
    header_font = Font(bold=True, color=style.header_font_color)
    header_fill = PatternFill(
        fill_type="solid",
        start_color=style.header_fill_color,
        end_color=style.header_fill_color,
    )
    header_alignment = Alignment(horizontal="center", vertical="center")
    side = Side(style="thin", color=style.border_color)
    border = Border(top=side, right=side, bottom=side, left=side)

    for index, width in enumerate(style.column_widths, start=1):
        worksheet.column_dimensions[get_column_letter(index)].width = width

    for cell in worksheet[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment

    for row in worksheet.iter_rows(min_row=2):
        for cell in row:
            cell.border = border


def rows_to_excel_bytes(
    frame: pd.DataFrame,
    sheet_name: str = "转换结果",
    style: Optional[StyleHints] = None,
) -> bytes:
    """Serialise converted rows to XLSX bytes with header and border styling."""

    if frame is None or frame.empty:
        raise ValueError("No rows to export")

    buffer = io.BytesIO()
    safe_sheet = sheet_name[:31] or "Data"
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name=safe_sheet)
        _style_worksheet(writer.book[safe_sheet], style or StyleHints())
    buffer.seek(0)
    return buffer.getvalue()


__all__ = [
    "Matrix",
    "read_workbook",
    "rows_to_excel_bytes",
    "select_sheet",
    "validate_input",
]

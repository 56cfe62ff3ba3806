"""Exceptions and diagnostics raised while converting cost sheets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

INVALID_CODE = "invalid_code"
DUPLICATE_CODE = "duplicate_code"
ORPHANED_CODE = "orphaned_code"
SUBCONTRACT_PARENT = "subcontract_parent"


class CostTreeError(Exception):
    """Base class for fatal conversion failures."""


class InputFormatError(CostTreeError, ValueError):
    """The workbook cannot be converted (extension, size, sheet or row count)."""


class ConversionEmptyError(CostTreeError, ValueError):
    """No usable cost rows survived normalisation."""


@dataclass(frozen=True)
class RowValidationWarning:
    """A single row that was skipped while building the tree."""

    kind: str
    label: str
    message: str
    code: Optional[str] = None
    source_row: Optional[int] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "label": self.label,
            "code": self.code,
            "source_row": self.source_row,
            "message": self.message,
        }


__all__ = [
    "CostTreeError",
    "InputFormatError",
    "ConversionEmptyError",
    "RowValidationWarning",
    "INVALID_CODE",
    "DUPLICATE_CODE",
    "ORPHANED_CODE",
    "SUBCONTRACT_PARENT",
]

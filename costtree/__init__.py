"""Cost tree converter package.

This package turns a flat construction cost sheet into a hierarchical cost
breakdown: sequence labels are normalised into canonical codes, items are
arranged in a tree by their codes, subcontract prices become synthetic detail
items, and contract and estimate amounts are rolled up to the project total.
The command line interface and any future front end share these building
blocks.
"""

from .aggregate import NodeAmounts, aggregate
from .codes import normalize_code
from .config import (
    AppConfig,
    ColumnLayout,
    ConversionConfig,
    InputConfig,
    OutputConfig,
    StyleHints,
    load_config,
)
from .emit import OUTPUT_HEADERS, OutputRow, emit_rows, format_decimal
from .errors import (
    ConversionEmptyError,
    CostTreeError,
    InputFormatError,
    RowValidationWarning,
)
from .pipeline import ConversionResult, convert_bytes, convert_file, convert_matrix
from .policy import mark_final_groups
from .reporting import export_conversion
from .rows import CostRow, normalize_rows
from .tree import CostTree, build_tree

__all__ = [
    "AppConfig",
    "ColumnLayout",
    "ConversionConfig",
    "ConversionEmptyError",
    "ConversionResult",
    "CostRow",
    "CostTree",
    "CostTreeError",
    "InputConfig",
    "InputFormatError",
    "NodeAmounts",
    "OUTPUT_HEADERS",
    "OutputConfig",
    "OutputRow",
    "RowValidationWarning",
    "StyleHints",
    "aggregate",
    "build_tree",
    "convert_bytes",
    "convert_file",
    "convert_matrix",
    "emit_rows",
    "export_conversion",
    "format_decimal",
    "load_config",
    "mark_final_groups",
    "normalize_code",
    "normalize_rows",
]

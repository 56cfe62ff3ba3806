import math

import numpy as np
import pandas as pd
import pytest

from costtree.config import ColumnLayout
from costtree.errors import ConversionEmptyError, InputFormatError
from costtree.rows import cell_text, normalize_rows, parse_number

from conftest import sheet_row


def test_normalize_rows_finds_start_and_project_name(sample_matrix):
    scan = normalize_rows(sample_matrix)

    assert scan.project_name == "示范项目"
    assert scan.start_row == 2
    labels = [row.sequence_label for row in scan.rows]
    assert labels == ["1", "1.1", "1.1.1", "1.1.2", "1.2", "2", "2.1", "5", "6"]


def test_normalize_rows_types_numeric_columns(sample_matrix):
    scan = normalize_rows(sample_matrix)
    item = scan.rows[2]

    assert item.item_name == "分项1.1.1"
    assert item.cost_category == "C01"
    assert item.unit == "m3"
    assert item.quantity == 10
    assert item.contract_unit_price == 100
    assert item.professional_sub_price == 80
    assert item.labor_sub_price is None
    assert item.source_row == 6


def test_normalize_rows_rejects_short_sheets():
    with pytest.raises(InputFormatError):
        normalize_rows([sheet_row("1", "A")] * 3)


def test_normalize_rows_without_data_start_is_empty():
    matrix = [sheet_row("x", "noise")] * 12
    with pytest.raises(ConversionEmptyError):
        normalize_rows(matrix)


def test_normalize_rows_keeps_default_name_without_title(sample_matrix):
    matrix = [row for row in sample_matrix if row[2] != "一"]
    matrix.append(sheet_row(None, "padding"))

    scan = normalize_rows(matrix, default_project_name="Fallback")

    assert scan.project_name == "Fallback"


def test_normalize_rows_honours_column_layout():
    layout = ColumnLayout(sequence=0, name=1, category=2, unit=3, quantity=4,
                          contract_price=5, professional_price=6, labor_price=7)
    matrix = [["一", "Shifted", None, None, None, None, None, None]]
    matrix += [["1", "Group", None, "m", 2, 3, None, None]] + [[None] * 8] * 9

    scan = normalize_rows(matrix, layout)

    assert scan.project_name == "Shifted"
    assert scan.rows[0].quantity == 2
    assert scan.rows[0].contract_unit_price == 3


@pytest.mark.parametrize(
    "value, expected",
    [
        (12, 12.0),
        (1.5, 1.5),
        ("1,234.5元", 1234.5),
        ("-3", -3.0),
        ("  ", None),
        ("", None),
        (None, None),
        (float("nan"), None),
        ("NaN", None),
        ("abc", None),
        ("-", None),
    ],
)
def test_parse_number(value, expected):
    assert parse_number(value) == expected


def test_cell_text_normalises_numbers_and_blanks():
    assert cell_text(1.0) == "1"
    assert cell_text(1.1) == "1.1"
    assert cell_text(np.float64(2.0)) == "2"
    assert cell_text(math.nan) == ""
    assert cell_text(" nan ") == ""
    assert cell_text(" 一 ") == "一"


def test_pandas_missing_markers_are_blank():
    assert cell_text(pd.NA) == ""
    assert cell_text(pd.NaT) == ""
    assert parse_number(pd.NA) is None


def test_normalize_rows_treats_na_labels_as_blank(sample_matrix):
    matrix = list(sample_matrix) + [sheet_row(pd.NA, "空序号")]

    scan = normalize_rows(matrix)

    assert all(row.sequence_label for row in scan.rows)
    assert len(scan.rows) == 9

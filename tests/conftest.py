from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional
import sys

import pytest

# Ensure project root is on sys.path for absolute imports
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from costtree.rows import CostRow


def sheet_row(
    seq: Any,
    name: Any = None,
    category: Any = None,
    unit: Any = None,
    qty: Any = None,
    price: Any = None,
    prof: Any = None,
    labor: Any = None,
) -> List[Any]:
    return [None, None, seq, name, category, unit, qty, price, prof, labor, None]


def cost_row(
    seq: str,
    name: str = "",
    qty: Optional[float] = None,
    price: Optional[float] = None,
    prof: Optional[float] = None,
    labor: Optional[float] = None,
    unit: str = "",
    category: str = "",
) -> CostRow:
    return CostRow(
        sequence_label=seq,
        item_name=name or f"Item {seq}",
        cost_category=category,
        unit=unit,
        quantity=qty,
        contract_unit_price=price,
        professional_sub_price=prof,
        labor_sub_price=labor,
    )


@pytest.fixture
def sample_matrix() -> List[List[Any]]:
    return [
        [None, None, "序号", "项目名称", "分包策划分类", "单位", "数量", "合同单价", "专业分包", "劳务分包", None],
        sheet_row("1", "2", "3", "4", "5", "6", "7", "8"),
        sheet_row("一", "示范项目"),
        sheet_row("1", "工程1"),
        sheet_row("1.1", "分部1.1"),
        sheet_row("1.1.1", "分项1.1.1", "C01", "m3", 10, 100, 80, None),
        sheet_row("1.1.2", "分项1.1.2", "C02", "m3", 20, 200, None, 150),
        sheet_row("1.2", "分部1.2", "C03", "m3", 30, 300, None, 250),
        sheet_row("2", "工程2"),
        sheet_row("2.1", "分部2.1", "C04", "个", 40, 400, 350, None),
        sheet_row("5", "材料机械", "0003"),
        sheet_row("6", "其他费用"),
    ]


@pytest.fixture
def sample_rows() -> List[CostRow]:
    return [
        cost_row("1", "工程1"),
        cost_row("1.1", "分部1.1"),
        cost_row("1.1.1", "分项1.1.1", qty=10, price=100, prof=80, unit="m3"),
        cost_row("1.1.2", "分项1.1.2", qty=20, price=200, labor=150, unit="m3"),
        cost_row("1.2", "分部1.2", qty=30, price=300, labor=250, unit="m3"),
        cost_row("2", "工程2"),
        cost_row("2.1", "分部2.1", qty=40, price=400, prof=350, unit="个"),
        cost_row("5", "材料机械", category="0003"),
        cost_row("6", "其他费用"),
    ]

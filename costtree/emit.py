"""Flattening of an aggregated cost tree into output rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Dict, List, Optional

from .aggregate import AmountMap, NodeAmounts
from .codes import code_sort_key
from .tree import CostItem, CostTree, SubcontractDetail

logger = logging.getLogger(__name__)

OUTPUT_HEADERS: Dict[str, str] = {
    "item_code": "清单项编码",
    "hierarchy_code": "层级编码",
    "item_name": "清单项名称",
    "cost_category": "成本科目编码",
    "estimate_quantity": "测算数量",
    "estimate_unit_price": "测算单价",
    "estimate_amount": "测算金额无税",
    "unit": "单位",
    "contract_quantity": "合同造价数量",
    "contract_unit_price": "合同造价单价",
    "contract_amount": "合同造价无税金额",
}


@dataclass
class OutputRow:
    item_code: str
    hierarchy_code: str
    item_name: str
    cost_category: str = ""
    estimate_quantity: str = ""
    estimate_unit_price: str = ""
    estimate_amount: str = ""
    unit: str = ""
    contract_quantity: str = ""
    contract_unit_price: str = ""
    contract_amount: str = ""

    def as_dict(self) -> Dict[str, str]:
        return {info.name: getattr(self, info.name) for info in fields(self)}

    def as_record(self) -> Dict[str, str]:
        """Same values keyed by the sheet headers."""

        return {OUTPUT_HEADERS[key]: value for key, value in self.as_dict().items()}


def format_decimal(value: Optional[float], places: int = 3) -> str:
    """Round half-up to ``places`` and trim trailing zeros; ``None`` renders blank."""

    if value is None:
        return ""
    try:
        number = Decimal(repr(float(value)))
    except (TypeError, ValueError, InvalidOperation):
        return ""
    if not number.is_finite():
        return ""

    quantum = Decimal(1).scaleb(-places)
    with localcontext() as context:
        context.prec = max(context.prec, number.adjusted() + places + 2)
        text = f"{number.quantize(quantum, rounding=ROUND_HALF_UP):f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in {"-0", ""}:
        text = "0"
    return text


def _positive(value: float, places: int) -> str:
    return format_decimal(value, places) if value > 0 else ""


def placeholder_row(node: CostItem, amounts: NodeAmounts, places: int = 3) -> OutputRow:
    """Identity and rolled amounts of a row-backed node."""

    itemised = node.has_subcontract and not node.in_final_groups
    row = OutputRow(
        item_code=node.code,
        hierarchy_code=node.code,
        item_name=node.name,
        cost_category="" if itemised else node.cost_category,
        unit="" if itemised else node.unit,
    )
    if not itemised:
        row.estimate_amount = _positive(amounts.estimate, places)

    if amounts.own_contract is not None:
        row.contract_quantity = format_decimal(node.quantity, places)
        row.contract_unit_price = format_decimal(node.contract_unit_price, places)
        row.contract_amount = format_decimal(amounts.contract, places)
    else:
        row.contract_amount = _positive(amounts.contract, places)
    return row


def detail_row(node: SubcontractDetail, amounts: NodeAmounts, places: int = 3) -> OutputRow:
    """Estimate line for a labour or professional subcontract."""

    return OutputRow(
        item_code=node.code,
        hierarchy_code=node.code,
        item_name=node.name,
        cost_category=node.cost_category,
        estimate_quantity=format_decimal(node.quantity, places),
        estimate_unit_price=format_decimal(node.unit_price, places),
        estimate_amount=format_decimal(amounts.estimate, places) if node.quantity is not None else "",
        unit=node.unit or "",
    )


def summary_row(tree: CostTree, amounts: AmountMap, places: int = 3) -> OutputRow:
    root = amounts[tree.root.code]
    return OutputRow(
        item_code=tree.root.code,
        hierarchy_code=tree.root.code,
        item_name=tree.root.name,
        estimate_amount=_positive(root.estimate, places),
        contract_amount=_positive(root.contract, places),
    )


def emit_rows(tree: CostTree, amounts: AmountMap, places: int = 3) -> List[OutputRow]:
    """Walk the tree in pre-order and return the sorted output rows.

    Subcontract details inside the final groups are not itemised; their
    amounts are already part of the parent's rolled estimate.
    """

    rows: List[OutputRow] = []
    suppressed = 0
    for node in tree.iter_preorder():
        if node is tree.root:
            continue
        if isinstance(node, SubcontractDetail):
            if node.in_final_groups:
                suppressed += 1
                continue
            rows.append(detail_row(node, amounts[node.code], places))
        elif isinstance(node, CostItem):
            rows.append(placeholder_row(node, amounts[node.code], places))

    rows.insert(0, summary_row(tree, amounts, places))
    rows.sort(key=lambda row: code_sort_key(row.item_code))

    logger.info("Emitted %d rows (%d subcontract details suppressed)", len(rows), suppressed)
    return rows


__all__ = [
    "OUTPUT_HEADERS",
    "OutputRow",
    "detail_row",
    "emit_rows",
    "format_decimal",
    "placeholder_row",
    "summary_row",
]

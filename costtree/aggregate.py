"""Bottom-up roll-up of contract and estimate amounts over a cost tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .tree import CostItem, CostTree, ProjectRoot, SubcontractDetail

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeAmounts:
    """Rolled amounts of one node.

    ``own_contract`` is ``None`` when the node's row lacks a quantity or a
    contract price; such a node still contributes ``0`` to its ancestors.
    """

    contract: float = 0.0
    estimate: float = 0.0
    own_contract: Optional[float] = None


AmountMap = Dict[str, NodeAmounts]


def _product(left: Optional[float], right: Optional[float]) -> Optional[float]:
    if left is None or right is None:
        return None
    return left * right


def aggregate(tree: CostTree) -> AmountMap:
    """Fold amounts from the leaves up; the tree itself is left untouched."""

    amounts: AmountMap = {}
    for node in tree.iter_postorder():
        if isinstance(node, SubcontractDetail):
            estimate = _product(node.quantity, node.unit_price)
            amounts[node.code] = NodeAmounts(estimate=estimate or 0.0)
            continue

        if isinstance(node, ProjectRoot):
            top_level = [amounts[child.code] for child in tree.top_level_nodes()]
            amounts[node.code] = NodeAmounts(
                contract=sum(item.contract for item in top_level),
                estimate=sum(item.estimate for item in top_level),
            )
            continue

        own = None
        if isinstance(node, CostItem):
            own = _product(node.quantity, node.contract_unit_price)
        children = [amounts[child] for child in node.children]
        amounts[node.code] = NodeAmounts(
            contract=(own or 0.0) + sum(child.contract for child in children),
            estimate=sum(child.estimate for child in children),
            own_contract=own,
        )

    root = amounts[tree.root.code]
    logger.info(
        "Project totals: contract=%.3f estimate=%.3f", root.contract, root.estimate
    )
    return amounts


__all__ = ["AmountMap", "NodeAmounts", "aggregate"]

"""Flagging of the final top-level groups, which are summarised rather than itemised."""

from __future__ import annotations

import logging
from typing import List

from .codes import code_sort_key
from .tree import CostTree

logger = logging.getLogger(__name__)


def mark_final_groups(tree: CostTree, count: int = 2) -> List[str]:
    """Flag the ``count`` top-level groups with the largest codes and their subtrees.

    Nothing is flagged when the project has fewer than ``count`` top-level
    groups.  Returns the codes of the flagged groups in ascending order.
    """

    groups = sorted(tree.top_level_nodes(), key=lambda node: code_sort_key(node.code))
    if count <= 0 or len(groups) < count:
        logger.debug("Only %d top-level groups; none flagged", len(groups))
        return []

    final_groups = groups[-count:]
    for group in final_groups:
        logger.info("Summarising final group %s - %s", group.code, group.name)
        for node in tree.iter_preorder(group.code):
            if not node.in_final_groups:
                node.in_final_groups = True
    return [group.code for group in final_groups]


__all__ = ["mark_final_groups"]

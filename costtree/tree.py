"""Cost tree construction from normalised rows.

Nodes are stored in an arena keyed by canonical code and link to their
children by code.  Parents are inferred from the code alone: ``1.002.003``
belongs under ``1.002``, single segment codes belong under the project root
``0``.  Rows that declare subcontract prices get synthetic leaf children
(``.001`` labour, ``.002`` professional).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

from .codes import (
    ROOT_CODE,
    NumeralDecoder,
    code_sort_key,
    is_top_level,
    normalize_code,
    parent_code,
)
from .config import DEFAULT_PROJECT_NAME
from .errors import (
    DUPLICATE_CODE,
    INVALID_CODE,
    ORPHANED_CODE,
    SUBCONTRACT_PARENT,
    RowValidationWarning,
)
from .rows import CostRow

logger = logging.getLogger(__name__)

LABOR = "劳务分包"
PROFESSIONAL = "专业分包"

SUBCONTRACT_SUFFIX = {LABOR: "001", PROFESSIONAL: "002"}
SUBCONTRACT_CATEGORY = {LABOR: "0001", PROFESSIONAL: "0002"}


@dataclass
class TreeNode:
    code: str
    name: str
    level: int
    parent_code: Optional[str]
    children: List[str] = field(default_factory=list)
    in_final_groups: bool = False


@dataclass
class ProjectRoot(TreeNode):
    """The whole project; its name comes from the sheet's title row."""


@dataclass
class CostItem(TreeNode):
    """A node backed by a row of the source sheet."""

    source: Optional[CostRow] = None

    @property
    def is_top_level(self) -> bool:
        return is_top_level(self.code)

    @property
    def has_subcontract(self) -> bool:
        if self.source is None:
            return False
        return self.source.has_labor_subcontract or self.source.has_professional_subcontract

    @property
    def quantity(self) -> Optional[float]:
        return self.source.quantity if self.source else None

    @property
    def contract_unit_price(self) -> Optional[float]:
        return self.source.contract_unit_price if self.source else None

    @property
    def cost_category(self) -> str:
        return self.source.cost_category if self.source else ""

    @property
    def unit(self) -> str:
        return self.source.unit if self.source else ""


@dataclass
class SubcontractDetail(TreeNode):
    """Synthetic leaf itemising the labour or professional subcontract."""

    kind: str = LABOR
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    unit: str = ""

    @property
    def cost_category(self) -> str:
        return SUBCONTRACT_CATEGORY[self.kind]


class CostTree:
    """Arena of nodes keyed by code, rooted at ``0``."""

    def __init__(self, project_name: str = DEFAULT_PROJECT_NAME) -> None:
        self.root = ProjectRoot(code=ROOT_CODE, name=project_name, level=0, parent_code=None)
        self.nodes: Dict[str, TreeNode] = {ROOT_CODE: self.root}

    def __contains__(self, code: object) -> bool:
        return code in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, code: str) -> TreeNode:
        return self.nodes[code]

    def get(self, code: str) -> Optional[TreeNode]:
        return self.nodes.get(code)

    def add(self, node: TreeNode) -> None:
        if node.code in self.nodes:
            raise KeyError(f"Node '{node.code}' is already registered")
        parent = self.nodes[node.parent_code]
        self.nodes[node.code] = node
        parent.children.append(node.code)

    def children_of(self, code: str) -> List[TreeNode]:
        return [self.nodes[child] for child in self.nodes[code].children]

    def top_level_nodes(self) -> List[CostItem]:
        return [
            node
            for node in self.children_of(ROOT_CODE)
            if isinstance(node, CostItem) and node.is_top_level
        ]

    def iter_preorder(self, start: str = ROOT_CODE) -> Iterator[TreeNode]:
        stack = [start]
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def iter_postorder(self, start: str = ROOT_CODE) -> Iterator[TreeNode]:
        stack = [(start, False)]
        while stack:
            code, expanded = stack.pop()
            node = self.nodes[code]
            if expanded:
                yield node
                continue
            stack.append((code, True))
            stack.extend((child, False) for child in reversed(node.children))

    def sort_children(self) -> None:
        for node in self.nodes.values():
            node.children.sort(key=code_sort_key)


@dataclass
class BuildResult:
    tree: CostTree
    warnings: List[RowValidationWarning] = field(default_factory=list)


class BuildContext:
    """State of a single tree build; never shared between conversions."""

    def __init__(self, project_name: str, decoder: Optional[NumeralDecoder] = None) -> None:
        self.tree = CostTree(project_name)
        self.decoder = decoder
        self.warnings: List[RowValidationWarning] = []

    def warn(self, kind: str, row: CostRow, message: str, code: Optional[str] = None) -> None:
        warning = RowValidationWarning(
            kind=kind,
            label=row.sequence_label,
            code=code,
            source_row=row.source_row,
            message=message,
        )
        logger.warning("Row %s skipped: %s", row.source_row or "?", message)
        self.warnings.append(warning)

    def attach(self, row: CostRow) -> Optional[CostItem]:
        code = normalize_code(row.sequence_label, self.decoder)
        if code is None:
            self.warn(INVALID_CODE, row, f"invalid sequence code '{row.sequence_label}'")
            return None

        if code in self.tree:
            self.warn(DUPLICATE_CODE, row, f"duplicate code {code}", code)
            return None

        parent = self.tree.get(parent_code(code))
        if parent is None:
            self.warn(
                ORPHANED_CODE,
                row,
                f"parent {parent_code(code)} not found for {code}",
                code,
            )
            return None
        if isinstance(parent, SubcontractDetail):
            self.warn(
                SUBCONTRACT_PARENT,
                row,
                f"parent {parent.code} of {code} is a subcontract detail",
                code,
            )
            return None

        node = CostItem(
            code=code,
            name=row.item_name,
            level=code.count(".") + 1,
            parent_code=parent.code,
            source=row,
        )
        self.tree.add(node)

        if row.has_labor_subcontract:
            self._add_subcontract(node, LABOR, row.labor_sub_price)
        if row.has_professional_subcontract:
            self._add_subcontract(node, PROFESSIONAL, row.professional_sub_price)
        return node

    def _add_subcontract(self, node: CostItem, kind: str, unit_price: Optional[float]) -> None:
        detail = SubcontractDetail(
            code=f"{node.code}.{SUBCONTRACT_SUFFIX[kind]}",
            name=f"{node.name}：{kind}",
            level=node.level + 1,
            parent_code=node.code,
            kind=kind,
            quantity=node.quantity,
            unit_price=unit_price,
            unit=node.unit,
        )
        self.tree.add(detail)


def build_tree(
    rows: Sequence[CostRow],
    project_name: str = DEFAULT_PROJECT_NAME,
    decoder: Optional[NumeralDecoder] = None,
) -> BuildResult:
    """Build a :class:`CostTree` from ``rows`` in sheet order."""

    context = BuildContext(project_name, decoder)
    for row in rows:
        context.attach(row)
    context.tree.sort_children()

    logger.info(
        "Built cost tree with %d nodes (%d rows skipped)",
        len(context.tree),
        len(context.warnings),
    )
    return BuildResult(tree=context.tree, warnings=context.warnings)


def describe_tree(tree: CostTree) -> str:
    """Indented outline of the tree, one node per line."""

    lines = []
    for node in tree.iter_preorder():
        marker = " [final]" if node.in_final_groups else ""
        lines.append(f"{'  ' * node.level}{node.code} - {node.name}{marker}")
    return "\n".join(lines)


__all__ = [
    "LABOR",
    "PROFESSIONAL",
    "BuildContext",
    "BuildResult",
    "CostItem",
    "CostTree",
    "ProjectRoot",
    "SubcontractDetail",
    "TreeNode",
    "build_tree",
    "describe_tree",
]

import pytest

from costtree.aggregate import aggregate
from costtree.policy import mark_final_groups
from costtree.tree import build_tree

from conftest import cost_row


def test_three_level_rollup(sample_rows):
    tree = build_tree(sample_rows).tree
    amounts = aggregate(tree)

    assert amounts["1.001.001"].contract == pytest.approx(1000)
    assert amounts["1.001.001"].own_contract == pytest.approx(1000)
    assert amounts["1.001.001.002"].estimate == pytest.approx(800)
    assert amounts["1.001"].contract == pytest.approx(5000)
    assert amounts["1.001"].own_contract is None
    assert amounts["1.001"].estimate == pytest.approx(3800)
    assert amounts["1"].contract == pytest.approx(14000)
    assert amounts["1"].estimate == pytest.approx(11300)
    assert amounts["0"].contract == pytest.approx(30000)
    assert amounts["0"].estimate == pytest.approx(25300)


def test_contract_equals_own_plus_children_exactly_once(sample_rows):
    tree = build_tree(sample_rows).tree
    amounts = aggregate(tree)

    for node in tree.iter_preorder():
        if node is tree.root:
            continue
        expected = (amounts[node.code].own_contract or 0) + sum(
            amounts[child].contract for child in node.children
        )
        assert amounts[node.code].contract == pytest.approx(expected)


def test_parent_with_own_amount_adds_children():
    rows = [cost_row("1", qty=2, price=10), cost_row("1.1", qty=3, price=5)]
    amounts = aggregate(build_tree(rows).tree)

    assert amounts["1"].contract == pytest.approx(35)


def test_final_group_flag_does_not_change_amounts(sample_rows):
    plain = aggregate(build_tree(sample_rows).tree)
    tree = build_tree(sample_rows).tree
    mark_final_groups(tree, count=4)

    assert aggregate(tree) == plain


def test_null_quantity_contributes_zero():
    rows = [
        cost_row("1"),
        cost_row("1.1", qty=None, price=100, prof=50),
        cost_row("1.2", qty=2, price=100),
    ]
    amounts = aggregate(build_tree(rows).tree)

    assert amounts["1.001"].own_contract is None
    assert amounts["1.001"].contract == 0
    assert amounts["1.001.002"].estimate == 0
    assert amounts["1"].contract == pytest.approx(200)


def test_root_sums_only_top_level_children():
    rows = [cost_row("1"), cost_row("1.1"), cost_row("1.1.1", qty=1, price=7)]
    amounts = aggregate(build_tree(rows).tree)

    assert amounts["0"].contract == pytest.approx(7)

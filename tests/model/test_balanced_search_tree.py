from __future__ import annotations

from dataclasses import dataclass, field
import random

import pytest

from name_sorter.model.balanced_search_tree import (
    BalancedSearchTree,
    TreeNode,
    _rotate_left,
    _rotate_right,
    is_balanced,
    is_ordered,
    render_tree,
)
from name_sorter.model.person_name import PersonName


@dataclass(frozen=True)
class Tagged:
    """Orders by ``key`` only so equal keys can be told apart by ``tag``."""

    key: int
    tag: str = field(compare=False)

    def __lt__(self, other: "Tagged") -> bool:
        return self.key < other.key


def _build(values) -> BalancedSearchTree:
    tree = BalancedSearchTree()
    for value in values:
        tree.insert(value)
    return tree


def _shape(root):
    """Level-order values with ``None`` for gaps, trailing gaps dropped."""

    values = []
    level = [root]
    while any(node is not None for node in level):
        next_level = []
        for node in level:
            if node is None:
                values.append(None)
                continue
            values.append(node.value)
            next_level.extend((node.left, node.right))
        level = next_level
    while values and values[-1] is None:
        values.pop()
    return values


def test_empty_tree_drains_to_empty_list() -> None:
    tree = BalancedSearchTree()
    assert tree.traverse_in_order() == []
    assert list(tree) == []
    assert len(tree) == 0
    assert tree.height == 0
    assert not tree
    assert render_tree(tree.root) == "<empty>"


def test_first_insert_becomes_root() -> None:
    tree = _build([42])
    assert tree.root is not None
    assert tree.root.value == 42
    assert tree.root.height == 1
    assert tree.traverse_in_order() == [42]


@pytest.mark.parametrize(
    "values",
    [
        [1, 2, 3],  # right-right
        [3, 2, 1],  # left-left
        [3, 1, 2],  # left-right
        [1, 3, 2],  # right-left
    ],
)
def test_single_imbalance_cases_rotate_to_middle_value(values) -> None:
    tree = _build(values)
    assert _shape(tree.root) == [2, 1, 3]
    assert tree.height == 2
    assert is_balanced(tree.root)


def test_ascending_inserts_build_a_perfect_tree() -> None:
    tree = _build(range(1, 8))
    assert _shape(tree.root) == [4, 2, 6, 1, 3, 5, 7]
    assert render_tree(tree.root) == "\n".join(["4", "2 6", "1 3 5 7"])
    assert tree.height == 3


def test_rotation_below_root_is_relinked_into_parent() -> None:
    tree = _build([2, 1, 3, 4, 5])
    # 3 became unbalanced and was replaced by 4 under the root's right link.
    assert _shape(tree.root) == [2, 1, 4, None, None, 3, 5]
    assert tree.root.right.height == 2
    assert tree.root.height == 3


def test_render_tree_marks_missing_children() -> None:
    tree = _build([2, 1, 3, 4])
    assert render_tree(tree.root) == "\n".join(["2", "1 3", "· · · 4"])


def test_render_tree_uses_formatter() -> None:
    tree = _build([PersonName.parse("Janet Parsons"), PersonName.parse("Vaughn Lewis")])
    assert render_tree(tree.root, formatter=lambda person: person.last_name) == "\n".join(
        ["Parsons", "Lewis ·"]
    )


def test_duplicates_are_kept_and_routed_right() -> None:
    tree = _build([Tagged(5, "a"), Tagged(5, "b")])
    assert tree.root.value.tag == "a"
    assert tree.root.left is None
    assert tree.root.right.value.tag == "b"


def test_duplicates_drain_in_insertion_order() -> None:
    values = [Tagged(5, "a"), Tagged(5, "b"), Tagged(5, "c"), Tagged(1, "d"), Tagged(5, "e")]
    tree = _build(values)
    assert len(tree) == 5
    assert [item.tag for item in tree.traverse_in_order()] == ["d", "a", "b", "c", "e"]
    assert is_balanced(tree.root)
    assert is_ordered(tree.root, strict_left=False)


def test_traversal_is_repeatable_and_non_destructive() -> None:
    tree = _build([5, 3, 8, 1, 4])
    root = tree.root
    first = tree.traverse_in_order()
    second = tree.traverse_in_order()
    assert first == second == [1, 3, 4, 5, 8]
    assert tree.root is root
    assert len(tree) == 5


def test_iter_in_order_is_lazy() -> None:
    tree = _build([2, 1, 3])
    iterator = tree.iter_in_order()
    assert next(iterator) == 1
    assert next(iterator) == 2


def test_name_scenario_sorts_by_last_name() -> None:
    lines = [
        "Janet Parsons",
        "Vaughn Lewis",
        "Adonis Julius Archer",
        "Shaquille Dangelo Bataille",
    ]
    tree = _build(PersonName.parse(line) for line in lines)
    assert [name.render() for name in tree.traverse_in_order()] == [
        "Adonis Julius Archer",
        "Shaquille Dangelo Bataille",
        "Vaughn Lewis",
        "Janet Parsons",
    ]


def test_name_scenario_with_shared_last_name() -> None:
    tree = _build([PersonName.parse("Ann Smith"), PersonName.parse("Bob Smith")])
    assert [name.render() for name in tree.traverse_in_order()] == ["Ann Smith", "Bob Smith"]


def test_deep_sorted_input_does_not_exhaust_the_stack() -> None:
    names = [PersonName.parse(f"Given{index:05d} Last{index:05d}") for index in range(10_000)]
    sorted_tree = _build(names)

    shuffled = list(names)
    random.Random(13).shuffle(shuffled)
    control_tree = _build(shuffled)

    reverse_tree = _build(reversed(names))

    assert sorted_tree.traverse_in_order() == names
    assert control_tree.traverse_in_order() == names
    assert reverse_tree.traverse_in_order() == names
    for tree in (sorted_tree, control_tree, reverse_tree):
        assert len(tree) == 10_000
        assert is_balanced(tree.root)
        # AVL height bound: 1.44 * log2(n + 2)
        assert tree.height <= 19


def test_rotate_right_updates_heights_bottom_up() -> None:
    leaf = TreeNode(1)
    pivot = TreeNode(2, left=leaf, height=2)
    parent = TreeNode(3, left=pivot, height=3)

    new_root = _rotate_right(parent)

    assert new_root is pivot
    assert pivot.left is leaf and pivot.right is parent
    assert parent.left is None
    assert (parent.height, pivot.height) == (1, 2)


def test_rotate_left_moves_inner_subtree() -> None:
    inner = TreeNode(2)
    pivot = TreeNode(3, left=inner, right=TreeNode(4), height=2)
    parent = TreeNode(1, right=pivot, height=3)

    new_root = _rotate_left(parent)

    assert new_root is pivot
    assert pivot.left is parent
    assert parent.right is inner
    assert (parent.height, pivot.height) == (2, 3)


def test_rotation_without_pivot_is_rejected() -> None:
    with pytest.raises(ValueError):
        _rotate_right(TreeNode(1))
    with pytest.raises(ValueError):
        _rotate_left(TreeNode(1))


def test_is_balanced_detects_skew_and_stale_heights() -> None:
    skewed = TreeNode(1, right=TreeNode(2, right=TreeNode(3), height=2), height=3)
    assert not is_balanced(skewed)

    stale = TreeNode(2, left=TreeNode(1), right=TreeNode(3), height=1)
    assert not is_balanced(stale)

    assert is_balanced(None)


def test_is_ordered_detects_misplaced_values() -> None:
    good = TreeNode(2, left=TreeNode(1), right=TreeNode(3), height=2)
    assert is_ordered(good)

    grandchild_too_large = TreeNode(
        5, left=TreeNode(3, right=TreeNode(6), height=2), height=3
    )
    assert not is_ordered(grandchild_too_large)

    equal_on_left = TreeNode(2, left=TreeNode(2), height=2)
    assert not is_ordered(equal_on_left)
    assert is_ordered(equal_on_left, strict_left=False)


def test_tree_node_rejects_invalid_height() -> None:
    with pytest.raises(ValueError):
        TreeNode(1, height=0)
    with pytest.raises(TypeError):
        TreeNode(1, height=True)

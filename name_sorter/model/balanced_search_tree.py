"""Iterative self-balancing binary search tree.

This module implements the tree used by the ``binary_tree`` sorting strategy.
Every algorithm in it is written with explicit stacks or queues instead of
recursion so that the depth of the input can never exhaust the interpreter's
call stack, even for sorted or reverse-sorted input.

The APIs provide:

* ``TreeNode`` – a ``@dataclass`` holding a value, optional children and the
  cached subtree height.
* ``BalancedSearchTree`` – a write-then-drain multiset with AVL rebalancing on
  insert and an explicit-stack in-order traversal.
* ``is_balanced`` / ``is_ordered`` – invariant checks used by tests and the
  CLI demonstration.
* ``render_tree`` – a level-by-level text view of a tree.

Values equal to a node's value are routed to its right subtree and are never
merged, so the in-order drain retains duplicates.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Deque,
    Generic,
    Iterator,
    List,
    Optional,
    Protocol,
    Tuple,
    TypeVar,
)

__all__ = [
    "BALANCE_THRESHOLD",
    "BalancedSearchTree",
    "SupportsLessThan",
    "TreeNode",
    "is_balanced",
    "is_ordered",
    "render_tree",
]

BALANCE_THRESHOLD = 1


class SupportsLessThan(Protocol):
    def __lt__(self, other: Any, /) -> bool: ...


T = TypeVar("T", bound=SupportsLessThan)


@dataclass(slots=True, eq=False)
class TreeNode(Generic[T]):
    """Node representation used by ``BalancedSearchTree``."""

    value: T
    left: Optional["TreeNode[T]"] = None
    right: Optional["TreeNode[T]"] = None
    height: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.height, int) or isinstance(self.height, bool):
            raise TypeError("TreeNode height must be an integer")
        if self.height < 1:
            raise ValueError("TreeNode height must be at least 1")


def _height(node: Optional[TreeNode[Any]]) -> int:
    return 0 if node is None else node.height


def _balance_factor(node: Optional[TreeNode[Any]]) -> int:
    """Left subtree height minus right subtree height (``0`` for ``None``)."""

    if node is None:
        return 0
    return _height(node.left) - _height(node.right)


def _update_height(node: TreeNode[Any]) -> None:
    node.height = 1 + max(_height(node.left), _height(node.right))


def _rotate_right(parent: TreeNode[T]) -> TreeNode[T]:
    """Rotate a left-heavy subtree and return its new root."""

    pivot = parent.left
    if pivot is None:
        raise ValueError("Cannot rotate right without a left child")
    parent.left = pivot.right
    pivot.right = parent
    # The demoted node sits below the pivot, so it must be refreshed first.
    _update_height(parent)
    _update_height(pivot)
    return pivot


def _rotate_left(parent: TreeNode[T]) -> TreeNode[T]:
    """Rotate a right-heavy subtree and return its new root."""

    pivot = parent.right
    if pivot is None:
        raise ValueError("Cannot rotate left without a right child")
    parent.right = pivot.left
    pivot.left = parent
    _update_height(parent)
    _update_height(pivot)
    return pivot


class BalancedSearchTree(Generic[T]):
    """AVL-balanced binary search tree with iterative insert and drain.

    The tree only supports insertion and in-order traversal.  It is not safe
    for concurrent use; a single caller owns it from construction to drain.
    """

    __slots__ = ("root", "_size")

    def __init__(self) -> None:
        self.root: Optional[TreeNode[T]] = None
        self._size = 0

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------
    def insert(self, value: T) -> None:
        """Insert *value*, rebalancing at most one subtree on the way up."""

        node: TreeNode[T] = TreeNode(value)
        self._size += 1
        if self.root is None:
            self.root = node
            return

        path: List[TreeNode[T]] = []
        current: Optional[TreeNode[T]] = self.root
        went_left = False
        while current is not None:
            path.append(current)
            went_left = value < current.value
            current = current.left if went_left else current.right

        leaf_parent = path[-1]
        if went_left:
            leaf_parent.left = node
        else:
            leaf_parent.right = node

        self._rebalance(path)

    def _rebalance(self, path: List[TreeNode[T]]) -> None:
        """Ascend *path* refreshing heights until the first rotation."""

        while path:
            ancestor = path.pop()
            _update_height(ancestor)
            balance = _balance_factor(ancestor)

            if balance > BALANCE_THRESHOLD:
                if _balance_factor(ancestor.left) < 0:
                    ancestor.left = _rotate_left(ancestor.left)  # type: ignore[arg-type]
                subtree_root = _rotate_right(ancestor)
            elif balance < -BALANCE_THRESHOLD:
                if _balance_factor(ancestor.right) > 0:
                    ancestor.right = _rotate_right(ancestor.right)  # type: ignore[arg-type]
                subtree_root = _rotate_left(ancestor)
            else:
                continue

            self._relink(path[-1] if path else None, ancestor, subtree_root)
            # A single rotation restores the subtree to its height before the
            # insert, so no ancestor above it can be out of balance.
            break

    def _relink(
        self,
        parent: Optional[TreeNode[T]],
        old_child: TreeNode[T],
        new_child: TreeNode[T],
    ) -> None:
        if parent is None:
            self.root = new_child
        elif parent.left is old_child:
            parent.left = new_child
        else:
            parent.right = new_child

    def iter_in_order(self) -> Iterator[T]:
        """Yield stored values in non-decreasing order."""

        stack: List[TreeNode[T]] = []
        current = self.root
        while current is not None or stack:
            while current is not None:
                stack.append(current)
                current = current.left
            current = stack.pop()
            yield current.value
            current = current.right

    def traverse_in_order(self) -> List[T]:
        """Return every stored value in sorted order without altering the tree."""

        return list(self.iter_in_order())

    def __iter__(self) -> Iterator[T]:
        return self.iter_in_order()

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self.root is not None

    @property
    def height(self) -> int:
        """Height of the whole tree (``0`` when empty)."""

        return _height(self.root)


def _post_order(root: Optional[TreeNode[T]]) -> Iterator[TreeNode[T]]:
    """Yield nodes children-first using an explicit stack."""

    stack: List[Tuple[TreeNode[T], bool]] = []
    if root is not None:
        stack.append((root, False))
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        stack.append((node, True))
        if node.right is not None:
            stack.append((node.right, False))
        if node.left is not None:
            stack.append((node.left, False))


def is_balanced(root: Optional[TreeNode[Any]]) -> bool:
    """Return ``True`` when every node satisfies the AVL height invariant.

    Cached ``height`` fields are checked against the heights recomputed from the
    children, so a stale height also counts as a violation.
    """

    actual: dict[int, int] = {}
    for node in _post_order(root):
        left = actual[id(node.left)] if node.left is not None else 0
        right = actual[id(node.right)] if node.right is not None else 0
        if abs(left - right) > BALANCE_THRESHOLD:
            return False
        height = 1 + max(left, right)
        if node.height != height:
            return False
        actual[id(node)] = height
    return True


def is_ordered(root: Optional[TreeNode[Any]], *, strict_left: bool = True) -> bool:
    """Return ``True`` when *root* satisfies the search-tree ordering.

    With ``strict_left`` every left descendant must be strictly less than its
    ancestor and every right descendant not less.  Rotations can move a value
    equal to its ancestor into the left subtree, so trees holding duplicates
    should be checked with ``strict_left=False``, which only requires left
    descendants to be not greater.
    """

    stack: List[Tuple[TreeNode[Any], Any, bool, Any, bool]] = []
    if root is not None:
        stack.append((root, None, False, None, False))
    while stack:
        node, low, has_low, high, has_high = stack.pop()
        value = node.value
        if has_low and value < low:
            return False
        if has_high:
            if strict_left and not value < high:
                return False
            if not strict_left and high < value:
                return False
        if node.left is not None:
            stack.append((node.left, low, has_low, value, True))
        if node.right is not None:
            stack.append((node.right, value, True, high, has_high))
    return True


def render_tree(
    root: Optional[TreeNode[T]],
    formatter: Callable[[T], str] = str,
) -> str:
    """Render *root* level-by-level, marking missing nodes with ``·``.

    The renderer stops once the next level would be empty, so the output
    contains no trailing placeholder-only rows.
    """

    if root is None:
        return "<empty>"

    lines: List[str] = []
    queue: Deque[Optional[TreeNode[T]]] = deque([root])

    while queue:
        level_count = len(queue)
        level_nodes: List[str] = []
        next_level_has_real_node = False
        for _ in range(level_count):
            node = queue.popleft()
            if node is None:
                level_nodes.append("·")
                queue.extend((None, None))
                continue

            level_nodes.append(formatter(node.value))
            queue.append(node.left)
            queue.append(node.right)
            if node.left is not None or node.right is not None:
                next_level_has_real_node = True

        lines.append(" ".join(level_nodes))
        if not next_level_has_real_node:
            break

    return "\n".join(lines)

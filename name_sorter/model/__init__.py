"""Ordering key and balanced search tree used by the sorting strategies."""

from .balanced_search_tree import (
    BalancedSearchTree,
    TreeNode,
    is_balanced,
    is_ordered,
    render_tree,
)
from .person_name import InvalidNameFormatError, PersonName

__all__ = [
    "BalancedSearchTree",
    "InvalidNameFormatError",
    "PersonName",
    "TreeNode",
    "is_balanced",
    "is_ordered",
    "render_tree",
]

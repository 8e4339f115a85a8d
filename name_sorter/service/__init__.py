"""File sorting service and its interchangeable strategies."""

from .sorting import (
    STRATEGIES,
    BinaryTreeSortingStrategy,
    CollectionSortingStrategy,
    NameSortingError,
    NameSortingStrategy,
    ParsedNames,
    SortingReport,
    get_strategy,
    parse_names,
    sort_names,
    sort_names_in_file,
)

__all__ = [
    "BinaryTreeSortingStrategy",
    "CollectionSortingStrategy",
    "NameSortingError",
    "NameSortingStrategy",
    "ParsedNames",
    "STRATEGIES",
    "SortingReport",
    "get_strategy",
    "parse_names",
    "sort_names",
    "sort_names_in_file",
]

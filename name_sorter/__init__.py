"""Sort full names by last name, then given names.

The package is split into the ordering key and balanced search tree
(:mod:`name_sorter.model`), the file sorting service
(:mod:`name_sorter.service`) and configuration loading
(:mod:`name_sorter.config`).  The command line entry point lives in the
top-level ``sort_names`` module.
"""

from __future__ import annotations

from .config import AppConfig, ConfigError, load_config
from .model import BalancedSearchTree, InvalidNameFormatError, PersonName
from .service import NameSortingError, SortingReport, get_strategy, sort_names_in_file

__all__ = [
    "AppConfig",
    "BalancedSearchTree",
    "ConfigError",
    "InvalidNameFormatError",
    "NameSortingError",
    "PersonName",
    "SortingReport",
    "get_strategy",
    "load_config",
    "sort_names_in_file",
]

"""File sorting service with interchangeable strategies.

The service reads one full name per line, skips blank and malformed lines with
a warning, orders the remaining names and writes them back out one per line.
Two strategies are available:

* ``binary_tree`` – inserts every name into a
  :class:`~name_sorter.model.BalancedSearchTree` and drains it in order.
* ``collection`` – collects the names and relies on :func:`sorted`.

``sort_names_in_file`` also captures read, write and total durations together
with the peak traced allocation so the strategies can be compared on the same
input.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
import time
import tracemalloc
from pathlib import Path
from typing import ClassVar, Dict, Iterable, List, Tuple, Type

from name_sorter.config import ConfigError
from name_sorter.model import BalancedSearchTree, InvalidNameFormatError, PersonName

logger = logging.getLogger(__name__)

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


class NameSortingError(RuntimeError):
    """Raised when names cannot be read from or written to disk."""


@dataclass(frozen=True)
class ParsedNames:
    """Names parsed from an input source and the number of lines skipped."""

    names: Tuple[PersonName, ...]
    skipped: int


def parse_names(lines: Iterable[str]) -> ParsedNames:
    """Parse *lines* into names, skipping blank and malformed entries."""

    names: List[PersonName] = []
    skipped = 0
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            logger.warning("Skipping empty line: %d", line_number)
            skipped += 1
            continue
        try:
            names.append(PersonName.parse(line))
        except InvalidNameFormatError as exc:
            logger.warning(
                "Skipping line: %d. Invalid name format: %s", line_number, exc
            )
            skipped += 1
    return ParsedNames(names=tuple(names), skipped=skipped)


class NameSortingStrategy(ABC):
    """Orders a batch of parsed names."""

    name: ClassVar[str]

    @abstractmethod
    def sort(self, names: Iterable[PersonName]) -> List[PersonName]:
        """Return *names* ordered by last name, then given names."""


class BinaryTreeSortingStrategy(NameSortingStrategy):
    name = "binary_tree"

    def sort(self, names: Iterable[PersonName]) -> List[PersonName]:
        tree: BalancedSearchTree[PersonName] = BalancedSearchTree()
        for person in names:
            tree.insert(person)
        logger.debug("Built tree with %d names and height %d", len(tree), tree.height)
        return tree.traverse_in_order()


class CollectionSortingStrategy(NameSortingStrategy):
    name = "collection"

    def sort(self, names: Iterable[PersonName]) -> List[PersonName]:
        return sorted(names)


STRATEGIES: Dict[str, Type[NameSortingStrategy]] = {
    BinaryTreeSortingStrategy.name: BinaryTreeSortingStrategy,
    CollectionSortingStrategy.name: CollectionSortingStrategy,
}


def get_strategy(name: str) -> NameSortingStrategy:
    """Instantiate the strategy registered under *name*."""

    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ConfigError(
            f"Unknown sorting strategy {name!r}; expected one of: {', '.join(STRATEGIES)}"
        ) from None


def sort_names(lines: Iterable[str], strategy: NameSortingStrategy) -> List[PersonName]:
    """Parse *lines* and return the valid names in sorted order."""

    return strategy.sort(parse_names(lines).names)


@dataclass(frozen=True)
class SortingReport:
    """Outcome and performance metrics of a ``sort_names_in_file`` run."""

    strategy: str
    input_path: Path
    output_path: Path
    names_sorted: int
    lines_skipped: int
    read_seconds: float
    write_seconds: float
    total_seconds: float
    peak_bytes: int
    sorted_names: Tuple[str, ...] = field(default_factory=tuple, repr=False)

    def to_dict(self) -> dict[str, object]:
        return {
            "strategy": self.strategy,
            "input_path": str(self.input_path),
            "output_path": str(self.output_path),
            "names_sorted": self.names_sorted,
            "lines_skipped": self.lines_skipped,
            "read_seconds": self.read_seconds,
            "write_seconds": self.write_seconds,
            "total_seconds": self.total_seconds,
            "peak_bytes": self.peak_bytes,
            "sorted_names": list(self.sorted_names),
        }


def _read_lines(path: Path) -> List[str]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return handle.read().splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Error reading file: %s", exc)
        raise NameSortingError(f"Failed to read names from file: {path}") from exc


def _write_lines(path: Path, lines: Iterable[str]) -> None:
    # A failed write leaves any existing output untouched.
    staging = path.with_name(path.name + ".tmp")
    try:
        with staging.open("w", encoding="utf-8", newline="\n") as handle:
            for line in lines:
                handle.write(line)
                handle.write("\n")
        staging.replace(path)
    except OSError as exc:
        logger.error("Error writing file: %s", exc)
        if staging.exists():
            staging.unlink()
        raise NameSortingError(f"Failed to write sorted names to file: {path}") from exc


def sort_names_in_file(
    input_path: Path,
    output_path: Path,
    *,
    strategy: NameSortingStrategy | None = None,
) -> SortingReport:
    """Sort the names in *input_path* and write them to *output_path*.

    Parsing and ordering are timed together as the read phase; rendering and
    writing make up the write phase.
    """

    if strategy is None:
        strategy = BinaryTreeSortingStrategy()
    input_path = Path(input_path)
    output_path = Path(output_path)

    already_tracing = tracemalloc.is_tracing()
    if not already_tracing:
        tracemalloc.start()
    try:
        tracemalloc.reset_peak()
        start = time.perf_counter()

        logger.info("Reading names from file: %s", input_path)
        read_start = time.perf_counter()
        parsed = parse_names(_read_lines(input_path))
        ordered = strategy.sort(parsed.names)
        read_seconds = time.perf_counter() - read_start

        logger.info("Writing sorted names to file: %s", output_path)
        rendered = tuple(person.render() for person in ordered)
        write_start = time.perf_counter()
        _write_lines(output_path, rendered)
        write_seconds = time.perf_counter() - write_start

        total_seconds = time.perf_counter() - start
        _current, peak = tracemalloc.get_traced_memory()
    finally:
        if not already_tracing:
            tracemalloc.stop()

    report = SortingReport(
        strategy=strategy.name,
        input_path=input_path,
        output_path=output_path,
        names_sorted=len(rendered),
        lines_skipped=parsed.skipped,
        read_seconds=read_seconds,
        write_seconds=write_seconds,
        total_seconds=total_seconds,
        peak_bytes=peak,
        sorted_names=rendered,
    )
    _log_metrics(report)
    return report


def _log_metrics(report: SortingReport) -> None:
    if not logger.isEnabledFor(logging.INFO):
        return
    logger.info("########### START OF PERFORMANCE METRICS ###########")
    logger.info(
        "PERFORMANCE: Read %d names in %.3f ms (%d lines skipped)",
        report.names_sorted,
        report.read_seconds * 1_000,
        report.lines_skipped,
    )
    logger.info("PERFORMANCE: Wrote sorted names in %.3f ms", report.write_seconds * 1_000)
    logger.info(
        "PERFORMANCE: Entire process completed in %.3f ms", report.total_seconds * 1_000
    )
    logger.info("PERFORMANCE: Peak traced memory %d bytes", report.peak_bytes)
    logger.info("########### END OF PERFORMANCE METRICS ###########")

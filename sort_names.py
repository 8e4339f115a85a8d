"""Command line tool for sorting a file of full names.

The input file holds one full name per line: one to three given names followed
by a last name.  Names are sorted by last name and then by given names and are
written to the output file and echoed to stdout, one per line.  Blank and
malformed lines are skipped with a warning.

Paths and the sorting strategy come from the configuration file (``--config``)
and may be overridden on the command line::

    python sort_names.py ./unsorted-names-list.txt ./sorted-names-list.txt

``--metrics`` prints a summary table of the run's timings and memory use and
``--show-tree`` renders a balanced tree of the sorted names.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
import sys
from typing import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from name_sorter.config import LOG_LEVELS, STRATEGY_NAMES, AppConfig, ConfigError, load_config
from name_sorter.model import BalancedSearchTree, PersonName, render_tree
from name_sorter.service import (
    NameSortingError,
    SortingReport,
    get_strategy,
    sort_names_in_file,
)

logger = logging.getLogger("sort_names")

console = Console(stderr=True)


class InputPathError(ValueError):
    """Raised when the input path does not point to a readable file."""


class OutputPathError(ValueError):
    """Raised when the output path cannot be written."""


def _structural_error(path: Path) -> str | None:
    if "\x00" in str(path):
        return f"Structural path error: path contains a null byte: {path!r}"
    return None


def _validate_input_path(path: Path) -> None:
    error = _structural_error(path)
    if error is not None:
        raise InputPathError(error)
    if not path.exists():
        raise InputPathError(f"Input file not found: {path}")
    if not path.is_file() or not os.access(path, os.R_OK):
        raise InputPathError(f"Input path is not a Readable file: {path}")


def _prepare_output_path(path: Path) -> None:
    """Create the output's parent directory and confirm it can be written."""

    error = _structural_error(path)
    if error is not None:
        raise OutputPathError(error)
    if path.is_dir():
        raise OutputPathError(f"Output path is a directory: {path}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputPathError(f"Output path is not writable: {path}; Error: {exc}") from exc

    target = path if path.exists() else path.parent
    if not os.access(target, os.W_OK):
        raise OutputPathError(f"Output path is not writable: {path}")


def _render_metrics(report: SortingReport) -> None:
    """Print a Rich table summarising the run."""

    table = Table(title="Name Sorting Metrics")
    table.add_column("Metric", justify="left")
    table.add_column("Value", justify="right")
    table.add_row("Strategy", report.strategy)
    table.add_row("Names sorted", str(report.names_sorted))
    table.add_row("Lines skipped", str(report.lines_skipped))
    table.add_row("Read + sort (ms)", f"{report.read_seconds * 1_000:.3f}")
    table.add_row("Write (ms)", f"{report.write_seconds * 1_000:.3f}")
    table.add_row("Total (ms)", f"{report.total_seconds * 1_000:.3f}")
    table.add_row("Peak memory (KiB)", f"{report.peak_bytes / 1024:.1f}")
    console.print(table)


def _render_tree_panel(report: SortingReport) -> None:
    tree = BalancedSearchTree()
    for line in report.sorted_names:
        tree.insert(PersonName.parse(line))
    rendered = render_tree(tree.root, formatter=lambda person: person.last_name)
    console.print(
        Panel.fit(
            Text(rendered),
            title=f"Balanced tree ({len(tree)} names, height {tree.height})",
            border_style="cyan",
        )
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sort a file of full names by last name, then given names.",
    )
    parser.add_argument(
        "input_file",
        nargs="?",
        type=Path,
        help="File with one full name per line. Overrides app.input.file.",
    )
    parser.add_argument(
        "output_file",
        nargs="?",
        type=Path,
        help="Destination for the sorted names. Overrides app.output.file.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML or JSON configuration file.",
    )
    parser.add_argument(
        "--strategy",
        choices=STRATEGY_NAMES,
        default=None,
        help="Sorting strategy. Overrides app.service.type (default: binary_tree).",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Logging verbosity. Overrides app.log_level (default: INFO).",
    )
    parser.add_argument(
        "--output-format",
        choices=("text", "json"),
        default="text",
        help="Print sorted names as plain lines or the full report as JSON.",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Print a table of timings and memory usage to stderr.",
    )
    parser.add_argument(
        "--show-tree",
        action="store_true",
        help="Render a balanced tree of the sorted names to stderr.",
    )
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config).with_overrides(
            input_file=args.input_file,
            output_file=args.output_file,
            strategy=args.strategy,
            log_level=args.log_level,
        )
    except ConfigError as error:
        _configure_logging(args.log_level or "WARNING")
        logger.error("Invalid configuration: %s", error)
        return 2

    _configure_logging(config.log_level)
    logger.info("Running name sorter... Started")
    logger.info("Input file path: %s", config.input_file)
    logger.info("Output file path: %s", config.output_file)

    try:
        _validate_input_path(config.input_file)
        _prepare_output_path(config.output_file)
    except (InputPathError, OutputPathError) as error:
        logger.error("%s", error)
        return 1

    try:
        report = sort_names_in_file(
            config.input_file,
            config.output_file,
            strategy=get_strategy(config.strategy),
        )
    except NameSortingError as error:
        logger.error("%s", error)
        return 1

    if args.output_format == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        for line in report.sorted_names:
            print(line)

    if args.metrics:
        _render_metrics(report)
    if args.show_tree:
        _render_tree_panel(report)

    logger.info("Running name sorter... Ended")
    return 0


if __name__ == "__main__":  # pragma: no cover - exercised via CLI
    sys.exit(main())

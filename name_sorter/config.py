"""Application configuration for the name sorter.

Configuration files use the same layout as the application properties of the
service this tool replaces::

    app:
      input:
        file: unsorted-names-list.txt
      output:
        file: sorted-names-list.txt
      service:
        type: binary_tree
      log_level: INFO

YAML (``.yaml``/``.yml``) and JSON (``.json``) files are supported.  Missing
keys fall back to the defaults declared on :class:`AppConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

__all__ = [
    "AppConfig",
    "ConfigError",
    "DEFAULT_INPUT_FILE",
    "DEFAULT_OUTPUT_FILE",
    "DEFAULT_STRATEGY",
    "LOG_LEVELS",
    "STRATEGY_NAMES",
    "load_config",
]

DEFAULT_INPUT_FILE = Path("unsorted-names-list.txt")
DEFAULT_OUTPUT_FILE = Path("sorted-names-list.txt")
DEFAULT_STRATEGY = "binary_tree"
STRATEGY_NAMES: tuple[str, ...] = ("binary_tree", "collection")
LOG_LEVELS: tuple[str, ...] = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigError(ValueError):
    """Raised when configuration cannot be loaded or contains invalid values."""


@dataclass(frozen=True)
class AppConfig:
    """Resolved settings for a sorting run."""

    input_file: Path = DEFAULT_INPUT_FILE
    output_file: Path = DEFAULT_OUTPUT_FILE
    strategy: str = DEFAULT_STRATEGY
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGY_NAMES:
            raise ConfigError(
                f"Unknown sorting strategy {self.strategy!r}; "
                f"expected one of: {', '.join(STRATEGY_NAMES)}"
            )
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level {self.log_level!r}")

    def with_overrides(
        self,
        *,
        input_file: Optional[Path] = None,
        output_file: Optional[Path] = None,
        strategy: Optional[str] = None,
        log_level: Optional[str] = None,
    ) -> "AppConfig":
        """Return a copy with every non-``None`` override applied."""

        changes: dict[str, Any] = {}
        if input_file is not None:
            changes["input_file"] = Path(input_file)
        if output_file is not None:
            changes["output_file"] = Path(output_file)
        if strategy is not None:
            changes["strategy"] = strategy
        if log_level is not None:
            changes["log_level"] = log_level
        return replace(self, **changes)


def _read_payload(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Unable to read configuration file {path}: {exc}") from exc

    suffix = path.suffix.lower()
    if suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Configuration file {path} is not valid JSON") from exc
    if suffix in {".yaml", ".yml"}:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Configuration file {path} is not valid YAML") from exc
    raise ConfigError(
        f"Unsupported configuration format {path.suffix!r}; use .json, .yaml or .yml"
    )


def _section(mapping: Mapping[str, Any], key: str, *, where: str) -> Mapping[str, Any]:
    value = mapping.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"'{where}.{key}' must be a mapping")
    return value


def _string(mapping: Mapping[str, Any], key: str, *, where: str) -> Optional[str]:
    value = mapping.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{where}.{key}' must be a non-empty string")
    return value.strip()


def load_config(path: Optional[Path | str] = None) -> AppConfig:
    """Load configuration from *path*, returning defaults when it is ``None``."""

    if path is None:
        return AppConfig()

    config_path = Path(path)
    payload = _read_payload(config_path)
    if payload is None:
        logger.debug("Configuration file %s is empty; using defaults", config_path)
        return AppConfig()
    if not isinstance(payload, Mapping):
        raise ConfigError("Configuration root must be a mapping")

    app = _section(payload, "app", where="<root>")
    input_file = _string(_section(app, "input", where="app"), "file", where="app.input")
    output_file = _string(
        _section(app, "output", where="app"), "file", where="app.output"
    )
    strategy = _string(_section(app, "service", where="app"), "type", where="app.service")
    log_level = _string(app, "log_level", where="app")

    config = AppConfig().with_overrides(
        input_file=Path(input_file) if input_file else None,
        output_file=Path(output_file) if output_file else None,
        strategy=strategy,
        log_level=log_level.upper() if log_level else None,
    )
    logger.debug("Loaded configuration from %s: %s", config_path, config)
    return config

"""
Configuration loading for slocount.

A single TOML file can carry three kinds of settings:

- `[performance]`: worker count and metrics logging.
- `[defaults]`: default CLI behaviour (recursion, progress, output format).
- `[languages.<key>]`: additional or overriding language grammars.

Application settings are forgiving (a broken file falls back to defaults with
a warning) while language definitions are strict: a single malformed entry
rejects the whole set with ConfigInvalidError so the registry is never left
half-merged.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping
import tomllib

from rich import print as pr
import structlog

from constants import DEFAULT_METRICS_FILE, DEFAULT_OUTPUT_FILE_BASE
from core.exceptions import ConfigInvalidError
from core.models import Language
from models import LanguageDefinition, OutputFormat

log = structlog.get_logger("slocount.config")

_APP_SECTIONS = frozenset({"performance", "defaults", "languages"})


@dataclass
class PerformanceConfig:
    default_threads: int = 0
    enable_metrics: bool = False
    metrics_file: str = DEFAULT_METRICS_FILE


@dataclass
class DefaultsConfig:
    recursive: bool = False
    no_progress: bool = False
    output_format: OutputFormat = OutputFormat.JSON
    output_file: str = DEFAULT_OUTPUT_FILE_BASE


@dataclass
class AppConfig:
    """
    Application settings read from the `[performance]` and `[defaults]` tables.

    Attributes:
        performance: Worker pool and metrics settings.
        defaults: Default values for CLI flags not given on the command line.
    """

    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def from_file(cls, path: Path) -> "AppConfig":
        """
        Load application settings from a TOML file.

        Unknown keys are ignored; missing keys keep their defaults.

        Args:
            path: Path to the TOML configuration file.

        Returns:
            The parsed AppConfig.

        Raises:
            ConfigInvalidError: If the file cannot be read or parsed, or a value
                has the wrong type.
        """
        data = read_toml(path)
        performance = _table(data, "performance")
        defaults = _table(data, "defaults")

        try:
            output_format = OutputFormat(
                str(defaults.get("output_format", OutputFormat.JSON)).lower()
            )
        except ValueError as e:
            raise ConfigInvalidError(
                message=f"Invalid output_format in {path}: {defaults.get('output_format')}",
                original_exception=e,
            ) from e

        return cls(
            performance=PerformanceConfig(
                default_threads=_typed(performance, "default_threads", int, 0),
                enable_metrics=_typed(performance, "enable_metrics", bool, False),
                metrics_file=_typed(
                    performance, "metrics_file", str, DEFAULT_METRICS_FILE
                ),
            ),
            defaults=DefaultsConfig(
                recursive=_typed(defaults, "recursive", bool, False),
                no_progress=_typed(defaults, "no_progress", bool, False),
                output_format=output_format,
                output_file=_typed(
                    defaults, "output_file", str, DEFAULT_OUTPUT_FILE_BASE
                ),
            ),
        )

    @classmethod
    def with_cli_overrides(
        cls,
        config_path: Path | None,
        enable_metrics: bool = False,
        metrics_file: Path | None = None,
    ) -> "AppConfig":
        """
        Build the effective settings: file values first, CLI flags on top.

        A configuration file that cannot be loaded is not fatal here; defaults
        are used and a warning is printed. Language definitions in the same file
        are validated separately (and strictly) by `load_language_config`.

        Args:
            config_path: Optional path to a TOML configuration file.
            enable_metrics: True if `--enable-metrics` was passed.
            metrics_file: Value of `--metrics-file`, if passed.

        Returns:
            The effective AppConfig.
        """
        config = cls()
        if config_path is not None:
            try:
                config = cls.from_file(config_path)
            except ConfigInvalidError as e:
                log.warning("config.app_settings_ignored", path=str(config_path))
                pr(
                    f"[yellow]⚠ Warning:[/yellow] Could not load settings from "
                    f"{config_path}, using defaults ({e.message})"
                )

        if enable_metrics:
            config.performance.enable_metrics = True
        if metrics_file is not None:
            config.performance.metrics_file = str(metrics_file)

        return config


def read_toml(path: Path) -> dict[str, Any]:
    """
    Read and parse a TOML file.

    Raises:
        ConfigInvalidError: If the file cannot be read or is not valid TOML.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ConfigInvalidError(
            message=f"Cannot read configuration file: {path}",
            original_exception=e,
        ) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigInvalidError(
            message=f"Invalid TOML in {path}: {e}",
            original_exception=e,
        ) from e


def load_language_config(path: Path) -> dict[str, Language]:
    """
    Load the language definitions declared in a TOML configuration file.

    Definitions are read from `[languages.<key>]` tables. Top-level tables that
    look like a language definition (carrying both `name` and `extensions`) are
    accepted as well.

    Args:
        path: Path to the TOML configuration file.

    Returns:
        Mapping of registry key to Language, in file order.

    Raises:
        ConfigInvalidError: If the file is unreadable, is not valid TOML, or any
            definition is malformed.
    """
    data = read_toml(path)
    raw: dict[str, Any] = {}

    languages = data.get("languages", {})
    if not isinstance(languages, dict):
        raise ConfigInvalidError(message=f"'languages' must be a table in {path}")
    raw.update(languages)

    for key, value in data.items():
        if key in _APP_SECTIONS:
            continue
        if isinstance(value, dict) and "name" in value and "extensions" in value:
            raw[key] = value

    return parse_language_definitions(raw)


def parse_language_definitions(raw: Mapping[str, Any]) -> dict[str, Language]:
    """
    Validate and convert raw language definitions.

    Every entry is validated before any is converted, so a single bad entry
    rejects the whole mapping.

    Args:
        raw: Mapping of registry key to an already-deserialized definition table.

    Returns:
        Mapping of registry key to Language.

    Raises:
        ConfigInvalidError: If any definition is malformed.
    """
    definitions = {key: _validate_definition(key, value) for key, value in raw.items()}
    return {key: Language.from_definition(d) for key, d in definitions.items()}


def _validate_definition(key: str, value: Any) -> LanguageDefinition:
    if not isinstance(value, Mapping):
        raise ConfigInvalidError(message=f"Language '{key}' must be a table")

    name = value.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigInvalidError(message=f"Language '{key}' needs a non-empty 'name'")

    extensions = _string_list(key, value, "extensions")
    single = _string_list(key, value, "single_line_comment", required=False)

    pairs: list[tuple[str, str]] = []
    for pair in value.get("multi_line_comment", []) or []:
        if isinstance(pair, Mapping):
            start, end = pair.get("start"), pair.get("end")
        elif isinstance(pair, (list, tuple)) and len(pair) == 2:
            start, end = pair
        else:
            raise ConfigInvalidError(
                message=f"Language '{key}': multi_line_comment entries must be "
                "{start, end} tables or [start, end] pairs"
            )
        if not isinstance(start, str) or not isinstance(end, str) or not start or not end:
            raise ConfigInvalidError(
                message=f"Language '{key}': multi_line_comment markers must be non-empty strings"
            )
        pairs.append((start, end))

    nested = value.get("nested_comments", False)
    if not isinstance(nested, bool):
        raise ConfigInvalidError(
            message=f"Language '{key}': 'nested_comments' must be a boolean"
        )

    prefix = value.get("preprocessor_prefix")
    if prefix is not None and (not isinstance(prefix, str) or not prefix):
        raise ConfigInvalidError(
            message=f"Language '{key}': 'preprocessor_prefix' must be a non-empty string"
        )

    return {
        "name": name,
        "extensions": extensions,
        "single_line_comment": single,
        "multi_line_comment": pairs,
        "nested_comments": nested,
        "preprocessor_prefix": prefix,
    }


def _string_list(
    key: str, value: Mapping[str, Any], field_name: str, required: bool = True
) -> list[str]:
    items = value.get(field_name)
    if items is None and not required:
        return []
    if not isinstance(items, list) or not all(
        isinstance(item, str) and item for item in items
    ):
        raise ConfigInvalidError(
            message=f"Language '{key}': '{field_name}' must be a list of non-empty strings"
        )
    return items


def _table(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    table = data.get(name, {})
    if not isinstance(table, Mapping):
        raise ConfigInvalidError(message=f"[{name}] must be a table")
    return table


def _typed(table: Mapping[str, Any], key: str, expected: type, default: Any) -> Any:
    value = table.get(key, default)
    # bool is a subclass of int; keep `threads = true` from passing as 1
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ConfigInvalidError(
            message=f"'{key}' must be of type {expected.__name__}, got {type(value).__name__}"
        )
    return value

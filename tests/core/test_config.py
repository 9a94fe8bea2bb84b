"""
Tests for the config module.

Tests cover:
- AppConfig.from_file: performance and defaults tables, type checks
- AppConfig.with_cli_overrides: CLI flags on top, fallback on broken files
- load_language_config / parse_language_definitions: validation rules
"""

import pytest

from constants import DEFAULT_METRICS_FILE
from core.config import (
    AppConfig,
    DefaultsConfig,
    PerformanceConfig,
    load_language_config,
    parse_language_definitions,
)
from core.exceptions import ConfigInvalidError
from models import OutputFormat


@pytest.fixture
def write_config(tmp_path):
    """Write TOML text to a config file and return its path."""

    def _write(text: str):
        path = tmp_path / "sloc.toml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write


# ============================================================================
# Tests for AppConfig
# ============================================================================


@pytest.mark.unit
def test_from_file_reads_tables(write_config):
    """Both tables should be parsed into their dataclasses."""
    path = write_config(
        """
[performance]
default_threads = 4
enable_metrics = true
metrics_file = "perf.log"

[defaults]
recursive = true
output_format = "XML"
"""
    )

    config = AppConfig.from_file(path)

    assert config.performance == PerformanceConfig(4, True, "perf.log")
    assert config.defaults.recursive is True
    assert config.defaults.no_progress is False
    assert config.defaults.output_format is OutputFormat.XML


@pytest.mark.unit
def test_from_file_empty_uses_defaults(write_config):
    """An empty file should give the default settings."""
    config = AppConfig.from_file(write_config(""))

    assert config == AppConfig()
    assert config.performance.metrics_file == DEFAULT_METRICS_FILE
    assert config.defaults == DefaultsConfig()


@pytest.mark.unit
@pytest.mark.parametrize(
    "text",
    [
        "[performance]\ndefault_threads = true\n",
        "[performance]\ndefault_threads = \"4\"\n",
        "[defaults]\noutput_format = \"yaml\"\n",
        "performance = 3\n",
        "[performance\n",
    ],
)
def test_from_file_rejects_invalid(write_config, text):
    """Wrong types, unknown formats and bad TOML should be rejected."""
    with pytest.raises(ConfigInvalidError):
        AppConfig.from_file(write_config(text))


@pytest.mark.unit
def test_with_cli_overrides_flags_win(write_config, tmp_path):
    """CLI metrics flags should override the file."""
    path = write_config("[performance]\nmetrics_file = \"from-file.log\"\n")

    config = AppConfig.with_cli_overrides(
        path, enable_metrics=True, metrics_file=tmp_path / "cli.log"
    )

    assert config.performance.enable_metrics is True
    assert config.performance.metrics_file == str(tmp_path / "cli.log")


@pytest.mark.unit
@pytest.mark.mock
def test_with_cli_overrides_broken_file_falls_back(write_config, mocker):
    """A broken file should warn and fall back to defaults."""
    mock_pr = mocker.patch("core.config.pr")

    config = AppConfig.with_cli_overrides(write_config("[performance\n"))

    assert config == AppConfig()
    mock_pr.assert_called_once()


@pytest.mark.unit
def test_with_cli_overrides_without_file():
    """No config path should mean defaults."""
    assert AppConfig.with_cli_overrides(None) == AppConfig()


# ============================================================================
# Tests for language definitions
# ============================================================================


@pytest.mark.unit
def test_load_language_config_top_level_tables(write_config):
    """Top-level tables shaped like a language should be accepted."""
    path = write_config(
        """
[defaults]
recursive = true

[kotlin]
name = "Kotlin"
extensions = [".kt", "kts"]
single_line_comment = ["//"]
multi_line_comment = [{ start = "/*", end = "*/" }]
nested_comments = true
"""
    )

    languages = load_language_config(path)

    assert list(languages) == ["kotlin"]
    kotlin = languages["kotlin"]
    assert kotlin.extensions == frozenset({"kt", "kts"})
    assert kotlin.multi_line_markers == (("/*", "*/"),)
    assert kotlin.nested is True


@pytest.mark.unit
def test_parse_language_definitions_optional_fields():
    """Comment markers and flags should be optional."""
    languages = parse_language_definitions(
        {"txt": {"name": "Text", "extensions": ["txt"]}}
    )

    text = languages["txt"]
    assert text.single_line_markers == ()
    assert text.multi_line_markers == ()
    assert text.nested is False
    assert text.preprocessor_prefix is None


@pytest.mark.unit
@pytest.mark.parametrize(
    "definition",
    [
        "not a table",
        {"extensions": ["x"]},
        {"name": "  ", "extensions": ["x"]},
        {"name": "X"},
        {"name": "X", "extensions": ["x", ""]},
        {"name": "X", "extensions": ["x"], "single_line_comment": "#"},
        {"name": "X", "extensions": ["x"], "multi_line_comment": [["/*"]]},
        {"name": "X", "extensions": ["x"], "multi_line_comment": [["/*", ""]]},
        {"name": "X", "extensions": ["x"], "nested_comments": "yes"},
        {"name": "X", "extensions": ["x"], "preprocessor_prefix": ""},
    ],
)
def test_parse_language_definitions_rejects(definition):
    """Malformed definitions should raise ConfigInvalidError."""
    with pytest.raises(ConfigInvalidError):
        parse_language_definitions({"x": definition})


@pytest.mark.unit
def test_parse_language_definitions_all_or_nothing():
    """One bad entry should reject the entries before it too."""
    with pytest.raises(ConfigInvalidError):
        parse_language_definitions(
            {
                "good": {"name": "Good", "extensions": ["g"]},
                "bad": {"name": "Bad"},
            }
        )

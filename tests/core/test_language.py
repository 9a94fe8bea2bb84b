"""
Tests for the language module.

Tests cover:
- LanguageDetector: built-in registry, detection by extension
- add_language: replacement and extension relinking
- add_override: precedence over the extension map, name fallback
- load_from_config: merging TOML definitions, all-or-nothing failure
"""

from pathlib import Path

import pytest

from constants import BUILTIN_LANGUAGES
from core.exceptions import ConfigInvalidError
from core.language import LanguageDetector
from core.models import Language


# ============================================================================
# Tests for detection
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "path, expected",
    [
        ("src/main.rs", "Rust"),
        ("lib/util.h", "C"),
        ("lib/util.hpp", "C++"),
        ("app/run.py", "Python"),
        ("web/index.ts", "TypeScript"),
        ("Main.java", "Java"),
        ("db/schema.sql", "SQL"),
        ("deploy.sh", "Shell"),
    ],
)
def test_detect_builtin_extensions(detector, path, expected):
    """Built-in extensions should resolve to their language."""
    language = detector.detect(Path(path))

    assert language is not None
    assert language.name == expected


@pytest.mark.unit
@pytest.mark.parametrize("path", ["Makefile", "notes.txt", "archive.tar.unknown", ".rs/"])
def test_detect_unknown(detector, path):
    """Paths without a known final extension should not resolve."""
    assert detector.detect(path) is None


@pytest.mark.unit
def test_detect_uses_final_suffix_only(detector):
    """Only the last suffix should be considered."""
    assert detector.detect("backup.rs.txt") is None
    assert detector.detect("gen.txt.rs").name == "Rust"


@pytest.mark.unit
def test_builtin_registry_is_complete(detector):
    """Every built-in definition should be registered under its key."""
    assert set(detector.languages) == set(BUILTIN_LANGUAGES)
    assert detector.languages["rust"].nested is True
    assert detector.languages["c"].preprocessor_prefix == "#"


@pytest.mark.unit
def test_empty_registry():
    """load_defaults=False should start without languages."""
    detector = LanguageDetector(load_defaults=False)

    assert detector.languages == {}
    assert detector.detect("main.rs") is None


# ============================================================================
# Tests for add_language
# ============================================================================


@pytest.mark.unit
def test_add_language_registers_extensions():
    """A new language should be detectable by each of its extensions."""
    detector = LanguageDetector(load_defaults=False)
    zig = Language(name="Zig", extensions=frozenset({"zig", "zon"}))

    detector.add_language("zig", zig)

    assert detector.detect("build.zig") is zig
    assert detector.detect("build.zon") is zig


@pytest.mark.unit
def test_add_language_replaces_by_key(detector):
    """Registering an existing key should replace the language."""
    custom = Language(name="Rust (custom)", extensions=frozenset({"rs"}))

    detector.add_language("rust", custom)

    assert detector.languages["rust"] is custom
    assert detector.detect("main.rs") is custom


@pytest.mark.unit
def test_add_language_last_extension_claim_wins(detector):
    """A later language claiming an extension should take it over."""
    header = Language(name="Header", extensions=frozenset({"h"}))

    detector.add_language("header", header)

    assert detector.detect("x.h") is header
    # C keeps its other extension
    assert detector.detect("x.c").name == "C"


# ============================================================================
# Tests for add_override
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize("extension", ["h", ".h"])
def test_override_by_key(detector, extension):
    """An override should beat the extension map, with or without a dot."""
    detector.add_override(extension, "cpp")

    assert detector.detect("x.h").name == "C++"


@pytest.mark.unit
def test_override_by_display_name(detector):
    """An override target may be a display name, matched case-insensitively."""
    detector.add_override("inc", "c++")

    assert detector.detect("x.inc").name == "C++"


@pytest.mark.unit
def test_override_to_missing_language_fails(detector):
    """An override to an unknown language should not fall back."""
    detector.add_override("rs", "cobol")

    assert detector.detect("main.rs") is None


# ============================================================================
# Tests for load_from_config
# ============================================================================


@pytest.mark.unit
def test_load_from_config_adds_and_replaces(detector, tmp_path):
    """Config languages should be merged into the registry by key."""
    config = tmp_path / "sloc.toml"
    config.write_text(
        """
[languages.zig]
name = "Zig"
extensions = ["zig"]
single_line_comment = ["//"]

[languages.python]
name = "Python"
extensions = ["py", "pyw"]
single_line_comment = ["#"]
multi_line_comment = [["\\"\\"\\"", "\\"\\"\\""]]
""",
        encoding="utf-8",
    )

    detector.load_from_config(config)

    assert detector.detect("a.zig").name == "Zig"
    assert detector.detect("a.pyw").name == "Python"
    assert detector.languages["python"].multi_line_markers == (('"""', '"""'),)
    assert "rust" in detector.languages


@pytest.mark.unit
def test_load_from_config_invalid_leaves_registry_unchanged(detector, tmp_path):
    """A single bad definition should reject the whole file."""
    config = tmp_path / "sloc.toml"
    config.write_text(
        """
[languages.zig]
name = "Zig"
extensions = ["zig"]

[languages.broken]
name = "Broken"
extensions = "not-a-list"
""",
        encoding="utf-8",
    )
    before = dict(detector.languages)

    with pytest.raises(ConfigInvalidError):
        detector.load_from_config(config)

    assert detector.languages == before
    assert detector.detect("a.zig") is None


@pytest.mark.unit
def test_load_from_config_missing_file(detector, tmp_path):
    """A missing configuration file should raise ConfigInvalidError."""
    with pytest.raises(ConfigInvalidError):
        detector.load_from_config(tmp_path / "missing.toml")

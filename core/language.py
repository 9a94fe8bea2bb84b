"""Language registry and extension-based language detection.

The detector owns three tables:

- the registry, mapping a registry key (e.g. "rust") to its Language;
- the extension map, derived from the registry and relinked on every
  registration;
- the override map, filled from explicit `ext=key` overrides.

Overrides always win over the extension map. The detector is mutated only while
it is being set up (built-ins, configuration, overrides) and is then shared
read-only by the counting workers.
"""

from pathlib import Path
from typing import Mapping

import structlog

from constants import BUILTIN_LANGUAGES
from core.config import load_language_config
from core.models import Language

log = structlog.get_logger("slocount.language")


class LanguageDetector:
    """
    Resolves file paths to Language grammars.

    Attributes:
        languages: Registry of key -> Language (read-only view intended).
    """

    def __init__(self, load_defaults: bool = True):
        """
        Create a detector.

        Args:
            load_defaults: If True (default), register the built-in languages.
                Tests pass False to start from an empty registry.
        """
        self.languages: dict[str, Language] = {}
        self._extension_map: dict[str, str] = {}
        self._overrides: dict[str, str] = {}

        if load_defaults:
            for key, definition in BUILTIN_LANGUAGES.items():
                self.add_language(key, Language.from_definition(definition))

    def add_language(self, key: str, language: Language) -> None:
        """
        Register (or replace) the language stored under `key`.

        Every extension the language declares is relinked to `key`. When two
        keys declare the same extension, the last registration wins for that
        extension.

        Args:
            key: Registry key, also the target of extension overrides.
            language: The grammar to register.
        """
        for ext in language.extensions:
            previous = self._extension_map.get(ext)
            if previous is not None and previous != key:
                log.debug(
                    "language.extension_relinked",
                    extension=ext,
                    previous=previous,
                    current=key,
                )
            self._extension_map[ext] = key
        self.languages[key] = language

    def load_languages(self, languages: Mapping[str, Language]) -> None:
        """Register every (key, language) pair, in mapping order."""
        for key, language in languages.items():
            self.add_language(key, language)

    def load_from_config(self, config_path: Path) -> None:
        """
        Merge the language definitions of a TOML configuration file.

        The whole file is validated before anything is registered.

        Args:
            config_path: Path to the TOML configuration file.

        Raises:
            ConfigInvalidError: If the file or any definition in it is invalid.
                The registry is left unchanged in that case.
        """
        self.load_languages(load_language_config(config_path))

    def add_override(self, extension: str, language: str) -> None:
        """
        Force files with `extension` to be classified as `language`.

        The target is not validated here; an override pointing at an unknown
        language makes detection fail for that extension.

        Args:
            extension: File extension, with or without the leading dot.
            language: Registry key of the target language (a display name is
                accepted as a fallback at detection time).
        """
        self._overrides[_normalize_extension(extension)] = language

    def detect(self, path: Path | str) -> Language | None:
        """
        Resolve a path to its Language.

        Resolution order:
            1. An override for the path's extension. If its target is not
               registered, detection fails; there is no fallback to the
               extension map.
            2. The derived extension map.

        Args:
            path: File path; only its final suffix is looked at.

        Returns:
            The matching Language, or None for files without an extension or
            without a matching grammar.
        """
        ext = _normalize_extension(Path(path).suffix)
        if not ext:
            return None

        target = self._overrides.get(ext)
        if target is not None:
            return self._lookup(target)

        key = self._extension_map.get(ext)
        if key is None:
            return None
        return self.languages.get(key)

    def _lookup(self, target: str) -> Language | None:
        language = self.languages.get(target)
        if language is not None:
            return language
        wanted = target.casefold()
        for candidate in self.languages.values():
            if candidate.name.casefold() == wanted:
                return candidate
        log.debug("language.override_target_missing", target=target)
        return None


def _normalize_extension(extension: str) -> str:
    return extension[1:] if extension.startswith(".") else extension

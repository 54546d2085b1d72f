"""
Bundle Resolver - Locate and parse bundled search engine definitions.

Bundled engines live in one directory per locale:

    plugins/
      en/
        list.toml       engines = ["yahoo", "bing", ...]
        yahoo.toml
        bing.toml
      de/
        ...

list.toml names the definition files in catalog order; the first entry is
the locale's default engine. A directory without list.toml contributes all
of its *.toml files in name order.

Example yahoo.toml:
    id = "yahoo"
    short_name = "Yahoo"
    search_template = "https://search.yahoo.com/yhs/search?p={searchTerms}"
    suggest_template = "https://search.yahoo.com/sugg/ff?output=fxjson&command={searchTerms}"
    icon = "yahoo.png"
"""

from dataclasses import replace
from pathlib import Path

import toml
from loguru import logger

from searchengines.errors import InvalidEngineDefinition
from searchengines.search.engine import SEARCH_TERMS, Engine
from searchengines.search.locales import directories_for_language_identifier

LIST_FILE = "list.toml"


class BundleResolver:
    """Resolves a language to plugin directories and parses their definitions."""

    def __init__(self, base_path, fallback_identifier: str = "en"):
        self.base_path = str(base_path)
        self.fallback_identifier = fallback_identifier

    def list_engine_definition_sources(self, language_identifier: str) -> list[str]:
        """Candidate directories for a language, most specific first."""
        return directories_for_language_identifier(
            language_identifier, self.base_path, self.fallback_identifier
        )

    def definition_paths(self, directory) -> list[Path]:
        """
        Engine definition files of one locale directory, in catalog order.

        Args:
            directory: A path returned by list_engine_definition_sources()

        Returns:
            List of definition file paths (empty if the directory doesn't exist)
        """
        directory = Path(directory)
        if not directory.is_dir():
            return []

        list_path = directory / LIST_FILE
        if list_path.exists():
            try:
                names = toml.load(list_path).get("engines", [])
                if isinstance(names, list):
                    return [
                        directory / f"{name}.toml"
                        for name in names
                        if isinstance(name, str) and self._is_local_name(name, list_path)
                    ]
                logger.warning(f"Ignoring {list_path}: 'engines' is not an array")
            except (OSError, toml.TomlDecodeError):
                logger.warning(f"Ignoring unreadable {list_path}")

        return sorted(p for p in directory.glob("*.toml") if p.name != LIST_FILE)

    @staticmethod
    def _is_local_name(name: str, list_path: Path) -> bool:
        """True if name refers to a file beside list_path, not a path elsewhere."""
        if not name or "/" in name or "\\" in name or ".." in name:
            logger.warning(f"Skipping {name!r} in {list_path}: not a file in this directory")
            return False
        return True

    def parse_engine_definition(self, path) -> Engine:
        """
        Parse one engine definition file.

        Raises:
            InvalidEngineDefinition: If the file is unreadable or incomplete
        """
        path = Path(path)
        try:
            data = toml.load(path)
        except (OSError, toml.TomlDecodeError) as e:
            raise InvalidEngineDefinition(f"Cannot read {path}: {e}") from e

        data.setdefault("id", path.stem)
        engine = Engine.from_record(data)

        if SEARCH_TERMS not in engine.search_template:
            raise InvalidEngineDefinition(f"{path}: search_template has no {SEARCH_TERMS}")
        if not engine.search_template.startswith(("http://", "https://")):
            raise InvalidEngineDefinition(f"{path}: search_template is not an http(s) URL")

        # Bundled definitions are never custom, whatever the file says
        return replace(engine, is_custom=False)

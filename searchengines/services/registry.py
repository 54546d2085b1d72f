"""
Search Engine Registry - Catalog, default engine, ordering and quick search.

Owns the list of available engines (bundled for the active language plus
the user's custom engines) and the user's choices about them:

  - ordered_engines: user-visible order, default engine always first
  - default_engine: engine used for plain searches typed in the URL bar
  - disabled engines: excluded from quick search (the default never is)
  - suggestion preferences: whether remote suggestions are allowed

Every mutating call updates memory first and then writes the affected keys
to the preference store in one transaction. If the write fails the call
raises PersistenceFailure and the in-memory state stays as changed.
"""

import threading
from dataclasses import replace
from typing import Optional

from loguru import logger

from searchengines.errors import InvalidArgument, InvalidEngineDefinition, InvalidOperation
from searchengines.search.bundle import BundleResolver
from searchengines.search.engine import Engine
from searchengines.search.locales import current_language_identifier
from searchengines.services.prefs import PreferenceStore, SqlitePreferenceStore

ORDERED_ENGINE_IDS = "search.orderedEngineIDs"
DEFAULT_ENGINE_ID = "search.defaultEngineID"
DISABLED_ENGINE_IDS = "search.disabledEngineIDs"
CUSTOM_ENGINES = "search.customEngines"
SUGGESTIONS_ENABLED = "search.suggestionsEnabled"
SUGGESTIONS_OPT_IN_SHOWN = "search.suggestionsOptInShown"


def load_bundled_engines(resolver: BundleResolver, language_identifier: str) -> list[Engine]:
    """
    Load the bundled engines for a language.

    Every directory of the fallback chain is consulted and the results are
    unioned; the first engine seen for an id wins, so locale-specific
    definitions override the fallback ones. Malformed definitions are
    skipped.

    Args:
        resolver: Bundle resolver pointing at the plugins directory
        language_identifier: e.g. "de", "es-MX" (malformed → fallback only)

    Returns:
        Engines in catalog order, most specific directory first
    """
    engines: dict[str, Engine] = {}

    for directory in resolver.list_engine_definition_sources(language_identifier):
        for path in resolver.definition_paths(directory):
            try:
                engine = resolver.parse_engine_definition(path)
            except InvalidEngineDefinition as e:
                logger.warning(f"Skipping malformed engine definition: {e}")
                continue
            engines.setdefault(engine.id, engine)

    logger.debug(f"Loaded {len(engines)} bundled engines for {language_identifier!r}")
    return list(engines.values())


def _alphabetical(engines) -> list[Engine]:
    return sorted(engines, key=lambda e: (e.short_name.lower(), e.id))


class SearchEngineRegistry:
    """
    The user's search engines and preferences about them.

    Methods:
        set_default(engine): Make an engine the default
        reorder(engines): Replace the user-visible order
        enable_engine / disable_engine: Manage the quick search set
        add_custom_engine / delete_custom_engine: User-added engines
    """

    def __init__(self, store: PreferenceStore, resolver: BundleResolver,
                 language_identifier: Optional[str] = None):
        self._store = store
        self._resolver = resolver
        self._lock = threading.RLock()

        if language_identifier is None:
            language_identifier = current_language_identifier()
        self.language_identifier = language_identifier

        custom = self._load_custom_engines()
        bundled = load_bundled_engines(resolver, language_identifier)

        catalog: dict[str, Engine] = {}
        for engine in custom + bundled:
            catalog.setdefault(engine.id, engine)

        self._custom_ids = {e.id for e in custom if catalog[e.id] is e}
        self._engines = self._restore_order(list(catalog.values()))
        if not self._engines:
            logger.warning(f"No search engines found for {language_identifier!r} in {resolver.base_path}")

        by_ref = self._index(self._engines)
        self._disabled_ids = {
            by_ref[ref].id
            for ref in store.get_string_list(DISABLED_ENGINE_IDS, [])
            if ref in by_ref
        }

        default_ref = store.get_string(DEFAULT_ENGINE_ID)
        default = by_ref.get(default_ref) if default_ref else None
        if default is not None:
            self._engines.remove(default)
            self._engines.insert(0, default)
        if self._engines:
            self._disabled_ids.discard(self._engines[0].id)

        self._suggestions_enabled = store.get_bool(SUGGESTIONS_ENABLED, False)
        self._suggestions_opt_in_shown = store.get_bool(SUGGESTIONS_OPT_IN_SHOWN, False)

        logger.debug(
            f"SearchEngineRegistry ready: {len(self._engines)} engines, "
            f"default={self._engines[0].id if self._engines else None}"
        )

    @classmethod
    def from_settings(cls, settings: dict) -> "SearchEngineRegistry":
        """
        Build a registry from a settings dict (see config.load_settings).

        Opens the SQLite preference store and the bundled plugin directory
        named by the settings.
        """
        from searchengines.config import resolve_db_path, resolve_plugins_dir

        search = settings.get("search", {})
        store = SqlitePreferenceStore(resolve_db_path(settings))
        resolver = BundleResolver(
            resolve_plugins_dir(settings),
            fallback_identifier=search.get("fallback_language") or "en",
        )
        return cls(store, resolver, language_identifier=search.get("language") or None)

    def _load_custom_engines(self) -> list[Engine]:
        engines = []
        for record in self._store.get_records(CUSTOM_ENGINES):
            try:
                engine = Engine.from_record(record)
            except InvalidEngineDefinition as e:
                logger.warning(f"Skipping malformed custom engine: {e}")
                continue
            engines.append(replace(engine, is_custom=True))
        return engines

    def _restore_order(self, catalog: list[Engine]) -> list[Engine]:
        """Persisted order first, everything else appended alphabetically."""
        stored = self._store.get_string_list(ORDERED_ENGINE_IDS)
        if stored is None:
            return catalog

        by_ref = self._index(catalog)
        ordered: list[Engine] = []
        for ref in stored:
            engine = by_ref.get(ref)
            if engine is not None and engine not in ordered:
                ordered.append(engine)

        remaining = [e for e in catalog if e not in ordered]
        return ordered + _alphabetical(remaining)

    @staticmethod
    def _index(engines) -> dict[str, Engine]:
        # Older stores referenced engines by short name
        index = {e.short_name: e for e in engines}
        index.update({e.id: e for e in engines})
        return index

    def _state_values(self) -> dict:
        return {
            ORDERED_ENGINE_IDS: [e.id for e in self._engines],
            DEFAULT_ENGINE_ID: self._engines[0].id if self._engines else "",
            DISABLED_ENGINE_IDS: sorted(self._disabled_ids),
        }

    def _persist(self, include_custom: bool = False) -> None:
        values = self._state_values()
        if include_custom:
            values[CUSTOM_ENGINES] = [
                e.to_record() for e in self._engines if e.id in self._custom_ids
            ]
        self._store.set_many(values)

    def _require_member(self, engine: Engine) -> Engine:
        for member in self._engines:
            if member == engine:
                return member
        raise InvalidArgument(f"Unknown search engine: {getattr(engine, 'id', engine)!r}")

    @property
    def ordered_engines(self) -> list[Engine]:
        with self._lock:
            return list(self._engines)

    @ordered_engines.setter
    def ordered_engines(self, engines: list[Engine]) -> None:
        self.reorder(engines)

    @property
    def default_engine(self) -> Engine:
        with self._lock:
            if not self._engines:
                raise InvalidOperation("No search engines available")
            return self._engines[0]

    @default_engine.setter
    def default_engine(self, engine: Engine) -> None:
        self.set_default(engine)

    def set_default(self, engine: Engine) -> None:
        """
        Make engine the default: move it to the front and enable it.

        Raises:
            InvalidArgument: If engine is not in the catalog
        """
        with self._lock:
            member = self._require_member(engine)
            self._engines.remove(member)
            self._engines.insert(0, member)
            self._disabled_ids.discard(member.id)
            self._persist()
        logger.debug(f"Default search engine set to {member.id}")

    def reorder(self, engines: list[Engine]) -> None:
        """
        Replace the user-visible order.

        Engines left out of the list keep existing and are appended in
        alphabetical order. The first engine of the list becomes the default
        and is enabled.

        Raises:
            InvalidArgument: If the list is empty, repeats an engine or names
                an engine not in the catalog
        """
        with self._lock:
            if not engines:
                raise InvalidArgument("Engine order must name at least one engine")

            explicit = [self._require_member(e) for e in engines]
            if len(set(explicit)) != len(explicit):
                raise InvalidArgument("Engine order lists an engine more than once")

            remaining = [e for e in self._engines if e not in explicit]
            self._engines = explicit + _alphabetical(remaining)
            self._disabled_ids.discard(self._engines[0].id)
            self._persist()
        logger.debug(f"Search engine order set to {[e.id for e in explicit]}")

    def is_engine_default(self, engine: Engine) -> bool:
        with self._lock:
            return bool(self._engines) and self._engines[0] == engine

    @property
    def quick_search_engines(self) -> list[Engine]:
        """Ordered engines other than the default and the disabled ones."""
        with self._lock:
            return [e for e in self._engines[1:] if e.id not in self._disabled_ids]

    @property
    def disabled_engine_ids(self) -> frozenset:
        with self._lock:
            return frozenset(self._disabled_ids)

    def is_engine_enabled(self, engine: Engine) -> bool:
        with self._lock:
            return engine.id not in self._disabled_ids

    def enable_engine(self, engine: Engine) -> None:
        with self._lock:
            self._disabled_ids.discard(engine.id)
            self._persist()

    def disable_engine(self, engine: Engine) -> None:
        """
        Exclude engine from quick search.

        Disabling the default engine is silently ignored.

        Raises:
            InvalidArgument: If engine is not in the catalog
        """
        with self._lock:
            member = self._require_member(engine)
            if self.is_engine_default(member):
                logger.debug(f"Ignoring request to disable default engine {member.id}")
                return
            self._disabled_ids.add(member.id)
            self._persist()

    def is_custom_engine(self, engine: Engine) -> bool:
        with self._lock:
            return engine.id in self._custom_ids

    def add_custom_engine(self, engine: Engine) -> None:
        """
        Add a user-defined engine right after the default.

        Raises:
            InvalidArgument: If an engine with the same id already exists, or
                the engine could not be restored from its stored record
        """
        try:
            engine = Engine.from_record(replace(engine, is_custom=True).to_record())
        except InvalidEngineDefinition as e:
            raise InvalidArgument(f"Invalid custom search engine: {e}") from e

        with self._lock:
            if engine in self._engines:
                raise InvalidArgument(f"Search engine id already in use: {engine.id!r}")

            self._engines.insert(1 if self._engines else 0, engine)
            self._custom_ids.add(engine.id)
            self._persist(include_custom=True)
        logger.debug(f"Added custom search engine {engine.id}")

    def delete_custom_engine(self, engine: Engine) -> None:
        """
        Remove a user-defined engine.

        If it was the default, the next engine in order takes over.

        Raises:
            InvalidOperation: If engine is not a custom engine
        """
        with self._lock:
            if engine.id not in self._custom_ids:
                raise InvalidOperation(f"Only custom engines can be deleted: {engine.id!r}")
            if len(self._engines) == 1:
                raise InvalidOperation("Cannot delete the only search engine")

            self._engines.remove(engine)
            self._custom_ids.discard(engine.id)
            self._disabled_ids.discard(engine.id)
            self._disabled_ids.discard(self._engines[0].id)
            self._persist(include_custom=True)
        logger.debug(f"Deleted custom search engine {engine.id}")

    def engine_for_id(self, engine_id: str) -> Optional[Engine]:
        with self._lock:
            for engine in self._engines:
                if engine.id == engine_id:
                    return engine
        return None

    def engine_for_short_name(self, short_name: str) -> Optional[Engine]:
        with self._lock:
            for engine in self._engines:
                if engine.short_name == short_name:
                    return engine
        return None

    def query_for_search_url(self, url: Optional[str]) -> Optional[str]:
        """Search terms of url if it is a results page of any known engine."""
        for engine in self.ordered_engines:
            query = engine.query_for_search_url(url)
            if query is not None:
                return query
        return None

    @property
    def suggestions_enabled(self) -> bool:
        """Whether remote search suggestions may be requested."""
        with self._lock:
            return self._suggestions_enabled

    @suggestions_enabled.setter
    def suggestions_enabled(self, value: bool) -> None:
        with self._lock:
            self._suggestions_enabled = bool(value)
            self._store.set_bool(SUGGESTIONS_ENABLED, self._suggestions_enabled)

    @property
    def suggestions_opt_in_shown(self) -> bool:
        """Whether the user has already been asked about suggestions."""
        with self._lock:
            return self._suggestions_opt_in_shown

    @suggestions_opt_in_shown.setter
    def suggestions_opt_in_shown(self, value: bool) -> None:
        with self._lock:
            self._suggestions_opt_in_shown = bool(value)
            self._store.set_bool(SUGGESTIONS_OPT_IN_SHOWN, self._suggestions_opt_in_shown)

    @property
    def should_show_suggestions_opt_in(self) -> bool:
        return not self.suggestions_opt_in_shown

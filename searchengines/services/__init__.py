# searchengines services package
"""
Stateful services: preference persistence and the search engine registry.
"""

from .prefs import MemoryPreferenceStore, PreferenceStore, SqlitePreferenceStore
from .registry import SearchEngineRegistry, load_bundled_engines

__all__ = [
    "MemoryPreferenceStore",
    "PreferenceStore",
    "SearchEngineRegistry",
    "SqlitePreferenceStore",
    "load_bundled_engines",
]

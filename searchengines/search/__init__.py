"""
Search package - Engine records and bundled engine catalogs.

Bundled engines are resolved per language through a fallback chain of
plugin directories and parsed from TOML definitions.
"""

from .bundle import BundleResolver
from .engine import Engine
from .locales import directories_for_language_identifier, is_valid_language_identifier
from .web_search import ResultItem, WebSearchHandler

__all__ = [
    "BundleResolver",
    "Engine",
    "ResultItem",
    "WebSearchHandler",
    "directories_for_language_identifier",
    "is_valid_language_identifier",
]

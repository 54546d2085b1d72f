"""
Engine - A configured search provider.

Engines are immutable records loaded from bundled definition files or
added by the user. Two engines are equal when their ids are equal, so an
engine can be looked up in any collection by any copy of itself.

URL templates use the OpenSearch placeholder:
  https://duckduckgo.com/?q={searchTerms}
"""

import urllib.parse
from dataclasses import asdict, dataclass
from typing import Optional

from searchengines.errors import InvalidEngineDefinition

SEARCH_TERMS = "{searchTerms}"


@dataclass(frozen=True, eq=False)
class Engine:
    """A single search engine."""
    id: str
    short_name: str
    search_template: str
    suggest_template: Optional[str] = None
    icon: str = ""
    is_custom: bool = False

    def __eq__(self, other):
        if not isinstance(other, Engine):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def search_url_for_query(self, query: str) -> str:
        """Build the results page URL for a typed query."""
        return _fill_template(self.search_template, query)

    def suggest_url_for_query(self, query: str) -> Optional[str]:
        """Build the suggestions URL, or None if the engine has no suggest endpoint."""
        if not self.suggest_template:
            return None
        return _fill_template(self.suggest_template, query)

    def query_for_search_url(self, url: Optional[str]) -> Optional[str]:
        """
        Extract the search terms from a results page URL of this engine.

        Args:
            url: Any URL, typically the one currently shown in the URL bar

        Returns:
            The decoded query, or None if the URL is not a search on this engine
        """
        if not url:
            return None

        template = urllib.parse.urlsplit(self.search_template)
        candidate = urllib.parse.urlsplit(url)

        if candidate.netloc.lower() != template.netloc.lower():
            return None
        if candidate.path.rstrip("/") != template.path.rstrip("/"):
            return None

        query_key = None
        for key, value in urllib.parse.parse_qsl(template.query, keep_blank_values=True):
            if value == SEARCH_TERMS:
                query_key = key
                break
        if query_key is None:
            return None

        values = urllib.parse.parse_qs(candidate.query).get(query_key)
        if not values or not values[0]:
            return None
        return values[0]

    def to_record(self) -> dict:
        """Plain dict form, used to persist custom engines."""
        return asdict(self)

    @classmethod
    def from_record(cls, record: dict) -> "Engine":
        """
        Rebuild an engine from a persisted record.

        Raises:
            InvalidEngineDefinition: If required fields are missing or mistyped
        """
        if not isinstance(record, dict):
            raise InvalidEngineDefinition(f"Engine record is not a table: {record!r}")

        for key in ("id", "short_name", "search_template"):
            value = record.get(key)
            if not isinstance(value, str) or not value:
                raise InvalidEngineDefinition(f"Engine record missing '{key}'")

        suggest = record.get("suggest_template")
        if suggest is not None and not isinstance(suggest, str):
            raise InvalidEngineDefinition("'suggest_template' must be a string")

        icon = record.get("icon", "")
        if not isinstance(icon, str):
            raise InvalidEngineDefinition("'icon' must be a string")

        return cls(
            id=record["id"],
            short_name=record["short_name"],
            search_template=record["search_template"],
            suggest_template=suggest or None,
            icon=icon,
            is_custom=bool(record.get("is_custom", False)),
        )


def _fill_template(template: str, query: str) -> str:
    return template.replace(SEARCH_TERMS, urllib.parse.quote_plus(query.strip()))

"""
Web Search Handler - Turn text typed in the URL bar into search results.

Produces one result for the default engine followed by one per quick
search engine, in the user's order:

  hello world → Search Yahoo: hello world     (default)
                Search Bing: hello world
                Search DuckDuckGo: hello world
                ...

Also maps results page URLs back to the search terms so the URL bar can
show "hello world" instead of the full Yahoo URL.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ResultItem:
    """A single web search result."""
    title: str
    url: str
    engine_id: str
    description: str = ""
    icon: str = ""


class WebSearchHandler:
    """Build search URLs from the registry's default and quick search engines."""

    name = "web_search"

    def __init__(self, registry):
        self.registry = registry

    def matches(self, query: str) -> bool:
        return bool(query and query.strip())

    def get_results(self, query: str) -> list[ResultItem]:
        q = (query or "").strip()
        if not q:
            return []

        engines = [self.registry.default_engine] + self.registry.quick_search_engines
        results = []
        for engine in engines:
            url = engine.search_url_for_query(q)
            results.append(ResultItem(
                title=f"Search {engine.short_name}: {q}",
                url=url,
                engine_id=engine.id,
                description=url.split("/")[2],
                icon=engine.icon,
            ))
        return results

    def search_url(self, query: str) -> str:
        """Results page URL for a plain search on the default engine."""
        return self.registry.default_engine.search_url_for_query(query)

    def suggestion_url(self, query: str) -> Optional[str]:
        """
        Suggestions URL for the default engine.

        Returns None unless the user has turned suggestions on, or when the
        default engine has no suggestion endpoint.
        """
        if not self.registry.suggestions_enabled:
            return None
        return self.registry.default_engine.suggest_url_for_query(query)

    def display_text_for_url(self, url: str) -> str:
        """Search terms if url is a results page of a known engine, else url."""
        query = self.registry.query_for_search_url(url)
        return query if query is not None else url

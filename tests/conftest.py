"""
Shared test fixtures for the searchengines test suite.

Provides real SQLite preference stores, the bundled plugin directory and
temporary plugin trees written to disk (no mocking of the filesystem).
"""

from pathlib import Path

import pytest
import toml

from searchengines.config import DEFAULT_PLUGINS_DIR
from searchengines.search.bundle import BundleResolver
from searchengines.services.prefs import SqlitePreferenceStore
from searchengines.services.registry import SearchEngineRegistry


@pytest.fixture
def tmp_store(tmp_path):
    """A real SQLite preference store in a temporary directory."""
    store = SqlitePreferenceStore(tmp_path / "prefs.db")
    yield store
    store.close()


@pytest.fixture
def resolver():
    """Resolver over the plugins shipped with the package."""
    return BundleResolver(DEFAULT_PLUGINS_DIR, fallback_identifier="en")


@pytest.fixture
def make_registry(tmp_store, resolver):
    """
    Factory building registries that share one store.

    Calling it twice simulates an app restart against the same preferences.
    """
    def _make(language="en", store=None):
        return SearchEngineRegistry(store or tmp_store, resolver, language_identifier=language)
    return _make


def write_engine(directory: Path, name: str, **fields) -> Path:
    """Write one engine definition TOML file."""
    data = {
        "short_name": name.capitalize(),
        "search_template": f"https://{name}.example/search?q={{searchTerms}}",
    }
    data.update(fields)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.toml"
    path.write_text(toml.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def tmp_plugins(tmp_path):
    """
    Create a small plugin tree:

        en/     list.toml → alpha, beta, gamma
        fr/     list.toml → beta (localized), delta
        broken/ list.toml → good, bad (bad has no search template)
    """
    base = tmp_path / "plugins"

    en = base / "en"
    write_engine(en, "alpha", short_name="Alpha")
    write_engine(en, "beta", short_name="Beta")
    write_engine(en, "gamma", short_name="Gamma")
    (en / "list.toml").write_text(toml.dumps({"engines": ["alpha", "beta", "gamma"]}))

    fr = base / "fr"
    write_engine(fr, "beta", short_name="Bêta",
                 search_template="https://beta.example/fr/search?q={searchTerms}")
    write_engine(fr, "delta", short_name="Delta")
    (fr / "list.toml").write_text(toml.dumps({"engines": ["beta", "delta"]}))

    broken = base / "broken"
    write_engine(broken, "good", short_name="Good")
    (broken / "bad.toml").write_text('short_name = "Bad"\n')
    (broken / "list.toml").write_text(toml.dumps({"engines": ["good", "bad"]}))

    return base

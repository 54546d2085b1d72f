# searchengines package
"""
Search engine management for a web browser.

Modules:
  - search.engine: Engine record and URL templating
  - search.locales / search.bundle: Bundled per-locale engine catalogs
  - services.prefs: Persistent preference store
  - services.registry: Default engine, ordering and quick search state
"""

__version__ = "0.1.0-dev"

"""
Exceptions raised by the search engine registry and its collaborators.
"""


class SearchEngineError(Exception):
    """Base class for all searchengines errors."""


class InvalidArgument(SearchEngineError, ValueError):
    """An engine argument is unknown, duplicated or otherwise unusable."""


class InvalidOperation(SearchEngineError):
    """The operation is not allowed for this engine (e.g. deleting a bundled one)."""


class PersistenceFailure(SearchEngineError):
    """The preference store could not durably record a change."""


class InvalidEngineDefinition(SearchEngineError, ValueError):
    """An engine definition file or record is malformed."""

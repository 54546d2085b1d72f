"""
Tests for error handling across the registry and its collaborators.

Verifies graceful degradation when things go wrong:
- Storage failures surface as PersistenceFailure
- Malformed plugins and stored values are skipped
- Policy no-ops don't raise
"""

from unittest.mock import patch

import pytest

from searchengines.errors import (
    InvalidArgument,
    InvalidOperation,
    PersistenceFailure,
    SearchEngineError,
)
from searchengines.search.bundle import BundleResolver
from searchengines.services.registry import ORDERED_ENGINE_IDS, SearchEngineRegistry


class TestErrorHierarchy:

    def test_all_errors_share_a_base(self):
        for error in (InvalidArgument, InvalidOperation, PersistenceFailure):
            assert issubclass(error, SearchEngineError)

    def test_invalid_argument_is_value_error(self):
        assert issubclass(InvalidArgument, ValueError)


class TestPersistenceFailures:
    """Test that a failing store surfaces errors but keeps memory state."""

    def test_set_default_with_closed_store(self, make_registry, tmp_store):
        registry = make_registry()
        bing = registry.engine_for_id("bing")
        tmp_store._conn.close()

        with pytest.raises(PersistenceFailure):
            registry.set_default(bing)
        # Memory is the source of truth until the next successful write
        assert registry.default_engine == bing

    def test_suggestion_flag_with_failing_store(self, make_registry, tmp_store):
        registry = make_registry()
        with patch.object(tmp_store, "set_many", side_effect=PersistenceFailure("disk full")):
            with pytest.raises(PersistenceFailure):
                registry.suggestions_enabled = True
        assert registry.suggestions_enabled is True

    def test_failed_write_is_not_durable(self, make_registry, tmp_store):
        registry = make_registry()
        with patch.object(tmp_store, "set_many", side_effect=PersistenceFailure("disk full")):
            with pytest.raises(PersistenceFailure):
                registry.set_default(registry.engine_for_id("bing"))

        restarted = make_registry()
        assert restarted.default_engine.id == "yahoo"


class TestPolicyNoOps:

    def test_disabling_default_does_not_raise(self, make_registry, tmp_store):
        registry = make_registry()
        with patch.object(tmp_store, "set_many") as set_many:
            registry.disable_engine(registry.default_engine)
        set_many.assert_not_called()
        assert registry.is_engine_enabled(registry.default_engine)


class TestMalformedInput:

    def test_corrupt_order_value_falls_back_to_catalog(self, make_registry, tmp_store):
        tmp_store.set_bool(ORDERED_ENGINE_IDS, True)
        registry = make_registry()
        assert registry.default_engine.id == "yahoo"

    def test_empty_plugins_dir(self, tmp_path, tmp_store):
        registry = SearchEngineRegistry(
            tmp_store, BundleResolver(tmp_path / "empty"), language_identifier="en"
        )
        assert registry.ordered_engines == []
        assert registry.quick_search_engines == []
        with pytest.raises(InvalidOperation):
            registry.default_engine

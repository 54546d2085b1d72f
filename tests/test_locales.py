"""
Tests for language identifier validation and the directory fallback chain.
"""

import pytest

from searchengines.search.locales import (
    current_language_identifier,
    directories_for_language_identifier,
    is_valid_language_identifier,
)

INVALID_IDENTIFIERS = [
    "", "-", "_", "foo", "foo/bar", "$foo", "foo_bar",
    "../../../../etc/passwd", "-foo", "_bar", "I like cheese",
    "en-", "en\n", "EN", "en-us", "zh-hans-CN",
]


class TestDirectoriesForLanguageIdentifier:
    """Test the most-specific-first directory chain."""

    def test_language_only(self):
        assert directories_for_language_identifier("nl", "/tmp", "en") == ["/tmp/nl", "/tmp/en"]

    def test_fallback_is_not_duplicated(self):
        assert directories_for_language_identifier("en-US", "/tmp", "en") == ["/tmp/en-US", "/tmp/en"]
        assert directories_for_language_identifier("en", "/tmp", "en") == ["/tmp/en"]

    def test_language_and_region(self):
        assert directories_for_language_identifier("es-MX", "/tmp", "en") == [
            "/tmp/es-MX", "/tmp/es", "/tmp/en",
        ]

    def test_language_script_and_region(self):
        assert directories_for_language_identifier("zh-Hans-CN", "/tmp", "en") == [
            "/tmp/zh-Hans-CN", "/tmp/zh-CN", "/tmp/zh", "/tmp/en",
        ]

    def test_language_and_script(self):
        assert directories_for_language_identifier("zh-Hans", "/tmp", "en") == [
            "/tmp/zh-Hans", "/tmp/zh", "/tmp/en",
        ]

    def test_numeric_region(self):
        assert directories_for_language_identifier("es-419", "/tmp", "en") == [
            "/tmp/es-419", "/tmp/es", "/tmp/en",
        ]

    @pytest.mark.parametrize("identifier", INVALID_IDENTIFIERS)
    def test_invalid_identifier_returns_fallback_only(self, identifier):
        assert directories_for_language_identifier(identifier, "/tmp", "en") == ["/tmp/en"]

    def test_none_returns_fallback_only(self):
        assert directories_for_language_identifier(None, "/tmp", "en") == ["/tmp/en"]


class TestIsValidLanguageIdentifier:

    @pytest.mark.parametrize("identifier", ["en", "en-GB", "zh-Hant", "zh-Hans-CN", "es-419"])
    def test_valid(self, identifier):
        assert is_valid_language_identifier(identifier) is True

    @pytest.mark.parametrize("identifier", INVALID_IDENTIFIERS)
    def test_invalid(self, identifier):
        assert is_valid_language_identifier(identifier) is False


class TestCurrentLanguageIdentifier:
    """Test reading the language from the process locale."""

    def test_converts_posix_locale(self, monkeypatch):
        monkeypatch.setattr("locale.getlocale", lambda: ("de_DE", "UTF-8"))
        assert current_language_identifier() == "de-DE"

    def test_strips_codeset(self, monkeypatch):
        monkeypatch.setattr("locale.getlocale", lambda: ("pt_BR.UTF-8", None))
        assert current_language_identifier() == "pt-BR"

    def test_unknown_locale_is_empty(self, monkeypatch):
        monkeypatch.setattr("locale.getlocale", lambda: (None, None))
        assert current_language_identifier() == ""

    def test_unparseable_locale_is_empty(self, monkeypatch):
        def _raise():
            raise ValueError("unknown locale: weird")
        monkeypatch.setattr("locale.getlocale", _raise)
        assert current_language_identifier() == ""

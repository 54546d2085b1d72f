"""
Locale Fallback - Map a language identifier to bundled plugin directories.

Directories are produced from most to least specific:
  zh-Hans-CN → zh-Hans-CN, zh-CN, zh, <fallback>
  es-MX      → es-MX, es, <fallback>
  nl         → nl, <fallback>

Identifiers that don't look like a language tag resolve to the fallback
directory alone, so nothing outside the base path is ever produced.
"""

import locale
import os
import re

from loguru import logger

# lang[-Script][-REGION], e.g. "en", "zh-Hans", "es-419", "zh-Hans-CN"
_LANGUAGE_IDENTIFIER = re.compile(
    r"(?P<lang>[a-z]{2})"
    r"(?:-(?P<script>[A-Z][a-z]{3}))?"
    r"(?:-(?P<region>[A-Z]{2}|[0-9]{3}))?"
)


def is_valid_language_identifier(identifier: str) -> bool:
    """Return True if identifier is a well-formed lang[-Script][-REGION] tag."""
    if not identifier:
        return False
    return _LANGUAGE_IDENTIFIER.fullmatch(identifier) is not None


def directories_for_language_identifier(
    identifier: str, base_path: str, fallback_identifier: str
) -> list[str]:
    """
    Candidate plugin directories for a language, most specific first.

    Args:
        identifier: Language tag such as "es-MX" or "zh-Hans-CN"
        base_path: Directory holding one subdirectory per locale
        fallback_identifier: Locale appended last (e.g. "en")

    Returns:
        List of paths under base_path with duplicates collapsed
    """
    names: list[str] = []

    match = _LANGUAGE_IDENTIFIER.fullmatch(identifier or "")
    if match:
        lang = match.group("lang")
        script = match.group("script")
        region = match.group("region")

        names.append(identifier)
        if script and region:
            names.append(f"{lang}-{region}")
        names.append(lang)
    else:
        logger.debug(f"Malformed language identifier {identifier!r}, using fallback only")

    names.append(fallback_identifier)

    directories = []
    for name in names:
        path = os.path.join(base_path, name)
        if path not in directories:
            directories.append(path)
    return directories


def current_language_identifier() -> str:
    """
    Language tag of the running process ("en_US.UTF-8" → "en-US").

    Returns an empty string when the locale can't be determined; callers
    then end up with the fallback catalog.
    """
    try:
        name = locale.getlocale()[0]
    except ValueError:
        return ""
    if not name:
        return ""
    return name.split(".")[0].replace("_", "-")

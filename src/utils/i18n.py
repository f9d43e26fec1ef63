"""
Internationalization (i18n) utility module for handling translations and language preferences.

This module provides functionality for:
- Loading translations for the supported languages
- Translating message keys based on the caller's language
- Determining the request language from query parameters or headers

Catalogues live under ``locales/<lang>/LC_MESSAGES/messages.po`` at the
repository root and are read through gettext, with the ``.po`` sources parsed
as a fallback when compiled ``.mo`` files are absent or stale.
"""

from __future__ import annotations

import gettext
import os
import re
from typing import Dict, Optional

from fastapi import Request

from src.core.config.settings import settings
from src.core.logging import logger

_translations: Dict[str, gettext.NullTranslations] = {}
_fallback_catalogs: Dict[str, Dict[str, str]] = {}

_MAX_PO_FILE_SIZE = 10 * 1024 * 1024

_PO_ESCAPE = re.compile(r"\\(.)")
_PO_ESCAPES = {"n": "\n", "t": "\t"}


def _po_string(literal: str) -> str:
    """Decode one double-quoted ``.po`` string literal."""
    literal = literal.strip()
    if len(literal) < 2 or not (literal.startswith('"') and literal.endswith('"')):
        return ""
    return _PO_ESCAPE.sub(lambda match: _PO_ESCAPES.get(match.group(1), match.group(1)), literal[1:-1])


def _parse_po_file(po_path: str) -> Dict[str, str]:
    """Build a ``msgid -> msgstr`` map from a ``.po`` source.

    Continuation lines are joined onto the preceding keyword. The header
    entry (empty msgid), plural forms and entries with a ``msgctxt`` are
    skipped, and an empty translation maps a key to itself.
    """
    catalog: Dict[str, str] = {}
    entry: Dict[str, str] = {}
    field: Optional[str] = None

    def flush() -> None:
        msgid = entry.get("msgid")
        if msgid and "msgctxt" not in entry and "msgstr" in entry:
            catalog[msgid] = entry["msgstr"] or msgid
        entry.clear()

    with open(po_path, "r", encoding="utf-8") as po_file:
        for line in po_file:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith('"'):
                if field is not None:
                    entry[field] += _po_string(line)
                continue

            keyword, _, literal = line.partition(" ")
            if keyword in ("msgctxt", "msgid") and "msgstr" in entry:
                flush()
            if keyword in ("msgctxt", "msgid", "msgstr"):
                field = keyword
                entry[field] = _po_string(literal)
            else:
                field = None
    flush()
    return catalog


def _load_fallback_catalog(locales_path: str, lang: str) -> Dict[str, str]:
    po_path = os.path.join(locales_path, lang, "LC_MESSAGES", "messages.po")
    if not os.path.exists(po_path):
        return {}
    size = os.path.getsize(po_path)
    if size > _MAX_PO_FILE_SIZE:
        logger.warning("i18n_po_file_too_large", lang=lang, size=size)
        return {}
    return _parse_po_file(po_path)


def setup_i18n() -> None:
    """
    Load the gettext translation and the ``.po`` fallback catalogue for every
    supported language.

    Raises:
        FileNotFoundError: If the locales directory is not found.
    """
    locales_path = os.path.join(os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")), "locales")
    if not os.path.isdir(locales_path):
        raise FileNotFoundError(f"Locales directory not found: {locales_path}")

    for lang in settings.SUPPORTED_LANGUAGES:
        _translations[lang] = gettext.translation(
            domain="messages", localedir=locales_path, languages=[lang], fallback=True
        )
        _fallback_catalogs[lang] = _load_fallback_catalog(locales_path, lang)
        logger.info("i18n_initialized", language=lang, entries=len(_fallback_catalogs[lang]))

    logger.info("i18n_setup_complete", default_locale=settings.DEFAULT_LANGUAGE)


def get_translated_message(key: str, locale: str = settings.DEFAULT_LANGUAGE) -> str:
    """
    Retrieve the message for ``key`` in ``locale``.

    Unsupported locales use the default language. The compiled catalogue is
    consulted first, then the ``.po`` fallback; the key itself is returned when
    neither has it.
    """
    if locale not in _translations:
        locale = settings.DEFAULT_LANGUAGE

    translation = _translations.get(locale)
    if translation is None:
        logger.error("translation_missing_for_locale", locale=locale)
        return key

    for lookup in (translation.gettext, _fallback_catalogs.get(locale, {}).get):
        translated = lookup(key)
        if translated and translated != key:
            return translated

    logger.warning("translation_key_not_found", key=key, locale=locale)
    return key


def _accept_language_ranges(header: str):
    """Yield the primary language tags of an Accept-Language header, best first."""
    weighted = []
    for position, part in enumerate(header.split(",")):
        tag, _, params = part.partition(";")
        tag = tag.strip()
        quality = 1.0
        if params.strip().startswith("q="):
            try:
                quality = float(params.strip()[2:])
            except ValueError:
                quality = 0.0
        if tag and quality > 0:
            weighted.append((-quality, position, tag.split("-")[0].lower()))
    for _, _, primary in sorted(weighted):
        yield primary


def get_request_language(request: Request) -> str:
    """
    Determine the preferred language from a request.

    The ``lang`` query parameter wins, then the Accept-Language header in
    quality order, then the default language from settings.
    """
    lang = request.query_params.get("lang")
    if lang in settings.SUPPORTED_LANGUAGES:
        return lang

    for lang in _accept_language_ranges(request.headers.get("Accept-Language", "")):
        if lang in settings.SUPPORTED_LANGUAGES:
            return lang

    return settings.DEFAULT_LANGUAGE

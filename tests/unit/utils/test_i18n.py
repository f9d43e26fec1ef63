import pytest
from starlette.requests import Request

from src.core.config.settings import settings
from src.utils.i18n import _parse_po_file, get_request_language, get_translated_message

PO_SOURCE = r'''# Sample catalogue
msgid ""
msgstr ""
"Language: en\n"

msgid "greeting"
msgstr "Hello "
"there"

msgid "quoted"
msgstr "Say \"hi\"\tnow"

msgctxt "menu"
msgid "open"
msgstr "Open menu"

msgid "untranslated"
msgstr ""

msgid "apples"
msgid_plural "apples"
msgstr[0] "one apple"
msgstr[1] "many apples"

msgid "last"
msgstr "Last entry"
'''


def _request(headers=None, query_string=b"") -> Request:
    raw = [(name.lower().encode(), value.encode()) for name, value in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/", "query_string": query_string, "headers": raw})


@pytest.fixture
def po_catalog(tmp_path):
    po_path = tmp_path / "messages.po"
    po_path.write_text(PO_SOURCE, encoding="utf-8")
    return _parse_po_file(str(po_path))


def test_po_parser_reads_plain_and_continued_entries(po_catalog):
    assert po_catalog["greeting"] == "Hello there"
    assert po_catalog["quoted"] == 'Say "hi"\tnow'
    assert po_catalog["last"] == "Last entry"


def test_po_parser_skips_header_context_and_plural_entries(po_catalog):
    assert "" not in po_catalog
    assert "open" not in po_catalog
    assert "apples" not in po_catalog
    assert po_catalog["untranslated"] == "untranslated"


def test_translated_message_from_shipped_catalogue():
    assert get_translated_message("user_account_inactive", "en") == "This account is inactive"
    assert get_translated_message("user_account_inactive", "xx") == "This account is inactive"
    assert get_translated_message("no_such_message_key") == "no_such_message_key"


def test_request_language_follows_quality_order(monkeypatch):
    monkeypatch.setattr(settings, "SUPPORTED_LANGUAGES", ["en", "fa"])

    assert get_request_language(_request({"Accept-Language": "en;q=0.4, fa-IR;q=0.9"})) == "fa"
    assert get_request_language(_request({"Accept-Language": "de, en-GB;q=0.8"})) == "en"
    assert get_request_language(_request({"Accept-Language": "fa;q=0"})) == settings.DEFAULT_LANGUAGE


def test_query_parameter_overrides_header(monkeypatch):
    monkeypatch.setattr(settings, "SUPPORTED_LANGUAGES", ["en", "fa"])

    request = _request({"Accept-Language": "en"}, query_string=b"lang=fa")

    assert get_request_language(request) == "fa"

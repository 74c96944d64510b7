"""Tests for document language detection."""

import json

import httpx

from jobs.shared.language import (
    detect_document_language,
    detect_language_from_text,
    is_placeholder_text,
    language_from_page,
    language_from_url_path,
    normalize_language,
)
from testing.utils import html_response, json_response

FINNISH = (
    "Helsingin kaupunki tarjoaa asukkailleen kirjastopalveluja, uimahalleja ja "
    "puistoja. Kaupunginkirjaston toimipisteet ovat avoinna arkisin ja viikonloppuisin."
)
ENGLISH = (
    "The City of Helsinki offers its residents library services, swimming halls "
    "and parks. The city library branches are open on weekdays and at weekends."
)


class TestNormalizeLanguage:

    def test_region_subtags(self):
        assert normalize_language("fi-FI") == "fi"
        assert normalize_language("sv_SE") == "sv"
        assert normalize_language(" EN ") == "en"

    def test_empty(self):
        assert normalize_language(None) is None
        assert normalize_language("  ") is None


class TestDetectLanguageFromText:

    def test_detects_finnish_and_english(self):
        assert detect_language_from_text(FINNISH) == "fi"
        assert detect_language_from_text(ENGLISH) == "en"

    def test_placeholder_text_is_latin(self):
        assert detect_language_from_text("Lorem ipsum dolor sit amet, consectetur adipiscing elit.") == "la"
        assert detect_language_from_text("ipsum") == "la"

    def test_mentioning_ipsum_is_not_placeholder(self):
        text = FINNISH + " Ipsum-kahvila avautuu keväällä kirjaston viereen."

        assert not is_placeholder_text(text)
        assert detect_language_from_text(text) == "fi"

    def test_placeholder_detection(self):
        assert is_placeholder_text("  Lorem ipsum dolor sit amet")
        assert is_placeholder_text("ipsum lorem ipsum")
        assert not is_placeholder_text("Dolor sit amet, lorem ipsum")
        assert not is_placeholder_text("...")

    def test_short_or_empty_text(self):
        assert detect_language_from_text("Hei") is None
        assert detect_language_from_text("") is None
        assert detect_language_from_text(None) is None

    def test_undetectable_text(self):
        assert detect_language_from_text("1234567890 1234567890 1234567890") is None


class TestLanguageFromUrlPath:

    def test_first_and_second_segments(self):
        assert language_from_url_path({"url_path_dir1": "sv", "url_path_dir2": "fi"}) == "sv"
        assert language_from_url_path({"url_path_dir1": "helsinki", "url_path_dir2": "en"}) == "en"

    def test_unsupported_segments(self):
        assert language_from_url_path({"url_path_dir1": "uutiset"}) is None
        assert language_from_url_path({}) is None


class TestLanguageFromPage:

    async def test_html_lang(self, page_fetcher):
        async with page_fetcher(lambda request: html_response('<html lang="sv-FI"><body></body></html>')) as fetcher:
            assert await language_from_page("https://www.hel.fi/sv", fetcher) == "sv"

    async def test_drupal_settings_fallback(self, page_fetcher):
        settings = json.dumps({"path": {"currentLanguage": "ru"}})
        markup = (
            "<html><head>"
            f'<script data-drupal-selector="drupal-settings-json">{settings}</script>'
            "</head><body></body></html>"
        )

        async with page_fetcher(lambda request: html_response(markup)) as fetcher:
            assert await language_from_page("https://www.hel.fi/ru", fetcher) == "ru"

    async def test_non_html(self, page_fetcher):
        async with page_fetcher(lambda request: json_response({})) as fetcher:
            assert await language_from_page("https://www.hel.fi/file", fetcher) is None


class TestDetectDocumentLanguage:

    async def test_requires_id_and_url(self, page_fetcher):
        async with page_fetcher(lambda request: html_response("")) as fetcher:
            assert await detect_document_language({"url": "https://www.hel.fi"}, fetcher) is None
            assert await detect_document_language({"id": "a"}, fetcher) is None

    async def test_url_path_skips_page_load(self, page_fetcher):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return html_response('<html lang="en"></html>')

        document = {"id": "a", "url": "https://www.hel.fi/fi/a", "url_path_dir1": "fi"}
        async with page_fetcher(handler) as fetcher:
            assert await detect_document_language(document, fetcher) == "fi"

        assert requests == []

    async def test_falls_back_to_body_text(self, page_fetcher):
        document = {"id": "a", "url": "https://www.hel.fi/file.pdf", "body_content": ENGLISH}

        async with page_fetcher(lambda request: httpx.Response(200, headers={"content-type": "application/pdf"})) as fetcher:
            assert await detect_document_language(document, fetcher) == "en"

"""Tests for www.hel.fi page metadata extractors."""

import json
from datetime import datetime, timezone

from core.scraping import (
    extract_breadcrumbs,
    extract_published_date,
    get_category_attribute,
    get_drupal_current_language,
    get_drupal_settings,
    get_external_id,
    get_html_lang,
    parse_html,
)


def _page(head: str = "", body: str = "", lang: str = "fi") -> str:
    return f'<!DOCTYPE html><html lang="{lang}"><head>{head}</head><body>{body}</body></html>'


def _drupal_settings(settings: dict) -> str:
    return (
        '<script type="application/json" data-drupal-selector="drupal-settings-json">'
        f"{json.dumps(settings)}</script>"
    )


class TestParseHtml:

    def test_empty_documents(self):
        assert parse_html("") is None
        assert parse_html("   \n") is None

    def test_parses_page(self):
        tree = parse_html(_page(body="<p>Hei</p>"))
        assert tree is not None
        assert tree.xpath("string(//p)") == "Hei"


class TestLanguageMarkup:

    def test_html_lang(self):
        assert get_html_lang(parse_html(_page(lang="sv"))) == "sv"

    def test_missing_html_lang(self):
        assert get_html_lang(parse_html("<html><body><p>x</p></body></html>")) is None

    def test_drupal_current_language(self):
        tree = parse_html(_page(head=_drupal_settings({"path": {"currentLanguage": "en"}})))
        assert get_drupal_current_language(get_drupal_settings(tree)) == "en"

    def test_no_drupal_settings(self):
        assert get_drupal_settings(parse_html(_page())) is None
        assert get_drupal_current_language(None) is None

    def test_malformed_drupal_settings(self):
        script = '<script data-drupal-selector="drupal-settings-json">{not json</script>'
        assert get_drupal_settings(parse_html(_page(head=script))) is None

    def test_head_only_settings(self):
        tree = parse_html(_page(body=_drupal_settings({"path": {"currentPath": "node/1"}})))
        assert get_drupal_settings(tree, head_only=True) is None
        assert get_drupal_settings(tree) == {"path": {"currentPath": "node/1"}}


class TestCategoryAttribute:

    def test_content_type_meta(self):
        tree = parse_html(_page(head='<meta name="helfi_content_type" content="news_item">'))
        assert get_category_attribute(tree) == "news_item"

    def test_missing_meta(self):
        assert get_category_attribute(parse_html(_page())) is None


class TestExternalId:

    def test_id_from_current_path(self):
        assert get_external_id({"path": {"currentPath": "tpr-service/10473"}}) == 10473

    def test_no_digits(self):
        assert get_external_id({"path": {"currentPath": "tpr-service/list"}}) is None
        assert get_external_id({}) is None
        assert get_external_id(None) is None


class TestBreadcrumbs:

    def test_old_markup(self):
        body = (
            '<div class="long-breadcrumb">'
            '<a class="breadcrump-frontpage-link" href="/">Etusivu</a> » '
            '<a href="/fi/asuminen">Asuminen</a> » Vuokra-asunnot'
            "</div>"
        )

        assert extract_breadcrumbs(parse_html(_page(body=body))) == [
            "Etusivu",
            "Asuminen",
            "Vuokra-asunnot",
        ]

    def test_new_markup(self):
        body = (
            '<nav class="breadcrumb">'
            '<a href="/fi">Etusivu</a>'
            '<a href="/fi/kasvatus">Kasvatus ja koulutus</a>'
            "<span>Päiväkodit</span>"
            "</nav>"
        )

        assert extract_breadcrumbs(parse_html(_page(body=body))) == [
            "Etusivu",
            "Kasvatus ja koulutus",
            "Päiväkodit",
        ]

    def test_new_markup_without_current_page(self):
        body = '<nav class="breadcrumb"><a href="/fi">Etusivu</a></nav>'
        assert extract_breadcrumbs(parse_html(_page(body=body))) == ["Etusivu"]

    def test_no_breadcrumbs(self):
        assert extract_breadcrumbs(parse_html(_page(body="<p>Ei murupolkua</p>"))) is None


class TestPublishedDate:

    def test_utc_designator(self):
        body = '<time itemprop="datePublished" datetime="2023-05-04T08:30:00Z">4.5.2023</time>'
        published = extract_published_date(parse_html(_page(body=body)))
        assert published == datetime(2023, 5, 4, 8, 30, tzinfo=timezone.utc)

    def test_unparseable_date(self):
        body = '<time itemprop="datePublished" datetime="eilen">eilen</time>'
        assert extract_published_date(parse_html(_page(body=body))) is None

    def test_missing_date(self):
        assert extract_published_date(parse_html(_page())) is None

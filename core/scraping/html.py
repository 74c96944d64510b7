"""
Extractors for metadata embedded in www.hel.fi page markup.

All extractors take a parsed lxml tree and return None when the markup they
look for is absent, so callers can fall through to the next heuristic.
"""

import json
import logging
import re
from datetime import datetime
from typing import Any, Optional

from lxml import etree, html

logger = logging.getLogger(__name__)

DRUPAL_SETTINGS_XPATH = "//script[@data-drupal-selector='drupal-settings-json']"
CONTENT_TYPE_META = "helfi_content_type"

_DIGITS = re.compile(r"\d+")


def _has_class(name: str) -> str:
    return f"contains(concat(' ', normalize-space(@class), ' '), ' {name} ')"


def parse_html(text: str) -> Optional[html.HtmlElement]:
    """Parse page markup, or None for an empty or unparseable document."""
    if not text or not text.strip():
        return None
    try:
        return html.document_fromstring(text)
    except (etree.ParserError, ValueError) as e:
        logger.debug(f"Could not parse HTML: {e}")
        return None


def get_html_lang(tree: html.HtmlElement) -> Optional[str]:
    """Value of the ``lang`` attribute of the root element."""
    lang = tree.get("lang")
    return lang.strip() if lang and lang.strip() else None


def get_head_meta(tree: html.HtmlElement, name: str) -> Optional[str]:
    """Content of a ``<meta name=...>`` tag in the head."""
    values = tree.xpath("//head/meta[@name=$name]/@content", name=name)
    return values[0] if values and values[0] else None


def get_category_attribute(tree: html.HtmlElement) -> Optional[str]:
    """Drupal content type of the page (e.g. ``news_item``, ``tpr_unit``)."""
    return get_head_meta(tree, CONTENT_TYPE_META)


def get_drupal_settings(tree: html.HtmlElement, head_only: bool = False) -> Optional[dict[str, Any]]:
    """Parsed Drupal settings JSON script, if the page has one."""
    xpath = "//head" + DRUPAL_SETTINGS_XPATH[1:] if head_only else DRUPAL_SETTINGS_XPATH
    elements = tree.xpath(xpath)
    if not elements:
        return None

    text = elements[0].text
    if not text or not text.strip():
        return None

    try:
        settings = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Malformed Drupal settings JSON: {e}")
        return None
    return settings if isinstance(settings, dict) else None


def get_drupal_current_language(settings: Optional[dict[str, Any]]) -> Optional[str]:
    path = (settings or {}).get("path") or {}
    language = path.get("currentLanguage")
    return language if isinstance(language, str) and language else None


def get_external_id(settings: Optional[dict[str, Any]]) -> Optional[int]:
    """Service id from the Drupal ``currentPath`` (e.g. ``tpr-service/1234``)."""
    path = (settings or {}).get("path") or {}
    current_path = path.get("currentPath")
    if not isinstance(current_path, str):
        return None

    match = _DIGITS.search(current_path)
    return int(match.group()) if match else None


def _clean_crumb(text: Optional[str]) -> str:
    return (text or "").replace("»", "").strip()


def _last_node_text(element: html.HtmlElement) -> str:
    children = list(element)
    if not children:
        return element.text or ""
    last = children[-1]
    if last.tail is not None:
        return last.tail
    return last.text_content()


def extract_breadcrumbs(tree: html.HtmlElement) -> Optional[list[str]]:
    """Breadcrumb trail of the page.

    Supports the old (``.long-breadcrumb`` with ``»`` separators) and the
    new (``.breadcrumb``) www.hel.fi markup.

    Returns:
        Crumb labels from the front page down, or None without breadcrumbs
    """
    old = tree.xpath(f"//*[{_has_class('long-breadcrumb')}]")
    if old:
        container = old[0]
        crumbs = [
            _clean_crumb(child.text_content())
            for child in container
            if child.tag == "a" or "breadcrump-frontpage-link" in (child.get("class") or "").split()
        ]
        crumbs.append(_clean_crumb(_last_node_text(container)))
        return [crumb for crumb in crumbs if crumb]

    new = tree.xpath(f"//*[{_has_class('breadcrumb')}]")
    if new:
        container = new[0]
        crumbs = [child.text_content().strip() for child in container if child.tag == "a"]
        children = list(container)
        if children and children[-1].tag == "span":
            crumbs.append(children[-1].text_content().strip())
        return [crumb for crumb in crumbs if crumb]

    return None


def extract_published_date(tree: html.HtmlElement) -> Optional[datetime]:
    """Publication time of a news page from ``time[itemprop=datePublished]``."""
    values = tree.xpath("//time[@itemprop='datePublished']/@datetime")
    if not values:
        return None

    value = values[0].strip()
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable publish date {value!r}")
        return None

"""Language detection for search documents.

Detection falls through from the cheapest signal to the most expensive:
URL path segment, page markup (``<html lang>`` or Drupal settings), and
finally langdetect on the indexed body text.
"""

import logging
import re
from typing import Any, Optional

from langdetect import DetectorFactory, detect_langs
from langdetect.lang_detect_exception import LangDetectException

from core.scraping import (
    PageFetcher,
    get_drupal_current_language,
    get_drupal_settings,
    get_html_lang,
    parse_html,
)

logger = logging.getLogger(__name__)

# langdetect is non-deterministic without a fixed seed
DetectorFactory.seed = 0

SUPPORTED_LANGUAGES = (
    "fi", "en", "sv", "et", "no", "lt", "fa", "ru",
    "de", "fr", "it", "ro", "sk", "so", "es", "la",
)

# Content types whose documents carry no language of their own
UNLOCALIZABLE_CONTENT_TYPES = (
    "application/pdf",
    "text/calendar; charset=UTF-8",
    "application/msword",
    "application/zip",
    "image/jpeg",
)

# Minimum text length for reliable detection
MIN_TEXT_LENGTH = 20
MAX_SAMPLE_LENGTH = 5000

# Placeholder text found on target sites; langdetect has no Latin model
_PLACEHOLDER_WORDS = ("lorem", "ipsum")
_WORD = re.compile(r"\w+")


def normalize_language(value: Optional[str]) -> Optional[str]:
    """Primary subtag of a language tag, lowercased (``fi-FI`` -> ``fi``)."""
    if not value or not value.strip():
        return None
    return value.strip().replace("_", "-").split("-")[0].lower()


def is_placeholder_text(text: str) -> bool:
    """Whether text is lorem ipsum filler rather than content.

    True when it opens with "lorem ipsum" or holds nothing but those words.
    A real page that merely mentions "ipsum" is not filler.
    """
    words = _WORD.findall(text.lower())
    if not words:
        return False
    return words[:2] == list(_PLACEHOLDER_WORDS) or all(word in _PLACEHOLDER_WORDS for word in words)


def detect_language_from_text(
    text: Optional[str],
    min_text_length: int = MIN_TEXT_LENGTH,
) -> Optional[str]:
    """
    Detect language of body text using langdetect.

    Args:
        text: Text to detect language from
        min_text_length: Minimum characters required for detection

    Returns:
        ISO 639-1 code, ``la`` for lorem ipsum placeholder text, or None
    """
    if not text or not text.strip():
        return None

    if is_placeholder_text(text):
        return "la"

    if len(text.strip()) < min_text_length:
        logger.debug(f"Text too short for language detection ({len(text)} chars)")
        return None

    try:
        results = detect_langs(text[:MAX_SAMPLE_LENGTH])
    except LangDetectException as e:
        logger.debug(f"Language detection failed: {e}")
        return None

    return normalize_language(results[0].lang) if results else None


def language_from_url_path(document: dict[str, Any]) -> Optional[str]:
    """Supported language code in the first or second URL path segment."""
    for field in ("url_path_dir1", "url_path_dir2"):
        segment = document.get(field)
        if isinstance(segment, str) and segment in SUPPORTED_LANGUAGES:
            return segment
    return None


async def language_from_page(url: str, fetcher: PageFetcher) -> Optional[str]:
    """Language declared in the page markup, if the page is HTML."""
    page = await fetcher.fetch(url)
    if page is None:
        return None

    if not page.is_html:
        logger.warning(f"Cannot resolve language for {url} with content type {page.content_type}")
        return None

    tree = parse_html(page.text)
    if tree is None:
        return None

    return normalize_language(get_html_lang(tree)) or normalize_language(
        get_drupal_current_language(get_drupal_settings(tree))
    )


async def detect_document_language(
    document: dict[str, Any],
    fetcher: PageFetcher,
) -> Optional[str]:
    """Resolve the language of a document.

    Args:
        document: Flattened search document
        fetcher: Client used to load the document's page

    Returns:
        Language code, or None if no signal was found
    """
    if not document.get("id") or not document.get("url"):
        return None

    language = language_from_url_path(document)
    if language:
        return language

    language = await language_from_page(document["url"], fetcher)
    if language:
        return language

    return detect_language_from_text(document.get("body_content"))

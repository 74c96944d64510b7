"""Matching document URLs against crawler domain crawl rules."""

import logging
import re
from typing import Sequence
from urllib.parse import urlsplit

from core.scraping import validate_url
from core.stores import CrawlerDomain, CrawlRule

logger = logging.getLogger(__name__)

# Characters escaped in non-regex patterns; ``*`` stays a wildcard
_SPECIAL_CHARS = re.compile(r"[.+?^${}()/|\[\]\\]")

_DEFAULT_PORTS = {"http": 80, "https": 443}


def rule_to_regex(rule: CrawlRule) -> str:
    """Regular expression equivalent of a crawl rule's pattern."""
    if rule.rule == "regex":
        return rule.pattern

    escaped = _SPECIAL_CHARS.sub(lambda match: "\\" + match.group(), rule.pattern)
    pattern = escaped.replace("*", ".*")

    if rule.rule == "begins":
        return f"^{pattern}"
    if rule.rule == "ends":
        return f"{pattern}$"
    return pattern


def path_with_query(url: str) -> str:
    parts = urlsplit(url)
    path = parts.path or "/"
    return f"{path}?{parts.query}" if parts.query else path


def rule_allows(rule: CrawlRule, url: str) -> bool:
    """Whether the URL passes the rule.

    An allow rule must match the path and query; a deny rule must not.
    """
    matches = re.search(rule_to_regex(rule), path_with_query(url)) is not None
    return matches == (rule.policy == "allow")


def origin(url: str) -> str:
    """``scheme://host[:port]`` with the host lowercased, userinfo and default ports dropped."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = parts.hostname or ""
    port = parts.port
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{port}"
    return f"{scheme}://{host}"


def matches_crawl_rules(url: str, domains: Sequence[CrawlerDomain]) -> bool:
    """Whether a crawled URL still fits the rules of its crawler domain.

    URLs on no crawled domain never fit. A domain without rules accepts all
    its URLs. Otherwise every rule, in ascending order, must pass.

    Raises:
        InvalidUrlError: URL is not an absolute http(s) URL
        re.error: A regex rule does not compile
    """
    validate_url(url)
    url_origin = origin(url)

    domain = next((d for d in domains if origin(d.name) == url_origin), None)
    if domain is None:
        logger.info(f"{url} does not belong to any crawled domain")
        return False

    rules = sorted(domain.crawl_rules, key=lambda rule: rule.order)
    if not rules:
        return True

    for rule in rules:
        if not rule_allows(rule, url):
            logger.debug(f"{url} fails crawl rule {rule.policy} {rule.rule} {rule.pattern!r}")
            return False
    return True

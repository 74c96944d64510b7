"""Jobs that remove stale documents from the search engine."""

from . import crawled, external_services
from .crawl_rules import matches_crawl_rules, rule_allows, rule_to_regex

__all__ = ["crawled", "external_services", "matches_crawl_rules", "rule_allows", "rule_to_regex"]

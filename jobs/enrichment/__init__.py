"""Jobs that add missing metadata to search documents."""

from . import breadcrumbs, category, external_ids, languages, news_published

__all__ = ["breadcrumbs", "category", "external_ids", "languages", "news_published"]

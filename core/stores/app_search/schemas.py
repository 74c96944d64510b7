"""Pydantic schemas for App Search resources."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Documents stay plain dicts: the engine schema is open-ended
Document = dict[str, Any]


class ContentCategory(str, Enum):
    """Values of the meta_content_category document field."""

    NEWS = "news"
    UNIT = "unit"
    SERVICE = "service"
    EXTERNAL = "external"
    UNCATEGORIZED = "uncategorized"


class PageMeta(BaseModel):
    """Paging block of a list/search response."""

    model_config = ConfigDict(extra="ignore")

    current: int = 1
    total_pages: int = 0
    total_results: int = 0
    size: int = 0


class SearchPage(BaseModel):
    """One page of flattened search results."""

    documents: list[Document] = Field(default_factory=list)
    page: PageMeta = Field(default_factory=PageMeta)


class Curation(BaseModel):
    """Promoted/hidden documents for a set of queries."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    queries: list[str] = Field(default_factory=list)
    promoted: list[str] = Field(default_factory=list)
    hidden: list[str] = Field(default_factory=list)


class CrawlRule(BaseModel):
    """Allow/deny pattern applied to crawled URL paths, in ascending order."""

    model_config = ConfigDict(extra="ignore")

    order: int = 0
    policy: Literal["allow", "deny"]
    rule: Literal["begins", "ends", "contains", "regex"]
    pattern: str


class CrawlerDomain(BaseModel):
    """Domain configured in the engine's web crawler."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    name: str
    crawl_rules: list[CrawlRule] = Field(default_factory=list)


class DocumentWriteResult(BaseModel):
    """Per-document result of an index/update call."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    errors: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class DocumentDeleteResult(BaseModel):
    """Per-document result of a delete call."""

    model_config = ConfigDict(extra="ignore")

    id: str
    deleted: bool = False

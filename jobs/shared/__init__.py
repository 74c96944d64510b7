"""Building blocks shared by the curation jobs."""

from .context import JobContext
from .enrichment import (
    DEFAULT_BATCH_SIZE,
    STAGE_ENRICH,
    STAGE_WRITE,
    BatchWrite,
    EnrichmentPipeline,
    PipelineFailure,
    PipelineReport,
    default_item_id,
    describe_error,
)
from .language import (
    SUPPORTED_LANGUAGES,
    UNLOCALIZABLE_CONTENT_TYPES,
    detect_document_language,
    detect_language_from_text,
    language_from_url_path,
    normalize_language,
)

__all__ = [
    # Context
    "JobContext",
    # Pipeline
    "EnrichmentPipeline",
    "BatchWrite",
    "PipelineReport",
    "PipelineFailure",
    "DEFAULT_BATCH_SIZE",
    "STAGE_ENRICH",
    "STAGE_WRITE",
    "default_item_id",
    "describe_error",
    # Language
    "SUPPORTED_LANGUAGES",
    "UNLOCALIZABLE_CONTENT_TYPES",
    "detect_document_language",
    "detect_language_from_text",
    "language_from_url_path",
    "normalize_language",
]

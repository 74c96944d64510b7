"""Helpers for converting App Search search results to documents."""

from typing import Any, Iterable

from .schemas import Document


def search_result_to_document(result: dict[str, Any]) -> Document:
    """Flatten one search result to a document.

    Search results hold their values as ``{"field": {"raw": value}}``. Only
    fields with a truthy raw value are kept; ``_meta`` is dropped.

    Args:
        result: Single entry of a search response's ``results`` list

    Returns:
        Document with plain field values and its ``id``
    """
    document: Document = {}

    for key, value in result.items():
        if key == "id":
            continue
        raw = value.get("raw") if isinstance(value, dict) else None
        if raw:
            document[key] = raw

    identifier = result.get("id")
    document["id"] = identifier.get("raw") if isinstance(identifier, dict) else identifier
    return document


def search_results_to_documents(results: Iterable[dict[str, Any]]) -> list[Document]:
    """Flatten a list of search results to documents."""
    return [search_result_to_document(result) for result in results]

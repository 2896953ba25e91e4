"""
Strip authorization inputs from documents before they leave the pipeline.

Applied to every result set, filtered or not.
"""

from __future__ import annotations

from .schemas import SearchResult, SearchResultSet


def sanitize_result(result: SearchResult) -> SearchResult:
    document = result.document.model_copy(update={"authorization": None})
    return result.model_copy(update={"document": document})


def sanitize_results(results: list[SearchResult]) -> list[SearchResult]:
    return [sanitize_result(result) for result in results]


def sanitize_result_set(result_set: SearchResultSet) -> SearchResultSet:
    return result_set.model_copy(update={"results": sanitize_results(result_set.results)})

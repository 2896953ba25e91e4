"""
Search query dispatch.

Flow:
1) Reject a page cursor when authorization filtering is on
2) Run the query against the engine
3) Drop entries the caller may not see (filtering on only), and the cursors
   computed against the unfiltered set
4) Strip authorization inputs from every document
"""

from __future__ import annotations

import logging

from core import settings

from . import filtering, sanitizer
from .engine import SearchEngine
from .errors import EngineQueryFailed
from .pagination import check_pagination
from .schemas import SearchQuery, SearchResultSet

logger = logging.getLogger(__name__)


async def execute(
    query: SearchQuery,
    *,
    token: str | None,
    filtering_enabled: bool,
    engine: SearchEngine,
    permissions: filtering.Authorizer,
    concurrency: int | None = None,
) -> SearchResultSet:
    check_pagination(query.page_cursor, filtering_enabled=filtering_enabled)

    try:
        result_set = await engine.query(query)
    except Exception as exc:
        logger.exception(
            "Search engine query failed",
            extra={"term": query.term, "error_code": EngineQueryFailed.code},
        )
        raise EngineQueryFailed(exc) from exc

    if filtering_enabled:
        engine_count = len(result_set.results)
        results = await filtering.filter_unauthorized(
            result_set.results,
            to_authorize_request=filtering.authorize_request_for,
            token=token,
            permissions=permissions,
            concurrency=concurrency or settings.permission_concurrency(),
        )
        result_set = SearchResultSet(results=results)
        logger.info(
            "Authorization filtering kept %d of %d search results",
            len(results),
            engine_count,
            extra={"term": query.term, "result_count": len(results)},
        )

    return sanitizer.sanitize_result_set(result_set)

"""
Search API endpoints.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from auth import dependencies as auth_dependencies
from core import settings
from core.permissions import PermissionClient

from . import service
from .engine import PostgresSearchEngine, SearchEngine
from .errors import SearchError
from .schemas import SearchQuery

logger = logging.getLogger(__name__)

router = APIRouter()

# qs-style keys: types=a, types[]=a, types[0]=a, filters[kind]=a, filters[kind][]=a
_TYPES_KEY = re.compile(r"^types(\[\d*\])?$")
_FILTER_KEY = re.compile(r"^filters\[([^\[\]]+)\](\[\d*\])?$")


def _add_filter(filters: dict[str, Any], name: str, value: str, *, as_list: bool) -> None:
    if name not in filters:
        filters[name] = [value] if as_list else value
        return
    existing = filters[name]
    filters[name] = (existing if isinstance(existing, list) else [existing]) + [value]


def parse_search_query(request: Request) -> SearchQuery:
    term = ""
    page_cursor: str | None = None
    types: list[str] = []
    filters: dict[str, Any] = {}

    for key, value in request.query_params.multi_items():
        if key == "term":
            term = value
        elif key == "pageCursor":
            page_cursor = value or None
        elif _TYPES_KEY.match(key):
            types.append(value)
        else:
            match = _FILTER_KEY.match(key)
            if match is not None:
                _add_filter(filters, match.group(1), value, as_list=match.group(2) is not None)

    return SearchQuery(term=term, filters=filters, types=types or None, page_cursor=page_cursor)


def get_filtering_enabled() -> bool:
    # Resolved once per request; the pipeline only sees the bool.
    return settings.permission_enabled()


def get_search_engine() -> SearchEngine:
    return PostgresSearchEngine(page_size=settings.search_page_size())


def get_permission_client() -> PermissionClient:
    return PermissionClient.from_env()


@router.get("/query")
async def query(
    search_query: SearchQuery = Depends(parse_search_query),
    token: str | None = Depends(auth_dependencies.get_bearer_token),
    filtering_enabled: bool = Depends(get_filtering_enabled),
    engine: SearchEngine = Depends(get_search_engine),
    permissions: PermissionClient = Depends(get_permission_client),
) -> dict:
    logger.info(
        "Search request received: term=%r, filters=%s, types=%s, pageCursor=%s",
        search_query.term,
        json.dumps(search_query.filters),
        ",".join(search_query.types or []),
        search_query.page_cursor or "",
        extra={"term": search_query.term, "filtering_enabled": filtering_enabled},
    )

    try:
        result_set = await service.execute(
            search_query,
            token=token,
            filtering_enabled=filtering_enabled,
            engine=engine,
            permissions=permissions,
        )
    except SearchError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc

    return result_set.to_response()

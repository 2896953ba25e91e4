"""
Search engines.

`SearchEngine` is the contract the query pipeline talks to. The Postgres
engine is the one the service ships with; ranking and pagination happen in
SQL, this module only translates queries and rows.
"""

from __future__ import annotations

import base64
import json
import re
from typing import Any, Protocol

from . import repository
from .schemas import SearchDocument, SearchQuery, SearchResult, SearchResultSet

DEFAULT_PAGE_SIZE = 25
# Keeps page * page_size well inside Postgres bigint for any sane page size.
MAX_PAGE = 1_000_000

# Characters with meaning in tsquery syntax.
_TSQUERY_SPECIAL = re.compile(r"[\0()|&:*!'<>\\]")


class SearchEngineError(RuntimeError):
    pass


class SearchEngine(Protocol):
    async def query(self, query: SearchQuery) -> SearchResultSet: ...


def translate_term(term: str) -> str:
    """
    Turn free text into a prefix-matching tsquery.

    "hello wor" -> "(hello | hello:*)&(wor | wor:*)"
    """
    parts = (_TSQUERY_SPECIAL.sub("", part).strip() for part in (term or "").split())
    return "&".join(f"({part} | {part}:*)" for part in parts if part)


def encode_page_cursor(page: int) -> str:
    return base64.b64encode(str(page).encode("utf-8")).decode("utf-8")


def decode_page_cursor(cursor: str | None) -> int:
    if not cursor:
        return 0
    try:
        page = int(base64.b64decode(cursor, validate=True).decode("utf-8"))
    except ValueError:
        return 0
    if page < 0 or page > MAX_PAGE:
        return 0
    return page


def _row_to_result(row: dict[str, Any]) -> SearchResult:
    raw = row.get("document")
    try:
        document = json.loads(raw) if isinstance(raw, str) else raw
    except ValueError as exc:
        raise SearchEngineError("Stored document is not valid JSON.") from exc
    if not isinstance(document, dict):
        raise SearchEngineError("Stored document is not a JSON object.")

    rank = row.get("rank")
    return SearchResult(
        type=str(row["type"]),
        document=SearchDocument.model_validate(document),
        rank=float(rank) if rank is not None else None,
    )


class PostgresSearchEngine:
    def __init__(self, *, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise SearchEngineError("page_size must be at least 1.")
        self.page_size = page_size

    async def query(self, query: SearchQuery) -> SearchResultSet:
        page = decode_page_cursor(query.page_cursor)
        # One extra row tells us whether a next page exists.
        rows = await repository.search_documents(
            ts_query=translate_term(query.term) or None,
            types=query.types,
            filters=query.filters,
            limit=self.page_size + 1,
            offset=page * self.page_size,
        )
        has_next_page = len(rows) > self.page_size

        return SearchResultSet(
            results=[_row_to_result(row) for row in rows[: self.page_size]],
            next_page_cursor=encode_page_cursor(page + 1) if has_next_page else None,
            previous_page_cursor=encode_page_cursor(page - 1) if page > 0 else None,
        )

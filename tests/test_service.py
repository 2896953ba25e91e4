"""Query dispatch: guard, engine, optional filter, sanitizer.

Tests cover:
    - filtering off: engine output returned as-is minus authorization inputs
    - filtering on with a cursor: rejected before the engine is called
    - filtering on: cursors dropped even when the engine produced them
    - engine failures wrapped with a generic message, cause kept
    - cancellation is not wrapped
    - the catalog scenario: allow r1/r3/r5, deny r2, r4 errors
"""

import asyncio
import logging

import pytest

from core.permissions import AuthorizeDecision, PermissionClientError
from search import service
from search.errors import EngineQueryFailed, InvalidPaginationRequest
from search.schemas import SearchDocument, SearchQuery, SearchResult, SearchResultSet

ALLOW = AuthorizeDecision.ALLOW


def _result(ref: str, rank: float) -> SearchResult:
    return SearchResult(
        type="software-catalog",
        rank=rank,
        document=SearchDocument(
            title=ref,
            location=f"/catalog/default/component/{ref}",
            authorization={"permission": "catalog.entity.read", "resourceRef": ref},
        ),
    )


def _result_set(*refs: str, **cursors) -> SearchResultSet:
    return SearchResultSet(
        results=[_result(ref, rank=1.0 - i / 10) for i, ref in enumerate(refs)],
        **cursors,
    )


async def _execute(engine, permissions, *, query=None, filtering_enabled=False, token="tok"):
    return await service.execute(
        query or SearchQuery(term="catalog"),
        token=token,
        filtering_enabled=filtering_enabled,
        engine=engine,
        permissions=permissions,
        concurrency=4,
    )


async def test_filtering_disabled_returns_engine_output_sanitized(fake_engine, fake_permissions):
    fake_engine.result_set = _result_set("r1", "r2", "r3", next_page_cursor="MQ==")

    result_set = await _execute(fake_engine, fake_permissions)

    assert [r.document.title for r in result_set.results] == ["r1", "r2", "r3"]
    assert [r.rank for r in result_set.results] == [r.rank for r in fake_engine.result_set.results]
    assert all(r.document.authorization is None for r in result_set.results)
    assert result_set.next_page_cursor == "MQ=="
    assert fake_permissions.calls == []


async def test_filtering_disabled_passes_cursor_to_engine(fake_engine, fake_permissions):
    query = SearchQuery(term="catalog", page_cursor="MQ==")

    await _execute(fake_engine, fake_permissions, query=query)

    assert fake_engine.calls == [query]


async def test_cursor_with_filtering_is_rejected_before_engine_call(fake_engine, fake_permissions):
    with pytest.raises(InvalidPaginationRequest):
        await _execute(
            fake_engine,
            fake_permissions,
            query=SearchQuery(term="catalog", page_cursor="MQ=="),
            filtering_enabled=True,
        )
    assert fake_engine.calls == []
    assert fake_permissions.calls == []


async def test_filtering_drops_cursors(fake_engine, fake_permissions):
    fake_permissions.decisions = {"r1": ALLOW, "r2": ALLOW}
    fake_engine.result_set = _result_set("r1", "r2", next_page_cursor="MQ==", previous_page_cursor="MA==")

    result_set = await _execute(fake_engine, fake_permissions, filtering_enabled=True)

    assert result_set.next_page_cursor is None
    assert result_set.previous_page_cursor is None
    assert len(result_set.results) == 2


async def test_engine_result_set_is_not_mutated(fake_engine, fake_permissions):
    fake_engine.result_set = _result_set("r1", "r2", next_page_cursor="MQ==")

    await _execute(fake_engine, fake_permissions, filtering_enabled=True)

    assert len(fake_engine.result_set.results) == 2
    assert fake_engine.result_set.next_page_cursor == "MQ=="
    assert fake_engine.result_set.results[0].document.authorization is not None


async def test_engine_error_is_wrapped_with_generic_message(fake_engine, fake_permissions):
    cause = ConnectionError("connection refused to 10.0.0.5:5432")
    fake_engine.error = cause

    with pytest.raises(EngineQueryFailed) as exc_info:
        await _execute(fake_engine, fake_permissions)

    assert str(exc_info.value) == "There was a problem performing the search query."
    assert "10.0.0.5" not in str(exc_info.value)
    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause
    assert exc_info.value.status_code == 500


async def test_engine_cancellation_is_not_wrapped(fake_engine, fake_permissions):
    fake_engine.error = asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await _execute(fake_engine, fake_permissions)


async def test_catalog_scenario(fake_engine, fake_permissions):
    fake_engine.result_set = _result_set("r1", "r2", "r3", "r4", "r5", next_page_cursor="MQ==")
    fake_permissions.decisions = {
        "r1": ALLOW,
        "r3": ALLOW,
        "r4": PermissionClientError("timeout"),
        "r5": ALLOW,
    }

    result_set = await _execute(fake_engine, fake_permissions, filtering_enabled=True)

    assert [r.document.title for r in result_set.results] == ["r1", "r3", "r5"]
    assert result_set.next_page_cursor is None
    assert result_set.previous_page_cursor is None
    assert all(r.document.authorization is None for r in result_set.results)


async def test_filtering_logs_how_many_results_survived(fake_engine, fake_permissions, caplog):
    fake_engine.result_set = _result_set("r1", "r2", "r3")
    fake_permissions.decisions = {"r2": ALLOW}

    with caplog.at_level(logging.INFO, logger="search.service"):
        await _execute(fake_engine, fake_permissions, filtering_enabled=True)

    [record] = [r for r in caplog.records if getattr(r, "result_count", None) is not None]
    assert record.result_count == 1
    assert record.getMessage() == "Authorization filtering kept 1 of 3 search results"

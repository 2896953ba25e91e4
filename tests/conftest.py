"""Shared test fixtures: fake search engine, fake permission service, API client.

Invariants:
    - Tests never reach Postgres or the permission service
    - Route tests swap collaborators through app.dependency_overrides
"""

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from core.permissions import AuthorizeDecision
from main import app
from search import router as search_router
from search.schemas import SearchResultSet


class FakeEngine:
    def __init__(self):
        self.result_set = SearchResultSet()
        self.error: BaseException | None = None
        self.calls = []

    async def query(self, query):
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        return self.result_set


class FakePermissions:
    """Answers by resource_ref; unknown refs are denied.

    A decision may be an exception instance, which is raised instead.
    `delays` lets tests make some checks finish later than others.
    """

    def __init__(self):
        self.decisions = {}
        self.delays = {}
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def authorize(self, request, *, token=None):
        self.calls.append((request, token))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(request.resource_ref, 0))
        finally:
            self.in_flight -= 1
        outcome = self.decisions.get(request.resource_ref, AuthorizeDecision.DENY)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def fake_permissions():
    return FakePermissions()


@pytest.fixture
def filtering():
    """Mutable switch for the per-request filtering flag in route tests."""
    return {"enabled": False}


@pytest.fixture
async def client(fake_engine, fake_permissions, filtering):
    app.dependency_overrides[search_router.get_search_engine] = lambda: fake_engine
    app.dependency_overrides[search_router.get_permission_client] = lambda: fake_permissions
    app.dependency_overrides[search_router.get_filtering_enabled] = lambda: filtering["enabled"]

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()

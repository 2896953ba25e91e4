"""
Pagination guard.

The engine computes page boundaries against the unfiltered candidate set, so
a cursor means nothing once authorization filtering has removed entries.
"""

from __future__ import annotations

from .errors import InvalidPaginationRequest


def check_pagination(page_cursor: str | None, *, filtering_enabled: bool) -> None:
    if filtering_enabled and page_cursor:
        raise InvalidPaginationRequest()

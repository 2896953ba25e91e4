"""
Search pipeline errors.

Each error carries the HTTP status the router maps it to. Messages are safe
to show to untrusted callers; underlying causes stay on `.cause`.
"""

from __future__ import annotations


class SearchError(RuntimeError):
    status_code = 500
    code = "SEARCH_ERROR"


class InvalidPaginationRequest(SearchError):
    status_code = 400
    code = "INVALID_PAGINATION_REQUEST"

    def __init__(self, message: str = "Pagination of search results is not supported.") -> None:
        super().__init__(message)


class EngineQueryFailed(SearchError):
    status_code = 500
    code = "ENGINE_QUERY_FAILED"

    def __init__(self, cause: BaseException) -> None:
        super().__init__("There was a problem performing the search query.")
        self.cause = cause


class PermissionCheckFailed(SearchError):
    """
    A single permission check could not produce a decision.

    Contained by the authorization filter: the entry is dropped and the
    error never reaches the caller.
    """

    code = "PERMISSION_CHECK_FAILED"

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Permission check failed: {cause}")
        self.cause = cause

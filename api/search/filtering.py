"""
Authorization filtering of search results.

Every entry is checked independently against the permission service, with a
bounded number of checks in flight. The output keeps the input order.

Fail-closed: only an explicit ALLOW keeps an entry. DENY, CONDITIONAL, a
missing or malformed authorization input, and any error from the permission
service drop it without failing the query.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Protocol, Sequence, TypeVar

from core.permissions import AuthorizationRequest, AuthorizeDecision

from .errors import PermissionCheckFailed
from .schemas import SearchResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Authorizer(Protocol):
    async def authorize(self, request: AuthorizationRequest, *, token: str | None = None) -> AuthorizeDecision: ...


def authorize_request_for(result: SearchResult) -> AuthorizationRequest | None:
    authorization = result.document.authorization
    if not authorization:
        return None
    return AuthorizationRequest.model_validate(authorization)


async def filter_unauthorized(
    entries: Sequence[T],
    *,
    to_authorize_request: Callable[[T], AuthorizationRequest | None],
    token: str | None,
    permissions: Authorizer,
    concurrency: int = 10,
) -> list[T]:
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _is_allowed(index: int, entry: T) -> bool:
        async with semaphore:
            try:
                request = to_authorize_request(entry)
                if request is None:
                    logger.warning("Search result %d has no authorization input; excluded", index)
                    return False
                decision = await permissions.authorize(request, token=token)
            except Exception as exc:
                failure = PermissionCheckFailed(exc)
                logger.warning(
                    "%s; search result %d excluded",
                    failure,
                    index,
                    extra={"error_code": failure.code},
                )
                return False

        if decision is not AuthorizeDecision.ALLOW:
            logger.debug(
                "Search result %d excluded with decision %s",
                index,
                decision.value,
                extra={"resource_ref": request.resource_ref},
            )
        return decision is AuthorizeDecision.ALLOW

    # gather returns results in argument order, whatever order checks finish in.
    allowed = await asyncio.gather(*(_is_allowed(i, entry) for i, entry in enumerate(entries)))
    return [entry for entry, is_allowed in zip(entries, allowed) if is_allowed]

"""
Permission decision service HTTP client.

Used endpoint:
- POST /api/permission/authorize
    request:  {"items": [{"id": "...", "permission": "...", "resourceRef": "..."}]}
    response: {"items": [{"id": "...", "result": "ALLOW" | "DENY" | "CONDITIONAL"}]}

The client only transports decisions; policy lives in the service.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from . import settings


# Permission failures are explicit and separable from other runtime errors.
class PermissionClientError(RuntimeError):
    pass


class AuthorizeDecision(str, Enum):
    ALLOW = "ALLOW"
    DENY = "DENY"
    CONDITIONAL = "CONDITIONAL"


class AuthorizationRequest(BaseModel):
    """
    One "may this identity see this resource?" question.

    Built from a document's `authorization` field, e.g.
    `{"permission": "catalog.entity.read", "resourceRef": "component:default/foo"}`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    permission: str = Field(..., min_length=1)
    resource_ref: str | None = Field(default=None, alias="resourceRef")


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise PermissionClientError("PERMISSION_BASE_URL is empty.")
    return base_url.rstrip("/")


class PermissionClient:
    def __init__(self, *, base_url: str, timeout_s: float = 5.0, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = _normalize_base_url(base_url)
        self.timeout_s = timeout_s
        # Injected by tests (httpx.MockTransport); None means real network.
        self._transport = transport

    @classmethod
    def from_env(cls) -> PermissionClient:
        return cls(base_url=settings.permission_base_url(), timeout_s=settings.permission_timeout_s())

    async def authorize(self, request: AuthorizationRequest, *, token: str | None = None) -> AuthorizeDecision:
        """
        Ask the decision service about a single request.

        Raises PermissionClientError on transport errors, non-200 responses
        and answers that cannot be matched back to the request.
        """
        item_id = str(uuid.uuid4())
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        body = {"items": [{"id": item_id, **request.model_dump(by_alias=True, exclude_none=True)}]}

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_s,
                transport=self._transport,
            ) as client:
                resp = await client.post("/api/permission/authorize", json=body, headers=headers)
        except httpx.HTTPError as exc:
            raise PermissionClientError(f"Permission request failed: {exc}") from exc

        if resp.status_code != 200:
            # Avoid dumping huge bodies; include a small snippet.
            raise PermissionClientError(f"Permission request failed: {resp.status_code} {resp.text[:300]}")

        try:
            data: dict[str, Any] = resp.json()
        except ValueError as exc:
            raise PermissionClientError("Permission service returned invalid JSON.") from exc

        return _parse_decision(data, item_id)


def _parse_decision(data: dict[str, Any], item_id: str) -> AuthorizeDecision:
    items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(items, list):
        raise PermissionClientError("Permission service returned no items.")

    for item in items:
        if not isinstance(item, dict) or item.get("id") != item_id:
            continue
        try:
            return AuthorizeDecision(str(item.get("result") or ""))
        except ValueError as exc:
            raise PermissionClientError(f"Unknown authorization result: {item.get('result')!r}") from exc

    raise PermissionClientError("Permission service returned no decision for the request.")

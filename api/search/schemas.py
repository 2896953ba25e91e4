"""
Search API schemas.

Field names follow the wire format the frontend speaks (camelCase cursors,
`resourceRef`); Python code uses the snake_case attribute names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchQuery(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    term: str = ""
    filters: dict[str, Any] = Field(default_factory=dict)
    types: list[str] | None = None
    page_cursor: str | None = Field(default=None, alias="pageCursor")

    @field_validator("types")
    @classmethod
    def _dedupe_types(cls, value: list[str] | None) -> list[str] | None:
        # Ordered set: first occurrence wins, blanks dropped.
        if value is None:
            return None
        seen: dict[str, None] = {}
        for item in value:
            item = item.strip()
            if item:
                seen.setdefault(item, None)
        return list(seen) or None


class SearchDocument(BaseModel):
    """
    Engine payload. Engines add their own fields (kind, owner, ...), so extra
    keys are kept as-is.

    `authorization` is the input for the permission check and must never be
    returned to the caller.
    """

    model_config = ConfigDict(extra="allow")

    title: str | None = None
    text: str | None = None
    location: str | None = None
    authorization: dict[str, Any] | None = None

    def to_response(self) -> dict[str, Any]:
        """Fields the engine set, as it set them, minus `authorization`."""
        payload = self.model_dump(exclude_unset=True, exclude={"authorization"})
        payload.update(self.model_extra or {})
        return payload


class SearchResult(BaseModel):
    type: str
    document: SearchDocument
    rank: float | None = None

    def to_response(self) -> dict[str, Any]:
        payload = self.model_dump(exclude_unset=True, exclude={"document"})
        payload["type"] = self.type
        payload["document"] = self.document.to_response()
        return payload


class SearchResultSet(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    results: list[SearchResult] = Field(default_factory=list)
    next_page_cursor: str | None = Field(default=None, alias="nextPageCursor")
    previous_page_cursor: str | None = Field(default=None, alias="previousPageCursor")

    def to_response(self) -> dict[str, Any]:
        """Wire shape: absent cursors are left out rather than sent as null."""
        payload: dict[str, Any] = {"results": [result.to_response() for result in self.results]}
        if self.next_page_cursor is not None:
            payload["nextPageCursor"] = self.next_page_cursor
        if self.previous_page_cursor is not None:
            payload["previousPageCursor"] = self.previous_page_cursor
        return payload

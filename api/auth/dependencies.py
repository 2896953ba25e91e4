"""
Identity dependencies for search routes.

The caller's identity is optional: a missing or malformed Authorization
header yields `None`, and the permission service decides what an anonymous
caller may see.
"""

from __future__ import annotations

from fastapi import Header


def extract_bearer_token(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    if not raw:
        return None

    parts = raw.split(None, 1)
    if len(parts) != 2:
        return None

    scheme, token = parts[0].lower(), parts[1].strip()
    if scheme != "bearer" or not token or any(ch.isspace() for ch in token):
        return None
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    return extract_bearer_token(authorization)

"""
Environment-driven settings.

Every value is read on call, so a request always sees the current
environment. Absent or unparsable values fall back to the default.
"""

from __future__ import annotations

import os

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    return default


def permission_enabled() -> bool:
    return _env_bool("PERMISSION_ENABLED", False)


def permission_base_url() -> str:
    return os.environ.get("PERMISSION_BASE_URL", "http://permission:7007").strip() or "http://permission:7007"


def permission_timeout_s() -> float:
    return _env_float("PERMISSION_TIMEOUT_S", 5.0)


def permission_concurrency() -> int:
    # Semaphore size; zero or negative would deadlock the filter.
    return max(1, _env_int("PERMISSION_CONCURRENCY", 10))


def search_page_size() -> int:
    return max(1, _env_int("SEARCH_PAGE_SIZE", 25))


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip() or "INFO"


def log_format() -> str:
    return os.environ.get("LOG_FORMAT", "json").strip().lower() or "json"


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["http://localhost:3000", "http://127.0.0.1:3000"]


def database_pool_size() -> int:
    return max(1, _env_int("DATABASE_POOL_SIZE", 5))


def database_command_timeout_s() -> float:
    return _env_float("DATABASE_COMMAND_TIMEOUT_S", 30.0)

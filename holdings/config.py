from __future__ import annotations

import os


DEFAULT_WORKBOOK = "holdings.xlsx"
DEFAULT_FETCH_WORKERS = 8
TRUTHY = {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


def workbook_path() -> str:
    return os.environ.get("HOLDINGS_WORKBOOK", "").strip() or DEFAULT_WORKBOOK


def fetch_workers() -> int:
    return _env_int("HOLDINGS_FETCH_WORKERS", DEFAULT_FETCH_WORKERS)


def offline_mode() -> bool:
    return os.environ.get("HOLDINGS_OFFLINE", "").strip().lower() in TRUTHY

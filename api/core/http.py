"""
Shared httpx client for the outbound services (query service, metadata API).

Same lifecycle as the DB pool: created on startup, closed on shutdown
(see `api/main.py`). The timeout is the only one applied to outbound calls.
"""

from __future__ import annotations

import httpx

_client: httpx.AsyncClient | None = None


async def init_client(*, timeout_s: float) -> None:
    global _client
    if _client is not None:
        return None
    _client = httpx.AsyncClient(timeout=timeout_s)


async def close_client() -> None:
    global _client
    if _client is None:
        return None
    await _client.aclose()
    _client = None


def client() -> httpx.AsyncClient:
    if _client is None:
        raise RuntimeError("HTTP client is not initialized. Call init_client() on startup.")
    return _client

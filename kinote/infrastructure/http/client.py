from __future__ import annotations

from typing import Optional

import httpx

DEFAULT_TIMEOUT = 10.0

_client: Optional[httpx.AsyncClient] = None


async def open_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Create the process-wide AsyncClient on first call; later calls reuse it."""
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=timeout, headers={"User-Agent": "kinote-registration"}
        )
    return _client


def get_http_client() -> httpx.AsyncClient:
    """Return the shared client. Must have been opened by the lifespan."""
    if _client is None:
        raise RuntimeError(
            "HTTP client not opened yet. Call open_http_client() at startup."
        )
    return _client


async def close_http_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None

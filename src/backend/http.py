"""Shared HTTP helpers for backend clients.

All helpers translate `httpx` failures into the service error taxonomy so callers only ever handle
`TransportError` / `ParseError`.
"""

from __future__ import annotations

from typing import Any

import httpx

from src.errors import ParseError, TransportError


def create_http_client(*, timeout_s: float) -> httpx.AsyncClient:
    """Create the process-wide async HTTP client (bounded timeout for every call)."""

    return httpx.AsyncClient(timeout=httpx.Timeout(timeout_s), follow_redirects=True)


async def request(
        client: httpx.AsyncClient,
        method: str,
        url: str,
        *,
        operation: str,
        **kwargs: Any,
) -> httpx.Response:
    """Send a request and raise `TransportError` on network errors or non-2xx status."""

    try:
        resp = await client.request(method, url, **kwargs)
        resp.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise TransportError(f"{operation}: HTTP {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise TransportError(f"{operation}: {type(exc).__name__}: {exc}") from exc
    return resp


def decode_json(resp: httpx.Response, *, operation: str) -> Any:
    """Decode a JSON body or raise `ParseError`."""

    try:
        return resp.json()
    except ValueError as exc:
        raise ParseError(f"{operation}: response is not valid JSON") from exc

"""Shared async HTTP client and fetch helpers for upstream services."""

import logging
from typing import Any

import httpx

from nofish.config import get_settings

logger = logging.getLogger(__name__)

# Singleton HTTP client (initialized lazily)
_http_client: httpx.AsyncClient | None = None


class NetworkError(Exception):
    """Raised when an upstream request fails or returns a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


async def get_http_client() -> httpx.AsyncClient:
    """Get or create the singleton HTTP client."""
    global _http_client
    if _http_client is None:
        settings = get_settings()
        _http_client = httpx.AsyncClient(
            timeout=settings.http_timeout,
            headers={"User-Agent": settings.user_agent},
        )
    return _http_client


async def close_http_client() -> None:
    """Close the HTTP client (call on app shutdown)."""
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


async def _get(
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    try:
        client = await get_http_client()
        response = await client.get(url, params=params, headers=headers)
    except httpx.TimeoutException as e:
        raise NetworkError(f"Request to {url} timed out") from e
    except httpx.RequestError as e:
        raise NetworkError(f"Could not connect to {url}: {e}") from e

    if not 200 <= response.status_code < 300:
        raise NetworkError(
            f"{url} returned {response.status_code}",
            status_code=response.status_code,
        )
    return response


async def fetch_json(
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    """
    Fetch a JSON document.

    Args:
        url: Endpoint URL.
        params: Optional query parameters.
        headers: Optional extra request headers.

    Returns:
        Decoded JSON body.

    Raises:
        NetworkError: On transport failure, non-2xx status or invalid JSON.
    """
    response = await _get(url, params=params, headers=headers)
    try:
        return response.json()
    except ValueError as e:
        raise NetworkError(f"{url} returned invalid JSON") from e


async def fetch_text(
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> str:
    """
    Fetch a text document.

    Raises:
        NetworkError: On transport failure or non-2xx status.
    """
    response = await _get(url, params=params, headers=headers)
    return response.text

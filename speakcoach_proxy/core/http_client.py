"""
Shared HTTP client for upstream API calls.
One httpx.AsyncClient per process, created lazily and closed by the app lifespan.
"""
import logging
import httpx
from typing import Optional

from .config import API_TIMEOUT, READ_TIMEOUT, MAX_CONNECTIONS

logger = logging.getLogger("SpeakCoachProxy.Core.HTTPClient")

_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """
    Return the process-wide HTTP client, creating it on first use.

    - timeout: connect/pool use API_TIMEOUT, read uses READ_TIMEOUT
    - limits: MAX_CONNECTIONS total, 20 kept alive
    """
    global _http_client

    if _http_client is None or _http_client.is_closed:
        logger.info(f"Initializing HTTP client. Timeout: {API_TIMEOUT}s, Read Timeout: {READ_TIMEOUT}s, Max Connections: {MAX_CONNECTIONS}")
        _http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(API_TIMEOUT, read=READ_TIMEOUT),
            limits=httpx.Limits(
                max_connections=MAX_CONNECTIONS,
                max_keepalive_connections=20,
                keepalive_expiry=60.0
            ),
            follow_redirects=True,
            trust_env=True
        )

    return _http_client


def set_http_client(client: Optional[httpx.AsyncClient]) -> None:
    """Replace the shared client (used by tests to install a mock transport)."""
    global _http_client
    _http_client = client


async def close_http_client():
    """Close the shared client on application shutdown."""
    global _http_client

    if _http_client is not None:
        if not _http_client.is_closed:
            logger.info("Closing HTTP client")
            await _http_client.aclose()
        _http_client = None

"""HTTP client utilities with retry and timeout handling."""

import logging

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def create_http_client(
    timeout: float | None = None,
    base_url: str | None = None,
    headers: dict[str, str] | None = None,
    user_agent: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    Create an async HTTP client with sensible defaults.

    Args:
        timeout: Request timeout in seconds.
        base_url: Optional base URL for all requests.
        headers: Extra headers sent with every request.
        user_agent: Value for the User-Agent header.
        transport: Optional transport override (tests use httpx.MockTransport).

    Returns:
        Configured httpx.AsyncClient instance.
    """
    client_headers = dict(headers or {})
    if user_agent:
        client_headers["User-Agent"] = user_agent

    return httpx.AsyncClient(
        base_url=base_url or "",
        timeout=httpx.Timeout(timeout or DEFAULT_TIMEOUT),
        follow_redirects=True,
        headers=client_headers,
        transport=transport,
    )


# Retry only transport-level failures; HTTP error statuses surface immediately
http_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
    reraise=True,
)

"""Plain HTTP fetch helpers."""

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from dotnet_build_tools.core.exceptions import HttpError
from dotnet_build_tools.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 60


@retry(
    retry=retry_if_exception_type(httpx.TransportError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)
def _get(url: str, client: httpx.Client | None) -> httpx.Response:
    if client is not None:
        return client.get(url)
    with httpx.Client(timeout=DEFAULT_TIMEOUT, follow_redirects=True) as owned:
        return owned.get(url)


def _fetch(url: str, client: httpx.Client | None) -> httpx.Response:
    logger.debug(f"[HTTP] GET {url}")
    try:
        response = _get(url, client)
    except httpx.TransportError as e:
        raise HttpError(f"Request failed: {e}", url=url) from e

    if response.status_code >= 400:
        raise HttpError(
            f"Request failed: {response.status_code}",
            url=url,
            status_code=response.status_code,
        )
    return response


def fetch_text(url: str, client: httpx.Client | None = None) -> str:
    """
    Download a text resource.

    Args:
        url: Resource URL; blank or whitespace-only returns an empty string
        client: Optional client to reuse (timeouts are its concern)

    Returns:
        Response body decoded as text

    Raises:
        HttpError: On transport failure or a non-success status
    """
    if not url or not url.strip():
        return ""
    return _fetch(url, client).text


def fetch_bytes(url: str, client: httpx.Client | None = None) -> bytes:
    """Download a binary resource. Same contract as fetch_text."""
    if not url or not url.strip():
        return b""
    return _fetch(url, client).content

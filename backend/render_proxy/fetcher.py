"""
Remote HTML fetch and a generic pass-through proxy.

The design-tool plugin runs in a sandbox without network access to arbitrary
origins, so it pulls pages (and their assets) through these helpers before
posting the HTML back to /api/render.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx

from render_proxy.config import get_settings
from render_proxy.errors import InputError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class ProxiedResponse:
    status_code: int
    content_type: str
    content: bytes


def validate_url(url: Optional[str]) -> str:
    if not url:
        raise InputError("Missing required parameter: url")
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InputError("The provided URL is not valid")
    return url.strip()


def _client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    settings = get_settings()
    return httpx.AsyncClient(
        timeout=settings.fetch_timeout,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent, "Accept": "*/*"},
        transport=transport,
    )


async def fetch_html(url: Optional[str], transport: Optional[httpx.AsyncBaseTransport] = None) -> str:
    """GET ``url`` and return its body as text, whatever the status code."""
    target = validate_url(url)
    logger.info("[fetch] GET %s", target)
    try:
        async with _client(transport) as client:
            response = await client.get(target)
    except httpx.HTTPError as e:
        raise UpstreamError(f"Failed to fetch {target}: {e}") from e

    if response.is_error:
        # Error pages are still HTML the caller may want to render
        logger.warning("[fetch] %s returned HTTP %d", target, response.status_code)
    return response.text


async def proxy_request(
    method: str,
    url: Optional[str],
    authorization: Optional[str] = None,
    body=None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ProxiedResponse:
    """
    Forward one request to ``url``. Only the Authorization header is passed on;
    non-GET/HEAD bodies are re-sent as JSON.
    """
    target = validate_url(url)
    headers = {"Authorization": authorization} if authorization else {}
    content = None
    if method not in ("GET", "HEAD") and body is not None:
        content = json.dumps(body)
        headers["Content-Type"] = "application/json"

    logger.info("[proxy] %s %s", method, target)
    try:
        async with _client(transport) as client:
            response = await client.request(method, target, headers=headers, content=content)
    except httpx.HTTPError as e:
        raise UpstreamError(str(e) or "An unexpected error occurred") from e

    if response.is_error:
        raise UpstreamError(
            response.reason_phrase or "Request failed",
            status_code=response.status_code,
            error=f"HTTP {response.status_code}",
        )

    return ProxiedResponse(
        status_code=response.status_code,
        content_type=response.headers.get("content-type", "text/plain"),
        content=response.content,
    )

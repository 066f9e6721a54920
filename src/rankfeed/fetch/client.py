"""HTTP helpers shared by every source."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import httpx


logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Cache-Control": "no-cache",
}

ACCEPT_CSV = "text/csv,text/plain,*/*"
ACCEPT_HTML = "text/html,application/xhtml+xml"
ACCEPT_JSON = "application/json"


class FetchError(RuntimeError):
    """Raised when a request fails or returns a non-2xx status."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


def build_client(*, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers=DEFAULT_HEADERS,
        timeout=timeout,
        follow_redirects=True,
        transport=transport,
    )


async def _get(client: httpx.AsyncClient, url: str, headers: Mapping[str, str]) -> httpx.Response:
    try:
        response = await client.get(url, headers=headers)
    except httpx.HTTPError as exc:
        raise FetchError(f"Request failed: {exc}", url=url) from exc
    if not response.is_success:
        raise FetchError(
            f"HTTP error! status: {response.status_code}",
            url=url,
            status_code=response.status_code,
        )
    return response


async def fetch_text(client: httpx.AsyncClient, url: str, *, accept: str = ACCEPT_HTML) -> str:
    response = await _get(client, url, {"Accept": accept})
    text = response.text
    logger.info("Fetched %d bytes from %s", len(text), response.url.host or url)
    return text


async def fetch_json(client: httpx.AsyncClient, url: str) -> Any:
    response = await _get(client, url, {"Accept": ACCEPT_JSON})
    try:
        return response.json()
    except json.JSONDecodeError as exc:
        raise FetchError(f"Response is not valid JSON: {exc}", url=url) from exc

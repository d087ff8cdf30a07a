from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .config import Settings


logger = logging.getLogger(__name__)


class FetchError(Exception):
    """The source document could not be retrieved."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


@dataclass
class FetchedDocument:
    """Raw markdown as served by the docs site."""

    url: str
    text: str
    content_type: str


def _fetch_error(url: str, e: httpx.HTTPError) -> FetchError:
    if isinstance(e, httpx.HTTPStatusError):
        return FetchError(url, f"HTTP {e.response.status_code}")
    return FetchError(url, str(e) or type(e).__name__)


def _to_document(url: str, resp: httpx.Response) -> FetchedDocument:
    content_type = resp.headers.get("content-type", "")
    if "html" in content_type.lower():
        logger.warning("Expected markdown from %s, got %s", url, content_type)

    logger.debug("Fetched %d characters from %s", len(resp.text), url)
    return FetchedDocument(url=url, text=resp.text, content_type=content_type)


def fetch_markdown(
    url: str, settings: Settings, client: Optional[httpx.Client] = None
) -> FetchedDocument:
    """GET a markdown document. One attempt; no retries.

    Pass ``client`` to reuse a connection pool (or a mock transport in tests);
    otherwise a short-lived client is created with the configured timeout.
    """

    logger.debug("Fetching %s", url)
    try:
        if client is None:
            with httpx.Client(timeout=settings.http_timeout) as own_client:
                resp = own_client.get(url)
                resp.raise_for_status()
        else:
            resp = client.get(url)
            resp.raise_for_status()
    except httpx.HTTPError as e:
        raise _fetch_error(url, e) from e

    return _to_document(url, resp)


async def fetch_markdown_async(
    url: str, settings: Settings, client: Optional[httpx.AsyncClient] = None
) -> FetchedDocument:
    """Non-blocking variant of :func:`fetch_markdown` for the tool server."""

    logger.debug("Fetching %s", url)
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.http_timeout) as own_client:
                resp = await own_client.get(url)
                resp.raise_for_status()
        else:
            resp = await client.get(url)
            resp.raise_for_status()
    except httpx.HTTPError as e:
        raise _fetch_error(url, e) from e

    return _to_document(url, resp)

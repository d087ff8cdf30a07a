import asyncio

import httpx
import pytest

from release_digest.config import Settings
from release_digest.fetch import FetchError, fetch_markdown, fetch_markdown_async


URL = "https://docs.example.com/desktop/release-notes/index.md"


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_fetch_markdown_returns_text():
    def handler(request):
        assert str(request.url) == URL
        return httpx.Response(
            200, text="## 4.45.0\nbody", headers={"content-type": "text/markdown"}
        )

    with _client(handler) as client:
        doc = fetch_markdown(URL, Settings(), client=client)

    assert doc.url == URL
    assert doc.text == "## 4.45.0\nbody"
    assert doc.content_type == "text/markdown"


def test_fetch_markdown_http_error_status():
    with _client(lambda request: httpx.Response(404, text="missing")) as client:
        with pytest.raises(FetchError) as excinfo:
            fetch_markdown(URL, Settings(), client=client)

    assert excinfo.value.url == URL
    assert excinfo.value.reason == "HTTP 404"


def test_fetch_markdown_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(FetchError, match="connection refused"):
            fetch_markdown(URL, Settings(), client=client)


def test_fetch_markdown_warns_on_html(caplog):
    def handler(request):
        return httpx.Response(
            200, text="<html></html>", headers={"content-type": "text/html; charset=utf-8"}
        )

    with _client(handler) as client:
        with caplog.at_level("WARNING", logger="release_digest.fetch"):
            doc = fetch_markdown(URL, Settings(), client=client)

    assert doc.text == "<html></html>"
    assert "Expected markdown" in caplog.text


def _fetch_async(handler):
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_markdown_async(URL, Settings(), client=client)

    return asyncio.run(_run())


def test_fetch_markdown_async_returns_text():
    doc = _fetch_async(
        lambda request: httpx.Response(
            200, text="## 4.45.0\nbody", headers={"content-type": "text/markdown"}
        )
    )
    assert doc.text == "## 4.45.0\nbody"
    assert doc.content_type == "text/markdown"


def test_fetch_markdown_async_wraps_errors():
    with pytest.raises(FetchError) as excinfo:
        _fetch_async(lambda request: httpx.Response(500, text="boom"))
    assert excinfo.value.reason == "HTTP 500"

    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(FetchError, match="timed out"):
        _fetch_async(handler)

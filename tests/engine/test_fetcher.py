from __future__ import annotations

import httpx
import pytest

from activity_sync.engine.fetcher import DEFAULT_USER_AGENT, HttpFetcher
from activity_sync.errors import FetchError


def _fetcher(handler) -> HttpFetcher:
    client = httpx.Client(
        transport=httpx.MockTransport(handler),
        headers={"User-Agent": DEFAULT_USER_AGENT},
    )
    return HttpFetcher(timeout=5.0, client=client)


def test_fetcher_sends_source_headers() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["headers"] = dict(request.headers)
        return httpx.Response(200, text='{"data": []}')

    with _fetcher(handler) as fetcher:
        body = fetcher.get("https://example.com/api", {"cookie": "sid=1", "user-agent": "custom"})

    assert body == '{"data": []}'
    assert captured["url"] == "https://example.com/api"
    assert captured["headers"]["cookie"] == "sid=1"
    assert captured["headers"]["user-agent"] == "custom"


def test_fetcher_raises_on_error_status() -> None:
    with _fetcher(lambda request: httpx.Response(503, text="busy")) as fetcher:
        with pytest.raises(FetchError) as excinfo:
            fetcher.get("https://example.com/api", {})
    assert excinfo.value.status_code == 503
    assert "https://example.com/api" in str(excinfo.value)


def test_fetcher_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _fetcher(handler) as fetcher:
        with pytest.raises(FetchError) as excinfo:
            fetcher.get("https://example.com/api", {})
    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)

"""Plain HTTP GET fetching for index and detail pages."""

from __future__ import annotations

from typing import Any, Mapping, Protocol

import httpx
import structlog

from ..errors import FetchError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class Fetcher(Protocol):
    """Capability the pipeline uses to acquire raw responses."""

    def get(self, url: str, headers: Mapping[str, str]) -> str: ...


class HttpFetcher:
    """``httpx`` backed fetcher; one attempt per call, no retries."""

    def __init__(
        self,
        timeout: float = 20.0,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.timeout = timeout
        self.logger = logger or structlog.get_logger("activity_sync.fetcher")
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=timeout,
            headers={"User-Agent": DEFAULT_USER_AGENT},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.close()

    def get(self, url: str, headers: Mapping[str, str]) -> str:
        try:
            response = self._client.get(url, headers=dict(headers), timeout=self.timeout)
        except httpx.HTTPError as exc:
            self.logger.warning("fetch_failed", url=url, error=str(exc))
            raise FetchError(url, str(exc)) from exc
        if self._is_failure(response):
            self.logger.warning("fetch_failed", url=url, status=response.status_code)
            raise FetchError(
                url, f"Unexpected status {response.status_code}", status_code=response.status_code
            )
        self.logger.debug("fetched", url=url, status=response.status_code, size=len(response.text))
        return response.text

    @staticmethod
    def _is_failure(response: Any) -> bool:
        status_code = getattr(response, "status_code", 0)
        return status_code >= 400


__all__ = ["DEFAULT_USER_AGENT", "Fetcher", "HttpFetcher"]

"""Two-stage (index, then per-item detail) collection for one source."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import ParseError
from ..events import NormalizedEvent
from .fetcher import Fetcher

if TYPE_CHECKING:
    from ..sources.base import SourceAdapter

RAW_PREVIEW_CHARS = 2000


class FetchOrchestrator:
    """Fetch the index, expand detail pages sequentially, then parse."""

    def run(self, adapter: "SourceAdapter", fetcher: Fetcher) -> list[NormalizedEvent]:
        log = adapter.logger
        headers = adapter.headers()
        index_url = adapter.request_url()
        index_response = fetcher.get(index_url, headers)
        log.debug("index_fetched", url=index_url, size=len(index_response))

        plan = adapter.needs_detail(index_response)
        if plan.needed:
            responses = []
            for url in plan.urls:
                responses.append(fetcher.get(url, headers))
            log.info("details_fetched", count=len(responses))
        else:
            responses = [index_response]

        try:
            events = adapter.parse(responses)
        except ParseError as exc:
            log.error(
                "parse_failed",
                error=str(exc),
                raw_response=index_response[:RAW_PREVIEW_CHARS],
            )
            raise
        log.info("events_parsed", count=len(events))
        return events


__all__ = ["FetchOrchestrator"]

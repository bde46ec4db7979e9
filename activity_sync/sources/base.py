"""Source adapter contract implemented by every history provider."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, Iterable

from ..config import SourceConfig
from ..errors import ParseError
from ..events import NormalizedEvent, make_event_id
from ..infra import HistoryStore
from ..logging_conf import source_logger


@dataclass(frozen=True, slots=True)
class DetailPlan:
    """Outcome of inspecting an index response.

    ``needed=False`` means the index response is all the source needs.
    ``needed=True`` with an empty ``urls`` tuple means the detail stage exists
    but nothing was found this cycle.
    """

    needed: bool
    urls: tuple[str, ...] = ()

    @classmethod
    def fetch(cls, urls: Iterable[str]) -> "DetailPlan":
        return cls(needed=True, urls=tuple(urls))


NO_DETAIL = DetailPlan(needed=False)

# Raised by one malformed history item; the item is skipped, the rest survive.
ITEM_ERRORS = (KeyError, IndexError, TypeError, ValueError, OverflowError, OSError)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SourceAdapter(ABC):
    """Capabilities the pipeline needs from one source."""

    IDENTIFIER: ClassVar[str]

    def __init__(
        self,
        config: SourceConfig,
        history: HistoryStore,
        calendar_id: str | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.config = config
        self.history = history
        self.clock = clock
        self._calendar_id = calendar_id or config.calendar_id
        self.logger = source_logger(self.IDENTIFIER)
        self._event_ids: set[str] = history.load(self.IDENTIFIER)

    # ------------------------------------------------------------------
    def identifier(self) -> str:
        return self.IDENTIFIER

    def headers(self) -> dict[str, str]:
        return dict(self.config.headers)

    def calendar_id(self) -> str:
        return self._calendar_id

    def request_url(self) -> str:
        today = self.clock().astimezone(timezone.utc).strftime("%Y-%m-%d")
        return self.config.request_url_template.replace("{date}", today)

    def needs_detail(self, index_response: str) -> DetailPlan:
        return NO_DETAIL

    @abstractmethod
    def parse(self, responses: list[str]) -> list[NormalizedEvent]:
        """Turn raw responses into events; raise ``ParseError`` only wholesale."""

    # ------------------------------------------------------------------
    def event_ids(self) -> set[str]:
        return self._event_ids

    def persist_dedup_state(self) -> None:
        self.history.save(self.IDENTIFIER, self._event_ids)
        self.logger.info("dedup_state_persisted", known_ids=len(self._event_ids))

    def suppress_short_events(self) -> bool:
        return True

    def suppress_in_progress_events(self) -> bool:
        return True

    # ------------------------------------------------------------------
    def event_id(self, *parts: object) -> str:
        return make_event_id(self.IDENTIFIER, *parts)

    def _load_single_json(self, responses: list[str]) -> Any:
        if len(responses) != 1:
            raise ParseError(f"{self.IDENTIFIER} expects one index response, got {len(responses)}")
        try:
            return json.loads(responses[0])
        except ValueError as exc:
            raise ParseError(f"Cannot parse {self.IDENTIFIER} response: {exc}") from exc


__all__ = ["DetailPlan", "ITEM_ERRORS", "NO_DETAIL", "SourceAdapter", "utc_now"]

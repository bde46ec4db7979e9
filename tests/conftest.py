"""Shared fixtures: isolated home directory, fake fetcher/sink and a stub source."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

import pytest

from activity_sync.config import ConfigLocator, ConfigRepository, SourceConfig
from activity_sync.errors import DeliveryError, FetchError
from activity_sync.events import Instant, NormalizedEvent, WholeDay
from activity_sync.infra import JsonHistoryStore
from activity_sync.sinks import BaseSink
from activity_sync.sources.base import NO_DETAIL, DetailPlan, SourceAdapter

FIXED_NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeFetcher:
    """Serve canned bodies by URL; an ``Exception`` value is raised instead."""

    def __init__(self, responses: Mapping[str, Any] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, dict[str, str]]] = []

    def get(self, url: str, headers: Mapping[str, str]) -> str:
        self.calls.append((url, dict(headers)))
        if url not in self.responses:
            raise FetchError(url, "no canned response")
        value = self.responses[url]
        if isinstance(value, Exception):
            raise value
        return value

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]

    def close(self) -> None:
        pass


class RecordingSink(BaseSink):
    def __init__(self, fail_after: int | None = None) -> None:
        self.delivered: list[NormalizedEvent] = []
        self.fail_after = fail_after
        self.closed = False

    def deliver(self, event: NormalizedEvent) -> None:
        if self.fail_after is not None and len(self.delivered) >= self.fail_after:
            raise DeliveryError("calendar rejected the event", status_code=500)
        self.delivered.append(event)

    def close(self) -> None:
        self.closed = True


class StubSource(SourceAdapter):
    """Adapter whose parse result and detail plan are set by the test."""

    IDENTIFIER = "stub"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.events: list[NormalizedEvent] = []
        self.plan: DetailPlan = NO_DETAIL
        self.parsed: list[list[str]] = []
        self.short_events_suppressed = True
        self.in_progress_suppressed = True

    def needs_detail(self, index_response: str) -> DetailPlan:
        return self.plan

    def parse(self, responses: list[str]) -> list[NormalizedEvent]:
        self.parsed.append(list(responses))
        return list(self.events)

    def suppress_short_events(self) -> bool:
        return self.short_events_suppressed

    def suppress_in_progress_events(self) -> bool:
        return self.in_progress_suppressed


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("ACTIVITY_SYNC_HOME", str(tmp_path))
    monkeypatch.delenv("ACTIVITY_SYNC_GOOGLE_TOKEN", raising=False)
    return tmp_path


@pytest.fixture
def temp_config_repository(tmp_path: Path) -> Iterable[ConfigRepository]:
    locator = ConfigLocator(project_root=tmp_path)
    yield ConfigRepository(locator)


@pytest.fixture
def history_store(tmp_path: Path) -> JsonHistoryStore:
    return JsonHistoryStore(tmp_path / "data" / "history")


@pytest.fixture
def sample_source_config() -> Callable[..., SourceConfig]:
    def _builder(**overrides: Any) -> SourceConfig:
        base: dict[str, Any] = {
            "source_name": "stub",
            "request_url_template": "https://example.com/history?date={date}",
            "headers": {"User-Agent": "pytest", "Cookie": "session=abc"},
            "calendar_id": "cal-1",
        }
        base.update(overrides)
        return SourceConfig(**base)

    return _builder


@pytest.fixture
def make_event() -> Callable[..., NormalizedEvent]:
    def _builder(
        event_id: str = "stub|1",
        *,
        start: datetime | None = None,
        minutes: float = 30,
        day: Any = None,
        summary: str = "Stub event",
    ) -> NormalizedEvent:
        if day is not None:
            duration: Any = WholeDay(day)
        else:
            begin = start or FIXED_NOW - timedelta(hours=3)
            duration = Instant(begin, begin + timedelta(minutes=minutes))
        return NormalizedEvent(summary=summary, description="", duration=duration, id=event_id)

    return _builder


@pytest.fixture
def stub_source(sample_source_config, history_store) -> Callable[..., StubSource]:
    def _builder(**config_overrides: Any) -> StubSource:
        return StubSource(
            sample_source_config(**config_overrides),
            history_store,
            clock=lambda: FIXED_NOW,
        )

    return _builder


@pytest.fixture
def fake_fetcher() -> Callable[..., FakeFetcher]:
    return FakeFetcher


@pytest.fixture
def recording_sink() -> Callable[..., RecordingSink]:
    return RecordingSink


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW

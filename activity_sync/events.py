"""Normalised calendar event model shared by every source."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Union


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True, slots=True)
class Instant:
    """Bounded time range, stored in UTC."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _to_utc(self.start))
        object.__setattr__(self, "end", _to_utc(self.end))
        if self.end < self.start:
            raise ValueError("Instant end must not precede its start")

    @property
    def length(self):
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class WholeDay:
    """All-day marker."""

    date: date


Duration = Union[Instant, WholeDay]


def make_event_id(source: str, *parts: object) -> str:
    """Build a source-namespaced identity such as ``wakatime|1700000000``."""

    return "|".join([source, *(str(part) for part in parts)])


@dataclass(frozen=True, slots=True)
class NormalizedEvent:
    """A deliverable event together with its stable identity."""

    summary: str
    description: str
    duration: Duration
    id: str

    def to_calendar_body(self) -> dict[str, Any]:
        """Render the Google Calendar v3 insert payload."""

        if isinstance(self.duration, Instant):
            start = {"dateTime": self.duration.start.isoformat()}
            end = {"dateTime": self.duration.end.isoformat()}
        else:
            # Calendar all-day ranges end on the following, excluded day.
            start = {"date": self.duration.date.strftime("%Y-%m-%d")}
            end = {"date": (self.duration.date + timedelta(days=1)).strftime("%Y-%m-%d")}
        return {
            "summary": self.summary,
            "description": self.description,
            "start": start,
            "end": end,
        }

    def start_label(self) -> str:
        if isinstance(self.duration, Instant):
            return self.duration.start.isoformat()
        return self.duration.date.isoformat()


__all__ = ["Duration", "Instant", "NormalizedEvent", "WholeDay", "make_event_id"]

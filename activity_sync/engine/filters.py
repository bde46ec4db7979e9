"""Suppression rules applied to freshly parsed events."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Iterable

import structlog

from ..events import Duration, Instant, NormalizedEvent

if TYPE_CHECKING:
    from ..sources.base import SourceAdapter

SETTLE_PERIOD = timedelta(hours=1)
SETTLE_DAYS = timedelta(days=1)
MIN_LENGTH = timedelta(minutes=5)

logger = structlog.get_logger("activity_sync.filters")


def is_closed(duration: Duration, now: datetime) -> bool:
    """Whether the event window closed long enough ago to be final."""

    now = now.astimezone(timezone.utc) if now.tzinfo else now.replace(tzinfo=timezone.utc)
    if isinstance(duration, Instant):
        return duration.end < now - SETTLE_PERIOD
    return duration.date <= now.date() - SETTLE_DAYS


def is_long_enough(duration: Duration) -> bool:
    if isinstance(duration, Instant):
        return duration.length > MIN_LENGTH
    return True


def filter_events(
    events: Iterable[NormalizedEvent],
    now: datetime,
    *,
    suppress_in_progress: bool = True,
    suppress_short: bool = True,
) -> list[NormalizedEvent]:
    kept = list(events)
    if suppress_in_progress:
        closed = []
        for event in kept:
            if is_closed(event.duration, now):
                closed.append(event)
            else:
                logger.info("event_suppressed_in_progress", summary=event.summary, id=event.id)
        kept = closed
    if suppress_short:
        long_enough = []
        for event in kept:
            if is_long_enough(event.duration):
                long_enough.append(event)
            else:
                logger.info("event_suppressed_short", summary=event.summary, id=event.id)
        kept = long_enough
    return kept


def filter_for_source(
    adapter: "SourceAdapter", events: Iterable[NormalizedEvent], now: datetime
) -> list[NormalizedEvent]:
    return filter_events(
        events,
        now,
        suppress_in_progress=adapter.suppress_in_progress_events(),
        suppress_short=adapter.suppress_short_events(),
    )


__all__ = [
    "MIN_LENGTH",
    "SETTLE_PERIOD",
    "filter_events",
    "filter_for_source",
    "is_closed",
    "is_long_enough",
]

"""Delivery gate backed by each source's set of delivered event ids."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

import structlog

from ..events import NormalizedEvent

if TYPE_CHECKING:
    from ..sources.base import SourceAdapter


class DeliveryGate:
    """Drop events whose id was already delivered, recording the new ones."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self.logger = logger or structlog.get_logger("activity_sync.dedup")

    def accept(
        self, adapter: "SourceAdapter", events: Iterable[NormalizedEvent]
    ) -> list[NormalizedEvent]:
        known = adapter.event_ids()
        accepted: list[NormalizedEvent] = []
        for event in events:
            if event.id in known:
                self.logger.debug("event_already_delivered", source=adapter.identifier(), id=event.id)
                continue
            known.add(event.id)
            self.logger.debug("event_first_seen", source=adapter.identifier(), id=event.id)
            accepted.append(event)
        return accepted


__all__ = ["DeliveryGate"]

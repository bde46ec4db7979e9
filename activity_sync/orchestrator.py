"""Per-source cycle wiring together collection, filtering, dedup and delivery."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from .engine import DeliveryGate, FetchOrchestrator, Fetcher, filter_for_source
from .infra import HistoryStore
from .logging_conf import configure_logging
from .sinks import BaseSink
from .sources import SourceAdapter
from .sources.base import utc_now

SinkFactory = Callable[[SourceAdapter], BaseSink]


@dataclass(slots=True)
class CycleSummary:
    """Counters describing one source's cycle."""

    source: str
    fetched: int = 0
    suppressed: int = 0
    duplicates: int = 0
    delivered: int = 0

    def as_dict(self) -> dict[str, int | str]:
        return {
            "source": self.source,
            "fetched": self.fetched,
            "suppressed": self.suppressed,
            "duplicates": self.duplicates,
            "delivered": self.delivered,
        }


class Orchestrator:
    """Run a full fetch → filter → dedup → deliver cycle for one source."""

    def __init__(
        self,
        fetcher: Fetcher,
        sink_factory: SinkFactory,
        history: HistoryStore | None = None,
        clock: Callable[[], datetime] = utc_now,
        collector: FetchOrchestrator | None = None,
        gate: DeliveryGate | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.sink_factory = sink_factory
        self.history = history
        self.clock = clock
        self.collector = collector or FetchOrchestrator()
        self.gate = gate or DeliveryGate()
        self.logger = configure_logging().bind(component="orchestrator")

    def run_cycle(self, adapter: SourceAdapter, now: datetime | None = None) -> CycleSummary:
        """Deliver the new events of ``adapter``.

        Dedup state is persisted only when every step, delivery included,
        succeeded; any exception leaves it untouched and propagates.
        """

        now = now or self.clock()
        summary = CycleSummary(source=adapter.identifier())
        events = self.collector.run(adapter, self.fetcher)
        summary.fetched = len(events)

        survivors = filter_for_source(adapter, events, now)
        summary.suppressed = summary.fetched - len(survivors)

        fresh = self.gate.accept(adapter, survivors)
        summary.duplicates = len(survivors) - len(fresh)

        if fresh:
            sink = self.sink_factory(adapter)
            try:
                for event in fresh:
                    sink.deliver(event)
                    summary.delivered += 1
                    adapter.logger.info("event_delivered", id=event.id, summary=event.summary)
            finally:
                sink.close()

        adapter.persist_dedup_state()
        adapter.logger.info("cycle_completed", **summary.as_dict())
        return summary

    # ------------------------------------------------------------------
    def view_history(self, source_name: str, limit: int = 20) -> list[str]:
        if self.history is None:
            return []
        return self.history.recent(source_name, limit)

    def reset_history(self, source_name: str) -> None:
        if self.history is not None:
            self.history.reset(source_name)
            self.logger.info("history_reset", source=source_name)


__all__ = ["CycleSummary", "Orchestrator", "SinkFactory"]

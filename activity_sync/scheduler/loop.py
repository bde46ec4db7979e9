"""Fixed-interval polling loop over every active source."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Sequence

from ..logging_conf import configure_logging
from ..sources.base import SourceAdapter, utc_now

if TYPE_CHECKING:
    from ..orchestrator import CycleSummary, Orchestrator


@dataclass(slots=True)
class TickReport:
    started_at: datetime
    succeeded: list["CycleSummary"] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


class Scheduler:
    """Drive every source sequentially once per ``interval`` seconds.

    A failing source is logged and skipped; it never stops the other sources
    or the loop itself. ``clock``, ``sleep`` and ``monotonic`` are injectable
    so tests can run a bounded number of ticks without waiting.
    """

    def __init__(
        self,
        orchestrator: "Orchestrator",
        adapters: Sequence[SourceAdapter],
        interval: float = 3600.0,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be greater than zero")
        self.orchestrator = orchestrator
        self.adapters = list(adapters)
        self.interval = interval
        self.clock = clock
        self.sleep = sleep
        self.monotonic = monotonic
        self.logger = configure_logging().bind(component="scheduler")
        self.last_report: TickReport | None = None

    def tick(self) -> TickReport:
        now = self.clock()
        report = TickReport(started_at=now)
        self.logger.info("tick_started", at=now.isoformat(), sources=len(self.adapters))
        for adapter in self.adapters:
            try:
                summary = self.orchestrator.run_cycle(adapter, now=now)
            except Exception as exc:  # noqa: BLE001
                report.failed[adapter.identifier()] = str(exc)
                self.logger.error(
                    "cycle_failed",
                    source=adapter.identifier(),
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                continue
            report.succeeded.append(summary)
        self.logger.info(
            "tick_finished", succeeded=len(report.succeeded), failed=len(report.failed)
        )
        self.last_report = report
        return report

    def run(self, max_ticks: int | None = None) -> int:
        """Tick immediately, then every ``interval`` seconds; return ticks run."""

        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            started = self.monotonic()
            self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            elapsed = self.monotonic() - started
            self.logger.info("waiting_for_next_tick", seconds=max(0.0, self.interval - elapsed))
            self.sleep(max(0.0, self.interval - elapsed))
        return ticks


__all__ = ["Scheduler", "TickReport"]

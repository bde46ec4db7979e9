"""APScheduler wrapper used by the long-running ``serve`` command."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..logging_conf import configure_logging

TICK_JOB_ID = "sync::tick"


class APSchedulerAdapter:
    """Run the polling tick as a single non-overlapping interval job."""

    def __init__(self) -> None:
        self.scheduler = BackgroundScheduler()
        self.logger = configure_logging().bind(component="apscheduler")
        self.started = False

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self) -> None:
        if self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_tick(
        self,
        callback: Callable[[], Any],
        interval: float | dict,
        run_immediately: bool = True,
    ) -> None:
        trigger = self._build_trigger(interval)
        options: dict[str, Any] = {}
        if run_immediately:
            options["next_run_time"] = datetime.now(timezone.utc)
        self.scheduler.add_job(
            callback,
            trigger=trigger,
            id=TICK_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **options,
        )
        self.logger.info("job_scheduled", job=TICK_JOB_ID, interval=str(interval))

    def _build_trigger(self, interval: float | dict) -> IntervalTrigger:
        if isinstance(interval, bool):
            raise ValueError("Interval schedule requires seconds or kwargs dict")
        if isinstance(interval, (int, float)):
            if interval <= 0:
                raise ValueError("Interval must be greater than zero")
            return IntervalTrigger(seconds=float(interval))
        if isinstance(interval, dict):
            return IntervalTrigger(**interval)
        raise ValueError("Interval schedule requires seconds or kwargs dict")


__all__ = ["APSchedulerAdapter", "TICK_JOB_ID"]

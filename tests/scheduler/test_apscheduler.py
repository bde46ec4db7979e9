from __future__ import annotations

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from activity_sync.scheduler import APSchedulerAdapter
from activity_sync.scheduler.apsched_adapter import TICK_JOB_ID


def test_build_trigger_accepts_seconds_and_kwargs() -> None:
    adapter = APSchedulerAdapter()
    trigger = adapter._build_trigger(30)
    assert isinstance(trigger, IntervalTrigger)
    assert trigger.interval.total_seconds() == 30

    trigger = adapter._build_trigger({"minutes": 2})
    assert trigger.interval.total_seconds() == 120


@pytest.mark.parametrize("value", [0, -5, "fast", True])
def test_build_trigger_rejects_bad_values(value) -> None:
    with pytest.raises(ValueError):
        APSchedulerAdapter()._build_trigger(value)


def test_schedule_tick_registers_single_job() -> None:
    adapter = APSchedulerAdapter()
    calls: list[dict] = []

    class StubScheduler:
        def add_job(self, callback, trigger, id, replace_existing, max_instances, coalesce, **options):  # noqa: ANN001
            calls.append(
                {
                    "id": id,
                    "callback": callback,
                    "interval": trigger.interval.total_seconds(),
                    "replace_existing": replace_existing,
                    "max_instances": max_instances,
                    "coalesce": coalesce,
                    "options": sorted(options),
                }
            )

        def start(self):
            calls.append({"event": "started"})

        def shutdown(self, wait=False):  # noqa: ARG002
            calls.append({"event": "shutdown"})

    adapter.scheduler = StubScheduler()  # type: ignore[assignment]

    def tick():
        return None

    adapter.schedule_tick(tick, 3600)
    adapter.schedule_tick(tick, 60, run_immediately=False)
    adapter.start()
    adapter.start()
    adapter.shutdown()

    assert calls[0] == {
        "id": TICK_JOB_ID,
        "callback": tick,
        "interval": 3600.0,
        "replace_existing": True,
        "max_instances": 1,
        "coalesce": True,
        "options": ["next_run_time"],
    }
    assert calls[1]["options"] == []
    assert calls[2:] == [{"event": "started"}, {"event": "shutdown"}]

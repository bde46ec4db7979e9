"""Polling loop and APScheduler integration."""

from .apsched_adapter import APSchedulerAdapter
from .loop import Scheduler, TickReport

__all__ = ["APSchedulerAdapter", "Scheduler", "TickReport"]

"""Sink SPI and implementations."""

from __future__ import annotations

from pathlib import Path

from ..config import GlobalConfig, SinkType
from .base import BaseSink
from .file_sink import FileSink
from .google_calendar import GoogleCalendarSink, load_access_token


def build_sink(
    global_config: GlobalConfig,
    source_name: str,
    calendar_id: str,
    outputs_dir: Path,
    base_dir: Path | None = None,
) -> BaseSink:
    sink_config = global_config.sink
    target = calendar_id or sink_config.default_calendar_id
    if sink_config.type is SinkType.FILE:
        return FileSink(outputs_dir, source_name, calendar_id=target)
    if sink_config.type is SinkType.GOOGLE_CALENDAR:
        token = load_access_token(sink_config, base_dir=base_dir)
        return GoogleCalendarSink(target, token)
    raise ValueError(f"Unsupported sink type: {sink_config.type}")


__all__ = ["BaseSink", "FileSink", "GoogleCalendarSink", "build_sink", "load_access_token"]

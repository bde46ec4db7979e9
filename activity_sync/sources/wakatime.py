"""WakaTime coding-time durations."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from ..errors import ParseError
from ..events import Instant, NormalizedEvent
from .base import ITEM_ERRORS, SourceAdapter


class Wakatime(SourceAdapter):
    IDENTIFIER = "wakatime"

    def parse(self, responses: list[str]) -> list[NormalizedEvent]:
        payload = self._load_single_json(responses)
        items = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise ParseError(f"wakatime response has no data list: {responses[0][:200]}")

        events: list[NormalizedEvent] = []
        for item in items:
            try:
                project = str(item["project"])
                start = datetime.fromtimestamp(math.floor(float(item["time"])), tz=timezone.utc)
                seconds = math.floor(float(item["duration"]))
                duration = Instant(start, start + timedelta(seconds=seconds))
                event_id = self.event_id(item["time"])
            except ITEM_ERRORS as exc:
                self.logger.info("item_skipped", reason=str(exc), item=repr(item)[:200])
                continue
            events.append(
                NormalizedEvent(
                    summary=f"[Wakatime] {project}",
                    description=f"[link] https://wakatime.com/projects/{project}",
                    duration=duration,
                    id=event_id,
                )
            )
        return events

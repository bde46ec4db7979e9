"""Bilibili watch history."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..errors import ParseError
from ..events import Instant, NormalizedEvent
from .base import ITEM_ERRORS, SourceAdapter


class Bilibili(SourceAdapter):
    IDENTIFIER = "bilibili"

    def suppress_short_events(self) -> bool:
        # A few minutes of a video still counts as watching it.
        return False

    def parse(self, responses: list[str]) -> list[NormalizedEvent]:
        payload = self._load_single_json(responses)
        items = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise ParseError(f"bilibili response has no data list: {responses[0][:200]}")

        events: list[NormalizedEvent] = []
        for item in items:
            try:
                bvid = str(item["bvid"])
                page = item["page"]
                viewed_at = int(item["view_at"])
                progress = int(item["progress"])
                watched = int(page["duration"]) if progress == -1 else progress
                event_id = self.event_id(bvid, page["page"], viewed_at)
                title = str(item["title"])
                link = str(item.get("redirect_link") or f"https://www.bilibili.com/video/{bvid}")
                start = datetime.fromtimestamp(viewed_at, tz=timezone.utc)
                # A negative progress other than -1 is treated as not watched.
                duration = Instant(start, start + timedelta(seconds=max(watched, 0)))
            except ITEM_ERRORS as exc:
                self.logger.info("item_skipped", reason=str(exc), item=repr(item)[:200])
                continue
            events.append(
                NormalizedEvent(
                    summary=f"[Bilibili] {title}",
                    description=f"[link] {link}\n[bvid] {bvid}\n[hash] {event_id}",
                    duration=duration,
                    id=event_id,
                )
            )
        return events

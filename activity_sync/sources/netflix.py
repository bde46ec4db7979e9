"""Netflix viewing activity, scraped from the account page."""

from __future__ import annotations

from datetime import date

from selectolax.parser import HTMLParser

from ..errors import ParseError
from ..events import NormalizedEvent, WholeDay
from .base import SourceAdapter

RECENT_ROWS = 5


def parse_viewing_date(text: str) -> date:
    """Parse Netflix's ``M/D/YY`` dates."""

    parts = text.strip().split("/")
    if len(parts) != 3:
        raise ParseError(f"Unexpected viewing date: {text!r}")
    try:
        month, day, year = (int(part) for part in parts)
        return date(2000 + year if year < 100 else year, month, day)
    except ValueError as exc:
        raise ParseError(f"Unexpected viewing date: {text!r}") from exc


def title_id_from_link(link: str) -> str:
    """``/title/80100172`` -> ``80100172``."""

    segments = link.split("/")
    if len(segments) < 3 or not segments[2].isdigit():
        raise ParseError(f"Unexpected title link: {link!r}")
    return segments[2]


class Netflix(SourceAdapter):
    IDENTIFIER = "netflix"

    def parse(self, responses: list[str]) -> list[NormalizedEvent]:
        if len(responses) != 1:
            raise ParseError(f"netflix expects one index response, got {len(responses)}")
        html = responses[0]
        rows = HTMLParser(html).css("li.retableRow")
        if not rows and "retable" not in html:
            raise ParseError("netflix response is not a viewing activity page")

        events: list[NormalizedEvent] = []
        for row in rows[:RECENT_ROWS]:
            link_node = row.css_first("div.title a")
            date_node = row.css_first("div.date")
            if link_node is None or date_node is None:
                self.logger.info("item_skipped", reason="row without title or date")
                continue
            link = link_node.attributes.get("href") or ""
            raw_date = date_node.text(strip=True)
            try:
                viewed_on = parse_viewing_date(raw_date)
                title_id = title_id_from_link(link)
            except ParseError as exc:
                self.logger.info("item_skipped", reason=str(exc))
                continue
            event_id = self.event_id(title_id, raw_date)
            events.append(
                NormalizedEvent(
                    summary=f"[Netflix] {link_node.text(strip=True)}",
                    description=f"[link] https://www.netflix.com{link}\n[hash] {event_id}",
                    duration=WholeDay(viewed_on),
                    id=event_id,
                )
            )
        return events

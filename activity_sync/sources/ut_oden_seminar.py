"""Seminar announcements scraped from the Oden Institute events pages.

The listing page only links to seminars; every seminar needs its own detail
request. Seminars are published ahead of time, so they bypass the
in-progress rule.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from urllib.parse import urljoin

from selectolax.parser import HTMLParser

from ..errors import ParseError
from ..events import Instant, NormalizedEvent
from .base import DetailPlan, SourceAdapter

SEMINAR_LINK_RE = re.compile(r"/about/events/\d+")
DATE_RE = re.compile(r"(\w+), (\w+) (\d+), (\d+)")
SEMINAR_ID_RE = re.compile(r"Oden Institute Event:(\d+)")
ZOOM_LINK_RE = re.compile(r"https://utexas\.zoom\.us/j/\d+")
TIME_RANGE_SPLIT_RE = re.compile(r"\s*(?:–|—|&ndash;|-)\s*")
MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
# Central daylight time
SEMINAR_TZ = timezone(timedelta(hours=-5))


def parse_clock(text: str) -> tuple[int, int]:
    """``"3:30PM"`` -> ``(15, 30)``; ``"10AM"`` -> ``(10, 0)``."""

    value = text.strip().upper()
    meridiem = None
    if value.endswith(("AM", "PM")):
        meridiem = value[-2:]
        value = value[:-2].strip()
    hour_text, _, minute_text = value.partition(":")
    try:
        hour = int(hour_text)
        minute = int(minute_text) if minute_text else 0
    except ValueError as exc:
        raise ParseError(f"Unrecognised time: {text!r}") from exc
    if meridiem == "PM" and hour != 12:
        hour += 12
    elif meridiem == "AM" and hour == 12:
        hour = 0
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ParseError(f"Unrecognised time: {text!r}")
    return hour, minute


def _parse_day(text: str) -> tuple[int, int, int]:
    match = DATE_RE.search(text)
    if match is None:
        raise ParseError(f"Date capture fails: {text!r}")
    month_name = match.group(2)
    if month_name not in MONTHS:
        raise ParseError(f"Unknown month: {month_name}")
    return int(match.group(4)), MONTHS.index(month_name) + 1, int(match.group(3))


def parse_seminar(html: str) -> dict:
    """Extract one seminar from its detail page."""

    page = HTMLParser(html).css_first("div#page-body")
    if page is None:
        raise ParseError("div#page-body not found")
    paragraphs = page.css("p")
    if len(paragraphs) < 2:
        raise ParseError("seminar page needs an info and a description paragraph")

    lines = [line.strip() for line in paragraphs[0].text(separator="\n").splitlines() if line.strip()]
    if len(lines) < 3:
        raise ParseError(f"info paragraph too short: {lines!r}")
    title, date_text, time_text = lines[0], lines[1], lines[2]

    year, month, day = _parse_day(date_text)
    bounds = TIME_RANGE_SPLIT_RE.split(time_text, maxsplit=1)
    if len(bounds) != 2:
        raise ParseError(f"Time range capture fails: {time_text!r}")
    start_hour, start_minute = parse_clock(bounds[0])
    end_hour, end_minute = parse_clock(bounds[1])

    page_html = page.html or ""
    seminar_match = SEMINAR_ID_RE.search(page_html)
    if seminar_match is None:
        raise ParseError("seminar id not found")
    zoom_match = ZOOM_LINK_RE.search(page_html)

    try:
        start = datetime(year, month, day, start_hour, start_minute, tzinfo=SEMINAR_TZ)
        end = datetime(year, month, day, end_hour, end_minute, tzinfo=SEMINAR_TZ)
    except ValueError as exc:
        raise ParseError(f"Invalid seminar date: {exc}") from exc
    return {
        "seminar_id": int(seminar_match.group(1)),
        "title": title,
        "description": paragraphs[1].text(strip=True),
        "link": zoom_match.group(0) if zoom_match else None,
        "start": start,
        "end": end,
    }


class UTOdenSeminar(SourceAdapter):
    IDENTIFIER = "ut_oden_seminar"

    def suppress_in_progress_events(self) -> bool:
        return False

    def needs_detail(self, index_response: str) -> DetailPlan:
        base_url = self.request_url()
        urls: list[str] = []
        for match in SEMINAR_LINK_RE.finditer(index_response):
            url = urljoin(base_url, match.group(0))
            if url not in urls:
                urls.append(url)
        return DetailPlan.fetch(urls)

    def parse(self, responses: list[str]) -> list[NormalizedEvent]:
        events: list[NormalizedEvent] = []
        for position, response in enumerate(responses):
            try:
                seminar = parse_seminar(response)
                duration = Instant(seminar["start"], seminar["end"])
            except (ParseError, ValueError) as exc:
                self.logger.info("item_skipped", position=position, reason=str(exc))
                continue
            link = seminar["link"]
            description = seminar["description"]
            if link:
                description = f"Zoom link: {link}\n{description}"
            events.append(
                NormalizedEvent(
                    summary=seminar["title"],
                    description=description,
                    duration=duration,
                    id=self.event_id(seminar["seminar_id"], seminar["start"].strftime("%Y-%m-%d %H:%M")),
                )
            )
        return events

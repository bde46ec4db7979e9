"""YouTube watch history from the Google My Activity page (Chinese locale).

The page lists date headers (``<div><h2>今天</h2></div>``) followed by one
``c-wiz`` card per watched video. Card times are wall-clock times of the
machine's local zone.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from urllib.parse import parse_qs, urlparse

from selectolax.parser import HTMLParser, Node

from ..errors import ParseError
from ..events import Instant, NormalizedEvent
from .base import ITEM_ERRORS, SourceAdapter

TODAY = "今天"
YESTERDAY = "昨天"
FULL_DATE_RE = re.compile(r"(\d+)年(\d+)月(\d+)日")
MONTH_DAY_RE = re.compile(r"(\d+)月(\d+)日")
START_RE = re.compile(r"(上午|下午)\s*(\d+):(\d+)")
LENGTH_RE = re.compile(r"(?:(\d+):)?(\d+):(\d+)")
PERCENT_RE = re.compile(r"width:\s*(\d+)%")


def parse_view_date(text: str, today: date) -> date:
    text = text.strip()
    if text == TODAY:
        return today
    if text == YESTERDAY:
        return today - timedelta(days=1)
    try:
        match = FULL_DATE_RE.search(text)
        if match:
            return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        match = MONTH_DAY_RE.search(text)
        if match:
            return date(today.year, int(match.group(1)), int(match.group(2)))
    except ValueError as exc:
        raise ParseError(f"Unexpected view date: {text!r}") from exc
    raise ParseError(f"Unexpected view date: {text!r}")


def parse_start_clock(text: str) -> tuple[int, int]:
    """``"下午9:05"`` -> ``(21, 5)``."""

    match = START_RE.search(text)
    if match is None:
        raise ParseError(f"Unexpected start time: {text!r}")
    hour = int(match.group(2)) % 12
    if match.group(1) == "下午":
        hour += 12
    return hour, int(match.group(3))


def parse_video_length(text: str) -> int:
    """``"1:02:03"`` or ``"4:05"`` -> seconds."""

    match = LENGTH_RE.fullmatch(text.strip())
    if match is None:
        raise ParseError(f"Unexpected video length: {text!r}")
    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def video_id(link: str) -> str:
    ids = parse_qs(urlparse(link).query).get("v")
    if not ids:
        raise ParseError(f"Unexpected video link: {link!r}")
    return ids[0]


def _own_text(node: Node) -> str:
    return node.text(deep=False, strip=True)


class Youtube(SourceAdapter):
    IDENTIFIER = "youtube"

    def parse(self, responses: list[str]) -> list[NormalizedEvent]:
        if len(responses) != 1:
            raise ParseError(f"youtube expects one index response, got {len(responses)}")
        first_card = HTMLParser(responses[0]).css_first("c-wiz[data-token]")
        if first_card is None or first_card.parent is None:
            return []

        today = self.clock().astimezone().date()
        viewed_on = today
        events: list[NormalizedEvent] = []
        for child in first_card.parent.iter():
            if child.tag == "div":
                header = child.css_first("h2")
                if header is None:
                    raise ParseError("youtube date block without a heading")
                viewed_on = parse_view_date(header.text(strip=True), today)
            elif child.tag == "c-wiz":
                try:
                    events.append(self._parse_card(child, viewed_on))
                except (ParseError, *ITEM_ERRORS) as exc:
                    self.logger.info("item_skipped", reason=str(exc))
            elif not child.tag.startswith(("-", "_")):
                raise ParseError(f"Unexpected element in youtube history: <{child.tag}>")
        return events

    def _parse_card(self, card: Node, viewed_on: date) -> NormalizedEvent:
        links = [node for node in card.css("a") if node.attributes.get("href")]
        title_node = next(
            (node for node in links if "watch?v=" in node.attributes["href"] and node.text(strip=True)),
            None,
        )
        if title_node is None:
            raise ParseError("youtube card without a video link")
        author_node = next(
            (node for node in links if "watch?v=" not in node.attributes["href"] and node.text(strip=True)),
            None,
        )
        link = title_node.attributes["href"]
        author = author_node.text(strip=True) if author_node is not None else ""

        hour, minute = parse_start_clock(card.text(separator=" "))
        total = self._total_length(card)
        watched = total
        bar = card.css_first('[style*="width:"]')
        if bar is not None:
            percent = PERCENT_RE.search(bar.attributes.get("style") or "")
            if percent is None:
                raise ParseError(f"Unexpected progress style: {bar.attributes.get('style')!r}")
            watched = total * int(percent.group(1)) // 100

        # Naive wall-clock time resolved in the local zone, DST included.
        start = datetime(viewed_on.year, viewed_on.month, viewed_on.day, hour, minute).astimezone()
        event_id = self.event_id(video_id(link), start.strftime("%Y-%m-%d %H:%M"))
        return NormalizedEvent(
            summary=f"[Youtube] {title_node.text(strip=True)}",
            description=f"[link] {link}\n[author] {author}\n[hash] {event_id}",
            duration=Instant(start, start + timedelta(seconds=watched)),
            id=event_id,
        )

    @staticmethod
    def _total_length(card: Node) -> int:
        for node in card.css("div, span"):
            text = _own_text(node)
            if LENGTH_RE.fullmatch(text):
                return parse_video_length(text)
        raise ParseError("youtube card without a video length")

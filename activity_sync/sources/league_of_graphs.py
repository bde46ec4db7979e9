"""League of Legends games scraped from a leagueofgraphs.com summoner page."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from selectolax.parser import HTMLParser, Node

from ..errors import ParseError
from ..events import Instant, NormalizedEvent
from .base import ITEM_ERRORS, SourceAdapter

MATCH_ID_RE = re.compile(r"match-(\d+)")
CREATED_RE = re.compile(r"new Date\((\d+)")
DURATION_RE = re.compile(r"(\d+)min (\d+)s")
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_game_duration(text: str) -> int:
    """``"10min 20s"`` -> ``620`` seconds."""

    match = DURATION_RE.search(text)
    if match is None:
        raise ParseError(f"Unexpected game duration: {text!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def _game_rows(tree: HTMLParser) -> list[Node]:
    # Game rows carry an empty class attribute; headers and ads do not.
    rows = []
    for row in tree.css("tr"):
        if "class" in row.attributes and not (row.attributes.get("class") or "").strip():
            rows.append(row)
    return rows


def _required(row: Node, selector: str) -> Node:
    node = row.css_first(selector)
    if node is None:
        raise ParseError(f"game row without {selector}")
    return node


class LeagueOfGraphs(SourceAdapter):
    IDENTIFIER = "league_of_graphs"

    def parse(self, responses: list[str]) -> list[NormalizedEvent]:
        if len(responses) != 1:
            raise ParseError(f"league_of_graphs expects one index response, got {len(responses)}")
        html = responses[0]
        rows = _game_rows(HTMLParser(html))
        if not rows and "recentGamesTable" not in html:
            raise ParseError("league_of_graphs response is not a summoner page")

        events: list[NormalizedEvent] = []
        for row in rows:
            try:
                event = self._parse_row(row)
            except (ParseError, *ITEM_ERRORS) as exc:
                self.logger.info("item_skipped", reason=str(exc))
                continue
            events.append(event)
        return events

    def _parse_row(self, row: Node) -> NormalizedEvent:
        script = _required(row, "script").text()
        mode = _required(row, "div.gameMode").text(strip=True)
        seconds = parse_game_duration(_required(row, "div.gameDuration").text(strip=True))
        match_id = MATCH_ID_RE.search(script)
        created = CREATED_RE.search(script)
        if match_id is None or created is None:
            raise ParseError(f"game script without match id or date: {script[:120]!r}")

        start = EPOCH + timedelta(milliseconds=int(created.group(1)))
        event_id = self.event_id(match_id.group(1))
        return NormalizedEvent(
            summary=f"[League of Legends] {mode}",
            description=(
                f"[link] https://www.leagueofgraphs.com/match/na/{match_id.group(1)}\n"
                f"[mode] {mode}\n[hash] {event_id}"
            ),
            duration=Instant(start, start + timedelta(seconds=seconds)),
            id=event_id,
        )

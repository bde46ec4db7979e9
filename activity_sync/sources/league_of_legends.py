"""League of Legends match history."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..errors import ParseError
from ..events import Instant, NormalizedEvent
from .base import ITEM_ERRORS, SourceAdapter

MATCH_LINK = "https://matchhistory.na.leagueoflegends.com/en/#match-details/NA1/{game}/{account}"


class LeagueOfLegends(SourceAdapter):
    IDENTIFIER = "league_of_legends"

    def parse(self, responses: list[str]) -> list[NormalizedEvent]:
        payload = self._load_single_json(responses)
        try:
            account_id = payload["accountId"]
            games = payload["games"]["games"]
        except (KeyError, TypeError) as exc:
            raise ParseError(f"league_of_legends response misses {exc}: {responses[0][:200]}") from exc
        if not isinstance(games, list):
            raise ParseError("league_of_legends games is not a list")

        events: list[NormalizedEvent] = []
        for game in games:
            try:
                game_id = game["gameId"]
                player_account = game["participantIdentities"][0]["player"]["accountId"]
                event_id = self.event_id(game["platformId"], game_id, player_account)
                start = datetime.fromtimestamp(int(game["gameCreation"]) // 1000, tz=timezone.utc)
                duration = Instant(start, start + timedelta(seconds=int(game["gameDuration"])))
                mode, kind = game["gameMode"], game["gameType"]
            except ITEM_ERRORS as exc:
                self.logger.info("item_skipped", reason=str(exc), item=repr(game)[:200])
                continue
            link = MATCH_LINK.format(game=game_id, account=account_id)
            events.append(
                NormalizedEvent(
                    summary=f"[League of Legends] {mode}",
                    description=f"[link] {link}\n[mode] {mode} {kind}\n[hash] {event_id}",
                    duration=duration,
                    id=event_id,
                )
            )
        return events

"""Source adapters and the registry that builds them from configuration."""

from __future__ import annotations

from typing import Iterable

import structlog

from ..config import ConfigRepository
from ..errors import SourceConfigError
from ..infra import HistoryStore
from .base import NO_DETAIL, DetailPlan, SourceAdapter
from .bilibili import Bilibili
from .league_of_graphs import LeagueOfGraphs
from .league_of_legends import LeagueOfLegends
from .netflix import Netflix
from .ut_oden_seminar import UTOdenSeminar
from .wakatime import Wakatime
from .youtube import Youtube

ADAPTERS: dict[str, type[SourceAdapter]] = {
    adapter.IDENTIFIER: adapter
    for adapter in (Bilibili, LeagueOfGraphs, LeagueOfLegends, Netflix, UTOdenSeminar, Wakatime, Youtube)
}


def build_adapters(
    repository: ConfigRepository,
    history: HistoryStore,
    identifiers: Iterable[str],
    calendar_id: str | None = None,
) -> list[SourceAdapter]:
    """Construct every requested source, dropping the ones that cannot start."""

    logger = structlog.get_logger("activity_sync").bind(component="sources")
    adapters: list[SourceAdapter] = []
    for identifier in identifiers:
        adapter_cls = ADAPTERS.get(identifier)
        if adapter_cls is None:
            logger.warning("source_unknown", source=identifier, known=sorted(ADAPTERS))
            continue
        try:
            config = repository.require_source(identifier)
        except SourceConfigError as exc:
            logger.warning("source_config_invalid", source=identifier, error=str(exc))
            continue
        adapters.append(adapter_cls(config, history, calendar_id=calendar_id))
        logger.info("source_loaded", source=identifier)
    return adapters


__all__ = [
    "ADAPTERS",
    "Bilibili",
    "DetailPlan",
    "LeagueOfGraphs",
    "LeagueOfLegends",
    "NO_DETAIL",
    "Netflix",
    "SourceAdapter",
    "UTOdenSeminar",
    "Wakatime",
    "Youtube",
    "build_adapters",
]

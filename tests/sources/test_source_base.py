from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from activity_sync.config import SourceConfig
from activity_sync.errors import ParseError
from activity_sync.sources import ADAPTERS, Wakatime, build_adapters
from activity_sync.sources.base import NO_DETAIL, DetailPlan

SHIPPED_SOURCES = Path(__file__).resolve().parents[2] / "data" / "sources"


def test_request_url_substitutes_today(stub_source) -> None:
    assert stub_source().request_url() == "https://example.com/history?date=2024-03-10"
    plain = stub_source(request_url_template="https://example.com/static")
    assert plain.request_url() == "https://example.com/static"


def test_calendar_override(sample_source_config, history_store) -> None:
    config = sample_source_config(source_name="wakatime")
    assert Wakatime(config, history_store).calendar_id() == "cal-1"
    assert Wakatime(config, history_store, calendar_id="other").calendar_id() == "other"


def test_dedup_state_loaded_once_and_persisted(stub_source, history_store) -> None:
    history_store.save("stub", {"stub|1"})
    source = stub_source()
    history_store.save("stub", {"stub|changed"})
    assert source.event_ids() == {"stub|1"}
    source.event_ids().add("stub|2")
    source.persist_dedup_state()
    assert history_store.load("stub") == {"stub|1", "stub|2"}


def test_detail_plan_distinguishes_empty_from_absent(stub_source) -> None:
    assert stub_source().needs_detail("anything") is NO_DETAIL
    assert NO_DETAIL.needed is False
    empty = DetailPlan.fetch([])
    assert empty.needed is True and empty.urls == ()
    assert DetailPlan.fetch(iter(["a", "b"])).urls == ("a", "b")


def test_single_json_helper_validates_shape(stub_source) -> None:
    source = stub_source()
    assert source._load_single_json(['{"ok": 1}']) == {"ok": 1}
    with pytest.raises(ParseError):
        source._load_single_json([])
    with pytest.raises(ParseError):
        source._load_single_json(["{broken"])


def test_build_adapters_skips_unknown_and_invalid(temp_config_repository, history_store) -> None:
    sources_dir = temp_config_repository.locator.sources_dir
    (sources_dir / "wakatime.yaml").write_text(
        yaml.safe_dump({"request_url_template": "https://wakatime.com/api?date={date}"}), encoding="utf-8"
    )
    (sources_dir / "netflix.yaml").write_text(yaml.safe_dump({"headers": {"cookie": "x"}}), encoding="utf-8")

    adapters = build_adapters(
        temp_config_repository, history_store, ["wakatime", "netflix", "bilibili", "myspace"], calendar_id="cli"
    )

    assert [adapter.identifier() for adapter in adapters] == ["wakatime"]
    assert adapters[0].calendar_id() == "cli"


def test_registry_lists_every_source() -> None:
    assert sorted(ADAPTERS) == [
        "bilibili",
        "league_of_graphs",
        "league_of_legends",
        "netflix",
        "ut_oden_seminar",
        "wakatime",
        "youtube",
    ]


@pytest.mark.parametrize("identifier", sorted(ADAPTERS))
def test_every_source_ships_a_valid_default(identifier: str) -> None:
    payload = yaml.safe_load((SHIPPED_SOURCES / f"{identifier}.default.yaml").read_text(encoding="utf-8"))
    config = SourceConfig(source_name=identifier, **payload)
    assert config.request_url_template.startswith("https://")
    assert "accept" in config.headers

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from activity_sync.config import GlobalConfig
from activity_sync.errors import DeliveryError
from activity_sync.events import NormalizedEvent, WholeDay
from activity_sync.sinks import FileSink, GoogleCalendarSink, build_sink


def test_file_sink_appends_json_lines(tmp_path: Path, make_event) -> None:
    sink = FileSink(tmp_path / "outputs", "league_of_legends", calendar_id="games")
    for event_id in ("a", "b"):
        sink.deliver(make_event(event_id))
    sink.close()

    sink = FileSink(tmp_path / "outputs", "league_of_legends", calendar_id="games")
    sink.deliver(NormalizedEvent("[Netflix] Show", "", WholeDay(date(2024, 3, 9)), "c"))
    sink.close()

    lines = (tmp_path / "outputs" / "league_of_legends.jsonl").read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]
    assert [record["id"] for record in records] == ["a", "b", "c"]
    assert records[0]["calendar_id"] == "games"
    assert records[2]["start"] == {"date": "2024-03-09"}


def test_file_sink_write_after_close_fails(tmp_path: Path, make_event) -> None:
    sink = FileSink(tmp_path, "wakatime")
    sink.close()
    with pytest.raises(DeliveryError):
        sink.deliver(make_event())


def test_build_sink_uses_default_calendar(tmp_path: Path) -> None:
    sink = build_sink(GlobalConfig(), "wakatime", "", tmp_path)
    assert isinstance(sink, FileSink)
    assert sink.calendar_id == "primary"
    sink.close()

    sink = build_sink(GlobalConfig(), "wakatime", "coding", tmp_path)
    assert sink.calendar_id == "coding"
    sink.close()


def test_build_sink_google_reads_token_file(tmp_path: Path) -> None:
    (tmp_path / "token.json").write_text('{"access_token": "ya29.token"}', encoding="utf-8")
    config = GlobalConfig(sink={"type": "google_calendar", "access_token_file": "token.json"})
    sink = build_sink(config, "wakatime", "", tmp_path, base_dir=tmp_path)
    assert isinstance(sink, GoogleCalendarSink)
    assert sink.calendar_id == "primary"
    sink.close()

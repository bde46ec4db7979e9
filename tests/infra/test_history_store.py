from __future__ import annotations

import json
from pathlib import Path

import pytest

from activity_sync.infra import (
    JsonHistoryStore,
    SQLiteHistoryStore,
    SQLiteManager,
    build_history_store,
)


def test_json_store_missing_file_is_empty(tmp_path: Path) -> None:
    assert JsonHistoryStore(tmp_path / "history").load("wakatime") == set()


def test_json_store_roundtrip_writes_sorted_array(tmp_path: Path) -> None:
    store = JsonHistoryStore(tmp_path / "history")
    store.save("wakatime", {"wakatime|3", "wakatime|1", "wakatime|2"})
    path = tmp_path / "history" / "wakatime.json"
    assert json.loads(path.read_text(encoding="utf-8")) == ["wakatime|1", "wakatime|2", "wakatime|3"]
    assert store.load("wakatime") == {"wakatime|1", "wakatime|2", "wakatime|3"}
    assert [p.name for p in path.parent.iterdir()] == ["wakatime.json"]


@pytest.mark.parametrize("content", ["{not json", '{"ids": []}'])
def test_json_store_unreadable_file_is_empty(tmp_path: Path, content: str) -> None:
    store = JsonHistoryStore(tmp_path)
    (tmp_path / "netflix.json").write_text(content, encoding="utf-8")
    assert store.load("netflix") == set()


def test_json_store_reset_and_recent(tmp_path: Path) -> None:
    store = JsonHistoryStore(tmp_path)
    store.save("bilibili", {"a", "b", "c"})
    assert store.recent("bilibili", limit=2) == ["c", "b"]
    store.reset("bilibili")
    assert store.load("bilibili") == set()
    store.reset("bilibili")


def test_sqlite_store_keeps_sources_apart(tmp_path: Path) -> None:
    manager = SQLiteManager()
    store = SQLiteHistoryStore(manager, tmp_path / "history.db")
    store.save("wakatime", {"w1", "w2"})
    store.save("bilibili", {"b1"})
    store.save("wakatime", {"w1", "w3"})
    assert store.load("wakatime") == {"w1", "w2", "w3"}
    assert store.load("bilibili") == {"b1"}
    assert len(store.recent("wakatime", limit=2)) == 2

    store.reset("wakatime")
    assert store.load("wakatime") == set()
    assert store.load("bilibili") == {"b1"}
    manager.close_all()


def test_build_history_store(tmp_path: Path) -> None:
    assert isinstance(build_history_store("json", tmp_path), JsonHistoryStore)
    sqlite_store = build_history_store("sqlite", tmp_path)
    assert isinstance(sqlite_store, SQLiteHistoryStore)
    assert sqlite_store.db_path == tmp_path / "history.db"
    with pytest.raises(ValueError):
        build_history_store("mongo", tmp_path)

"""Persistence of delivered event ids (the per-source dedup history)."""

from __future__ import annotations

import json
import os
import sqlite3
import tempfile
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, Protocol

import structlog


class HistoryStore(Protocol):
    """Load/save the set of already delivered event ids of one source."""

    def load(self, source_id: str) -> set[str]: ...

    def save(self, source_id: str, event_ids: Iterable[str]) -> None: ...

    def reset(self, source_id: str) -> None: ...

    def recent(self, source_id: str, limit: int = 20) -> list[str]: ...


class JsonHistoryStore:
    """One ``<source>.json`` file per source holding a sorted id array."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.logger = structlog.get_logger("activity_sync.history")

    def path_for(self, source_id: str) -> Path:
        return self.directory / f"{source_id}.json"

    def load(self, source_id: str) -> set[str]:
        path = self.path_for(source_id)
        if not path.exists():
            return set()
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self.logger.warning("history_unreadable", source=source_id, path=str(path), error=str(exc))
            return set()
        if not isinstance(payload, list):
            self.logger.warning("history_unreadable", source=source_id, path=str(path), error="not a list")
            return set()
        return {str(item) for item in payload}

    def save(self, source_id: str, event_ids: Iterable[str]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(source_id)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{source_id}-", suffix=".json", dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as stream:
                json.dump(sorted(event_ids), stream, ensure_ascii=False, indent=0)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def reset(self, source_id: str) -> None:
        self.path_for(source_id).unlink(missing_ok=True)

    def recent(self, source_id: str, limit: int = 20) -> list[str]:
        return sorted(self.load(source_id), reverse=True)[:limit]


class SQLiteManager:
    """Manage SQLite connections with basic schema guarantees."""

    def __init__(self) -> None:
        self._connections: Dict[Path, sqlite3.Connection] = {}
        self._lock = Lock()

    def connect(self, path: Path) -> sqlite3.Connection:
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            if path not in self._connections:
                conn = sqlite3.connect(path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                self._connections[path] = conn
                self._ensure_schema(conn)
            return self._connections[path]

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS delivered_events (
                source_name TEXT NOT NULL,
                event_id TEXT NOT NULL,
                recorded_at TEXT,
                PRIMARY KEY (source_name, event_id)
            )
            """
        )
        conn.commit()

    def close_all(self) -> None:
        with self._lock:
            for conn in self._connections.values():
                conn.close()
            self._connections.clear()


class SQLiteHistoryStore:
    """Single SQLite database shared by every source."""

    def __init__(self, manager: SQLiteManager, db_path: Path) -> None:
        self.manager = manager
        self.db_path = db_path
        self.logger = structlog.get_logger("activity_sync.history")

    def load(self, source_id: str) -> set[str]:
        try:
            conn = self.manager.connect(self.db_path)
            rows = conn.execute(
                "SELECT event_id FROM delivered_events WHERE source_name = ?", (source_id,)
            ).fetchall()
        except sqlite3.DatabaseError as exc:
            self.logger.warning("history_unreadable", source=source_id, path=str(self.db_path), error=str(exc))
            return set()
        return {row["event_id"] for row in rows}

    def save(self, source_id: str, event_ids: Iterable[str]) -> None:
        conn = self.manager.connect(self.db_path)
        conn.executemany(
            "INSERT OR IGNORE INTO delivered_events(source_name, event_id, recorded_at) "
            "VALUES (?, ?, datetime('now'))",
            [(source_id, event_id) for event_id in event_ids],
        )
        conn.commit()

    def reset(self, source_id: str) -> None:
        conn = self.manager.connect(self.db_path)
        conn.execute("DELETE FROM delivered_events WHERE source_name = ?", (source_id,))
        conn.commit()

    def recent(self, source_id: str, limit: int = 20) -> list[str]:
        conn = self.manager.connect(self.db_path)
        rows = conn.execute(
            "SELECT event_id FROM delivered_events WHERE source_name = ? "
            "ORDER BY recorded_at DESC, event_id DESC LIMIT ?",
            (source_id, limit),
        ).fetchall()
        return [row["event_id"] for row in rows]


def build_history_store(backend: str, history_dir: Path) -> HistoryStore:
    if backend == "json":
        return JsonHistoryStore(history_dir)
    if backend == "sqlite":
        return SQLiteHistoryStore(SQLiteManager(), history_dir / "history.db")
    raise ValueError(f"Unsupported history backend: {backend}")


__all__ = [
    "HistoryStore",
    "JsonHistoryStore",
    "SQLiteHistoryStore",
    "SQLiteManager",
    "build_history_store",
]

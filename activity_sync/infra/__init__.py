"""Infra layer utilities (dedup history persistence)."""

from .storage import (
    HistoryStore,
    JsonHistoryStore,
    SQLiteHistoryStore,
    SQLiteManager,
    build_history_store,
)

__all__ = [
    "HistoryStore",
    "JsonHistoryStore",
    "SQLiteHistoryStore",
    "SQLiteManager",
    "build_history_store",
]

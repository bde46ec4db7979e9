"""Pydantic models used across activity-sync configuration flow."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

KNOWN_HEADERS = frozenset(
    {
        "accept",
        "accept-language",
        "cache-control",
        "cookie",
        "dnt",
        "referer",
        "upgrade-insecure-requests",
        "user-agent",
    }
)


class SinkType(str, Enum):
    """Supported delivery targets."""

    FILE = "file"
    GOOGLE_CALENDAR = "google_calendar"


class SinkConfig(BaseModel):
    """Where surviving events are delivered."""

    type: SinkType = SinkType.FILE
    access_token_file: Path | None = None
    default_calendar_id: str = "primary"

    @field_validator("access_token_file", mode="before")
    @classmethod
    def _coerce_token_path(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)


class SourceConfig(BaseModel):
    """Request settings of a single history source."""

    source_name: str
    request_url_template: str
    headers: dict[str, str] = Field(default_factory=dict)
    calendar_id: str = ""

    @field_validator("source_name", "request_url_template")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("value cannot be empty")
        return value.strip()

    @field_validator("headers", mode="before")
    @classmethod
    def _normalise_headers(cls, value: Any) -> dict[str, str]:
        if value in (None, ""):
            return {}
        if not isinstance(value, dict):
            raise ValueError("headers expects a mapping of header name to value")
        normalised: dict[str, str] = {}
        for key, header_value in value.items():
            name = str(key).strip().lower()
            if name not in KNOWN_HEADERS:
                raise ValueError(f"Unknown header {key}")
            normalised[name] = str(header_value)
        return normalised


class GlobalConfig(BaseModel):
    """Global controls shared across sources."""

    poll_interval_seconds: float = 3600.0
    request_timeout: float = 20.0
    history_backend: Literal["json", "sqlite"] = "json"
    history_dir: Path = Field(default=Path("data/history"))
    outputs_dir: Path = Field(default=Path("data/outputs"))
    sources: list[str] = Field(default_factory=list)
    sink: SinkConfig = Field(default_factory=SinkConfig)

    @field_validator("poll_interval_seconds", "request_timeout")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value

    @field_validator("history_dir", "outputs_dir", mode="before")
    @classmethod
    def _coerce_dirs(cls, value: Any) -> Path:
        return Path(value)


__all__ = ["GlobalConfig", "KNOWN_HEADERS", "SinkConfig", "SinkType", "SourceConfig"]

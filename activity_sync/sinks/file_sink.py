"""JSON-lines sink, handy for dry runs and for auditing deliveries."""

from __future__ import annotations

import json
import re
from pathlib import Path

from ..errors import DeliveryError
from ..events import NormalizedEvent
from .base import BaseSink


class FileSink(BaseSink):
    """Append each delivered event to ``<output_dir>/<source>.jsonl``."""

    def __init__(self, output_dir: Path, source_name: str, calendar_id: str = "") -> None:
        self.output_dir = output_dir
        self.source_name = source_name
        self.calendar_id = calendar_id
        self.output_dir.mkdir(parents=True, exist_ok=True)
        slug = re.sub(r"[^0-9A-Za-z_-]+", "_", source_name.strip()) or "source"
        self.path = self.output_dir / f"{slug}.jsonl"
        self._file = self.path.open("a", encoding="utf-8", newline="")

    def deliver(self, event: NormalizedEvent) -> None:
        record = event.to_calendar_body()
        record["id"] = event.id
        record["calendar_id"] = self.calendar_id
        try:
            json.dump(record, self._file, ensure_ascii=False)
            self._file.write("\n")
            self._file.flush()
        except (OSError, ValueError) as exc:
            raise DeliveryError(f"Cannot write {self.path}: {exc}") from exc

    def close(self) -> None:
        self._file.close()


__all__ = ["FileSink"]

"""Configuration loading helpers for activity-sync."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import yaml
from pydantic import ValidationError

from ..errors import SourceConfigError
from .models import GlobalConfig, SourceConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
GLOBAL_CONFIG_FILENAME = "global_config.yaml"
SOURCE_CONFIG_SUFFIX = ".yaml"
DEFAULT_MARKER = ".default"


def _slugify(name: str) -> str:
    return "".join(ch.lower() if ch.isalnum() or ch == "_" else "-" for ch in name).strip("-")


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


def _merge_source_payloads(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if key == "headers" and isinstance(value, dict):
            headers = dict(base.get("headers") or {})
            headers.update(value)
            merged["headers"] = headers
        else:
            merged[key] = value
    return merged


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    sources_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("ACTIVITY_SYNC_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.sources_dir = (self.data_dir / "sources").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.sources_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def global_config_path(self) -> Path:
        return self.data_dir / GLOBAL_CONFIG_FILENAME

    def resolve(self, path: Path) -> Path:
        """Anchor a configured relative path at the project root."""

        if path.is_absolute():
            return path
        return (self.project_root / path).resolve()


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._global_cache: GlobalConfig | None = None

    # ------------------------------------------------------------------
    # Global configuration helpers
    # ------------------------------------------------------------------
    def load_global_config(self) -> GlobalConfig:
        if self._global_cache is not None:
            return self._global_cache
        path = self.locator.global_config_path()
        if path.exists():
            global_cfg = GlobalConfig.model_validate(_read_file(path))
        else:
            global_cfg = GlobalConfig()
            self.save_global_config(global_cfg)
        self._global_cache = global_cfg
        return global_cfg

    def save_global_config(self, config: GlobalConfig) -> None:
        _write_file(self.locator.global_config_path(), config.model_dump(mode="json"))
        self._global_cache = config

    def history_dir(self) -> Path:
        return self.locator.resolve(self.load_global_config().history_dir)

    def outputs_dir(self) -> Path:
        return self.locator.resolve(self.load_global_config().outputs_dir)

    # ------------------------------------------------------------------
    # Source configuration helpers
    # ------------------------------------------------------------------
    def source_path(self, source_name: str, *, default: bool = False) -> Path:
        slug = _slugify(source_name)
        marker = DEFAULT_MARKER if default else ""
        return self.locator.sources_dir / f"{slug}{marker}{SOURCE_CONFIG_SUFFIX}"

    def list_source_files(self) -> Iterable[Path]:
        for path in sorted(self.locator.sources_dir.glob("*")):
            if path.is_file() and path.suffix in CONFIG_EXTENSIONS:
                yield path

    def list_source_names(self) -> list[str]:
        names: list[str] = []
        for path in self.list_source_files():
            name = path.stem.removesuffix(DEFAULT_MARKER)
            if name not in names:
                names.append(name)
        return names

    def load_source(self, source_name: str) -> SourceConfig:
        """Load ``<slug>.default.yaml`` overlaid with ``<slug>.yaml``."""

        default_path = self.source_path(source_name, default=True)
        user_path = self.source_path(source_name)
        if not default_path.exists() and not user_path.exists():
            raise FileNotFoundError(f"Source configuration not found: {source_name}")
        payload: dict = {"source_name": source_name}
        for path in (default_path, user_path):
            if path.exists():
                payload = _merge_source_payloads(payload, _read_file(path))
        return SourceConfig.model_validate(payload)

    def require_source(self, source_name: str) -> SourceConfig:
        """Like :meth:`load_source` but folds every failure into ``SourceConfigError``."""

        try:
            return self.load_source(source_name)
        except FileNotFoundError as exc:
            raise SourceConfigError(str(exc)) from exc
        except (ValidationError, ValueError, yaml.YAMLError) as exc:
            raise SourceConfigError(f"Invalid configuration for {source_name}: {exc}") from exc


__all__ = ["CONFIG_EXTENSIONS", "ConfigLocator", "ConfigRepository"]

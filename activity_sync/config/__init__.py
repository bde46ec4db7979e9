"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import KNOWN_HEADERS, GlobalConfig, SinkConfig, SinkType, SourceConfig

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "GlobalConfig",
    "KNOWN_HEADERS",
    "SinkConfig",
    "SinkType",
    "SourceConfig",
]

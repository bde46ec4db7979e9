"""Engine components orchestrating fetch → parse → filter → dedup."""

from .collector import FetchOrchestrator
from .dedup import DeliveryGate
from .fetcher import Fetcher, HttpFetcher
from .filters import filter_events, filter_for_source, is_closed, is_long_enough

__all__ = [
    "DeliveryGate",
    "FetchOrchestrator",
    "Fetcher",
    "HttpFetcher",
    "filter_events",
    "filter_for_source",
    "is_closed",
    "is_long_enough",
]

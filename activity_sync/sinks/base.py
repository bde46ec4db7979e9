"""Sink Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..events import NormalizedEvent


class BaseSink(ABC):
    """Uniform delivery contract; failures raise ``DeliveryError``."""

    @abstractmethod
    def deliver(self, event: NormalizedEvent) -> None:
        """Deliver a single event."""

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources."""


__all__ = ["BaseSink"]

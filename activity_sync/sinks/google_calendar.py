"""Google Calendar v3 event insertion."""

from __future__ import annotations

import json
import os
from pathlib import Path
from urllib.parse import quote

import httpx
import structlog

from ..config import SinkConfig
from ..errors import DeliveryError
from ..events import NormalizedEvent
from .base import BaseSink

GOOGLE_CALENDAR_API_BASE_URL = "https://www.googleapis.com/calendar/v3"
TOKEN_ENV = "ACTIVITY_SYNC_GOOGLE_TOKEN"


def load_access_token(config: SinkConfig, base_dir: Path | None = None) -> str:
    """Read the OAuth access token from the environment or the token file.

    The token file may be raw text or JSON with an ``access_token`` (or
    ``token``) key, as written by the usual Google auth helpers.
    """

    env_token = os.environ.get(TOKEN_ENV, "").strip()
    if env_token:
        return env_token
    path = config.access_token_file
    if path is None:
        raise DeliveryError(f"No Google access token: set {TOKEN_ENV} or sink.access_token_file")
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    try:
        text = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise DeliveryError(f"Cannot read Google access token from {path}: {exc}") from exc
    if text.startswith("{"):
        try:
            payload = json.loads(text)
        except ValueError as exc:
            raise DeliveryError(f"Token file {path} is not valid JSON") from exc
        text = str(payload.get("access_token") or payload.get("token") or "")
    if not text:
        raise DeliveryError(f"Token file {path} holds no access token")
    return text


def _safe_google_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error_payload = payload.get("error")
        if isinstance(error_payload, dict):
            message = error_payload.get("message")
            if isinstance(message, str) and message.strip():
                return " ".join(message.split())[:200]
        if isinstance(error_payload, str) and error_payload.strip():
            return " ".join(error_payload.split())[:200]
    raw_text = response.text.strip()
    if raw_text:
        return " ".join(raw_text.split())[:200]
    return "Request failed without an error payload"


class GoogleCalendarSink(BaseSink):
    """Insert events into one calendar with a bearer token."""

    def __init__(
        self,
        calendar_id: str,
        access_token: str,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not calendar_id:
            raise ValueError("calendar_id must be a non-empty string")
        self.calendar_id = calendar_id
        self._access_token = access_token
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=GOOGLE_CALENDAR_API_BASE_URL, timeout=timeout)
        self.logger = structlog.get_logger("activity_sync.sink.google_calendar")

    def deliver(self, event: NormalizedEvent) -> None:
        path = f"/calendars/{quote(self.calendar_id, safe='')}/events"
        try:
            response = self._client.post(
                path,
                json=event.to_calendar_body(),
                headers={"Authorization": f"Bearer {self._access_token}"},
            )
        except httpx.HTTPError as exc:
            raise DeliveryError(f"Google Calendar request failed: {exc}") from exc
        if response.status_code < 200 or response.status_code >= 300:
            raise DeliveryError(
                f"Google Calendar API request failed ({response.status_code}): "
                f"{_safe_google_error_message(response)}",
                status_code=response.status_code,
            )
        self.logger.info(
            "event_posted",
            calendar_id=self.calendar_id,
            summary=event.summary,
            start=event.start_label(),
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


__all__ = ["GOOGLE_CALENDAR_API_BASE_URL", "GoogleCalendarSink", "load_access_token"]

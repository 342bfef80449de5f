"""Inbound live-channel message model and cache key vocabulary."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field


class MessageType(str, Enum):
    LOAD_UPDATE = "load_update"
    DRIVER_UPDATE = "driver_update"
    IOT_UPDATE = "iot_update"
    NEGOTIATION_UPDATE = "negotiation_update"
    ALERT = "alert"
    SECURITY_EVENT = "security_event"
    WEATHER_UPDATE = "weather_update"


class CacheKey:
    """Query cache keys understood by the dashboard data layer."""

    LOADS = "/api/loads"
    DRIVERS = "/api/drivers"
    METRICS = "/api/metrics"
    NEGOTIATIONS = "/api/negotiations"
    ALERTS = "/api/alerts"
    IOT_DEVICES = "/api/iot/devices"
    SECURITY_EVENTS = "/api/security/events"
    SECURITY_REPORT = "/api/security/report"
    WEATHER = "/api/weather"


class MalformedMessageError(ValueError):
    """Raised when an inbound frame cannot become a LiveMessage."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LiveMessage(BaseModel):
    """One inbound frame, stamped on receipt."""

    type: str
    payload: Any = None
    received_at: datetime = Field(default_factory=_utcnow)

    @property
    def known_type(self) -> Optional[MessageType]:
        try:
            return MessageType(self.type)
        except ValueError:
            return None

    @classmethod
    def parse_frame(
        cls, raw: Union[str, bytes], *, received_at: Optional[datetime] = None
    ) -> "LiveMessage":
        """Decode a JSON text frame.

        The payload is taken from ``data``, then ``payload``, then whatever
        fields remain besides ``type``.
        """
        try:
            decoded = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise MalformedMessageError(f"Frame is not valid JSON: {exc}") from exc
        if not isinstance(decoded, dict):
            raise MalformedMessageError("Frame must be a JSON object")
        tag = decoded.get("type")
        if not isinstance(tag, str) or not tag:
            raise MalformedMessageError("Frame has no string 'type' tag")

        if "data" in decoded:
            payload = decoded["data"]
        elif "payload" in decoded:
            payload = decoded["payload"]
        else:
            rest = {key: value for key, value in decoded.items() if key != "type"}
            payload = rest or None

        return cls(type=tag, payload=payload, received_at=received_at or _utcnow())

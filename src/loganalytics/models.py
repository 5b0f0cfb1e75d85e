"""Data model for the Log Analytics shipping client.

These models intentionally stay small:
- `LogItem` is an optional convenience base for caller payloads.
- `Envelope` pairs an item with the send-time `TimeGenerated` value.
- `Credentials` holds the workspace id and the decoded shared key.
- `DeliveryResult` classifies a single delivery attempt.
"""

from __future__ import annotations

import base64
import binascii
from datetime import datetime, timezone
from email.utils import format_datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

TIME_GENERATED_FIELD = "TimeGenerated"

DeliveryOutcome = Literal["delivered", "serialization_error", "request_error", "rejected"]


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(tz=timezone.utc)


def format_time_generated(ts: datetime) -> str:
    """Render `ts` as RFC 3339 in UTC with whole seconds (`2019-01-01T00:00:00Z`)."""
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_signature_date(ts: datetime) -> str:
    """Render `ts` as RFC 1123 with a `GMT` zone, as required by `x-ms-date`."""
    return format_datetime(ts.astimezone(timezone.utc), usegmt=True)


class InvalidSharedKeyError(ValueError):
    """The shared key is not valid base64."""


class LogItem(BaseModel):
    """Base model for log records; unknown fields are kept and shipped as-is."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Envelope(BaseModel):
    """A log item stamped with its generation time, ready for transmission."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    item: Any
    time_generated: datetime

    @property
    def time_generated_value(self) -> str:
        return format_time_generated(self.time_generated)


class Credentials(BaseModel):
    """Workspace id and decoded shared key. Immutable for the client's lifetime."""

    model_config = ConfigDict(frozen=True)

    workspace_id: str
    shared_key: bytes = Field(repr=False)

    @classmethod
    def from_base64(cls, workspace_id: str, shared_key: str) -> "Credentials":
        """Decode a base64 shared key, raising `InvalidSharedKeyError` when malformed."""
        return cls(workspace_id=workspace_id, shared_key=decode_shared_key(shared_key))


def decode_shared_key(shared_key: str) -> bytes:
    """Strictly decode a standard base64 string (padding required)."""
    try:
        return base64.b64decode(shared_key, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidSharedKeyError(f"shared key is not valid base64: {exc}") from exc


class DeliveryResult(BaseModel):
    """Outcome of one delivery attempt."""

    model_config = ConfigDict(frozen=True)

    outcome: DeliveryOutcome
    status_code: int | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == "delivered"


class ClientState(str, Enum):
    """Lifecycle states; transitions are linear and never re-entered."""

    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"

"""HTTP delivery of single envelopes to the Data Collector endpoint.

The transport performs exactly one signed POST per envelope and classifies the
outcome. Failures are terminal for the item: they are reported once through
the diagnostic logger and returned as a `DeliveryResult`, never raised and
never retried.
"""

from __future__ import annotations

import json
import re
from typing import Final, Protocol

import requests #type: ignore
from pydantic import BaseModel
from pydantic_core import PydanticSerializationError, to_jsonable_python

from .envelope import Clock
from .logging import get_logger
from .models import TIME_GENERATED_FIELD, Credentials, DeliveryResult, Envelope, format_signature_date, utc_now
from .signing import CONTENT_TYPE, SharedKeySigner

logger = get_logger(__name__)

METHOD: Final[str] = "POST"
DEFAULT_TIMEOUT: Final[float] = 60.0
MAX_BODY_SNIPPET: Final[int] = 512

_LOG_TYPE_RE = re.compile(r"^[A-Za-z0-9_]{1,100}$")


class SerializationError(ValueError):
    """The log item cannot be encoded as a JSON object."""


class DeliveryTransport(Protocol):
    def deliver(self, envelope: Envelope) -> DeliveryResult:
        """Attempt delivery of one envelope and report the outcome."""


def validate_log_name(log_name: str) -> str:
    """Check the `Log-Type` value: letters, digits and underscores, at most 100 chars."""
    if not _LOG_TYPE_RE.match(log_name or ""):
        raise ValueError(
            f"log name must be 1-100 letters, digits or underscores. Got: {log_name!r}"
        )
    return log_name


def serialize_envelope(envelope: Envelope) -> bytes:
    """Encode the envelope as compact UTF-8 JSON with `TimeGenerated` attached.

    A `TimeGenerated` field supplied by the caller is replaced so the body
    always carries exactly one send-time value.
    """
    item = envelope.item
    try:
        if isinstance(item, BaseModel):
            payload = item.model_dump(mode="json", by_alias=True)
        else:
            payload = to_jsonable_python(item, by_alias=True)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise SerializationError(f"cannot serialize {type(item).__name__}: {exc}") from exc

    if not isinstance(payload, dict):
        raise SerializationError(f"log item must serialize to a JSON object, got {type(payload).__name__}")

    payload = {k: v for k, v in payload.items() if k != TIME_GENERATED_FIELD}
    payload[TIME_GENERATED_FIELD] = envelope.time_generated_value
    try:
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"cannot serialize {type(item).__name__}: {exc}") from exc


def _body_snippet(resp: requests.Response) -> str:
    """Best-effort, truncated response body for diagnostics."""
    try:
        text = resp.text
    except Exception as exc:  # noqa: BLE001
        return f"<unreadable response body: {exc}>"
    return text[:MAX_BODY_SNIPPET]


class HttpTransport:
    """`DeliveryTransport` that POSTs envelopes with SharedKey authentication."""

    def __init__(
        self,
        credentials: Credentials,
        log_name: str,
        *,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Clock = utc_now,
    ):
        self.log_name = validate_log_name(log_name)
        self.url = url
        self.timeout = timeout
        self._signer = SharedKeySigner(credentials)
        self._clock = clock

    def build_headers(self, content_length: int, date_string: str) -> dict[str, str]:
        """Headers for one request; `Authorization` covers the body length and date."""
        return {
            "Accept": "application/json",
            "Log-Type": self.log_name,
            "Authorization": self._signer.authorization(METHOD, content_length, date_string),
            "x-ms-date": date_string,
            "Content-Type": CONTENT_TYPE,
            "time-generated-field": TIME_GENERATED_FIELD,
        }

    def deliver(self, envelope: Envelope) -> DeliveryResult:
        """Send one envelope. Never raises for per-item failures."""
        try:
            body = serialize_envelope(envelope)
        except SerializationError as exc:
            logger.warning("log_item_serialization_failed", error=str(exc))
            return DeliveryResult(outcome="serialization_error", detail=str(exc))

        date_string = format_signature_date(self._clock())
        try:
            headers = self.build_headers(len(body), date_string)
            resp = requests.post(self.url, data=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("log_item_request_failed", error=str(exc), error_type=type(exc).__name__)
            return DeliveryResult(outcome="request_error", detail=str(exc))

        if resp.status_code >= 300:
            snippet = _body_snippet(resp)
            logger.warning("log_item_rejected", status_code=resp.status_code, body=snippet)
            return DeliveryResult(outcome="rejected", status_code=resp.status_code, detail=snippet)

        logger.debug("log_item_delivered", status_code=resp.status_code, content_length=len(body))
        return DeliveryResult(outcome="delivered", status_code=resp.status_code)

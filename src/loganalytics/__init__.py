"""Asynchronous shipping of structured log records to Azure Log Analytics.

Callers hand records to `LogAnalyticsClient.add()`; a fixed pool of worker
threads stamps, signs, and POSTs each one to the Data Collector endpoint.
`finalize()` drains whatever was queued before returning.
"""

from .client import ClientClosedError, LogAnalyticsClient, build_ingestion_url
from .envelope import build_envelope
from .models import ClientState, Credentials, DeliveryResult, Envelope, InvalidSharedKeyError, LogItem
from .signing import SharedKeySigner, build_string_to_sign
from .transport import DeliveryTransport, HttpTransport

__all__ = [
    "ClientClosedError",
    "ClientState",
    "Credentials",
    "DeliveryResult",
    "DeliveryTransport",
    "Envelope",
    "HttpTransport",
    "InvalidSharedKeyError",
    "LogAnalyticsClient",
    "LogItem",
    "SharedKeySigner",
    "build_envelope",
    "build_ingestion_url",
    "build_string_to_sign",
]

"""SharedKey request signing for the Log Analytics Data Collector API.

The string-to-sign must match the endpoint's expectation byte for byte:

    METHOD\\n<content length>\\napplication/json\\nx-ms-date:<date>\\n/api/logs

It is signed with HMAC-SHA256 keyed by the decoded shared key, and the raw
digest is base64-encoded into `Authorization: SharedKey <workspace>:<sig>`.
"""

from __future__ import annotations

import base64
from typing import Final

from cryptography.hazmat.primitives import hashes #type: ignore
from cryptography.hazmat.primitives import hmac #type: ignore

from .models import Credentials

CONTENT_TYPE: Final[str] = "application/json"
RESOURCE_PATH: Final[str] = "/api/logs"


def build_string_to_sign(
    method: str,
    content_length: int,
    date_string: str,
    resource_path: str = RESOURCE_PATH,
) -> str:
    """Build the canonical string the endpoint recomputes to verify a request."""
    return f"{method}\n{content_length}\n{CONTENT_TYPE}\nx-ms-date:{date_string}\n{resource_path}"


class SharedKeySigner:
    """Computes request signatures for one workspace."""

    def __init__(self, credentials: Credentials):
        self._credentials = credentials

    @property
    def workspace_id(self) -> str:
        return self._credentials.workspace_id

    def sign(self, string_to_sign: str) -> str:
        """Return base64(HMAC-SHA256(shared_key, utf8(string_to_sign)))."""
        mac = hmac.HMAC(self._credentials.shared_key, hashes.SHA256())
        mac.update(string_to_sign.encode("utf-8"))
        return base64.b64encode(mac.finalize()).decode("utf-8")

    def authorization(self, method: str, content_length: int, date_string: str) -> str:
        """Return the full `Authorization` header value for a request."""
        signature = self.sign(build_string_to_sign(method, content_length, date_string))
        return f"SharedKey {self.workspace_id}:{signature}"

"""Envelope construction: stamp an item with its send-time `TimeGenerated`."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from .models import Envelope, utc_now

Clock = Callable[[], datetime]


def build_envelope(item: Any, *, clock: Clock = utc_now) -> Envelope:
    """Wrap `item` with the current time.

    Called by a worker immediately before transmission, so queueing delay is
    reflected in the reported generation time.
    """
    return Envelope(item=item, time_generated=clock())

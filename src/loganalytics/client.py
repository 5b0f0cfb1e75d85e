"""Fire-and-forget client for the Azure Log Analytics Data Collector API.

This client implements a small producer/consumer framework:

- `add()` / `add_multi()` put items on one unbounded, thread-safe queue and
  return immediately; callers never learn whether an item was delivered.
- A fixed pool of worker threads drains the queue. Each worker stamps an item
  with `TimeGenerated`, then performs one signed POST via the transport.
- `finalize()` closes intake, lets the workers drain what was already queued,
  and returns once every worker has exited.

Producers may live on any thread. Only the HTTP call blocks a worker.
"""

from __future__ import annotations

import asyncio
import queue
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Final

from .envelope import Clock, build_envelope
from .logging import get_logger
from .models import ClientState, Credentials, utc_now
from .transport import DEFAULT_TIMEOUT, DeliveryTransport, HttpTransport

if TYPE_CHECKING:
    from config import LogAnalyticsConfig

logger = get_logger(__name__)

DEFAULT_HOST_SUFFIX: Final[str] = "ods.opinsights.azure.com"
API_VERSION: Final[str] = "2016-04-01"
DEFAULT_WORKER_COUNT: Final[int] = 2

# One per worker, queued behind every accepted item on shutdown.
_SHUTDOWN = object()


def build_ingestion_url(workspace_id: str, host_suffix: str = DEFAULT_HOST_SUFFIX) -> str:
    """Return the Data Collector URL for a workspace."""
    return f"https://{workspace_id}.{host_suffix}/api/logs?api-version={API_VERSION}"


class ClientClosedError(RuntimeError):
    """An item was submitted after `finalize()` began."""


class LogAnalyticsClient:
    """Queues log items and ships them from background worker threads.

    Members:
    - Credentials: `credentials` (workspace id + decoded shared key)
    - Ingestion URL: `url`
    - Dispatch queue: `_queue` (single unbounded queue.Queue)
    - Worker pool: `_workers` (`worker_count` threads, started by the constructor)
    - Transport: `transport` (HttpTransport unless one is injected)
    """

    def __init__(
        self,
        workspace_id: str,
        shared_key: str,
        log_name: str,
        *,
        worker_count: int = DEFAULT_WORKER_COUNT,
        timeout: float = DEFAULT_TIMEOUT,
        host_suffix: str = DEFAULT_HOST_SUFFIX,
        transport: DeliveryTransport | None = None,
        clock: Clock = utc_now,
    ):
        """Create a client and start its workers.

        Raises `InvalidSharedKeyError` when `shared_key` is not valid base64;
        no worker is started in that case.
        """
        if worker_count < 1:
            raise ValueError(f"worker_count must be >= 1. Got: {worker_count}")

        self.credentials = Credentials.from_base64(workspace_id, shared_key)
        self.log_name = log_name
        self.url = build_ingestion_url(workspace_id, host_suffix)
        if transport is None:
            transport = HttpTransport(self.credentials, log_name, url=self.url, timeout=timeout, clock=clock)
        self.transport: DeliveryTransport = transport
        self._clock = clock

        self._queue: queue.Queue[Any] = queue.Queue()
        self._state = ClientState.RUNNING
        self._intake_lock = threading.Lock()
        self._finalize_lock = threading.Lock()

        self._workers = [
            threading.Thread(target=self._worker, name=f"loganalytics-worker-{n}", daemon=True)
            for n in range(1, worker_count + 1)
        ]
        for t in self._workers:
            t.start()

    @classmethod
    def from_config(cls, config: LogAnalyticsConfig, **kwargs: Any) -> "LogAnalyticsClient":
        """Create a client from validated configuration."""
        return cls(
            config.workspace_id,
            config.shared_key,
            config.log_name,
            worker_count=config.worker_count,
            timeout=config.timeout,
            host_suffix=config.host_suffix,
            **kwargs,
        )

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def worker_count(self) -> int:
        return len(self._workers)

    @property
    def pending(self) -> int:
        """Approximate number of items waiting for a worker."""
        return self._queue.qsize()

    def add(self, item: Any) -> None:
        """Enqueue one item for delivery.

        Raises `ClientClosedError` once `finalize()` has begun. Delivery
        failures are never reported back to the caller.
        """
        with self._intake_lock:
            if self._state is not ClientState.RUNNING:
                raise ClientClosedError(f"cannot add log items: client is {self._state.value}")
            self._queue.put(item)

    def add_multi(self, items: Iterable[Any]) -> None:
        """Enqueue items one at a time, in order (not atomic as a batch)."""
        for item in items:
            self.add(item)

    def finalize(self) -> None:
        """Close intake, wait for queued items to be attempted, stop the workers.

        Blocks until every worker has exited, which includes any delivery that
        was still in flight when the queue emptied. Calling it again after the
        pool has stopped returns immediately.
        """
        with self._finalize_lock:
            if self._state is ClientState.STOPPED:
                return

            with self._intake_lock:
                self._state = ClientState.DRAINING
                for _ in self._workers:
                    self._queue.put(_SHUTDOWN)

            logger.info("waiting_for_remaining_log_items", pending=max(0, self._queue.qsize() - len(self._workers)))
            for t in self._workers:
                t.join()

            self._state = ClientState.STOPPED
            logger.info("all_log_items_sent")

    async def aclose(self) -> None:
        """Finalize without blocking the running event loop."""
        await asyncio.to_thread(self.finalize)

    def __enter__(self) -> "LogAnalyticsClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.finalize()

    def _worker(self) -> None:
        """Deliver queued items until a shutdown marker is taken."""
        while True:
            item = self._queue.get()
            try:
                if item is _SHUTDOWN:
                    return
                envelope = build_envelope(item, clock=self._clock)
                self.transport.deliver(envelope)
            except Exception:  # noqa: BLE001
                logger.exception("log_item_delivery_crashed")
            finally:
                self._queue.task_done()

from __future__ import annotations

import logging

import pytest
import structlog

from loganalytics import logging as loganalytics_logging

# base64("test-shared-key")
TEST_SHARED_KEY = "dGVzdC1zaGFyZWQta2V5"


@pytest.fixture(autouse=True)
def _no_network_in_unit_tests(monkeypatch: pytest.MonkeyPatch):
    """Fail loudly if a unit test reaches the real HTTP layer.

    Tests that exercise `HttpTransport` replace `requests.post` themselves.
    """

    def _post(*args, **kwargs):  # noqa: ANN001, ANN002, ANN003
        raise AssertionError("unit tests must not perform real HTTP requests")

    monkeypatch.setattr("loganalytics.transport.requests.post", _post)
    yield


@pytest.fixture
def shared_key() -> str:
    return TEST_SHARED_KEY


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo root-logger and structlog changes made by `configure_logging()`."""
    root = logging.getLogger()
    level = root.level
    yield
    if loganalytics_logging._handler is not None:
        root.removeHandler(loganalytics_logging._handler)
        loganalytics_logging._handler = None
    root.setLevel(level)
    structlog.reset_defaults()

import pytest

from config import LogAnalyticsConfig, LoggingConfig, load_config
from loganalytics import LogAnalyticsClient

KEY = "dGVzdC1zaGFyZWQta2V5"
_OPTIONAL_ENV = [
    "LOG_ANALYTICS_WORKER_COUNT",
    "LOG_ANALYTICS_TIMEOUT",
    "LOG_ANALYTICS_HOST_SUFFIX",
    "LOG_LEVEL",
    "LOG_FORMAT",
]


def test_log_analytics_config_url():
    cfg = LogAnalyticsConfig(workspace_id="ws-123", shared_key=KEY, log_name="AppEvents")
    assert cfg.url == "https://ws-123.ods.opinsights.azure.com/api/logs?api-version=2016-04-01"


def test_log_analytics_config_custom_host_suffix():
    cfg = LogAnalyticsConfig(
        workspace_id="ws-123", shared_key=KEY, log_name="AppEvents", host_suffix="ods.opinsights.azure.us"
    )
    assert cfg.url == "https://ws-123.ods.opinsights.azure.us/api/logs?api-version=2016-04-01"


@pytest.mark.parametrize("shared_key", ["", "your_shared_key_here", "not base64!"])
def test_shared_key_must_be_base64(shared_key: str):
    with pytest.raises(ValueError):
        LogAnalyticsConfig(workspace_id="ws-123", shared_key=shared_key, log_name="AppEvents")


def test_shared_key_hidden_from_repr():
    cfg = LogAnalyticsConfig(workspace_id="ws-123", shared_key=KEY, log_name="AppEvents")
    assert KEY not in repr(cfg)


@pytest.mark.parametrize("log_name", ["", "bad name", "bad-name"])
def test_log_name_is_validated(log_name: str):
    with pytest.raises(ValueError):
        LogAnalyticsConfig(workspace_id="ws-123", shared_key=KEY, log_name=log_name)


def test_worker_count_must_be_positive():
    with pytest.raises(ValueError):
        LogAnalyticsConfig(workspace_id="ws-123", shared_key=KEY, log_name="AppEvents", worker_count=0)


def test_logging_format_is_validated():
    assert LoggingConfig(format="JSON").format == "json"
    with pytest.raises(ValueError):
        LoggingConfig(format="xml")


def test_load_config_reads_required_and_defaults(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LOG_ANALYTICS_WORKSPACE_ID", "ws-123")
    monkeypatch.setenv("LOG_ANALYTICS_SHARED_KEY", KEY)
    monkeypatch.setenv("LOG_ANALYTICS_LOG_NAME", "AppEvents")
    for name in _OPTIONAL_ENV:
        monkeypatch.delenv(name, raising=False)

    cfg = load_config()
    assert cfg.log_analytics.workspace_id == "ws-123"
    assert cfg.log_analytics.shared_key == KEY
    assert cfg.log_analytics.log_name == "AppEvents"
    assert cfg.log_analytics.worker_count == 2
    assert cfg.log_analytics.timeout == 60.0
    assert cfg.log_analytics.host_suffix == "ods.opinsights.azure.com"
    assert cfg.logging.level == "INFO"
    assert cfg.logging.format == "text"


def test_load_config_parses_optional_fields(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LOG_ANALYTICS_WORKSPACE_ID", "ws-123")
    monkeypatch.setenv("LOG_ANALYTICS_SHARED_KEY", KEY)
    monkeypatch.setenv("LOG_ANALYTICS_LOG_NAME", "AppEvents")
    monkeypatch.setenv("LOG_ANALYTICS_WORKER_COUNT", "4")
    monkeypatch.setenv("LOG_ANALYTICS_TIMEOUT", "12.5")
    monkeypatch.setenv("LOG_ANALYTICS_HOST_SUFFIX", "ods.opinsights.azure.cn")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_FORMAT", "json")

    cfg = load_config()
    assert cfg.log_analytics.worker_count == 4
    assert cfg.log_analytics.timeout == 12.5
    assert cfg.log_analytics.host_suffix == "ods.opinsights.azure.cn"
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.format == "json"


@pytest.mark.parametrize(
    "missing", ["LOG_ANALYTICS_WORKSPACE_ID", "LOG_ANALYTICS_SHARED_KEY", "LOG_ANALYTICS_LOG_NAME"]
)
def test_load_config_requires_credentials(monkeypatch: pytest.MonkeyPatch, missing: str):
    monkeypatch.setenv("LOG_ANALYTICS_WORKSPACE_ID", "ws-123")
    monkeypatch.setenv("LOG_ANALYTICS_SHARED_KEY", KEY)
    monkeypatch.setenv("LOG_ANALYTICS_LOG_NAME", "AppEvents")
    monkeypatch.setenv(missing, "")

    with pytest.raises(ValueError, match=missing):
        load_config()


def test_load_config_rejects_non_numeric_worker_count(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LOG_ANALYTICS_WORKSPACE_ID", "ws-123")
    monkeypatch.setenv("LOG_ANALYTICS_SHARED_KEY", KEY)
    monkeypatch.setenv("LOG_ANALYTICS_LOG_NAME", "AppEvents")
    monkeypatch.setenv("LOG_ANALYTICS_WORKER_COUNT", "two")

    with pytest.raises(ValueError, match="LOG_ANALYTICS_WORKER_COUNT"):
        load_config()


def test_client_from_config():
    cfg = LogAnalyticsConfig(workspace_id="ws-123", shared_key=KEY, log_name="AppEvents", worker_count=3)
    client = LogAnalyticsClient.from_config(cfg)
    try:
        assert client.url == cfg.url
        assert client.worker_count == 3
        assert client.log_name == "AppEvents"
    finally:
        client.finalize()

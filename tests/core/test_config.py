from __future__ import annotations

import pytest

from mcp_alert_triage_server.core.config import (
    DEFAULT_API_URL,
    FetchConfig,
    resolve_fetch_config,
    resolve_timezone,
)

ENV_VARS = (
    "ALERT_TRIAGE_API_URL",
    "ALERT_TRIAGE_FETCH_LIMIT",
    "ALERT_TRIAGE_TIMEOUT",
    "ALERT_TRIAGE_POLL_INTERVAL",
    "ALERT_TRIAGE_TIMEZONE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_env() -> None:
    cfg = resolve_fetch_config()
    assert cfg == FetchConfig()
    assert cfg.base_url == DEFAULT_API_URL
    assert cfg.limit == 1000
    assert cfg.poll_interval == 30.0


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALERT_TRIAGE_API_URL", "http://tickets.internal:8080/api/")
    monkeypatch.setenv("ALERT_TRIAGE_FETCH_LIMIT", "50")
    monkeypatch.setenv("ALERT_TRIAGE_TIMEOUT", "2.5")
    monkeypatch.setenv("ALERT_TRIAGE_POLL_INTERVAL", "5")

    cfg = resolve_fetch_config()

    assert cfg.base_url == "http://tickets.internal:8080/api"
    assert cfg.limit == 50
    assert cfg.timeout == 2.5
    assert cfg.poll_interval == 5.0


def test_env_overrides_apply_on_top_of_given_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALERT_TRIAGE_FETCH_LIMIT", "10")
    cfg = resolve_fetch_config(FetchConfig(page=3))
    assert cfg.page == 3
    assert cfg.limit == 10


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("ALERT_TRIAGE_FETCH_LIMIT", "lots"),
        ("ALERT_TRIAGE_FETCH_LIMIT", "0"),
        ("ALERT_TRIAGE_TIMEOUT", "-1"),
        ("ALERT_TRIAGE_POLL_INTERVAL", "soon"),
    ],
)
def test_invalid_env_values(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        resolve_fetch_config()


def test_resolve_timezone(monkeypatch: pytest.MonkeyPatch) -> None:
    assert resolve_timezone() is not None

    monkeypatch.setenv("ALERT_TRIAGE_TIMEZONE", "Not/AZone")
    with pytest.raises(ValueError, match="ALERT_TRIAGE_TIMEZONE"):
        resolve_timezone()

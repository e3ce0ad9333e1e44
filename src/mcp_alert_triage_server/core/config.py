"""Runtime configuration resolved from ALERT_TRIAGE_* environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_API_URL = "http://localhost:3005/api"


@dataclass(frozen=True, slots=True)
class FetchConfig:
    """Where and how alerts are fetched from the ticket API."""

    base_url: str = DEFAULT_API_URL
    limit: int = 1000
    page: int | None = None
    timeout: float = 10.0
    poll_interval: float = 30.0


def _env_int(name: str, *, minimum: int) -> int | None:
    env = os.getenv(name)
    if env is None or env == "":
        return None
    try:
        value = int(env)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _env_seconds(name: str) -> float | None:
    env = os.getenv(name)
    if env is None or env == "":
        return None
    try:
        value = float(env)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds") from exc
    if value <= 0:
        raise ValueError(f"{name} must be > 0")
    return value


def resolve_fetch_config(cfg: FetchConfig | None = None) -> FetchConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = FetchConfig()

    overrides: dict[str, object] = {}
    url = os.getenv("ALERT_TRIAGE_API_URL")
    if url:
        overrides["base_url"] = url.rstrip("/")
    limit = _env_int("ALERT_TRIAGE_FETCH_LIMIT", minimum=1)
    if limit is not None:
        overrides["limit"] = limit
    timeout = _env_seconds("ALERT_TRIAGE_TIMEOUT")
    if timeout is not None:
        overrides["timeout"] = timeout
    interval = _env_seconds("ALERT_TRIAGE_POLL_INTERVAL")
    if interval is not None:
        overrides["poll_interval"] = interval

    if not overrides:
        return cfg
    return replace(cfg, **overrides)


def resolve_timezone() -> tzinfo:
    """Timezone used for calendar presets (system local zone by default)."""
    name = os.getenv("ALERT_TRIAGE_TIMEZONE")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"ALERT_TRIAGE_TIMEZONE is not a known timezone: {name}") from exc
    tz = datetime.now().astimezone().tzinfo
    return tz if tz is not None else UTC

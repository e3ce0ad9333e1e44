"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

from mcp_alert_triage_server.core.classification import classify
from mcp_alert_triage_server.core.config import resolve_fetch_config, resolve_timezone
from mcp_alert_triage_server.core.extraction import extract
from mcp_alert_triage_server.core.models import (
    AlertSource,
    AlertStats,
    AlertStatus,
    AlertType,
    AnnotatedAlert,
    FilterCriteria,
    Priority,
    ProblemGroup,
    Sector,
)
from mcp_alert_triage_server.core.pipeline import PipelineResult, run_pipeline
from mcp_alert_triage_server.core.sources import AlertSnapshot, get_alerts
from mcp_alert_triage_server.core.time_window import resolve_date_range

DEFAULT_LIMIT = 200
HARD_LIMIT = 5000

E = TypeVar("E", bound=Enum)


def _parse_enum(enum_cls: type[E], value: str | None, *, field: str) -> E | None:
    """Parse a user-supplied enum name or value; ``all`` and empty mean unset."""
    if value is None:
        return None
    name = value.strip().lower()
    if not name or name == "all":
        return None
    for member in enum_cls:
        if name in (member.value, member.name.lower(), member.name.lower().replace("_", "-")):
            return member
    valid = ", ".join(m.value for m in enum_cls)
    raise ValueError(
        f"Unknown {field} '{value}'. Valid values: all, {valid}. "
        "Tip: values are case-insensitive (e.g., 'resolved', 'GPU')."
    )


def _resolve_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    if limit <= 0:
        raise ValueError("limit must be > 0")
    return min(limit, HARD_LIMIT)


def build_criteria(
    *,
    date_range: str | None = None,
    date: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    lookback: str | None = None,
    since: str | None = None,
    until: str | None = None,
    sector: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    source: str | None = None,
    alert_type: str | None = None,
    platform: str | None = None,
    search: str | None = None,
    now: datetime | None = None,
) -> FilterCriteria:
    """Translate string inputs into FilterCriteria."""
    window = resolve_date_range(
        preset=date_range,
        date_=date,
        start_date=start_date,
        end_date=end_date,
        lookback=lookback,
        since=since,
        until=until,
        now=now,
        tz=resolve_timezone(),
    )
    return FilterCriteria(
        date_range=window,
        sector=_parse_enum(Sector, sector, field="sector"),
        status=_parse_enum(AlertStatus, status, field="status"),
        priority=_parse_enum(Priority, priority, field="priority"),
        source=_parse_enum(AlertSource, source, field="source"),
        alert_type=_parse_enum(AlertType, alert_type, field="type"),
        platform=_parse_enum(Sector, platform, field="platform"),
        search_text=search.strip() if search and search.strip() else None,
    )


def _iso(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts is not None else None


def alert_to_dict(alert: AnnotatedAlert, *, include_message: bool = True) -> dict[str, Any]:
    """Convert an AnnotatedAlert into a JSON-serializable dict."""
    d: dict[str, Any] = {
        "id": alert.id,
        "subject": alert.subject,
        "created_at": _iso(alert.created_at),
        "status": alert.status.value,
        "priority": alert.priority.value,
        "sector": alert.sector.value,
        "platform": alert.platform.value,
        "source": alert.source.value,
        "type": alert.alert_type.value,
        "problem_id": alert.problem_id,
        "problem_name": alert.problem_name,
        "host": alert.host,
        "keywords": list(alert.keywords),
    }
    if alert.embedded_timestamp is not None:
        d["embedded_timestamp"] = alert.embedded_timestamp.text
        d["time_discrepancy_hours"] = alert.time_discrepancy_hours
    if include_message:
        d["message"] = alert.message
    return d


def group_to_dict(group: ProblemGroup, *, include_message: bool = True) -> dict[str, Any]:
    return {
        "problem_id": group.problem_id,
        "problem_name": group.problem_name,
        "host": group.host,
        "status": group.status.value,
        "priority": group.priority.value,
        "type": group.alert_type.value,
        "first_occurrence": _iso(group.first_occurrence),
        "last_update": _iso(group.last_update),
        "count": len(group.messages),
        "messages": [alert_to_dict(a, include_message=include_message) for a in group.messages],
    }


def stats_to_dict(stats: AlertStats) -> dict[str, Any]:
    def plain(counts: dict[Any, Any]) -> dict[str, Any]:
        return {k.value: v for k, v in counts.items()}

    return {
        "total": stats.total,
        "by_sector": {s.value: plain(c) for s, c in stats.by_sector_status.items()},
        "by_priority": plain(stats.by_priority),
        "by_source": plain(stats.by_source),
        "by_type": plain(stats.by_type),
        "by_platform": plain(stats.by_platform),
        "status_percentages": plain(stats.status_percentages),
        "avg_resolution_minutes": plain(stats.avg_resolution_minutes),
        "overall_avg_resolution_minutes": stats.overall_avg_resolution_minutes,
        "unique_problems": stats.unique_problems,
        "unique_hosts": stats.unique_hosts,
        "top_problems": [{"problem": p, "count": c} for p, c in stats.top_problems],
        "top_hosts": [{"host": h, "count": c} for h, c in stats.top_hosts],
    }


async def _load_and_run(
    *,
    source_path: str | None,
    criteria: FilterCriteria,
    group: bool,
    now: datetime | None,
) -> tuple[AlertSnapshot, PipelineResult]:
    snapshot = await get_alerts(config=resolve_fetch_config(), path=source_path)
    result = run_pipeline(snapshot.alerts, criteria, group=group, now=now)
    return snapshot, result


def _source_info(snapshot: AlertSnapshot) -> dict[str, Any]:
    d: dict[str, Any] = {"degraded": snapshot.degraded}
    if snapshot.error:
        d["error"] = snapshot.error
    return d


async def triage_alerts_impl(
    *,
    source_path: str | None = None,
    date_range: str | None = None,
    date: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    lookback: str | None = None,
    since: str | None = None,
    until: str | None = None,
    sector: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    source: str | None = None,
    alert_type: str | None = None,
    platform: str | None = None,
    search: str | None = None,
    group_by_problem: bool = False,
    limit: int | None = None,
    include_message: bool = True,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Implementation for the `triage_alerts` MCP tool.

    Notes
    -----
    - Time window precedence: date_range > date > start/end_date > lookback > since/until.
      Without any selector every alert is considered.
    - ``all`` (or omission) disables a categorical filter.
    - group_by_problem adds ``groups`` sorted by last update, newest first.
    """
    max_items = _resolve_limit(limit)
    criteria = build_criteria(
        date_range=date_range,
        date=date,
        start_date=start_date,
        end_date=end_date,
        lookback=lookback,
        since=since,
        until=until,
        sector=sector,
        status=status,
        priority=priority,
        source=source,
        alert_type=alert_type,
        platform=platform,
        search=search,
        now=now,
    )
    snapshot, result = await _load_and_run(
        source_path=source_path, criteria=criteria, group=group_by_problem, now=now
    )

    alerts = result.alerts[:max_items]
    out: dict[str, Any] = {
        "count": len(alerts),
        "total": len(result.alerts),
        **_source_info(snapshot),
        "alerts": [alert_to_dict(a, include_message=include_message) for a in alerts],
    }
    if group_by_problem:
        out["groups"] = [
            group_to_dict(g, include_message=include_message) for g in result.groups[:max_items]
        ]
    return out


async def alert_stats_impl(
    *,
    source_path: str | None = None,
    date_range: str | None = None,
    date: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    lookback: str | None = None,
    since: str | None = None,
    until: str | None = None,
    sector: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    source: str | None = None,
    search: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Implementation for the `alert_stats` MCP tool."""
    criteria = build_criteria(
        date_range=date_range,
        date=date,
        start_date=start_date,
        end_date=end_date,
        lookback=lookback,
        since=since,
        until=until,
        sector=sector,
        status=status,
        priority=priority,
        source=source,
        search=search,
        now=now,
    )
    snapshot, result = await _load_and_run(
        source_path=source_path, criteria=criteria, group=False, now=now
    )
    return {**_source_info(snapshot), "stats": stats_to_dict(result.stats)}


def classify_alert_impl(subject: str, message: str) -> dict[str, Any]:
    """Implementation for the `classify_alert` MCP tool."""
    fields = extract(message, subject)
    cls = classify(subject, message)
    return {
        "status": cls.status.value,
        "priority": cls.priority.value,
        "sector": cls.sector.value,
        "platform": cls.platform.value,
        "source": cls.source.value,
        "type": cls.alert_type.value,
        "problem_id": fields.problem_id,
        "problem_name": fields.problem_name,
        "host": fields.host,
        "embedded_timestamp": (
            fields.embedded_timestamp.text if fields.embedded_timestamp is not None else None
        ),
    }

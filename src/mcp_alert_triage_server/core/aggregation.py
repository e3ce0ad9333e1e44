"""Rollup statistics over an annotated alert set."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from .models import (
    PLATFORMS,
    TECHNICAL_SECTORS,
    AlertSource,
    AlertStats,
    AlertStatus,
    AlertType,
    AnnotatedAlert,
    Priority,
    Sector,
)

MIN_RESOLUTION_MINUTES = 30
MAX_RESOLUTION_MINUTES = 2880
TOP_N = 5


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _as_utc(ts: datetime) -> datetime:
    """Naive datetimes are taken as UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts


def percentage(part: int, total: int) -> float:
    """Share of ``total`` in percent, one decimal; 0.0 when total is 0."""
    if total <= 0:
        return 0.0
    return round(part * 100 / total, 1)


def resolution_minutes(alert: AnnotatedAlert, *, now: datetime | None = None) -> int | None:
    """Approximate resolution time of a resolved alert.

    The alert body carries no reliable resolution timestamp, so this is the age
    of the alert at ``now``, clamped to [30, 2880] minutes. None for alerts that
    are not resolved or have no usable created_at.
    """
    if alert.status is not AlertStatus.RESOLVED or alert.created_at is None:
        return None
    now = _as_utc(now or datetime.now(UTC))
    minutes = _round_half_up((now - _as_utc(alert.created_at)).total_seconds() / 60)
    return min(max(minutes, MIN_RESOLUTION_MINUTES), MAX_RESOLUTION_MINUTES)


def top_counts(values: Iterable[str | None], n: int = TOP_N) -> list[tuple[str, int]]:
    """Most frequent non-empty values, ties in first-seen order."""
    counts = Counter(v for v in values if v)
    return counts.most_common(n)


def _average(values: Sequence[int]) -> int:
    if not values:
        return 0
    return _round_half_up(sum(values) / len(values))


def aggregate(alerts: Iterable[AnnotatedAlert], *, now: datetime | None = None) -> AlertStats:
    """Compute AlertStats. Every enum member is present, zero-filled."""
    items = list(alerts)
    now = _as_utc(now or datetime.now(UTC))

    by_sector_status = {s: {st: 0 for st in AlertStatus} for s in TECHNICAL_SECTORS}
    by_priority = {p: 0 for p in Priority}
    by_source = {s: 0 for s in AlertSource}
    by_type = {t: 0 for t in AlertType}
    by_platform = {p: 0 for p in PLATFORMS}
    by_status = {st: 0 for st in AlertStatus}
    times: dict[Sector, list[int]] = {s: [] for s in TECHNICAL_SECTORS}

    for alert in items:
        by_sector_status.setdefault(alert.sector, {st: 0 for st in AlertStatus})
        by_sector_status[alert.sector][alert.status] += 1
        by_status[alert.status] += 1
        by_priority[alert.priority] += 1
        by_source[alert.source] += 1
        by_type[alert.alert_type] += 1
        by_platform[alert.platform] = by_platform.get(alert.platform, 0) + 1

        minutes = resolution_minutes(alert, now=now)
        if minutes is not None:
            times.setdefault(alert.sector, []).append(minutes)

    total = len(items)
    return AlertStats(
        total=total,
        by_sector_status=by_sector_status,
        by_priority=by_priority,
        by_source=by_source,
        by_type=by_type,
        by_platform=by_platform,
        status_percentages={st: percentage(c, total) for st, c in by_status.items()},
        avg_resolution_minutes={s: _average(v) for s, v in times.items()},
        overall_avg_resolution_minutes=_average([m for v in times.values() for m in v]),
        unique_problems=len({a.group_key for a in items}),
        unique_hosts=len({a.host for a in items if a.host}),
        top_problems=top_counts(a.problem_name for a in items),
        top_hosts=top_counts(a.host for a in items),
    )

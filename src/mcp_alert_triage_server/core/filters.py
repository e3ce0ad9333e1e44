"""Compound filtering of annotated alerts."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from .models import AnnotatedAlert, FilterCriteria


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


def matches_text(alert: AnnotatedAlert, text: str) -> bool:
    """Case-insensitive substring match over subject, message, host and problem id."""
    needle = text.casefold()
    fields = (alert.subject, alert.message, alert.host, alert.problem_id)
    return any(f is not None and needle in f.casefold() for f in fields)


def _predicates(criteria: FilterCriteria) -> list[Callable[[AnnotatedAlert], bool]]:
    preds: list[Callable[[AnnotatedAlert], bool]] = []

    if criteria.date_range is not None:
        start, end = (_as_utc(t) for t in criteria.date_range)

        def in_range(a: AnnotatedAlert) -> bool:
            if a.created_at is None:
                return False
            return start <= _as_utc(a.created_at) < end

        preds.append(in_range)

    if criteria.sector is not None:
        preds.append(lambda a: a.sector == criteria.sector)
    if criteria.status is not None:
        preds.append(lambda a: a.status == criteria.status)
    if criteria.priority is not None:
        preds.append(lambda a: a.priority == criteria.priority)
    if criteria.source is not None:
        preds.append(lambda a: a.source == criteria.source)
    if criteria.alert_type is not None:
        preds.append(lambda a: a.alert_type == criteria.alert_type)
    if criteria.platform is not None:
        preds.append(lambda a: a.platform == criteria.platform)
    if criteria.search_text:
        text = criteria.search_text
        preds.append(lambda a: matches_text(a, text))

    return preds


def filter_alerts(
    alerts: Iterable[AnnotatedAlert],
    criteria: FilterCriteria | None = None,
) -> list[AnnotatedAlert]:
    """Return alerts matching every set criterion, in input order.

    An inverted date range (end <= start) matches nothing.
    """
    items = list(alerts)
    if criteria is None:
        return items

    if criteria.date_range is not None:
        start, end = criteria.date_range
        if _as_utc(end) <= _as_utc(start):
            return []

    preds = _predicates(criteria)
    return [a for a in items if all(p(a) for p in preds)]

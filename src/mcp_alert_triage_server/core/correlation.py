"""Group alerts into problems keyed by their extracted problem id."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from .models import AnnotatedAlert, ProblemGroup

_UNDATED = datetime.max.replace(tzinfo=UTC)


def _new_group(alert: AnnotatedAlert) -> ProblemGroup:
    return ProblemGroup(
        problem_id=alert.group_key,
        problem_name=alert.problem_name,
        host=alert.host,
        status=alert.status,
        priority=alert.priority,
        alert_type=alert.alert_type,
    )


def _fold(group: ProblemGroup, alert: AnnotatedAlert) -> None:
    """Insert one alert; the latest created_at wins, ties go to the later alert."""
    group.messages.append(alert)
    ts = alert.created_at
    if ts is None:
        # Undated alerts only drive status while nothing dated has been seen.
        if group.last_update is None:
            group.status = alert.status
        return

    if group.first_occurrence is None or ts < group.first_occurrence:
        group.first_occurrence = ts
    if group.last_update is None or ts >= group.last_update:
        group.last_update = ts
        group.status = alert.status


def correlate(alerts: Iterable[AnnotatedAlert]) -> dict[str, ProblemGroup]:
    """Fold alerts left to right into ProblemGroups keyed by problem id."""
    groups: dict[str, ProblemGroup] = {}
    for alert in alerts:
        key = alert.group_key
        group = groups.get(key)
        if group is None:
            group = groups[key] = _new_group(alert)
        _fold(group, alert)

    for group in groups.values():
        # Stable: equal timestamps keep arrival order, undated alerts go last.
        group.messages.sort(key=lambda a: a.created_at or _UNDATED)
    return groups


def sorted_groups(groups: dict[str, ProblemGroup]) -> list[ProblemGroup]:
    """Groups ordered by last_update descending; groups without dates last."""
    dated = [g for g in groups.values() if g.last_update is not None]
    undated = [g for g in groups.values() if g.last_update is None]
    dated.sort(key=lambda g: g.last_update, reverse=True)
    return dated + undated

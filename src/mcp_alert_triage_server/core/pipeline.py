"""Annotate -> filter -> correlate -> aggregate.

This module is the main integration point between alert sources and the
tool/CLI layers. Every run works on an immutable snapshot and is synchronous.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo

from .aggregation import aggregate
from .classification import KeywordTable, classify, default_keyword_table
from .correlation import correlate, sorted_groups
from .extraction import extract, extract_keywords, time_discrepancy_hours
from .filters import filter_alerts
from .models import AlertStats, AnnotatedAlert, FilterCriteria, ProblemGroup, RawAlert
from .time_window import parse_timestamp


@dataclass(frozen=True, slots=True)
class PipelineResult:
    alerts: list[AnnotatedAlert]
    stats: AlertStats
    groups: list[ProblemGroup] = field(default_factory=list)


def annotate(
    raw: RawAlert,
    *,
    table: KeywordTable | None = None,
    embedded_tz: tzinfo = UTC,
) -> AnnotatedAlert:
    """Derive every annotation for one alert."""
    table = table or default_keyword_table()
    subject = raw.subject or ""
    message = raw.message or ""
    created_at = parse_timestamp(raw.created_at)

    fields = extract(message, subject)
    cls = classify(subject, message, table=table)

    return AnnotatedAlert(
        id=raw.id,
        subject=subject,
        message=message,
        created_at=created_at,
        status=cls.status,
        priority=cls.priority,
        sector=cls.sector,
        alert_type=cls.alert_type,
        platform=cls.platform,
        source=cls.source,
        problem_id=fields.problem_id,
        problem_name=fields.problem_name,
        host=fields.host,
        embedded_timestamp=fields.embedded_timestamp,
        keywords=extract_keywords(
            subject, message, table.vocabulary, limit=table.max_keywords
        ),
        time_discrepancy_hours=time_discrepancy_hours(
            fields.embedded_timestamp, created_at, tz=embedded_tz
        ),
    )


def annotate_all(
    raws: Iterable[RawAlert],
    *,
    table: KeywordTable | None = None,
    embedded_tz: tzinfo = UTC,
) -> list[AnnotatedAlert]:
    table = table or default_keyword_table()
    return [annotate(r, table=table, embedded_tz=embedded_tz) for r in raws]


def run_pipeline(
    raws: Iterable[RawAlert],
    criteria: FilterCriteria | None = None,
    *,
    group: bool = False,
    now: datetime | None = None,
    table: KeywordTable | None = None,
) -> PipelineResult:
    """Run one full pass over a snapshot of raw alerts."""
    annotated = annotate_all(raws, table=table)
    filtered = filter_alerts(annotated, criteria)
    groups = sorted_groups(correlate(filtered)) if group else []
    return PipelineResult(
        alerts=filtered,
        stats=aggregate(filtered, now=now),
        groups=groups,
    )

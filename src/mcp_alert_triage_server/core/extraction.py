"""Field extraction from free-text alert bodies."""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import UTC, datetime, tzinfo

from .models import EmbeddedTimestamp, ExtractedFields

# Tried in order; first match wins.
_PROBLEM_ID_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"Original problem ID:\s*(\d+)", re.IGNORECASE),
    re.compile(r"Problem ID:\s*(\d+)", re.IGNORECASE),
    re.compile(r"ID:\s*(\d+)", re.IGNORECASE),
)
# Label values end at the end of their line.
_HOST_RE = re.compile(r"Host:[ \t]*([^\r\n]*)", re.IGNORECASE)
_TIME_RE = re.compile(r"(\d{2}:\d{2}:\d{2})")
_DATE_RE = re.compile(r"(\d{4}\.\d{2}\.\d{2})")
_PROBLEM_NAME_RE = re.compile(r"Problem name:[ \t]*([^\r\n]*)", re.IGNORECASE)
_SUBJECT_PROBLEM_RE = re.compile(r"Problem:[ \t]*([^\r\n]*)", re.IGNORECASE)


def _labelled_value(pattern: re.Pattern[str], text: str) -> str | None:
    m = pattern.search(text)
    if not m:
        return None
    return m.group(1).strip() or None


def extract_problem_id(message: str) -> str | None:
    for pattern in _PROBLEM_ID_PATTERNS:
        m = pattern.search(message)
        if m:
            return m.group(1)
    return None


def extract_host(message: str) -> str | None:
    return _labelled_value(_HOST_RE, message)


def extract_embedded_timestamp(message: str) -> EmbeddedTimestamp | None:
    """Return the embedded date+time pair; a lone date or time is discarded."""
    time_m = _TIME_RE.search(message)
    date_m = _DATE_RE.search(message)
    if time_m and date_m:
        return EmbeddedTimestamp(date=date_m.group(1), time=time_m.group(1))
    return None


def extract_problem_name(message: str, subject: str = "") -> str | None:
    return (
        _labelled_value(_PROBLEM_NAME_RE, message)
        or _labelled_value(_SUBJECT_PROBLEM_RE, subject)
        or subject.strip()
        or None
    )


def extract(message: str | None, subject: str | None = "") -> ExtractedFields:
    """Parse the embedded fields of an alert. Never raises."""
    message = message or ""
    subject = subject or ""
    return ExtractedFields(
        problem_id=extract_problem_id(message),
        host=extract_host(message),
        embedded_timestamp=extract_embedded_timestamp(message),
        problem_name=extract_problem_name(message, subject),
    )


def extract_keywords(
    subject: str | None,
    message: str | None,
    vocabulary: Sequence[str],
    *,
    limit: int = 5,
) -> tuple[str, ...]:
    """Vocabulary terms present in the alert, in vocabulary order, capped at ``limit``."""
    text = f"{message or ''} {subject or ''}".lower()
    found: list[str] = []
    for term in vocabulary:
        if term in text and term not in found:
            found.append(term)
            if len(found) >= limit:
                break
    return tuple(found)


def time_discrepancy_hours(
    embedded: EmbeddedTimestamp | None,
    created_at: datetime | None,
    *,
    tz: tzinfo = UTC,
) -> float | None:
    """Absolute gap in hours between the embedded timestamp and ingestion time.

    The embedded tokens carry no zone; they are read in ``tz``.
    """
    if embedded is None or created_at is None:
        return None
    parsed = embedded.to_datetime()
    if parsed is None:
        return None
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    diff = abs((created_at - parsed.replace(tzinfo=tz)).total_seconds()) / 3600
    return round(diff, 2)

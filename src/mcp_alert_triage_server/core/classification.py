"""Keyword-table classification of alerts.

Every category is an ordered list of rules; the first rule whose terms occur
(case-insensitive substring) in the alert wins, otherwise the category default
applies. Categories are evaluated independently, so one alert can hit
overlapping keywords in several of them. Rule order is part of the contract.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from .models import AlertSource, AlertStatus, AlertType, Classification, Priority, Sector

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True, slots=True)
class KeywordRule:
    """Assign ``value`` when a term occurs in the message or subject.

    ``exclude_terms`` veto the rule when present in the message.
    """

    value: Enum
    message_terms: tuple[str, ...] = ()
    subject_terms: tuple[str, ...] = ()
    exclude_terms: tuple[str, ...] = ()

    def matches(self, subject: str, message: str) -> bool:
        hit = any(t in message for t in self.message_terms) or any(
            t in subject for t in self.subject_terms
        )
        if not hit:
            return False
        return not any(t in message for t in self.exclude_terms)


def _anywhere(value: Enum, *terms: str) -> KeywordRule:
    return KeywordRule(value=value, message_terms=terms, subject_terms=terms)


@dataclass(frozen=True)
class KeywordTable:
    """The single canonical rule set used by every view."""

    status: Sequence[KeywordRule]
    priority: Sequence[KeywordRule]
    sector: Sequence[KeywordRule]
    alert_type: Sequence[KeywordRule]
    platform: Sequence[KeywordRule]
    source: Sequence[KeywordRule]
    vocabulary: Sequence[str]
    max_keywords: int = 5


def default_keyword_table() -> KeywordTable:
    """Default rules for Zabbix-style monitoring alerts (English and Spanish)."""
    return KeywordTable(
        status=(
            KeywordRule(AlertStatus.RESOLVED, message_terms=("resolved", "resuelto")),
            KeywordRule(
                AlertStatus.IN_PROGRESS,
                message_terms=("started", "iniciado", "began", "comenzó"),
            ),
            KeywordRule(
                AlertStatus.OPEN,
                message_terms=("problem",),
                exclude_terms=("resolved",),
            ),
        ),
        priority=(
            _anywhere(Priority.HIGH, "critical", "critico", "high", "alto", "emergency"),
            _anywhere(Priority.MEDIUM, "important", "medium", "atención"),
        ),
        sector=(
            _anywhere(Sector.GPU, "gpu", "procesamiento"),
            _anywhere(Sector.NETWORK, "latency", "network", "ping", "icmp"),
            _anywhere(Sector.STORAGE, "disk", "storage", "space"),
            _anywhere(Sector.SERVICE, "service", "nginx", "down", "caída"),
            _anywhere(Sector.DATABASE, "database", "mysql", "elasticsearch"),
            _anywhere(Sector.MONITORING, "monitor", "zabbix", "agent", "health"),
        ),
        alert_type=(
            KeywordRule(
                AlertType.ERROR,
                message_terms=("error", "failed", "falló", "caído"),
                subject_terms=("error", "failed"),
            ),
            KeywordRule(
                AlertType.WARNING,
                message_terms=("warning", "alerta", "alert"),
                subject_terms=("warning",),
            ),
            KeywordRule(
                AlertType.SUCCESS,
                message_terms=("success", "éxito", "completed"),
                subject_terms=("resolved",),
            ),
            KeywordRule(AlertType.START, message_terms=("started", "iniciado")),
        ),
        platform=(
            KeywordRule(Sector.PLATFORM, subject_terms=("gpu", "platform")),
            KeywordRule(Sector.DELIVERY, subject_terms=("latency", "delivery")),
            KeywordRule(Sector.START, subject_terms=("service", "start", "cabecera")),
        ),
        source=(
            KeywordRule(AlertSource.ZABBIX, subject_terms=("zabbix", "monitor")),
            KeywordRule(AlertSource.HEADEND, subject_terms=("headend", "cabecera")),
        ),
        vocabulary=(
            "problem", "resolved", "started", "latency", "gpu", "service", "monitor",
            "high", "low", "nginx", "icmp", "ping", "disk", "space", "memory", "cpu",
            "database", "connection", "timeout", "failed", "error", "warning", "critical",
            "host", "down", "unavailable", "restarted", "health", "yellow",
            "elasticsearch", "cdn", "zabbix", "agent",
        ),
        max_keywords=5,
    )


def match_rules(rules: Sequence[KeywordRule], subject: str, message: str, default: E) -> E:
    """Return the value of the first matching rule (inputs already lower-cased)."""
    for rule in rules:
        if rule.matches(subject, message):
            return rule.value  # type: ignore[return-value]
    return default


def classify(
    subject: str | None,
    message: str | None,
    *,
    table: KeywordTable | None = None,
) -> Classification:
    """Derive categorical attributes from subject + message. Pure; never raises."""
    table = table or default_keyword_table()
    subj = (subject or "").lower()
    msg = (message or "").lower()

    if subj.strip():
        source = match_rules(table.source, subj, msg, AlertSource.TICKET_SYSTEM)
    else:
        source = AlertSource.PENDING

    return Classification(
        status=match_rules(table.status, subj, msg, AlertStatus.UNKNOWN),
        priority=match_rules(table.priority, subj, msg, Priority.LOW),
        sector=match_rules(table.sector, subj, msg, Sector.UNKNOWN),
        alert_type=match_rules(table.alert_type, subj, msg, AlertType.INFO),
        platform=match_rules(table.platform, subj, msg, Sector.PLATFORM),
        source=source,
    )


def describe_keyword_table(table: KeywordTable | None = None) -> dict[str, Any]:
    """Return the table as JSON-serializable data."""
    table = table or default_keyword_table()

    def rules(items: Sequence[KeywordRule]) -> list[dict[str, Any]]:
        return [
            {
                "value": r.value.value,
                "message_terms": list(r.message_terms),
                "subject_terms": list(r.subject_terms),
                "exclude_terms": list(r.exclude_terms),
            }
            for r in items
        ]

    return {
        "status": rules(table.status),
        "priority": rules(table.priority),
        "sector": rules(table.sector),
        "type": rules(table.alert_type),
        "platform": rules(table.platform),
        "source": rules(table.source),
        "vocabulary": list(table.vocabulary),
        "max_keywords": table.max_keywords,
    }

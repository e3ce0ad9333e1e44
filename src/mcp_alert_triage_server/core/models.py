"""Core data models for alert triage."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class AlertStatus(str, Enum):
    """Lifecycle state derived from the alert body."""

    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    UNKNOWN = "unknown"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Sector(str, Enum):
    """Coarse category tag.

    START/PLATFORM/DELIVERY are the platform taxonomy of the ticket board;
    the remaining members are the technical sectors derived from message text.
    """

    START = "start"
    PLATFORM = "platform"
    DELIVERY = "delivery"
    GPU = "gpu"
    NETWORK = "network"
    STORAGE = "storage"
    SERVICE = "service"
    MONITORING = "monitoring"
    DATABASE = "database"
    UNKNOWN = "unknown"


TECHNICAL_SECTORS: tuple[Sector, ...] = (
    Sector.GPU,
    Sector.NETWORK,
    Sector.STORAGE,
    Sector.SERVICE,
    Sector.MONITORING,
    Sector.DATABASE,
    Sector.UNKNOWN,
)

PLATFORMS: tuple[Sector, ...] = (Sector.START, Sector.PLATFORM, Sector.DELIVERY)


class AlertSource(str, Enum):
    TICKET_SYSTEM = "ticket-system"
    ZABBIX = "zabbix"
    HEADEND = "headend"
    PENDING = "pending"


class AlertType(str, Enum):
    """Visual style hint (error/warning/success/info/start)."""

    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"
    START = "start"


@dataclass(frozen=True, slots=True)
class RawAlert:
    """Alert row as returned by the ticket store."""

    id: int
    subject: str
    message: str
    created_at: datetime | None  # None when missing or unparseable


@dataclass(frozen=True, slots=True)
class EmbeddedTimestamp:
    """Date/time tokens found inside the message body."""

    date: str  # YYYY.MM.DD
    time: str  # HH:MM:SS

    @property
    def text(self) -> str:
        return f"{self.date} {self.time}"

    def to_datetime(self) -> datetime | None:
        """Return a naive datetime, or None when the tokens are not a real date."""
        try:
            return datetime.strptime(self.text, "%Y.%m.%d %H:%M:%S")
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class ExtractedFields:
    problem_id: str | None = None
    host: str | None = None
    embedded_timestamp: EmbeddedTimestamp | None = None
    problem_name: str | None = None


@dataclass(frozen=True, slots=True)
class Classification:
    status: AlertStatus
    priority: Priority
    sector: Sector
    alert_type: AlertType
    platform: Sector
    source: AlertSource


@dataclass(frozen=True, slots=True)
class AnnotatedAlert:
    """RawAlert plus every field derived by extraction and classification."""

    id: int
    subject: str
    message: str
    created_at: datetime | None
    status: AlertStatus
    priority: Priority
    sector: Sector
    alert_type: AlertType
    platform: Sector
    source: AlertSource
    problem_id: str | None = None
    problem_name: str | None = None
    host: str | None = None
    embedded_timestamp: EmbeddedTimestamp | None = None
    keywords: tuple[str, ...] = ()
    time_discrepancy_hours: float | None = None

    @property
    def group_key(self) -> str:
        """Correlation key (synthetic per-alert key when no problem id)."""
        return self.problem_id if self.problem_id else f"no-id-{self.id}"


@dataclass(slots=True)
class ProblemGroup:
    """Alerts sharing a problem id, folded in arrival order."""

    problem_id: str
    problem_name: str | None
    host: str | None
    status: AlertStatus
    priority: Priority
    alert_type: AlertType
    first_occurrence: datetime | None = None
    last_update: datetime | None = None
    messages: list[AnnotatedAlert] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    """Compound predicate; None means the criterion is not applied."""

    date_range: tuple[datetime, datetime] | None = None
    sector: Sector | None = None
    status: AlertStatus | None = None
    priority: Priority | None = None
    source: AlertSource | None = None
    alert_type: AlertType | None = None
    platform: Sector | None = None
    search_text: str | None = None


@dataclass(frozen=True, slots=True)
class AlertStats:
    """Rollup statistics over a filtered alert set."""

    total: int
    by_sector_status: dict[Sector, dict[AlertStatus, int]]
    by_priority: dict[Priority, int]
    by_source: dict[AlertSource, int]
    by_type: dict[AlertType, int]
    by_platform: dict[Sector, int]
    status_percentages: dict[AlertStatus, float]
    avg_resolution_minutes: dict[Sector, int]
    overall_avg_resolution_minutes: int
    unique_problems: int
    unique_hosts: int
    top_problems: list[tuple[str, int]]
    top_hosts: list[tuple[str, int]]

"""Wire models for the ticket-listing API and source results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..models import RawAlert


class AlertSourceError(RuntimeError):
    """The alert source answered, but not with usable alert data."""


class TicketRow(BaseModel):
    """One row of the ``data`` array. Extra columns are ignored."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(description="Ticket/message id.")
    subject: str | None = Field(default="", description="Alert subject line.")
    message: str | None = Field(default="", description="Free-text alert body.")
    created_at: Any = Field(
        default=None,
        description="Ingestion timestamp (ISO8601 or 'YYYY-MM-DD HH:MM:SS').",
    )


class Pagination(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    page: int | None = None
    limit: int | None = None
    total: int | None = None
    total_pages: int | None = Field(default=None, alias="totalPages")


class TicketEnvelope(BaseModel):
    """Response envelope of ``GET /tickets``."""

    model_config = ConfigDict(extra="ignore")

    success: bool
    data: list[Any] = Field(default_factory=list)
    pagination: Pagination | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class AlertSnapshot:
    """Alerts fetched in one pass; ``degraded`` marks the sample fallback."""

    alerts: list[RawAlert]
    degraded: bool = False
    error: str | None = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(UTC))

"""Alert sources package."""

from __future__ import annotations

from .models import AlertSnapshot, AlertSourceError, Pagination, TicketEnvelope, TicketRow
from .poller import AlertPoller
from .samples import sample_alerts
from .service import effective_suffix, fetch_alerts, get_alerts, load_alerts_file, parse_envelope

__all__ = [
    "AlertPoller",
    "AlertSnapshot",
    "AlertSourceError",
    "Pagination",
    "TicketEnvelope",
    "TicketRow",
    "effective_suffix",
    "fetch_alerts",
    "get_alerts",
    "load_alerts_file",
    "parse_envelope",
    "sample_alerts",
]

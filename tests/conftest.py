from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from mcp_alert_triage_server.core.models import AnnotatedAlert, RawAlert
from mcp_alert_triage_server.core.pipeline import annotate
from mcp_alert_triage_server.core.time_window import parse_timestamp

LIFECYCLE_ROWS: list[dict[str, Any]] = [
    {
        "id": 1,
        "subject": "Problem: disk full",
        "message": "Problem started at 10:00:00 on 2025.01.01\nHost: db-01\nOriginal problem ID: 500",
        "created_at": "2025-01-01T10:00:05Z",
    },
    {
        "id": 2,
        "subject": "Resolved: disk full",
        "message": "Problem has been resolved at 11:00:00 on 2025.01.01\nHost: db-01\nOriginal problem ID: 500",
        "created_at": "2025-01-01T11:00:05Z",
    },
]


@pytest.fixture
def make_alert() -> Callable[..., AnnotatedAlert]:
    """Annotate a raw alert built from keyword arguments."""

    def _make(
        id: int = 1,
        subject: str = "",
        message: str = "",
        created_at: str | datetime | None = None,
    ) -> AnnotatedAlert:
        raw = RawAlert(
            id=id,
            subject=subject,
            message=message,
            created_at=parse_timestamp(created_at),
        )
        return annotate(raw)

    return _make


@pytest.fixture
def lifecycle_rows() -> list[dict[str, Any]]:
    return [dict(row) for row in LIFECYCLE_ROWS]


@pytest.fixture
def write_export() -> Callable[[Path, list[dict[str, Any]]], None]:
    def _write(path: Path, rows: list[dict[str, Any]]) -> None:
        envelope = {
            "success": True,
            "data": rows,
            "pagination": {"page": 1, "limit": 1000, "total": len(rows), "totalPages": 1},
        }
        path.write_text(json.dumps(envelope), encoding="utf-8")

    return _write

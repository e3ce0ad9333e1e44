"""Embedded sample alerts used when the ticket API cannot be reached."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from ..models import RawAlert
from ..time_window import parse_timestamp


def sample_alerts(*, now: datetime | None = None) -> list[RawAlert]:
    """Return a small fixed dataset; the last three rows are relative to ``now``."""
    now = now or datetime.now(UTC)
    return [
        RawAlert(
            id=1,
            subject="Problem: TVF Alert",
            message=(
                "Problem started at 16:22:25 on 2025.09.26\n"
                "Problem name: TVF Alert\n"
                "Host: Elastalerts\n"
                "Severity: Information\n"
                "Operational data: America TV caido\n"
                "Original problem ID: 11865054"
            ),
            created_at=parse_timestamp("2025-09-26T22:22:31.000Z"),
        ),
        RawAlert(
            id=2,
            subject="Resolved in 1m: RCS-207-NWC1216 GPU >= 95% por más de 45 minutos",
            message=(
                "Problem has been resolved at 18:56:53 on 2025.09.26\n"
                "Problem name: RCS-207-NWC1216 GPU >= 95% por más de 45 minutos\n"
                "Problem duration: 1m\n"
                "Host: RCS-207-NWC1216\n"
                "Severity: Information\n"
                "Original problem ID: 11865397"
            ),
            created_at=parse_timestamp("2025-09-27T00:56:55.000Z"),
        ),
        RawAlert(
            id=3,
            subject="Problem: RCS-207-NWC1216 GPU >= 95% por más de 45 minutos",
            message=(
                "Problem started at 19:13:53 on 2025.09.26\n"
                "Problem name: RCS-207-NWC1216 GPU >= 95% por más de 45 minutos\n"
                "Host: RCS-207-NWC1216\n"
                "Severity: Information\n"
                "Original problem ID: 11865562"
            ),
            created_at=now,
        ),
        RawAlert(
            id=4,
            subject="High latency detected in delivery network",
            message=(
                "Latency over 100ms for more than 5 minutes\n"
                "Host: delivery-server-01\n"
                "Severity: Warning\n"
                "Original problem ID: 11865398"
            ),
            created_at=now - timedelta(hours=2),
        ),
        RawAlert(
            id=5,
            subject="Disk space critical on storage server",
            message=(
                "Disk usage over 95% on /dev/sda1\n"
                "Host: storage-server-01\n"
                "Severity: Critical\n"
                "Original problem ID: 11865396"
            ),
            created_at=now - timedelta(hours=4),
        ),
    ]

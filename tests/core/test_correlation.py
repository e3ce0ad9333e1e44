from __future__ import annotations

from datetime import UTC, datetime

from mcp_alert_triage_server.core.correlation import correlate, sorted_groups
from mcp_alert_triage_server.core.models import AlertStatus, RawAlert
from mcp_alert_triage_server.core.pipeline import annotate_all
from mcp_alert_triage_server.core.time_window import parse_timestamp

STARTED = "Problem started at 10:00:00 on 2025.01.01\nHost: db-01\nOriginal problem ID: 500"
RESOLVED = "Problem has been resolved at 11:00:00 on 2025.01.01\nHost: db-01\nOriginal problem ID: 500"


def test_latest_alert_drives_status(make_alert) -> None:
    first = make_alert(1, "Problem: disk full", STARTED, "2025-01-01T10:00:05Z")
    second = make_alert(2, "Resolved: disk full", RESOLVED, "2025-01-01T11:00:05Z")

    groups = correlate([first, second])

    group = groups["500"]
    assert group.status is AlertStatus.RESOLVED
    assert group.first_occurrence == datetime(2025, 1, 1, 10, 0, 5, tzinfo=UTC)
    assert group.last_update == datetime(2025, 1, 1, 11, 0, 5, tzinfo=UTC)
    assert [a.id for a in group.messages] == [1, 2]


def test_out_of_order_arrival(make_alert) -> None:
    first = make_alert(1, "Problem: disk full", STARTED, "2025-01-01T10:00:05Z")
    second = make_alert(2, "Resolved: disk full", RESOLVED, "2025-01-01T11:00:05Z")

    group = correlate([second, first])["500"]

    assert group.status is AlertStatus.RESOLVED
    assert group.first_occurrence == datetime(2025, 1, 1, 10, 0, 5, tzinfo=UTC)
    assert [a.id for a in group.messages] == [1, 2]


def test_equal_timestamps_later_alert_wins(make_alert) -> None:
    ts = "2025-01-01T10:00:00Z"
    resolved = make_alert(1, "disk", RESOLVED, ts)
    started = make_alert(2, "disk", STARTED, ts)

    group = correlate([resolved, started])["500"]

    assert group.status is AlertStatus.IN_PROGRESS
    assert [a.id for a in group.messages] == [1, 2]


def test_alerts_without_problem_id_are_singletons(make_alert) -> None:
    a = make_alert(7, "Disk space critical", "Disk usage over 95%", "2025-01-01T10:00:00Z")
    b = make_alert(8, "Disk space critical", "Disk usage over 95%", "2025-01-01T10:05:00Z")

    groups = correlate([a, b])

    assert set(groups) == {"no-id-7", "no-id-8"}
    assert len(groups["no-id-7"].messages) == 1


def test_undated_alert_is_grouped_but_does_not_move_bounds(make_alert) -> None:
    dated = make_alert(1, "disk", STARTED, "2025-01-01T10:00:05Z")
    undated = make_alert(2, "disk", RESOLVED, None)

    group = correlate([dated, undated])["500"]

    assert group.status is AlertStatus.IN_PROGRESS
    assert group.first_occurrence == group.last_update == dated.created_at
    assert [a.id for a in group.messages] == [1, 2]


def test_all_undated_group_keeps_last_seen_status(make_alert) -> None:
    a = make_alert(1, "disk", STARTED, None)
    b = make_alert(2, "disk", RESOLVED, "not a timestamp")

    group = correlate([a, b])["500"]

    assert group.status is AlertStatus.RESOLVED
    assert group.first_occurrence is None
    assert group.last_update is None


def test_sorted_groups_newest_first_undated_last(make_alert) -> None:
    old = make_alert(1, "a", "Problem ID: 1", "2025-01-01T08:00:00Z")
    new = make_alert(2, "b", "Problem ID: 2", "2025-01-02T08:00:00Z")
    undated = make_alert(3, "c", "Problem ID: 3", None)

    ordered = sorted_groups(correlate([old, undated, new]))

    assert [g.problem_id for g in ordered] == ["2", "1", "3"]


def test_lifecycle_rows_end_to_end(lifecycle_rows) -> None:
    raws = [
        RawAlert(
            id=row["id"],
            subject=row["subject"],
            message=row["message"],
            created_at=parse_timestamp(row["created_at"]),
        )
        for row in lifecycle_rows
    ]

    groups = correlate(annotate_all(raws))

    assert list(groups) == ["500"]
    group = groups["500"]
    assert group.host == "db-01"
    assert group.status is AlertStatus.RESOLVED
    assert len(group.messages) == 2


def test_gpu_problem_resolves(make_alert) -> None:
    started = make_alert(
        1,
        "GPU >= 95%",
        "Problem started at 10:00:00 on 2025.01.01\nHost: H1\nOriginal problem ID: 500",
        "2025-01-01T10:00:05Z",
    )
    resolved = make_alert(
        2,
        "Resolved",
        "Problem has been resolved at 10:05:00 on 2025.01.01\nOriginal problem ID: 500",
        "2025-01-01T10:05:05Z",
    )

    groups = correlate([started, resolved])

    assert list(groups) == ["500"]
    assert groups["500"].status is AlertStatus.RESOLVED
    assert groups["500"].host == "H1"

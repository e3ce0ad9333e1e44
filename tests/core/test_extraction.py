from __future__ import annotations

from datetime import UTC, datetime

from mcp_alert_triage_server.core.extraction import (
    extract,
    extract_keywords,
    time_discrepancy_hours,
)
from mcp_alert_triage_server.core.models import EmbeddedTimestamp

ZABBIX_BODY = (
    "Problem started at 10:00:00 on 2025.01.01\n"
    "Problem name: disk full\n"
    "Host: db-01\n"
    "Original problem ID: 500"
)


def test_extract_zabbix_body() -> None:
    fields = extract(ZABBIX_BODY, "Problem: disk full")

    assert fields.problem_id == "500"
    assert fields.host == "db-01"
    assert fields.embedded_timestamp == EmbeddedTimestamp(date="2025.01.01", time="10:00:00")
    assert fields.problem_name == "disk full"


def test_problem_id_prefers_original_over_generic() -> None:
    fields = extract("Event ID: 1\nOriginal problem ID: 2")
    assert fields.problem_id == "2"


def test_problem_id_fallback_patterns() -> None:
    assert extract("Problem ID: 77").problem_id == "77"
    assert extract("event id:42").problem_id == "42"
    assert extract("no identifier here").problem_id is None


def test_host_is_trimmed_and_blank_host_is_absent() -> None:
    assert extract("Host:   web-01   \nSeverity: High").host == "web-01"
    assert extract("Host:   \nSeverity: High").host is None


def test_lone_time_or_date_is_discarded() -> None:
    assert extract("started at 10:00:00").embedded_timestamp is None
    assert extract("started on 2025.01.01").embedded_timestamp is None


def test_problem_name_fallbacks() -> None:
    assert extract("", "Problem: GPU overload").problem_name == "GPU overload"
    assert extract("", "High latency detected").problem_name == "High latency detected"
    assert extract("", "   ").problem_name is None


def test_extract_never_raises_on_missing_text() -> None:
    fields = extract(None, None)
    assert fields.problem_id is None
    assert fields.host is None
    assert fields.embedded_timestamp is None
    assert fields.problem_name is None


def test_extract_keywords_vocabulary_order_and_limit() -> None:
    vocabulary = ("problem", "resolved", "started", "latency", "gpu", "service")
    keywords = extract_keywords(
        "GPU service", "Problem started, latency resolved", vocabulary, limit=5
    )
    assert keywords == ("problem", "resolved", "started", "latency", "gpu")


def test_time_discrepancy_hours() -> None:
    embedded = EmbeddedTimestamp(date="2025.01.01", time="10:00:00")
    created = datetime(2025, 1, 1, 12, 30, tzinfo=UTC)

    assert time_discrepancy_hours(embedded, created) == 2.5
    assert time_discrepancy_hours(None, created) is None
    assert time_discrepancy_hours(embedded, None) is None


def test_time_discrepancy_ignores_impossible_dates() -> None:
    embedded = EmbeddedTimestamp(date="2025.13.45", time="10:00:00")
    assert embedded.to_datetime() is None
    assert time_discrepancy_hours(embedded, datetime(2025, 1, 1, tzinfo=UTC)) is None


def test_extract_problem_id_and_host_only() -> None:
    fields = extract("Original problem ID: 11865562\nHost: RCS-207-NWC1216")
    assert fields.problem_id == "11865562"
    assert fields.host == "RCS-207-NWC1216"
    assert fields.embedded_timestamp is None


def test_time_token_without_date_has_no_embedded_timestamp() -> None:
    assert extract("Check ran at 14:02:00").embedded_timestamp is None


def test_blank_labels_do_not_take_the_next_line() -> None:
    fields = extract("Problem name:\nHost:\t\nSeverity: High", "Problem: GPU overload")

    assert fields.host is None
    assert fields.problem_name == "GPU overload"


def test_blank_problem_name_and_subject_label_fall_back_to_subject() -> None:
    assert extract("Problem name:   \r\nHost: db-01", "Disk full").problem_name == "Disk full"
    assert extract("", "Problem:   ").problem_name == "Problem:"

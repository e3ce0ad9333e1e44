from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from mcp_alert_triage_server.core.time_window import (
    parse_iso_dt,
    parse_timestamp,
    range_for_date,
    range_for_dates,
    range_for_lookback,
    range_for_preset,
    resolve_date_range,
)

# Wednesday
NOW = datetime(2025, 1, 15, 10, 0, tzinfo=UTC)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


def test_parse_iso_dt_assumes_utc() -> None:
    assert parse_iso_dt("2025-12-31T10:00:00") == _utc(2025, 12, 31, 10, 0, 0)
    assert parse_iso_dt("2025-12-31T10:00:00Z") == _utc(2025, 12, 31, 10, 0, 0)


def test_parse_timestamp_accepts_api_formats() -> None:
    assert parse_timestamp("2025-09-26T22:22:31.000Z") == _utc(2025, 9, 26, 22, 22, 31)
    assert parse_timestamp("2025-09-26 22:22:31") == _utc(2025, 9, 26, 22, 22, 31)
    assert parse_timestamp(datetime(2025, 1, 1)) == _utc(2025, 1, 1)


@pytest.mark.parametrize("value", [None, "", "yesterday-ish", 12345])
def test_parse_timestamp_rejects_garbage(value: object) -> None:
    assert parse_timestamp(value) is None


@pytest.mark.parametrize(
    ("preset", "expected"),
    [
        ("today", (_utc(2025, 1, 15), _utc(2025, 1, 16))),
        ("yesterday", (_utc(2025, 1, 14), _utc(2025, 1, 15))),
        ("thisWeek", (_utc(2025, 1, 12), _utc(2025, 1, 16))),
        ("lastWeek", (_utc(2025, 1, 5), _utc(2025, 1, 12))),
        ("thisMonth", (_utc(2025, 1, 1), _utc(2025, 1, 16))),
        ("lastMonth", (_utc(2024, 12, 1), _utc(2025, 1, 1))),
    ],
)
def test_range_for_preset(preset: str, expected: tuple[datetime, datetime]) -> None:
    assert range_for_preset(preset, now=NOW, tz=UTC) == expected


def test_range_for_preset_week_starts_on_sunday() -> None:
    sunday = _utc(2025, 1, 12, 9)
    start, _ = range_for_preset("thisWeek", now=sunday, tz=UTC)
    assert start == _utc(2025, 1, 12)


def test_range_for_preset_uses_local_midnight() -> None:
    lima = timezone(timedelta(hours=-5))
    # 03:00 UTC is still the previous evening in UTC-5.
    start, end = range_for_preset("today", now=_utc(2025, 1, 15, 3), tz=lima)
    assert start == _utc(2025, 1, 14, 5)
    assert end == _utc(2025, 1, 15, 5)


def test_range_for_preset_all_and_unknown() -> None:
    assert range_for_preset("all", now=NOW, tz=UTC) is None
    with pytest.raises(ValueError):
        range_for_preset("fortnight", now=NOW, tz=UTC)


def test_range_for_lookback() -> None:
    assert range_for_lookback("6h", now=NOW) == (NOW - timedelta(hours=6), NOW)
    assert range_for_lookback("7d", now=NOW) == (NOW - timedelta(days=7), NOW)


@pytest.mark.parametrize("value", ["6m", "h", "-1d", "24 hours"])
def test_range_for_lookback_invalid(value: str) -> None:
    with pytest.raises(ValueError):
        range_for_lookback(value, now=NOW)


def test_range_for_date_and_dates() -> None:
    assert range_for_date("2025-01-02", tz=UTC) == (_utc(2025, 1, 2), _utc(2025, 1, 3))
    assert range_for_dates("2025-01-02", "2025-01-04", tz=UTC) == (
        _utc(2025, 1, 2),
        _utc(2025, 1, 5),
    )


def test_range_for_date_invalid() -> None:
    with pytest.raises(ValueError):
        range_for_date("2025/01/02", tz=UTC)


def test_resolve_date_range_precedence() -> None:
    window = resolve_date_range(
        preset="today",
        date_="2024-06-01",
        since="2020-01-01T00:00:00Z",
        now=NOW,
        tz=UTC,
    )
    assert window == (_utc(2025, 1, 15), _utc(2025, 1, 16))

    window = resolve_date_range(date_="2024-06-01", lookback="1h", now=NOW, tz=UTC)
    assert window == (_utc(2024, 6, 1), _utc(2024, 6, 2))


def test_resolve_date_range_half_open_bounds() -> None:
    start, end = resolve_date_range(since="2025-01-01T00:00:00Z", tz=UTC)
    assert start == _utc(2025, 1, 1)
    assert end == datetime.max.replace(tzinfo=UTC)


def test_resolve_date_range_requires_both_days() -> None:
    with pytest.raises(ValueError):
        resolve_date_range(start_date="2025-01-01", tz=UTC)


def test_resolve_date_range_none_without_selectors() -> None:
    assert resolve_date_range(tz=UTC) is None


def test_parse_timestamp_out_of_range_is_undated() -> None:
    assert parse_timestamp("0001-01-01T00:00:00+01:00") is None
    assert parse_timestamp(datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=1)))) is None


@pytest.mark.parametrize("value", ["99999999d", "99999999999999h"])
def test_range_for_lookback_overflow_is_value_error(value: str) -> None:
    with pytest.raises(ValueError):
        range_for_lookback(value, now=NOW)


def test_out_of_range_bounds_are_value_errors() -> None:
    with pytest.raises(ValueError):
        parse_iso_dt("0001-01-01T00:00:00+01:00")
    with pytest.raises(ValueError):
        range_for_date("9999-12-31", tz=UTC)
    with pytest.raises(ValueError):
        resolve_date_range(since="0001-01-01T00:00:00+01:00", tz=UTC)

"""Time-window parsing helpers.

Converts dashboard-style date selectors (today, lastWeek, 24h, a specific day,
custom day spans, explicit ISO bounds) into UTC ``[start, end)`` ranges.
Calendar presets are anchored at local midnight of ``now`` in the configured
timezone.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime, timedelta, tzinfo

PRESETS: tuple[str, ...] = (
    "today",
    "yesterday",
    "thisWeek",
    "lastWeek",
    "thisMonth",
    "lastMonth",
    "all",
)

_LOOKBACK_RE = re.compile(r"^(?P<n>\d+)(?P<unit>[hd])$")


def _local_tz() -> tzinfo:
    tz = datetime.now().astimezone().tzinfo
    return tz if tz is not None else UTC


def parse_iso_dt(s: str) -> datetime:
    """Parse ISO8601 datetime. If tz is missing, assume UTC."""
    dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    try:
        return dt.astimezone(UTC)
    except OverflowError as e:
        raise ValueError(f"datetime out of range: {s}") from e


def parse_timestamp(value: object) -> datetime | None:
    """Best-effort conversion of a created_at value to aware UTC.

    Accepts datetimes, ISO8601 strings and MySQL ``YYYY-MM-DD HH:MM:SS`` text.
    Anything else (including garbage strings and instants that fall outside
    the representable UTC range) yields None.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        try:
            return value.astimezone(UTC)
        except OverflowError:
            return None
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return parse_iso_dt(value.strip())
    except (ValueError, OverflowError):
        return None


def _anchor(now: datetime | None, tz: tzinfo | None) -> tuple[datetime, tzinfo]:
    tz = tz or _local_tz()
    if now is None:
        now = datetime.now(UTC)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    return now.astimezone(tz), tz


def local_midnight(now: datetime | None = None, tz: tzinfo | None = None) -> datetime:
    """Return local midnight of ``now`` (aware, in ``tz``)."""
    local_now, _ = _anchor(now, tz)
    return local_now.replace(hour=0, minute=0, second=0, microsecond=0)


def _utc(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    return start.astimezone(UTC), end.astimezone(UTC)


def range_for_preset(
    preset: str,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> tuple[datetime, datetime] | None:
    """Return the UTC window for a calendar preset (None for ``all``)."""
    if preset not in PRESETS:
        valid = ", ".join(PRESETS)
        raise ValueError(f"Unknown date range '{preset}'. Valid values: {valid}.")
    if preset == "all":
        return None

    local_now, tz = _anchor(now, tz)
    today = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)

    if preset == "today":
        return _utc(today, tomorrow)
    if preset == "yesterday":
        return _utc(today - timedelta(days=1), today)

    # Weeks start on Sunday.
    week_start = today - timedelta(days=(today.weekday() + 1) % 7)
    if preset == "thisWeek":
        return _utc(week_start, tomorrow)
    if preset == "lastWeek":
        last_week_start = week_start - timedelta(days=7)
        return _utc(last_week_start, week_start)

    month_start = datetime(today.year, today.month, 1, tzinfo=tz)
    if preset == "thisMonth":
        return _utc(month_start, tomorrow)

    # lastMonth
    if today.month == 1:
        prev_start = datetime(today.year - 1, 12, 1, tzinfo=tz)
    else:
        prev_start = datetime(today.year, today.month - 1, 1, tzinfo=tz)
    return _utc(prev_start, month_start)


def range_for_lookback(s: str, *, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return a rolling window ending at ``now`` for selectors like 6h or 7d."""
    m = _LOOKBACK_RE.match(s.strip())
    if not m:
        raise ValueError("lookback must look like <N>h or <N>d (e.g., 24h, 7d)")
    n = int(m.group("n"))
    end = datetime.now(UTC) if now is None else parse_timestamp(now)
    try:
        delta = timedelta(hours=n) if m.group("unit") == "h" else timedelta(days=n)
        return end - delta, end
    except OverflowError as e:
        raise ValueError(f"lookback {s!r} reaches before the earliest supported date") from e


def range_for_date(s: str, *, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    """Return the local day window for an ISO date string."""
    d = date.fromisoformat(s)
    tz = tz or _local_tz()
    start = datetime(d.year, d.month, d.day, tzinfo=tz)
    try:
        return _utc(start, start + timedelta(days=1))
    except OverflowError as e:
        raise ValueError(f"date out of range: {s}") from e


def range_for_dates(
    start_date: str,
    end_date: str,
    *,
    tz: tzinfo | None = None,
) -> tuple[datetime, datetime]:
    """Return the window covering two local days, both inclusive.

    An end day before the start day is returned as-is; filtering such a
    window simply yields nothing.
    """
    start, _ = range_for_date(start_date, tz=tz)
    _, end = range_for_date(end_date, tz=tz)
    return start, end


def resolve_date_range(
    *,
    preset: str | None = None,
    date_: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    lookback: str | None = None,
    since: str | None = None,
    until: str | None = None,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> tuple[datetime, datetime] | None:
    """Resolve selectors into a UTC window; None when no bound applies.

    Priority: preset > date > start_date/end_date > lookback > since/until.
    A half-open since/until pair is completed with datetime.min/max.
    """
    if preset:
        return range_for_preset(preset, now=now, tz=tz)
    if date_:
        return range_for_date(date_, tz=tz)
    if start_date or end_date:
        if not (start_date and end_date):
            raise ValueError("start_date and end_date must be used together")
        return range_for_dates(start_date, end_date, tz=tz)
    if lookback:
        return range_for_lookback(lookback, now=now)

    s = parse_iso_dt(since) if since else None
    u = parse_iso_dt(until) if until else None
    if s is None and u is None:
        return None
    return (
        s or datetime.min.replace(tzinfo=UTC),
        u or datetime.max.replace(tzinfo=UTC),
    )

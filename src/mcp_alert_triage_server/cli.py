from __future__ import annotations

import argparse
import asyncio
import functools
import json
import sys
from collections.abc import Callable
from dataclasses import replace

from mcp_alert_triage_server.core.config import resolve_fetch_config
from mcp_alert_triage_server.core.pipeline import PipelineResult, run_pipeline
from mcp_alert_triage_server.core.sources import AlertPoller, AlertSnapshot, get_alerts
from mcp_alert_triage_server.core.time_window import PRESETS
from mcp_alert_triage_server.tools.triage import (
    alert_to_dict,
    build_criteria,
    group_to_dict,
    stats_to_dict,
)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Classify, filter and correlate monitoring alerts.")
    src = p.add_mutually_exclusive_group()
    src.add_argument("--file", dest="source_path", default=None, help="JSON / JSON-lines alert export")
    src.add_argument("--url", default=None, help="Ticket API base URL (default: ALERT_TRIAGE_API_URL)")
    p.add_argument("--limit", type=int, default=None, help="Rows requested from the ticket API")

    # Time window
    p.add_argument("--range", dest="date_range", choices=PRESETS, default=None)
    p.add_argument("--date", default=None, help="YYYY-MM-DD (local day)")
    p.add_argument("--from", dest="start_date", default=None, help="YYYY-MM-DD, first day (inclusive)")
    p.add_argument("--to", dest="end_date", default=None, help="YYYY-MM-DD, last day (inclusive)")
    p.add_argument("--lookback", default=None, help="Rolling window, e.g. 24h or 7d")
    p.add_argument("--since", default=None, help="ISO8601 start time (assumes UTC if tz missing)")
    p.add_argument("--until", default=None, help="ISO8601 end time (assumes UTC if tz missing)")

    # Criteria
    p.add_argument("--sector", default=None)
    p.add_argument("--status", default=None)
    p.add_argument("--priority", default=None)
    p.add_argument("--source", default=None)
    p.add_argument("--type", dest="alert_type", default=None)
    p.add_argument("--platform", default=None)
    p.add_argument("--search", default=None, help="Text matched in subject, message, host, problem id")

    # Output
    p.add_argument("--group", action="store_true", help="Group alerts by problem id")
    p.add_argument("--stats", action="store_true", help="Print summary statistics")
    p.add_argument("--json", dest="as_json", action="store_true", help="Emit JSON")
    p.add_argument("--watch", action="store_true", help="Re-poll at ALERT_TRIAGE_POLL_INTERVAL")
    return p


def _render(result: PipelineResult, snapshot: AlertSnapshot, args: argparse.Namespace) -> None:
    if args.as_json:
        out: dict[str, object] = {
            "degraded": snapshot.degraded,
            "count": len(result.alerts),
            "alerts": [alert_to_dict(a, include_message=False) for a in result.alerts],
        }
        if args.group:
            out["groups"] = [group_to_dict(g, include_message=False) for g in result.groups]
        if args.stats:
            out["stats"] = stats_to_dict(result.stats)
        print(json.dumps(out, indent=2, ensure_ascii=False))
        return

    if snapshot.degraded:
        print(f"[degraded] alert source unavailable ({snapshot.error}); showing sample data",
              file=sys.stderr)

    if args.group:
        for g in result.groups:
            last = g.last_update.isoformat() if g.last_update else "-"
            print(f"{g.problem_id} {last} [{g.status.value}] x{len(g.messages)} "
                  f"{g.host or '-'} {g.problem_name or ''}")
        print(f"\nFound {len(result.groups)} problems in {len(result.alerts)} alerts.")
    else:
        for a in result.alerts:
            ts = a.created_at.isoformat() if a.created_at else "-"
            print(f"{a.id} {ts} [{a.status.value}/{a.priority.value}] {a.sector.value} {a.subject}")
        print(f"\nFound {len(result.alerts)} matching alerts.")

    if args.stats:
        s = result.stats
        shares = ", ".join(f"{st.value} {pct}%" for st, pct in s.status_percentages.items())
        print(f"Status: {shares}")
        print(f"Unique problems: {s.unique_problems}  unique hosts: {s.unique_hosts}")
        print(f"Avg resolution (min): {s.overall_avg_resolution_minutes}")


def _selectors(args: argparse.Namespace) -> dict[str, str | None]:
    return {
        "date_range": args.date_range,
        "date": args.date,
        "start_date": args.start_date,
        "end_date": args.end_date,
        "lookback": args.lookback,
        "since": args.since,
        "until": args.until,
        "sector": args.sector,
        "status": args.status,
        "priority": args.priority,
        "source": args.source,
        "alert_type": args.alert_type,
        "platform": args.platform,
        "search": args.search,
    }


def _snapshot_renderer(args: argparse.Namespace) -> Callable[[AlertSnapshot], None]:
    selectors = _selectors(args)

    def on_snapshot(snapshot: AlertSnapshot) -> None:
        # Relative windows (today, 1h, ...) move with each poll.
        criteria = build_criteria(**selectors)
        _render(run_pipeline(snapshot.alerts, criteria, group=args.group), snapshot, args)

    return on_snapshot


async def _watch(fetch, args: argparse.Namespace, interval: float) -> None:
    poller = AlertPoller(fetch, interval=interval, on_snapshot=_snapshot_renderer(args))
    try:
        await poller.start()
    finally:
        await poller.stop()


def main() -> None:
    args = _build_parser().parse_args()

    try:
        criteria = build_criteria(**_selectors(args))
        cfg = resolve_fetch_config()
        if args.url:
            cfg = replace(cfg, base_url=args.url.rstrip("/"))
        if args.limit is not None:
            if args.limit < 1:
                raise ValueError("--limit must be >= 1")
            cfg = replace(cfg, limit=args.limit)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    fetch = functools.partial(get_alerts, config=cfg, path=args.source_path)

    if args.watch:
        try:
            asyncio.run(_watch(fetch, args, cfg.poll_interval))
        except KeyboardInterrupt:
            pass
        return

    snapshot = asyncio.run(fetch())
    _render(run_pipeline(snapshot.alerts, criteria, group=args.group), snapshot, args)


if __name__ == "__main__":
    main()

"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: callable actions (e.g., triage the current alert set)
- Resources: addressable data blobs (e.g., keyword table, annotated export files)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_alert_triage_server.server.alert_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_alert_triage_server.prompts.registry import register_prompts
from mcp_alert_triage_server.resources.registry import register_resources
from mcp_alert_triage_server.tools.triage import (
    alert_stats_impl,
    classify_alert_impl,
    triage_alerts_impl,
)

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv("ALERT_TRIAGE_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


mcp = FastMCP("alert-triage", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
async def triage_alerts(
    source_path: str | None = None,
    date_range: str | None = None,
    date: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    lookback: str | None = None,
    since: str | None = None,
    until: str | None = None,
    sector: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    source: str | None = None,
    alert_type: str | None = None,
    platform: str | None = None,
    search: str | None = None,
    group_by_problem: bool = False,
    limit: int | None = None,
    include_message: bool = True,
) -> dict[str, Any]:
    """Return annotated alerts, optionally grouped by problem id.

    Parameters
    ----------
    source_path:
        Optional JSON / JSON-lines export (.gz supported). When omitted, alerts are
        fetched from the ticket API (ALERT_TRIAGE_API_URL).
    date_range:
        Calendar preset: today, yesterday, thisWeek, lastWeek, thisMonth, lastMonth, all.
    date / start_date / end_date:
        YYYY-MM-DD; a specific day, or an inclusive span of days.
    lookback:
        Rolling window ending now, e.g. 1h, 6h, 24h, 7d, 30d.
    since/until:
        ISO-8601 datetimes. If timezone is omitted, UTC is assumed.
    sector / status / priority / source / alert_type / platform:
        Categorical filters (case-insensitive). "all" disables the filter.
        sector: gpu, network, storage, service, monitoring, database, unknown
        status: open, in-progress, resolved, unknown
        priority: low, medium, high
        source: ticket-system, zabbix, headend, pending
        alert_type: error, warning, success, info, start
        platform: start, platform, delivery
    search:
        Case-insensitive text matched against subject, message, host and problem id.
    group_by_problem:
        Also return problem groups (newest last update first).
    limit:
        Maximum number of alerts/groups returned (hard-capped in the implementation).
    include_message:
        Whether to include the full alert body in each alert.

    Returns
    -------
    dict:
        {"count": int, "total": int, "degraded": bool, "alerts": list[dict], "groups"?: list[dict]}
    """
    return await triage_alerts_impl(
        source_path=source_path,
        date_range=date_range,
        date=date,
        start_date=start_date,
        end_date=end_date,
        lookback=lookback,
        since=since,
        until=until,
        sector=sector,
        status=status,
        priority=priority,
        source=source,
        alert_type=alert_type,
        platform=platform,
        search=search,
        group_by_problem=group_by_problem,
        limit=limit,
        include_message=include_message,
    )


@mcp.tool()
async def alert_stats(
    source_path: str | None = None,
    date_range: str | None = None,
    date: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    lookback: str | None = None,
    since: str | None = None,
    until: str | None = None,
    sector: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    source: str | None = None,
    search: str | None = None,
) -> dict[str, Any]:
    """Return rollup statistics (counts, percentages, resolution times, top hosts).

    Accepts the same source and filter parameters as triage_alerts.
    """
    return await alert_stats_impl(
        source_path=source_path,
        date_range=date_range,
        date=date,
        start_date=start_date,
        end_date=end_date,
        lookback=lookback,
        since=since,
        until=until,
        sector=sector,
        status=status,
        priority=priority,
        source=source,
        search=search,
    )


@mcp.tool()
def classify_alert(subject: str, message: str) -> dict[str, Any]:
    """Extract fields from and classify a single subject/message pair."""
    return classify_alert_impl(subject, message)


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()

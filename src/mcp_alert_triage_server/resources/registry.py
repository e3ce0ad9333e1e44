"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_alert_triage_server.core.classification import describe_keyword_table
from mcp_alert_triage_server.core.pipeline import annotate_all
from mcp_alert_triage_server.core.sources import (
    TicketEnvelope,
    effective_suffix,
    load_alerts_file,
    sample_alerts,
)
from mcp_alert_triage_server.tools.triage import alert_to_dict

ALLOWED_FILE_SUFFIXES = {".json", ".jsonl", ".ndjson"}
BASE_DIR_ENV = "ALERT_TRIAGE_BASE_DIR"


def _base_dir() -> Path:
    return Path(os.getenv(BASE_DIR_ENV) or os.getcwd()).resolve()


def _resolve_resource_path(path: str) -> Path:
    """Resolve an export path under ALERT_TRIAGE_BASE_DIR and check its type."""
    base = _base_dir()
    candidate = Path(path).expanduser()
    resolved = (candidate if candidate.is_absolute() else base / candidate).resolve()
    if not resolved.is_relative_to(base):
        raise ValueError(f"Path escapes base dir {base}: {path}")
    if not resolved.is_file():
        raise FileNotFoundError(f"Alert export not found: {resolved}")
    if effective_suffix(resolved) not in ALLOWED_FILE_SUFFIXES:
        kinds = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed for {resolved.name}; expected {kinds} (optionally .gz).")
    return resolved


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://alert-triage/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        return (
            "Resources:\n"
            "- app://alert-triage/help\n"
            "- app://alert-triage/config/keyword-table\n"
            "- app://alert-triage/schemas/ticket-envelope\n"
            "- app://alert-triage/examples/sample-alerts\n"
            f"- alerts://{{path}} (restricted to {BASE_DIR_ENV}; allowed: {allowed}, .gz)\n"
            f"\nBase directory: {_base_dir()}\n"
        )

    @mcp.resource("app://alert-triage/config/keyword-table")
    def keyword_table() -> dict[str, Any]:
        """Return the classification keyword table."""
        return describe_keyword_table()

    @mcp.resource("app://alert-triage/schemas/ticket-envelope")
    def ticket_envelope_schema() -> dict[str, Any]:
        """Return the JSON schema of the ticket API response envelope."""
        return TicketEnvelope.model_json_schema()

    @mcp.resource("app://alert-triage/examples/sample-alerts")
    def sample_alerts_resource() -> list[dict[str, Any]]:
        """Return the fallback sample dataset, annotated."""
        return [alert_to_dict(a) for a in annotate_all(sample_alerts())]

    @mcp.resource("alerts://{path}")
    async def alerts_file(path: str) -> list[dict[str, Any]]:
        """Annotate an alert export file from within ALERT_TRIAGE_BASE_DIR."""
        p = _resolve_resource_path(path)
        return [alert_to_dict(a) for a in annotate_all(await load_alerts_file(p))]

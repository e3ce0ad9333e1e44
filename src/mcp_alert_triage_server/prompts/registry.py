"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def _call_block(**params: str | None) -> str:
    lines = [f"- {k}: {v}" for k, v in params.items() if v not in (None, "", "all")]
    return "\n".join(lines) if lines else "- (no filters)"


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def triage_alerts_summary(
        date_range: str = "today",
        sector: str = "all",
        status: str = "all",
        priority: str = "all",
        source_path: str | None = None,
    ) -> list[dict[str, Any]]:
        """Build a prompt for an operator-facing alert summary."""
        call_block = _call_block(
            source_path=source_path,
            date_range=date_range,
            sector=sector,
            status=status,
            priority=priority,
        )
        return [
            {
                "role": "system",
                "content": (
                    "You are an on-call monitoring assistant for a video delivery platform. "
                    "Summarize alert data precisely. Do not invent alerts, hosts or problem ids; "
                    "if the evidence is insufficient, say so."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Summarize current alerts. Follow this workflow:\n"
                    "- Call alert_stats with the parameters below.\n"
                    "- Call triage_alerts with the same parameters and group_by_problem=true.\n"
                    "- If the result is marked degraded, say that the ticket API was unreachable "
                    "and the figures come from sample data.\n"
                    "- If no alerts are returned, say so and suggest widening the date range.\n\n"
                    "Parameters:\n"
                    f"{call_block}\n\n"
                    "Return this structure:\n"
                    "1) Overview (totals by status and sector)\n"
                    "2) Open problems (problem_id, host, last update), most recent first\n"
                    "3) Noisy hosts / recurring problems\n"
                    "4) Suggested next actions (2-4 bullets)\n"
                ),
            },
        ]

    @mcp.prompt()
    def investigate_problem(
        problem_id: str,
        source_path: str | None = None,
    ) -> list[dict[str, Any]]:
        """Build a prompt that walks through one problem's lifecycle."""
        call_block = _call_block(source_path=source_path, search=problem_id)
        return [
            {
                "role": "system",
                "content": (
                    "You are an incident analyst. Reconstruct the timeline of a monitoring "
                    "problem from its alert messages only."
                ),
            },
            {
                "role": "user",
                "content": (
                    f"Investigate problem {problem_id}.\n"
                    "Call triage_alerts with group_by_problem=true and:\n"
                    f"{call_block}\n\n"
                    "Use the group whose problem_id matches exactly. Report:\n"
                    "- First occurrence and last update\n"
                    "- Each message in order with its status\n"
                    "- Differences between embedded timestamps and created_at, if any\n"
                    "- Whether the problem is resolved\n"
                ),
            },
        ]

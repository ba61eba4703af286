"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP


def _format_list(values: Sequence[str] | str | None, *, lower: bool = True) -> str:
    """Return values as a JSON array literal for prompt display."""
    if not values:
        return "[]"
    if isinstance(values, str):
        items = [s.strip() for s in values.split(",") if s.strip()]
    else:
        items = [str(s).strip() for s in values if str(s).strip()]
    if lower:
        items = [item.lower() for item in items]
    quoted = ", ".join(f'"{item}"' for item in items)
    return f"[{quoted}]"


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def triage_health_report(
        paths: Sequence[str] | str,
        categories: Sequence[str] | str | None = None,
        severities: Sequence[str] | str = ("critical", "warning"),
    ) -> list[dict[str, Any]]:
        """Build a prompt for a PC health triage over one or more report files."""
        path_list = [paths] if isinstance(paths, str) else list(paths)
        call_lines = [f"- paths: {_format_list(path_list, lower=False)}"]
        if categories:
            call_lines.append(f"- categories: {_format_list(categories)}")
        call_lines.append(f"- severities: {_format_list(severities)}")
        call_lines.append("- include_remediation: true")
        call_block = "\n".join(call_lines)
        return [
            {
                "role": "system",
                "content": (
                    "You are a careful PC support technician. Explain diagnostic findings in "
                    "plain language, ordered by urgency. Do not invent readings; if a category "
                    "has no data, say so instead of guessing."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Assess this machine's health using analyze_reports. Follow this workflow:\n"
                    "- Always call analyze_reports first with the parameters below.\n"
                    "- A category score of null means no report covered it; it is not a zero.\n"
                    "- List files reported as unrecognized and suggest how to regenerate them.\n"
                    "- Quote the raw evidence field when explaining critical issues.\n\n"
                    "Call analyze_reports with:\n"
                    f"{call_block}\n\n"
                    "Return this structure:\n"
                    "1) Overall health (global score and label, 1-2 sentences)\n"
                    "2) Urgent problems (critical issues with evidence)\n"
                    "3) Worth attention (warnings, grouped by category)\n"
                    "4) Next actions (2-5 bullets; include commands from remediation where given)\n"
                ),
            },
        ]

    @mcp.prompt()
    def explain_issue(
        title: str,
        detail: str = "",
        recommendation: str = "",
    ) -> list[dict[str, Any]]:
        """Build a prompt that explains one issue and how to fix it."""
        return [
            {
                "role": "system",
                "content": (
                    "Explain a single PC health finding to a non-expert. Be concrete and brief. "
                    "Warn before any step that risks data loss."
                ),
            },
            {
                "role": "user",
                "content": (
                    f"Issue: {title}\n"
                    f"Detail: {detail or 'n/a'}\n"
                    f"Recommendation: {recommendation or 'n/a'}\n\n"
                    "Call get_remediation with the same title, detail and recommendation, then "
                    "explain:\n"
                    "- What this means\n"
                    "- How serious it is\n"
                    "- Step-by-step fix (use the returned command if there is one)\n"
                    "- When to get professional help\n"
                ),
            },
        ]

"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: callable actions (e.g., analyze a folder of diagnostic reports)
- Resources: addressable data blobs (e.g., parser catalogue, report text via URI)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_health_check_server.server.health_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_health_check_server.prompts.registry import register_prompts
from mcp_health_check_server.resources.registry import register_resources
from mcp_health_check_server.tools.analyze import (
    analyze_report_text_impl,
    analyze_reports_impl,
    export_markdown_impl,
    list_parsers_impl,
    remediation_impl,
)

LOGGER = logging.getLogger(__name__)

LOG_LEVEL_ENV = "HEALTH_CHECK_LOG_LEVEL"


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("pc-health-check", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
async def analyze_reports(
    paths: Sequence[str],
    categories: Sequence[str] | None = None,
    severities: Sequence[str] | None = None,
    query: str | None = None,
    include_remediation: bool = False,
    recursive: bool = False,
) -> dict[str, Any]:
    """Detect, parse and score diagnostic report files.

    Parameters
    ----------
    paths:
        Report files or directories (e.g., battery-report.html, dmesg.txt, a
        folder of collected reports). Plain text, UTF-16 and .gz are supported.
    categories:
        Only return issues in these categories (power, system, storage,
        network, security, performance). Case-insensitive.
    severities:
        Only return issues with these severities (critical, warning, info).
    query:
        Whitespace-separated terms; every term must appear in the issue text.
    include_remediation:
        Attach a fix classification, command and guide to each issue.
    recursive:
        Descend into subdirectories of directory paths.

    Returns
    -------
    dict:
        {"reports": [...], "unrecognized": [...], "count": int,
         "issues": [...], "scores": {...}}
    """
    return await analyze_reports_impl(
        paths=paths,
        categories=categories,
        severities=severities,
        query=query,
        include_remediation=include_remediation,
        recursive=recursive,
    )


@mcp.tool()
def analyze_report_text(
    filename: str,
    content: str,
    parser_name: str | None = None,
    include_remediation: bool = False,
) -> dict[str, Any]:
    """Parse one report supplied as text.

    ``filename`` is only a detection hint. ``parser_name`` (see list_parsers)
    skips detection and forces a parser.
    """
    return analyze_report_text_impl(
        filename=filename,
        content=content,
        parser_name=parser_name,
        include_remediation=include_remediation,
    )


@mcp.tool()
def list_parsers() -> dict[str, Any]:
    """List supported report formats in detection order."""
    return list_parsers_impl()


@mcp.tool()
def get_remediation(title: str, detail: str = "", recommendation: str = "") -> dict[str, Any]:
    """Look up the known fix for an issue (fixable, manual or hardware)."""
    return remediation_impl(title=title, detail=detail, recommendation=recommendation)


@mcp.tool()
async def export_markdown(paths: Sequence[str], recursive: bool = False) -> dict[str, Any]:
    """Render a markdown health report for the given report files."""
    return await export_markdown_impl(paths=paths, recursive=recursive)


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()

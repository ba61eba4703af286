"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_health_check_server.core.intake import (
    BASE_DIR_ENV,
    configured_base_dir,
    read_report,
    resolve_under_base,
)
from mcp_health_check_server.core.schemas import ScoringResultModel
from mcp_health_check_server.tools.analyze import list_parsers_impl, scoring_reference


def _base_dir() -> Path:
    """Return the resolved base directory for file resources."""
    return configured_base_dir() or Path(os.getcwd()).resolve()


def _resolve_resource_path(path: str) -> Path:
    """Resolve and validate a report file path."""
    resolved = resolve_under_base(path, _base_dir())
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    return resolved


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("health://help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        return (
            "Resources:\n"
            "- health://help\n"
            "- health://parsers\n"
            "- health://weights\n"
            "- health://schema/scoring-result\n"
            f"- report://{{path}} (restricted to {BASE_DIR_ENV})\n"
            f"\nBase directory: {_base_dir()}\n"
        )

    @mcp.resource("health://parsers")
    def parsers() -> dict[str, Any]:
        """Return the registered parsers in detection order."""
        return list_parsers_impl()

    @mcp.resource("health://weights")
    def weights() -> dict[str, Any]:
        """Return category weights and severity penalties."""
        return scoring_reference()

    @mcp.resource("health://schema/scoring-result")
    def scoring_result_schema() -> dict[str, Any]:
        """Return the JSON schema for analysis results."""
        return ScoringResultModel.model_json_schema()

    @mcp.resource("report://{path}")
    async def read_report_resource(path: str) -> str:
        """Read a report file (decoded to text) from within HEALTH_CHECK_BASE_DIR."""
        return await read_report(_resolve_resource_path(path))

"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any

from mcp_health_check_server.core.intake import (
    collect_report_paths,
    configured_base_dir,
    read_reports,
    resolve_under_base,
)
from mcp_health_check_server.core.models import Category, DetectionOutcome, Issue, Severity
from mcp_health_check_server.core.registry import ParserRegistry, default_registry
from mcp_health_check_server.core.remediation import get_remediation
from mcp_health_check_server.core.report import export_filename, render_markdown
from mcp_health_check_server.core.schemas import (
    IssueModel,
    RemediationModel,
    ReportOutcomeModel,
    ScoringResultModel,
)
from mcp_health_check_server.core.scoring import CATEGORY_WEIGHTS, SEVERITY_PENALTIES
from mcp_health_check_server.core.search import IssueFilter, filter_issues
from mcp_health_check_server.core.session import AddResult, HealthCheckSession

ALL_CATEGORIES = [c.value for c in Category]
ALL_SEVERITIES = [s.value for s in Severity]


def _parse_names(values: Sequence[str] | None, valid: list[str], label: str) -> list[str]:
    """Validate user-supplied category/severity names (case-insensitive)."""
    if not values:
        return []
    out: list[str] = []
    for raw in values:
        name = raw.strip().lower()
        if not name:
            continue
        if name not in valid:
            raise ValueError(
                f"Unknown {label} '{raw}'. Valid values: {', '.join(valid)}. "
                f"Tip: {label} names are case-insensitive."
            )
        out.append(name)
    return out


def build_filter(
    categories: Sequence[str] | None = None,
    severities: Sequence[str] | None = None,
    query: str | None = None,
) -> IssueFilter:
    return IssueFilter.build(
        categories=_parse_names(categories, ALL_CATEGORIES, "category"),
        severities=_parse_names(severities, ALL_SEVERITIES, "severity"),
        query=query,
    )


def resolve_report_paths(paths: Sequence[str], *, recursive: bool = False) -> list[Path]:
    """Apply the base-dir sandbox (when configured) and expand directories."""
    if not paths:
        raise ValueError("At least one report path is required.")
    base = configured_base_dir()
    candidates = [resolve_under_base(p, base) if base else Path(p) for p in paths]
    try:
        files = collect_report_paths(candidates, recursive=recursive)
    except FileNotFoundError as e:
        raise ValueError(str(e)) from e
    if not files:
        raise ValueError("No report files found in the given paths.")
    return files


def _outcome_to_dict(result: AddResult) -> dict[str, Any]:
    outcome = result.outcome
    return ReportOutcomeModel(
        filename=result.filename,
        parser=outcome.parser.name if outcome else None,
        category=outcome.parser.category.value if outcome else None,
        score=outcome.result.score if outcome else None,
        summary=outcome.result.summary if outcome else {},
        message=result.message,
    ).model_dump()


async def load_session(
    paths: Sequence[str],
    *,
    recursive: bool = False,
    registry: ParserRegistry | None = None,
) -> tuple[HealthCheckSession, list[AddResult]]:
    """Read the reports at ``paths`` into a fresh session."""
    files = resolve_report_paths(paths, recursive=recursive)
    pairs = await read_reports(files)
    session = HealthCheckSession(registry)
    results = session.add_many(pairs)
    return session, results


async def analyze_reports_impl(
    *,
    paths: Sequence[str],
    categories: Sequence[str] | None = None,
    severities: Sequence[str] | None = None,
    query: str | None = None,
    include_remediation: bool = False,
    recursive: bool = False,
    registry: ParserRegistry | None = None,
) -> dict[str, Any]:
    """Implementation for the `analyze_reports` MCP tool.

    Notes
    -----
    - Filters apply to the returned issue list only; scores always cover
      every recognized report.
    - Unrecognized files are listed, not treated as errors.
    """
    criteria = build_filter(categories, severities, query)
    session, results = await load_session(paths, recursive=recursive, registry=registry)

    out: dict[str, Any] = {
        "reports": [_outcome_to_dict(r) for r in results],
        "unrecognized": session.unrecognized,
    }
    scores = session.scores
    if scores is None:
        out.update({"count": 0, "scores": None, "issues": []})
        return out

    issues = filter_issues(scores.all_issues, criteria)
    model = ScoringResultModel.from_result(
        scores, issues=issues, include_remediation=include_remediation
    )
    dumped = model.model_dump()
    out["count"] = len(issues)
    out["issues"] = dumped.pop("issues")
    out["scores"] = dumped
    return out


def analyze_report_text_impl(
    *,
    filename: str,
    content: str,
    parser_name: str | None = None,
    include_remediation: bool = False,
    registry: ParserRegistry | None = None,
) -> dict[str, Any]:
    """Implementation for the `analyze_report_text` MCP tool.

    ``parser_name`` bypasses detection and forces a specific parser.
    """
    reg = registry if registry is not None else default_registry()
    outcome: DetectionOutcome | None
    if parser_name:
        try:
            outcome = reg.parse_with(parser_name, content)
        except KeyError as e:
            raise ValueError(
                f"Unknown parser '{parser_name}'. Valid values: {', '.join(reg.names())}."
            ) from e
        if outcome is None:
            raise ValueError(f"Parser '{parser_name}' could not parse {filename or 'the content'}.")
    else:
        outcome = reg.detect_and_parse(filename, content)

    if outcome is None:
        return {"recognized": False, "filename": filename, "message": "could not identify report type"}

    return {
        "recognized": True,
        "filename": filename,
        "parser": outcome.parser.name,
        "category": outcome.parser.category.value,
        "score": outcome.result.score,
        "summary": outcome.result.summary,
        "issues": [
            IssueModel.from_issue(
                replace(i, category=outcome.parser.category, parser_name=outcome.parser.name),
                include_remediation=include_remediation,
            ).model_dump()
            for i in outcome.result.issues
        ],
    }


def list_parsers_impl(registry: ParserRegistry | None = None) -> dict[str, Any]:
    """Implementation for the `list_parsers` MCP tool (detection order)."""
    reg = registry if registry is not None else default_registry()
    return {
        "count": len(reg),
        "parsers": [
            {"order": n, "name": p.name, "category": p.category.value}
            for n, p in enumerate(reg, start=1)
        ],
        "by_category": {
            cat.value: [p.name for p in parsers] for cat, parsers in reg.by_category().items()
        },
    }


def remediation_impl(*, title: str, detail: str = "", recommendation: str = "") -> dict[str, Any]:
    """Implementation for the `get_remediation` MCP tool."""
    if not title or not title.strip():
        raise ValueError("title is required.")
    entry = get_remediation(
        Issue(severity=Severity.INFO, title=title, detail=detail, recommendation=recommendation)
    )
    return {
        "found": entry is not None,
        "remediation": RemediationModel.from_entry(entry).model_dump() if entry else None,
    }


async def export_markdown_impl(
    *,
    paths: Sequence[str],
    recursive: bool = False,
    registry: ParserRegistry | None = None,
) -> dict[str, Any]:
    """Implementation for the `export_markdown` MCP tool."""
    session, _ = await load_session(paths, recursive=recursive, registry=registry)
    scores = session.scores
    if scores is None:
        raise ValueError("None of the given files could be identified as a health report.")
    return {
        "filename": export_filename(),
        "global_score": scores.global_score,
        "markdown": render_markdown(scores),
    }


def scoring_reference() -> dict[str, Any]:
    """Category weights and severity penalties used by the scoring engine."""
    return {
        "category_weights": {c.value: w for c, w in CATEGORY_WEIGHTS.items()},
        "severity_penalties": {s.value: p for s, p in SEVERITY_PENALTIES.items()},
    }

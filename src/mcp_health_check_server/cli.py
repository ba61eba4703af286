from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence

from mcp_health_check_server.core.models import Category, Severity
from mcp_health_check_server.core.registry import default_registry
from mcp_health_check_server.core.remediation import get_remediation
from mcp_health_check_server.core.report import render_markdown, score_label
from mcp_health_check_server.core.search import filter_issues
from mcp_health_check_server.tools.analyze import (
    analyze_reports_impl,
    build_filter,
    list_parsers_impl,
    load_session,
)


def _csv_list(s: str) -> list[str]:
    return [part.strip() for part in s.split(",") if part.strip()]


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mcp-health-check",
        description="Detect, parse and score PC diagnostic reports.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    a = sub.add_parser("analyze", help="Analyze report files or directories")
    a.add_argument("paths", nargs="+")
    a.add_argument(
        "--category",
        dest="categories",
        type=_csv_list,
        action="extend",
        default=[],
        help=f"Comma-separated categories ({', '.join(c.value for c in Category)})",
    )
    a.add_argument(
        "--severity",
        dest="severities",
        type=_csv_list,
        action="extend",
        default=[],
        help=f"Comma-separated severities ({', '.join(s.value for s in Severity)})",
    )
    a.add_argument("--query", default=None, help="Only issues containing every term")
    a.add_argument("--format", choices=["text", "json", "markdown"], default="text")
    a.add_argument("--recursive", action="store_true", help="Descend into subdirectories")
    a.add_argument("--remediation", action="store_true", help="Show known fixes per issue")

    sub.add_parser("parsers", help="List supported report formats")
    return p


def _print_parsers() -> None:
    for entry in list_parsers_impl()["parsers"]:
        print(f"{entry['order']:>2}. {entry['name']} [{entry['category']}]")


async def _analyze_text(args: argparse.Namespace) -> int:
    criteria = build_filter(args.categories, args.severities, args.query)
    session, results = await load_session(
        args.paths, recursive=args.recursive, registry=default_registry()
    )
    for r in results:
        print(r.message)
    scores = session.scores
    if scores is None:
        print("\nNo report could be identified.", file=sys.stderr)
        return 2

    if args.format == "markdown":
        print()
        print(render_markdown(scores))
        return 0

    print()
    if scores.global_score is not None:
        print(f"Global score: {scores.global_score}/100 ({score_label(scores.global_score)})")
    for cat, entry in scores.category_scores.items():
        shown = f"{entry.score}/100" if entry.has_data else "no data"
        print(f"  {cat.value:<12} {shown}")

    issues = filter_issues(scores.all_issues, criteria)
    print(f"\nIssues ({len(issues)}):")
    for issue in issues:
        category = issue.category.value if issue.category else "-"
        print(f"[{issue.severity.value}] {category}/{issue.parser_name}: {issue.title}")
        if args.remediation:
            fix = get_remediation(issue)
            if fix is not None:
                command = f" ({fix.command})" if fix.command else ""
                print(f"    fix [{fix.fix_kind.value}]{command}: {fix.guide}")
    return 0


async def _analyze_json(args: argparse.Namespace) -> int:
    out = await analyze_reports_impl(
        paths=args.paths,
        categories=args.categories,
        severities=args.severities,
        query=args.query,
        include_remediation=args.remediation,
        recursive=args.recursive,
    )
    print(json.dumps(out, indent=2, ensure_ascii=False))
    return 0 if out["scores"] is not None else 2


def main(argv: Sequence[str] | None = None) -> None:
    p = _build_parser()
    args = p.parse_args(argv)

    if args.command == "parsers":
        _print_parsers()
        return

    try:
        runner = _analyze_json if args.format == "json" else _analyze_text
        code = asyncio.run(runner(args))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)
    if code:
        raise SystemExit(code)


if __name__ == "__main__":
    main()

from __future__ import annotations

from mcp_health_check_server.core.models import Category, Issue, Severity
from mcp_health_check_server.core.search import IssueFilter, filter_issues

ISSUES = [
    Issue(
        severity=Severity.WARNING,
        title="Low disk space on C:",
        category=Category.STORAGE,
        parser_name="Disk Info",
    ),
    Issue(
        severity=Severity.INFO,
        title="Disk drive status",
        detail="All drives OK",
        category=Category.STORAGE,
        parser_name="Disk Info",
    ),
    Issue(
        severity=Severity.CRITICAL,
        title="Battery health critically low at 40%",
        raw="Design Capacity: 50000 mWh",
        category=Category.POWER,
        parser_name="Battery Report",
    ),
]


def test_query_terms_are_anded() -> None:
    out = filter_issues(ISSUES, IssueFilter.build(query="disk space"))

    assert [i.title for i in out] == ["Low disk space on C:"]


def test_query_is_case_insensitive_substring() -> None:
    out = filter_issues(ISSUES, IssueFilter.build(query="DESIGN capac"))

    assert [i.parser_name for i in out] == ["Battery Report"]


def test_query_matches_category_and_parser_name() -> None:
    assert len(filter_issues(ISSUES, IssueFilter.build(query="storage"))) == 2
    assert len(filter_issues(ISSUES, IssueFilter.build(query="battery report"))) == 1


def test_category_and_severity_sets() -> None:
    criteria = IssueFilter.build(categories=["STORAGE"], severities=["info", "critical"])

    assert [i.title for i in filter_issues(ISSUES, criteria)] == ["Disk drive status"]


def test_empty_filter_keeps_order() -> None:
    assert filter_issues(ISSUES, IssueFilter.build()) == ISSUES
    assert filter_issues(ISSUES) == ISSUES

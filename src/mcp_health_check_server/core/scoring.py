"""Category and global health scoring.

Scores are always recomputed from the raw issue lists of every detection
outcome; the per-parser ``ParseResult.score`` is informational and never fed
back into the aggregate.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import replace

from .models import (
    Category,
    CategoryScore,
    DetectionOutcome,
    Issue,
    IssueCounts,
    ScoringResult,
    Severity,
)

SEVERITY_PENALTIES: dict[Severity, int] = {
    Severity.CRITICAL: 30,
    Severity.WARNING: 10,
    Severity.INFO: 2,
}

CATEGORY_WEIGHTS: dict[Category, float] = {
    Category.POWER: 0.20,
    Category.SYSTEM: 0.20,
    Category.STORAGE: 0.15,
    Category.NETWORK: 0.15,
    Category.SECURITY: 0.15,
    Category.PERFORMANCE: 0.15,
}


def round_half_up(value: float) -> int:
    """Round .5 upwards (Python's round() uses banker's rounding)."""
    return math.floor(value + 0.5)


def score_issues(issues: Iterable[Issue]) -> int:
    """100 minus the severity penalties, clamped to [0, 100]."""
    score = 100
    for issue in issues:
        score -= SEVERITY_PENALTIES.get(issue.severity, 0)
    return max(0, min(100, score))


def sort_by_severity(issues: Sequence[Issue]) -> list[Issue]:
    """Stable sort: critical, warning, info; ties keep encounter order."""
    return sorted(issues, key=lambda i: i.severity.rank)


def calculate_scores(outcomes: Sequence[DetectionOutcome]) -> ScoringResult:
    """Aggregate detection outcomes into category and global scores."""
    grouped: dict[Category, tuple[list[Issue], list[str]]] = {}
    for outcome in outcomes:
        cat = outcome.parser.category
        issues, parsers = grouped.setdefault(cat, ([], []))
        issues.extend(outcome.result.issues)
        parsers.append(outcome.parser.name)

    category_scores: dict[Category, CategoryScore] = {}
    for cat in CATEGORY_WEIGHTS:
        if cat in grouped:
            issues, parsers = grouped[cat]
            category_scores[cat] = CategoryScore(
                score=score_issues(issues),
                has_data=True,
                issue_counts=IssueCounts.from_issues(issues),
                parsers=parsers,
            )
        else:
            category_scores[cat] = CategoryScore(
                score=None,
                has_data=False,
                issue_counts=IssueCounts(),
            )

    weighted = 0.0
    total_weight = 0.0
    for cat, weight in CATEGORY_WEIGHTS.items():
        entry = category_scores[cat]
        if entry.has_data and entry.score is not None:
            weighted += entry.score * weight
            total_weight += weight
    global_score = round_half_up(weighted / total_weight) if total_weight > 0 else None

    flattened = [
        replace(issue, parser_name=outcome.parser.name, category=outcome.parser.category)
        for outcome in outcomes
        for issue in outcome.result.issues
    ]
    all_issues = sort_by_severity(flattened)

    return ScoringResult(
        global_score=global_score,
        category_scores=category_scores,
        all_issues=all_issues,
        total_issue_counts=IssueCounts.from_issues(all_issues),
        categories_with_data=len(grouped),
        total_categories=len(CATEGORY_WEIGHTS),
    )

"""Markdown export of a scoring result."""

from __future__ import annotations

from datetime import date, datetime

from .models import Category, ScoringResult, Severity

SEVERITY_ICONS: dict[Severity, str] = {
    Severity.CRITICAL: "🔴",
    Severity.WARNING: "🟠",
    Severity.INFO: "🔵",
}

CATEGORY_ICONS: dict[Category, str] = {
    Category.POWER: "⚡",
    Category.SYSTEM: "💻",
    Category.STORAGE: "💾",
    Category.NETWORK: "🌐",
    Category.SECURITY: "🛡️",
    Category.PERFORMANCE: "🚀",
}

CATEGORY_LABELS: dict[Category, str] = {
    Category.POWER: "Power & Battery",
    Category.SYSTEM: "System & Hardware",
    Category.STORAGE: "Storage",
    Category.NETWORK: "Network",
    Category.SECURITY: "Security",
    Category.PERFORMANCE: "Performance",
}


def score_label(score: int) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 80:
        return "Good"
    if score >= 60:
        return "Fair"
    if score >= 40:
        return "Poor"
    return "Critical"


def export_filename(day: date | None = None) -> str:
    """``pc-health-report-YYYY-MM-DD.md``."""
    day = day or date.today()
    return f"pc-health-report-{day.isoformat()}.md"


def render_markdown(scores: ScoringResult, generated_at: datetime | None = None) -> str:
    """Render the report: global score, category table, then issues by severity."""
    generated_at = generated_at or datetime.now()
    lines: list[str] = [
        "# PC Health Check Report",
        f"*Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}*",
        "",
    ]

    if scores.global_score is not None:
        lines.append(
            f"## Global Health Score: {scores.global_score}/100 "
            f"({score_label(scores.global_score)})"
        )
    else:
        lines.append("## Global Health Score: No Data")
    lines.append("")

    lines += [
        "## Category Breakdown",
        "",
        "| Category | Score | Critical | Warning | Info |",
        "|----------|-------|----------|---------|------|",
    ]
    for cat, entry in scores.category_scores.items():
        label = f"{CATEGORY_ICONS.get(cat, '')} {CATEGORY_LABELS.get(cat, cat.value)}"
        if entry.has_data:
            counts = entry.issue_counts
            lines.append(
                f"| {label} | {entry.score}/100 | {counts.critical} | {counts.warning} "
                f"| {counts.info} |"
            )
        else:
            lines.append(f"| {label} | No data | - | - | - |")
    lines.append("")

    lines += ["## Issues Found", ""]
    for severity in Severity:
        group = [i for i in scores.all_issues if i.severity is severity]
        if not group:
            continue
        lines.append(
            f"### {SEVERITY_ICONS[severity]} {severity.value.capitalize()} ({len(group)})"
        )
        lines.append("")
        for issue in group:
            icon = CATEGORY_ICONS.get(issue.category, "") if issue.category else ""
            lines.append(f"#### {icon} {issue.title}")
            lines.append(f"- **Detail:** {issue.detail}")
            if issue.recommendation:
                lines.append(f"- **Recommendation:** {issue.recommendation}")
            lines.append("")

    return "\n".join(lines)

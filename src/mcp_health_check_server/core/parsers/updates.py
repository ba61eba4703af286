"""Installed Windows updates parser (``wmic qfe list full /format:csv``)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues
from ._text import cell, csv_rows

_MDY_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_COMPACT_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")


def parse_update_date(text: str) -> datetime | None:
    """Parse ``InstalledOn`` values (``M/D/YYYY`` or ``YYYYMMDD``)."""
    if not text or not text.strip():
        return None
    try:
        m = _MDY_RE.search(text)
        if m:
            return datetime(int(m.group(3)), int(m.group(1)), int(m.group(2)))
        m = _COMPACT_RE.match(text.strip())
        if m:
            return datetime(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        return datetime.fromisoformat(text.strip())
    except ValueError:
        return None


def _short_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


@dataclass(frozen=True, slots=True)
class WindowsUpdatesParser:
    """Age of the most recent hotfix and presence of security updates."""

    name: ClassVar[str] = "Windows Updates"
    category: ClassVar[Category] = Category.SECURITY

    now: datetime | None = None

    _hotfix_re = re.compile(r"HotFixID", re.I)
    _installed_re = re.compile(r"InstalledOn", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if ("update" in fn or "hotfix" in fn or "qfe" in fn) and fn.endswith(".csv"):
            return True
        return bool(self._hotfix_re.search(content) and self._installed_re.search(content))

    def _age_issue(self, summary: dict[str, Any], updates: list[dict[str, str]]) -> Issue | None:
        latest: datetime | None = None
        latest_kb = ""
        for u in updates:
            installed = parse_update_date(u["installed_on"])
            if installed is not None and (latest is None or installed > latest):
                latest = installed
                latest_kb = u["hotfix_id"]
        if latest is None:
            return None

        days = int(((self.now or datetime.now()) - latest).total_seconds() // 86400)
        when = _short_date(latest)
        summary["days_since_last_update"] = days
        summary["last_update_date"] = when
        summary["last_update_kb"] = latest_kb
        raw = f"Last update: {latest_kb} on {when}"

        if days > 90:
            return Issue(
                severity=Severity.CRITICAL,
                title=f"Windows updates are {days} days old",
                detail=(
                    f"Last update ({latest_kb}) was installed on {when}. "
                    f"That's over {days // 30} months without updates."
                ),
                raw=raw,
                recommendation=(
                    "Run Windows Update immediately. Unpatched systems are vulnerable to security "
                    "exploits."
                ),
            )
        if days > 45:
            return Issue(
                severity=Severity.WARNING,
                title=f"Last Windows update was {days} days ago",
                detail=f"Last update ({latest_kb}) installed on {when}.",
                raw=raw,
                recommendation=(
                    "Check for pending Windows updates. Updates should be installed at least "
                    "monthly."
                ),
            )
        return Issue(
            severity=Severity.INFO,
            title=f"Windows updates are current ({days} days ago)",
            detail=f"Last update ({latest_kb}) installed on {when}.",
            raw=raw,
            recommendation="Updates are up to date. Keep automatic updates enabled.",
        )

    def parse(self, content: str) -> ParseResult:
        rows = csv_rows(content)
        if len(rows) < 2:
            return ParseResult(
                summary={"update_count": 0},
                score=80,
                issues=[
                    Issue(
                        severity=Severity.WARNING,
                        title="No update data found",
                        detail="Could not parse Windows updates output.",
                        recommendation=(
                            "Ensure the file was generated with: wmic qfe list full /format:csv"
                        ),
                    )
                ],
            )

        headers = [h.lower().strip() for h in rows[0]]
        hotfix_col = next((i for i, h in enumerate(headers) if "hotfixid" in h), -1)
        date_col = next((i for i, h in enumerate(headers) if "installedon" in h), -1)
        desc_col = next((i for i, h in enumerate(headers) if "description" in h), -1)

        updates = [
            {
                "hotfix_id": cell(row, hotfix_col),
                "installed_on": cell(row, date_col),
                "description": cell(row, desc_col),
            }
            for row in rows[1:]
            if len(row) > max(hotfix_col, date_col)
        ]
        updates = [u for u in updates if u["hotfix_id"]]

        issues: list[Issue] = []
        summary: dict[str, Any] = {"update_count": len(updates)}

        issue = self._age_issue(summary, updates)
        if issue is not None:
            issues.append(issue)

        security = [u for u in updates if re.search(r"security", u["description"], re.I)]
        summary["security_updates"] = len(security)
        if not security and updates:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title="No security updates detected in installed updates",
                    detail=(
                        f"Of {len(updates)} installed updates, none are marked as security "
                        "updates."
                    ),
                    raw=f"Total updates: {len(updates)}, Security: 0",
                    recommendation="Run Windows Update and specifically check for security updates.",
                )
            )

        summary["kb_numbers"] = [
            u["hotfix_id"] for u in updates if re.match(r"^KB", u["hotfix_id"], re.I)
        ]

        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="No update install dates found",
                    detail=f"{len(updates)} updates listed without a readable InstalledOn date.",
                    recommendation="Ensure the file was generated with: wmic qfe list full /format:csv",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)

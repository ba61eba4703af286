"""systemd journal parser (``journalctl -b --output=json``)."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues
from ._text import parse_int_prefix

logger = logging.getLogger(__name__)


def load_journal_entries(content: str) -> list[dict[str, Any]]:
    """One JSON object per line; malformed lines are skipped."""
    entries: list[dict[str, Any]] = []
    skipped = 0
    for line in content.split("\n"):
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            skipped += 1
            continue
        if isinstance(obj, dict):
            entries.append(obj)
    if skipped:
        logger.debug("Skipped %d malformed journal line(s)", skipped)
    return entries


@dataclass(frozen=True, slots=True)
class JournalctlParser:
    name: ClassVar[str] = "journalctl"
    category: ClassVar[Category] = Category.SECURITY

    _fields_re = re.compile(r'"_SYSTEMD_UNIT"|"__REALTIME_TIMESTAMP"|"PRIORITY"', re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "journalctl" in fn or "journal.json" in fn:
            return True
        return bool(self._fields_re.search(content[:2000]))

    def parse(self, content: str) -> ParseResult:
        entries = load_journal_entries(content)
        summary: dict[str, Any] = {
            "critical": 0,
            "errors": 0,
            "warnings": 0,
            "total_entries": len(entries),
            "units": {},
        }

        for entry in entries:
            unit = entry.get("_SYSTEMD_UNIT") or entry.get("SYSLOG_IDENTIFIER") or "unknown"
            summary["units"][unit] = summary["units"].get(unit, 0) + 1

            # 0=emerg 1=alert 2=crit 3=err 4=warning; entries without a priority are not counted
            priority = parse_int_prefix(str(entry.get("PRIORITY", "")))
            if priority is None:
                continue
            if priority <= 2:
                summary["critical"] += 1
            elif priority == 3:
                summary["errors"] += 1
            elif priority == 4:
                summary["warnings"] += 1

        issues: list[Issue] = []
        critical, errors, warnings = summary["critical"], summary["errors"], summary["warnings"]
        if critical > 0:
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title=f"{critical} critical/emergency journal entries found",
                    detail=(
                        f"The system journal contains {critical} entries with priority level "
                        "critical, alert, or emergency."
                    ),
                    raw=(
                        f"Total entries: {len(entries)} | Critical: {critical} | "
                        f"Errors: {errors} | Warnings: {warnings}"
                    ),
                    recommendation=(
                        "Review critical journal entries with: journalctl -b -p 0..2 . These may "
                        "indicate kernel panics, hardware failures, or severe service crashes."
                    ),
                )
            )

        if errors > 20:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{errors} error-level journal entries",
                    detail="A high number of error-level messages were logged during this boot.",
                    raw=f"Error entries: {errors}",
                    recommendation=(
                        "Review errors with: journalctl -b -p 3 . Investigate recurring units or "
                        "services that produce errors."
                    ),
                )
            )
        elif errors > 0:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{errors} error-level journal entries",
                    detail="Some error messages were found in the system journal.",
                    raw=f"Error entries: {errors}",
                    recommendation="Review with: journalctl -b -p 3",
                )
            )

        if warnings > 50:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{warnings} warning-level journal entries",
                    detail=(
                        "A high number of warnings in the system journal may indicate recurring "
                        "issues."
                    ),
                    raw=f"Warning entries: {warnings}",
                    recommendation="Run: journalctl -b -p 4 to see all warnings. Look for patterns.",
                )
            )

        score = score_issues(issues)
        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="System journal looks clean",
                    detail=(
                        "No critical or error entries found in this boot journal "
                        f"({len(entries)} entries analyzed)."
                    ),
                    recommendation="No action needed.",
                )
            )

        return ParseResult(summary=summary, score=score, issues=issues)

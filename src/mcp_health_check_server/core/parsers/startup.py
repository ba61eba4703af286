"""Startup programs parser (``wmic startup get caption,command /format:csv``)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues
from ._text import cell, csv_rows

# Apps known to be heavy at login, matched against caption + command.
HEAVY_STARTUP_APPS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"discord", re.I), "Discord"),
    (re.compile(r"spotify", re.I), "Spotify"),
    (re.compile(r"steam", re.I), "Steam"),
    (re.compile(r"teams", re.I), "Microsoft Teams"),
    (re.compile(r"skype", re.I), "Skype"),
    (re.compile(r"itunes", re.I), "iTunes Helper"),
    (re.compile(r"adobe.*(?:updater|cc|creative)", re.I), "Adobe Creative Cloud"),
    (re.compile(r"onedrive", re.I), "OneDrive"),
    (re.compile(r"dropbox", re.I), "Dropbox"),
    (re.compile(r"cortana", re.I), "Cortana"),
)

_EXE_RE = re.compile(r"([^\\/]+)\.(exe|bat|cmd|vbs|js)", re.I)


def exe_name(command: str) -> str:
    """Executable base name from a command line (first 50 chars as a fallback)."""
    if not command:
        return ""
    m = _EXE_RE.search(command)
    return m.group(1) if m else command[:50]


@dataclass(frozen=True, slots=True)
class StartupProgramsParser:
    name: ClassVar[str] = "Startup Programs"
    category: ClassVar[Category] = Category.PERFORMANCE

    _caption_re = re.compile(r"Caption", re.I)
    _command_re = re.compile(r"Command", re.I)
    _startup_re = re.compile(r"startup|Node", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "startup" in fn and fn.endswith(".csv"):
            return True
        return bool(
            self._caption_re.search(content)
            and self._command_re.search(content)
            and self._startup_re.search(content)
        )

    @staticmethod
    def _count_issue(programs: list[tuple[str, str]]) -> Issue:
        n = len(programs)
        labels = [caption or command for caption, command in programs]
        if n > 25:
            return Issue(
                severity=Severity.CRITICAL,
                title=f"{n} startup programs - severely impacting boot time",
                detail=(
                    f"Having {n} programs starting at boot significantly slows down system "
                    "startup and consumes memory."
                ),
                raw="\n".join(labels[:10]),
                recommendation=(
                    "Disable unnecessary startup programs in Task Manager > Startup tab. Keep only "
                    "essential programs like antivirus."
                ),
            )
        if n > 15:
            return Issue(
                severity=Severity.WARNING,
                title=f"{n} startup programs - may slow boot time",
                detail=f"{n} programs launch at startup. Typical recommendation is under 10.",
                raw="\n".join(labels[:10]),
                recommendation=(
                    "Review startup programs in Task Manager. Disable programs you don't need "
                    "immediately at boot."
                ),
            )
        if n > 10:
            return Issue(
                severity=Severity.INFO,
                title=f"{n} startup programs",
                detail="Slightly above the recommended count of ~10 startup programs.",
                raw="\n".join(labels),
                recommendation=(
                    "Consider disabling a few non-essential startup programs for faster boot times."
                ),
            )
        return Issue(
            severity=Severity.INFO,
            title=f"{n} startup programs - good",
            detail="Startup program count is within a healthy range.",
            raw="\n".join(labels),
            recommendation="Startup configuration looks fine.",
        )

    def parse(self, content: str) -> ParseResult:
        rows = csv_rows(content)
        if len(rows) < 2:
            return ParseResult(
                summary={"startup_count": 0},
                score=100,
                issues=[
                    Issue(
                        severity=Severity.INFO,
                        title="No startup data found",
                        detail="Could not parse startup programs output.",
                        recommendation=(
                            "Ensure the file was generated with: "
                            "wmic startup get caption,command /format:csv"
                        ),
                    )
                ],
            )

        headers = [h.lower().strip() for h in rows[0]]
        caption_col = next((i for i, h in enumerate(headers) if "caption" in h), -1)
        command_col = next((i for i, h in enumerate(headers) if "command" in h), -1)
        programs = [
            (cell(row, caption_col), cell(row, command_col))
            for row in rows[1:]
            if len(row) > max(caption_col, command_col)
        ]
        programs = [(c, cmd) for c, cmd in programs if c or cmd]

        summary: dict[str, Any] = {
            "startup_count": len(programs),
            "programs": [caption or exe_name(command) for caption, command in programs],
        }
        issues = [self._count_issue(programs)]

        heavy: list[str] = []
        for caption, command in programs:
            text = f"{caption} {command}"
            for pattern, label in HEAVY_STARTUP_APPS:
                if pattern.search(text) and label not in heavy:
                    heavy.append(label)
        if len(heavy) > 3:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{len(heavy)} resource-heavy apps in startup",
                    detail="These apps consume significant resources at boot: " + ", ".join(heavy),
                    raw="\n".join(heavy),
                    recommendation=(
                        "Consider disabling these from startup if you don't need them immediately. "
                        "You can still launch them manually."
                    ),
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)

"""Boot time parser (``systemd-analyze`` plus optional ``---BLAME---`` section)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues

_UNIT_SECONDS = {"h": 3600.0, "min": 60.0, "s": 1.0, "ms": 0.001}
_DURATION_TOKEN_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(h|min|ms|s)(?![a-z])", re.I)
_STARTUP_RE = re.compile(r"Startup\s+finished\s+in\s+(.+?)\s*=\s*(.+)", re.I)
_PHASE_LABEL_RE = re.compile(r"\(([\w ]+)\)")
_BLAME_LINE_RE = re.compile(r"^((?:\d+(?:\.\d+)?(?:h|min|ms|s)\s+)+)(\S.*)$")

SLOW_SERVICE_SECONDS = 10


def parse_duration(text: str) -> float | None:
    """``"1min 2.345s"`` -> 62.345; None when no duration token is present."""
    tokens = _DURATION_TOKEN_RE.findall(text or "")
    if not tokens:
        return None
    return sum(float(value) * _UNIT_SECONDS[unit.lower()] for value, unit in tokens)


@dataclass(frozen=True, slots=True)
class Service:
    name: str
    seconds: float


def parse_blame(content: str) -> list[Service]:
    """Services from ``systemd-analyze blame``; the ``---BLAME---`` marker scopes the search."""
    start = content.find("---BLAME---")
    section = content[start:] if start != -1 else content
    services: list[Service] = []
    for line in section.split("\n"):
        m = _BLAME_LINE_RE.match(line.strip())
        if not m:
            continue
        seconds = parse_duration(m.group(1))
        if seconds is not None:
            services.append(Service(name=m.group(2).strip(), seconds=seconds))
    return services


@dataclass(frozen=True, slots=True)
class SystemdAnalyzeParser:
    name: ClassVar[str] = "systemd-analyze"
    category: ClassVar[Category] = Category.PERFORMANCE

    _finished_re = re.compile(r"Startup\s+finished\s+in", re.I)
    _blame_re = re.compile(r"^\s*\d+[\d.]*m?s\s+\S+\.service", re.M)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "systemd-analyze" in fn or "systemd_analyze" in fn:
            return True
        return bool(self._finished_re.search(content) or self._blame_re.search(content))

    def parse(self, content: str) -> ParseResult:
        summary: dict[str, Any] = {}
        total: float | None = None

        m = _STARTUP_RE.search(content)
        if m:
            total = parse_duration(m.group(2))
        if total is not None:
            summary["total_boot_time"] = f"{total:.1f}s"
            summary["total_boot_seconds"] = total
            # "2.1s (firmware) + 1.5s (kernel) + 8.2s (userspace)"
            for phase in m.group(1).split("+"):
                label = _PHASE_LABEL_RE.search(phase)
                seconds = parse_duration(_PHASE_LABEL_RE.sub("", phase))
                if label and seconds is not None:
                    key = label.group(1).strip().lower().replace(" ", "_")
                    summary[f"{key}_time"] = f"{seconds:.1f}s"

        services = parse_blame(content)
        slow = [s for s in services if s.seconds > SLOW_SERVICE_SECONDS]
        summary["total_services"] = len(services)
        summary["slow_services"] = len(slow)

        issues: list[Issue] = []
        boot_time = summary.get("total_boot_time")
        if total and total > 120:
            raw = f"Total: {boot_time}"
            if "kernel_time" in summary and "userspace_time" in summary:
                raw += (
                    f" | Kernel: {summary['kernel_time']} | Userspace: {summary['userspace_time']}"
                )
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"Slow boot time: {boot_time}",
                    detail="Total boot time exceeds 2 minutes.",
                    raw=raw,
                    recommendation=(
                        "Disable unnecessary services. Run: systemd-analyze blame to see the "
                        "slowest services."
                    ),
                )
            )
        elif total and total > 60:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"Boot time: {boot_time}",
                    detail="Boot time is over a minute, which may be improvable.",
                    raw=f"Total: {boot_time}",
                    recommendation="Review slow services and consider disabling unused ones.",
                )
            )

        if slow:
            issues.append(
                Issue(
                    severity=Severity.WARNING if len(slow) > 3 else Severity.INFO,
                    title=f"{len(slow)} slow boot service(s) (>10s)",
                    detail="These services took the longest to start during boot.",
                    raw="\n".join(f"{s.seconds:.1f}s - {s.name}" for s in slow[:5]),
                    recommendation=(
                        "Consider disabling or optimizing slow services: "
                        "sudo systemctl disable <service-name>"
                    ),
                )
            )

        score = score_issues(issues)
        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Boot performance is good",
                    detail=(
                        f"Total boot time: {boot_time}" if boot_time else "No slow services detected."
                    ),
                    recommendation="No action needed.",
                )
            )

        return ParseResult(summary=summary, score=score, issues=issues)

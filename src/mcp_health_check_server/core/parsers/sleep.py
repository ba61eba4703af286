"""Sleep study parser (``powercfg /sleepstudy`` HTML)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues
from ._text import fmt_num, is_html_name, plural, round_to


@dataclass(frozen=True, slots=True)
class SleepStudyParser:
    """Parse sleep sessions, drain rates and the devices active while asleep."""

    name: ClassVar[str] = "Sleep Study"
    category: ClassVar[Category] = Category.POWER

    _title_re = re.compile(r"Sleep\s*Study|sleepstudy", re.I)
    _standby_re = re.compile(r"Connected\s*Standby", re.I)
    _drain_label_re = re.compile(r"Drain\s*Rate", re.I)

    _session_re = re.compile(
        r"(?:AC|DC|Battery|Connected Standby|Modern Standby|Sleep)[^<]*?(\d+:\d+:\d+)"
        r"[^<]*?(\d+(?:\.\d+)?)\s*%",
        re.I,
    )
    _drain_re = re.compile(
        r"(?:drain|rate)[^<\d]*?(\d+(?:\.\d+)?)\s*(?:mW|%/hr|%\s*per\s*hour)", re.I
    )
    _offender_re = re.compile(r"(?:Top\s*Offender|Active\s*Device|Offender)[^<]*?<[^>]*>([^<]+)", re.I)
    _device_re = re.compile(r"(?:Device|Driver|Module)[^<:]*?[>:]\s*([^<\n]+)", re.I)
    _digits_re = re.compile(r"^\d+$")

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "sleep" in fn and is_html_name(fn):
            return True
        return bool(
            self._title_re.search(content)
            or (self._standby_re.search(content) and self._drain_label_re.search(content))
        )

    def _offenders(self, content: str) -> list[str]:
        offenders: list[str] = []
        for m in self._offender_re.finditer(content):
            name = m.group(1).strip()
            if 2 < len(name) < 100:
                offenders.append(name)
        for m in self._device_re.finditer(content):
            name = m.group(1).strip()
            if 3 < len(name) < 80 and name not in offenders and not self._digits_re.match(name):
                offenders.append(name)
        return offenders

    def parse(self, content: str) -> ParseResult:
        issues: list[Issue] = []
        summary: dict[str, Any] = {}

        sessions = [(m.group(1), float(m.group(2))) for m in self._session_re.finditer(content)]
        summary["session_count"] = len(sessions)

        drain_rates = [float(m.group(1)) for m in self._drain_re.finditer(content)]
        if drain_rates:
            summary["avg_drain_rate"] = round_to(sum(drain_rates) / len(drain_rates), 2)

        offenders = self._offenders(content)
        summary["top_offenders"] = offenders[:10]

        if sessions:
            high = [s for s in sessions if s[1] > 5]
            if len(high) > len(sessions) * 0.5:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=(
                            f"High sleep drain detected in {len(high)} of {len(sessions)} sessions"
                        ),
                        detail=(
                            "More than half of sleep sessions show drain above 5%. Something is "
                            "preventing efficient sleep."
                        ),
                        raw=f"High drain sessions: {len(high)}/{len(sessions)}",
                        recommendation=(
                            "Check for devices or apps keeping the system active during sleep. "
                            "Review top offenders list."
                        ),
                    )
                )
            excessive = [s for s in sessions if s[1] > 20]
            if excessive:
                n = len(excessive)
                issues.append(
                    Issue(
                        severity=Severity.CRITICAL,
                        title=f"{n} sleep session{plural(n)} with excessive drain (>20%)",
                        detail=(
                            "One or more sleep sessions drained over 20% battery. The system may "
                            "not be sleeping properly."
                        ),
                        raw="; ".join(
                            f"Duration: {duration}, Drain: {fmt_num(drain)}%"
                            for duration, drain in excessive
                        ),
                        recommendation=(
                            "Check wake timers, background apps, and connected standby settings. "
                            'Run "powercfg /requests" to see active power requests.'
                        ),
                    )
                )

        if len(offenders) > 5:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{len(offenders)} active devices/processes during sleep",
                    detail=(
                        "Multiple devices or processes are active during sleep: "
                        f"{', '.join(offenders[:5])}..."
                    ),
                    raw=", ".join(offenders),
                    recommendation=(
                        "Review which devices need to remain active during sleep. Disable "
                        "wake-on-LAN for unused network adapters."
                    ),
                )
            )
        elif offenders:
            n = len(offenders)
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{n} device{plural(n)} active during sleep",
                    detail=f"Active during sleep: {', '.join(offenders)}",
                    raw=", ".join(offenders),
                    recommendation=(
                        "These devices may be normal (e.g., network adapter for wake-on-LAN). "
                        "Review if any are unexpected."
                    ),
                )
            )

        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Sleep study shows no major issues",
                    detail=(
                        f"Analyzed {len(sessions)} sleep sessions."
                        if sessions
                        else "No detailed sleep session data could be extracted."
                    ),
                    recommendation="Sleep behavior appears normal.",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)

"""Battery report parser (``powercfg /batteryreport`` HTML)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import round_half_up, score_issues
from ._text import is_html_name, to_int

# Full charge at or below this share of design capacity is critical.
CRITICAL_HEALTH_PERCENT = 40


@dataclass(frozen=True, slots=True)
class BatteryReportParser:
    """Parse the Windows battery report: capacity, wear and drain rate."""

    name: ClassVar[str] = "Battery Report"
    category: ClassVar[Category] = Category.POWER

    _report_re = re.compile(r"battery\s*report", re.I)
    _marker_re = re.compile(r"BATTERY:BATTERY", re.I)
    _design_label_re = re.compile(r"Design\s*Capacity", re.I)
    _full_label_re = re.compile(r"Full\s*Charge\s*Capacity", re.I)

    _design_re = re.compile(r"Design\s*Capacity[^<\d]*?([\d,]+)\s*mWh", re.I)
    _full_re = re.compile(r"Full\s*Charge\s*Capacity[^<\d]*?([\d,]+)\s*mWh", re.I)
    _cycle_re = re.compile(r"Cycle\s*Count[^<\d]*?(\d+)", re.I)
    _usage_row_re = re.compile(r"<tr[^>]*>.*?Active.*?</tr>", re.I | re.S)
    _drain_re = re.compile(r"(\d+)\s*mW", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "battery" in fn and is_html_name(fn):
            return True
        return bool(
            self._report_re.search(content)
            or self._marker_re.search(content)
            or (self._design_label_re.search(content) and self._full_label_re.search(content))
        )

    @staticmethod
    def health_issue(health: int, design: int, full: int) -> Issue | None:
        """Classify battery wear from the health percentage."""
        raw = f"Design Capacity: {design} mWh | Full Charge Capacity: {full} mWh"
        if health <= CRITICAL_HEALTH_PERCENT:
            return Issue(
                severity=Severity.CRITICAL,
                title=f"Battery health critically low at {health}%",
                detail=(
                    f"The battery can only hold {health}% of its original design capacity. "
                    f"Design: {design} mWh, Current: {full} mWh."
                ),
                raw=raw,
                recommendation=(
                    "Battery replacement is strongly recommended. The battery has significantly "
                    "degraded and may cause unexpected shutdowns."
                ),
            )
        if health < 60:
            return Issue(
                severity=Severity.WARNING,
                title=f"Battery health degraded at {health}%",
                detail=(
                    f"The battery holds {health}% of its original capacity. "
                    f"Design: {design} mWh, Current: {full} mWh."
                ),
                raw=raw,
                recommendation=(
                    "Consider replacing the battery soon. Avoid leaving the laptop unplugged "
                    "for extended periods."
                ),
            )
        if health < 80:
            return Issue(
                severity=Severity.INFO,
                title=f"Battery health at {health}%",
                detail=(
                    f"The battery holds {health}% of its original capacity, which is normal "
                    "for a used battery."
                ),
                raw=raw,
                recommendation="Battery is aging normally. Monitor health periodically.",
            )
        return None

    @staticmethod
    def cycle_issue(cycles: int) -> Issue | None:
        if cycles > 1000:
            return Issue(
                severity=Severity.WARNING,
                title=f"High battery cycle count: {cycles}",
                detail=(
                    f"The battery has completed {cycles} charge cycles. "
                    "Most batteries are rated for 300-500 cycles."
                ),
                raw=f"Cycle Count: {cycles}",
                recommendation=(
                    "Battery has exceeded typical cycle life. Consider replacement if "
                    "experiencing short battery life."
                ),
            )
        if cycles > 500:
            return Issue(
                severity=Severity.INFO,
                title=f"Battery cycle count: {cycles}",
                detail=f"The battery has completed {cycles} charge cycles.",
                raw=f"Cycle Count: {cycles}",
                recommendation=(
                    "Battery is approaching end of rated cycle life. Monitor battery health closely."
                ),
            )
        return None

    def parse(self, content: str) -> ParseResult:
        issues: list[Issue] = []
        summary: dict[str, Any] = {}

        m = self._design_re.search(content)
        design = to_int(m.group(1)) if m else None
        summary["design_capacity"] = design

        m = self._full_re.search(content)
        full = to_int(m.group(1)) if m else None
        summary["full_charge_capacity"] = full

        m = self._cycle_re.search(content)
        cycles = int(m.group(1)) if m else None
        summary["cycle_count"] = cycles

        health: int | None = None
        if design and full:
            health = round_half_up(full / design * 100)
            summary["health_percent"] = health
            issue = self.health_issue(health, design, full)
            if issue is not None:
                issues.append(issue)

        if cycles is not None:
            issue = self.cycle_issue(cycles)
            if issue is not None:
                issues.append(issue)

        drain_rates: list[int] = []
        for row in [m.group(0) for m in self._usage_row_re.finditer(content)][:10]:
            dm = self._drain_re.search(row)
            if dm:
                drain_rates.append(int(dm.group(1)))
        if drain_rates:
            avg = round_half_up(sum(drain_rates) / len(drain_rates))
            summary["avg_drain_rate"] = avg
            if avg > 30000:
                watts = f"{avg / 1000:.1f}"
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"High average battery drain rate: {watts}W",
                        detail=f"Average power consumption is {watts}W during recent active use.",
                        raw=f"Average drain: {avg} mW across {len(drain_rates)} samples",
                        recommendation=(
                            "Check for power-hungry background applications. Consider adjusting "
                            'power plan to "Power Saver" when on battery.'
                        ),
                    )
                )

        if health is None:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="No battery data found",
                    detail="Could not read design and full charge capacity from the report.",
                    recommendation="Ensure the file was generated with: powercfg /batteryreport",
                )
            )

        # The "all good" note is added after scoring so a healthy battery keeps 100.
        score = score_issues(issues)
        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Battery health is good",
                    detail=f"Battery is at {health}% of design capacity.",
                    recommendation="No action needed. Continue normal usage.",
                )
            )

        return ParseResult(summary=summary, score=score, issues=issues)

"""``upower -i`` / ``upower -d`` battery parser."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import round_half_up, score_issues
from ._text import fmt_num
from .battery import CRITICAL_HEALTH_PERCENT


@dataclass(frozen=True, slots=True)
class UpowerParser:
    name: ClassVar[str] = "upower"
    category: ClassVar[Category] = Category.POWER

    _device_re = re.compile(r"Device:.*battery", re.I)
    _energy_full_label_re = re.compile(r"energy-full", re.I)

    _design_re = re.compile(r"energy-full-design:\s*([\d.]+)\s*Wh", re.I)
    _full_re = re.compile(r"energy-full:\s*([\d.]+)\s*Wh", re.I)
    _energy_re = re.compile(r"energy:\s*([\d.]+)\s*Wh", re.I)
    _percent_re = re.compile(r"percentage:\s*([\d.]+)%", re.I)
    _state_re = re.compile(r"state:\s*(\S+)", re.I)
    _cycles_re = re.compile(r"charge-cycles:\s*(\d+)", re.I)
    _tech_re = re.compile(r"technology:\s*(.+)", re.I)
    _vendor_re = re.compile(r"vendor:\s*(.+)", re.I)
    _model_re = re.compile(r"model:\s*(.+)", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        if "upower" in (filename or "").lower():
            return True
        return bool(self._device_re.search(content) and self._energy_full_label_re.search(content))

    @staticmethod
    def _float(pattern: re.Pattern[str], content: str) -> float | None:
        m = pattern.search(content)
        if not m:
            return None
        try:
            return float(m.group(1))
        except ValueError:
            return None

    @staticmethod
    def _health_issue(health: int, design: float, full: float) -> Issue | None:
        raw = f"energy-full-design: {fmt_num(design)} Wh | energy-full: {fmt_num(full)} Wh"
        if health <= CRITICAL_HEALTH_PERCENT:
            return Issue(
                severity=Severity.CRITICAL,
                title=f"Battery health critically low at {health}%",
                detail=(
                    f"The battery can only hold {health}% of its original design capacity. "
                    f"Design: {fmt_num(design)} Wh, Current: {fmt_num(full)} Wh."
                ),
                raw=raw,
                recommendation="Battery replacement is strongly recommended.",
            )
        if health < 60:
            return Issue(
                severity=Severity.WARNING,
                title=f"Battery health degraded at {health}%",
                detail=f"The battery holds {health}% of its original capacity.",
                raw=raw,
                recommendation="Consider replacing the battery soon.",
            )
        if health < 80:
            return Issue(
                severity=Severity.INFO,
                title=f"Battery health at {health}%",
                detail=(
                    f"The battery holds {health}% of its original capacity, normal for a used "
                    "battery."
                ),
                raw=raw,
                recommendation="Battery is aging normally. Monitor periodically.",
            )
        return None

    def parse(self, content: str) -> ParseResult:
        issues: list[Issue] = []
        design = self._float(self._design_re, content)
        full = self._float(self._full_re, content)
        summary: dict[str, Any] = {"design_capacity": design, "full_charge_capacity": full}

        current = self._float(self._energy_re, content)
        if current is not None:
            summary["current_energy"] = current
        charge = self._float(self._percent_re, content)
        if charge is not None:
            summary["charge_percent"] = charge
        m = self._state_re.search(content)
        if m:
            summary["state"] = m.group(1)
        m = self._cycles_re.search(content)
        if m:
            summary["cycle_count"] = int(m.group(1))
        for key, pattern in (
            ("technology", self._tech_re),
            ("vendor", self._vendor_re),
            ("model", self._model_re),
        ):
            m = pattern.search(content)
            if m:
                summary[key] = m.group(1).strip()

        health: int | None = None
        if design and full:
            health = round_half_up(full / design * 100)
            summary["health_percent"] = health
            issue = self._health_issue(health, design, full)
            if issue is not None:
                issues.append(issue)

        cycles = summary.get("cycle_count")
        if cycles is not None:
            if cycles > 1000:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"High battery cycle count: {cycles}",
                        detail=f"The battery has completed {cycles} charge cycles.",
                        raw=f"charge-cycles: {cycles}",
                        recommendation=(
                            "Battery has exceeded typical cycle life. Consider replacement."
                        ),
                    )
                )
            elif cycles > 500:
                issues.append(
                    Issue(
                        severity=Severity.INFO,
                        title=f"Battery cycle count: {cycles}",
                        detail=f"The battery has completed {cycles} charge cycles.",
                        raw=f"charge-cycles: {cycles}",
                        recommendation="Monitor battery health closely.",
                    )
                )

        if summary.get("state") == "discharging" and charge and charge < 20:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"Battery charge low: {fmt_num(charge)}%",
                    detail="System is running on battery with low charge.",
                    raw=f"State: discharging | Charge: {fmt_num(charge)}%",
                    recommendation="Connect to power soon to avoid unexpected shutdown.",
                )
            )

        score = score_issues(issues)
        if not issues and design:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Battery health is good",
                    detail=(
                        f"Battery is at {health}% of design capacity."
                        if health
                        else "No significant battery issues detected."
                    ),
                    recommendation="No action needed.",
                )
            )
        elif not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="No battery detected",
                    detail="No battery information found. This may be a desktop system.",
                    recommendation="No action needed for desktop systems.",
                )
            )

        return ParseResult(summary=summary, score=score, issues=issues)

"""SMART data parser (``smartctl -a``), ATA attribute tables and NVMe health logs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues
from ._text import parse_int_prefix

# ID# ATTRIBUTE_NAME FLAG VALUE WORST THRESH TYPE UPDATED WHEN_FAILED RAW_VALUE
_RAW_VALUE_COLUMN = 9


def smart_attribute(content: str, attribute: str) -> int | None:
    """RAW_VALUE of an ATA SMART attribute row, e.g. ``Reallocated_Sector_Ct``.

    Raw values such as ``36 (Min/Max 20/45)`` keep only the leading integer.
    """
    m = re.search(rf"^\s*\d+\s+{re.escape(attribute)}\b(.*)$", content, re.M)
    if not m:
        return None
    fields = m.group(0).split()
    if len(fields) > _RAW_VALUE_COLUMN:
        return parse_int_prefix(fields[_RAW_VALUE_COLUMN])
    # Short rows: fall back to the last bare number on the line.
    numbers = re.findall(r"(?<![\w.])(\d+)(?![\w.])", m.group(1))
    return int(numbers[-1]) if numbers else None


def _field(content: str, pattern: str) -> str | None:
    m = re.search(pattern, content, re.I)
    return m.group(1).strip() if m else None


@dataclass(frozen=True, slots=True)
class SmartctlParser:
    name: ClassVar[str] = "smartctl"
    category: ClassVar[Category] = Category.STORAGE

    _banner_re = re.compile(r"smartctl\s+[\d.]+", re.I)
    _overall_re = re.compile(r"SMART\s+overall-health", re.I)
    _nvme_log_re = re.compile(r"SMART/Health\s+Information", re.I)
    _health_re = re.compile(r"SMART\s+overall-health.*?:\s*(.+)", re.I)
    _passed_re = re.compile(r"passed|ok", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        if "smart" in (filename or "").lower():
            return True
        return bool(
            self._banner_re.search(content)
            or self._overall_re.search(content)
            or self._nvme_log_re.search(content)
        )

    def parse(self, content: str) -> ParseResult:
        summary: dict[str, Any] = {}
        issues: list[Issue] = []

        for key, pattern in (
            ("model", r"(?:Device Model|Product|Model Number):\s*(.+)"),
            ("serial", r"Serial\s*Number:\s*(.+)"),
            ("firmware", r"Firmware\s*Version:\s*(.+)"),
            ("capacity", r"User\s*Capacity:\s*([\d,.\s]+bytes)"),
        ):
            value = _field(content, pattern)
            if value:
                summary[key] = value

        m = self._health_re.search(content)
        if m:
            health = m.group(1).strip()
            summary["health"] = health
            if not self._passed_re.search(health):
                issues.append(
                    Issue(
                        severity=Severity.CRITICAL,
                        title=f"SMART health check FAILED: {health}",
                        detail=(
                            "The drive self-assessment test indicates the drive is failing or has "
                            "failed."
                        ),
                        raw=f"SMART overall-health: {health}",
                        recommendation=(
                            "Back up all data immediately and replace the drive as soon as possible."
                        ),
                    )
                )

        temp = smart_attribute(content, "Temperature_Celsius")
        if temp is None:
            nvme_temp = _field(content, r"Temperature:\s*(\d+)\s*Celsius")
            temp = int(nvme_temp) if nvme_temp else None
        if temp is not None:
            summary["temperature"] = f"{temp} C"
            if temp > 60:
                issues.append(
                    Issue(
                        severity=Severity.CRITICAL,
                        title=f"Disk temperature critically high: {temp} C",
                        detail="Drive temperature exceeds safe operating limits (typically 0-60 C).",
                        raw=f"Temperature: {temp} C",
                        recommendation=(
                            "Improve case airflow, add cooling fans, or move the drive to a cooler "
                            "location. Sustained high temperatures accelerate drive failure."
                        ),
                    )
                )
            elif temp > 50:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"Disk temperature elevated: {temp} C",
                        detail="Drive temperature is higher than ideal (recommended: below 45 C).",
                        raw=f"Temperature: {temp} C",
                        recommendation="Ensure adequate airflow. Clean dust from vents and fans.",
                    )
                )

        hours = smart_attribute(content, "Power_On_Hours")
        if hours is None:
            nvme_hours = _field(content, r"Power On Hours:\s*([\d,]+)")
            hours = int(nvme_hours.replace(",", "")) if nvme_hours else None
        if hours is not None:
            summary["power_on_hours"] = hours
            if hours > 50000:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"Drive has {hours:,} power-on hours",
                        detail="Extended use increases the likelihood of drive failure.",
                        raw=f"Power-On Hours: {hours}",
                        recommendation=(
                            "Ensure backups are current. Consider proactive drive replacement."
                        ),
                    )
                )

        realloc = smart_attribute(content, "Reallocated_Sector_Ct")
        if realloc is not None:
            summary["reallocated_sectors"] = realloc
            if realloc > 100:
                issues.append(
                    Issue(
                        severity=Severity.CRITICAL,
                        title=f"{realloc} reallocated sectors detected",
                        detail=(
                            "A high number of bad sectors have been remapped. The drive is likely "
                            "failing."
                        ),
                        raw=f"Reallocated_Sector_Ct: {realloc}",
                        recommendation="Back up data immediately. Replace the drive.",
                    )
                )
            elif realloc > 0:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"{realloc} reallocated sector(s) detected",
                        detail=(
                            "Some bad sectors have been remapped. This may indicate early drive "
                            "degradation."
                        ),
                        raw=f"Reallocated_Sector_Ct: {realloc}",
                        recommendation="Monitor SMART data regularly. Ensure backups are current.",
                    )
                )

        pending = smart_attribute(content, "Current_Pending_Sector")
        if pending is not None:
            summary["pending_sectors"] = pending
            if pending > 0:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"{pending} pending sector(s) awaiting reallocation",
                        detail=(
                            "Sectors that could not be read are waiting to be remapped on next "
                            "write."
                        ),
                        raw=f"Current_Pending_Sector: {pending}",
                        recommendation="Run a full disk surface scan. Back up data as a precaution.",
                    )
                )

        offline = smart_attribute(content, "Offline_Uncorrectable")
        if offline:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{offline} uncorrectable offline sector(s)",
                    detail="These sectors could not be read or corrected during offline testing.",
                    raw=f"Offline_Uncorrectable: {offline}",
                    recommendation="Run: smartctl -t long /dev/sdX to perform a full test.",
                )
            )

        score = score_issues(issues)
        if not issues:
            model = summary.get("model")
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Disk SMART health is good",
                    detail=(
                        f"Drive: {model} - all SMART attributes within normal ranges."
                        if model
                        else "All SMART attributes within normal ranges."
                    ),
                    recommendation="No action needed. Continue regular backups.",
                )
            )

        return ParseResult(summary=summary, score=score, issues=issues)

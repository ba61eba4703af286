"""``systeminfo`` text parser."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import round_half_up, score_issues
from ._text import parse_number

_BOOT_RE = re.compile(
    r"(\d{1,2})/(\d{1,2})/(\d{4}),?\s*(\d{1,2}):(\d{2}):(\d{2})\s*(AM|PM)?", re.I
)


def parse_windows_date(text: str) -> datetime | None:
    """Parse ``2/15/2026, 10:30:00 AM`` style timestamps (naive local time)."""
    m = _BOOT_RE.search(text)
    if m:
        hours = int(m.group(4))
        meridiem = (m.group(7) or "").upper()
        if meridiem == "PM" and hours < 12:
            hours += 12
        if meridiem == "AM" and hours == 12:
            hours = 0
        try:
            return datetime(
                int(m.group(3)),
                int(m.group(1)),
                int(m.group(2)),
                hours,
                int(m.group(5)),
                int(m.group(6)),
            )
        except ValueError:
            return None
    try:
        return datetime.fromisoformat(text.strip())
    except ValueError:
        return None


def parse_mb(text: str) -> float:
    """Megabytes from ``"16,384 MB"`` or ``"16 GB"``; 0 when unrecognized."""
    m = re.search(r"([\d,.]+)\s*MB", text, re.I)
    if m:
        return parse_number(m.group(1).replace(",", "")) or 0.0
    m = re.search(r"([\d,.]+)\s*GB", text, re.I)
    if m:
        return (parse_number(m.group(1).replace(",", "")) or 0.0) * 1024
    return 0.0


@dataclass(frozen=True, slots=True)
class SystemInfoParser:
    """Parse uptime, memory and hotfix data from ``systeminfo``."""

    name: ClassVar[str] = "System Info"
    category: ClassVar[Category] = Category.SYSTEM

    now: datetime | None = None

    _host_re = re.compile(r"Host Name:", re.I)
    _os_re = re.compile(r"OS Name:", re.I)
    _boot_label_re = re.compile(r"System Boot Time:", re.I)
    _hotfix_count_re = re.compile(r"Hotfix\(s\):\s*(\d+)\s*Hotfix", re.I)
    _kb_re = re.compile(r"KB\d+", re.I)
    _hyperv_re = re.compile(r"Hyper-V Requirements:\s*(.+)", re.I)
    _nic_re = re.compile(r"Network Card\(s\):\s*(\d+)", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if ("sysinfo" in fn or "systeminfo" in fn) and fn.endswith(".txt"):
            return True
        return bool(
            self._host_re.search(content)
            and self._os_re.search(content)
            and self._boot_label_re.search(content)
        )

    @staticmethod
    def _extract(content: str, label: str) -> str:
        m = re.search(rf"{re.escape(label)}:\s*(.+)", content, re.I)
        return m.group(1).strip() if m else ""

    def _uptime_issue(self, summary: dict[str, Any]) -> Issue | None:
        boot = parse_windows_date(summary["boot_time"])
        if boot is None:
            return None
        uptime = (self.now or datetime.now()) - boot
        seconds = uptime.total_seconds()
        days = int(seconds // 86400)
        hours = int((seconds % 86400) // 3600)
        summary["uptime_days"] = days
        summary["uptime_hours"] = hours
        raw = f"System Boot Time: {summary['boot_time']}"
        if days > 30:
            return Issue(
                severity=Severity.WARNING,
                title=f"System hasn't been rebooted in {days} days",
                detail=f"Last boot: {summary['boot_time']}. Uptime: {days} days, {hours} hours.",
                raw=raw,
                recommendation=(
                    "Restart your computer regularly (at least weekly) to apply updates and clear "
                    "memory leaks."
                ),
            )
        if days > 14:
            return Issue(
                severity=Severity.INFO,
                title=f"System uptime: {days} days",
                detail=f"Last boot: {summary['boot_time']}.",
                raw=raw,
                recommendation="Consider restarting soon to apply any pending updates.",
            )
        return None

    def _memory_issues(self, summary: dict[str, Any], total: str, avail: str) -> list[Issue]:
        issues: list[Issue] = []
        total_mb = parse_mb(total)
        avail_mb = parse_mb(avail)
        if not (total_mb > 0 and avail_mb >= 0):
            return issues
        used = round_half_up((total_mb - avail_mb) / total_mb * 100)
        summary["ram_used_percent"] = used
        if total_mb < 4096:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"Low total RAM: {total}",
                    detail=(
                        "Less than 4 GB of RAM may cause performance issues with modern "
                        "applications."
                    ),
                    raw=f"Total Physical Memory: {total}",
                    recommendation="Consider upgrading RAM to at least 8 GB for better performance.",
                )
            )
        raw = f"Total: {total}, Available: {avail}"
        if used > 90:
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title=f"RAM usage critically high: {used}%",
                    detail=f"Only {avail} free of {total} total.",
                    raw=raw,
                    recommendation=(
                        "Close unnecessary applications immediately. Consider upgrading RAM."
                    ),
                )
            )
        elif used > 80:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"RAM usage high: {used}%",
                    detail=f"{avail} free of {total} total.",
                    raw=raw,
                    recommendation=(
                        "Monitor memory usage. Close memory-heavy applications when not needed."
                    ),
                )
            )
        return issues

    def parse(self, content: str) -> ParseResult:
        issues: list[Issue] = []
        summary: dict[str, Any] = {
            "host_name": self._extract(content, "Host Name"),
            "os_name": self._extract(content, "OS Name"),
            "os_version": self._extract(content, "OS Version"),
            "manufacturer": self._extract(content, "System Manufacturer"),
            "model": self._extract(content, "System Model"),
            "system_type": self._extract(content, "System Type"),
            "boot_time": self._extract(content, "System Boot Time"),
            "original_install": self._extract(content, "Original Install Date"),
        }
        total = self._extract(content, "Total Physical Memory")
        avail = self._extract(content, "Available Physical Memory")
        summary["total_physical_memory"] = total
        summary["available_physical_memory"] = avail

        if summary["boot_time"]:
            issue = self._uptime_issue(summary)
            if issue is not None:
                issues.append(issue)

        if total and avail:
            issues.extend(self._memory_issues(summary, total, avail))

        m = self._hotfix_count_re.search(content)
        if m:
            summary["hotfix_count"] = int(m.group(1))

        kbs: list[str] = []
        for km in self._kb_re.finditer(content):
            kb = km.group(0).upper()
            if kb not in kbs:
                kbs.append(kb)
        summary["hotfixes"] = kbs

        m = self._hyperv_re.search(content)
        if m:
            summary["hyper_v"] = m.group(1).strip()

        m = self._nic_re.search(content)
        if m:
            summary["network_adapters"] = int(m.group(1))

        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="System info looks healthy",
                    detail=(
                        f"{summary['os_name']} {summary['os_version']} - "
                        f"{summary['manufacturer']} {summary['model']}"
                    ),
                    recommendation="No issues detected from system info.",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)

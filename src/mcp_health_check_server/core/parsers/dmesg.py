"""Kernel ring buffer (``dmesg``) parser."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues

_ERROR_RE = re.compile(r"\berror\b", re.I)
_CORRECTED_RE = re.compile(r"Corrected error", re.I)
_WARN_RE = re.compile(r"\bwarn(?:ing)?\b", re.I)
_HW_RE = re.compile(r"hardware\s*error|mce|machine\s*check|pcie.*error|AER|GHES", re.I)
_USB_RE = re.compile(r"usb.*(?:error|fail|disconnect|device\s*descriptor\s*read)", re.I)
_SEGFAULT_RE = re.compile(r"segfault|oops|panic|BUG:", re.I)
_OOM_RE = re.compile(r"Out of memory|oom-killer|invoked oom", re.I)


@dataclass(frozen=True, slots=True)
class DmesgParser:
    """Hardware faults, crashes, OOM kills and USB trouble in the kernel log."""

    name: ClassVar[str] = "dmesg"
    category: ClassVar[Category] = Category.SYSTEM

    _timestamp_re = re.compile(r"\[\s*\d+\.\d+\]\s")
    _banner_re = re.compile(r"Linux\s+version|kernel:|DMI:", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        if "dmesg" in (filename or "").lower():
            return True
        return bool(
            self._timestamp_re.search(content[:2000]) and self._banner_re.search(content[:5000])
        )

    def parse(self, content: str) -> ParseResult:
        lines = content.split("\n")
        summary: dict[str, Any] = {"errors": 0, "warnings": 0, "hardware_errors": 0, "usb_errors": 0}
        error_lines: list[str] = []
        hw_lines: list[str] = []
        usb_lines: list[str] = []

        for line in lines:
            if _ERROR_RE.search(line) and not _CORRECTED_RE.search(line):
                summary["errors"] += 1
                if len(error_lines) < 10:
                    error_lines.append(line.strip())
            if _WARN_RE.search(line):
                summary["warnings"] += 1
            if _HW_RE.search(line):
                summary["hardware_errors"] += 1
                if len(hw_lines) < 5:
                    hw_lines.append(line.strip())
            if _USB_RE.search(line):
                summary["usb_errors"] += 1
                if len(usb_lines) < 5:
                    usb_lines.append(line.strip())

        segfaults = [line for line in lines if _SEGFAULT_RE.search(line)]
        oom = [line for line in lines if _OOM_RE.search(line)]
        summary["segfaults"] = len(segfaults)
        summary["oom_events"] = len(oom)

        issues: list[Issue] = []
        if summary["hardware_errors"] > 0:
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title=f"{summary['hardware_errors']} hardware error(s) detected in kernel log",
                    detail=(
                        "Machine Check Exceptions, PCIe errors, or other hardware faults were "
                        "logged."
                    ),
                    raw="\n".join(hw_lines),
                    recommendation=(
                        "Run hardware diagnostics. Check for overheating, loose components, or "
                        'failing hardware. Review: dmesg | grep -i "error\\|mce\\|hardware"'
                    ),
                )
            )
        if segfaults:
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title=f"{len(segfaults)} segfault(s) or kernel oops detected",
                    detail=(
                        "Segmentation faults or kernel oops indicate software bugs or memory "
                        "issues."
                    ),
                    raw="\n".join(segfaults[:5]),
                    recommendation=(
                        "Test RAM with memtest86+. Update the kernel and affected software. Check "
                        "for corrupted files."
                    ),
                )
            )
        if oom:
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title=f"OOM killer invoked {len(oom)} time(s)",
                    detail="The system ran out of memory and had to kill processes.",
                    raw="\n".join(oom[:3]),
                    recommendation=(
                        "Add more RAM or increase swap. Identify memory-hungry processes with: "
                        "top or htop."
                    ),
                )
            )

        usb = summary["usb_errors"]
        if usb > 5:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{usb} USB error(s) detected",
                    detail=(
                        "Multiple USB device errors may indicate faulty cables, ports, or devices."
                    ),
                    raw="\n".join(usb_lines),
                    recommendation=(
                        "Try different USB ports or cables. Update USB drivers. Check for loose "
                        "connections."
                    ),
                )
            )
        elif usb > 0:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{usb} USB error(s) in kernel log",
                    detail="Minor USB errors were detected.",
                    raw="\n".join(usb_lines),
                    recommendation="Usually harmless if not recurring. Monitor for patterns.",
                )
            )

        if summary["errors"] > 20:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{summary['errors']} kernel error messages found",
                    detail="A high number of error messages in the kernel log.",
                    raw="\n".join(error_lines),
                    recommendation="Review errors for patterns: dmesg | grep -i error",
                )
            )

        score = score_issues(issues)
        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Kernel log looks clean",
                    detail="No significant errors detected in dmesg output.",
                    recommendation="No action needed.",
                )
            )

        return ParseResult(summary=summary, score=score, issues=issues)

"""Energy efficiency report parser (``powercfg /energy`` HTML)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues
from ._text import extract_section, is_html_name, plural


@dataclass(frozen=True, slots=True)
class EnergyReportParser:
    name: ClassVar[str] = "Energy Report"
    category: ClassVar[Category] = Category.POWER

    _title_re = re.compile(r"Energy Efficiency Diagnostics Report", re.I)
    _slug_re = re.compile(r"energy-report", re.I)
    _errors_label_re = re.compile(r"Errors?\s*:", re.I)
    _warnings_label_re = re.compile(r"Warnings?\s*:", re.I)
    _informational_re = re.compile(r"Informational", re.I)
    _policy_re = re.compile(r"Power Policy", re.I)

    _error_count_re = re.compile(r"(\d+)\s*Error", re.I)
    _warning_count_re = re.compile(r"(\d+)\s*Warning", re.I)
    _info_count_re = re.compile(r"(\d+)\s*Informational", re.I)
    _usb_re = re.compile(r"USB\s*Suspend|not\s*entering\s*(?:the\s*)?suspend", re.I)
    _timer_label_re = re.compile(r"Timer\s*Resolution|platform\s*timer", re.I)
    _timer_re = re.compile(r"Timer\s*Resolution[^<\d]*?(\d+)", re.I)
    _ppm_re = re.compile(r"Processor\s*power\s*management", re.I)
    _ppm_off_re = re.compile(r"not\s*configured|disabled", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "energy" in fn and is_html_name(fn):
            return True
        return bool(
            self._title_re.search(content)
            or self._slug_re.search(content)
            or (
                self._errors_label_re.search(content)
                and self._warnings_label_re.search(content)
                and self._informational_re.search(content)
                and self._policy_re.search(content)
            )
        )

    @staticmethod
    def _count(pattern: re.Pattern[str], content: str) -> int:
        m = pattern.search(content)
        return int(m.group(1)) if m else 0

    def parse(self, content: str) -> ParseResult:
        issues: list[Issue] = []
        errors = self._count(self._error_count_re, content)
        warnings = self._count(self._warning_count_re, content)
        informational = self._count(self._info_count_re, content)
        summary: dict[str, Any] = {
            "errors": errors,
            "warnings": warnings,
            "informational": informational,
        }

        if self._usb_re.search(content):
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title="USB devices not entering suspend state",
                    detail=(
                        "One or more USB devices are preventing power saving by not entering "
                        "suspend mode."
                    ),
                    raw=extract_section(content, "USB Suspend"),
                    recommendation=(
                        "Check USB device drivers. Update or uninstall unused USB devices to "
                        "improve power efficiency."
                    ),
                )
            )

        if self._timer_label_re.search(content):
            m = self._timer_re.search(content)
            if m:
                resolution = int(m.group(1))
                if resolution < 5:
                    issues.append(
                        Issue(
                            severity=Severity.WARNING,
                            title=f"Platform timer resolution is high ({resolution}ms)",
                            detail=(
                                "A low timer resolution forces the CPU to wake more frequently, "
                                "increasing power usage."
                            ),
                            raw=f"Timer Resolution: {resolution}ms",
                            recommendation=(
                                "Identify the application requesting high timer resolution and "
                                "close it when on battery power."
                            ),
                        )
                    )

        if self._ppm_re.search(content) and self._ppm_off_re.search(content):
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title="Processor power management not optimally configured",
                    detail=(
                        "Processor power management settings may not be configured for best "
                        "efficiency."
                    ),
                    raw=extract_section(content, "Processor power management"),
                    recommendation=(
                        "Review power plan settings. Set minimum processor state to a lower value "
                        "when on battery."
                    ),
                )
            )

        counts_raw = f"Errors: {errors}, Warnings: {warnings}, Informational: {informational}"
        if errors > 0:
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title=f"Energy report found {errors} error{plural(errors)}",
                    detail=(
                        f"The energy efficiency diagnostics identified {errors} error-level issues "
                        "that significantly impact power efficiency."
                    ),
                    raw=counts_raw,
                    recommendation=(
                        "Review and address each error in the energy report. These typically "
                        "indicate drivers or settings that waste significant power."
                    ),
                )
            )

        if warnings > 5:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"Energy report has {warnings} warnings",
                    detail=f"The energy report identified {warnings} warning-level issues.",
                    raw=f"Warnings: {warnings}",
                    recommendation=(
                        "Review warnings for quick power efficiency wins like adjusting display "
                        "timeout or sleep settings."
                    ),
                )
            )
        elif warnings > 0:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"Energy report has {warnings} warning{plural(warnings)}",
                    detail=f"The energy report identified {warnings} minor warning-level issues.",
                    raw=f"Warnings: {warnings}",
                    recommendation="Review warnings to see if any quick power savings can be achieved.",
                )
            )

        if informational > 0 and errors == 0 and warnings == 0:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=(
                        f"Energy report: {informational} informational item{plural(informational)}"
                    ),
                    detail=(
                        "Only informational items were found. No significant power efficiency "
                        "problems detected."
                    ),
                    raw=f"Informational: {informational}",
                    recommendation=(
                        "No major action needed. Review informational items for optional tweaks."
                    ),
                )
            )

        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="No energy report data found",
                    detail="Could not read error, warning or informational counts from the report.",
                    recommendation=(
                        "Ensure the file was generated with: powercfg /energy /output energy-report.html"
                    ),
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)

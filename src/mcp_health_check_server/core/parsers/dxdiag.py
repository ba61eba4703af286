"""DxDiag parser (``dxdiag /t`` text output)."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues
from ._text import parse_number, search_group

_DAY_SECONDS = 60 * 60 * 24


@dataclass(frozen=True, slots=True)
class DxDiagParser:
    """Parse display adapter, driver age and DirectX details.

    ``now`` pins the reference time used for driver age; defaults to the
    local clock.
    """

    name: ClassVar[str] = "DxDiag Report"
    category: ClassVar[Category] = Category.SYSTEM

    now: datetime | None = None

    _dxdiag_re = re.compile(r"DxDiag", re.I)
    _directx_re = re.compile(r"DirectX", re.I)
    _sysinfo_re = re.compile(r"System Information", re.I)
    _display_label_re = re.compile(r"Display Devices", re.I)
    _dx_label_re = re.compile(r"DirectX Version", re.I)

    _dx_version_re = re.compile(r"DirectX Version:\s*(.+)", re.I)
    _os_re = re.compile(r"Operating System:\s*(.+)", re.I)
    _cpu_re = re.compile(r"Processor:\s*(.+)", re.I)
    _memory_re = re.compile(r"Memory:\s*(.+)", re.I)
    _display_section_re = re.compile(
        r"-+\s*Display Devices\s*-+\s*([\s\S]*?)(?:-{5,}|\Z)", re.I
    )
    _card_re = re.compile(r"Card name:\s*(.+)", re.I)
    _card_mfg_re = re.compile(r"Manufacturer:\s*(.+)", re.I)
    _vram_re = re.compile(
        r"(?:Dedicated Memory|Display Memory|Approx\.\s*Total Memory):\s*(.+)", re.I
    )
    _driver_version_re = re.compile(r"Driver Version:\s*(.+)", re.I)
    _driver_date_size_re = re.compile(r"Driver Date/Size:\s*(.+)", re.I)
    _driver_date_re = re.compile(r"Driver Date:\s*(.+)", re.I)
    _mdy_re = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
    _notes_re = re.compile(r"(?:Notes|Problems Found):\s*(.+)", re.I)
    _notes_prefix_re = re.compile(r"(?:Notes|Problems Found):\s*", re.I)
    _whql_re = re.compile(r"WHQL.*?:\s*(.+)", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "dxdiag" in fn and fn.endswith(".txt"):
            return True
        return bool(
            (self._dxdiag_re.search(content) and self._directx_re.search(content))
            or (
                self._sysinfo_re.search(content)
                and self._display_label_re.search(content)
                and self._dx_label_re.search(content)
            )
        )

    @staticmethod
    def _field(pattern: re.Pattern[str], text: str, default: str = "") -> str:
        value = search_group(pattern, text)
        return value.strip() if value is not None else default

    def _driver_age_months(self, driver_date: str) -> int | None:
        m = self._mdy_re.search(driver_date)
        if not m:
            return None
        try:
            released = datetime(int(m.group(3)), int(m.group(1)), int(m.group(2)))
        except ValueError:
            return None
        now = self.now or datetime.now()
        return math.floor((now - released).total_seconds() / (_DAY_SECONDS * 30))

    def parse(self, content: str) -> ParseResult:
        issues: list[Issue] = []
        summary: dict[str, Any] = {
            "directx_version": self._field(self._dx_version_re, content, "Unknown"),
            "os": self._field(self._os_re, content),
            "cpu": self._field(self._cpu_re, content),
            "ram": self._field(self._memory_re, content),
        }

        section = self._display_section_re.search(content)
        display = section.group(1) if section else content
        summary["gpu_name"] = self._field(self._card_re, display, "Unknown")
        summary["gpu_manufacturer"] = self._field(self._card_mfg_re, display)
        summary["vram"] = self._field(self._vram_re, display)
        summary["driver_version"] = self._field(self._driver_version_re, display)
        summary["driver_date"] = self._field(self._driver_date_size_re, display) or self._field(
            self._driver_date_re, display
        )

        gpu = summary["gpu_name"]
        driver_raw = f"Driver: {summary['driver_version']}, Date: {summary['driver_date']}"
        if summary["driver_date"]:
            age = self._driver_age_months(summary["driver_date"])
            if age is not None and age > 24:
                years = age // 12
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"Display driver is {age} months old",
                        detail=(
                            f"GPU driver for {gpu} was last updated {summary['driver_date']}. "
                            f"That's over {years} years ago."
                        ),
                        raw=driver_raw,
                        recommendation=(
                            "Update your GPU driver from the manufacturer website "
                            "(NVIDIA, AMD, or Intel)."
                        ),
                    )
                )
            elif age is not None and age > 12:
                issues.append(
                    Issue(
                        severity=Severity.INFO,
                        title=f"Display driver is {age} months old",
                        detail=f"GPU driver for {gpu} was last updated {summary['driver_date']}.",
                        raw=driver_raw,
                        recommendation=(
                            "Consider updating your GPU driver for best performance and "
                            "compatibility."
                        ),
                    )
                )

        for m in self._notes_re.finditer(content):
            section_text = m.group(0)
            note = self._notes_prefix_re.sub("", section_text, count=1).strip()
            if (
                len(note) > 3
                and not re.search(r"No problems found", note, re.I)
                and not re.search(r"N/A", note, re.I)
            ):
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title="DxDiag reported a problem",
                        detail=note,
                        raw=section_text,
                        recommendation=(
                            "Investigate the reported issue. May require driver update or "
                            "DirectX repair."
                        ),
                    )
                )

        whql = self._whql_re.search(display)
        if whql and re.search(r"no", whql.group(1), re.I):
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Display driver is not WHQL certified",
                    detail="The GPU driver has not been certified by Windows Hardware Quality Labs.",
                    raw=f"WHQL: {whql.group(1).strip()}",
                    recommendation=(
                        "Consider using a WHQL-certified driver version for maximum stability."
                    ),
                )
            )

        dx = summary["directx_version"]
        dx_number = parse_number(re.sub(r"[^\d.]", "", dx))
        if dx_number is not None and 0 < dx_number < 12:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"DirectX {dx} (not the latest)",
                    detail=(
                        f"System is running DirectX {dx}. DirectX 12 is recommended for modern "
                        "games and applications."
                    ),
                    raw=f"DirectX Version: {dx}",
                    recommendation=(
                        "Update Windows to get the latest DirectX version. DirectX 12 comes with "
                        "Windows 10/11."
                    ),
                )
            )

        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Display and DirectX configuration looks good",
                    detail=f"GPU: {gpu}, Driver: {summary['driver_version']}, DirectX: {dx}",
                    recommendation="No issues detected.",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)

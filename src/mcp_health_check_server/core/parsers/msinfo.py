"""MSInfo32 report parser (``msinfo32 /report`` text export)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import round_half_up, score_issues
from ._text import parse_number, plural, search_group

_RAM_UNITS = {"TB": 1024.0, "GB": 1.0, "MB": 1 / 1024, "KB": 1 / (1024 * 1024)}


def ram_to_gb(text: str) -> float:
    """Convert ``"15.8 GB"``/``"16,384 MB"`` style values to gigabytes."""
    m = re.search(r"([\d,.]+)\s*(GB|MB|TB|KB)", text, re.I)
    if not m:
        return 0.0
    value = parse_number(m.group(1).replace(",", "")) or 0.0
    return value * _RAM_UNITS[m.group(2).upper()]


@dataclass(frozen=True, slots=True)
class MsInfoParser:
    name: ClassVar[str] = "MSInfo32 Report"
    category: ClassVar[Category] = Category.SYSTEM

    _section_re = re.compile(r"^\[System Summary\]", re.I | re.M)
    _os_label_re = re.compile(r"OS Name\s", re.I)
    _mfg_label_re = re.compile(r"System Manufacturer", re.I)
    _model_label_re = re.compile(r"System Model", re.I)

    _os_re = re.compile(r"OS Name\s+(.+)", re.I)
    _version_re = re.compile(r"Version\s+([\d.]+)", re.I)
    _cpu_re = re.compile(r"Processor\s+(.+)", re.I)
    _ram_re = re.compile(
        r"(?:Total Physical Memory|Installed Physical Memory)\s+([\d,.]+ [GMTK]B)", re.I
    )
    _avail_re = re.compile(r"Available Physical Memory\s+([\d,.]+ [GMTK]B)", re.I)
    _mfg_re = re.compile(r"System Manufacturer\s+(.+)", re.I)
    _model_re = re.compile(r"System Model\s+(.+)", re.I)
    _bios_re = re.compile(r"BIOS Version/Date\s+(.+)", re.I)
    _gpu_re = re.compile(
        r"(?:Name|Adapter Description)\s+(.*?(?:NVIDIA|AMD|Radeon|GeForce|Intel|Graphics|GPU)[^\r\n]*)",
        re.I,
    )
    _problems_re = re.compile(r"\[Problem Devices\]([\s\S]*?)(?:\[|\Z)", re.I)
    _conflicts_re = re.compile(
        r"\[(?:IRQ |I/O |Memory |DMA )?Conflicts[^\[\]]*\]([\s\S]*?)(?:\[|\Z)", re.I
    )
    _drivers_re = re.compile(r"\[(?:Loaded |Signed )?Drivers?\]([\s\S]*?)(?:\[|\Z)", re.I)
    _unsigned_re = re.compile(r"not signed|no\s*$", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "msinfo" in fn and fn.endswith(".txt"):
            return True
        return bool(
            self._section_re.search(content)
            or (
                self._os_label_re.search(content)
                and self._mfg_label_re.search(content)
                and self._model_label_re.search(content)
            )
        )

    @staticmethod
    def _field(pattern: re.Pattern[str], content: str, default: str = "") -> str:
        value = search_group(pattern, content)
        return value.strip() if value is not None else default

    def _extract_summary(self, content: str) -> dict[str, Any]:
        return {
            "os_name": self._field(self._os_re, content, "Unknown"),
            "os_version": self._field(self._version_re, content),
            "cpu": self._field(self._cpu_re, content, "Unknown"),
            "total_ram": self._field(self._ram_re, content, "Unknown"),
            "available_ram": self._field(self._avail_re, content),
            "manufacturer": self._field(self._mfg_re, content),
            "model": self._field(self._model_re, content),
            "bios": self._field(self._bios_re, content),
            "gpu": self._field(self._gpu_re, content),
        }

    def _section_issues(self, content: str) -> list[Issue]:
        issues: list[Issue] = []

        m = self._problems_re.search(content)
        if m:
            devices = [
                line
                for line in m.group(1).strip().split("\n")
                if line.strip() and not line.strip().startswith("Item")
            ]
            if devices:
                n = len(devices)
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"{n} problem device{plural(n)} detected",
                        detail="Devices with issues: " + "; ".join(d.strip() for d in devices[:5]),
                        raw="\n".join(devices[:10]),
                        recommendation=(
                            "Update or reinstall drivers for problem devices. Check Device Manager "
                            "for yellow exclamation marks."
                        ),
                    )
                )

        m = self._conflicts_re.search(content)
        if m:
            text = m.group(1).strip()
            if len(text) > 10 and not re.search(r"no conflicts", text, re.I):
                lines = [line for line in text.split("\n") if line.strip()]
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title="Device conflicts detected",
                        detail="Hardware resource conflicts found that may cause instability.",
                        raw="\n".join(lines[:5]),
                        recommendation=(
                            "Check Device Manager for conflicting devices. May need to update BIOS "
                            "or drivers."
                        ),
                    )
                )

        m = self._drivers_re.search(content)
        if m:
            unsigned = [
                line.strip()
                for line in m.group(1).split("\n")
                if self._unsigned_re.search(line) and len(line.strip()) > 5
            ]
            if unsigned:
                n = len(unsigned)
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"{n} unsigned driver{plural(n)} found",
                        detail="Unsigned drivers may pose security risks or cause stability issues.",
                        raw="\n".join(unsigned[:5]),
                        recommendation=(
                            "Update unsigned drivers to signed versions from the manufacturer."
                        ),
                    )
                )
        return issues

    def parse(self, content: str) -> ParseResult:
        summary = self._extract_summary(content)
        issues = self._section_issues(content)

        if summary["total_ram"] and summary["available_ram"]:
            total_gb = ram_to_gb(summary["total_ram"])
            avail_gb = ram_to_gb(summary["available_ram"])
            if total_gb > 0 and avail_gb >= 0:
                used = round_half_up((total_gb - avail_gb) / total_gb * 100)
                summary["ram_used_percent"] = used
                detail = f"{avail_gb:.1f} GB free of {total_gb:.1f} GB total."
                raw = f"Total: {summary['total_ram']}, Available: {summary['available_ram']}"
                if used > 90:
                    issues.append(
                        Issue(
                            severity=Severity.CRITICAL,
                            title=f"RAM usage critically high: {used}%",
                            detail=detail,
                            raw=raw,
                            recommendation=(
                                "Close unnecessary applications. Consider upgrading RAM if this "
                                "is a persistent issue."
                            ),
                        )
                    )
                elif used > 80:
                    issues.append(
                        Issue(
                            severity=Severity.WARNING,
                            title=f"RAM usage high: {used}%",
                            detail=detail,
                            raw=raw,
                            recommendation=(
                                "Monitor memory usage. Close memory-heavy applications when not "
                                "needed."
                            ),
                        )
                    )

        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="System hardware appears healthy",
                    detail=f"{summary['manufacturer']} {summary['model']} - {summary['cpu']}",
                    recommendation="No hardware issues detected.",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)

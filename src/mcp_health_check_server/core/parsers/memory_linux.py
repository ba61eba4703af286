"""Linux memory parser (``free -h`` and/or ``/proc/meminfo``)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import round_half_up, score_issues

_KB_PER_GB = 1024 * 1024


def meminfo_kb(content: str, field: str) -> int | None:
    """Value of a ``/proc/meminfo`` field in kB."""
    m = re.search(rf"{field}:\s+(\d+)\s*kB", content, re.I)
    return int(m.group(1)) if m else None


@dataclass(frozen=True, slots=True)
class MemoryLinuxParser:
    name: ClassVar[str] = "Memory (Linux)"
    category: ClassVar[Category] = Category.PERFORMANCE

    _mem_line_re = re.compile(r"Mem:\s", re.M)
    _swap_line_re = re.compile(r"Swap:\s", re.M)
    _memtotal_re = re.compile(r"MemTotal:", re.I)
    _memfree_re = re.compile(r"MemFree:", re.I)

    _free_mem_re = re.compile(r"Mem:\s+([\d.]+\S+)\s+([\d.]+\S+)\s+([\d.]+\S+)", re.I)
    _free_swap_re = re.compile(r"Swap:\s+([\d.]+\S+)\s+([\d.]+\S+)\s+([\d.]+\S+)", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "memory-linux" in fn or "meminfo" in fn or fn == "free.txt":
            return True
        return bool(
            (self._mem_line_re.search(content) and self._swap_line_re.search(content))
            or (self._memtotal_re.search(content) and self._memfree_re.search(content))
        )

    def parse(self, content: str) -> ParseResult:
        summary: dict[str, Any] = {}

        m = self._free_mem_re.search(content)
        if m:
            summary["total_ram"], summary["used_ram"], summary["free_ram"] = m.groups()
        m = self._free_swap_re.search(content)
        if m:
            summary["total_swap"], summary["used_swap"], summary["free_swap"] = m.groups()

        mem_total = meminfo_kb(content, "MemTotal")
        mem_avail = meminfo_kb(content, "MemAvailable")
        swap_total = meminfo_kb(content, "SwapTotal")
        swap_free = meminfo_kb(content, "SwapFree")

        if mem_total:
            summary["total_ram_mb"] = round_half_up(mem_total / 1024)
            summary["total_ram_gb"] = f"{mem_total / _KB_PER_GB:.1f} GB"
        if mem_avail:
            summary["available_ram_mb"] = round_half_up(mem_avail / 1024)

        issues: list[Issue] = []
        if mem_total and mem_avail:
            used = round_half_up((mem_total - mem_avail) / mem_total * 100)
            summary["ram_used_percent"] = used
            avail_mb = round_half_up(mem_avail / 1024)
            total_mb = round_half_up(mem_total / 1024)
            raw = f"MemTotal: {mem_total} kB | MemAvailable: {mem_avail} kB"
            if used > 95:
                issues.append(
                    Issue(
                        severity=Severity.CRITICAL,
                        title=f"RAM usage critically high at {used}%",
                        detail=f"Only {avail_mb} MB available out of {total_mb} MB total.",
                        raw=raw,
                        recommendation=(
                            "Close unused applications. Consider adding more RAM if this is a "
                            "recurring issue."
                        ),
                    )
                )
            elif used > 85:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"High memory usage: {used}%",
                        detail=f"{avail_mb} MB available out of {total_mb} MB total.",
                        raw=raw,
                        recommendation=(
                            "Monitor memory usage. Close memory-intensive applications if not "
                            "needed."
                        ),
                    )
                )

        if swap_total and swap_free is not None:
            swap_pct = round_half_up((swap_total - swap_free) / swap_total * 100)
            summary["swap_used_percent"] = swap_pct
            raw = f"SwapTotal: {swap_total} kB | SwapFree: {swap_free} kB"
            if swap_pct > 80:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"High swap usage: {swap_pct}%",
                        detail="System is heavily using swap space, which degrades performance.",
                        raw=raw,
                        recommendation=(
                            "Add more RAM or increase swap size. Check for memory leaks with: "
                            "top or htop."
                        ),
                    )
                )
            elif swap_pct > 50:
                issues.append(
                    Issue(
                        severity=Severity.INFO,
                        title=f"Moderate swap usage: {swap_pct}%",
                        detail="Some swap is being used, which is normal under heavy load.",
                        raw=raw,
                        recommendation=(
                            "Normal if the system is under load. Monitor for increasing usage."
                        ),
                    )
                )
        elif swap_total == 0:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="No swap space configured",
                    detail="The system has no swap partition or file.",
                    raw="SwapTotal: 0 kB",
                    recommendation=(
                        "Consider adding a swap file for systems with limited RAM: "
                        "sudo fallocate -l 4G /swapfile"
                    ),
                )
            )

        if mem_total and mem_total < 2 * _KB_PER_GB:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"Low total RAM: {mem_total / _KB_PER_GB:.1f} GB",
                    detail="System has less than 2 GB of RAM.",
                    raw=f"MemTotal: {mem_total} kB",
                    recommendation="Consider upgrading RAM for better performance.",
                )
            )

        score = score_issues(issues)
        if not issues:
            total_gb = summary.get("total_ram_gb")
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Memory usage is healthy",
                    detail=(
                        f"Total RAM: {total_gb}, usage is normal."
                        if total_gb
                        else "Memory usage is within normal ranges."
                    ),
                    recommendation="No action needed.",
                )
            )

        return ParseResult(summary=summary, score=score, issues=issues)

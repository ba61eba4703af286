"""PCI device parser (``lspci -v``)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues

_BLOCK_SPLIT_RE = re.compile(r"(?=^\d{2}:\d{2}\.\d\s)", re.M)
_HEADER_RE = re.compile(r"^(\d{2}:\d{2}\.\d)\s+(.+?):\s*(.+)")
_DRIVER_RE = re.compile(r"Kernel\s+driver\s+in\s+use:\s*(.+)", re.I)
_MODULES_RE = re.compile(r"Kernel\s+modules:\s*(.+)", re.I)

_GPU_TYPE_RE = re.compile(r"VGA|3D|Display", re.I)
_NET_TYPE_RE = re.compile(r"Network|Ethernet|WiFi|Wireless", re.I)
_STORAGE_TYPE_RE = re.compile(r"SATA|NVMe|RAID|SCSI|IDE|Storage", re.I)
_NEEDS_DRIVER_RE = re.compile(r"VGA|3D|Display|Network|Ethernet", re.I)


@dataclass(frozen=True, slots=True)
class LspciParser:
    name: ClassVar[str] = "lspci"
    category: ClassVar[Category] = Category.SYSTEM

    _slot_re = re.compile(r"^\d{2}:\d{2}\.\d\s", re.M)
    _class_re = re.compile(
        r"(?:Host bridge|VGA compatible|Network controller|Ethernet controller)", re.I
    )

    def detect(self, content: str, filename: str = "") -> bool:
        if "lspci" in (filename or "").lower():
            return True
        return bool(self._slot_re.search(content[:2000]) and self._class_re.search(content))

    def parse(self, content: str) -> ParseResult:
        summary: dict[str, Any] = {
            "devices": 0,
            "gpus": [],
            "network_controllers": [],
            "storage_controllers": [],
        }
        issues: list[Issue] = []

        for block in _BLOCK_SPLIT_RE.split(content):
            block = block.strip()
            if not block:
                continue
            m = _HEADER_RE.match(block)
            if not m:
                continue

            summary["devices"] += 1
            kind, device = m.group(2), m.group(3).strip()
            if _GPU_TYPE_RE.search(kind):
                summary["gpus"].append(device)
            elif _NET_TYPE_RE.search(kind):
                summary["network_controllers"].append(device)
            elif _STORAGE_TYPE_RE.search(kind):
                summary["storage_controllers"].append(device)

            driver = _DRIVER_RE.search(block)
            modules = _MODULES_RE.search(block)
            if not driver and modules and _NEEDS_DRIVER_RE.search(kind):
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        title=f"No kernel driver loaded for: {device}",
                        detail=f"Device type: {kind}. Available modules: {modules.group(1)}",
                        raw=block[:300],
                        recommendation=(
                            f"Install the appropriate driver. Available modules: {modules.group(1)}"
                        ),
                    )
                )

        if summary["gpus"]:
            summary["gpu"] = ", ".join(summary["gpus"])
        else:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="No discrete GPU detected",
                    detail="No VGA or 3D controller found in PCI device list.",
                    recommendation="System may be using integrated graphics or a non-PCI GPU.",
                )
            )

        score = score_issues(issues)
        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{summary['devices']} PCI devices detected",
                    detail="All PCI devices have drivers loaded.",
                    raw=(
                        f"GPUs: {', '.join(summary['gpus']) or 'none'}\n"
                        f"Network: {', '.join(summary['network_controllers']) or 'none'}"
                    ),
                    recommendation="No action needed.",
                )
            )

        return ParseResult(summary=summary, score=score, issues=issues)

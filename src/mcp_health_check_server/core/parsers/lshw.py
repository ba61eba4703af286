"""Hardware inventory parser (``sudo lshw -json``)."""

from __future__ import annotations

import json
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues

_GIB = 1024 * 1024 * 1024


def walk_nodes(node: Any) -> Iterator[dict[str, Any]]:
    """Depth-first walk of the lshw tree, parents before children.

    Newer lshw releases wrap the tree in a one-element list.
    """
    if isinstance(node, list):
        for item in node:
            yield from walk_nodes(item)
        return
    if not isinstance(node, dict):
        return
    yield node
    for child in node.get("children") or []:
        yield from walk_nodes(child)


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass(frozen=True, slots=True)
class LshwParser:
    name: ClassVar[str] = "lshw"
    category: ClassVar[Category] = Category.SYSTEM

    _system_re = re.compile(r'"class"\s*:\s*"system"', re.I)
    _children_re = re.compile(r'"children"', re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        if "lshw" in (filename or "").lower():
            return True
        return bool(
            self._system_re.search(content[:3000]) and self._children_re.search(content[:5000])
        )

    def parse(self, content: str) -> ParseResult:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            return ParseResult(
                summary={},
                score=50,
                issues=[
                    Issue(
                        severity=Severity.WARNING,
                        title="Could not parse lshw JSON",
                        detail="The file does not appear to be valid JSON.",
                        raw=str(exc),
                        recommendation="Re-run: sudo lshw -json > lshw.json",
                    )
                ],
            )

        components = list(walk_nodes(data))
        summary: dict[str, Any] = {}

        cpu = next((c for c in components if c.get("class") == "processor"), None)
        if cpu is not None:
            summary["cpu"] = cpu.get("product") or cpu.get("description") or "Unknown CPU"
            summary["cpu_vendor"] = cpu.get("vendor") or ""
            capacity = _number(cpu.get("capacity"))
            if capacity:
                summary["cpu_max_speed"] = f"{capacity / 1_000_000_000:.2f} GHz"

        memory = next(
            (c for c in components if c.get("class") == "memory" and c.get("id") == "memory"),
            None,
        )
        memory_size = _number(memory.get("size")) if memory is not None else None
        if memory_size:
            summary["total_ram"] = f"{memory_size / _GIB:.1f} GB"

        gpus = [c for c in components if c.get("class") == "display"]
        if gpus:
            summary["gpu"] = ", ".join(
                g.get("product") or g.get("description") or "Unknown GPU" for g in gpus
            )

        disks = [c for c in components if c.get("class") == "disk"]
        if disks:
            labels = []
            for d in disks:
                size = _number(d.get("size"))
                size_label = f"{size / _GIB:.0f} GB" if size else "Unknown"
                labels.append(f"{d.get('product') or 'Disk'} ({size_label})")
            summary["disks"] = labels

        nics = [c for c in components if c.get("class") == "network"]
        if nics:
            summary["network_adapters"] = [
                n.get("product") or n.get("description") or "Network Adapter" for n in nics
            ]

        root = components[0] if components else None
        if root is not None:
            if root.get("product"):
                summary["model"] = root["product"]
            if root.get("vendor"):
                summary["manufacturer"] = root["vendor"]

        issues: list[Issue] = []
        if cpu is None:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title="CPU information not found in lshw output",
                    detail="The lshw report did not contain processor information.",
                    recommendation="Ensure lshw was run with sudo: sudo lshw -json",
                )
            )
        if not memory_size:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Memory size not detected",
                    detail="Could not determine total system RAM from the lshw report.",
                    recommendation="Check with: free -h or cat /proc/meminfo",
                )
            )

        unclaimed = [c for c in components if c.get("claimed") is False or c.get("disabled") is True]
        if unclaimed:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{len(unclaimed)} unclaimed/disabled device(s) found",
                    detail="Some hardware devices are not claimed by a driver or are disabled.",
                    raw="\n".join(
                        f"{u.get('class') or ''}: "
                        f"{u.get('product') or u.get('description') or u.get('id') or ''}"
                        for u in unclaimed
                    ),
                    recommendation=(
                        "Install missing drivers or enable disabled devices. Check: lspci -v for "
                        "details."
                    ),
                )
            )

        score = score_issues(issues)
        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="Hardware inventory looks good",
                    detail="All hardware components detected and claimed by drivers.",
                    recommendation="No action needed.",
                )
            )

        return ParseResult(summary=summary, score=score, issues=issues)

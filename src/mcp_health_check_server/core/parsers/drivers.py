"""Driver inventory parser (``driverquery /v /fo csv``)."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues
from ._text import cell, csv_rows, header_containing

_MDY_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_ISO_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_MONTH_SECONDS = 60 * 60 * 24 * 30


def parse_driver_date(text: str) -> datetime | None:
    """Parse ``1/15/2020 12:00:00 AM`` or ``2020-01-15`` link dates."""
    try:
        m = _MDY_RE.search(text)
        if m:
            return datetime(int(m.group(3)), int(m.group(1)), int(m.group(2)))
        m = _ISO_RE.search(text)
        if m:
            return datetime(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None
    return None


@dataclass(frozen=True, slots=True)
class _Driver:
    module: str
    display_name: str
    type: str
    link_date: str
    state: str
    start_mode: str

    @property
    def label(self) -> str:
        return self.display_name or self.module


@dataclass(frozen=True, slots=True)
class DriverQueryParser:
    """Flag stopped auto-start drivers and drivers with old link dates."""

    name: ClassVar[str] = "Driver Query"
    category: ClassVar[Category] = Category.SYSTEM

    now: datetime | None = None

    _module_re = re.compile(r"Module Name", re.I)
    _display_re = re.compile(r"Display Name", re.I)
    _type_re = re.compile(r"Driver Type", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if "driver" in fn and fn.endswith(".csv"):
            return True
        return bool(
            self._module_re.search(content)
            and self._display_re.search(content)
            and self._type_re.search(content)
        )

    @staticmethod
    def _drivers(rows: list[list[str]]) -> list[_Driver]:
        headers = rows[0]
        module = header_containing(headers, "Module Name")
        display = header_containing(headers, "Display Name")
        dtype = header_containing(headers, "Driver Type")
        link = header_containing(headers, "Link Date")
        state = header_containing(headers, "State")
        start = header_containing(headers, "Start Mode")
        return [
            _Driver(
                module=cell(row, module),
                display_name=cell(row, display),
                type=cell(row, dtype),
                link_date=cell(row, link),
                state=cell(row, state),
                start_mode=cell(row, start),
            )
            for row in rows[1:]
        ]

    def _age_buckets(self, drivers: list[_Driver]) -> tuple[list[_Driver], list[_Driver]]:
        """Split drivers into (very old: >60 months, old: 37-60 months)."""
        now = self.now or datetime.now()
        very_old: list[_Driver] = []
        old: list[_Driver] = []
        for d in drivers:
            if not d.link_date:
                continue
            linked = parse_driver_date(d.link_date)
            if linked is None:
                continue
            age = math.floor((now - linked).total_seconds() / _MONTH_SECONDS)
            if age > 60:
                very_old.append(d)
            elif age > 36:
                old.append(d)
        return very_old, old

    def parse(self, content: str) -> ParseResult:
        rows = csv_rows(content)
        if not rows:
            return ParseResult(
                summary={"total_drivers": 0},
                score=100,
                issues=[
                    Issue(
                        severity=Severity.INFO,
                        title="No driver data found",
                        detail="Could not parse driver query output.",
                        recommendation="Ensure the file was generated with: driverquery /v /fo csv",
                    )
                ],
            )

        issues: list[Issue] = []
        drivers = self._drivers(rows)
        summary: dict[str, Any] = {"total_drivers": len(drivers)}

        stopped = [
            d
            for d in drivers
            if d.state
            and re.search(r"stopped", d.state, re.I)
            and re.search(r"boot|system|auto", d.start_mode, re.I)
        ]
        if stopped:
            n = len(stopped)
            verb = "s are" if n > 1 else " is"
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{n} auto-start driver{verb} stopped",
                    detail=(
                        "Drivers expected to be running but are stopped: "
                        + ", ".join(d.label for d in stopped[:5])
                    ),
                    raw="\n".join(
                        f"{d.module} ({d.display_name}) - {d.state}" for d in stopped[:5]
                    ),
                    recommendation=(
                        "These drivers should be running. Check Device Manager for errors or "
                        "reinstall affected drivers."
                    ),
                )
            )

        very_old, old = self._age_buckets(drivers)
        summary["outdated_drivers"] = len(very_old) + len(old)
        listing = [f"{d.label}: {d.link_date}" for d in very_old[:5]]
        if len(very_old) > 10:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{len(very_old)} drivers are over 5 years old",
                    detail=(
                        "Many drivers haven't been updated in over 5 years. This is common for "
                        "built-in Windows drivers but some may need attention."
                    ),
                    raw="\n".join(listing),
                    recommendation=(
                        "Review old drivers. Some may be built-in Windows drivers (normal), but "
                        "third-party drivers should be updated."
                    ),
                )
            )
        elif very_old:
            n = len(very_old)
            verb = "s are" if n > 1 else " is"
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{n} driver{verb} over 5 years old",
                    detail="; ".join(listing),
                    raw="\n".join(listing),
                    recommendation="Check if these drivers have newer versions available.",
                )
            )

        summary["kernel_drivers"] = sum(1 for d in drivers if re.search(r"kernel", d.type, re.I))
        summary["file_system_drivers"] = sum(
            1 for d in drivers if re.search(r"file system", d.type, re.I)
        )

        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{len(drivers)} drivers loaded - no issues detected",
                    detail="All checked drivers appear to be in normal state.",
                    recommendation="Drivers look healthy. Keep them updated periodically.",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)


"""Running process parser (``tasklist /v /fo csv``)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import round_half_up, score_issues
from ._text import cell, csv_rows, parse_int_prefix

_GB_IN_KB = 1024 * 1024


def parse_memory_kb(text: str) -> int:
    """``"123,456 K"`` -> 123456."""
    digits = re.sub(r"[^\d]", "", text)
    return int(digits) if digits else 0


def parse_cpu_time(text: str) -> int:
    """``H:MM:SS`` CPU time in seconds."""
    m = re.search(r"(\d+):(\d+):(\d+)", text or "")
    if not m:
        return 0
    return int(m.group(1)) * 3600 + int(m.group(2)) * 60 + int(m.group(3))


@dataclass(frozen=True, slots=True)
class Process:
    name: str
    pid: int
    memory_kb: int
    status: str = ""
    cpu_time: str = ""
    window_title: str = ""

    @property
    def memory_mb(self) -> int:
        return round_half_up(self.memory_kb / 1024)


def _es(count: int) -> str:
    return "es" if count > 1 else ""


@dataclass(frozen=True, slots=True)
class RunningProcessesParser:
    """Memory hogs, hung processes and process count from tasklist."""

    name: ClassVar[str] = "Running Processes"
    category: ClassVar[Category] = Category.PERFORMANCE

    _image_re = re.compile(r"Image Name", re.I)
    _pid_re = re.compile(r"PID", re.I)
    _mem_re = re.compile(r"Mem Usage", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if ("tasklist" in fn or "process" in fn) and fn.endswith(".csv"):
            return True
        return bool(
            self._image_re.search(content)
            and self._pid_re.search(content)
            and self._mem_re.search(content)
        )

    @staticmethod
    def _processes(rows: list[list[str]]) -> list[Process]:
        headers = [h.lower().strip().replace('"', "") for h in rows[0]]

        def col(fragment: str) -> int:
            return next((i for i, h in enumerate(headers) if fragment in h), -1)

        name_col, pid_col, mem_col = col("image name"), col("pid"), col("mem")
        status_col, cpu_col, title_col = col("status"), col("cpu time"), col("window title")
        out: list[Process] = []
        for row in rows[1:]:
            if len(row) <= max(name_col, pid_col, mem_col):
                continue
            name = cell(row, name_col).replace('"', "")
            if not name:
                continue
            out.append(
                Process(
                    name=name,
                    pid=parse_int_prefix(cell(row, pid_col).replace('"', "")) or 0,
                    memory_kb=parse_memory_kb(cell(row, mem_col)),
                    status=cell(row, status_col).replace('"', ""),
                    cpu_time=cell(row, cpu_col).replace('"', ""),
                    window_title=cell(row, title_col).replace('"', ""),
                )
            )
        return out

    @staticmethod
    def _memory_issue(procs: list[Process], limit_label: str, severity: Severity) -> Issue:
        n = len(procs)
        recommendation = (
            "Check if these processes are behaving normally. Restart the application if memory "
            "usage seems excessive."
            if severity is Severity.WARNING
            else "These processes may have a memory leak. Consider restarting them or the "
            "application."
        )
        return Issue(
            severity=severity,
            title=f"{n} process{_es(n)} using over {limit_label} of RAM",
            detail=", ".join(f"{p.name}: {p.memory_mb} MB" for p in procs),
            raw="\n".join(f"{p.name} (PID {p.pid}): {p.memory_mb} MB" for p in procs),
            recommendation=recommendation,
        )

    def parse(self, content: str) -> ParseResult:
        rows = csv_rows(content)
        if len(rows) < 2:
            return ParseResult(
                summary={"process_count": 0},
                score=100,
                issues=[
                    Issue(
                        severity=Severity.INFO,
                        title="No process data found",
                        detail="Could not parse tasklist output.",
                        recommendation="Ensure the file was generated with: tasklist /v /fo csv",
                    )
                ],
            )

        processes = self._processes(rows)
        total_mb = round_half_up(sum(p.memory_kb for p in processes) / 1024)
        top = sorted(processes, key=lambda p: p.memory_kb, reverse=True)[:10]
        summary: dict[str, Any] = {
            "process_count": len(processes),
            "total_memory_mb": total_mb,
            "top_memory_processes": [{"name": p.name, "memory_mb": p.memory_mb} for p in top],
        }

        issues: list[Issue] = []
        over_1gb = [p for p in processes if p.memory_kb > _GB_IN_KB]
        if over_1gb:
            issues.append(self._memory_issue(over_1gb, "1 GB", Severity.WARNING))
        over_2gb = [p for p in processes if p.memory_kb > 2 * _GB_IN_KB]
        if over_2gb:
            issues.append(self._memory_issue(over_2gb, "2 GB", Severity.CRITICAL))

        count = len(processes)
        if count > 200:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{count} running processes - high count",
                    detail=(
                        f"A typical Windows system runs 80-150 processes. {count} is above normal."
                    ),
                    raw=f"Process count: {count}",
                    recommendation=(
                        "Review running processes and close unnecessary applications and services."
                    ),
                )
            )
        elif count > 150:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{count} running processes",
                    detail="Slightly above average but may be normal depending on installed software.",
                    raw=f"Process count: {count}",
                    recommendation="Monitor if the count continues to grow. Close unused applications.",
                )
            )

        hung = [p for p in processes if re.search(r"not responding", p.status, re.I)]
        if hung:
            n = len(hung)
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{n} process{_es(n)} not responding",
                    detail="Hung processes: " + ", ".join(p.name for p in hung),
                    raw="\n".join(f"{p.name} (PID {p.pid}) - Not Responding" for p in hung),
                    recommendation=(
                        "Force-close hung processes via Task Manager. If recurring, reinstall the "
                        "affected applications."
                    ),
                )
            )

        busy = [p for p in processes if parse_cpu_time(p.cpu_time) > 3600]
        if len(busy) > 3:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{len(busy)} processes with high CPU time (>1hr)",
                    detail="Processes with significant CPU usage: "
                    + ", ".join(p.name for p in busy[:5]),
                    raw="\n".join(f"{p.name}: CPU Time {p.cpu_time}" for p in busy[:5]),
                    recommendation=(
                        "Some high CPU time is normal for system processes. Check for any "
                        "unexpected CPU-intensive processes."
                    ),
                )
            )

        if top and not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{count} processes running - total {total_mb} MB RAM used",
                    detail="Top consumers: "
                    + ", ".join(f"{p.name} ({p.memory_mb} MB)" for p in top[:5]),
                    recommendation="Process list looks healthy.",
                )
            )
        elif not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title="No process data found",
                    detail="The tasklist header was found but no process rows could be read.",
                    recommendation="Ensure the file was generated with: tasklist /v /fo csv",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)

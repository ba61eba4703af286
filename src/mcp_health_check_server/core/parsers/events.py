"""System event log parser (``wevtutil qe System /f:xml``).

wevtutil concatenates ``<Event>`` elements without a root node, so events are
scraped with regular expressions rather than an XML parser.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, ClassVar

from ..models import Category, Issue, ParseResult, Severity
from ..scoring import score_issues
from ._text import plural

_EVENT_RE = re.compile(r"<Event[\s\S]*?</Event>", re.I)
_LEVEL_RE = re.compile(r"<Level>(\d+)</Level>", re.I)
_EVENT_ID_RE = re.compile(r"<EventID[^>]*>(\d+)</EventID>", re.I)
_PROVIDER_RE = re.compile(r"""<Provider\s+Name=(?:'([^']+)'|"([^"]+)")""", re.I)
_TIME_RE = re.compile(r"""<TimeCreated\s+SystemTime=(?:'([^']+)'|"([^"]+)")""", re.I)
_DATA_RE = re.compile(r"<Data[^>]*>([^<]*)</Data>", re.I)


@dataclass(frozen=True, slots=True)
class Event:
    level: int
    event_id: int
    source: str
    time_created: str
    message: str


def parse_event(xml: str) -> Event:
    """Pull level, id, provider, time and the first data value from one event."""
    level = _LEVEL_RE.search(xml)
    event_id = _EVENT_ID_RE.search(xml)
    provider = _PROVIDER_RE.search(xml)
    created = _TIME_RE.search(xml)
    data = _DATA_RE.search(xml)
    return Event(
        level=int(level.group(1)) if level else 4,
        event_id=int(event_id.group(1)) if event_id else 0,
        source=(provider.group(1) or provider.group(2)) if provider else "Unknown",
        time_created=(created.group(1) or created.group(2)) if created else "",
        message=data.group(1) if data else "",
    )


def top_sources(events: list[Event], n: int) -> list[str]:
    """``"Source (count)"`` for the ``n`` most frequent sources."""
    counts = Counter(e.source for e in events)
    return [f"{source} ({count})" for source, count in counts.most_common(n)]


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


@dataclass(frozen=True, slots=True)
class SystemEventsParser:
    name: ClassVar[str] = "System Events"
    category: ClassVar[Category] = Category.SECURITY

    _event_open_re = re.compile(r"<Event\s", re.I)
    _system_re = re.compile(r"<System>", re.I)
    _provider_open_re = re.compile(r"<Provider", re.I)

    def detect(self, content: str, filename: str = "") -> bool:
        fn = (filename or "").lower()
        if ("event" in fn or "system" in fn) and (fn.endswith(".xml") or fn.endswith(".evtx")):
            return True
        return bool(
            self._event_open_re.search(content)
            and self._system_re.search(content)
            and self._provider_open_re.search(content)
        )

    def parse(self, content: str) -> ParseResult:
        blocks = [m.group(0) for m in _EVENT_RE.finditer(content)]
        if not blocks:
            return ParseResult(
                summary={"total_events": 0},
                score=100,
                issues=[
                    Issue(
                        severity=Severity.INFO,
                        title="No system events found",
                        detail="Could not parse event log data.",
                        recommendation=(
                            "Ensure the file was generated with: "
                            "wevtutil qe System /c:100 /f:xml /rd:true"
                        ),
                    )
                ],
            )

        events = [parse_event(b) for b in blocks]
        critical = [e for e in events if e.level == 1]
        errors = [e for e in events if e.level == 2]
        warnings = [e for e in events if e.level == 3]
        informational = [e for e in events if e.level in (0, 4)]
        summary: dict[str, Any] = {
            "total_events": len(events),
            "critical": len(critical),
            "errors": len(errors),
            "warnings": len(warnings),
            "informational": len(informational),
        }

        issues: list[Issue] = []
        bsod = [
            e
            for e in events
            if re.search(r"bugcheck", e.source, re.I)
            or (e.event_id == 41 and re.search(r"kernel-power", e.source, re.I))
        ]
        if bsod:
            n = len(bsod)
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title=f"{n} BSOD/crash event{plural(n)} detected",
                    detail=(
                        "Blue screen or unexpected shutdown events found. Sources: "
                        + ", ".join(_unique([e.source for e in bsod]))
                    ),
                    raw="\n".join(
                        f"Event {e.event_id} from {e.source} at {e.time_created}" for e in bsod[:3]
                    ),
                    recommendation=(
                        "BSODs indicate serious system instability. Check for driver issues, "
                        'hardware problems, or overheating. Run "sfc /scannow" and check memory '
                        "with Windows Memory Diagnostic."
                    ),
                )
            )

        shutdowns = [e for e in events if e.event_id == 6008]
        if shutdowns:
            n = len(shutdowns)
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{n} unexpected shutdown{plural(n)} detected",
                    detail=(
                        "The system shut down unexpectedly (power loss, crash, or forced shutdown)."
                    ),
                    raw="\n".join(f"Event 6008 at {e.time_created}" for e in shutdowns[:3]),
                    recommendation=(
                        "Check power supply and UPS. If recurring, investigate hardware or driver "
                        "issues."
                    ),
                )
            )

        disk = [e for e in events if re.search(r"disk", e.source, re.I) and e.level in (1, 2)]
        if disk:
            n = len(disk)
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title=f"{n} disk error{plural(n)} in event log",
                    detail="Disk errors can indicate drive failure. Data loss may occur.",
                    raw="\n".join(
                        f"Event {e.event_id} from {e.source}: {e.message[:100]}" for e in disk[:3]
                    ),
                    recommendation=(
                        "BACK UP DATA IMMEDIATELY. Run chkdsk /f and check SMART status. Consider "
                        "replacing the drive."
                    ),
                )
            )

        if critical and not bsod and not disk:
            n = len(critical)
            issues.append(
                Issue(
                    severity=Severity.CRITICAL,
                    title=f"{n} critical event{plural(n)} in system log",
                    detail="Critical events from: "
                    + ", ".join(_unique([e.source for e in critical])[:5]),
                    raw="\n".join(
                        f"Event {e.event_id} from {e.source} at {e.time_created}"
                        for e in critical[:3]
                    ),
                    recommendation="Investigate critical events in Event Viewer for more details.",
                )
            )

        if len(errors) > 20:
            issues.append(
                Issue(
                    severity=Severity.WARNING,
                    title=f"{len(errors)} error events in system log",
                    detail="High number of error events. Top sources: "
                    + ", ".join(top_sources(errors, 3)),
                    raw=f"Error events: {len(errors)}",
                    recommendation=(
                        "Review error events in Event Viewer. Frequent errors from the same source "
                        "may indicate a specific problem."
                    ),
                )
            )
        elif len(errors) > 5:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{len(errors)} error events in system log",
                    detail="Sources: " + ", ".join(top_sources(errors, 3)),
                    raw=f"Error events: {len(errors)}",
                    recommendation=(
                        "Some errors are normal. Review if any are recurring from the same source."
                    ),
                )
            )

        if len(warnings) > 30:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{len(warnings)} warning events in system log",
                    detail="High number of warnings. Top sources: "
                    + ", ".join(top_sources(warnings, 3)),
                    raw=f"Warning events: {len(warnings)}",
                    recommendation=(
                        "Review recurring warnings for potential issues that haven't become "
                        "errors yet."
                    ),
                )
            )

        if not issues:
            issues.append(
                Issue(
                    severity=Severity.INFO,
                    title=f"{len(events)} system events analyzed - no major issues",
                    detail=(
                        f"Critical: {len(critical)}, Errors: {len(errors)}, "
                        f"Warnings: {len(warnings)}"
                    ),
                    recommendation="Event log looks clean.",
                )
            )

        return ParseResult(summary=summary, score=score_issues(issues), issues=issues)

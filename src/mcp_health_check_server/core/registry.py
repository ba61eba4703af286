"""Ordered parser registry with first-match-wins detection."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime

from .models import Category, DetectionOutcome, ParseResult
from .parsers import (
    BatteryReportParser,
    DiskInfoParser,
    DmesgParser,
    DriverQueryParser,
    DxDiagParser,
    EnergyReportParser,
    JournalctlParser,
    LinuxUpdatesParser,
    LshwParser,
    LspciParser,
    MemoryLinuxParser,
    MsInfoParser,
    NetworkConfigParser,
    NetworkLinuxParser,
    ReportParser,
    RunningProcessesParser,
    SleepStudyParser,
    SmartctlParser,
    StartupProgramsParser,
    SystemdAnalyzeParser,
    SystemEventsParser,
    SystemInfoParser,
    UpowerParser,
    WifiReportParser,
    WindowsUpdatesParser,
    identity_of,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParseAttempt:
    """Result of running one parser: a ParseResult, or the error it raised."""

    parser: ReportParser
    matched: bool
    result: ParseResult | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.matched and self.error is None and self.result is not None


def _attempt(parser: ReportParser, filename: str, content: str) -> ParseAttempt:
    try:
        if not parser.detect(content, filename):
            return ParseAttempt(parser=parser, matched=False)
    except Exception as exc:
        return ParseAttempt(parser=parser, matched=False, error=exc)
    try:
        return ParseAttempt(parser=parser, matched=True, result=parser.parse(content))
    except Exception as exc:
        return ParseAttempt(parser=parser, matched=True, error=exc)


@dataclass(frozen=True, slots=True)
class ParserRegistry:
    """Parsers in registration order; the first detector to accept a file wins."""

    parsers: Sequence[ReportParser]

    def __post_init__(self) -> None:
        names = [p.name for p in self.parsers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate parser names: {', '.join(duplicates)}")

    def __iter__(self) -> Iterator[ReportParser]:
        return iter(self.parsers)

    def __len__(self) -> int:
        return len(self.parsers)

    def names(self) -> list[str]:
        return [p.name for p in self.parsers]

    def get(self, name: str) -> ReportParser | None:
        return next((p for p in self.parsers if p.name == name), None)

    def by_category(self) -> dict[Category, list[ReportParser]]:
        """Parsers grouped by category, every category present, registration order kept."""
        grouped: dict[Category, list[ReportParser]] = {c: [] for c in Category}
        for p in self.parsers:
            grouped[p.category].append(p)
        return grouped

    def detect_and_parse(self, filename: str, content: str) -> DetectionOutcome | None:
        """Run detectors in order and parse with the first that accepts the file.

        A parser that raises in ``detect`` or ``parse`` is logged and skipped.
        Returns None when no parser recognizes the content.
        """
        for parser in self.parsers:
            attempt = _attempt(parser, filename, content)
            if attempt.error is not None:
                stage = "parse" if attempt.matched else "detect"
                logger.warning(
                    "Parser %r failed during %s of %r: %s",
                    parser.name,
                    stage,
                    filename,
                    attempt.error,
                )
                continue
            if attempt.ok:
                logger.debug("%r identified as %s", filename, parser.name)
                return DetectionOutcome(parser=identity_of(parser), result=attempt.result)
        logger.info("Could not identify report type for %r", filename)
        return None

    def parse_with(self, name: str, content: str) -> DetectionOutcome | None:
        """Force a parser by name, bypassing detection.

        Raises KeyError for an unknown name; returns None if the parser raises.
        """
        parser = self.get(name)
        if parser is None:
            raise KeyError(name)
        try:
            result = parser.parse(content)
        except Exception:
            logger.warning("Parser %r raised while parsing", name, exc_info=True)
            return None
        return DetectionOutcome(parser=identity_of(parser), result=result)


def default_parsers(now: datetime | None = None) -> list[ReportParser]:
    """Every built-in parser in detection order.

    Order matters where detectors overlap: the Linux network parser runs
    before ``ipconfig`` so ``ip addr`` output is not claimed by the looser
    Windows heuristics.
    """
    return [
        BatteryReportParser(),
        EnergyReportParser(),
        SleepStudyParser(),
        MsInfoParser(),
        DxDiagParser(now=now),
        SystemInfoParser(now=now),
        DriverQueryParser(now=now),
        DiskInfoParser(),
        WifiReportParser(),
        NetworkLinuxParser(),
        NetworkConfigParser(),
        WindowsUpdatesParser(now=now),
        SystemEventsParser(),
        StartupProgramsParser(),
        RunningProcessesParser(),
        UpowerParser(),
        DmesgParser(),
        JournalctlParser(),
        LshwParser(),
        LspciParser(),
        MemoryLinuxParser(),
        SmartctlParser(),
        SystemdAnalyzeParser(),
        LinuxUpdatesParser(),
    ]


def default_registry(now: datetime | None = None) -> ParserRegistry:
    """Registry of the built-in parsers; ``now`` pins time-dependent checks."""
    return ParserRegistry(parsers=default_parsers(now))

"""Core data models for the health check pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Issue severity, ordered from most to least severe."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort position (critical first)."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.CRITICAL: 0, Severity.WARNING: 1, Severity.INFO: 2}


class Category(str, Enum):
    """The six health domains used for grouping and weighting."""

    POWER = "power"
    SYSTEM = "system"
    STORAGE = "storage"
    NETWORK = "network"
    SECURITY = "security"
    PERFORMANCE = "performance"


class FixKind(str, Enum):
    """How an issue can be remediated."""

    FIXABLE = "fixable"
    MANUAL = "manual"
    HARDWARE = "hardware"


@dataclass(frozen=True, slots=True)
class Issue:
    """A single detected problem.

    ``category`` and ``parser_name`` are empty while the issue lives inside a
    ParseResult and are attached when the scoring engine flattens results.
    """

    severity: Severity
    title: str
    detail: str = ""
    raw: str = ""
    recommendation: str = ""
    category: Category | None = None
    parser_name: str | None = None

    def searchable_text(self) -> str:
        """Lower-cased haystack used by the issue filter."""
        parts = [
            self.title,
            self.detail,
            self.raw,
            self.recommendation,
            self.category.value if self.category is not None else "",
            self.parser_name or "",
        ]
        return " ".join(p for p in parts if p).lower()


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Output of one parser applied to one file.

    ``summary`` is parser specific: consumers that need a given fact must
    know which parser produced it.
    """

    summary: dict[str, Any]
    score: int
    issues: list[Issue]


@dataclass(frozen=True, slots=True)
class ParserIdentity:
    name: str
    category: Category


@dataclass(frozen=True, slots=True)
class DetectionOutcome:
    """The winning parser for a file and what it extracted."""

    parser: ParserIdentity
    result: ParseResult


@dataclass(frozen=True, slots=True)
class IssueCounts:
    critical: int = 0
    warning: int = 0
    info: int = 0

    @classmethod
    def from_issues(cls, issues: list[Issue]) -> IssueCounts:
        counts = {s: 0 for s in Severity}
        for issue in issues:
            counts[issue.severity] += 1
        return cls(
            critical=counts[Severity.CRITICAL],
            warning=counts[Severity.WARNING],
            info=counts[Severity.INFO],
        )

    @property
    def total(self) -> int:
        return self.critical + self.warning + self.info

    def to_dict(self) -> dict[str, int]:
        return {"critical": self.critical, "warning": self.warning, "info": self.info}


@dataclass(frozen=True, slots=True)
class CategoryScore:
    """Per-category aggregate. ``score`` is None iff no parser contributed."""

    score: int | None
    has_data: bool
    issue_counts: IssueCounts
    parsers: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ScoringResult:
    """Everything the rendering/export side needs about a session."""

    global_score: int | None
    category_scores: dict[Category, CategoryScore]
    all_issues: list[Issue]
    total_issue_counts: IssueCounts
    categories_with_data: int
    total_categories: int


@dataclass(frozen=True, slots=True)
class RemediationEntry:
    fix_kind: FixKind
    command: str | None
    guide: str

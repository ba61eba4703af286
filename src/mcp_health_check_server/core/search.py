"""Issue filtering by category, severity and free-text query."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .models import Issue


@dataclass(frozen=True, slots=True)
class IssueFilter:
    """Empty sets mean no filtering on that axis.

    ``query`` is split on whitespace and every term must appear (as a
    case-insensitive substring) in the issue's searchable text.
    """

    categories: frozenset[str] = field(default_factory=frozenset)
    severities: frozenset[str] = field(default_factory=frozenset)
    query: str = ""

    @classmethod
    def build(
        cls,
        categories: Iterable[str] | None = None,
        severities: Iterable[str] | None = None,
        query: str | None = None,
    ) -> IssueFilter:
        return cls(
            categories=frozenset(c.lower() for c in categories or () if c),
            severities=frozenset(s.lower() for s in severities or () if s),
            query=(query or "").strip(),
        )

    @property
    def terms(self) -> list[str]:
        return self.query.lower().split()

    def matches(self, issue: Issue) -> bool:
        if self.categories:
            category = issue.category.value if issue.category is not None else ""
            if category not in self.categories:
                return False
        if self.severities and issue.severity.value not in self.severities:
            return False
        terms = self.terms
        if terms:
            text = issue.searchable_text()
            return all(term in text for term in terms)
        return True


def filter_issues(issues: Sequence[Issue], criteria: IssueFilter | None = None) -> list[Issue]:
    """Issues matching ``criteria``, in their original order."""
    if criteria is None:
        return list(issues)
    return [issue for issue in issues if criteria.matches(issue)]

"""Report parser interface."""

from __future__ import annotations

from typing import Protocol

from ..models import Category, ParseResult, ParserIdentity


class ReportParser(Protocol):
    """Detector and extractor for one diagnostic report format.

    ``detect`` is a cheap heuristic over the filename and content.
    ``parse`` must not assume ``detect`` ran and degrades to a best-effort
    result on partial input instead of raising.
    """

    name: str
    category: Category

    def detect(self, content: str, filename: str = "") -> bool:
        """Return True if the content looks like this parser's format."""
        ...

    def parse(self, content: str) -> ParseResult:
        """Extract a summary and issues from the report content."""
        ...


def identity_of(parser: ReportParser) -> ParserIdentity:
    return ParserIdentity(name=parser.name, category=parser.category)

"""Session state: the set of parsed reports and the current scores.

Every change to the file set recomputes the ScoringResult from scratch; the
new result is only published once it is complete.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePath

from .models import DetectionOutcome, ScoringResult
from .registry import ParserRegistry, default_registry
from .scoring import calculate_scores

logger = logging.getLogger(__name__)

UNRECOGNIZED_MESSAGE = "could not identify report type"


@dataclass(frozen=True, slots=True)
class AddResult:
    """What happened to one submitted file."""

    filename: str
    outcome: DetectionOutcome | None

    @property
    def recognized(self) -> bool:
        return self.outcome is not None

    @property
    def message(self) -> str:
        if self.outcome is None:
            return f"{self.filename}: {UNRECOGNIZED_MESSAGE}"
        return f"{self.filename}: {self.outcome.parser.name}"


class HealthCheckSession:
    """Accumulates detection outcomes keyed by filename."""

    def __init__(self, registry: ParserRegistry | None = None) -> None:
        self.registry = registry if registry is not None else default_registry()
        self._outcomes: dict[str, DetectionOutcome] = {}
        self._unrecognized: list[str] = []
        self._scores: ScoringResult | None = None

    @property
    def scores(self) -> ScoringResult | None:
        """Latest complete ScoringResult; None while no report is loaded."""
        return self._scores

    @property
    def outcomes(self) -> dict[str, DetectionOutcome]:
        return dict(self._outcomes)

    @property
    def unrecognized(self) -> list[str]:
        return list(self._unrecognized)

    def __len__(self) -> int:
        return len(self._outcomes)

    def __contains__(self, filename: object) -> bool:
        return filename in self._outcomes

    def _detect(self, filename: str, content: str) -> AddResult:
        # labels such as "a/battery.txt" are detected by their basename
        outcome = self.registry.detect_and_parse(PurePath(filename).name, content)
        if outcome is None:
            if filename not in self._unrecognized:
                self._unrecognized.append(filename)
        else:
            # a file with the same name replaces the earlier one
            self._outcomes[filename] = outcome
            if filename in self._unrecognized:
                self._unrecognized.remove(filename)
        return AddResult(filename=filename, outcome=outcome)

    def _recompute(self) -> None:
        outcomes = list(self._outcomes.values())
        scores = calculate_scores(outcomes) if outcomes else None
        self._scores = scores
        logger.info(
            "Recomputed scores for %d report(s); global score %s",
            len(outcomes),
            scores.global_score if scores else None,
        )

    def add(self, filename: str, content: str) -> AddResult:
        result = self._detect(filename, content)
        self._recompute()
        return result

    def add_many(self, files: Iterable[tuple[str, str]]) -> list[AddResult]:
        """Add a batch of ``(filename, content)`` pairs, recomputing once."""
        results = [self._detect(filename, content) for filename, content in files]
        self._recompute()
        return results

    def remove(self, filename: str) -> bool:
        if filename not in self._outcomes:
            return False
        del self._outcomes[filename]
        self._recompute()
        return True

    def clear(self) -> None:
        self._outcomes.clear()
        self._unrecognized.clear()
        self._recompute()

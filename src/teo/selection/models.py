"""Test selection results."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any


def percent(value: float) -> int:
    """``value`` (0-1) as a whole percentage, halves rounded up."""
    return math.floor(value * 100 + 0.5)


@dataclass(frozen=True, slots=True)
class SelectionEntry:
    """One selected test file and the feature that claimed it."""

    test_path: str
    source_feature: str
    confidence: float
    rationale: str
    strategies: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.test_path,
            "feature": self.source_feature,
            "confidence": self.confidence,
            "strategies": list(self.strategies),
            "reason": self.rationale,
        }


@dataclass(frozen=True, slots=True)
class SelectionReason:
    """Per-feature bookkeeping: how many tests it matched and claimed."""

    feature: str
    confidence: float
    tests_selected: int
    tests_matched: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "feature": self.feature,
            "confidence": self.confidence,
            "tests_selected": self.tests_selected,
            "tests_matched": self.tests_matched,
        }


@dataclass(frozen=True, slots=True)
class SelectionSummary:
    total_available: int
    total_selected: int

    @property
    def reduction_percentage(self) -> int:
        if self.total_available == 0:
            return 0
        return percent(1 - self.total_selected / self.total_available)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_available": self.total_available,
            "total_selected": self.total_selected,
            "reduction_percentage": self.reduction_percentage,
        }


@dataclass(frozen=True, slots=True)
class SelectionResult:
    """Selected tests for one framework."""

    framework: str
    entries: tuple[SelectionEntry, ...] = ()
    reasons: tuple[SelectionReason, ...] = ()
    available: tuple[str, ...] = field(default=(), repr=False)

    @property
    def summary(self) -> SelectionSummary:
        return SelectionSummary(total_available=len(self.available), total_selected=len(self.entries))

    @property
    def paths(self) -> list[str]:
        return [e.test_path for e in self.entries]

    def to_dict(self) -> dict[str, Any]:
        return {
            "framework": self.framework,
            "summary": self.summary.to_dict(),
            "selected_tests": [e.to_dict() for e in self.entries],
            "selection_reasons": [r.to_dict() for r in self.reasons],
        }

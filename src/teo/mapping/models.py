"""Feature definitions and detection results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _check_confidence(value: float, owner: str) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{owner}: confidence {value} outside [0, 1]")


@dataclass(frozen=True, slots=True)
class FeatureDefinition:
    """A named feature with the globs that own its sources and tests."""

    name: str
    source_patterns: tuple[str, ...] = ()
    test_patterns: tuple[str, ...] = ()
    static_confidence: float = 1.0
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_confidence(self.static_confidence, f"feature '{self.name}'")


@dataclass(frozen=True, slots=True)
class StrategyResult:
    """One feature candidate reported by one strategy."""

    feature_name: str
    confidence: float
    strategy_id: str
    evidence_files: frozenset[str] = frozenset()
    test_file_hints: frozenset[str] = frozenset()
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_confidence(self.confidence, f"{self.strategy_id}:{self.feature_name}")


@dataclass(frozen=True, slots=True)
class ImpactedFeature:
    """Merged view of every result that named the same feature."""

    feature_name: str
    confidence: float
    impacted_files: frozenset[str] = frozenset()
    test_file_hints: frozenset[str] = frozenset()
    contributing_strategies: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_confidence(self.confidence, f"feature '{self.feature_name}'")

    def to_dict(self) -> dict[str, Any]:
        return {
            "feature_name": self.feature_name,
            "confidence": self.confidence,
            "impacted_files": sorted(self.impacted_files),
            "test_file_hints": sorted(self.test_file_hints),
            "contributing_strategies": list(self.contributing_strategies),
            "metadata": dict(self.metadata),
        }

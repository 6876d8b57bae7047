"""Merging strategy results into one ranked impact list.

The fold is pure: every step returns new values and the input order fully
determines the output. Callers feed results in strategy configuration order,
which is what makes metadata collisions ("later strategy wins") repeatable.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from teo.config.constants import HIGH_CONFIDENCE, MEDIUM_CONFIDENCE
from teo.core.errors import AggregationError
from teo.mapping.models import ImpactedFeature, StrategyResult


def _seed(result: StrategyResult) -> ImpactedFeature:
    return ImpactedFeature(
        feature_name=result.feature_name,
        confidence=result.confidence,
        impacted_files=result.evidence_files,
        test_file_hints=result.test_file_hints,
        contributing_strategies=(result.strategy_id,),
        metadata=dict(result.metadata),
    )


def merge(existing: ImpactedFeature, result: StrategyResult) -> ImpactedFeature:
    """Fold one result into an existing entry for the same feature."""
    strategies = existing.contributing_strategies
    if result.strategy_id not in strategies:
        strategies = (*strategies, result.strategy_id)
    return replace(
        existing,
        confidence=max(existing.confidence, result.confidence),
        impacted_files=existing.impacted_files | result.evidence_files,
        test_file_hints=existing.test_file_hints | result.test_file_hints,
        contributing_strategies=strategies,
        metadata={**existing.metadata, **result.metadata},
    )


def aggregate(results: Iterable[StrategyResult]) -> list[ImpactedFeature]:
    """Merge results keyed by feature name, ranked by confidence.

    Ties keep first-seen order. Feeding the same results twice yields the
    same list.

    Raises:
        AggregationError: A result cannot be merged (empty name, bad confidence).
    """
    merged: dict[str, ImpactedFeature] = {}
    for result in results:
        name = result.feature_name
        if not isinstance(name, str) or not name:
            raise AggregationError.invalid_result(repr(name), "feature name must be a non-empty string")
        try:
            merged[name] = merge(merged[name], result) if name in merged else _seed(result)
        except ValueError as e:
            raise AggregationError.invalid_result(name, str(e)) from e
    # sorted() is stable, so equal confidences stay in first-seen order
    return sorted(merged.values(), key=lambda f: f.confidence, reverse=True)


def filter_by_confidence(
    features: Iterable[ImpactedFeature], threshold: float = 0.5
) -> list[ImpactedFeature]:
    return [f for f in features if f.confidence >= threshold]


def summarize_features(features: list[ImpactedFeature]) -> dict[str, Any]:
    """Counts per confidence band plus strategy and test-hint totals."""
    strategies: list[str] = []
    for feature in features:
        for strategy in feature.contributing_strategies:
            if strategy not in strategies:
                strategies.append(strategy)
    return {
        "total_features": len(features),
        "high_confidence": sum(1 for f in features if f.confidence >= HIGH_CONFIDENCE),
        "medium_confidence": sum(
            1 for f in features if MEDIUM_CONFIDENCE <= f.confidence < HIGH_CONFIDENCE
        ),
        "low_confidence": sum(1 for f in features if f.confidence < MEDIUM_CONFIDENCE),
        "strategies_used": strategies,
        "total_test_files": len({t for f in features for t in f.test_file_hints}),
    }

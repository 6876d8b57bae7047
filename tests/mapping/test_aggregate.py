"""Tests for merging strategy results."""

import pytest

from teo.core.errors import AggregationError
from teo.mapping.aggregate import aggregate, filter_by_confidence, merge, summarize_features
from teo.mapping.models import ImpactedFeature, StrategyResult


def _result(
    feature: str,
    confidence: float,
    strategy: str = "file_based",
    files: tuple[str, ...] = (),
    tests: tuple[str, ...] = (),
    **metadata: object,
) -> StrategyResult:
    return StrategyResult(
        feature_name=feature,
        confidence=confidence,
        strategy_id=strategy,
        evidence_files=frozenset(files),
        test_file_hints=frozenset(tests),
        metadata=dict(metadata),
    )


class TestAggregate:
    def test_given_same_feature_twice_when_aggregated_then_max_and_union(self) -> None:
        # Given
        results = [
            _result("payments", 0.6, "folder_based", files=("a.js",), tests=("tests/p1.spec.js",)),
            _result("payments", 0.9, "file_based", files=("b.js",), tests=("tests/p2.spec.js",)),
        ]

        # When
        (feature,) = aggregate(results)

        # Then
        assert feature.feature_name == "payments"
        assert feature.confidence == 0.9
        assert feature.impacted_files == frozenset({"a.js", "b.js"})
        assert feature.test_file_hints == frozenset({"tests/p1.spec.js", "tests/p2.spec.js"})
        assert feature.contributing_strategies == ("folder_based", "file_based")

    def test_ranked_by_confidence_with_stable_ties(self) -> None:
        results = [
            _result("b", 0.5),
            _result("a", 0.9),
            _result("c", 0.5),
        ]
        assert [f.feature_name for f in aggregate(results)] == ["a", "b", "c"]

    def test_feeding_duplicates_is_idempotent(self) -> None:
        results = [_result("a", 0.4, files=("x.js",)), _result("b", 0.8, files=("y.js",))]
        assert aggregate(results + results) == aggregate(results)

    def test_metadata_later_result_wins(self) -> None:
        (feature,) = aggregate(
            [_result("a", 0.4, "one", owner="one", tier=1), _result("a", 0.3, "two", owner="two")]
        )
        assert feature.metadata == {"owner": "two", "tier": 1}
        assert feature.confidence == 0.4

    def test_empty(self) -> None:
        assert aggregate([]) == []

    def test_given_empty_feature_name_when_aggregated_then_error(self) -> None:
        with pytest.raises(AggregationError):
            aggregate([_result("", 0.5)])

    def test_merge_does_not_mutate_existing(self) -> None:
        existing = ImpactedFeature(feature_name="a", confidence=0.3, impacted_files=frozenset({"x.js"}))
        merged = merge(existing, _result("a", 0.7, "symbol_based", files=("y.js",)))
        assert existing.impacted_files == frozenset({"x.js"})
        assert merged.impacted_files == frozenset({"x.js", "y.js"})


class TestFilterAndSummary:
    def test_filter_by_confidence_is_inclusive(self) -> None:
        features = aggregate([_result("a", 0.5), _result("b", 0.49), _result("c", 0.8)])
        assert [f.feature_name for f in filter_by_confidence(features)] == ["c", "a"]
        assert [f.feature_name for f in filter_by_confidence(features, 0.0)] == ["c", "a", "b"]

    def test_summarize_features(self) -> None:
        features = aggregate(
            [
                _result("a", 0.9, "file_based", tests=("t1",)),
                _result("b", 0.6, "folder_based", tests=("t1", "t2")),
                _result("c", 0.2, "file_based"),
            ]
        )

        summary = summarize_features(features)

        assert summary == {
            "total_features": 3,
            "high_confidence": 1,
            "medium_confidence": 1,
            "low_confidence": 1,
            "strategies_used": ["file_based", "folder_based"],
            "total_test_files": 2,
        }

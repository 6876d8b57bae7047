"""Matching ranked features to concrete test files."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from teo.mapping.models import ImpactedFeature
from teo.selection.models import SelectionEntry, SelectionReason, SelectionResult, percent


def _fallback_matches(feature_name: str, tests: Sequence[str]) -> list[str]:
    name = feature_name.lower()
    squashed = re.sub(r"[-_]", "", name)
    # a name made only of separators would be a substring of every path
    if not squashed:
        return []
    return [t for t in tests if name in t.lower() or squashed in t.lower()]


class TestMatcher:
    """Assigns each available test to at most one impacted feature.

    Features are visited in ranked order and the first one to claim a path
    keeps it. A feature's own test hints are used when any of them exist in
    the corpus; otherwise tests whose path contains the feature name are
    taken.
    """

    __test__ = False  # not a pytest class

    def match(self, feature: ImpactedFeature, available: Sequence[str]) -> list[str]:
        """Tests ``feature`` would select, ignoring claims by other features."""
        hinted = [t for t in available if t in feature.test_file_hints]
        if hinted:
            return hinted
        return _fallback_matches(feature.feature_name, available)

    def select(
        self,
        impacted: Sequence[ImpactedFeature],
        available_tests: Iterable[str],
        framework: str = "default",
    ) -> SelectionResult:
        available = tuple(dict.fromkeys(available_tests))
        claimed: set[str] = set()
        entries: list[SelectionEntry] = []
        reasons: list[SelectionReason] = []

        for feature in impacted:
            matched = self.match(feature, available)
            if not matched:
                continue
            taken = 0
            for path in matched:
                if path in claimed:
                    continue
                claimed.add(path)
                taken += 1
                entries.append(
                    SelectionEntry(
                        test_path=path,
                        source_feature=feature.feature_name,
                        confidence=feature.confidence,
                        rationale=(
                            f"{feature.feature_name} feature impacted "
                            f"({percent(feature.confidence)}% confidence)"
                        ),
                        strategies=feature.contributing_strategies,
                    )
                )
            reasons.append(
                SelectionReason(
                    feature=feature.feature_name,
                    confidence=feature.confidence,
                    tests_selected=taken,
                    tests_matched=len(matched),
                )
            )

        return SelectionResult(
            framework=framework,
            entries=tuple(entries),
            reasons=tuple(reasons),
            available=available,
        )

"""Tests for selection renderers."""

from __future__ import annotations

import json

import pytest

from teo.analysis.models import ChangeRecord, ChangeSet, ChangeType
from teo.cli.output import format_script, format_table, render, runner_invocation
from teo.mapping.models import ImpactedFeature
from teo.pipeline import AnalysisResult
from teo.selection.matcher import TestMatcher

FEATURE = ImpactedFeature(
    feature_name="checkout",
    confidence=0.85,
    test_file_hints=frozenset({"tests/checkout flow.spec.js", "tests/cart.spec.js"}),
    contributing_strategies=("file_based", "folder_based"),
)
AVAILABLE = ["tests/cart.spec.js", "tests/checkout flow.spec.js", "tests/login.spec.js", "tests/search.spec.js"]


def _result(features: list[ImpactedFeature] | None = None) -> AnalysisResult:
    features = [FEATURE] if features is None else features
    return AnalysisResult(
        run_id="abc123",
        base_ref="main",
        head_ref="HEAD",
        change_set=ChangeSet(
            base_revision="a" * 40,
            head_revision="b" * 40,
            records=(ChangeRecord("src/checkout.js", ChangeType.MODIFIED, 2, 1, language="javascript"),),
        ),
        features=features,
        selections={"playwright": TestMatcher().select(features, AVAILABLE, "playwright")},
    )


class TestRender:
    def test_paths(self) -> None:
        assert render(_result(), "playwright") == "tests/cart.spec.js tests/checkout flow.spec.js"

    def test_json(self) -> None:
        # When
        payload = json.loads(render(_result(), "playwright", "json", runner_command="npx playwright test"))

        # Then
        assert payload["run_id"] == "abc123"
        assert payload["summary"]["tests_selected"] == 2
        assert payload["summary"]["reduction_percentage"] == 50
        assert payload["summary"]["estimated_time_saved_sec"] == 10.0
        assert payload["selected_tests"][0] == {
            "path": "tests/cart.spec.js",
            "feature": "checkout",
            "confidence": 0.85,
            "strategies": ["file_based", "folder_based"],
            "reason": "checkout feature impacted (85% confidence)",
        }
        assert payload["runner_command"] == "npx playwright test tests/cart.spec.js 'tests/checkout flow.spec.js'"
        assert "advisory" not in payload

    def test_script_quotes_paths(self) -> None:
        script = render(_result(), "playwright", "script", runner_command="npx playwright test")
        lines = script.splitlines()
        assert lines[0] == "#!/bin/bash"
        assert "set -euo pipefail" in lines
        assert lines[-3:] == [
            "npx playwright test \\",
            "  tests/cart.spec.js \\",
            "  'tests/checkout flow.spec.js'",
        ]

    def test_script_with_no_tests(self) -> None:
        selection = _result([]).selection("playwright")
        assert selection is not None
        assert format_script(selection, "npx playwright test").rstrip().endswith('echo "No tests selected."')

    def test_table(self) -> None:
        selection = _result().selection("playwright")
        assert selection is not None
        table = format_table(selection)
        assert "playwright: 2/4 tests (50% reduction)" in table
        assert "85%" in table

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Unsupported output format"):
            render(_result(), "playwright", "xml")

    def test_missing_framework(self) -> None:
        with pytest.raises(ValueError, match="No test selection"):
            render(_result(), "cypress")

    def test_runner_invocation_without_tests(self) -> None:
        selection = _result([]).selection("playwright")
        assert selection is not None
        assert runner_invocation("npx playwright test", selection) == "npx playwright test"

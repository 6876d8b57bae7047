"""Tests for the teo command line."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import yaml
from click.testing import CliRunner

from teo.cli.main import cli

if TYPE_CHECKING:
    from conftest import RepoBuilder

CONFIG = {
    "feature_detection": {"strategies": [{"type": "file_based", "weight": 1.0}]},
    "features": {
        "authentication": {"source_patterns": ["src/auth/**"], "test_patterns": ["tests/auth/**"]},
    },
    "integrations": {
        "playwright": {
            "framework": "playwright",
            "test_patterns": ["**/*.spec.js"],
            "runner_command": "npx playwright test",
        }
    },
}


@pytest.fixture
def project(repo_builder: RepoBuilder) -> tuple[Path, str, str]:
    """Repository with one auth change and a teo.yaml; returns (path, base, head)."""
    base = repo_builder.commit(
        {
            "src/auth/login.js": "export function login() {}\n",
            "tests/auth/login.spec.js": "test('login', () => {});\n",
            "tests/payments/pay.spec.js": "test('pay', () => {});\n",
        }
    )
    head = repo_builder.commit({"src/auth/login.js": "export function login() { return 1; }\n"})
    (repo_builder.path / "teo.yaml").write_text(yaml.safe_dump(CONFIG))
    return repo_builder.path, base, head


class TestAnalyzeCommand:
    def test_paths_format(self, project: tuple[Path, str, str]) -> None:
        # Given
        path, base, head = project

        # When
        result = CliRunner().invoke(cli, ["analyze", "--base", base, "--head", head, "--repo", str(path)])

        # Then
        assert result.exit_code == 0, result.output
        assert "tests/auth/login.spec.js" in result.output
        assert "tests/payments/pay.spec.js" not in result.output

    def test_json_format_to_file(self, project: tuple[Path, str, str], tmp_path: Path) -> None:
        # Given
        path, base, head = project
        out = tmp_path / "selection.json"

        # When
        result = CliRunner().invoke(
            cli,
            ["analyze", "--base", base, "--repo", str(path), "--format", "json", "-o", str(out)],
        )

        # Then
        assert result.exit_code == 0, result.output
        payload = json.loads(out.read_text())
        assert [t["path"] for t in payload["selected_tests"]] == ["tests/auth/login.spec.js"]
        assert payload["summary"]["reduction_percentage"] == 50
        assert payload["runner_command"] == "npx playwright test tests/auth/login.spec.js"

    def test_script_format_is_executable(self, project: tuple[Path, str, str], tmp_path: Path) -> None:
        path, base, head = project
        out = tmp_path / "run-tests.sh"

        result = CliRunner().invoke(
            cli, ["analyze", "--base", base, "--repo", str(path), "--format", "script", "-o", str(out)]
        )

        assert result.exit_code == 0, result.output
        assert out.read_text().startswith("#!/bin/bash\n")
        assert out.stat().st_mode & 0o100

    def test_named_strategy_filters_features(self, project: tuple[Path, str, str], tmp_path: Path) -> None:
        path, base, head = project
        out = tmp_path / "selection.json"
        config = dict(CONFIG, feature_detection={"strategies": [{"type": "file_based", "weight": 0.5}]})
        (path / "teo.yaml").write_text(yaml.safe_dump(config))

        result = CliRunner().invoke(
            cli,
            ["analyze", "--base", base, "--repo", str(path), "--strategy", "fast", "--format", "json", "-o", str(out)],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text())["selected_tests"] == []

    def test_default_strategy_threshold_applies_unless_overridden(
        self, project: tuple[Path, str, str], tmp_path: Path
    ) -> None:
        # Given: 0.2 confidence, below the default "balanced" threshold of 0.3
        path, base, _ = project
        config = dict(CONFIG, feature_detection={"strategies": [{"type": "file_based", "weight": 0.2}]})
        (path / "teo.yaml").write_text(yaml.safe_dump(config))
        default_out = tmp_path / "default.json"
        explicit_out = tmp_path / "explicit.json"
        args = ["analyze", "--base", base, "--repo", str(path), "--format", "json"]

        # When
        default = CliRunner().invoke(cli, [*args, "-o", str(default_out)])
        explicit = CliRunner().invoke(cli, [*args, "--threshold", "0", "-o", str(explicit_out)])

        # Then
        assert default.exit_code == 0, default.output
        assert explicit.exit_code == 0, explicit.output
        assert json.loads(default_out.read_text())["selected_tests"] == []
        assert len(json.loads(explicit_out.read_text())["selected_tests"]) == 1

    def test_threshold_and_strategy_are_exclusive(self, project: tuple[Path, str, str]) -> None:
        path, base, _ = project
        result = CliRunner().invoke(
            cli, ["analyze", "--base", base, "--repo", str(path), "--threshold", "0.5", "--strategy", "fast"]
        )
        assert result.exit_code == 2
        assert "mutually exclusive" in result.output

    def test_unknown_revision_fails_cleanly(self, project: tuple[Path, str, str]) -> None:
        path, _, _ = project
        result = CliRunner().invoke(cli, ["analyze", "--base", "no-such-ref", "--repo", str(path)])
        assert result.exit_code == 1
        assert "REVISION_NOT_FOUND" in result.output

    def test_unknown_framework_fails_cleanly(self, project: tuple[Path, str, str]) -> None:
        path, base, _ = project
        result = CliRunner().invoke(
            cli, ["analyze", "--base", base, "--repo", str(path), "--framework", "cypress"]
        )
        assert result.exit_code == 1
        assert "FRAMEWORK_NOT_CONFIGURED" in result.output


ADVISOR_MODULE = '''\
from teo.advisory import Advice


class FixedAdvisor:
    async def assess(self, change_set, features):
        return Advice(confidence=1.0, reasoning="fixed", provider="fixed")
'''


class TestAnalyzeWithAdvisor:
    @pytest.fixture
    def advised(
        self, project: tuple[Path, str, str], tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> tuple[Path, str]:
        """Project whose config enables an importable advisor; returns (path, base)."""
        path, base, _ = project
        plugins = tmp_path / "plugins"
        plugins.mkdir()
        (plugins / "teo_fixed_advisor.py").write_text(ADVISOR_MODULE)
        monkeypatch.syspath_prepend(str(plugins))
        monkeypatch.delitem(sys.modules, "teo_fixed_advisor", raising=False)
        config = dict(
            CONFIG,
            feature_detection={"strategies": [{"type": "file_based", "weight": 0.5}]},
            advisory={"enabled": True, "advisor": "teo_fixed_advisor:FixedAdvisor", "weight": 0.2},
        )
        (path / "teo.yaml").write_text(yaml.safe_dump(config))
        return path, base

    def _analyze(self, path: Path, base: str, out: Path, *extra: str) -> dict:
        result = CliRunner().invoke(
            cli, ["analyze", "--base", base, "--repo", str(path), "--format", "json", "-o", str(out), *extra]
        )
        assert result.exit_code == 0, result.output
        return json.loads(out.read_text())

    def test_given_configured_advisor_when_analyzed_then_confidence_raised(
        self, advised: tuple[Path, str], tmp_path: Path
    ) -> None:
        # Given
        path, base = advised

        # When
        payload = self._analyze(path, base, tmp_path / "advised.json")

        # Then
        assert payload["advisory"]["provider"] == "fixed"
        (feature,) = payload["features"]
        assert feature["confidence"] == pytest.approx(0.7)
        assert feature["metadata"]["pre_advice_confidence"] == pytest.approx(0.5)

    def test_given_no_ai_flag_when_analyzed_then_advisor_skipped(
        self, advised: tuple[Path, str], tmp_path: Path
    ) -> None:
        path, base = advised

        payload = self._analyze(path, base, tmp_path / "plain.json", "--no-ai")

        assert "advisory" not in payload
        assert payload["features"][0]["confidence"] == pytest.approx(0.5)

    def test_given_unimportable_advisor_when_analyzed_then_config_error(
        self, project: tuple[Path, str, str]
    ) -> None:
        # Given
        path, base, _ = project
        config = dict(CONFIG, advisory={"enabled": True, "advisor": "teo_no_such_module:Advisor"})
        (path / "teo.yaml").write_text(yaml.safe_dump(config))

        # When
        result = CliRunner().invoke(cli, ["analyze", "--base", base, "--repo", str(path)])

        # Then
        assert result.exit_code == 1
        assert "CONFIG_INVALID_VALUE" in result.output
        assert "advisory.advisor" in result.output


class TestValidateCommand:
    def test_valid_repository_as_json(self, project: tuple[Path, str, str]) -> None:
        # Given
        path, _, head = project

        # When
        result = CliRunner().invoke(cli, ["validate", str(path), "--json"])

        # Then
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["valid"] is True
        assert payload["repository"]["head"] == head
        assert payload["features"] == 1
        assert payload["frameworks"]["playwright"]["valid"] is True

    def test_missing_test_directory_exits_nonzero(self, repo_builder: RepoBuilder) -> None:
        repo_builder.commit({"src/a.js": "1\n"})

        result = CliRunner().invoke(cli, ["validate", str(repo_builder.path), "--json"])

        assert result.exit_code == 1
        report = json.loads(result.output)["frameworks"]["playwright"]
        assert report["valid"] is False
        assert report["errors"][0].startswith("Test directory not found")


class TestInitCommand:
    def test_writes_config_once(self, repo_builder: RepoBuilder) -> None:
        # Given
        repo_builder.commit({"README.md": "# demo\n"})
        target = repo_builder.path / "teo.yaml"

        # When
        first = CliRunner().invoke(cli, ["init", str(repo_builder.path), "--project-name", "demo"])
        written = target.read_text()
        second = CliRunner().invoke(cli, ["init", str(repo_builder.path)])

        # Then
        assert first.exit_code == 0, first.output
        assert yaml.safe_load(written)["project_name"] == "demo"
        assert second.exit_code == 0
        assert "Already configured" in second.output
        assert target.read_text() == written

    def test_force_overwrites(self, repo_builder: RepoBuilder) -> None:
        repo_builder.commit({"README.md": "# demo\n"})
        (repo_builder.path / "teo.yaml").write_text("project_name: old\n")

        result = CliRunner().invoke(cli, ["init", str(repo_builder.path), "--force", "--project-name", "new"])

        assert result.exit_code == 0, result.output
        assert yaml.safe_load((repo_builder.path / "teo.yaml").read_text())["project_name"] == "new"

    def test_outside_repository_fails(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(cli, ["init", str(tmp_path)])
        assert result.exit_code == 1
        assert "Not inside a git repository" in result.output

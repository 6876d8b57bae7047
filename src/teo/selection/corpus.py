"""Test corpus adapters: where the runnable test files are."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from teo.config.models import IntegrationConfig, TeoConfig
from teo.core.errors import TestMatchingError
from teo.mapping.globs import matches_any


class TestCorpus(Protocol):
    """Lists test files, repo-relative."""

    def list_test_files(self) -> list[str]: ...


@dataclass
class ValidationReport:
    framework: str
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    info: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "framework": self.framework,
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "info": dict(self.info),
        }


class GlobTestCorpus:
    """Discovers tests under ``root/test_dir`` matching ``test_patterns``.

    Patterns are relative to ``test_dir``; returned paths are relative to
    ``root``, de-duplicated and sorted.
    """

    def __init__(
        self,
        root: Path | str,
        test_dir: str = "tests",
        test_patterns: list[str] | None = None,
        *,
        framework: str = "default",
        config_file: str | None = None,
    ) -> None:
        self.root = Path(root)
        self.test_dir = test_dir.strip("/") or "."
        self.test_patterns = list(test_patterns or ["**/*.spec.js", "**/*.spec.ts"])
        self.framework = framework
        self.config_file = config_file

    @classmethod
    def from_integration(
        cls, root: Path | str, framework: str, integration: IntegrationConfig
    ) -> GlobTestCorpus:
        return cls(
            root,
            integration.test_dir,
            integration.test_patterns,
            framework=integration.framework or framework,
            config_file=integration.config_file,
        )

    def _full_patterns(self) -> list[str]:
        if self.test_dir == ".":
            return self.test_patterns
        return [f"{self.test_dir}/{p}" for p in self.test_patterns]

    def list_test_files(self) -> list[str]:
        """Raises TestMatchingError if the test directory cannot be read."""
        base = self.root / self.test_dir
        if not base.is_dir():
            return []
        patterns = self._full_patterns()
        found: set[str] = set()
        try:
            for path in base.rglob("*"):
                if not path.is_file():
                    continue
                rel = path.relative_to(self.root).as_posix()
                if matches_any(rel, patterns):
                    found.add(rel)
        except OSError as e:
            raise TestMatchingError.corpus_unavailable(self.framework, str(e)) from e
        return sorted(found)

    def validate(self) -> ValidationReport:
        report = ValidationReport(framework=self.framework)
        test_dir = self.root / self.test_dir
        if test_dir.is_dir():
            report.info["test_dir"] = f"Test directory found: {test_dir}"
        else:
            report.valid = False
            report.errors.append(f"Test directory not found: {test_dir}")

        if self.config_file:
            config_path = self.root / self.config_file
            if config_path.is_file():
                report.info["config"] = f"Runner config found: {config_path}"
            else:
                report.warnings.append(f"Runner config not found: {config_path}")

        try:
            tests = self.list_test_files()
        except TestMatchingError as e:
            report.valid = False
            report.errors.append(e.message)
        else:
            if tests:
                report.info["test_files"] = f"Found {len(tests)} test files"
            else:
                report.warnings.append("No test files found matching patterns")

        if self.framework == "playwright":
            self._check_playwright_package(report)
        return report

    def _check_playwright_package(self, report: ValidationReport) -> None:
        package_json = self.root / "package.json"
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            report.warnings.append("Could not read package.json")
            return
        deps = {**data.get("dependencies", {}), **data.get("devDependencies", {})}
        if "@playwright/test" in deps:
            report.info["playwright"] = "Playwright test package found"
        else:
            report.warnings.append("Playwright test package not found in package.json")


def corpus_for(config: TeoConfig, framework: str, root: Path | str) -> GlobTestCorpus:
    """Build the corpus adapter configured for ``framework``.

    Raises:
        TestMatchingError: No integration is configured under that name.
    """
    integration = config.integrations.get(framework)
    if integration is None:
        raise TestMatchingError.framework_not_configured(framework, sorted(config.integrations))
    return GlobTestCorpus.from_integration(root, framework, integration)

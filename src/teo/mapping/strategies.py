"""Detection strategies: change set in, feature candidates out.

Each strategy is a small stateless object built for one run from its
``StrategyConfig`` and a shared, read-only ``StrategyContext``. ``detect``
is synchronous and free of I/O; everything it needs (the repository file
listing, head-revision file text) is already in the context.

The set of strategies is closed: ``STRATEGY_TABLE`` is the only place a
configured ``type`` is turned into a class.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, ClassVar

from teo.analysis.models import ChangeSet
from teo.config.constants import (
    ANNOTATION_CONFIDENCE,
    ANNOTATION_TEST_DIRS,
    DEFAULT_ANNOTATION_PATTERNS,
    FOLDER_CONFIDENCE,
    FOLDER_TEST_DIRS,
    SYMBOL_CONFIDENCE,
    SYMBOL_TEST_DIRS,
    TEST_FILE_SUFFIX,
)
from teo.config.models import StrategyConfig, StrategyKind
from teo.mapping.globs import TestLocator, matches_any
from teo.mapping.models import FeatureDefinition, StrategyResult


@dataclass(frozen=True)
class StrategyContext:
    """Read-only inputs shared by every strategy in a run."""

    locator: TestLocator
    contents: Mapping[str, str] = field(default_factory=dict)


class DetectionStrategy(ABC):
    """Base class for detectors."""

    kind: ClassVar[StrategyKind]

    def __init__(self, config: StrategyConfig, context: StrategyContext) -> None:
        self.weight = config.weight
        self.options: dict[str, Any] = dict(config.options)
        self.context = context

    @property
    def strategy_id(self) -> str:
        return self.kind

    @abstractmethod
    def detect(
        self, change_set: ChangeSet, registry: Mapping[str, FeatureDefinition]
    ) -> list[StrategyResult]:
        """Return zero or more feature candidates for ``change_set``."""

    def _result(
        self,
        feature: str,
        confidence: float,
        path: str,
        tests: list[str],
        metadata: dict[str, Any] | None = None,
    ) -> StrategyResult:
        return StrategyResult(
            feature_name=feature,
            confidence=min(max(confidence, 0.0), 1.0),
            strategy_id=self.strategy_id,
            evidence_files=frozenset({path}),
            test_file_hints=frozenset(tests),
            metadata=metadata or {},
        )


# =============================================================================
# Folder
# =============================================================================


def features_from_path(path: str) -> list[str]:
    """Candidate feature names implied by directory layout.

    - ``.../features/<name>/...``
    - ``src/<name>/...``
    - ``.../components/<Name>/...`` (lower-cased)
    """
    parts = path.split("/")
    found: list[str] = []

    def add(name: str) -> None:
        if name and name not in found:
            found.append(name)

    if "features" in parts:
        i = parts.index("features")
        if i + 1 < len(parts):
            add(parts[i + 1])
    if len(parts) >= 2 and parts[0] == "src":
        add(parts[1])
    if "components" in parts:
        i = parts.index("components")
        if i + 1 < len(parts):
            add(parts[i + 1].lower())
    return found


class FolderStrategy(DetectionStrategy):
    """Features named by directory structure, kept only if tests exist for them."""

    kind = "folder_based"

    def detect(
        self, change_set: ChangeSet, registry: Mapping[str, FeatureDefinition]
    ) -> list[StrategyResult]:
        results: list[StrategyResult] = []
        for record in change_set.records:
            for name in features_from_path(record.path):
                tests = self.find_tests(name)
                if tests:
                    results.append(
                        self._result(name, self.weight * FOLDER_CONFIDENCE, record.path, tests)
                    )
        return results

    def find_tests(self, name: str) -> list[str]:
        patterns = [
            pattern
            for test_dir in FOLDER_TEST_DIRS
            for pattern in (
                f"{test_dir}/**/{name}*.{TEST_FILE_SUFFIX}",
                f"{test_dir}/**/*{name}*.{TEST_FILE_SUFFIX}",
                f"{test_dir}/{name}/**/*.{TEST_FILE_SUFFIX}",
            )
        ]
        return self.context.locator.glob_many(patterns)


# =============================================================================
# File
# =============================================================================


class FileStrategy(DetectionStrategy):
    """Explicit ``features`` mapping: source globs in, test globs out."""

    kind = "file_based"

    def detect(
        self, change_set: ChangeSet, registry: Mapping[str, FeatureDefinition]
    ) -> list[StrategyResult]:
        results: list[StrategyResult] = []
        for record in change_set.records:
            for definition in registry.values():
                if not matches_any(record.path, definition.source_patterns):
                    continue
                tests = self.context.locator.glob_many(definition.test_patterns)
                results.append(
                    self._result(
                        definition.name,
                        self.weight * definition.static_confidence,
                        record.path,
                        tests,
                        dict(definition.metadata),
                    )
                )
        return results


# =============================================================================
# Annotation
# =============================================================================


class AnnotationStrategy(DetectionStrategy):
    """In-source markers such as ``// Feature: checkout`` or ``@feature: checkout``.

    ``options.patterns`` replaces the default markers; group 1 of each regex
    is the feature name.
    """

    kind = "annotation_based"

    def __init__(self, config: StrategyConfig, context: StrategyContext) -> None:
        super().__init__(config, context)
        raw = self.options.get("patterns") or DEFAULT_ANNOTATION_PATTERNS
        self.patterns = [re.compile(p, re.IGNORECASE) for p in raw]

    def extract(self, content: str) -> list[str]:
        names: list[str] = []
        for pattern in self.patterns:
            for match in pattern.finditer(content):
                name = (match.group(1) or "").lower()
                if name and name not in names:
                    names.append(name)
        return names

    def detect(
        self, change_set: ChangeSet, registry: Mapping[str, FeatureDefinition]
    ) -> list[StrategyResult]:
        results: list[StrategyResult] = []
        for record in change_set.records:
            if record.is_deleted:
                continue
            content = self.context.contents.get(record.path)
            if content is None:
                continue
            for name in self.extract(content):
                tests = self.context.locator.glob_many(
                    f"{test_dir}/**/*{name}*.{TEST_FILE_SUFFIX}" for test_dir in ANNOTATION_TEST_DIRS
                )
                results.append(
                    self._result(name, self.weight * ANNOTATION_CONFIDENCE, record.path, tests)
                )
        return results


# =============================================================================
# Symbol
# =============================================================================


def feature_from_symbol(symbol: str) -> str:
    """``handleLogin`` -> ``handle``, ``LoginForm`` -> ``login``, ``login`` -> ``login``."""
    words = re.sub(r"([A-Z])", r" \1", symbol).strip().split(" ")
    return words[0].lower() if len(words) > 1 else symbol.lower()


def feature_from_filename(path: str) -> str:
    """``src/user-profile.js`` -> ``userprofile``."""
    return re.sub(r"[-_]", "", PurePosixPath(path).stem.lower())


class SymbolStrategy(DetectionStrategy):
    """Guesses features from changed function and class names."""

    kind = "symbol_based"

    def detect(
        self, change_set: ChangeSet, registry: Mapping[str, FeatureDefinition]
    ) -> list[StrategyResult]:
        results: list[StrategyResult] = []
        for record in change_set.records:
            symbols = sorted(record.symbols)
            if not symbols:
                continue
            guesses: list[str] = []
            for candidate in [*(feature_from_symbol(s) for s in symbols), feature_from_filename(record.path)]:
                if candidate and candidate not in guesses:
                    guesses.append(candidate)
            for name in guesses:
                results.append(
                    self._result(
                        name,
                        self.weight * SYMBOL_CONFIDENCE,
                        record.path,
                        self.find_tests(symbols, name),
                        {"changed_symbols": symbols},
                    )
                )
        return results

    def find_tests(self, symbols: list[str], feature: str) -> list[str]:
        patterns: list[str] = []
        for symbol in symbols:
            patterns.extend(
                f"{test_dir}/**/*{symbol}*.{TEST_FILE_SUFFIX}" for test_dir in SYMBOL_TEST_DIRS
            )
            patterns.append(f"{SYMBOL_TEST_DIRS[0]}/**/*{feature}*.{TEST_FILE_SUFFIX}")
        return self.context.locator.glob_many(patterns)


STRATEGY_TABLE: dict[StrategyKind, type[DetectionStrategy]] = {
    "folder_based": FolderStrategy,
    "file_based": FileStrategy,
    "annotation_based": AnnotationStrategy,
    "symbol_based": SymbolStrategy,
}


def build_strategies(
    configs: list[StrategyConfig], context: StrategyContext
) -> list[DetectionStrategy]:
    """Instantiate enabled strategies in configuration order.

    A type listed twice keeps its first position and its last settings.
    """
    selected: dict[str, StrategyConfig] = {}
    for cfg in configs:
        if cfg.enabled:
            selected[cfg.type] = cfg
    return [STRATEGY_TABLE[cfg.type](cfg, context) for cfg in selected.values()]

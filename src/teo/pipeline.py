"""End-to-end impact analysis: revisions in, selected tests out.

Stages, in order::

    diff -> enrichment -> strategies -> aggregation -> [advisory]
         -> [threshold] -> matching (per framework)

Only diff failures (``RepositoryError``) and aggregation defects abort a run.
Everything else is isolated to the file, strategy, or framework it hit and
shows up in ``AnalysisResult.diagnostics``.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from teo.advisory import Advisor, AdvisoryOutcome, consult
from teo.analysis.diff import DiffAnalyzer
from teo.analysis.models import ChangeSet
from teo.analysis.syntax import SyntaxExtractor, enrich_change_set
from teo.config.constants import AVG_TEST_DURATION_SEC
from teo.config.models import TeoConfig
from teo.core.diagnostics import Diagnostic, DiagnosticLog, DiagnosticSink, LoggingSink
from teo.core.errors import TestMatchingError
from teo.core.logging import run_scope
from teo.mapping.aggregate import filter_by_confidence, summarize_features
from teo.mapping.engine import StrategyEngine
from teo.mapping.globs import TestLocator
from teo.mapping.models import ImpactedFeature
from teo.mapping.registry import feature_registry
from teo.mapping.strategies import StrategyContext
from teo.selection.corpus import TestCorpus, corpus_for
from teo.selection.matcher import TestMatcher
from teo.selection.models import SelectionResult

CorpusFactory = Callable[[TeoConfig, str, Path], TestCorpus]


@dataclass(frozen=True)
class RunSummary:
    files_changed: int
    features_detected: int
    framework: str | None
    tests_available: int
    tests_selected: int
    reduction_percentage: int
    estimated_time_saved_sec: float
    duration_sec: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "files_changed": self.files_changed,
            "features_detected": self.features_detected,
            "framework": self.framework,
            "tests_available": self.tests_available,
            "tests_selected": self.tests_selected,
            "reduction_percentage": self.reduction_percentage,
            "estimated_time_saved_sec": self.estimated_time_saved_sec,
            "duration_sec": round(self.duration_sec, 3),
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Everything one run produced."""

    run_id: str
    base_ref: str
    head_ref: str
    change_set: ChangeSet
    features: list[ImpactedFeature]
    selections: dict[str, SelectionResult] = field(default_factory=dict)
    framework_errors: dict[str, TestMatchingError] = field(default_factory=dict)
    advisory: AdvisoryOutcome | None = None
    diagnostics: tuple[Diagnostic, ...] = ()
    duration_sec: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def selection(self, framework: str | None = None) -> SelectionResult | None:
        """Selection for ``framework``, or the first one when unspecified."""
        if framework is not None:
            return self.selections.get(framework)
        return next(iter(self.selections.values()), None)

    def summary(self, framework: str | None = None) -> RunSummary:
        selection = self.selection(framework)
        available = selected = reduction = 0
        if selection is not None:
            s = selection.summary
            available, selected, reduction = s.total_available, s.total_selected, s.reduction_percentage
        return RunSummary(
            files_changed=self.change_set.files_changed,
            features_detected=len(self.features),
            framework=selection.framework if selection is not None else framework,
            tests_available=available,
            tests_selected=selected,
            reduction_percentage=reduction,
            estimated_time_saved_sec=(available - selected) * AVG_TEST_DURATION_SEC,
            duration_sec=self.duration_sec,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "analysis": {
                "base_ref": self.base_ref,
                "head_ref": self.head_ref,
                "timestamp": self.timestamp.isoformat(),
                "duration_sec": round(self.duration_sec, 3),
            },
            "summary": self.summary().to_dict(),
            "changes": self.change_set.to_dict(),
            "features": [f.to_dict() for f in self.features],
            "feature_summary": summarize_features(self.features),
            "advisory": self.advisory.to_dict() if self.advisory is not None else None,
            "selections": {fw: sel.to_dict() for fw, sel in self.selections.items()},
            "framework_errors": {fw: err.to_dict() for fw, err in self.framework_errors.items()},
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


class ImpactPipeline:
    """Wires diff analysis, detection, aggregation, and matching together.

    Usage::

        pipeline = ImpactPipeline(config, repo_root)
        result = await pipeline.run("main", "HEAD", frameworks=["playwright"])
    """

    def __init__(
        self,
        config: TeoConfig,
        repo_root: Path | str | None = None,
        *,
        advisor: Advisor | None = None,
        sink: DiagnosticSink | None = None,
        corpus_factory: CorpusFactory | None = None,
    ) -> None:
        self.config = config
        self.repo_root = Path(repo_root if repo_root is not None else config.repo_path).resolve()
        self.advisor = advisor
        self._forward = sink if sink is not None else LoggingSink()
        self._corpus_factory: CorpusFactory = corpus_factory or corpus_for
        self._matcher = TestMatcher()

    async def run(
        self,
        base_ref: str,
        head_ref: str,
        *,
        frameworks: Sequence[str] | None = None,
        use_advisory: bool = True,
        confidence_threshold: float | None = None,
    ) -> AnalysisResult:
        """Run every stage.

        Raises:
            RepositoryError: Repository or revisions unusable.
            AggregationError: Strategy output could not be merged.
        """
        log = DiagnosticLog(forward=self._forward)
        start = time.perf_counter()
        analysis = self.config.analysis
        with run_scope() as run_id:
            log.emit(
                Diagnostic(
                    stage="pipeline",
                    event="analysis_started",
                    data={"base": base_ref, "head": head_ref, "repo": str(self.repo_root)},
                )
            )
            async with DiffAnalyzer(
                self.repo_root, find_renames=analysis.find_renames, sink=log
            ) as analyzer:
                change_set = await analyzer.analyze(base_ref, head_ref)
                head = change_set.head_revision

                async def fetch_head(path: str) -> str:
                    return await analyzer.content_at(path, head)

                enriched = await enrich_change_set(
                    change_set,
                    SyntaxExtractor(sink=log),
                    fetch_head,
                    workers=analysis.enrich_workers,
                    file_timeout=analysis.file_timeout_sec,
                    sink=log,
                )
                locator = TestLocator(await analyzer.list_files(head))

            context = StrategyContext(locator=locator, contents=enriched.contents)
            engine = StrategyEngine.from_config(self.config, context, sink=log)
            features = await engine.detect(enriched.change_set, feature_registry(self.config))

            advisory = None
            if use_advisory and self.config.advisory.enabled and self.advisor and features:
                advisory = await consult(
                    self.advisor,
                    enriched.change_set,
                    features,
                    weight=self.config.advisory.weight,
                    timeout_sec=self.config.advisory.timeout_sec,
                    sink=log,
                )
                if advisory is not None:
                    features = advisory.features

            if confidence_threshold is not None:
                features = filter_by_confidence(features, confidence_threshold)

            selections, errors = await self._select(features, frameworks, log)
            duration = time.perf_counter() - start
            result = AnalysisResult(
                run_id=run_id,
                base_ref=base_ref,
                head_ref=head_ref,
                change_set=enriched.change_set,
                features=features,
                selections=selections,
                framework_errors=errors,
                advisory=advisory,
                duration_sec=duration,
            )
            log.emit(
                Diagnostic(stage="pipeline", event="analysis_completed", data=result.summary().to_dict())
            )
            return replace(result, diagnostics=log.events)

    async def _select(
        self,
        features: list[ImpactedFeature],
        frameworks: Sequence[str] | None,
        log: DiagnosticLog,
    ) -> tuple[dict[str, SelectionResult], dict[str, TestMatchingError]]:
        names = list(frameworks) if frameworks else list(self.config.integrations)
        selections: dict[str, SelectionResult] = {}
        errors: dict[str, TestMatchingError] = {}
        for framework in names:
            if not features:
                selections[framework] = SelectionResult(framework=framework)
                continue
            try:
                corpus = self._corpus_factory(self.config, framework, self.repo_root)
                tests = await asyncio.to_thread(corpus.list_test_files)
            except TestMatchingError as e:
                errors[framework] = e
                log.emit(
                    Diagnostic(
                        stage="matching",
                        event="framework_unavailable",
                        severity="error",
                        data={"framework": framework},
                        error=e,
                    )
                )
                continue
            selection = self._matcher.select(features, tests, framework)
            selections[framework] = selection
            log.emit(
                Diagnostic(
                    stage="matching",
                    event="tests_selected",
                    data={"framework": framework, **selection.summary.to_dict()},
                )
            )
        return selections, errors

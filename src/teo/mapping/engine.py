"""Strategy fan-out / fan-in.

Strategies run concurrently on a bounded thread pool. Each one produces an
outcome, either a result list or an error, and a failed or slow strategy
only loses its own contribution. The aggregation fold then consumes
successful outcomes in configuration order, never completion order.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from teo.analysis.models import ChangeSet
from teo.config.models import TeoConfig
from teo.core.diagnostics import Diagnostic, DiagnosticSink, NullSink
from teo.core.errors import StrategyExecutionError
from teo.mapping.aggregate import aggregate
from teo.mapping.models import FeatureDefinition, ImpactedFeature, StrategyResult
from teo.mapping.strategies import DetectionStrategy, StrategyContext, build_strategies


@dataclass(frozen=True, slots=True)
class StrategyOutcome:
    """What one strategy produced: results, or the error that replaced them."""

    strategy_id: str
    results: tuple[StrategyResult, ...] = ()
    error: StrategyExecutionError | None = None
    duration_sec: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


class StrategyEngine:
    """Runs detection strategies and merges their output.

    Usage::

        engine = StrategyEngine.from_config(config, context, sink=log)
        features = await engine.detect(change_set, registry)
    """

    def __init__(
        self,
        strategies: list[DetectionStrategy],
        *,
        workers: int = 4,
        timeout_sec: float = 60.0,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self.strategies = list(strategies)
        self._workers = max(1, workers)
        self._timeout = timeout_sec
        self._sink: DiagnosticSink = sink if sink is not None else NullSink()

    @classmethod
    def from_config(
        cls,
        config: TeoConfig,
        context: StrategyContext,
        sink: DiagnosticSink | None = None,
    ) -> StrategyEngine:
        return cls(
            build_strategies(config.feature_detection.strategies, context),
            workers=config.analysis.strategy_workers,
            timeout_sec=config.analysis.strategy_timeout_sec,
            sink=sink,
        )

    async def run(
        self, change_set: ChangeSet, registry: Mapping[str, FeatureDefinition]
    ) -> list[StrategyOutcome]:
        """Run every strategy; outcomes come back in strategy order."""
        if not self.strategies:
            return []
        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(
            max_workers=min(self._workers, len(self.strategies)),
            thread_name_prefix="teo-strategy",
        )

        async def run_one(strategy: DetectionStrategy) -> StrategyOutcome:
            start = time.perf_counter()
            try:
                results = await asyncio.wait_for(
                    loop.run_in_executor(executor, strategy.detect, change_set, registry),
                    timeout=self._timeout,
                )
            except TimeoutError:
                return StrategyOutcome(
                    strategy_id=strategy.strategy_id,
                    error=StrategyExecutionError.timed_out(strategy.strategy_id, self._timeout),
                    duration_sec=time.perf_counter() - start,
                )
            except Exception as e:  # noqa: BLE001
                error = StrategyExecutionError.failed(strategy.strategy_id, f"{type(e).__name__}: {e}")
                error.__cause__ = e
                return StrategyOutcome(
                    strategy_id=strategy.strategy_id,
                    error=error,
                    duration_sec=time.perf_counter() - start,
                )
            return StrategyOutcome(
                strategy_id=strategy.strategy_id,
                results=tuple(results),
                duration_sec=time.perf_counter() - start,
            )

        try:
            outcomes = await asyncio.gather(*(run_one(s) for s in self.strategies))
        finally:
            # A timed-out strategy may still be running; don't wait for it.
            executor.shutdown(wait=False, cancel_futures=True)

        for outcome in outcomes:
            if outcome.ok:
                self._sink.emit(
                    Diagnostic(
                        stage="strategy",
                        event="strategy_completed",
                        severity="debug",
                        data={
                            "strategy": outcome.strategy_id,
                            "results": len(outcome.results),
                            "duration_sec": round(outcome.duration_sec, 4),
                        },
                    )
                )
            else:
                self._sink.emit(
                    Diagnostic(
                        stage="strategy",
                        event="strategy_failed",
                        severity="warning",
                        data={"strategy": outcome.strategy_id},
                        error=outcome.error,
                    )
                )
        return outcomes

    async def detect(
        self, change_set: ChangeSet, registry: Mapping[str, FeatureDefinition]
    ) -> list[ImpactedFeature]:
        """Fan out, then fold successful outcomes into a ranked list."""
        outcomes = await self.run(change_set, registry)
        features = aggregate(r for outcome in outcomes if outcome.ok for r in outcome.results)
        self._sink.emit(
            Diagnostic(
                stage="aggregation",
                event="features_aggregated",
                data={
                    "features": len(features),
                    "strategies_ok": sum(1 for o in outcomes if o.ok),
                    "strategies_failed": sum(1 for o in outcomes if not o.ok),
                },
            )
        )
        return features

"""Optional confidence adjustment by an external advisor.

An advisor (typically an LLM client living outside this package) looks at
the change set and the ranked features and returns one overall confidence.
Each feature's confidence is nudged up by ``advice.confidence * weight``,
capped at 1.0. Advisors never remove or add features.
"""

from __future__ import annotations

import asyncio
import importlib
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import Any, Protocol

from teo.analysis.models import ChangeSet
from teo.core.diagnostics import Diagnostic, DiagnosticSink, NullSink
from teo.core.errors import ConfigError
from teo.mapping.models import ImpactedFeature

DEFAULT_WEIGHT = 0.2

PROMPT_TEMPLATE = """\
Analyze the impact of code changes on test requirements:

Changed Files: {files}
Detected Features: {features}
Languages: {languages}

Please assess:
1. Which features are most likely impacted by these changes?
2. What types of tests should be prioritized?
3. Are there any cross-feature dependencies to consider?
4. Risk level of these changes (low/medium/high)?

Provide a structured analysis with confidence scores."""


@dataclass(frozen=True)
class Advice:
    """What an advisor returned."""

    confidence: float = 0.8
    reasoning: str = ""
    recommendations: tuple[str, ...] = ()
    provider: str = "unknown"

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"advice confidence {self.confidence} outside [0, 1]")


class Advisor(Protocol):
    async def assess(self, change_set: ChangeSet, features: Sequence[ImpactedFeature]) -> Advice: ...


def load_advisor(target: str) -> Advisor:
    """Build the advisor named by a ``module:attribute`` import path.

    Raises:
        ConfigError: The module or attribute cannot be imported.
    """
    module_name, _, attr = target.partition(":")
    try:
        factory = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise ConfigError.invalid_value("advisory.advisor", target, str(e)) from e
    return factory()  # type: ignore[no-any-return]


@dataclass(frozen=True)
class AdvisoryOutcome:
    advice: Advice
    features: list[ImpactedFeature] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.advice.provider,
            "confidence": self.advice.confidence,
            "reasoning": self.advice.reasoning,
            "recommendations": list(self.advice.recommendations),
            "enhanced_features": [
                {"feature": f.feature_name, "confidence": f.confidence} for f in self.features
            ],
        }


def build_prompt(change_set: ChangeSet, features: Sequence[ImpactedFeature]) -> str:
    return PROMPT_TEMPLATE.format(
        files=", ".join(change_set.paths()),
        features=", ".join(f.feature_name for f in features),
        languages=", ".join(sorted(change_set.languages_affected)),
    )


def apply_advice(
    features: Sequence[ImpactedFeature], advice: Advice, weight: float = DEFAULT_WEIGHT
) -> list[ImpactedFeature]:
    """Raise each confidence by ``advice.confidence * weight`` (max 1.0), re-rank stably."""
    adjusted = [
        replace(
            f,
            confidence=min(f.confidence + advice.confidence * weight, 1.0),
            metadata={
                **f.metadata,
                "pre_advice_confidence": f.confidence,
                "advice_confidence": advice.confidence,
            },
        )
        for f in features
    ]
    return sorted(adjusted, key=lambda f: f.confidence, reverse=True)


async def consult(
    advisor: Advisor,
    change_set: ChangeSet,
    features: Sequence[ImpactedFeature],
    *,
    weight: float = DEFAULT_WEIGHT,
    timeout_sec: float = 30.0,
    sink: DiagnosticSink | None = None,
) -> AdvisoryOutcome | None:
    """Ask ``advisor`` and apply its advice; None if it failed or timed out."""
    sink = sink if sink is not None else NullSink()
    try:
        advice = await asyncio.wait_for(advisor.assess(change_set, features), timeout=timeout_sec)
    except TimeoutError:
        sink.emit(
            Diagnostic(
                stage="advisory",
                event="advisory_timeout",
                severity="warning",
                data={"timeout_sec": timeout_sec},
            )
        )
        return None
    except Exception as e:  # noqa: BLE001
        sink.emit(
            Diagnostic(
                stage="advisory",
                event="advisory_failed",
                severity="warning",
                data={"reason": f"{type(e).__name__}: {e}"},
            )
        )
        return None

    adjusted = apply_advice(features, advice, weight)
    sink.emit(
        Diagnostic(
            stage="advisory",
            event="advisory_applied",
            data={"provider": advice.provider, "confidence": advice.confidence},
        )
    )
    return AdvisoryOutcome(advice=advice, features=adjusted)

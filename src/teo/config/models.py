"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (TEO__SECTION__KEY)
3. Repo YAML (teo.yaml or .teo/config.yaml), with ${VAR} substitution
4. Built-in defaults (this file)

Environment Variable Format:
    TEO__<SECTION>__<KEY>=<VALUE>

Examples:
    TEO__LOGGING__LEVEL=DEBUG
    TEO__ANALYSIS__STRATEGY_WORKERS=8
    TEO__ADVISORY__ENABLED=false
"""

import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

StrategyKind = Literal["folder_based", "file_based", "annotation_based", "symbol_based"]

# Older configs name the symbol strategy after the syntax tree it reads.
_STRATEGY_ALIASES = {"ast_based": "symbol_based"}


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        TEO__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG prints per-file and per-strategy detail.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class StrategyConfig(BaseModel):
    """One detection strategy entry under ``feature_detection.strategies``."""

    type: StrategyKind
    weight: float = Field(default=1.0, ge=0.0, le=1.0)
    enabled: bool = True
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Strategy-specific options (e.g. annotation 'patterns').",
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            kind = data.get("type")
            if isinstance(kind, str):
                data["type"] = _STRATEGY_ALIASES.get(kind, kind)
            # "config" is the legacy key for per-strategy options
            if "config" in data and "options" not in data:
                data["options"] = data.pop("config") or {}
        return data

    @model_validator(mode="after")
    def _check_patterns(self) -> "StrategyConfig":
        patterns = self.options.get("patterns")
        if self.type != "annotation_based" or patterns is None:
            return self
        if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
            raise ValueError("annotation patterns must be a list of regular expressions")
        for pattern in patterns:
            try:
                compiled = re.compile(pattern, re.IGNORECASE)
            except re.error as e:
                raise ValueError(f"invalid annotation pattern {pattern!r}: {e}") from e
            if compiled.groups < 1:
                raise ValueError(f"annotation pattern {pattern!r} needs a group capturing the feature name")
        return self


def _default_strategies() -> list[StrategyConfig]:
    return [
        StrategyConfig(type="folder_based", weight=0.3),
        StrategyConfig(type="file_based", weight=0.4),
        StrategyConfig(type="annotation_based", weight=0.2),
    ]


class FeatureDetectionConfig(BaseModel):
    """Which strategies run, in which order, with which weight.

    Order matters: aggregation folds strategy outputs in this order, so on a
    metadata key collision the later strategy wins.
    """

    strategies: list[StrategyConfig] = Field(default_factory=_default_strategies)


class FeatureConfig(BaseModel):
    """One entry of the ``features`` mapping."""

    source_patterns: list[str]
    test_patterns: list[str] = Field(default_factory=list)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    metadata: dict[str, Any] = Field(default_factory=dict)


class IntegrationConfig(BaseModel):
    """Test corpus adapter for one framework."""

    framework: str | None = None
    test_dir: str = "tests"
    test_patterns: list[str] = Field(default_factory=lambda: ["**/*.spec.js", "**/*.spec.ts"])
    config_file: str | None = None
    runner_command: str = Field(
        default="npx playwright test",
        description="Command prefix used by the json/script output formats.",
    )


def _default_integrations() -> dict[str, IntegrationConfig]:
    return {"playwright": IntegrationConfig(framework="playwright", config_file="playwright.config.js")}


class ExecutionStrategyConfig(BaseModel):
    """Named confidence threshold preset (e.g. ``fast``, ``balanced``)."""

    description: str = ""
    confidence_threshold: float = Field(default=0.0, ge=0.0, le=1.0)


def _default_execution_strategies() -> dict[str, ExecutionStrategyConfig]:
    return {
        "fast": ExecutionStrategyConfig(
            description="Only high-confidence impacts",
            confidence_threshold=0.8,
        ),
        "balanced": ExecutionStrategyConfig(
            description="Drop weak signals",
            confidence_threshold=0.3,
        ),
        "thorough": ExecutionStrategyConfig(
            description="Everything any strategy reported",
            confidence_threshold=0.0,
        ),
    }


class AnalysisConfig(BaseModel):
    """Worker limits and per-unit time budgets.

    Env vars:
        TEO__ANALYSIS__ENRICH_WORKERS: Parallel per-file syntax extraction
        TEO__ANALYSIS__STRATEGY_WORKERS: Parallel strategy execution
        TEO__ANALYSIS__FILE_TIMEOUT_SEC: Budget for one file's enrichment
        TEO__ANALYSIS__STRATEGY_TIMEOUT_SEC: Budget for one strategy
    """

    enrich_workers: int = Field(default=8, ge=1)
    strategy_workers: int = Field(default=4, ge=1)
    file_timeout_sec: float = Field(default=10.0, gt=0)
    strategy_timeout_sec: float = Field(default=60.0, gt=0)
    find_renames: bool = Field(
        default=True,
        description="Ask the VCS for rename detection so old_path is populated.",
    )


class AdvisoryConfig(BaseModel):
    """Optional post-hoc confidence adjustment by an external advisor.

    ``advisor`` is a ``module:attribute`` import path; the attribute is called
    with no arguments and must return an object with an async ``assess``.
    """

    enabled: bool = False
    advisor: str | None = None
    weight: float = Field(default=0.2, ge=0.0, le=1.0)
    timeout_sec: float = Field(default=30.0, gt=0)

    @field_validator("advisor")
    @classmethod
    def validate_advisor(cls, v: str | None) -> str | None:
        if v is None:
            return v
        module, _, attr = v.partition(":")
        if not module or not attr:
            raise ValueError(f"advisor must look like 'package.module:attribute': {v}")
        return v


class TeoConfig(BaseModel):
    """Root configuration model."""

    project_name: str = "my-project"
    repo_path: str = "."
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    feature_detection: FeatureDetectionConfig = Field(default_factory=FeatureDetectionConfig)
    features: dict[str, FeatureConfig] = Field(default_factory=dict)
    integrations: dict[str, IntegrationConfig] = Field(default_factory=_default_integrations)
    execution_strategies: dict[str, ExecutionStrategyConfig] = Field(
        default_factory=_default_execution_strategies
    )
    default_strategy: str = "balanced"
    advisory: AdvisoryConfig = Field(default_factory=AdvisoryConfig)

    def threshold_for(self, strategy: str | None = None) -> float:
        """Confidence threshold of a named execution strategy (0.0 if unknown)."""
        preset = self.execution_strategies.get(strategy or self.default_strategy)
        return preset.confidence_threshold if preset else 0.0

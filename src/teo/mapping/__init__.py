"""Feature detection: strategies, engine, and aggregation."""

from teo.mapping.aggregate import aggregate, filter_by_confidence, merge, summarize_features
from teo.mapping.engine import StrategyEngine, StrategyOutcome
from teo.mapping.globs import TestLocator, expand_braces, matches_any, matches_glob
from teo.mapping.models import FeatureDefinition, ImpactedFeature, StrategyResult
from teo.mapping.registry import FeatureRegistry, feature_registry
from teo.mapping.strategies import (
    STRATEGY_TABLE,
    AnnotationStrategy,
    DetectionStrategy,
    FileStrategy,
    FolderStrategy,
    StrategyContext,
    SymbolStrategy,
    build_strategies,
)

__all__ = [
    # Models
    "FeatureDefinition",
    "StrategyResult",
    "ImpactedFeature",
    # Registry
    "FeatureRegistry",
    "feature_registry",
    # Globs
    "TestLocator",
    "expand_braces",
    "matches_glob",
    "matches_any",
    # Strategies
    "STRATEGY_TABLE",
    "DetectionStrategy",
    "StrategyContext",
    "FolderStrategy",
    "FileStrategy",
    "AnnotationStrategy",
    "SymbolStrategy",
    "build_strategies",
    # Engine / aggregation
    "StrategyEngine",
    "StrategyOutcome",
    "aggregate",
    "merge",
    "filter_by_confidence",
    "summarize_features",
]

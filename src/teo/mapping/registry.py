"""Feature registry built from configuration."""

from __future__ import annotations

from collections.abc import Mapping

from teo.config.models import TeoConfig
from teo.mapping.models import FeatureDefinition

FeatureRegistry = Mapping[str, FeatureDefinition]


def feature_registry(config: TeoConfig) -> dict[str, FeatureDefinition]:
    """Ordered ``name -> FeatureDefinition`` in config declaration order."""
    return {
        name: FeatureDefinition(
            name=name,
            source_patterns=tuple(feature.source_patterns),
            test_patterns=tuple(feature.test_patterns),
            static_confidence=feature.confidence,
            metadata=dict(feature.metadata),
        )
        for name, feature in config.features.items()
    }

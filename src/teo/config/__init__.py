"""Config module exports."""

from teo.config.loader import find_config_file, load_config
from teo.config.models import (
    AdvisoryConfig,
    AnalysisConfig,
    FeatureConfig,
    IntegrationConfig,
    LoggingConfig,
    StrategyConfig,
    TeoConfig,
)
from teo.config.user_config import write_default_config

__all__ = [
    "load_config",
    "find_config_file",
    "write_default_config",
    "TeoConfig",
    "AnalysisConfig",
    "AdvisoryConfig",
    "FeatureConfig",
    "IntegrationConfig",
    "LoggingConfig",
    "StrategyConfig",
]

"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (TEO__SECTION__KEY)
3. Repo YAML (teo.yaml, or .teo/config.yaml), after ${VAR} substitution
4. Built-in defaults (lowest priority)
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from teo.config.models import (
    AdvisoryConfig,
    AnalysisConfig,
    ExecutionStrategyConfig,
    FeatureConfig,
    FeatureDetectionConfig,
    IntegrationConfig,
    LoggingConfig,
    TeoConfig,
    _default_execution_strategies,
    _default_integrations,
)
from teo.core.errors import ConfigError

CONFIG_FILENAMES: tuple[str, ...] = ("teo.yaml", "teo.yml", ".teo/config.yaml")

# ${VAR} or ${VAR:-default}
_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def find_config_file(repo_root: Path) -> Path | None:
    """First existing config file under ``repo_root``."""
    for name in CONFIG_FILENAMES:
        candidate = repo_root / name
        if candidate.is_file():
            return candidate
    return None


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


def substitute_env_vars(value: Any) -> Any:
    """Replace ``${VAR}`` / ``${VAR:-default}`` in every string, recursively.

    Unset variables without a default become the empty string.
    """
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), value)
    if isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(v) for v in value]
    return value


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source (thread-safe)."""

    class TeoSettings(BaseSettings):
        """Root config. Env vars: TEO__LOGGING__LEVEL, TEO__ANALYSIS__STRATEGY_WORKERS, etc."""

        model_config = SettingsConfigDict(
            env_prefix="TEO__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        project_name: str = "my-project"
        repo_path: str = "."
        logging: LoggingConfig = LoggingConfig()
        analysis: AnalysisConfig = AnalysisConfig()
        feature_detection: FeatureDetectionConfig = FeatureDetectionConfig()
        features: dict[str, FeatureConfig] = {}
        integrations: dict[str, IntegrationConfig] = _default_integrations()
        execution_strategies: dict[str, ExecutionStrategyConfig] = _default_execution_strategies()
        default_strategy: str = "balanced"
        advisory: AdvisoryConfig = AdvisoryConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return TeoSettings


def load_config(
    repo_root: Path | None = None,
    config_path: Path | None = None,
    **kwargs: Any,
) -> TeoConfig:
    """Load config: defaults < yaml < env vars < kwargs.

    Args:
        repo_root: Repository root to search for a config file.
                   Defaults to current working directory.
        config_path: Explicit config file. Must exist if given.
        **kwargs: Override values (highest precedence).

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On a missing explicit file, invalid YAML, or validation errors.
    """
    repo_root = repo_root or Path.cwd()

    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError.file_not_found(str(config_path))
        path: Path | None = config_path
    else:
        path = find_config_file(repo_root)

    yaml_config = substitute_env_vars(_load_yaml(path)) if path else {}

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
        return TeoConfig.model_validate(settings.model_dump())
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e

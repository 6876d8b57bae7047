"""Starter configuration file written by ``teo init``.

The generated file is meant to be edited: every section is present with
commented examples, and feature definitions start empty.
"""

from pathlib import Path

import yaml

from teo.config.models import StrategyConfig, TeoConfig

CONFIG_HEADER = """\
# TEO - Test Execution Optimizer configuration
# Values may reference environment variables: ${VAR} or ${VAR:-default}
# Every key can also be overridden with TEO__SECTION__KEY environment variables.

"""

_EXAMPLE_FEATURES = """\
# Feature definitions. Keys are feature names; patterns are globs relative to
# the repository root.
#
# features:
#   authentication:
#     source_patterns: ["src/auth/**"]
#     test_patterns: ["tests/auth/**"]
#     confidence: 1.0
#     metadata:
#       owner: identity-team
"""


def write_default_config(path: Path, project_name: str | None = None) -> TeoConfig:
    """Write a starter config file and return the config it describes.

    Args:
        path: Destination file (parent directories are created).
        project_name: Defaults to the repository directory name.
    """
    cfg = TeoConfig(
        project_name=project_name or path.parent.name or "my-project",
        feature_detection={  # type: ignore[arg-type]
            "strategies": [
                StrategyConfig(type="folder_based", weight=0.3),
                StrategyConfig(type="file_based", weight=0.4),
                StrategyConfig(type="annotation_based", weight=0.2),
                StrategyConfig(type="symbol_based", weight=0.1, enabled=False),
            ]
        },
    )

    data = cfg.model_dump(
        include={
            "project_name",
            "repo_path",
            "feature_detection",
            "integrations",
            "execution_strategies",
            "default_strategy",
            "advisory",
        },
        exclude_none=True,
    )

    path.parent.mkdir(parents=True, exist_ok=True)
    content = CONFIG_HEADER + yaml.dump(data, default_flow_style=False, sort_keys=False)
    path.write_text(content + "\n" + _EXAMPLE_FEATURES)
    return cfg


"""CLI utilities."""

from pathlib import Path

import click

from teo.config import load_config
from teo.config.models import TeoConfig
from teo.core.errors import ConfigError


def find_repo_root(start_path: Path | None = None) -> Path:
    """Find the git repository root from the given path.

    Walks up the directory tree looking for a .git entry.

    Raises:
        click.ClickException: If not inside a git repository
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()
    while current != current.parent:
        if (current / ".git").exists():
            return current
        current = current.parent
    if (current / ".git").exists():
        return current

    raise click.ClickException(
        f"Not inside a git repository: {start_path}\n"
        "teo compares two revisions and must run inside a git repository."
    )


def load_cli_config(repo_root: Path, config_path: Path | None) -> TeoConfig:
    """load_config with ConfigError turned into a click error."""
    try:
        return load_config(repo_root, config_path=config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

"""teo init command - write a starter configuration."""

from pathlib import Path

import click

from teo.cli.utils import find_repo_root
from teo.config import write_default_config
from teo.config.loader import CONFIG_FILENAMES
from teo.core.progress import status


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.option("--project-name", default=None, help="Project name (default: directory name)")
def init_command(path: Path, force: bool, project_name: str | None) -> None:
    """Write teo.yaml in the repository at PATH (default: current directory)."""
    repo_root = find_repo_root(path)
    existing = [repo_root / name for name in CONFIG_FILENAMES if (repo_root / name).exists()]
    if existing and not force:
        status(f"Already configured: {existing[0]}", style="info")
        status("Use --force to overwrite", style="info")
        return

    target = repo_root / CONFIG_FILENAMES[0]
    write_default_config(target, project_name=project_name or repo_root.name)
    status(f"Wrote {target}", style="success")
    status("Add feature definitions under 'features:' to enable file-based mapping", style="info")

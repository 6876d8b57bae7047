"""teo validate command - check repository, config, and integrations."""

import asyncio
import json
from pathlib import Path

import click
from rich.table import Table

from teo.analysis.diff import DiffAnalyzer
from teo.cli.utils import find_repo_root, load_cli_config
from teo.core.errors import RepositoryError, TestMatchingError
from teo.core.progress import get_console, status
from teo.selection.corpus import ValidationReport, corpus_for


async def _check_repository(repo_root: Path) -> str:
    async with DiffAnalyzer(repo_root) as analyzer:
        return await analyzer.resolve_revision("HEAD")


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def validate_command(path: Path, config_path: Path | None, as_json: bool) -> None:
    """Validate the setup of the repository at PATH."""
    repo_root = find_repo_root(path)
    config = load_cli_config(repo_root, config_path)

    repo_error: str | None = None
    head: str | None = None
    try:
        head = asyncio.run(_check_repository(repo_root))
    except RepositoryError as e:
        repo_error = str(e)

    reports: list[ValidationReport] = []
    for framework in config.integrations:
        try:
            reports.append(corpus_for(config, framework, repo_root).validate())
        except TestMatchingError as e:
            reports.append(ValidationReport(framework=framework, valid=False, errors=[e.message]))

    valid = repo_error is None and all(r.valid for r in reports)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "valid": valid,
                    "repository": {"valid": repo_error is None, "head": head, "error": repo_error},
                    "features": len(config.features),
                    "frameworks": {r.framework: r.to_dict() for r in reports},
                },
                indent=2,
            )
        )
    else:
        if repo_error is None and head is not None:
            status(f"Repository: {repo_root} (HEAD {head[:7]})", style="success")
        else:
            status(f"Repository: {repo_error}", style="error")
        status(f"Features defined: {len(config.features)}", style="info")

        table = Table(show_header=True, header_style="bold")
        table.add_column("Framework")
        table.add_column("Valid")
        table.add_column("Details")
        for report in reports:
            details = [*report.errors, *report.warnings, *report.info.values()]
            table.add_row(
                report.framework,
                "[green]yes[/green]" if report.valid else "[red]no[/red]",
                "\n".join(details),
            )
        get_console().print(table)

    if not valid:
        raise SystemExit(1)

"""TEO CLI - teo command."""

import click

from teo.cli.analyze import analyze_command
from teo.cli.init import init_command
from teo.cli.validate import validate_command
from teo.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="teo")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """TEO - select the tests impacted by a change."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(verbose=verbose)


cli.add_command(analyze_command, name="analyze")
cli.add_command(validate_command, name="validate")
cli.add_command(init_command, name="init")


if __name__ == "__main__":
    cli()

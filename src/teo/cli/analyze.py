"""teo analyze command - select tests for a revision range."""

import asyncio
from pathlib import Path

import click

from teo.advisory import load_advisor
from teo.cli.output import OUTPUT_FORMATS, render
from teo.cli.utils import find_repo_root, load_cli_config
from teo.core.errors import TeoError
from teo.core.logging import configure_logging, get_log_file_path
from teo.core.progress import pluralize, spinner, status
from teo.pipeline import ImpactPipeline


@click.command()
@click.option("--base", "base_ref", required=True, help="Base revision (branch, tag, or sha)")
@click.option("--head", "head_ref", default="HEAD", show_default=True, help="Head revision")
@click.option("--framework", default=None, help="Integration to select for (default: first configured)")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(OUTPUT_FORMATS),
    default="paths",
    show_default=True,
    help="Output format",
)
@click.option("--threshold", type=click.FloatRange(0.0, 1.0), default=None, help="Minimum feature confidence")
@click.option("--strategy", "execution_strategy", default=None, help="Named execution strategy (default: config default_strategy)")
@click.option("--no-ai", is_flag=True, help="Skip the configured advisor (advisory.advisor)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.option("--repo", "repo_path", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
@click.option("-o", "--output", "output_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_context
def analyze_command(
    ctx: click.Context,
    base_ref: str,
    head_ref: str,
    framework: str | None,
    fmt: str,
    threshold: float | None,
    execution_strategy: str | None,
    no_ai: bool,
    config_path: Path | None,
    repo_path: Path,
    output_path: Path | None,
) -> None:
    """Analyze BASE..HEAD and print the tests worth running."""
    if threshold is not None and execution_strategy is not None:
        raise click.UsageError("--threshold and --strategy are mutually exclusive")

    repo_root = find_repo_root(repo_path)
    config = load_cli_config(repo_root, config_path)
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    configure_logging(config.logging, verbose=verbose)

    if execution_strategy is not None:
        if execution_strategy not in config.execution_strategies:
            known = ", ".join(sorted(config.execution_strategies))
            raise click.BadParameter(f"unknown strategy '{execution_strategy}' (known: {known})")
        threshold = config.threshold_for(execution_strategy)
    elif threshold is None:
        threshold = config.threshold_for()

    framework = framework or next(iter(config.integrations), None)
    if framework is None:
        raise click.ClickException("No integrations configured; add one under 'integrations:'")

    try:
        advisor = None
        if config.advisory.enabled and config.advisory.advisor and not no_ai:
            advisor = load_advisor(config.advisory.advisor)
        pipeline = ImpactPipeline(config, repo_root, advisor=advisor)
        with spinner(f"Analyzing {base_ref}..{head_ref}"):
            result = asyncio.run(
                pipeline.run(
                    base_ref,
                    head_ref,
                    frameworks=[framework],
                    use_advisory=not no_ai,
                    confidence_threshold=threshold,
                )
            )
    except TeoError as e:
        log_file = get_log_file_path()
        suffix = f". See {log_file} for details." if log_file else ""
        raise click.ClickException(f"{e}{suffix}") from e

    if framework in result.framework_errors:
        raise click.ClickException(str(result.framework_errors[framework]))

    runner = config.integrations[framework].runner_command
    text = render(result, framework, fmt, runner_command=runner)
    if output_path is not None:
        output_path.write_text(text if text.endswith("\n") else text + "\n")
        if fmt == "script":
            output_path.chmod(0o755)
        status(f"Wrote {output_path}", style="success")
    else:
        click.echo(text)

    summary = result.summary(framework)
    status(
        f"{pluralize(summary.features_detected, 'feature')}, "
        f"{summary.tests_selected}/{summary.tests_available} tests selected "
        f"({summary.reduction_percentage}% reduction)",
        style="success",
    )

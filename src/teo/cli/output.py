"""Renderings of a selection for humans, scripts, and CI."""

from __future__ import annotations

import io
import json
import shlex
from datetime import UTC, datetime
from typing import Literal

from rich.console import Console
from rich.table import Table

from teo.pipeline import AnalysisResult
from teo.selection.models import SelectionResult, percent

OutputFormat = Literal["paths", "json", "script", "table"]
OUTPUT_FORMATS: tuple[str, ...] = ("paths", "json", "script", "table")


def runner_invocation(runner_command: str, selection: SelectionResult) -> str:
    return " ".join([runner_command, *(shlex.quote(p) for p in selection.paths)])


def format_paths(selection: SelectionResult) -> str:
    return " ".join(selection.paths)


def format_json(result: AnalysisResult, selection: SelectionResult, runner_command: str) -> str:
    payload = {
        "run_id": result.run_id,
        "summary": result.summary(selection.framework).to_dict(),
        "selected_tests": [e.to_dict() for e in selection.entries],
        "selection_reasons": [r.to_dict() for r in selection.reasons],
        "features": [f.to_dict() for f in result.features],
        "runner_command": runner_invocation(runner_command, selection),
    }
    if result.advisory is not None:
        payload["advisory"] = result.advisory.to_dict()
    return json.dumps(payload, indent=2)


def format_script(selection: SelectionResult, runner_command: str) -> str:
    s = selection.summary
    lines = [
        "#!/bin/bash",
        f"# Generated by teo for {selection.framework}",
        f"# Generated: {datetime.now(UTC).isoformat()}",
        f"# Tests selected: {s.total_selected}/{s.total_available} ({s.reduction_percentage}% reduction)",
        "set -euo pipefail",
        "",
    ]
    if not selection.entries:
        lines.append('echo "No tests selected."')
        return "\n".join(lines) + "\n"
    lines.append(
        f'echo "Selected {s.total_selected} out of {s.total_available} tests '
        f'({s.reduction_percentage}% reduction)"'
    )
    lines.append(f"{runner_command} \\")
    lines.extend(f"  {shlex.quote(p)} \\" for p in selection.paths[:-1])
    lines.append(f"  {shlex.quote(selection.paths[-1])}")
    return "\n".join(lines) + "\n"


def build_table(selection: SelectionResult) -> Table:
    s = selection.summary
    table = Table(
        title=f"{selection.framework}: {s.total_selected}/{s.total_available} tests "
        f"({s.reduction_percentage}% reduction)",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Test", style="cyan", no_wrap=True)
    table.add_column("Feature")
    table.add_column("Confidence", justify="right")
    table.add_column("Strategies", style="dim")
    for entry in selection.entries:
        table.add_row(
            entry.test_path,
            entry.source_feature,
            f"{percent(entry.confidence)}%",
            ", ".join(entry.strategies),
        )
    return table


def format_table(selection: SelectionResult, width: int = 120) -> str:
    buf = io.StringIO()
    Console(file=buf, width=width, force_terminal=False, color_system=None).print(build_table(selection))
    return buf.getvalue()


def render(
    result: AnalysisResult,
    framework: str,
    fmt: str = "paths",
    runner_command: str = "npx playwright test",
) -> str:
    """Render the selection for ``framework`` in ``fmt``.

    Raises:
        ValueError: Unknown format, or no selection for that framework.
    """
    selection = result.selection(framework)
    if selection is None:
        raise ValueError(f"No test selection for framework: {framework}")
    if fmt == "paths":
        return format_paths(selection)
    if fmt == "json":
        return format_json(result, selection, runner_command)
    if fmt == "script":
        return format_script(selection, runner_command)
    if fmt == "table":
        return format_table(selection)
    raise ValueError(f"Unsupported output format: {fmt}")

"""User-facing status output for CLI commands.

Status lines and spinners go to stderr so stdout stays clean for selected
test paths, JSON, or scripts that callers pipe elsewhere.

Usage::

    from teo.core.progress import spinner, status

    with spinner("Analyzing main..HEAD"):
        result = run()
    status("3 tests selected", style="success")
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from rich.console import Console

_console = Console(stderr=True)

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def _is_tty() -> bool:
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def get_console() -> Console:
    """Get the shared Rich console instance (stderr)."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    _console.print(f"{' ' * indent}{prefix}{message}", highlight=False)
    structlog.get_logger("teo.progress").debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """``pluralize(1, "test")`` -> ``"1 test"``; ``pluralize(2, "test")`` -> ``"2 tests"``."""
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


@contextmanager
def spinner(message: str) -> Iterator[None]:
    """Spinner on a TTY, a single line otherwise."""
    if _is_tty():
        with _console.status(f"[cyan]{message}[/cyan]", spinner="dots"):
            yield
    else:
        _console.print(f"{message}...", highlight=False)
        yield

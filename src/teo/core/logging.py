"""structlog setup for TEO runs.

Every record goes through one processor chain and is rendered per output
(``logging.outputs``): console text or JSON lines, to stderr, stdout or a
file. Records emitted inside ``run_scope`` carry a ``run_id`` so one
analysis can be picked out of a shared log file.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from uuid import uuid4

import structlog

from teo.config.models import LoggingConfig, LogOutputConfig

_log_file_path: Path | None = None

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
]


@contextmanager
def run_scope(run_id: str | None = None) -> Iterator[str]:
    """Bind ``run_id`` to every record logged inside the block.

    Scopes nest; leaving one restores the enclosing id.
    """
    rid = run_id or uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(run_id=rid):
        yield rid


def get_run_id() -> str | None:
    return structlog.contextvars.get_contextvars().get("run_id")


def get_log_file_path() -> Path | None:
    """First file output of the active configuration, for error messages."""
    return _log_file_path


def _renderer(output: LogOutputConfig) -> structlog.types.Processor:
    if output.format == "json":
        return structlog.processors.JSONRenderer()
    stream = sys.stdout if output.destination == "stdout" else sys.stderr
    tty = output.destination in ("stderr", "stdout") and stream.isatty()
    return structlog.dev.ConsoleRenderer(colors=tty, pad_event_to=0, pad_level=False)


def _handler(output: LogOutputConfig, level: int) -> logging.Handler:
    handler: logging.Handler
    if output.destination == "stderr":
        handler = logging.StreamHandler(sys.stderr)
    elif output.destination == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a")
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=_renderer(output), foreign_pre_chain=_PRE_CHAIN)
    )
    return handler


def configure_logging(config: LoggingConfig | None = None, *, verbose: bool = False) -> None:
    """Install handlers for ``config.outputs`` on the root logger.

    Without a config, a single console output on stderr at WARNING is used.
    ``verbose`` forces DEBUG on the root level and on every output.
    """
    global _log_file_path

    config = config or LoggingConfig(level="WARNING")
    root_level = logging.DEBUG if verbose else logging.getLevelName(config.level)

    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        # reconfigured per command
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(root_level)

    _log_file_path = None
    for output in config.outputs:
        if verbose or output.level is None:
            level = root_level
        else:
            level = logging.getLevelName(output.level)
        root.addHandler(_handler(output, level))
        if output.destination not in ("stderr", "stdout") and _log_file_path is None:
            _log_file_path = Path(output.destination)

"""Core module exports."""

from teo.core.diagnostics import (
    Diagnostic,
    DiagnosticLog,
    DiagnosticSink,
    LoggingSink,
    NullSink,
)
from teo.core.errors import (
    AggregationError,
    ConfigError,
    ErrorCode,
    FileAccessError,
    RepositoryError,
    StrategyExecutionError,
    TeoError,
    TestMatchingError,
)
from teo.core.logging import configure_logging, get_log_file_path, get_run_id, run_scope

__all__ = [
    # Errors
    "TeoError",
    "ErrorCode",
    "ConfigError",
    "RepositoryError",
    "StrategyExecutionError",
    "FileAccessError",
    "AggregationError",
    "TestMatchingError",
    # Diagnostics
    "Diagnostic",
    "DiagnosticLog",
    "DiagnosticSink",
    "LoggingSink",
    "NullSink",
    # Logging
    "configure_logging",
    "get_log_file_path",
    "get_run_id",
    "run_scope",
]

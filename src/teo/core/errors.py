"""TEO error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Repository (diff analysis)
- 4xxx: Strategy execution
- 5xxx: File access (enrichment)
- 6xxx: Aggregation
- 7xxx: Test matching
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # Repository (3xxx)
    REPOSITORY_NOT_FOUND = 3001
    REVISION_NOT_FOUND = 3002
    DIFF_FAILED = 3003

    # Strategy (4xxx)
    STRATEGY_FAILED = 4001
    STRATEGY_TIMEOUT = 4002

    # File access (5xxx)
    FILE_UNREADABLE = 5001
    FILE_PARSE_FAILED = 5002
    FILE_TIMEOUT = 5003

    # Aggregation (6xxx)
    AGGREGATION_FAILED = 6001

    # Test matching (7xxx)
    FRAMEWORK_NOT_CONFIGURED = 7001
    CORPUS_UNAVAILABLE = 7002


@dataclass(eq=False)
class TeoError(Exception):
    """Base error with structured context for diagnostics and CLI output."""

    code: ErrorCode
    message: str
    stage: str = "internal"
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'REVISION_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(TeoError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            stage="config",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            stage="config",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            stage="config",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            stage="config",
            details={"path": path},
        )


class RepositoryError(TeoError):
    """Fatal diff-analysis errors. Abort the whole run."""

    @classmethod
    def not_a_repository(cls, path: str) -> "RepositoryError":
        return cls(
            code=ErrorCode.REPOSITORY_NOT_FOUND,
            message=f"Not a git repository: {path}",
            stage="revision_resolution",
            details={"path": path},
        )

    @classmethod
    def unresolved_revision(cls, ref: str, reason: str | None = None) -> "RepositoryError":
        suffix = f": {reason}" if reason else ""
        return cls(
            code=ErrorCode.REVISION_NOT_FOUND,
            message=f"Failed to resolve reference '{ref}'{suffix}",
            stage="revision_resolution",
            details={"ref": ref},
        )

    @classmethod
    def diff_failed(cls, base: str, head: str, reason: str) -> "RepositoryError":
        return cls(
            code=ErrorCode.DIFF_FAILED,
            message=f"Diff between {base[:7]} and {head[:7]} failed: {reason}",
            stage="diff",
            details={"base": base, "head": head, "reason": reason},
        )


class StrategyExecutionError(TeoError):
    """A single detector failed. Recoverable: the strategy contributes nothing."""

    @classmethod
    def failed(cls, strategy_id: str, reason: str) -> "StrategyExecutionError":
        return cls(
            code=ErrorCode.STRATEGY_FAILED,
            message=f"Strategy '{strategy_id}' failed: {reason}",
            stage="strategy",
            details={"strategy": strategy_id, "reason": reason},
        )

    @classmethod
    def timed_out(cls, strategy_id: str, timeout_sec: float) -> "StrategyExecutionError":
        return cls(
            code=ErrorCode.STRATEGY_TIMEOUT,
            message=f"Strategy '{strategy_id}' exceeded {timeout_sec:g}s",
            stage="strategy",
            retryable=True,
            details={"strategy": strategy_id, "timeout_sec": timeout_sec},
        )


class FileAccessError(TeoError):
    """A single file could not be read or parsed during enrichment."""

    @classmethod
    def unreadable(cls, path: str, revision: str, reason: str) -> "FileAccessError":
        return cls(
            code=ErrorCode.FILE_UNREADABLE,
            message=f"Cannot read {path} at {revision[:7]}: {reason}",
            stage="enrichment",
            details={"path": path, "revision": revision, "reason": reason},
        )

    @classmethod
    def parse_failed(cls, path: str, reason: str) -> "FileAccessError":
        return cls(
            code=ErrorCode.FILE_PARSE_FAILED,
            message=f"Syntax extraction failed for {path}: {reason}",
            stage="enrichment",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def timed_out(cls, path: str, timeout_sec: float) -> "FileAccessError":
        return cls(
            code=ErrorCode.FILE_TIMEOUT,
            message=f"Enrichment of {path} exceeded {timeout_sec:g}s",
            stage="enrichment",
            retryable=True,
            details={"path": path, "timeout_sec": timeout_sec},
        )


class AggregationError(TeoError):
    """Defect in the aggregation fold. Non-recoverable."""

    @classmethod
    def invalid_result(cls, feature: str, reason: str) -> "AggregationError":
        return cls(
            code=ErrorCode.AGGREGATION_FAILED,
            message=f"Cannot aggregate result for '{feature}': {reason}",
            stage="aggregation",
            details={"feature": feature, "reason": reason},
        )


class TestMatchingError(TeoError):
    """The test corpus collaborator for one framework is unreachable."""

    __test__ = False  # not a pytest class

    @classmethod
    def framework_not_configured(cls, framework: str, known: list[str]) -> "TestMatchingError":
        return cls(
            code=ErrorCode.FRAMEWORK_NOT_CONFIGURED,
            message=f"Unsupported framework: {framework}",
            stage="matching",
            details={"framework": framework, "configured": known},
        )

    @classmethod
    def corpus_unavailable(cls, framework: str, reason: str) -> "TestMatchingError":
        return cls(
            code=ErrorCode.CORPUS_UNAVAILABLE,
            message=f"Test discovery failed for {framework}: {reason}",
            stage="matching",
            details={"framework": framework, "reason": reason},
        )

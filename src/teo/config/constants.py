"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
These are the heuristic discounts and naming conventions the detection
strategies are calibrated against.

For configurable values, see models.py (AnalysisConfig, StrategyConfig, etc.).
"""

# =============================================================================
# Strategy Confidence Discounts
# =============================================================================
# Applied on top of the configured strategy weight.

FOLDER_CONFIDENCE = 0.8
"""Folder names are a moderate signal."""

ANNOTATION_CONFIDENCE = 0.9
"""Explicit in-source markers are a strong signal."""

SYMBOL_CONFIDENCE = 0.7
"""Symbol-name guesses are the weakest signal."""

# =============================================================================
# Naming Conventions
# =============================================================================

FOLDER_TEST_DIRS: tuple[str, ...] = ("tests", "test", "__tests__", "spec", "e2e")
"""Conventional test roots searched by the folder strategy."""

ANNOTATION_TEST_DIRS: tuple[str, ...] = ("tests", "test", "__tests__")
"""Test roots searched for annotated features."""

SYMBOL_TEST_DIRS: tuple[str, ...] = ("tests", "test")
"""Test roots searched for symbol names."""

TEST_FILE_SUFFIX = "{test,spec}.{js,ts}"
"""Suffix shared by every naming-convention glob."""

DEFAULT_ANNOTATION_PATTERNS: tuple[str, ...] = (
    r"@feature:\s*(\w+)",
    r"//\s*Feature:\s*(\w+)",
    r"#\s*Feature:\s*(\w+)",
)
"""Recognised in-source feature markers (case-insensitive, group 1 is the name)."""

# =============================================================================
# Reporting
# =============================================================================

HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.5
"""Confidence bands used by feature summaries."""

AVG_TEST_DURATION_SEC = 5.0
"""Rough per-test-file duration used for the time-saved estimate."""

"""Test selection: corpus discovery and feature-to-test matching."""

from teo.selection.corpus import GlobTestCorpus, TestCorpus, ValidationReport, corpus_for
from teo.selection.matcher import TestMatcher
from teo.selection.models import (
    SelectionEntry,
    SelectionReason,
    SelectionResult,
    SelectionSummary,
    percent,
)

__all__ = [
    "TestMatcher",
    "TestCorpus",
    "GlobTestCorpus",
    "ValidationReport",
    "corpus_for",
    "SelectionEntry",
    "SelectionReason",
    "SelectionResult",
    "SelectionSummary",
    "percent",
]

"""Diff analysis and syntax enrichment."""

from teo.analysis.diff import DiffAnalyzer
from teo.analysis.models import ChangeRecord, ChangeSet, ChangeType, classify_change
from teo.analysis.syntax import (
    EnrichedChanges,
    SymbolSets,
    SyntaxExtractor,
    enrich_change_set,
)

__all__ = [
    "DiffAnalyzer",
    "SyntaxExtractor",
    "enrich_change_set",
    "EnrichedChanges",
    "SymbolSets",
    "ChangeRecord",
    "ChangeSet",
    "ChangeType",
    "classify_change",
]

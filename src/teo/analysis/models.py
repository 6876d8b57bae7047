"""Change records produced by diff analysis and syntax enrichment."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any


class ChangeType(StrEnum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


def classify_change(insertions: int, deletions: int, binary: bool = False) -> ChangeType:
    """Derive the change kind from line counts.

    This is a line-count convention, not the VCS status: a pure-insertion
    edit of an existing file is ``added`` and a file emptied by the change is
    ``deleted``. Binary files are always ``modified``.
    """
    if binary:
        return ChangeType.MODIFIED
    if insertions > 0 and deletions == 0:
        return ChangeType.ADDED
    if insertions == 0 and deletions > 0:
        return ChangeType.DELETED
    return ChangeType.MODIFIED


@dataclass(frozen=True, slots=True)
class ChangeRecord:
    """One changed file between two revisions."""

    path: str
    change_type: ChangeType
    lines_added: int = 0
    lines_removed: int = 0
    old_path: str | None = None
    binary: bool = False
    language: str | None = None
    changed_functions: frozenset[str] = field(default_factory=frozenset)
    changed_classes: frozenset[str] = field(default_factory=frozenset)
    changed_imports: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.lines_added < 0 or self.lines_removed < 0:
            raise ValueError(f"negative line delta for {self.path}")

    @property
    def is_deleted(self) -> bool:
        return self.change_type is ChangeType.DELETED

    @property
    def symbols(self) -> frozenset[str]:
        """Function and class names (imports excluded)."""
        return self.changed_functions | self.changed_classes

    def with_symbols(
        self,
        functions: frozenset[str] | set[str],
        classes: frozenset[str] | set[str],
        imports: frozenset[str] | set[str],
    ) -> ChangeRecord:
        return replace(
            self,
            changed_functions=frozenset(functions),
            changed_classes=frozenset(classes),
            changed_imports=frozenset(imports),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "change_type": self.change_type.value,
            "old_path": self.old_path,
            "lines_added": self.lines_added,
            "lines_removed": self.lines_removed,
            "binary": self.binary,
            "language": self.language,
            "changed_functions": sorted(self.changed_functions),
            "changed_classes": sorted(self.changed_classes),
            "changed_imports": sorted(self.changed_imports),
        }


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """All changes between ``base_revision`` and ``head_revision``."""

    base_revision: str
    head_revision: str
    records: tuple[ChangeRecord, ...] = ()

    @property
    def total_lines_added(self) -> int:
        return sum(r.lines_added for r in self.records)

    @property
    def total_lines_removed(self) -> int:
        return sum(r.lines_removed for r in self.records)

    @property
    def languages_affected(self) -> frozenset[str]:
        return frozenset(r.language for r in self.records if r.language)

    @property
    def files_changed(self) -> int:
        return len(self.records)

    def paths(self) -> list[str]:
        return [r.path for r in self.records]

    def with_records(self, records: tuple[ChangeRecord, ...] | list[ChangeRecord]) -> ChangeSet:
        return replace(self, records=tuple(records))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ChangeRecord]:
        return iter(self.records)

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_revision": self.base_revision,
            "head_revision": self.head_revision,
            "files_changed": self.files_changed,
            "total_lines_added": self.total_lines_added,
            "total_lines_removed": self.total_lines_removed,
            "languages_affected": sorted(self.languages_affected),
            "records": [r.to_dict() for r in self.records],
        }

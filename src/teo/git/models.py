"""Serializable data models for git operations."""

from __future__ import annotations

from dataclasses import dataclass

import pygit2


@dataclass(frozen=True, slots=True)
class FileDiffStat:
    """Per-file line statistics between two commits.

    ``path`` is the new-side path (for deletions libgit2 reports the old path
    on both sides). ``old_path`` is only set when rename detection paired two
    different paths.
    """

    path: str
    insertions: int
    deletions: int
    binary: bool = False
    old_path: str | None = None


@dataclass(frozen=True, slots=True)
class DiffSummary:
    """File-level diff summary between two commits."""

    base_sha: str
    head_sha: str
    files: tuple[FileDiffStat, ...]

    @property
    def insertions(self) -> int:
        return sum(f.insertions for f in self.files)

    @property
    def deletions(self) -> int:
        return sum(f.deletions for f in self.files)

    @classmethod
    def from_pygit2(cls, diff: pygit2.Diff, base_sha: str, head_sha: str) -> DiffSummary:
        files: list[FileDiffStat] = []
        for patch in diff:
            if patch is None:
                continue
            delta = patch.delta
            binary = bool(delta.is_binary)
            if binary:
                insertions = deletions = 0
            else:
                _, insertions, deletions = patch.line_stats
            old_path = None
            if delta.status == pygit2.GIT_DELTA_RENAMED and delta.old_file.path != delta.new_file.path:
                old_path = delta.old_file.path
            files.append(
                FileDiffStat(
                    path=delta.new_file.path,
                    insertions=insertions,
                    deletions=deletions,
                    binary=binary,
                    old_path=old_path,
                )
            )
        return cls(base_sha=base_sha, head_sha=head_sha, files=tuple(files))

"""Git operations via pygit2 - returns serializable data models."""

from __future__ import annotations

from pathlib import Path

import pygit2

from teo.git._internal import RepoAccess
from teo.git.models import DiffSummary


class GitOps:
    """Thin read-only wrapper around pygit2.Repository with cleaner error handling.

    Instances are not thread-safe; callers that go async confine one
    instance to a single worker thread.
    """

    def __init__(self, repo_path: Path | str) -> None:
        self._access = RepoAccess(repo_path)

    @property
    def repo(self) -> pygit2.Repository:
        """Direct access to the underlying pygit2 Repository."""
        return self._access.repo

    @property
    def path(self) -> Path:
        return self._access.path

    def resolve_revision(self, ref: str) -> str:
        """Resolve a branch, tag, or sha (``HEAD~1`` style refs included) to a commit sha."""
        return str(self._access.resolve_commit(ref).id)

    def diff_summary(self, base: str, head: str, find_renames: bool = True) -> DiffSummary:
        """Per-file insertions/deletions between two revisions."""
        base_commit = self._access.resolve_commit(base)
        head_commit = self._access.resolve_commit(head)
        diff = self._access.diff_commits(base_commit, head_commit, find_renames=find_renames)
        return DiffSummary.from_pygit2(diff, str(base_commit.id), str(head_commit.id))

    def file_content_at(self, path: str, revision: str) -> str:
        """Text content of ``path`` at ``revision``.

        Raises:
            PathNotFoundError: Path is absent (or a directory) at that revision.
        """
        blob = self._access.blob_at(self._access.resolve_commit(revision), path)
        return blob.data.decode("utf-8", errors="replace")

    def list_files(self, revision: str) -> list[str]:
        """Every file path tracked at ``revision``, sorted."""
        commit = self._access.resolve_commit(revision)
        return sorted(self._access.iter_tree_paths(commit.tree))

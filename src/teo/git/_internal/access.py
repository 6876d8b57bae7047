"""Repository access layer - owns pygit2.Repository and exposes computed facts."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pygit2

from teo.git.errors import NotARepositoryError, PathNotFoundError, RefNotFoundError


class RepoAccess:
    """Owns pygit2.Repository and provides normalized read access to repo state."""

    def __init__(self, repo_path: Path | str) -> None:
        self._path = Path(repo_path)
        try:
            self._repo = pygit2.Repository(str(self._path))
        except pygit2.GitError as e:
            raise NotARepositoryError(str(self._path)) from e

    @property
    def repo(self) -> pygit2.Repository:
        return self._repo

    @property
    def path(self) -> Path:
        return Path(self._repo.workdir) if self._repo.workdir else self._path

    # =========================================================================
    # Resolution Helpers
    # =========================================================================

    def resolve_ref_oid(self, ref: str) -> pygit2.Oid:
        try:
            obj, _ = self._repo.resolve_refish(ref)
            return obj.id
        except (pygit2.GitError, KeyError, ValueError) as e:
            raise RefNotFoundError(ref) from e

    def resolve_commit(self, ref: str) -> pygit2.Commit:
        obj: pygit2.Object | None = self._repo.get(self.resolve_ref_oid(ref))
        if isinstance(obj, pygit2.Tag):
            obj = obj.peel(pygit2.Commit)  # type: ignore[assignment]
        if not isinstance(obj, pygit2.Commit):
            raise RefNotFoundError(f"{ref} is not a commit")
        return obj

    # =========================================================================
    # Diff / Content
    # =========================================================================

    def diff_commits(
        self, base: pygit2.Commit, head: pygit2.Commit, find_renames: bool = True
    ) -> pygit2.Diff:
        diff = self._repo.diff(base.tree, head.tree)
        if find_renames:
            diff.find_similar()
        return diff

    def blob_at(self, commit: pygit2.Commit, path: str) -> pygit2.Blob:
        try:
            entry = commit.tree[path]
        except KeyError as e:
            raise PathNotFoundError(path, str(commit.id)) from e
        blob = self._repo.get(entry.id)
        if not isinstance(blob, pygit2.Blob):
            raise PathNotFoundError(path, str(commit.id))
        return blob

    def iter_tree_paths(self, tree: pygit2.Tree, prefix: str = "") -> Iterator[str]:
        """Yield every blob path in ``tree``, depth-first, repo-relative."""
        for entry in tree:
            name = f"{prefix}{entry.name}"
            if entry.type_str == "tree":
                subtree = self._repo.get(entry.id)
                if isinstance(subtree, pygit2.Tree):
                    yield from self.iter_tree_paths(subtree, f"{name}/")
            elif entry.type_str == "blob":
                yield name

"""Async diff analysis over a git repository.

pygit2 objects are not safe to share across threads, so every repository
call runs on one dedicated worker thread. Callers see coroutines; the event
loop never blocks on libgit2.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TypeVar

import pygit2

from teo.analysis.models import ChangeRecord, ChangeSet, classify_change
from teo.core.diagnostics import Diagnostic, DiagnosticSink, NullSink
from teo.core.errors import FileAccessError, RepositoryError
from teo.core.languages import detect_language
from teo.git import GitOps, NotARepositoryError, PathNotFoundError, RefNotFoundError
from teo.git.models import DiffSummary

T = TypeVar("T")


class DiffAnalyzer:
    """Resolves revisions and turns a two-commit diff into a ``ChangeSet``.

    Usage::

        async with DiffAnalyzer(repo_root) as analyzer:
            change_set = await analyzer.analyze("main", "HEAD")
    """

    def __init__(
        self,
        repo_path: Path | str,
        *,
        find_renames: bool = True,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self._repo_path = Path(repo_path)
        self._find_renames = find_renames
        self._sink: DiagnosticSink = sink if sink is not None else NullSink()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="teo-git")
        self._git: GitOps | None = None

    async def __aenter__(self) -> DiffAnalyzer:
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._git = None

    # =========================================================================
    # Worker-thread plumbing
    # =========================================================================

    def _ops(self) -> GitOps:
        # Only ever called on the worker thread.
        if self._git is None:
            try:
                self._git = GitOps(self._repo_path)
            except NotARepositoryError as e:
                raise RepositoryError.not_a_repository(str(self._repo_path)) from e
        return self._git

    async def _call(self, fn: Callable[..., T], *args: object) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, fn, *args)

    # =========================================================================
    # Public API
    # =========================================================================

    async def resolve_revision(self, ref: str) -> str:
        """Resolve ``ref`` to a full commit sha."""
        return await self._call(self._resolve_sync, ref)

    async def analyze(self, base_ref: str, head_ref: str) -> ChangeSet:
        """Diff two revisions into an un-enriched ``ChangeSet``.

        Raises:
            RepositoryError: Not a repository, unresolvable ref, or diff failure.
        """
        summary = await self._call(self._diff_sync, base_ref, head_ref)
        records = tuple(
            ChangeRecord(
                path=stat.path,
                change_type=classify_change(stat.insertions, stat.deletions, stat.binary),
                lines_added=stat.insertions,
                lines_removed=stat.deletions,
                old_path=stat.old_path,
                binary=stat.binary,
                language=detect_language(stat.path),
            )
            for stat in summary.files
        )
        change_set = ChangeSet(
            base_revision=summary.base_sha,
            head_revision=summary.head_sha,
            records=records,
        )
        self._sink.emit(
            Diagnostic(
                stage="diff",
                event="diff_analyzed",
                data={
                    "base": summary.base_sha[:12],
                    "head": summary.head_sha[:12],
                    "files": change_set.files_changed,
                    "added": change_set.total_lines_added,
                    "removed": change_set.total_lines_removed,
                },
            )
        )
        return change_set

    async def content_at(self, path: str, revision: str) -> str:
        """File text at ``revision``.

        Raises:
            FileAccessError: Path missing at that revision or unreadable.
        """
        return await self._call(self._content_sync, path, revision)

    async def list_files(self, revision: str) -> list[str]:
        """Every tracked path at ``revision``, sorted."""
        return await self._call(self._list_sync, revision)

    # =========================================================================
    # Synchronous bodies (worker thread)
    # =========================================================================

    def _resolve_sync(self, ref: str) -> str:
        try:
            return self._ops().resolve_revision(ref)
        except RefNotFoundError as e:
            raise RepositoryError.unresolved_revision(ref, str(e)) from e

    def _diff_sync(self, base_ref: str, head_ref: str) -> DiffSummary:
        base = self._resolve_sync(base_ref)
        head = self._resolve_sync(head_ref)
        try:
            return self._ops().diff_summary(base, head, find_renames=self._find_renames)
        except pygit2.GitError as e:
            raise RepositoryError.diff_failed(base_ref, head_ref, str(e)) from e

    def _content_sync(self, path: str, revision: str) -> str:
        try:
            return self._ops().file_content_at(path, revision)
        except (PathNotFoundError, RefNotFoundError, pygit2.GitError) as e:
            raise FileAccessError.unreadable(path, revision, str(e)) from e

    def _list_sync(self, revision: str) -> list[str]:
        try:
            return self._ops().list_files(revision)
        except RefNotFoundError as e:
            raise RepositoryError.unresolved_revision(revision, str(e)) from e

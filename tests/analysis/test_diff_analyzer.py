"""Tests for the async diff analyzer."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from teo.analysis.diff import DiffAnalyzer
from teo.analysis.models import ChangeType
from teo.core.diagnostics import DiagnosticLog
from teo.core.errors import ErrorCode, FileAccessError, RepositoryError

if TYPE_CHECKING:
    from conftest import RepoBuilder


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_given_two_commits_when_analyzed_then_records_per_file(
        self, repo_builder: RepoBuilder
    ) -> None:
        # Given
        base = repo_builder.commit(
            {"src/auth/login.js": "a\nb\n", "src/old.js": "gone\n", "docs/notes.md": "x\n"}
        )
        head = repo_builder.commit(
            {
                "src/auth/login.js": "a\nB\nc\n",
                "src/old.js": None,
                "src/new.ts": "export const x = 1;\n",
            }
        )
        log = DiagnosticLog()

        # When
        async with DiffAnalyzer(repo_builder.path, sink=log) as analyzer:
            change_set = await analyzer.analyze(base, head)

        # Then
        assert change_set.base_revision == base
        assert change_set.head_revision == head
        by_path = {r.path: r for r in change_set}
        assert set(by_path) == {"src/auth/login.js", "src/old.js", "src/new.ts"}
        assert by_path["src/auth/login.js"].change_type is ChangeType.MODIFIED
        assert (by_path["src/auth/login.js"].lines_added, by_path["src/auth/login.js"].lines_removed) == (2, 1)
        assert by_path["src/old.js"].change_type is ChangeType.DELETED
        assert by_path["src/new.ts"].change_type is ChangeType.ADDED
        assert by_path["src/new.ts"].language == "typescript"
        assert change_set.languages_affected == frozenset({"javascript", "typescript"})
        assert [d.event for d in log.events] == ["diff_analyzed"]

    @pytest.mark.asyncio
    async def test_given_same_revision_when_analyzed_then_empty(self, repo_builder: RepoBuilder) -> None:
        repo_builder.commit({"a.js": "1\n"})
        async with DiffAnalyzer(repo_builder.path) as analyzer:
            change_set = await analyzer.analyze("HEAD", "HEAD")
        assert len(change_set) == 0

    @pytest.mark.asyncio
    async def test_given_rename_when_analyzed_then_old_path_set(self, repo_builder: RepoBuilder) -> None:
        # Given
        body = "".join(f"export const v{i} = {i};\n" for i in range(30))
        base = repo_builder.commit({"src/cart.js": body})
        head = repo_builder.rename("src/cart.js", "src/basket.js")

        # When
        async with DiffAnalyzer(repo_builder.path) as analyzer:
            change_set = await analyzer.analyze(base, head)

        # Then
        (record,) = change_set.records
        assert record.path == "src/basket.js"
        assert record.old_path == "src/cart.js"

    @pytest.mark.asyncio
    async def test_given_unknown_ref_when_analyzed_then_repository_error(
        self, repo_builder: RepoBuilder
    ) -> None:
        repo_builder.commit({"a.js": "1\n"})
        async with DiffAnalyzer(repo_builder.path) as analyzer:
            with pytest.raises(RepositoryError) as exc_info:
                await analyzer.analyze("no-such-branch", "HEAD")
        assert exc_info.value.code is ErrorCode.REVISION_NOT_FOUND
        assert exc_info.value.details["ref"] == "no-such-branch"

    @pytest.mark.asyncio
    async def test_given_plain_directory_when_analyzed_then_not_a_repository(self, tmp_path: Path) -> None:
        async with DiffAnalyzer(tmp_path) as analyzer:
            with pytest.raises(RepositoryError) as exc_info:
                await analyzer.analyze("HEAD~1", "HEAD")
        assert exc_info.value.code is ErrorCode.REPOSITORY_NOT_FOUND


class TestContentAccess:
    @pytest.mark.asyncio
    async def test_content_and_listing_at_revision(self, repo_builder: RepoBuilder) -> None:
        # Given
        repo_builder.commit({"src/a.js": "one\n", "tests/a.spec.js": "t\n"})

        # When
        async with DiffAnalyzer(repo_builder.path) as analyzer:
            head = await analyzer.resolve_revision("HEAD")
            content = await analyzer.content_at("src/a.js", head)
            files = await analyzer.list_files(head)

        # Then
        assert content == "one\n"
        assert files == ["src/a.js", "tests/a.spec.js"]

    @pytest.mark.asyncio
    async def test_given_missing_file_when_read_then_file_access_error(
        self, repo_builder: RepoBuilder
    ) -> None:
        repo_builder.commit({"src/a.js": "one\n"})
        async with DiffAnalyzer(repo_builder.path) as analyzer:
            with pytest.raises(FileAccessError) as exc_info:
                await analyzer.content_at("src/missing.js", "HEAD")
        assert exc_info.value.code is ErrorCode.FILE_UNREADABLE

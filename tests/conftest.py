"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides a small git repository builder shared by all test packages.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, Mapping
from pathlib import Path

import pygit2
import pytest
import structlog

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of teo modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("teo"):
        del sys.modules[module_name]


class RepoBuilder:
    """Writes files into a pygit2 repository and commits them.

    ``commit({"a.js": "text", "old.js": None})`` writes ``a.js``, deletes
    ``old.js``, and returns the new commit sha.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.repo = pygit2.init_repository(str(path), initial_head="main")
        self.repo.config["user.name"] = "Test User"
        self.repo.config["user.email"] = "test@example.com"
        self.sig = pygit2.Signature("Test User", "test@example.com")

    def commit(self, files: Mapping[str, str | bytes | None], message: str = "change") -> str:
        index = self.repo.index
        for rel, content in files.items():
            target = self.path / rel
            if content is None:
                target.unlink()
                index.remove(rel)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content)
            index.add(rel)
        index.write()
        tree = index.write_tree()
        parents = [] if self.repo.head_is_unborn else [self.repo.head.target]
        oid = self.repo.create_commit("HEAD", self.sig, self.sig, message, tree, parents)
        return str(oid)

    def rename(self, old: str, new: str, message: str = "rename") -> str:
        content = (self.path / old).read_bytes()
        return self.commit({old: None, new: content}, message)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo configure_logging() calls (CLI commands make them) after each test."""
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Empty repository on branch main."""
    path = tmp_path / "repo"
    path.mkdir()
    return RepoBuilder(path)

"""Canonical language definitions.

This module defines the authoritative mapping of:
- File extensions → language names (used for ``languages_affected``)
- Language names → tree-sitter grammar (only for languages with symbol extraction)
- Extensions whose grammar differs from their language's default (``.tsx``)

Languages without a grammar are still reported in change statistics; they just
pass through syntax extraction with empty symbol sets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath


@dataclass(frozen=True, slots=True)
class Language:
    """Canonical definition for a language name.

    Attributes:
        name: Unique identifier (lowercase, e.g., "python", "javascript")
        extensions: File extensions including dot (e.g., ".py", ".js")
        grammar: Tree-sitter grammar name, or None if no grammar is wired up
        grammar_overrides: Extension → grammar name for dialects (e.g. ".tsx" → "tsx")
    """

    name: str
    extensions: frozenset[str]
    grammar: str | None = None
    grammar_overrides: dict[str, str] = field(default_factory=dict)


ALL_LANGUAGES: tuple[Language, ...] = (
    Language(
        name="javascript",
        extensions=frozenset({".js", ".jsx", ".mjs", ".cjs"}),
        grammar="javascript",
    ),
    Language(
        name="typescript",
        extensions=frozenset({".ts", ".tsx", ".mts", ".cts"}),
        grammar="typescript",
        grammar_overrides={".tsx": "tsx"},
    ),
    Language(
        name="python",
        extensions=frozenset({".py", ".pyi"}),
        grammar="python",
    ),
    Language(name="json", extensions=frozenset({".json"})),
    Language(name="yaml", extensions=frozenset({".yaml", ".yml"})),
    Language(name="markdown", extensions=frozenset({".md", ".markdown"})),
    Language(name="html", extensions=frozenset({".html", ".htm"})),
    Language(name="css", extensions=frozenset({".css"})),
    Language(name="scss", extensions=frozenset({".scss"})),
    Language(name="sass", extensions=frozenset({".sass"})),
)

LANGUAGES_BY_NAME: dict[str, Language] = {lang.name: lang for lang in ALL_LANGUAGES}

EXTENSION_TO_NAME: dict[str, str] = {
    ext: lang.name for lang in ALL_LANGUAGES for ext in lang.extensions
}


def detect_language(path: str) -> str | None:
    """Detect language name from a repo-relative path's extension."""
    return EXTENSION_TO_NAME.get(PurePosixPath(path).suffix.lower())


def grammar_for_path(path: str) -> str | None:
    """Tree-sitter grammar to parse ``path`` with, or None if unsupported."""
    name = detect_language(path)
    if name is None:
        return None
    lang = LANGUAGES_BY_NAME[name]
    ext = PurePosixPath(path).suffix.lower()
    return lang.grammar_overrides.get(ext, lang.grammar)


def has_grammar(name: str) -> bool:
    """Check if a language has a usable tree-sitter grammar."""
    lang = LANGUAGES_BY_NAME.get(name)
    return lang is not None and lang.grammar is not None

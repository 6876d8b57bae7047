"""Tree-sitter symbol extraction for changed files.

Each changed file is parsed at the head revision and three sets of names are
collected from the syntax tree: function-like declarations, class-like
declarations, and import statements (their source text). Languages without a
grammar pass through untouched.
"""

from __future__ import annotations

import asyncio
import importlib
from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

import tree_sitter

from teo.analysis.models import ChangeRecord, ChangeSet
from teo.core.diagnostics import Diagnostic, DiagnosticSink, NullSink
from teo.core.errors import FileAccessError
from teo.core.languages import detect_language, grammar_for_path

ContentFetcher = Callable[[str], Awaitable[str]]

# grammar name -> (module, language function)
_GRAMMAR_MODULES: dict[str, tuple[str, str]] = {
    "javascript": ("tree_sitter_javascript", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
    "python": ("tree_sitter_python", "language"),
}

_JS_FUNCTIONS = frozenset({"function_declaration", "arrow_function", "method_definition"})
_JS_CLASSES = frozenset({"class_declaration"})
_JS_IMPORTS = frozenset({"import_statement"})

FUNCTION_KINDS: dict[str, frozenset[str]] = {
    "javascript": _JS_FUNCTIONS,
    "typescript": _JS_FUNCTIONS,
    "python": frozenset({"function_definition"}),
}
CLASS_KINDS: dict[str, frozenset[str]] = {
    "javascript": _JS_CLASSES,
    "typescript": _JS_CLASSES,
    "python": frozenset({"class_definition"}),
}
IMPORT_KINDS: dict[str, frozenset[str]] = {
    "javascript": _JS_IMPORTS,
    "typescript": _JS_IMPORTS,
    "python": frozenset({"import_statement", "import_from_statement"}),
}

# Leaf kinds that can carry a declaration's name.
_IDENTIFIER_KINDS = frozenset({"identifier", "property_identifier", "type_identifier"})

_LANGUAGE_CACHE: dict[str, tree_sitter.Language] = {}


def load_grammar(grammar: str) -> tree_sitter.Language | None:
    """Load (and cache) a tree-sitter grammar, or None if it is not installed."""
    if grammar in _LANGUAGE_CACHE:
        return _LANGUAGE_CACHE[grammar]
    spec = _GRAMMAR_MODULES.get(grammar)
    if spec is None:
        return None
    module_name, func_name = spec
    try:
        mod = importlib.import_module(module_name)
        lang = tree_sitter.Language(getattr(mod, func_name)())
    except (ImportError, AttributeError):
        return None
    _LANGUAGE_CACHE[grammar] = lang
    return lang


@dataclass
class SymbolSets:
    """Names collected from one file."""

    functions: set[str] = field(default_factory=set)
    classes: set[str] = field(default_factory=set)
    imports: set[str] = field(default_factory=set)


def _text(node: Any) -> str:
    raw = node.text
    return raw.decode("utf-8", errors="replace") if raw is not None else ""


def _declaration_name(node: Any) -> str | None:
    name_node = node.child_by_field_name("name")
    if name_node is not None:
        return _text(name_node)
    # const handler = () => {...}
    parent = node.parent
    if node.type == "arrow_function" and parent is not None and parent.type == "variable_declarator":
        name_node = parent.child_by_field_name("name")
        if name_node is not None:
            return _text(name_node)
    for child in node.children:
        if child.type in _IDENTIFIER_KINDS:
            return _text(child)
    return None


def _walk(root: Any) -> Iterator[Any]:
    """Pre-order traversal without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


class SyntaxExtractor:
    """Extracts changed symbol names from head-revision file content.

    Usage::

        extractor = SyntaxExtractor()
        enriched = await extractor.enrich(record, None, fetch_head)
    """

    def __init__(self, sink: DiagnosticSink | None = None) -> None:
        self._sink: DiagnosticSink = sink if sink is not None else NullSink()

    @staticmethod
    def supports(record: ChangeRecord) -> bool:
        """True when the record is eligible for extraction at all."""
        return not record.is_deleted and not record.binary

    def extract(self, source: str | bytes, path: str) -> SymbolSets:
        """Parse ``source`` as the language of ``path`` and collect names.

        Synchronous and thread-safe: a fresh parser is built per call.
        """
        language = detect_language(path)
        grammar = grammar_for_path(path)
        if language is None or grammar is None:
            return SymbolSets()
        ts_lang = load_grammar(grammar)
        if ts_lang is None:
            return SymbolSets()
        data = source.encode("utf-8") if isinstance(source, str) else source
        tree = tree_sitter.Parser(ts_lang).parse(data)
        return self._collect(tree.root_node, language)

    @staticmethod
    def _collect(root: Any, language: str) -> SymbolSets:
        functions = FUNCTION_KINDS.get(language, frozenset())
        classes = CLASS_KINDS.get(language, frozenset())
        imports = IMPORT_KINDS.get(language, frozenset())
        out = SymbolSets()
        for node in _walk(root):
            kind = node.type
            if kind in functions:
                name = _declaration_name(node)
                if name:
                    out.functions.add(name)
            elif kind in classes:
                name = _declaration_name(node)
                if name:
                    out.classes.add(name)
            elif kind in imports:
                text = _text(node).strip()
                if text:
                    out.imports.add(text)
        return out

    async def enrich(
        self,
        record: ChangeRecord,
        base_content: str | None,
        head_content_fetcher: ContentFetcher,
    ) -> ChangeRecord:
        """Return a copy of ``record`` with symbol sets filled in.

        Never raises for per-file problems: read or parse failures are emitted
        as diagnostics and the record comes back with empty sets.
        """
        if not self.supports(record):
            return record
        grammar = grammar_for_path(record.path)
        # Grammars load on the calling thread so the cache is never written concurrently.
        if grammar is None or load_grammar(grammar) is None:
            return record

        try:
            head = await head_content_fetcher(record.path)
        except FileAccessError as e:
            self._sink.emit(
                Diagnostic(
                    stage="enrichment",
                    event="file_unreadable",
                    severity="warning",
                    data={"path": record.path},
                    error=e,
                )
            )
            return record

        try:
            symbols = await asyncio.to_thread(self.extract, head, record.path)
        except Exception as e:  # noqa: BLE001
            self._sink.emit(
                Diagnostic(
                    stage="enrichment",
                    event="parse_failed",
                    severity="warning",
                    data={"path": record.path},
                    error=FileAccessError.parse_failed(record.path, str(e)),
                )
            )
            return record

        self._sink.emit(
            Diagnostic(
                stage="enrichment",
                event="file_enriched",
                severity="debug",
                data={
                    "path": record.path,
                    "functions": len(symbols.functions),
                    "classes": len(symbols.classes),
                    "imports": len(symbols.imports),
                    "base_bytes": len(base_content) if base_content is not None else None,
                },
            )
        )
        return record.with_symbols(symbols.functions, symbols.classes, symbols.imports)


@dataclass(frozen=True)
class EnrichedChanges:
    """Enriched change set plus the head-revision text of every readable file."""

    change_set: ChangeSet
    contents: Mapping[str, str]


async def enrich_change_set(
    change_set: ChangeSet,
    extractor: SyntaxExtractor,
    fetch_head: ContentFetcher,
    *,
    workers: int = 8,
    file_timeout: float = 10.0,
    sink: DiagnosticSink | None = None,
) -> EnrichedChanges:
    """Enrich every record concurrently, bounded by ``workers``.

    A file that exceeds ``file_timeout`` keeps its record with empty symbol
    sets. Record order is preserved.
    """
    sink = sink if sink is not None else NullSink()
    semaphore = asyncio.Semaphore(workers)

    async def enrich_one(record: ChangeRecord) -> tuple[ChangeRecord, str | None]:
        if not SyntaxExtractor.supports(record):
            return record, None
        try:
            content = await fetch_head(record.path)
        except FileAccessError as e:
            sink.emit(
                Diagnostic(
                    stage="enrichment",
                    event="file_unreadable",
                    severity="warning",
                    data={"path": record.path},
                    error=e,
                )
            )
            return record, None

        async def cached(_path: str) -> str:
            return content

        return await extractor.enrich(record, None, cached), content

    async def bounded(record: ChangeRecord) -> tuple[ChangeRecord, str | None]:
        async with semaphore:
            try:
                return await asyncio.wait_for(enrich_one(record), timeout=file_timeout)
            except TimeoutError:
                sink.emit(
                    Diagnostic(
                        stage="enrichment",
                        event="file_timeout",
                        severity="warning",
                        data={"path": record.path},
                        error=FileAccessError.timed_out(record.path, file_timeout),
                    )
                )
                return record, None

    results = await asyncio.gather(*(bounded(r) for r in change_set.records))
    contents = {rec.path: text for rec, text in results if text is not None}
    return EnrichedChanges(
        change_set=change_set.with_records([rec for rec, _ in results]),
        contents=contents,
    )

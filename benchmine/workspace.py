#!/usr/bin/env python3

"""
Dependency closure of a single C function.

A Workspace starts from one function in one file and pulls in every
function, typedef, struct, union and enum it transitively refers to,
parsing further project files only when a referenced symbol is not known
yet. Candidate files are visited closest-first, so declarations are usually
found in the root file, its siblings or its subdirectories before the rest
of the project is touched.

One Workspace serves one extraction and is not thread-safe.
"""

import logging
import time
from collections import deque
from collections.abc import Iterator
from pathlib import Path

from benchmine.ast_provider import AstNode, AstProvider, ClangAstProvider
from benchmine.config import ExtractorConfig
from benchmine.discovery import DiscoveryPolicy
from benchmine.emitter import emit_closure
from benchmine.errors import (
    ExtractionError,
    ExtractionTimeout,
    PathError,
    RootNotFoundError,
)
from benchmine.fs import files_sorted_by_proximity
from benchmine.graph import DependencyGraph
from benchmine.symbols import DeclKind, DeclRecord, SymbolKey

logger = logging.getLogger(__name__)

_TYPE_KINDS = frozenset({DeclKind.TYPEDEF, DeclKind.STRUCT, DeclKind.UNION, DeclKind.ENUM})


def _is_indexable(node: AstNode) -> bool:
    if node.kind in _TYPE_KINDS:
        return True
    return node.kind == DeclKind.FUNCTION and node.is_definition()


def top_level_declarations(node: AstNode) -> Iterator[AstNode]:
    """Yield macro definitions and indexable declarations without entering them."""
    for child in node.children():
        if child.kind == DeclKind.MACRO or _is_indexable(child):
            yield child
        else:
            yield from top_level_declarations(child)


def scan_includes(source: str) -> list[str]:
    """``#include <...>`` directives found on raw source lines."""
    includes = []
    for line in source.splitlines():
        stripped = line.lstrip()
        if not stripped.startswith("#include"):
            continue
        rest = stripped[len("#include") :].lstrip()
        if rest.startswith("<"):
            end = rest.find(">")
            if end != -1:
                includes.append(f"#include {rest[: end + 1]}")
    return includes


class Workspace:
    def __init__(
        self,
        project_root: Path,
        root_file: Path,
        root_function: str,
        config: ExtractorConfig | None = None,
        provider: AstProvider | None = None,
        cache: bool | None = None,
    ):
        self.config = config or ExtractorConfig()
        self.provider = provider or ClangAstProvider(self.config.clang_args)
        self.root_function_name = root_function
        self.root_file = Path(root_file)
        self._root_canon = self.root_file.resolve()

        self.decls: dict[SymbolKey, DeclRecord] = {}
        self.candidates: deque[Path] = deque(
            files_sorted_by_proximity(Path(project_root), self.root_file, self.config.extension)
        )
        self.graph = DependencyGraph()
        self.ignored: dict[SymbolKey, None] = {}
        self.macros: list[bytes] = []
        self.includes: dict[str, None] = {}

        self.policy = DiscoveryPolicy.from_cache_flag(
            self.config.cache if cache is None else cache
        )
        self._discovery = self.policy.strategy()
        self.stdlib = self.config.stdlib_allowlist()
        self.timeout = self.config.timeout
        self.created_at = time.monotonic()

    @property
    def cache(self) -> bool:
        return self.policy == DiscoveryPolicy.CACHE

    def check_timeout(self) -> None:
        if time.monotonic() - self.created_at >= self.timeout:
            raise ExtractionTimeout(self.timeout)

    def is_root_file(self, path: Path | None) -> bool:
        return path is not None and Path(path).resolve() == self._root_canon

    def ignore(self, key: SymbolKey) -> None:
        logger.debug(f"No declaration found for {key}, ignoring it")
        self.ignored.setdefault(key)

    def index_file(self, file: Path, search_key: SymbolKey | None = None) -> None:
        """
        Record the definitions found in ``file``.

        With a ``search_key`` only that declaration is recorded and the walk
        stops as soon as it is found. Existing records are never replaced.
        For the root file, macros and ``#include <...>`` directives are
        collected as well.
        """
        self.check_timeout()
        is_root = self.is_root_file(file)

        source = b""
        if is_root or self.config.includes_from_all_files:
            try:
                source = Path(file).read_bytes()
            except OSError as e:
                raise PathError(f"Could not read file {file}: {e}") from e
            for include in scan_includes(source.decode(errors="replace")):
                self.includes.setdefault(include)

        root = self.provider.parse(Path(file))
        for node in top_level_declarations(root):
            if node.kind == DeclKind.MACRO:
                if is_root and self.is_root_file(node.file):
                    self._harvest_macro(node, source)
                continue

            decl = node.definition() or node.referenced() or node
            if decl.file is None:
                # Compiler builtins have no source text to extract.
                continue

            key = decl.key
            if key.is_empty() or key in self.decls:
                continue
            if search_key is not None and key != search_key:
                continue

            self.decls[key] = DeclRecord.from_node(decl)
            if search_key is not None:
                break

        logger.debug(f"Indexed {file}: {len(self.decls)} declarations known")

    def _harvest_macro(self, node: AstNode, source: bytes) -> None:
        _, start, end = node.extent()
        text = source[start:end]
        name = node.key.name
        if not text or not name:
            return
        function_like = text[len(name) : len(name) + 1] == b"("
        if function_like and not self.config.capture_function_macros:
            return
        self.macros.append(text)

    def discover_candidates(self, key: SymbolKey) -> None:
        """Make sure ``key`` is either indexed or ignored."""
        self.check_timeout()
        self._discovery.discover(self, key)

    def discover_root(self) -> SymbolKey:
        """Index the root file and return the identity of the root function."""
        self.check_timeout()
        if self.candidates and self.is_root_file(self.candidates[0]):
            root_file = self.candidates.popleft()
        else:
            root_file = self.root_file

        self.index_file(root_file)

        functions = (key for key, record in self.decls.items() if record.kind == DeclKind.FUNCTION)
        for key in functions:
            if key.name == self.root_function_name:
                return key
        raise RootNotFoundError(self.root_function_name, root_file)

    def add_node(self, key: SymbolKey) -> None:
        self.check_timeout()
        self.graph.add_node(key)

    def add_edge(self, source: SymbolKey, target: SymbolKey) -> None:
        self.check_timeout()
        self.graph.add_edge(source, target)

    def explore_entity(
        self,
        key: SymbolKey,
        explored: set[SymbolKey],
        to_explore: deque[SymbolKey],
    ) -> None:
        """Add ``key`` to the graph and queue up the declarations it refers to."""
        self.check_timeout()
        if key not in self.graph:
            self.add_node(key)
        explored.add(key)
        self.discover_candidates(key)

        record = self.decls.get(key)
        if record is None:
            return

        for dep in record.referenced_declarations():
            if dep.is_empty():
                continue
            if dep not in self.graph:
                self.add_node(dep)
            # A declaration's own cursor refers back to itself.
            if dep == key:
                continue
            self.add_edge(key, dep)
            if dep not in explored and not dep.is_stdlib(self.stdlib):
                to_explore.append(dep)

    def resolve_dependencies(self) -> list[SymbolKey]:
        """Identities of the closure, every dependency before its dependents."""
        self.check_timeout()
        root_key = self.discover_root()
        logger.info(f"Resolving dependencies of {root_key}")

        explored: set[SymbolKey] = set()
        to_explore: deque[SymbolKey] = deque([root_key])
        while to_explore:
            key = to_explore.popleft()
            if key in explored:
                continue
            try:
                self.explore_entity(key, explored, to_explore)
            except ExtractionTimeout:
                raise
            except ExtractionError as e:
                e.add_note(f"Error exploring entity {key}")
                raise

        order = self.graph.toposort()
        order.reverse()
        return [key for key in order if key in self.decls]

    def emit_code(self, keys: list[SymbolKey]) -> bytes:
        self.check_timeout()
        records = [self.decls[key] for key in keys if key in self.decls]
        return emit_closure(
            records,
            ignored=self.ignored,
            includes=self.includes,
            macros=self.macros,
        )

    def summary(self) -> dict[str, int]:
        return {
            "declarations": len(self.decls),
            "candidates": len(self.candidates),
            "nodes": self.graph.node_count,
            "edges": self.graph.edge_count,
            "ignored": len(self.ignored),
        }

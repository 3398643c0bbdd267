#!/usr/bin/env python3

"""
The compiler front end seen by the resolver.

The resolver only needs to parse a file, walk the resulting tree and ask each
node for its kind, identity, byte range and referenced declaration. Those
needs are captured by the ``AstProvider``/``AstNode`` protocols; the libclang
implementation below is the one used in production.
"""

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol

import clang.cindex as clang

from benchmine.errors import ParseError
from benchmine.symbols import DeclKind, SymbolKey

logger = logging.getLogger(__name__)


class AstNode(Protocol):
    @property
    def kind(self) -> DeclKind: ...

    @property
    def key(self) -> SymbolKey: ...

    @property
    def file(self) -> Path | None:
        """File the node is located in, None for compiler builtins."""
        ...

    def extent(self) -> tuple[Path | None, int, int]:
        """(file, start offset, end offset) of the node's source text."""
        ...

    def is_definition(self) -> bool: ...

    def definition(self) -> "AstNode | None": ...

    def referenced(self) -> "AstNode | None": ...

    def children(self) -> Iterator["AstNode"]: ...


class AstProvider(Protocol):
    def parse(self, path: Path) -> AstNode:
        """Parse a file and return the root of its syntax tree."""
        ...


_KIND_MAP = {
    clang.CursorKind.FUNCTION_DECL: DeclKind.FUNCTION,  # type: ignore
    clang.CursorKind.TYPEDEF_DECL: DeclKind.TYPEDEF,  # type: ignore
    clang.CursorKind.STRUCT_DECL: DeclKind.STRUCT,  # type: ignore
    clang.CursorKind.UNION_DECL: DeclKind.UNION,  # type: ignore
    clang.CursorKind.ENUM_DECL: DeclKind.ENUM,  # type: ignore
    clang.CursorKind.MACRO_DEFINITION: DeclKind.MACRO,  # type: ignore
}

# Spellings clang invents for records and enums without a name.
_ANONYMOUS_MARKERS = ("(unnamed", "(anonymous")


def _spelling(cursor: clang.Cursor) -> str | None:
    name = cursor.spelling
    if not name or any(marker in name for marker in _ANONYMOUS_MARKERS):
        return None
    return name


class ClangNode:
    """AstNode backed by a libclang cursor."""

    def __init__(self, cursor: clang.Cursor):
        self._cursor = cursor

    @property
    def kind(self) -> DeclKind:
        return _KIND_MAP.get(self._cursor.kind, DeclKind.OTHER)

    @property
    def key(self) -> SymbolKey:
        return SymbolKey(usr=self._cursor.get_usr() or None, name=_spelling(self._cursor))

    @property
    def file(self) -> Path | None:
        location = self._cursor.location
        return Path(location.file.name) if location.file else None

    def extent(self) -> tuple[Path | None, int, int]:
        extent = self._cursor.extent
        file = Path(extent.start.file.name) if extent.start.file else None
        return file, extent.start.offset, extent.end.offset

    def is_definition(self) -> bool:
        return self._cursor.is_definition()

    def definition(self) -> "ClangNode | None":
        target = self._cursor.get_definition()
        return ClangNode(target) if target is not None else None

    def referenced(self) -> "ClangNode | None":
        target = self._cursor.referenced
        return ClangNode(target) if target is not None else None

    def children(self) -> Iterator["ClangNode"]:
        for child in self._cursor.get_children():
            yield ClangNode(child)

    def __repr__(self) -> str:
        return f"ClangNode({self.kind.value}, {self.key})"


class ClangAstProvider:
    """Parses C files with libclang, keeping function bodies and macros."""

    def __init__(self, args: list[str] | None = None):
        self.args = list(args) if args is not None else ["-std=c99"]

    def parse(self, path: Path) -> ClangNode:
        logger.debug(f"Parsing {path} with args {self.args}")
        index = clang.Index.create()
        try:
            tu = index.parse(
                str(path),
                args=self.args,
                options=clang.TranslationUnit.PARSE_DETAILED_PROCESSING_RECORD,
            )
        except clang.TranslationUnitLoadError as e:
            raise ParseError(path, str(e)) from e
        return ClangNode(tu.cursor)

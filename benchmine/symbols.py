#!/usr/bin/env python3

"""
Symbol identities and declaration records.

A declaration record captures everything the resolver needs to know about a
C declaration after its translation unit is gone: where its text lives, and
which other declarations its syntax tree refers to.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from benchmine.errors import SourceRangeError

if TYPE_CHECKING:
    from benchmine.ast_provider import AstNode


class DeclKind(str, Enum):
    FUNCTION = "function"
    TYPEDEF = "typedef"
    STRUCT = "struct"
    UNION = "union"
    ENUM = "enum"
    MACRO = "macro"
    OTHER = "other"


# Kinds that become nodes of the dependency graph.
DECLARATION_KINDS = frozenset(
    {DeclKind.FUNCTION, DeclKind.TYPEDEF, DeclKind.STRUCT, DeclKind.UNION, DeclKind.ENUM}
)

# Kinds whose extent may stop short of the closing ';'.
TERMINATED_KINDS = frozenset({DeclKind.TYPEDEF, DeclKind.STRUCT, DeclKind.UNION, DeclKind.ENUM})

STDLIB_USRS = frozenset(
    {
        "c:@F@printf",
        "c:@F@scanf",
        "c:@F@malloc",
        "c:@F@free",
        "c:@F@calloc",
        "c:@F@realloc",
        "c:@F@memcpy",
        "c:@F@memset",
        "c:@F@fprintf",
        "c:@F@pow",
    }
)


@dataclass(frozen=True)
class SymbolKey:
    """Identity of a C declaration: its clang USR and its spelling."""

    usr: str | None = None
    name: str | None = None

    def is_empty(self) -> bool:
        return self.usr is None and self.name is None

    def is_stdlib(self, allowlist: frozenset[str] = STDLIB_USRS) -> bool:
        return self.usr is not None and self.usr in allowlist

    def __str__(self) -> str:
        if self.is_empty():
            return "<unknown>"
        return f"({self.name or '<unknown>'}: {self.usr or '<unknown>'})"


@dataclass(frozen=True)
class Reference:
    key: SymbolKey
    kind: DeclKind


@dataclass
class DeclRecord:
    """A declaration's kind, byte range and the references in its sub-tree."""

    key: SymbolKey
    kind: DeclKind
    start: int
    end: int
    file: Path | None
    reference: Reference | None = None
    children: list["DeclRecord"] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: "AstNode") -> "DeclRecord":
        """Capture a node and its whole sub-tree."""
        root = cls._capture(node)
        stack = [(node, root)]
        while stack:
            current, record = stack.pop()
            for child in current.children():
                child_record = cls._capture(child)
                record.children.append(child_record)
                stack.append((child, child_record))
        return root

    @classmethod
    def _capture(cls, node: "AstNode") -> "DeclRecord":
        file, start, end = node.extent()
        if start > end:
            raise SourceRangeError(file, f"Invalid range {start}..{end} for {node.key}")
        target = node.referenced()
        reference = Reference(target.key, target.kind) if target is not None else None
        return cls(
            key=node.key,
            kind=node.kind,
            start=start,
            end=end,
            file=file,
            reference=reference,
        )

    def extract_code(self) -> bytes:
        """Read this declaration's text back from its source file."""
        if self.file is None:
            raise SourceRangeError(None, f"Could not get declaration file for {self.key}")
        try:
            source = self.file.read_bytes()
        except OSError as e:
            raise SourceRangeError(self.file, f"Could not read file: {e}") from e

        if not 0 <= self.start <= self.end <= len(source):
            raise SourceRangeError(
                self.file, f"Invalid range {self.start}..{self.end} for {self.key}"
            )

        code = source[self.start : self.end]
        if self.kind in TERMINATED_KINDS and not code.endswith(b";"):
            code += b";"
        return code

    def all_references(self) -> list[Reference]:
        """Distinct references found anywhere in the sub-tree, in pre-order."""
        seen: dict[Reference, None] = {}
        stack = [self]
        while stack:
            record = stack.pop()
            if record.reference is not None:
                seen.setdefault(record.reference)
            stack.extend(reversed(record.children))
        return list(seen)

    def referenced_declarations(self) -> list[SymbolKey]:
        """Identities of the functions and types this declaration depends on."""
        keys: dict[SymbolKey, None] = {}
        for ref in self.all_references():
            if ref.kind in DECLARATION_KINDS:
                keys.setdefault(ref.key)
        return list(keys)

    def render(self) -> str:
        """Indented dump of the record tree."""
        lines: list[str] = []

        def go(record: "DeclRecord", prefix: str, is_last: bool, is_root: bool):
            connector = "" if is_root else ("└─ " if is_last else "├─ ")
            location = str(record.file) if record.file else ""
            line = (
                f"{prefix}{connector}{record.kind.value} {record.key} "
                f"[{location}:{record.start}..{record.end}]"
            )
            if record.reference is not None:
                line += f", ref→{record.reference.key},{record.reference.kind.value}"
            lines.append(line)

            child_prefix = prefix if is_root else prefix + ("   " if is_last else "│  ")
            last = len(record.children) - 1
            for i, child in enumerate(record.children):
                go(child, child_prefix, i == last, False)

        go(self, "", True, True)
        return "\n".join(lines)

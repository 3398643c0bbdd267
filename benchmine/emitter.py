#!/usr/bin/env python3

"""Assembles the final translation unit from resolved declarations."""

from collections.abc import Iterable

from benchmine.symbols import DeclRecord, SymbolKey


def ignored_header(ignored: Iterable[SymbolKey]) -> bytes:
    """Comment block naming the symbols left out of the closure."""
    names = [key.name for key in ignored if key.name]
    return b"// Ignored functions:\n// " + ", ".join(names).encode() + b"\n\n"


def emit_closure(
    records: Iterable[DeclRecord],
    ignored: Iterable[SymbolKey] = (),
    includes: Iterable[str] = (),
    macros: Iterable[bytes] = (),
) -> bytes:
    """Concatenate includes, macros and declaration slices in the given order."""
    out = bytearray()

    ignored = list(ignored)
    if ignored:
        out += ignored_header(ignored)

    for include in includes:
        out += include.encode() + b"\n"

    for macro in macros:
        out += b"#define " + macro + b"\n"

    for record in records:
        out += record.extract_code()
        out += b"\n\n"

    return bytes(out)

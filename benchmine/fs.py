#!/usr/bin/env python3

"""File discovery helpers."""

import os
from pathlib import Path

from benchmine.errors import PathError


def check_path(path: str | Path) -> Path:
    """Return ``path`` as a Path, failing if nothing exists there."""
    path = Path(path)
    if not path.exists():
        raise PathError(f"Path {path} does not exist")
    return path


def proximity(path: Path, pivot: Path) -> tuple[int, int]:
    """Directory hops up, then remaining path components, from pivot to path."""
    rel = Path(os.path.relpath(path, pivot))
    ups = 0
    total = 0
    for part in rel.parts:
        if part == os.pardir:
            ups += 1
        elif part != os.curdir:
            total += 1
    return ups, total


def files_sorted_by_proximity(root_dir: Path, pivot_file: Path, ext: str) -> list[Path]:
    """
    All files under ``root_dir`` with extension ``ext``, closest to ``pivot_file`` first.

    The pivot itself sorts first, then its siblings, then files in its
    subdirectories, then files further up the tree. Ties keep walk order.
    """
    root_dir = Path(root_dir)
    pivot_file = Path(pivot_file)
    if not pivot_file.exists():
        raise PathError(f"Pivot file {pivot_file} does not exist")

    root_canon = root_dir.resolve()
    pivot_canon = pivot_file.resolve()
    if not pivot_canon.is_relative_to(root_canon):
        raise PathError(f"Pivot file {pivot_file} is not in root dir {root_dir}")

    suffix = f".{ext.lower()}"
    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root_dir):
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.suffix.lower() == suffix and path.is_file():
                files.append(path)

    files.sort(key=lambda p: proximity(p.resolve(), pivot_canon))
    return files

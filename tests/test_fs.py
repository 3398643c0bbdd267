#!/usr/bin/env python3

from pathlib import Path

import pytest

from benchmine.errors import PathError
from benchmine.fs import check_path, files_sorted_by_proximity, proximity


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "test_project"
    for rel in [
        "main.c",
        "io/fs.c",
        "utils/foo.c",
        "utils/bar.c",
        "utils/notes.txt",
        "utils/snippets/example.C",
    ]:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")
    return root


def test_files_sorted_by_proximity(tree):
    files = files_sorted_by_proximity(tree, tree / "utils" / "foo.c", "c")
    rel = [p.relative_to(tree).as_posix() for p in files]
    assert rel == [
        "utils/foo.c",
        "utils/bar.c",
        "utils/snippets/example.C",
        "main.c",
        "io/fs.c",
    ]


def test_pivot_sorts_first_from_root_directory(tree):
    files = files_sorted_by_proximity(tree, tree / "main.c", "c")
    assert files[0] == tree / "main.c"
    assert len(files) == 5


def test_proximity_counts_hops():
    pivot = Path("/p/utils/foo.c")
    assert proximity(Path("/p/utils/foo.c"), pivot) == (0, 0)
    assert proximity(Path("/p/utils/bar.c"), pivot) == (1, 1)
    assert proximity(Path("/p/io/fs.c"), pivot) == (2, 2)


def test_missing_pivot(tree):
    with pytest.raises(PathError):
        files_sorted_by_proximity(tree, tree / "nope.c", "c")


def test_pivot_outside_root(tree, tmp_path):
    outside = tmp_path / "outside.c"
    outside.write_text("")
    with pytest.raises(PathError):
        files_sorted_by_proximity(tree / "utils", outside, "c")


def test_check_path(tree):
    assert check_path(str(tree / "main.c")) == tree / "main.c"
    with pytest.raises(PathError):
        check_path(tree / "missing")

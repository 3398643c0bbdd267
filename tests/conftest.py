#!/usr/bin/env python3
"""Shared fixtures."""

from pathlib import Path

import pytest

from fakes import FakeProject


@pytest.fixture
def fake_project(tmp_path):
    return FakeProject(tmp_path / "project")


@pytest.fixture
def c_project(tmp_path):
    """Write a dict of relative path -> C source under a fresh project directory."""

    def make(files: dict[str, str], name: str = "project") -> Path:
        root = tmp_path / name
        for rel, source in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source)
        return root

    return make

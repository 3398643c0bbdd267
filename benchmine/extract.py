#!/usr/bin/env python3

"""Single-function extraction entry points."""

import logging
import queue
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from benchmine.config import ExtractorConfig
from benchmine.errors import ExtractionTimeout
from benchmine.fs import check_path
from benchmine.workspace import Workspace

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Extra time the supervisor grants before abandoning a worker whose
# workspace did not hit its own timeout (e.g. stuck inside a parse).
SUPERVISOR_GRACE = 5.0


def benchmark_path(dest: Path, project_id: Any, function: str) -> Path:
    return Path(dest) / "benchmarks" / f"{project_id}-{function}.c"


def run_with_timeout(seconds: float, fn: Callable[[], T]) -> T:
    """
    Run ``fn`` on a worker thread and wait at most ``seconds`` for it.

    On expiry the worker is abandoned, not stopped. Exceptions raised by
    ``fn`` are re-raised in the caller.
    """
    results: queue.Queue = queue.Queue(maxsize=1)

    def worker():
        try:
            results.put((True, fn()))
        except Exception as e:
            results.put((False, e))

    thread = threading.Thread(target=worker, name="benchmine-extract", daemon=True)
    thread.start()
    try:
        ok, value = results.get(timeout=seconds)
    except queue.Empty:
        raise ExtractionTimeout(seconds) from None
    if not ok:
        raise value
    return value


def extract_code(
    project: Path,
    root_file: Path,
    function: str,
    config: ExtractorConfig | None = None,
) -> bytes:
    """Return a self-contained C file defining ``function`` and its dependencies."""
    project = check_path(project)
    root_file = check_path(root_file)

    ws = Workspace(project, root_file, function, config=config)
    keys = ws.resolve_dependencies()
    code = ws.emit_code(keys)
    logger.info(f"Extracted {function} from {root_file}: {ws.summary()}")
    return code


def extract_root(
    project: Path,
    root_file: Path,
    function: str,
    out_file: Path,
    config: ExtractorConfig | None = None,
) -> Path:
    """Extract ``function`` and write the result to ``out_file``."""
    code = extract_code(project, root_file, function, config)
    out_file = Path(out_file)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_bytes(code)
    return out_file


def extract_root_supervised(
    project: Path,
    root_file: Path,
    function: str,
    out_file: Path,
    config: ExtractorConfig | None = None,
) -> Path:
    """``extract_root`` with a hard deadline enforced from outside the workspace."""
    config = config or ExtractorConfig()
    return run_with_timeout(
        config.timeout + SUPERVISOR_GRACE,
        lambda: extract_root(project, root_file, function, out_file, config),
    )

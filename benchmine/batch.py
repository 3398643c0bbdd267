#!/usr/bin/env python3

"""
Batch extraction over a CSV of (project, file, function) rows.

Every row yields one output row: the path of the extracted benchmark, or the
sentinel ``error`` when the extraction failed. Output files are appended to,
so an interrupted run resumes where it stopped.
"""

import csv
import logging
import random
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from pydantic import BaseModel

from benchmine.config import ExtractorConfig
from benchmine.console import Console
from benchmine.errors import ExtractionError, ExtractionTimeout
from benchmine.extract import benchmark_path, extract_root_supervised

logger = logging.getLogger(__name__)

DEFAULT_SEED = 8966752472649624
ERROR = "error"
INPUT_COLUMNS = ("id", "project", "path", "function")
OUTPUT_COLUMNS = ("id", "file", "function", "benchmark")

# Paths produced by the parse phase look like
# <dest>/<id>-<sha>/<relative path>.functions/<n>
_PATH_PREFIX = re.compile(r"^.*?[0-9]+-[0-9a-fA-F]{40}/")
_PATH_SUFFIX = re.compile(r"\.functions/\d+$")


class BenchmarkRequest(BaseModel):
    id: int
    project: str
    path: str
    function: str

    def relative_path(self) -> str:
        path = _PATH_PREFIX.sub("", self.path, count=1)
        return _PATH_SUFFIX.sub("", path)

    def root_file(self) -> Path:
        rel = Path(self.relative_path())
        return rel if rel.is_absolute() else Path(self.project) / rel


class BenchmarkResult(BaseModel):
    id: int
    file: str
    function: str
    benchmark: str
    timed_out: bool = False

    @property
    def failed(self) -> bool:
        return self.benchmark == ERROR

    def row(self) -> list[str]:
        return [str(self.id), self.file, self.function, self.benchmark]


class BatchSummary(BaseModel):
    extracted: int = 0
    failed: int = 0
    timeouts: int = 0
    skipped: int = 0

    def record(self, result: BenchmarkResult) -> None:
        if result.timed_out:
            self.timeouts += 1
        if result.failed:
            self.failed += 1
        else:
            self.extracted += 1


def load_requests(input_csv: Path) -> list[BenchmarkRequest]:
    with open(input_csv, newline="") as f:
        reader = csv.DictReader(f)
        missing = set(INPUT_COLUMNS) - set(reader.fieldnames or [])
        if missing:
            raise ValueError(f"{input_csv} is missing columns: {', '.join(sorted(missing))}")
        return [BenchmarkRequest.model_validate(row) for row in reader]


def load_previous_results(output_csv: Path) -> set[tuple[str, str]]:
    """(file, function) pairs already present in an output file."""
    if not output_csv.exists():
        return set()
    with open(output_csv, newline="") as f:
        return {(row["file"], row["function"]) for row in csv.DictReader(f)}


def run_request(
    request: BenchmarkRequest, dest: Path, config: ExtractorConfig
) -> BenchmarkResult:
    root_file = request.root_file()
    result = BenchmarkResult(
        id=request.id, file=str(root_file), function=request.function, benchmark=ERROR
    )
    out_path = benchmark_path(dest, request.id, request.function)
    logger.info(f"Extracting benchmark for function {request.function} in file {root_file}")
    try:
        extract_root_supervised(request.project, root_file, request.function, out_path, config)
    except ExtractionTimeout as e:
        result.timed_out = True
        logger.warning(f"Timed out extracting {request.function} in file {root_file}: {e}")
    except ExtractionError as e:
        logger.warning(
            f"Could not extract benchmark for function {request.function} in file {root_file}:\n {e}"
        )
    except Exception as e:
        logger.exception(f"Unexpected failure extracting {request.function} in {root_file}: {e}")
    else:
        result.benchmark = str(out_path)
    return result


def run_batch(
    input_csv: Path,
    dest: Path,
    output_csv: Path | None = None,
    config: ExtractorConfig | None = None,
    seed: int = DEFAULT_SEED,
    overwrite: bool = False,
    threads: int = 1,
    console: Console | None = None,
) -> BatchSummary:
    config = config or ExtractorConfig()
    input_csv = Path(input_csv)
    dest = Path(dest)
    output_csv = Path(output_csv) if output_csv else Path(f"{input_csv}.benchmarks.csv")

    requests = load_requests(input_csv)
    random.Random(seed).shuffle(requests)

    previous = set() if overwrite else load_previous_results(output_csv)
    logger.info(f"Resuming from {len(previous)} previously extracted functions")

    summary = BatchSummary()
    write_header = overwrite or not output_csv.exists()
    output_csv.parent.mkdir(parents=True, exist_ok=True)

    with open(output_csv, "w" if overwrite else "a", newline="") as f:
        writer = csv.writer(f)
        if write_header:
            writer.writerow(OUTPUT_COLUMNS)

        def emit(result: BenchmarkResult):
            writer.writerow(result.row())
            f.flush()
            summary.record(result)

        pending: list[BenchmarkRequest] = []
        for request in requests:
            if request.project == ERROR:
                emit(
                    BenchmarkResult(
                        id=request.id,
                        file=request.relative_path(),
                        function=request.function,
                        benchmark=ERROR,
                    )
                )
            elif (str(request.root_file()), request.function) in previous:
                summary.skipped += 1
            else:
                pending.append(request)

        if console is None:
            _run_pending(pending, dest, config, threads, emit, advance=lambda: None)
        else:
            with console.progress() as progress:
                task = progress.add_task("Extracting", total=len(pending))
                _run_pending(
                    pending, dest, config, threads, emit, advance=lambda: progress.advance(task)
                )

    logger.info(f"Batch finished: {summary.model_dump()}")
    return summary


def _run_pending(pending, dest, config, threads, emit, advance):
    if threads <= 1:
        for request in pending:
            emit(run_request(request, dest, config))
            advance()
        return

    with ThreadPoolExecutor(max_workers=threads) as pool:
        futures = [pool.submit(run_request, request, dest, config) for request in pending]
        for future in as_completed(futures):
            emit(future.result())
            advance()

#!/usr/bin/env python3

"""Command line interface for benchmark extraction."""

import logging
import sys
from pathlib import Path

import click
from rich.logging import RichHandler

from benchmine.ast_provider import ClangAstProvider
from benchmine.batch import DEFAULT_SEED, run_batch
from benchmine.config import ExtractorConfig
from benchmine.console import Console
from benchmine.errors import ExtractionError, ExtractionTimeout
from benchmine.extract import extract_code, extract_root
from benchmine.fs import check_path
from benchmine.symbols import DeclKind, DeclRecord
from benchmine.workspace import Workspace, top_level_declarations

console = Console()


def _load_config(
    config_path: Path | None,
    search_from: Path | None = None,
    timeout: float | None = None,
    exact: bool = False,
    include_dirs: tuple[Path, ...] = (),
) -> ExtractorConfig:
    if config_path is not None:
        config = ExtractorConfig.load_from_file(config_path)
    else:
        config = (search_from and ExtractorConfig.find_config(search_from)) or ExtractorConfig()

    if timeout is not None:
        config.timeout = timeout
    if exact:
        config.cache = False
    config.clang_args = config.clang_args + [f"-I{d}" for d in include_dirs]
    return config


def _fail(e: ExtractionError):
    kind = "Timeout" if isinstance(e, ExtractionTimeout) else "Error"
    click.echo(f"{kind}: {e}", err=True)
    sys.exit(1)


config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON configuration file (defaults to the nearest benchmine_config.json)",
)
timeout_option = click.option(
    "--timeout", type=float, help="Timeout (in seconds) for extracting one function"
)
include_option = click.option(
    "-I",
    "include_dirs",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Extra include directory passed to clang",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Extract self-contained C files containing all the dependencies of a function."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True).rich, show_path=False)],
    )


@cli.command()
@click.argument("project", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("root_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("function")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Output C file")
@click.option("--exact", is_flag=True, help="Search files per symbol instead of caching whole files")
@timeout_option
@config_option
@include_option
def extract(
    project: Path,
    root_file: Path,
    function: str,
    output: Path | None,
    exact: bool,
    timeout: float | None,
    config_path: Path | None,
    include_dirs: tuple[Path, ...],
):
    """Extract FUNCTION from ROOT_FILE together with everything it depends on."""
    config = _load_config(config_path, project, timeout, exact, include_dirs)
    try:
        if output is None:
            click.echo(extract_code(project, root_file, function, config), nl=False)
        else:
            extract_root(project, root_file, function, output, config)
            console.print(f"[green]Wrote {output}[/green]")
    except ExtractionError as e:
        _fail(e)


@cli.command()
@click.argument("input_csv", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-d",
    "--dest",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory where the benchmark files will be stored",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output CSV (defaults to INPUT_CSV.benchmarks.csv)",
)
@click.option("--overwrite", is_flag=True, help="Overwrite the output file if it already exists")
@click.option("-s", "--seed", type=int, default=DEFAULT_SEED, help="Seed used to shuffle the input")
@click.option("-n", "--threads", type=int, default=1, help="Number of extractions to run in parallel")
@timeout_option
@config_option
def batch(
    input_csv: Path,
    dest: Path,
    output: Path | None,
    overwrite: bool,
    seed: int,
    threads: int,
    timeout: float | None,
    config_path: Path | None,
):
    """Extract every function listed in INPUT_CSV (columns id,project,path,function)."""
    config = _load_config(config_path, Path.cwd(), timeout)
    summary = run_batch(
        input_csv,
        dest,
        output_csv=output,
        config=config,
        seed=seed,
        overwrite=overwrite,
        threads=threads,
        console=console,
    )
    console.print(
        f"Extracted {summary.extracted}, failed {summary.failed} "
        f"({summary.timeouts} timeouts), skipped {summary.skipped}"
    )


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--search", "name", help="Only show declarations with this name")
@config_option
@include_option
def index(file: Path, name: str | None, config_path: Path | None, include_dirs: tuple[Path, ...]):
    """Show the declarations found in FILE."""
    config = _load_config(config_path, file.parent, include_dirs=include_dirs)
    try:
        root = ClangAstProvider(config.clang_args).parse(file)
        records = []
        for node in top_level_declarations(root):
            if name is not None and node.key.name != name:
                continue
            if node.kind == DeclKind.MACRO:
                decl = node
            else:
                decl = node.definition() or node.referenced() or node
            # Builtins have no file.
            if decl.file is not None and not decl.key.is_empty():
                records.append(DeclRecord.from_node(decl))
    except ExtractionError as e:
        _fail(e)

    seen = set()
    for record in records:
        if (record.kind, record.key) in seen:
            continue
        seen.add((record.kind, record.key))
        console.print(record.render(), markup=False, highlight=False)


@cli.command()
@click.argument("project", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("root_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("function")
@click.option("--exact", is_flag=True, help="Search files per symbol instead of caching whole files")
@timeout_option
@config_option
@include_option
def deps(
    project: Path,
    root_file: Path,
    function: str,
    exact: bool,
    timeout: float | None,
    config_path: Path | None,
    include_dirs: tuple[Path, ...],
):
    """Print the dependency order of FUNCTION without writing any code."""
    config = _load_config(config_path, project, timeout, exact, include_dirs)
    try:
        ws = Workspace(check_path(project), check_path(root_file), function, config=config)
        keys = ws.resolve_dependencies()
    except ExtractionError as e:
        _fail(e)

    for i, key in enumerate(keys, 1):
        record = ws.decls[key]
        location = Path(record.file).name if record.file else "?"
        console.print(f"{i:3d}. {record.kind.value:<8} {key.name or '<anonymous>':<25} ({location})")
    if ws.ignored:
        ignored = ", ".join(key.name or "<anonymous>" for key in ws.ignored)
        console.print(f"Ignored: {ignored}")


if __name__ == "__main__":
    cli()

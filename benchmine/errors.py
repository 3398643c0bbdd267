#!/usr/bin/env python3

"""Exceptions raised while extracting a function's dependency closure."""

from pathlib import Path


class ExtractionError(Exception):
    """Base class for every failure that aborts one extraction."""

    pass


class RootNotFoundError(ExtractionError):
    """Raised when the root function has no definition in the root file."""

    def __init__(self, function: str, root_file: Path):
        self.function = function
        self.root_file = root_file
        super().__init__(
            f"Root function {function} not found in {root_file} "
            "(potentially due to conditional compilation)"
        )


class StructuralError(ExtractionError):
    """The dependency graph would stop being a simple DAG."""

    pass


class DuplicateNodeError(StructuralError):
    pass


class SelfLoopError(StructuralError):
    pass


class UnknownNodeError(StructuralError):
    pass


class CycleError(StructuralError):
    """Raised when the dependency graph cannot be topologically sorted."""

    def __init__(self, remaining: list):
        self.remaining = remaining
        names = ", ".join(str(key) for key in remaining[:10])
        super().__init__(f"Cycle detected in dependency graph between: {names}")


class ParseError(ExtractionError):
    """The compiler front end could not parse a file."""

    def __init__(self, path: Path, reason: str = ""):
        self.path = path
        message = f"Could not parse file {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class SourceRangeError(ExtractionError):
    """A declaration's byte range cannot be read back from its file."""

    def __init__(self, path: Path | None, message: str):
        self.path = path
        super().__init__(f"{message} ({path})" if path else message)


class ExtractionTimeout(ExtractionError):
    """The wall-clock budget of an extraction ran out."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Timeout reached after {timeout}s")


class PathError(ExtractionError):
    """An input path is missing or lies outside the project."""

    pass

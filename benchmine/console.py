#!/usr/bin/env python3

from rich.console import Console as RichConsole
from rich.progress import BarColumn, Progress, TimeElapsedColumn, TaskProgressColumn


class Console:
    """Simple console wrapper focused on output."""

    def __init__(self, stderr: bool = False):
        self._rich = RichConsole(stderr=stderr)

    @property
    def rich(self) -> RichConsole:
        return self._rich

    def print(self, *args, **kwargs):
        """Print using Rich console."""
        return self._rich.print(*args, **kwargs)

    def progress(self) -> Progress:
        """Progress bar showing elapsed time and percentage."""
        return Progress(
            TimeElapsedColumn(),
            BarColumn(),
            TaskProgressColumn(),
            console=self._rich,
        )

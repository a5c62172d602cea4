"""
Shared CLI utilities for mlstscan commands.

Provides logging setup, reference-data location defaults and console helpers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

# Reference data layout when --datadir is not given
DEFAULT_DATADIR = Path("db") / "pubmlst"
BLASTDB_DIRNAME = "blast"
BLASTDB_FILENAME = "mlst.fa"


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route library logging to stderr through rich.

    WARNING by default, INFO with --verbose, ERROR with --quiet.

    Args:
        verbose: Show progress messages for every genome.
        quiet: Only show errors.
    """
    level = logging.WARNING
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.INFO

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, RichHandler)]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


def resolve_datadir(datadir: Path | None) -> Path:
    """Scheme data directory, falling back to ./db/pubmlst."""
    return datadir if datadir is not None else DEFAULT_DATADIR


def resolve_blastdb(blastdb: Path | None, datadir: Path) -> Path:
    """BLAST database prefix, defaulting to <datadir>/../blast/mlst.fa."""
    if blastdb is not None:
        return blastdb
    return datadir.parent / BLASTDB_DIRNAME / BLASTDB_FILENAME


@contextmanager
def spinner_progress(
    description: str,
    console: Console | None = None,
    quiet: bool = False,
) -> Iterator[Progress]:
    """Show an indeterminate spinner with elapsed time while a tool runs."""
    columns = (
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
    )
    with Progress(*columns, console=None if quiet else console, disable=quiet) as progress:
        progress.add_task(description=description, total=None)
        yield progress


class QuietConsole:
    """
    Stderr status messages that --quiet switches off.

    Rows written to stdout never go through this wrapper.
    """

    def __init__(self, console: Console, quiet: bool = False):
        self.console = console
        self.quiet = quiet

    def print(self, *args: Any, **kwargs: Any) -> None:
        if not self.quiet:
            self.console.print(*args, **kwargs)

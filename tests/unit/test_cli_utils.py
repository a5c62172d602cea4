"""
Unit tests for CLI utility functions.

Tests for reference data defaults, logging setup and QuietConsole.
"""

from __future__ import annotations

import logging
from io import StringIO
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from mlstscan.cli.utils import (
    DEFAULT_DATADIR,
    QuietConsole,
    resolve_blastdb,
    resolve_datadir,
    setup_logging,
    spinner_progress,
)


class TestReferencePaths:
    """Tests for --datadir / --blastdb defaults."""

    def test_default_datadir(self) -> None:
        assert resolve_datadir(None) == DEFAULT_DATADIR

    def test_explicit_datadir(self) -> None:
        assert resolve_datadir(Path("/data/pubmlst")) == Path("/data/pubmlst")

    def test_default_blastdb_is_sibling_of_datadir(self) -> None:
        assert resolve_blastdb(None, Path("/data/pubmlst")) == Path("/data/blast/mlst.fa")

    def test_explicit_blastdb(self) -> None:
        assert resolve_blastdb(Path("/x/db.fa"), Path("/data/pubmlst")) == Path("/x/db.fa")


class TestSetupLogging:
    """Tests for setup_logging levels."""

    def teardown_method(self) -> None:
        root = logging.getLogger()
        for handler in [h for h in root.handlers if isinstance(h, RichHandler)]:
            root.removeHandler(handler)
        root.setLevel(logging.WARNING)

    def test_default_level(self) -> None:
        setup_logging()
        assert logging.getLogger().level == logging.WARNING

    def test_verbose(self) -> None:
        setup_logging(verbose=True)
        assert logging.getLogger().level == logging.INFO

    def test_quiet_wins(self) -> None:
        setup_logging(verbose=True, quiet=True)
        assert logging.getLogger().level == logging.ERROR

    def test_handler_not_duplicated(self) -> None:
        setup_logging()
        setup_logging()
        handlers = [h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1


class TestQuietConsole:
    """Tests for QuietConsole."""

    def test_prints(self) -> None:
        buffer = StringIO()
        QuietConsole(Console(file=buffer)).print("hello")
        assert "hello" in buffer.getvalue()

    def test_quiet(self) -> None:
        buffer = StringIO()
        QuietConsole(Console(file=buffer), quiet=True).print("hello")
        assert buffer.getvalue() == ""

    def test_spinner_quiet(self) -> None:
        buffer = StringIO()
        with spinner_progress("Running", Console(file=buffer), quiet=True):
            pass
        assert buffer.getvalue() == ""

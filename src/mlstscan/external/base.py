"""
Subprocess plumbing shared by the BLAST+ wrappers.

A wrapper subclass names its executable and turns keyword arguments into an
argument list; this module takes care of locating the executable, running
it without a shell, timing it and converting failures into MlstscanError
subclasses the CLI knows how to report.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from mlstscan.core.exceptions import MlstscanError

logger = logging.getLogger(__name__)

# Characters that never need a second look in an argument list
_PLAIN_PATH = re.compile(r"^[\w\-./]+$")

# Limits for echoing commands and tool output back to the user
MAX_COMMAND_CHARS = 200
MAX_STDERR_CHARS = 500

ExecutableResolver = Callable[[str], str | None]


def _shorten(text: str, limit: int, marker: str = "...") -> str:
    return text if len(text) <= limit else text[:limit] + marker


class UnsafePathError(MlstscanError):
    """A path cannot be handed to an external program."""

    def __init__(self, path: Path, reason: str = ""):
        super().__init__(
            message=f"Unsafe path detected: {path}" + (f": {reason}" if reason else ""),
            suggestion="Rename the file so that its path contains no control characters.",
        )
        self.path = path


def validate_path_safe(path: Path, *, must_exist: bool = False) -> Path:
    """
    Resolve a path before placing it on a command line.

    Commands are run as argument lists, so spaces and brackets are harmless
    and only logged. A null byte would truncate the argument and is refused.

    Raises:
        UnsafePathError: If the path contains a null byte
        FileNotFoundError: If must_exist is set and nothing is there
    """
    # resolve() itself rejects null bytes with a bare ValueError
    if "\x00" in str(path):
        raise UnsafePathError(path, "contains null byte")

    resolved = path.resolve()
    if not _PLAIN_PATH.match(str(resolved)):
        logger.debug("Path contains unusual characters: %s", resolved)
    if must_exist and not resolved.exists():
        raise FileNotFoundError(f"Path does not exist: {resolved}")

    return resolved


class ToolNotFoundError(MlstscanError):
    """blastn or makeblastdb could not be located."""

    def __init__(self, tool_name: str, install_hint: str = ""):
        suggestion = f"Install {tool_name} and ensure it is in your PATH."
        if install_hint:
            suggestion += f"\n\nInstallation:\n  {install_hint}"
        super().__init__(
            message=f"Required tool '{tool_name}' not found in PATH",
            suggestion=suggestion,
        )
        self.tool_name = tool_name


class ToolExecutionError(MlstscanError):
    """An external program exited with a non-zero status."""

    def __init__(self, tool_name: str, command: Sequence[str], return_code: int, stderr: str):
        shown_command = _shorten(" ".join(command), MAX_COMMAND_CHARS)
        shown_stderr = _shorten(stderr.strip(), MAX_STDERR_CHARS, "\n...[truncated]")
        super().__init__(
            message=(
                f"{tool_name} failed with exit code {return_code}\n\n"
                f"Command: {shown_command}\n\n"
                f"Error output:\n{shown_stderr}"
            ),
            suggestion=(
                "Check that the BLAST database was built with 'mlstscan makedb' "
                "and that the input file is a valid assembly."
            ),
        )
        self.tool_name = tool_name
        self.command = list(command)
        self.return_code = return_code
        self.stderr = stderr


class ToolTimeoutError(MlstscanError):
    """An external program ran longer than --timeout allowed."""

    def __init__(self, tool_name: str, timeout_seconds: float, command: Sequence[str]):
        shown_command = _shorten(" ".join(command), MAX_COMMAND_CHARS)
        super().__init__(
            message=(
                f"{tool_name} timed out after {timeout_seconds:.0f} seconds\n\n"
                f"Command: {shown_command}"
            ),
            suggestion="Increase --timeout or check that the input is a single assembly.",
        )
        self.tool_name = tool_name
        self.timeout_seconds = timeout_seconds
        self.command = list(command)


@dataclass(frozen=True)
class ToolResult:
    """Captured outcome of one invocation (or of a dry run, with empty output)."""

    command: tuple[str, ...]
    return_code: int
    stdout: str
    stderr: str
    elapsed_seconds: float

    @property
    def success(self) -> bool:
        return self.return_code == 0

    @property
    def command_string(self) -> str:
        return " ".join(self.command)

    @property
    def stdout_lines(self) -> list[str]:
        """Output lines with blank lines dropped."""
        return [line for line in self.stdout.splitlines() if line.strip()]


class ExternalTool(ABC):
    """
    One command-line program.

    Subclasses set TOOL_NAME (plus optional TOOL_ALIASES and INSTALL_HINT)
    and implement build_command(). Executable lookups go through a
    per-class resolver, shutil.which unless replaced, and are remembered
    until the resolver changes, including failed lookups.

    Example:
        >>> BlastN.set_executable_resolver(lambda name: f"/opt/blast/bin/{name}")
        >>> BlastN.get_executable()
        PosixPath('/opt/blast/bin/blastn')
    """

    TOOL_NAME: ClassVar[str]
    TOOL_ALIASES: ClassVar[tuple[str, ...]] = ()
    INSTALL_HINT: ClassVar[str] = ""

    _located: ClassVar[dict[str, Path | None]] = {}
    _executable_resolver: ClassVar[ExecutableResolver] = staticmethod(shutil.which)

    @classmethod
    def _locate(cls) -> Path | None:
        if cls.TOOL_NAME not in cls._located:
            found = None
            for name in (cls.TOOL_NAME, *cls.TOOL_ALIASES):
                location = cls._executable_resolver(name)
                if location:
                    found = Path(location)
                    break
            cls._located[cls.TOOL_NAME] = found
        return cls._located[cls.TOOL_NAME]

    @classmethod
    def get_executable(cls) -> Path:
        """
        Return the executable path.

        Raises:
            ToolNotFoundError: If neither the name nor an alias resolves
        """
        path = cls._locate()
        if path is None:
            raise ToolNotFoundError(cls.TOOL_NAME, cls.INSTALL_HINT)
        return path

    @classmethod
    def check_available(cls) -> bool:
        return cls._locate() is not None

    @classmethod
    def clear_cache(cls) -> None:
        cls._located.clear()

    @classmethod
    def set_executable_resolver(cls, resolver: ExecutableResolver) -> None:
        """Look executables up with resolver instead of shutil.which."""
        cls._executable_resolver = staticmethod(resolver)
        cls.clear_cache()

    @classmethod
    def reset_executable_resolver(cls) -> None:
        cls._executable_resolver = staticmethod(shutil.which)
        cls.clear_cache()

    @abstractmethod
    def build_command(self, **kwargs: object) -> list[str]:
        """Argument list for one invocation, executable first."""

    def run(
        self,
        *,
        timeout: float | None = None,
        dry_run: bool = False,
        **kwargs: object,
    ) -> ToolResult:
        """
        Build the command from kwargs and execute it.

        A non-zero exit status is returned, not raised; see run_or_raise().

        Args:
            timeout: Seconds before the process is killed (None waits forever)
            dry_run: Only build the command

        Raises:
            ToolNotFoundError: If the executable is missing
            ToolTimeoutError: If the process outlives timeout
        """
        command = self.build_command(**kwargs)
        if dry_run:
            return ToolResult(tuple(command), 0, "", "", 0.0)

        logger.debug("Running: %s", " ".join(command))
        started = time.perf_counter()
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ToolTimeoutError(self.TOOL_NAME, timeout or 0, command) from e
        except FileNotFoundError as e:
            # Removed between lookup and execution
            raise ToolNotFoundError(self.TOOL_NAME, self.INSTALL_HINT) from e

        return ToolResult(
            command=tuple(command),
            return_code=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
            elapsed_seconds=time.perf_counter() - started,
        )

    def run_or_raise(
        self,
        *,
        timeout: float | None = None,
        dry_run: bool = False,
        **kwargs: object,
    ) -> ToolResult:
        """Like run(), but a non-zero exit status raises ToolExecutionError."""
        result = self.run(timeout=timeout, dry_run=dry_run, **kwargs)
        if not result.success:
            raise ToolExecutionError(
                self.TOOL_NAME,
                result.command,
                result.return_code,
                result.stderr,
            )
        return result

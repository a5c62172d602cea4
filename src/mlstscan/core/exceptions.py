"""
Custom exceptions with actionable guidance.

Provides specific error types for common failure scenarios,
each with helpful suggestions for resolution.
"""

from __future__ import annotations


class MlstscanError(Exception):
    """Base exception for mlstscan errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class ConfigurationError(MlstscanError):
    """Raised when configuration is invalid."""


class UnknownSchemeError(ConfigurationError):
    """Raised when a forced scheme is not present in the scheme catalog."""

    def __init__(self, scheme: str, available: list[str]):
        examples = ", ".join(sorted(available)[:10])
        if len(available) > 10:
            examples += f"... and {len(available) - 10} more"

        super().__init__(
            message=f"Unknown scheme: '{scheme}'",
            suggestion=(
                f"Available schemes: {examples or '(none)'}\n\n"
                "Run 'mlstscan schemes' to list every scheme in the data directory."
            ),
        )
        self.scheme = scheme


class InvalidOptionError(ConfigurationError):
    """Raised when command-line options are inconsistent."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message=message, suggestion=suggestion)


class NoInputFilesError(ConfigurationError):
    """Raised when no genome files were supplied."""

    def __init__(self):
        super().__init__(
            message="No input genome files were given",
            suggestion=(
                "Pass one or more assemblies (FASTA, GenBank or EMBL, optionally "
                "gzipped), e.g. 'mlstscan type contigs.fa'."
            ),
        )


class SchemeDataError(MlstscanError):
    """Raised when a scheme directory is missing files or is malformed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Invalid scheme data in '{path}': {reason}",
            suggestion=(
                "Each scheme directory must contain a tab-separated profile table "
                "named '<scheme>.txt' with an 'ST' column followed by one column per "
                "gene, and one '<gene>.tfa' allele FASTA file per gene."
            ),
        )
        self.path = path


class InputFormatError(MlstscanError):
    """Raised when an input genome file cannot be read as a sequence file."""

    def __init__(self, path: str, reason: str = ""):
        detail = f": {reason}" if reason else ""
        super().__init__(
            message=f"Could not read sequences from '{path}'{detail}",
            suggestion=(
                "Supported inputs are FASTA, FASTQ, GenBank and EMBL files, "
                "optionally gzip-compressed."
            ),
        )
        self.path = path

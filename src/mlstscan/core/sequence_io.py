"""
Input sequence normalization.

The aligner only accepts plain FASTA, so gzip-compressed inputs and
GenBank, EMBL or FASTQ files are converted to a temporary FASTA first.
Plain, uncompressed FASTA files are passed through untouched.
"""

from __future__ import annotations

import gzip
import logging
import os
import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Literal

from mlstscan.core.exceptions import InputFormatError

logger = logging.getLogger(__name__)

SequenceFormat = Literal["fasta", "fastq", "genbank", "embl"]

GZIP_MAGIC = b"\x1f\x8b"


def is_gzipped(path: Path) -> bool:
    """Check the gzip magic number rather than trusting the extension."""
    with path.open("rb") as handle:
        return handle.read(2) == GZIP_MAGIC


def open_text(path: Path) -> IO[str]:
    """Open a possibly gzip-compressed text file."""
    if is_gzipped(path):
        return gzip.open(path, "rt")
    return path.open("r")


def detect_format(path: Path) -> SequenceFormat:
    """
    Sniff the sequence format from the first non-blank line.

    Args:
        path: Input file (may be gzipped)

    Returns:
        "fasta", "fastq", "genbank" or "embl"

    Raises:
        InputFormatError: If the file is missing, empty or unrecognized
    """
    if not path.is_file():
        raise InputFormatError(str(path), "file not found")

    try:
        with open_text(path) as handle:
            for line in handle:
                if line.strip():
                    first = line
                    break
            else:
                raise InputFormatError(str(path), "file is empty")
    except (OSError, UnicodeDecodeError, EOFError) as e:
        raise InputFormatError(str(path), str(e)) from e

    if first.startswith(">"):
        return "fasta"
    if first.startswith("@"):
        return "fastq"
    if first.startswith("LOCUS"):
        return "genbank"
    if first.startswith("ID "):
        return "embl"
    raise InputFormatError(str(path), "unrecognized sequence format")


@contextmanager
def normalized_fasta(path: Path) -> Generator[Path, None, None]:
    """
    Yield a plain FASTA path for any supported input.

    The temporary file, if one was needed, is removed on exit.

    Args:
        path: Input genome file

    Yields:
        Path to a plain FASTA file

    Raises:
        InputFormatError: If the input cannot be converted
    """
    fmt = detect_format(path)
    if fmt == "fasta" and not is_gzipped(path):
        yield path
        return

    from Bio import SeqIO

    fd, temp_str = tempfile.mkstemp(suffix=".fasta", prefix="mlstscan_")
    os.close(fd)
    temp_fasta = Path(temp_str)

    try:
        try:
            with open_text(path) as fin, temp_fasta.open("w") as fout:
                count = SeqIO.write(SeqIO.parse(fin, fmt), fout, "fasta")
        except (ValueError, OSError, EOFError) as e:
            raise InputFormatError(str(path), str(e)) from e

        if count == 0:
            raise InputFormatError(str(path), f"no sequences found in {fmt} input")

        logger.debug("Converted %s (%s) to %s: %d sequences", path, fmt, temp_fasta, count)
        yield temp_fasta
    finally:
        if temp_fasta.exists():
            temp_fasta.unlink()

"""
Result formatting for stdout rows and JSON files.

Two row layouts are supported:

    legacy:      FILE  SCHEME  ST  1  3  ~4  2?  -
    autodetect:  FILE  SCHEME  ST  arcC(1)  aroE(3)  glpF(~4) ...

Legacy rows carry bare labels under a header row listing the genes of the
forced scheme. Autodetect rows name each gene, since genomes in one run may
match different schemes.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from mlstscan.core.schemes import Scheme
from mlstscan.models.results import GenomeResult

TAB = "\t"
COMMA = ","


def display_filename(path: Path | str, nopath: bool = False) -> str:
    """Return the name shown for a genome file, optionally without directories."""
    if nopath:
        return Path(path).name
    return str(path)


def format_header(scheme: Scheme, separator: str = TAB) -> str:
    """Header row for legacy output: FILE, SCHEME, ST, then the scheme genes."""
    return separator.join(["FILE", "SCHEME", "ST", *scheme.genes])


def format_row(result: GenomeResult, legacy: bool = False, separator: str = TAB) -> str:
    """
    Format one genome result as a delimited row.

    Args:
        result: Typing result
        legacy: Bare labels (legacy) instead of gene(label) columns
        separator: Column delimiter

    Returns:
        Row without trailing newline
    """
    columns = [result.filename, result.scheme, result.sequence_type]
    labels = result.allele_labels()
    if legacy:
        columns.extend(labels.values())
    else:
        columns.extend(f"{gene}({label})" for gene, label in labels.items())
    return separator.join(columns)


def results_to_json(results: Iterable[GenomeResult]) -> str:
    """Serialize results to a JSON array, one object per genome."""
    return json.dumps([r.to_json_dict() for r in results], indent=2)


def write_json(results: Iterable[GenomeResult], path: Path) -> None:
    """Write results_to_json() output to a file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(results_to_json(results) + "\n")

"""
Pydantic models for allele alignment hits.

These models represent the fixed 8-column BLAST tabular output
(-outfmt "6 sseqid slen length nident qseqid qstart qend qseq") produced
when a genome assembly is aligned against the combined allele database.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import ClassVar, Self

from pydantic import BaseModel, Field, ValidationError, model_validator

from mlstscan.core.constants import HIT_COLUMNS

logger = logging.getLogger(__name__)


class AlleleHit(BaseModel):
    """
    Single alignment between a genome region and one reference allele.

    Attributes:
        scheme: Scheme identifier parsed from the allele sequence ID
        gene: Marker gene name
        allele: Allele number
        allele_length: Length of the reference allele (slen)
        alignment_length: Alignment length (length)
        identical: Number of identical bases (nident)
        query_id: Contig identifier in the genome
        query_start: Alignment start on the contig
        query_end: Alignment end on the contig
        query_sequence: Aligned contig sequence (qseq)
    """

    scheme: str = Field(min_length=1, description="Scheme identifier")
    gene: str = Field(min_length=1, description="Marker gene name")
    allele: int = Field(ge=0, description="Allele number")
    allele_length: int = Field(ge=1, description="Reference allele length")
    alignment_length: int = Field(ge=0, description="Alignment length")
    identical: int = Field(ge=0, description="Identical bases in the alignment")
    query_id: str = Field(description="Query contig identifier")
    query_start: int = Field(ge=1, description="Query start position")
    query_end: int = Field(ge=1, description="Query end position")
    query_sequence: str = Field(default="", description="Aligned query sequence")

    # Allele sequence IDs look like "saureus.arcC_3" or "saureus.arcC-3".
    # The scheme cannot contain a dot; the gene may contain '_' or '-',
    # so the allele number is always the trailing integer.
    ALLELE_ID_PATTERN: ClassVar[re.Pattern] = re.compile(
        r"^(?P<scheme>[^.\s]+)\.(?P<gene>\S+)[_-](?P<allele>\d+)$"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_counts(self) -> Self:
        """Identical bases can never exceed the alignment length."""
        if self.identical > self.alignment_length:
            msg = (
                f"identical ({self.identical}) must be <= "
                f"alignment_length ({self.alignment_length})"
            )
            raise ValueError(msg)
        return self

    @property
    def coverage(self) -> float:
        """Fraction of the reference allele covered by identical bases."""
        return self.identical / self.allele_length

    @property
    def is_full_length(self) -> bool:
        """True if the alignment spans the whole reference allele."""
        return self.alignment_length == self.allele_length

    @property
    def is_exact(self) -> bool:
        """True for a full-length, 100% identical alignment."""
        return self.is_full_length and self.identical == self.allele_length

    @classmethod
    def split_allele_id(cls, sseqid: str) -> tuple[str, str, int]:
        """
        Split an allele sequence ID into (scheme, gene, allele number).

        Args:
            sseqid: Reference sequence identifier, e.g. "saureus.arcC_3"

        Returns:
            Tuple of scheme, gene and allele number

        Raises:
            ValueError: If the identifier does not follow the scheme.gene_N layout
        """
        match = cls.ALLELE_ID_PATTERN.match(sseqid)
        if match is None:
            msg = f"Allele ID does not match 'scheme.gene_N': {sseqid!r}"
            raise ValueError(msg)
        return match.group("scheme"), match.group("gene"), int(match.group("allele"))

    @classmethod
    def from_hit_line(cls, line: str) -> AlleleHit:
        """
        Parse a single line of allele hit table output.

        Expected format (8 tab-separated fields):
        sseqid slen length nident qseqid qstart qend qseq

        Args:
            line: Tab-delimited hit line

        Returns:
            Parsed AlleleHit instance

        Raises:
            ValueError: If the line format, identifier or numeric fields are invalid
        """
        fields = line.rstrip("\r\n").split("\t")
        if len(fields) != len(HIT_COLUMNS):
            msg = f"Expected {len(HIT_COLUMNS)} fields in hit line, got {len(fields)}"
            raise ValueError(msg)

        scheme, gene, allele = cls.split_allele_id(fields[0])

        return cls(
            scheme=scheme,
            gene=gene,
            allele=allele,
            allele_length=int(fields[1]),
            alignment_length=int(fields[2]),
            identical=int(fields[3]),
            query_id=fields[4],
            query_start=int(fields[5]),
            query_end=int(fields[6]),
            query_sequence=fields[7],
        )


def parse_hit_line(line: str) -> AlleleHit | None:
    """
    Parse one hit line, returning None for anything that is not a hit.

    Blank lines, comment lines and malformed rows are skipped rather than
    raised, since aligner output may contain commentary.

    Args:
        line: Raw line from the aligner

    Returns:
        AlleleHit, or None if the line should be skipped
    """
    if not line.strip() or line.startswith("#"):
        return None
    try:
        return AlleleHit.from_hit_line(line)
    except (ValueError, ValidationError) as e:
        logger.debug("Skipping hit line %r: %s", line[:80], e)
        return None


def iter_hits(lines: Iterable[str]) -> Iterator[AlleleHit]:
    """
    Yield parsed hits from raw aligner lines, in input order.

    Args:
        lines: Raw tabular lines

    Yields:
        AlleleHit for every line that parses
    """
    for line in lines:
        hit = parse_hit_line(line)
        if hit is not None:
            yield hit


def read_hit_table(path: Path) -> Iterator[AlleleHit]:
    """
    Stream hits from a saved hit table (plain or gzip-compressed).

    Args:
        path: Tabular file in the 8-column hit layout

    Yields:
        AlleleHit for every line that parses
    """
    from mlstscan.core.sequence_io import open_text

    with open_text(path) as handle:
        yield from iter_hits(handle)

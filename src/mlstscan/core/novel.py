"""
Registry of candidate novel alleles observed across a typing run.

Every full-length hit that is either an exact allele match or an
approximate (mismatched) match is recorded here, keyed by the aligned
genome sequence. Exact entries mark a sequence as already cataloged;
only sequences whose entry is approximate are reported as novel.

The registry is shared by all genomes of a run and is not reset between
them. It assumes a single writer: genomes must be classified one at a
time, in input order, for the first-registration semantics to hold.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from mlstscan.models.calls import CallKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NovelAlleleEntry:
    """Registry entry for one distinct sequence.

    Attributes:
        label: Descriptive label, e.g. "saureus.arcC-~3"
        source: File name of the genome the sequence was seen in
        kind: EXACT or APPROXIMATE
    """

    label: str
    source: str
    kind: CallKind


@dataclass(frozen=True)
class NovelAllele:
    """Novel allele ready for output."""

    label: str
    source: str
    sequence: str


def allele_label(scheme: str, gene: str, display: str) -> str:
    """Build a registry label such as 'saureus.arcC-~3'."""
    return f"{scheme}.{gene}-{display}"


class NovelAlleleRegistry:
    """
    Process-wide mapping from sequence content to its best label.

    Deduplication is by exact sequence equality. An exact entry always
    replaces whatever was recorded before; an approximate entry is only
    stored when nothing is recorded yet for that sequence, so it can never
    downgrade an exact entry.
    """

    def __init__(self) -> None:
        self._entries: dict[str, NovelAlleleEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, sequence: object) -> bool:
        return sequence in self._entries

    def get(self, sequence: str) -> NovelAlleleEntry | None:
        """Return the entry recorded for a sequence, if any."""
        return self._entries.get(sequence)

    def register_exact(self, sequence: str, label: str, source: str) -> None:
        """Record a sequence that exactly matches a cataloged allele."""
        if not sequence:
            return
        self._entries[sequence] = NovelAlleleEntry(label, source, CallKind.EXACT)

    def register_approximate(self, sequence: str, label: str, source: str) -> bool:
        """
        Record a full-length, mismatched sequence unless already known.

        Args:
            sequence: Aligned genome sequence
            label: Descriptive label
            source: Genome file name

        Returns:
            True if a new entry was created
        """
        if not sequence or sequence in self._entries:
            return False
        self._entries[sequence] = NovelAlleleEntry(label, source, CallKind.APPROXIMATE)
        logger.debug("Recorded candidate novel allele %s from %s", label, source)
        return True

    def novel_alleles(self) -> list[NovelAllele]:
        """
        Return every sequence whose entry is approximate.

        Returns:
            Novel alleles in first-registration order
        """
        return [
            NovelAllele(label=entry.label, source=entry.source, sequence=sequence)
            for sequence, entry in self._entries.items()
            if entry.kind is CallKind.APPROXIMATE
        ]

    def write_fasta(self, path: Path) -> int:
        """
        Write novel alleles to a FASTA file.

        Args:
            path: Output FASTA path

        Returns:
            Number of sequences written
        """
        from Bio import SeqIO

        records = [
            SeqRecord(Seq(allele.sequence), id=allele.label, description=allele.source)
            for allele in self.novel_alleles()
        ]
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w") as handle:
            count = SeqIO.write(records, handle, "fasta")
        logger.info("Wrote %d novel alleles to %s", count, path)
        return count

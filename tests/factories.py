"""
Test data factories for typing tests.

Provides deterministic allele sequences, 8-column hit lines and on-disk
PubMLST-style scheme directories.
"""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import NamedTuple

# Reference length of every allele in hit lines
ALLELE_LENGTH = 450

# Allele length written to .tfa files (kept short for fast tests)
TFA_ALLELE_LENGTH = 30

SAUREUS_GENES = ["arcC", "aroE", "glpF", "gmk", "pta", "tpi", "yqiL"]
SEPIDERMIDIS_GENES = ["arcC", "aroE", "gtr", "mutS", "pyrR", "tpiA", "yqiL"]
ECOLI2_GENES = ["dinB", "icdA", "pabB", "polB", "putP", "trpA", "trpB", "uidA"]

SAUREUS_PROFILES = {
    "1": [1, 1, 1, 1, 1, 1, 1],
    "5": [1, 4, 1, 4, 12, 1, 10],
    "8": [3, 3, 1, 1, 4, 4, 3],
}
SEPIDERMIDIS_PROFILES = {
    "2": [7, 1, 2, 2, 4, 1, 1],
}
ECOLI2_PROFILES = {
    "2": [1, 1, 1, 1, 1, 1, 1, 1],
}


def allele_sequence(scheme: str, gene: str, allele: int, length: int = ALLELE_LENGTH) -> str:
    """Deterministic pseudo-random sequence for one allele."""
    rng = random.Random(f"{scheme}.{gene}_{allele}")
    return "".join(rng.choice("ACGT") for _ in range(length))


def mutate(sequence: str, mismatches: int, seed: str = "mutate") -> str:
    """Introduce substitutions at deterministic positions."""
    rng = random.Random(seed)
    bases = list(sequence)
    for pos in rng.sample(range(len(bases)), mismatches):
        bases[pos] = {"A": "C", "C": "G", "G": "T", "T": "A"}[bases[pos]]
    return "".join(bases)


class HitRecord(NamedTuple):
    """A single row of the 8-column hit table."""

    sseqid: str
    slen: int
    length: int
    nident: int
    qseqid: str
    qstart: int
    qend: int
    qseq: str

    def to_line(self) -> str:
        return "\t".join(str(value) for value in self)


class HitFactory:
    """
    Build hit lines with controlled exactness and coverage.

    Example:
        >>> hits = HitFactory()
        >>> hits.exact("saureus", "arcC", 3)
        'saureus.arcC_3\\t450\\t450\\t450\\tcontig_1\\t1\\t450\\t...'
    """

    def __init__(self, contig: str = "contig_1", allele_length: int = ALLELE_LENGTH):
        self.contig = contig
        self.allele_length = allele_length
        self._offset = 0

    def record(
        self,
        scheme: str,
        gene: str,
        allele: int,
        *,
        length: int | None = None,
        nident: int | None = None,
        slen: int | None = None,
        qseq: str | None = None,
        separator: str = "_",
    ) -> HitRecord:
        slen = slen if slen is not None else self.allele_length
        length = length if length is not None else slen
        nident = nident if nident is not None else length
        if qseq is None:
            qseq = allele_sequence(scheme, gene, allele, slen)[:length]
        start = self._offset + 1
        self._offset += length + 100
        return HitRecord(
            sseqid=f"{scheme}.{gene}{separator}{allele}",
            slen=slen,
            length=length,
            nident=nident,
            qseqid=self.contig,
            qstart=start,
            qend=start + length - 1,
            qseq=qseq,
        )

    def exact(self, scheme: str, gene: str, allele: int, **kwargs) -> str:
        """Full-length, 100% identical hit."""
        return self.record(scheme, gene, allele, **kwargs).to_line()

    def approximate(self, scheme: str, gene: str, allele: int, mismatches: int = 3) -> str:
        """Full-length hit with substitutions."""
        sequence = allele_sequence(scheme, gene, allele, self.allele_length)
        return self.record(
            scheme,
            gene,
            allele,
            nident=self.allele_length - mismatches,
            qseq=mutate(sequence, mismatches, seed=f"{scheme}.{gene}_{allele}"),
        ).to_line()

    def partial(self, scheme: str, gene: str, allele: int, covered: int = 200) -> str:
        """Hit covering only part of the allele."""
        return self.record(scheme, gene, allele, length=covered, nident=covered).to_line()

    def profile(self, scheme: str, genes: Sequence[str], alleles: Sequence[int]) -> list[str]:
        """Exact hits for a whole allelic profile."""
        return [self.exact(scheme, gene, allele) for gene, allele in zip(genes, alleles)]


def write_scheme(
    datadir: Path,
    name: str,
    genes: Sequence[str],
    profiles: Mapping[str, Sequence[int]],
    extra_rows: Sequence[str] = (),
) -> Path:
    """
    Write a PubMLST-style scheme directory.

    Args:
        datadir: Parent data directory
        name: Scheme name
        genes: Gene columns in order
        profiles: ST -> allele numbers
        extra_rows: Raw tab-separated rows appended to the profile table

    Returns:
        The scheme directory
    """
    directory = datadir / name
    directory.mkdir(parents=True, exist_ok=True)

    lines = ["\t".join(["ST", *genes, "clonal_complex"])]
    for st, alleles in profiles.items():
        lines.append("\t".join([st, *(str(a) for a in alleles), "CC1"]))
    lines.extend(extra_rows)
    (directory / f"{name}.txt").write_text("\n".join(lines) + "\n")

    for index, gene in enumerate(genes):
        highest = max([alleles[index] for alleles in profiles.values()] or [1])
        with (directory / f"{gene}.tfa").open("w") as handle:
            for allele in range(1, highest + 1):
                sequence = allele_sequence(name, gene, allele, TFA_ALLELE_LENGTH)
                handle.write(f">{gene}_{allele}\n{sequence.lower()}\n")

    return directory


def write_fasta(path: Path, contigs: Mapping[str, str] | None = None) -> Path:
    """Write a small genome assembly."""
    contigs = contigs or {"contig_1": "ACGT" * 50}
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f">{name}\n{seq}\n" for name, seq in contigs.items()))
    return path

"""
Scheme catalog and sequence-type resolution.

Reads PubMLST-style scheme directories:

    <datadir>/<scheme>/<scheme>.txt    tab-separated ST profile table
    <datadir>/<scheme>/<gene>.tfa      allele FASTA, one file per gene

The profile header is "ST", then one column per gene, optionally followed by
extra columns such as "clonal_complex". Genes are the header columns that
have an allele file, in header order; that order is the scheme's canonical
gene order used for signatures.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import polars as pl

from mlstscan.core.constants import (
    ALLELE_FASTA_SUFFIX,
    NO_SEQUENCE_TYPE,
    PROFILE_ST_COLUMN,
    PROFILE_TABLE_SUFFIX,
    SIGNATURE_SEPARATOR,
)
from mlstscan.core.exceptions import SchemeDataError, UnknownSchemeError

logger = logging.getLogger(__name__)


@dataclass
class Scheme:
    """
    One typing scheme: ordered genes plus a signature -> ST lookup.

    Attributes:
        name: Scheme identifier (directory name)
        genes: Marker genes in canonical order
        profiles: Exact-allele signature -> sequence type
        directory: Scheme directory, if loaded from disk
    """

    name: str
    genes: list[str]
    profiles: dict[str, str] = field(default_factory=dict)
    directory: Path | None = None

    @property
    def num_genes(self) -> int:
        return len(self.genes)

    @property
    def num_profiles(self) -> int:
        return len(self.profiles)

    def sequence_type(self, signature: str) -> str:
        """
        Resolve a signature to its ST.

        Only signatures made entirely of exact allele numbers can match;
        anything else resolves to the "-" sentinel.

        Args:
            signature: "/"-joined allele labels in gene order

        Returns:
            Sequence type, or "-" if the profile is not cataloged
        """
        return self.profiles.get(signature, NO_SEQUENCE_TYPE)

    def allele_file(self, gene: str) -> Path:
        if self.directory is None:
            msg = f"Scheme {self.name} was not loaded from a directory"
            raise SchemeDataError(self.name, msg)
        return self.directory / f"{gene}{ALLELE_FASTA_SUFFIX}"

    def allele_count(self, gene: str) -> int:
        """Number of alleles cataloged for a gene (0 without allele files)."""
        if self.directory is None:
            return 0
        path = self.allele_file(gene)
        if not path.exists():
            return 0
        with path.open() as handle:
            return sum(1 for line in handle if line.startswith(">"))

    def iter_alleles(self) -> Iterator[tuple[str, str]]:
        """
        Yield (database_id, sequence) for every allele of every gene.

        Database IDs are prefixed with the scheme, e.g. "saureus.arcC_1",
        which is the layout the hit parser expects.
        """
        from Bio import SeqIO

        for gene in self.genes:
            for record in SeqIO.parse(self.allele_file(gene), "fasta"):
                yield f"{self.name}.{record.id}", str(record.seq).upper()

    @classmethod
    def from_directory(cls, directory: Path) -> Scheme:
        """
        Load a scheme from its directory.

        Args:
            directory: Scheme directory named after the scheme

        Returns:
            Loaded Scheme

        Raises:
            SchemeDataError: If the profile table is missing or malformed
        """
        name = directory.name
        profile_path = directory / f"{name}{PROFILE_TABLE_SUFFIX}"
        if not profile_path.exists():
            raise SchemeDataError(str(directory), f"missing profile table {profile_path.name}")

        try:
            df = pl.read_csv(
                profile_path,
                separator="\t",
                infer_schema_length=0,
                comment_prefix="#",
                truncate_ragged_lines=True,
            )
        except (pl.exceptions.PolarsError, OSError) as e:
            raise SchemeDataError(str(profile_path), str(e)) from e

        if not df.columns or df.columns[0] != PROFILE_ST_COLUMN:
            raise SchemeDataError(
                str(profile_path),
                f"first column must be '{PROFILE_ST_COLUMN}', got {df.columns[:1]}",
            )

        genes = [
            col
            for col in df.columns[1:]
            if (directory / f"{col}{ALLELE_FASTA_SUFFIX}").exists()
        ]
        if not genes:
            raise SchemeDataError(str(directory), "no gene column has an allele file")

        profiles = _profiles_from_table(df, genes, profile_path)
        logger.debug(
            "Loaded scheme %s: %d genes, %d profiles", name, len(genes), len(profiles)
        )
        return cls(name=name, genes=genes, profiles=profiles, directory=directory)


def _profiles_from_table(df: pl.DataFrame, genes: list[str], path: Path) -> dict[str, str]:
    """Build the signature -> ST lookup, skipping non-numeric profile rows."""
    profiles: dict[str, str] = {}
    skipped = 0

    for row in df.select([PROFILE_ST_COLUMN, *genes]).iter_rows():
        st, *alleles = (value.strip() if value is not None else "" for value in row)
        if not st or not all(a.isdigit() for a in alleles):
            skipped += 1
            continue
        signature = SIGNATURE_SEPARATOR.join(str(int(a)) for a in alleles)
        profiles.setdefault(signature, st)

    if skipped:
        logger.debug("Skipped %d incomplete profiles in %s", skipped, path)
    return profiles


class SchemeCatalog:
    """
    All schemes available for typing, keyed by name.

    Example:
        >>> catalog = SchemeCatalog.from_directory(Path("db/pubmlst"))
        >>> catalog.resolve("saureus", "1/4/1/4/12/1/10")
        '5'
    """

    def __init__(self, schemes: list[Scheme] | None = None) -> None:
        self._schemes: dict[str, Scheme] = {}
        for scheme in sorted(schemes or [], key=lambda s: s.name):
            self._schemes[scheme.name] = scheme

    def __len__(self) -> int:
        return len(self._schemes)

    def __contains__(self, name: object) -> bool:
        return name in self._schemes

    def __iter__(self) -> Iterator[Scheme]:
        return iter(self._schemes.values())

    @property
    def names(self) -> list[str]:
        """Scheme names in sorted order."""
        return list(self._schemes)

    def get(self, name: str) -> Scheme:
        """
        Look up a scheme by name.

        Raises:
            UnknownSchemeError: If the scheme is not cataloged
        """
        try:
            return self._schemes[name]
        except KeyError:
            raise UnknownSchemeError(name, self.names) from None

    def resolve(self, scheme: str, signature: str) -> str:
        """Resolve a signature of a scheme to its ST, or "-"."""
        if scheme not in self._schemes:
            return NO_SEQUENCE_TYPE
        return self._schemes[scheme].sequence_type(signature)

    @classmethod
    def from_directory(cls, datadir: Path) -> SchemeCatalog:
        """
        Load every scheme directory under datadir.

        Subdirectories without a profile table are skipped with a warning;
        malformed profile tables raise.

        Args:
            datadir: Directory holding one subdirectory per scheme

        Returns:
            SchemeCatalog

        Raises:
            SchemeDataError: If datadir does not exist or a scheme is malformed
        """
        if not datadir.is_dir():
            raise SchemeDataError(str(datadir), "data directory does not exist")

        schemes = []
        for directory in sorted(p for p in datadir.iterdir() if p.is_dir()):
            if not (directory / f"{directory.name}{PROFILE_TABLE_SUFFIX}").exists():
                logger.warning("Skipping %s: no profile table", directory)
                continue
            schemes.append(Scheme.from_directory(directory))

        logger.info("Loaded %d schemes from %s", len(schemes), datadir)
        return cls(schemes)

"""
BLAST+ wrapper classes.

Provides Python interfaces for:
- MakeBlastDb: Building the combined allele database
- BlastN: Aligning a genome assembly against every allele of every scheme
"""

from __future__ import annotations

import logging
from pathlib import Path

from mlstscan.core.constants import BLAST_OUTFMT_HITS
from mlstscan.core.schemes import SchemeCatalog
from mlstscan.external.base import ExternalTool, validate_path_safe
from mlstscan.models.config import BlastConfig

logger = logging.getLogger(__name__)

# Index files written by makeblastdb for a (possibly multi-volume) nucleotide db
_NUCLEOTIDE_INDEX_SUFFIXES = (".nin", ".nal")


def blast_database_exists(database: Path) -> bool:
    """Return True if a nucleotide BLAST database has been built at this prefix."""
    return any(
        Path(f"{database}{suffix}").exists() for suffix in _NUCLEOTIDE_INDEX_SUFFIXES
    )


class MakeBlastDb(ExternalTool):
    """Wrapper for makeblastdb database construction.

    Example:
        >>> builder = MakeBlastDb()
        >>> result = builder.run_or_raise(
        ...     input_fasta=Path("db/blast/mlst.fa"),
        ...     output_db=Path("db/blast/mlst.fa"),
        ... )
    """

    TOOL_NAME = "makeblastdb"
    INSTALL_HINT = "conda install -c bioconda blast"

    def build_command(
        self,
        *,
        input_fasta: Path,
        output_db: Path,
        title: str = "mlstscan",
        parse_seqids: bool = True,
    ) -> list[str]:
        """Build makeblastdb command.

        Args:
            input_fasta: Combined allele FASTA.
            output_db: Output database prefix.
            title: Title for the database.
            parse_seqids: Parse sequence IDs for retrieval.

        Returns:
            Command as list of strings.
        """
        input_fasta = validate_path_safe(input_fasta, must_exist=False)
        output_db = validate_path_safe(output_db, must_exist=False)

        cmd = [str(self.get_executable())]
        cmd.extend(["-in", str(input_fasta)])
        cmd.extend(["-out", str(output_db)])
        cmd.extend(["-dbtype", "nucl"])
        cmd.extend(["-title", title])
        cmd.append("-hash_index")
        if parse_seqids:
            cmd.append("-parse_seqids")
        return cmd


class BlastN(ExternalTool):
    """Wrapper for blastn allele alignment.

    Alleles are short and near-identical across a scheme, so the search is
    ungapped, unmasked and seeded with long words. Output is always the
    fixed 8-column table understood by the hit parser.

    Example:
        >>> blastn = BlastN()
        >>> lines = blastn.align(
        ...     query=Path("contigs.fa"),
        ...     database=Path("db/blast/mlst.fa"),
        ...     min_identity=95.0,
        ... )
    """

    TOOL_NAME = "blastn"
    INSTALL_HINT = "conda install -c bioconda blast"

    def build_command(
        self,
        *,
        query: Path,
        database: Path,
        min_identity: float,
        threads: int = 1,
        word_size: int = 32,
        max_target_seqs: int = 100_000,
        evalue: float = 1e-20,
    ) -> list[str]:
        """Build blastn command.

        Args:
            query: Genome assembly in plain FASTA.
            database: Allele database prefix.
            min_identity: Minimum percent identity (-perc_identity).
            threads: Number of CPU threads.
            word_size: Word size for seed matches.
            max_target_seqs: Maximum aligned sequences.
            evalue: E-value threshold.

        Returns:
            Command as list of strings.
        """
        query = validate_path_safe(query, must_exist=False)
        database = validate_path_safe(database, must_exist=False)

        cmd = [str(self.get_executable())]
        cmd.extend(["-query", str(query)])
        cmd.extend(["-db", str(database)])
        cmd.append("-ungapped")
        cmd.extend(["-dust", "no"])
        cmd.extend(["-word_size", str(word_size)])
        cmd.extend(["-max_target_seqs", str(max_target_seqs)])
        cmd.extend(["-perc_identity", f"{min_identity:g}"])
        cmd.extend(["-evalue", f"{evalue:g}"])
        cmd.extend(["-num_threads", str(threads)])
        cmd.extend(["-outfmt", BLAST_OUTFMT_HITS])
        return cmd

    def align(
        self,
        query: Path,
        database: Path,
        min_identity: float,
        config: BlastConfig | None = None,
    ) -> list[str]:
        """Align a genome against the allele database.

        Args:
            query: Genome assembly in plain FASTA.
            database: Allele database prefix.
            min_identity: Minimum percent identity.
            config: Thread count, seeding and timeout settings.

        Returns:
            Raw hit table lines in aligner order.

        Raises:
            ToolNotFoundError: If blastn is not installed.
            ToolExecutionError: If blastn fails.
            ToolTimeoutError: If the alignment exceeds the timeout.
        """
        config = config or BlastConfig()
        result = self.run_or_raise(
            timeout=config.timeout,
            query=query,
            database=database,
            min_identity=min_identity,
            threads=config.num_threads,
            word_size=config.word_size,
            max_target_seqs=config.max_target_seqs,
            evalue=config.evalue,
        )
        lines = result.stdout_lines
        logger.debug(
            "blastn on %s: %d hit lines in %.1fs", query, len(lines), result.elapsed_seconds
        )
        return lines


def build_allele_database(catalog: SchemeCatalog, output_fasta: Path) -> int:
    """Write every allele of every scheme into one FASTA file.

    Headers are "<scheme>.<allele id>", e.g. ">saureus.arcC_1", which is the
    identifier layout the hit parser splits back into scheme, gene and allele.

    Args:
        catalog: Loaded scheme catalog.
        output_fasta: Combined FASTA to write.

    Returns:
        Number of alleles written.
    """
    from Bio import SeqIO
    from Bio.Seq import Seq
    from Bio.SeqRecord import SeqRecord

    output_fasta.parent.mkdir(parents=True, exist_ok=True)
    total = 0
    with output_fasta.open("w") as handle:
        for scheme in catalog:
            records = (
                SeqRecord(Seq(sequence), id=allele_id, description="")
                for allele_id, sequence in scheme.iter_alleles()
            )
            count = SeqIO.write(records, handle, "fasta")
            logger.info("Added %d alleles from %s", count, scheme.name)
            total += count
    return total

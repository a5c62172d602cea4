"""
Typing engine: runs one genome at a time through the full pipeline.

    genome file -> plain FASTA -> aligner -> hit lines -> AlleleHit
    -> AlleleClassifier -> SchemeSelector -> GenomeResult

Genomes are processed strictly in input order so that the shared novel
allele registry sees them in a deterministic sequence. A failure while
typing one genome is reported and turned into a no-match result; it never
aborts the remaining genomes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from pathlib import Path

from mlstscan.core.classifier import AlleleClassifier
from mlstscan.core.exceptions import MlstscanError
from mlstscan.core.novel import NovelAlleleRegistry
from mlstscan.core.schemes import SchemeCatalog
from mlstscan.core.scoring import SchemeSelector
from mlstscan.core.sequence_io import normalized_fasta
from mlstscan.models.config import TypingConfig
from mlstscan.models.hits import AlleleHit, iter_hits
from mlstscan.models.results import GenomeResult

logger = logging.getLogger(__name__)

# Takes a plain FASTA path and returns raw 8-column hit lines
Aligner = Callable[[Path], Iterable[str]]


class MLSTTyper:
    """
    Assign the best scheme and sequence type to genome assemblies.

    Example:
        >>> typer = MLSTTyper(catalog, TypingConfig(), aligner)
        >>> result = typer.type_genome(Path("contigs.fa"))
        >>> result.scheme, result.sequence_type
        ('saureus', '5')
    """

    def __init__(
        self,
        catalog: SchemeCatalog,
        config: TypingConfig,
        aligner: Aligner,
        registry: NovelAlleleRegistry | None = None,
    ) -> None:
        """
        Args:
            catalog: Loaded schemes
            config: Typing thresholds and scheme filters
            aligner: Callable producing hit lines for a FASTA file
            registry: Novel allele registry; created automatically when
                config.novel_output is set

        Raises:
            UnknownSchemeError: If the forced scheme is not in the catalog
        """
        if config.scheme:
            catalog.get(config.scheme)

        if registry is None and config.track_novel:
            registry = NovelAlleleRegistry()

        self.catalog = catalog
        self.config = config
        self.aligner = aligner
        self.registry = registry
        self.classifier = AlleleClassifier(config, registry)
        self.selector = SchemeSelector(catalog, config)

    def type_hits(self, hits: Iterable[AlleleHit], label: str) -> GenomeResult:
        """
        Type a genome from already-parsed hits.

        Args:
            hits: Hits in aligner order
            label: Display name of the genome

        Returns:
            GenomeResult for the best candidate (or the fallback)
        """
        classification = self.classifier.classify(hits, source=label)
        best = self.selector.select(classification.calls)
        logger.info(
            "%s: scheme=%s ST=%s score=%d",
            label,
            best.scheme,
            best.sequence_type,
            best.score,
        )
        return GenomeResult.from_candidate(
            label, best, warnings=tuple(classification.warnings)
        )

    def type_genome(self, path: Path, label: str | None = None) -> GenomeResult:
        """
        Type a single genome file.

        Args:
            path: Assembly in FASTA, GenBank or EMBL format (optionally gzipped)
            label: Display name; defaults to the path as given

        Returns:
            GenomeResult

        Raises:
            MlstscanError: If the file cannot be read or the aligner fails
        """
        label = label or str(path)
        with normalized_fasta(path) as fasta:
            lines = list(self.aligner(fasta))
        logger.debug("%s: %d raw hit lines", label, len(lines))
        return self.type_hits(iter_hits(lines), label)

    def type_genomes(
        self,
        paths: Sequence[Path],
        labels: Sequence[str] | None = None,
    ) -> Iterator[GenomeResult]:
        """
        Type genomes one after another, in input order.

        Args:
            paths: Genome files
            labels: Display names, one per path (defaults to the paths)

        Yields:
            One GenomeResult per input, including failed inputs
        """
        if labels is None:
            labels = [str(p) for p in paths]
        if len(labels) != len(paths):
            msg = f"Got {len(labels)} labels for {len(paths)} genome files"
            raise ValueError(msg)

        for path, label in zip(paths, labels):
            try:
                yield self.type_genome(path, label)
            except MlstscanError as e:
                logger.error("%s: %s", label, e.message)
                yield self.failed_result(label, e.message)

    def failed_result(self, label: str, message: str) -> GenomeResult:
        """No-match result for a genome that could not be typed.

        With a forced scheme every gene is reported as missing, so the row
        keeps the width of the legacy header.
        """
        return GenomeResult.from_candidate(
            label, self.selector.fallback(), warnings=(message,)
        )

    def finish(self) -> int:
        """
        Flush run-level outputs.

        Returns:
            Number of novel alleles written (0 when tracking is off)
        """
        if self.registry is None or self.config.novel_output is None:
            return 0
        return self.registry.write_fasta(self.config.novel_output)

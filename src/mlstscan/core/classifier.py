"""
Allele classifier: turns the hit stream of one genome into per-gene calls.

Hits are consumed in the order emitted by the aligner. Each hit that clears
the coverage threshold and belongs to an accepted scheme is classified as
exact, approximate or partial and merged into the call already recorded for
its (scheme, gene) pair with merge_call(). Output only contains pairs that
received at least one qualifying hit; absence means Missing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from mlstscan.core.novel import NovelAlleleRegistry, allele_label
from mlstscan.models.calls import GeneCall, is_exact_conflict, merge_call
from mlstscan.models.config import TypingConfig
from mlstscan.models.hits import AlleleHit

logger = logging.getLogger(__name__)

# scheme -> gene -> call
SchemeCalls = dict[str, dict[str, GeneCall]]


@dataclass
class ClassificationResult:
    """Per-scheme gene calls for one genome plus any diagnostics."""

    calls: SchemeCalls = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    hits_seen: int = 0
    hits_used: int = 0

    @property
    def schemes(self) -> list[str]:
        """Schemes with at least one call, in order of first appearance."""
        return list(self.calls)


def call_for_hit(hit: AlleleHit) -> GeneCall:
    """Classify a single hit without regard to earlier hits."""
    if hit.is_exact:
        return GeneCall.exact(hit.allele)
    if hit.is_full_length:
        return GeneCall.approximate(hit.allele)
    return GeneCall.partial(hit.allele)


class AlleleClassifier:
    """
    Classify alignment hits for one genome at a time.

    Example:
        >>> classifier = AlleleClassifier(TypingConfig())
        >>> result = classifier.classify(hits, source="sample.fa")
        >>> result.calls["saureus"]["arcC"].label
        '3'
    """

    def __init__(
        self,
        config: TypingConfig,
        registry: NovelAlleleRegistry | None = None,
    ) -> None:
        """
        Args:
            config: Thresholds and scheme filters
            registry: Shared novel allele registry; None disables tracking
        """
        self.config = config
        self.registry = registry

    def accepts(self, hit: AlleleHit) -> bool:
        """Return True if a hit passes coverage and scheme filters."""
        if hit.coverage * 100 < self.config.min_coverage:
            return False
        return self.config.accepts_scheme(hit.scheme)

    def classify(self, hits: Iterable[AlleleHit], source: str = "") -> ClassificationResult:
        """
        Classify all hits of one genome.

        Args:
            hits: Parsed hits in aligner order
            source: Genome file name, used in warnings and registry labels

        Returns:
            ClassificationResult with scheme -> gene -> GeneCall
        """
        result = ClassificationResult()

        for hit in hits:
            result.hits_seen += 1
            if not self.accepts(hit):
                continue
            result.hits_used += 1

            gene_calls = result.calls.setdefault(hit.scheme, {})
            existing = gene_calls.get(hit.gene)
            candidate = call_for_hit(hit)

            if is_exact_conflict(existing, candidate):
                message = (
                    f"{source}: found additional exact allele match "
                    f"{hit.scheme}.{hit.gene}-{hit.allele} "
                    f"(already have {existing.label})"
                )
                logger.warning(message)
                result.warnings.append(message)

            gene_calls[hit.gene] = merge_call(existing, candidate)
            self._track(hit, candidate, source)

        logger.debug(
            "%s: used %d of %d hits across %d schemes",
            source,
            result.hits_used,
            result.hits_seen,
            len(result.calls),
        )
        return result

    def _track(self, hit: AlleleHit, call: GeneCall, source: str) -> None:
        """Record full-length sequences in the novel allele registry."""
        if self.registry is None or not hit.is_full_length:
            return
        label = allele_label(hit.scheme, hit.gene, call.label)
        if call.is_exact:
            self.registry.register_exact(hit.query_sequence, label, source)
        else:
            self.registry.register_approximate(hit.query_sequence, label, source)

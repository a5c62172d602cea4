"""
Scheme scorer and selector.

Every scheme that received at least one gene call is scored by completeness
and exactness:

    score = n - w_approx * approximate - w_partial * partial - w_missing * missing
    score = floor(score * 100 / n)

with default weights 0.2 / 0.5 / 1.0. Candidates must score strictly above
the configured minimum. The best candidate has the highest score; ties go to
the smaller (older) sequence type, then to the scheme name.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence

from mlstscan.core.constants import NO_SCHEME, NO_SEQUENCE_TYPE
from mlstscan.core.schemes import SchemeCatalog
from mlstscan.core.signature import build_signature, missing_signature, ordered_calls
from mlstscan.models.calls import CallKind, GeneCall
from mlstscan.models.config import ScoreWeights, TypingConfig
from mlstscan.models.results import SchemeCandidate

logger = logging.getLogger(__name__)


def count_kinds(genes: Sequence[str], calls: Mapping[str, GeneCall]) -> dict[CallKind, int]:
    """Count call kinds over the scheme genes (absent genes count as MISSING)."""
    counts = dict.fromkeys(CallKind, 0)
    for gene in genes:
        call = calls.get(gene)
        counts[call.kind if call is not None else CallKind.MISSING] += 1
    return counts


def score_calls(
    genes: Sequence[str],
    calls: Mapping[str, GeneCall],
    weights: ScoreWeights | None = None,
) -> int:
    """
    Compute the completeness score of one scheme.

    Args:
        genes: Scheme genes in canonical order
        calls: Gene calls for the scheme
        weights: Penalties (defaults to 0.2 / 0.5 / 1.0)

    Returns:
        Integer score between 0 and 100 (0 for a scheme without genes)
    """
    if not genes:
        return 0
    weights = weights or ScoreWeights()
    counts = count_kinds(genes, calls)

    raw = len(genes)
    raw -= weights.approximate * counts[CallKind.APPROXIMATE]
    raw -= weights.partial * counts[CallKind.PARTIAL]
    raw -= weights.missing * counts[CallKind.MISSING]

    # Round away float noise (e.g. 6.999999) before flooring
    return max(0, math.floor(round(raw * 100 / len(genes), 6)))


def sequence_type_sort_key(sequence_type: str) -> tuple[int, int, str]:
    """
    Sort key preferring numerically smaller STs.

    Numeric STs sort first by value, then non-numeric identifiers, then the
    unknown "-" sentinel.
    """
    if sequence_type == NO_SEQUENCE_TYPE:
        return (2, 0, "")
    if sequence_type.isdigit():
        return (0, int(sequence_type), "")
    return (1, 0, sequence_type)


def candidate_sort_key(candidate: SchemeCandidate) -> tuple[int, tuple[int, int, str], str]:
    """Ranking key: score descending, then ST ascending, then scheme name."""
    return (-candidate.score, sequence_type_sort_key(candidate.sequence_type), candidate.scheme)


class SchemeSelector:
    """
    Score candidate schemes for one genome and pick the best.

    Example:
        >>> selector = SchemeSelector(catalog, TypingConfig())
        >>> best = selector.select(classification.calls)
        >>> best.scheme, best.sequence_type, best.score
        ('saureus', '5', 100)
    """

    def __init__(self, catalog: SchemeCatalog, config: TypingConfig) -> None:
        self.catalog = catalog
        self.config = config

    def build_candidate(self, scheme: str, calls: Mapping[str, GeneCall]) -> SchemeCandidate:
        """Build the scored candidate for one scheme."""
        genes = self.catalog.get(scheme).genes
        signature = build_signature(genes, calls)
        return SchemeCandidate(
            scheme=scheme,
            sequence_type=self.catalog.resolve(scheme, signature),
            signature=signature,
            score=score_calls(genes, calls, self.config.weights),
            calls=ordered_calls(genes, calls),
        )

    def candidates(self, scheme_calls: Mapping[str, Mapping[str, GeneCall]]) -> list[SchemeCandidate]:
        """
        Score every scheme present in the calls, ranked best first.

        Schemes not in the catalog or rejected by the forced-scheme and
        exclusion filters are ignored. Only candidates scoring strictly
        above min_score are returned.
        """
        scored = []
        for scheme, calls in scheme_calls.items():
            if not calls or not self.config.accepts_scheme(scheme):
                continue
            if scheme not in self.catalog:
                logger.warning("Hits for scheme %s which is not in the catalog", scheme)
                continue
            candidate = self.build_candidate(scheme, calls)
            logger.debug(
                "Candidate %s ST=%s score=%d signature=%s",
                candidate.scheme,
                candidate.sequence_type,
                candidate.score,
                candidate.signature,
            )
            if candidate.score > self.config.min_score:
                scored.append(candidate)

        scored.sort(key=candidate_sort_key)
        return scored

    def fallback(self) -> SchemeCandidate:
        """Sentinel candidate used when no scheme qualifies."""
        forced = self.config.scheme
        if forced and forced in self.catalog:
            genes = self.catalog.get(forced).genes
            return SchemeCandidate(
                scheme=forced,
                sequence_type=NO_SEQUENCE_TYPE,
                signature=missing_signature(genes),
                score=0,
                calls=ordered_calls(genes, {}),
            )
        return SchemeCandidate(
            scheme=NO_SCHEME,
            sequence_type=NO_SEQUENCE_TYPE,
            signature="",
            score=0,
        )

    def select(self, scheme_calls: Mapping[str, Mapping[str, GeneCall]]) -> SchemeCandidate:
        """
        Pick the single best candidate, or the fallback sentinel.

        Args:
            scheme_calls: scheme -> gene -> GeneCall for one genome

        Returns:
            Highest-ranked SchemeCandidate
        """
        ranked = self.candidates(scheme_calls)
        if not ranked:
            return self.fallback()
        return ranked[0]

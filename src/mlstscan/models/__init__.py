"""
Pydantic data models for mlstscan.

Provides type-safe models for alignment hits, allele calls,
typing configuration and per-genome results.
"""

from mlstscan.models.calls import CallKind, GeneCall, format_label, merge_call, parse_label
from mlstscan.models.config import BlastConfig, ScoreWeights, TypingConfig
from mlstscan.models.hits import AlleleHit, iter_hits, parse_hit_line
from mlstscan.models.results import GenomeResult, SchemeCandidate

__all__ = [
    "AlleleHit",
    "BlastConfig",
    "CallKind",
    "GeneCall",
    "GenomeResult",
    "SchemeCandidate",
    "ScoreWeights",
    "TypingConfig",
    "format_label",
    "iter_hits",
    "merge_call",
    "parse_hit_line",
    "parse_label",
]

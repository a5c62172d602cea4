"""
Core algorithms for allele calling and sequence typing.

This module contains the allele classifier, scheme scoring and selection,
the scheme catalog and the novel allele registry.
"""

from mlstscan.core.classifier import AlleleClassifier, ClassificationResult
from mlstscan.core.novel import NovelAlleleRegistry
from mlstscan.core.schemes import Scheme, SchemeCatalog
from mlstscan.core.scoring import SchemeSelector, score_calls

__all__ = [
    "AlleleClassifier",
    "ClassificationResult",
    "NovelAlleleRegistry",
    "Scheme",
    "SchemeCatalog",
    "SchemeSelector",
    "score_calls",
]

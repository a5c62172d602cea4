"""
Signature builder: canonical allele-profile strings for a scheme.

A signature lists one display label per gene, in the scheme's gene order,
joined by "/". Genes without a call render as "-".
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from mlstscan.core.constants import MISSING_LABEL, SIGNATURE_SEPARATOR
from mlstscan.models.calls import GeneCall, format_label, parse_label


def build_signature(
    genes: Sequence[str],
    calls: Mapping[str, GeneCall],
    separator: str = SIGNATURE_SEPARATOR,
) -> str:
    """
    Build the signature for one scheme.

    Args:
        genes: Scheme genes in canonical order
        calls: Gene calls for this scheme (missing genes may be absent)
        separator: Label separator

    Returns:
        Signature string with exactly len(genes) labels
    """
    return separator.join(format_label(calls.get(gene)) for gene in genes)


def missing_signature(genes: Sequence[str], separator: str = SIGNATURE_SEPARATOR) -> str:
    """Signature of a scheme with no calls at all."""
    return separator.join(MISSING_LABEL for _ in genes)


def parse_signature(
    signature: str,
    genes: Sequence[str],
    separator: str = SIGNATURE_SEPARATOR,
) -> dict[str, GeneCall]:
    """
    Split a signature back into gene calls.

    Args:
        signature: Signature string
        genes: Scheme genes in canonical order
        separator: Label separator

    Returns:
        Gene -> GeneCall, in gene order (missing genes included)

    Raises:
        ValueError: If the number of labels differs from the number of genes
    """
    labels = signature.split(separator) if genes else []
    if len(labels) != len(genes):
        msg = f"Signature has {len(labels)} labels but scheme has {len(genes)} genes"
        raise ValueError(msg)
    return {gene: parse_label(label) for gene, label in zip(genes, labels)}


def ordered_calls(genes: Sequence[str], calls: Mapping[str, GeneCall]) -> dict[str, GeneCall]:
    """Gene calls in scheme order with explicit Missing entries."""
    return {gene: calls.get(gene) or GeneCall.missing() for gene in genes}

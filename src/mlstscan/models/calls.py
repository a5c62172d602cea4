"""
Pydantic models for per-gene allele calls.

A GeneCall is a tagged variant (Exact, Approximate, Partial, Missing)
carrying the allele number(s) it refers to. Display labels such as
"12", "~12", "12?" and "-" are produced by a separate formatting step
and can be parsed back into the same GeneCall.
"""

from __future__ import annotations

from enum import Enum
from typing import Self

from pydantic import BaseModel, Field, model_validator

from mlstscan.core.constants import (
    ALLELE_JOIN,
    APPROXIMATE_MARKER,
    MISSING_LABEL,
    PARTIAL_MARKER,
)


class CallKind(str, Enum):
    """
    Classification of the best evidence seen for one gene.

    Categories:
        EXACT: Full-length, 100% identical match to a cataloged allele
        APPROXIMATE: Full-length match with mismatches (closest allele)
        PARTIAL: Alignment shorter than the reference allele
        MISSING: No hit cleared the coverage threshold
    """

    EXACT = "exact"
    APPROXIMATE = "approximate"
    PARTIAL = "partial"
    MISSING = "missing"


class GeneCall(BaseModel):
    """
    Allele call for one (scheme, gene) pair of one genome.

    Attributes:
        kind: Call category
        alleles: Allele numbers; one or more for EXACT (several when the
            genome carries conflicting exact copies), exactly one for
            APPROXIMATE and PARTIAL, none for MISSING
    """

    kind: CallKind = Field(description="Call category")
    alleles: tuple[int, ...] = Field(
        default_factory=tuple,
        description="Allele numbers supporting the call",
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_allele_count(self) -> Self:
        """Ensure the number of alleles matches the call kind."""
        count = len(self.alleles)
        if self.kind is CallKind.MISSING and count != 0:
            msg = "MISSING calls cannot carry allele numbers"
            raise ValueError(msg)
        if self.kind is CallKind.EXACT and count == 0:
            msg = "EXACT calls need at least one allele number"
            raise ValueError(msg)
        if self.kind in (CallKind.APPROXIMATE, CallKind.PARTIAL) and count != 1:
            msg = f"{self.kind.value.upper()} calls carry exactly one allele number"
            raise ValueError(msg)
        return self

    @classmethod
    def exact(cls, *alleles: int) -> GeneCall:
        return cls(kind=CallKind.EXACT, alleles=alleles)

    @classmethod
    def approximate(cls, allele: int) -> GeneCall:
        return cls(kind=CallKind.APPROXIMATE, alleles=(allele,))

    @classmethod
    def partial(cls, allele: int) -> GeneCall:
        return cls(kind=CallKind.PARTIAL, alleles=(allele,))

    @classmethod
    def missing(cls) -> GeneCall:
        return cls(kind=CallKind.MISSING)

    @property
    def is_exact(self) -> bool:
        return self.kind is CallKind.EXACT

    @property
    def is_missing(self) -> bool:
        return self.kind is CallKind.MISSING

    @property
    def label(self) -> str:
        """Display label for this call."""
        return format_label(self)

    def __str__(self) -> str:
        return self.label


def format_label(call: GeneCall | None) -> str:
    """
    Render a GeneCall as its display label.

    Exact calls are bare (comma-joined) numbers, approximate calls are
    prefixed with "~", partial calls are suffixed with "?", and missing
    calls (or None) render as "-".

    Args:
        call: Gene call, or None for a gene without hits

    Returns:
        Display label
    """
    if call is None or call.kind is CallKind.MISSING:
        return MISSING_LABEL
    if call.kind is CallKind.EXACT:
        return ALLELE_JOIN.join(str(a) for a in call.alleles)
    if call.kind is CallKind.APPROXIMATE:
        return f"{APPROXIMATE_MARKER}{call.alleles[0]}"
    return f"{call.alleles[0]}{PARTIAL_MARKER}"


def parse_label(label: str) -> GeneCall:
    """
    Parse a display label back into a GeneCall.

    Args:
        label: Display label ("12", "12,15", "~12", "12?" or "-")

    Returns:
        Equivalent GeneCall

    Raises:
        ValueError: If the label is not a valid allele label
    """
    text = label.strip()
    if text == MISSING_LABEL:
        return GeneCall.missing()
    try:
        if text.startswith(APPROXIMATE_MARKER):
            return GeneCall.approximate(int(text[len(APPROXIMATE_MARKER):]))
        if text.endswith(PARTIAL_MARKER):
            return GeneCall.partial(int(text[: -len(PARTIAL_MARKER)]))
        return GeneCall.exact(*(int(part) for part in text.split(ALLELE_JOIN)))
    except ValueError as e:
        msg = f"Invalid allele label: {label!r}"
        raise ValueError(msg) from e


def is_exact_conflict(existing: GeneCall | None, candidate: GeneCall) -> bool:
    """
    Return True if candidate is a further exact hit for an already exact gene.

    Args:
        existing: Call already recorded for the gene
        candidate: Newly observed call

    Returns:
        True whenever an exact call meets another exact hit, including a
        repeat of the same allele number
    """
    return existing is not None and existing.is_exact and candidate.is_exact


def merge_call(existing: GeneCall | None, candidate: GeneCall) -> GeneCall:
    """
    Resolve the call for a gene given the existing call and a new observation.

    Rules:
        - Nothing recorded yet (or MISSING): the candidate is taken.
        - Exact candidate over an exact call: allele numbers are appended in
          order of observation, repeats included (3,3).
        - Exact candidate over an approximate/partial call: exact wins.
        - Approximate/partial candidate over any recorded call: the first
          recorded call is kept.

    Args:
        existing: Call already recorded for the gene, or None
        candidate: Newly observed call

    Returns:
        The resolved call
    """
    if existing is None or existing.is_missing:
        return candidate

    if candidate.is_exact:
        if not existing.is_exact:
            return candidate
        return GeneCall.exact(*existing.alleles, *candidate.alleles)

    return existing

"""
Pydantic models for scheme candidates and per-genome typing results.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, computed_field

from mlstscan.core.constants import NO_SCHEME, NO_SEQUENCE_TYPE
from mlstscan.models.calls import GeneCall


class SchemeCandidate(BaseModel):
    """
    One scored (genome, scheme) pairing.

    Built once per scheme seen in the hit stream and discarded after
    selection. The fallback candidate has scheme "-" (or the forced
    scheme), ST "-", an all-missing signature and score 0.

    Attributes:
        scheme: Scheme identifier
        sequence_type: Resolved ST, or "-" when the profile is unknown
        signature: Ordered allele labels joined by "/"
        score: Completeness score (0-100)
        calls: Gene calls in scheme gene order
    """

    scheme: str = Field(description="Scheme identifier")
    sequence_type: str = Field(default=NO_SEQUENCE_TYPE, description="Sequence type")
    signature: str = Field(description="Allele signature")
    score: int = Field(ge=0, le=100, description="Completeness score")
    calls: dict[str, GeneCall] = Field(
        default_factory=dict,
        description="Gene calls in scheme gene order",
    )

    model_config = {"frozen": True}


class GenomeResult(BaseModel):
    """
    Best scheme/ST assignment for one genome.

    Attributes:
        filename: Display name of the genome file
        scheme: Best scheme, or "-" when nothing matched
        sequence_type: Resolved ST, or "-"
        score: Score of the selected candidate
        signature: Signature of the selected candidate
        alleles: Gene calls of the selected scheme, in gene order
        warnings: Diagnostics raised while classifying this genome
    """

    filename: str = Field(description="Genome file name or label")
    scheme: str = Field(default=NO_SCHEME, description="Best matching scheme")
    sequence_type: str = Field(default=NO_SEQUENCE_TYPE, description="Sequence type")
    score: int = Field(default=0, ge=0, le=100, description="Scheme score")
    signature: str = Field(default="", description="Allele signature")
    alleles: dict[str, GeneCall] = Field(
        default_factory=dict,
        description="Gene calls in scheme gene order",
    )
    warnings: tuple[str, ...] = Field(
        default_factory=tuple,
        description="Diagnostic messages",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def matched(self) -> bool:
        """True when a scheme was selected."""
        return self.scheme != NO_SCHEME

    @classmethod
    def from_candidate(
        cls,
        filename: str,
        candidate: SchemeCandidate,
        warnings: tuple[str, ...] = (),
    ) -> GenomeResult:
        """Create a result from the selected scheme candidate."""
        return cls(
            filename=filename,
            scheme=candidate.scheme,
            sequence_type=candidate.sequence_type,
            score=candidate.score,
            signature=candidate.signature,
            alleles=dict(candidate.calls),
            warnings=warnings,
        )

    def allele_labels(self) -> dict[str, str]:
        """Display labels keyed by gene, in gene order."""
        return {gene: call.label for gene, call in self.alleles.items()}

    def to_json_dict(self) -> dict[str, Any]:
        """JSON-serializable summary of this result."""
        return {
            "filename": self.filename,
            "scheme": self.scheme,
            "sequence_type": self.sequence_type,
            "score": self.score,
            "signature": self.signature,
            "alleles": self.allele_labels() if self.alleles else None,
            "warnings": list(self.warnings),
        }

    model_config = {"frozen": True}

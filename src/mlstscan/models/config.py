"""
Pydantic configuration models for mlstscan.

These models define the thresholds, scheme filters and scoring weights used
by the allele classifier and scheme selector, plus the aligner settings.
Configuration can be loaded from YAML files, environment variables, or CLI arguments.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, Field, field_validator, model_validator

from mlstscan.core.constants import (
    APPROXIMATE_PENALTY,
    DEFAULT_EXCLUDED_SCHEMES,
    DEFAULT_MIN_COVERAGE,
    DEFAULT_MIN_IDENTITY,
    DEFAULT_MIN_SCORE,
    MISSING_PENALTY,
    PARTIAL_PENALTY,
)

logger = logging.getLogger(__name__)


class ScoreWeights(BaseModel):
    """
    Per-gene penalties applied when scoring a scheme.

    Exact calls cost nothing. The defaults (0.2 / 0.5 / 1.0) are the
    long-standing heuristic values; they are exposed here so that they
    can be tuned without touching the scorer.
    """

    approximate: float = Field(
        default=APPROXIMATE_PENALTY,
        ge=0.0,
        le=1.0,
        description="Penalty for a full-length allele with mismatches",
    )
    partial: float = Field(
        default=PARTIAL_PENALTY,
        ge=0.0,
        le=1.0,
        description="Penalty for an allele covered only partially",
    )
    missing: float = Field(
        default=MISSING_PENALTY,
        ge=0.0,
        le=1.0,
        description="Penalty for a gene without any qualifying hit",
    )

    @model_validator(mode="after")
    def validate_ordering(self) -> Self:
        """Weaker evidence must never be penalized less than stronger evidence."""
        if not self.approximate <= self.partial <= self.missing:
            msg = (
                "Score weights must satisfy approximate <= partial <= missing, got "
                f"{self.approximate} / {self.partial} / {self.missing}"
            )
            raise ValueError(msg)
        return self

    model_config = {"frozen": True}


class TypingConfig(BaseModel):
    """
    Configuration for allele classification and scheme selection.

    Attributes:
        scheme: Forced scheme; restricts matching to one scheme and disables
            the exclusion list
        exclude: Scheme ids never considered in autodetect mode
        min_identity: Minimum percent identity passed to the aligner
        min_coverage: Minimum percent of the allele covered by identical bases
        min_score: Candidates must score strictly above this value
        weights: Scoring penalties
        legacy: Emit bare labels with a header row (requires a forced scheme)
        novel_output: FASTA path for novel alleles; enables novel tracking
    """

    scheme: str | None = Field(
        default=None,
        description="Restrict matching to this scheme",
    )
    exclude: frozenset[str] = Field(
        default_factory=lambda: frozenset(DEFAULT_EXCLUDED_SCHEMES),
        description="Scheme ids never considered (ignored when a scheme is forced)",
    )
    min_identity: float = Field(
        default=DEFAULT_MIN_IDENTITY,
        ge=0,
        le=100,
        description="Minimum DNA percent identity of full allele to consider 'similar'",
    )
    min_coverage: float = Field(
        default=DEFAULT_MIN_COVERAGE,
        ge=0,
        le=100,
        description="Minimum DNA percent coverage to report partial allele",
    )
    min_score: float = Field(
        default=DEFAULT_MIN_SCORE,
        ge=0,
        le=100,
        description="Minimum score out of 100 to match a scheme",
    )
    weights: ScoreWeights = Field(
        default_factory=ScoreWeights,
        description="Scoring penalties for approximate, partial and missing genes",
    )
    legacy: bool = Field(
        default=False,
        description="Legacy output layout (bare labels with a header row)",
    )
    novel_output: Path | None = Field(
        default=None,
        description="FASTA file receiving novel alleles",
    )

    @field_validator("exclude", mode="before")
    @classmethod
    def split_exclude(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as any iterable of ids."""
        if v is None:
            return frozenset()
        if isinstance(v, str):
            return frozenset(part.strip() for part in v.split(",") if part.strip())
        return v

    @model_validator(mode="after")
    def validate_legacy(self) -> Self:
        """Legacy output lists genes of a single scheme, so one must be forced."""
        if self.legacy and not self.scheme:
            msg = "legacy output requires a forced scheme"
            raise ValueError(msg)
        return self

    @property
    def effective_exclude(self) -> frozenset[str]:
        """Exclusion set actually applied; empty when a scheme is forced."""
        if self.scheme:
            return frozenset()
        return self.exclude

    @property
    def track_novel(self) -> bool:
        """True when novel alleles should be recorded."""
        return self.novel_output is not None

    def accepts_scheme(self, scheme: str) -> bool:
        """Return True if hits from this scheme may be classified."""
        if self.scheme:
            return scheme == self.scheme
        return scheme not in self.exclude

    @classmethod
    def from_yaml(cls, path: Path, **overrides: Any) -> TypingConfig:
        """
        Load typing configuration from a YAML file.

        The YAML file uses a nested structure (thresholds, weights, schemes).
        Unknown keys are ignored. Keyword overrides (typically CLI options)
        take precedence over file values; None overrides are dropped.

        Args:
            path: Path to YAML configuration file.
            **overrides: Field values that replace file values.

        Returns:
            TypingConfig populated from YAML values merged with defaults.

        Raises:
            FileNotFoundError: If YAML file does not exist.
            ValueError: If YAML contains invalid values.
        """
        import yaml

        raw = yaml.safe_load(path.read_text())
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            msg = f"YAML config must be a mapping, got {type(raw).__name__}"
            raise ValueError(msg)

        flat = _flatten_yaml_config(raw)
        flat.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**flat)

    def to_yaml(self, path: Path) -> None:
        """
        Write typing configuration to a YAML file.

        Args:
            path: Output file path.
        """
        path.write_text(self.to_yaml_str())

    def to_yaml_str(self) -> str:
        """
        Serialize typing configuration to a YAML string.

        Returns:
            YAML-formatted string with nested structure.
        """
        import yaml

        data = _build_yaml_structure(self)
        return yaml.dump(data, default_flow_style=False, sort_keys=False)

    model_config = {"frozen": True}


class BlastConfig(BaseModel):
    """
    Configuration for blastn execution against the allele database.

    Alleles are short, so alignments are ungapped with a large word size
    and a strict e-value; max_target_seqs is high so that every allele of
    every scheme can report a hit.

    Attributes:
        num_threads: Number of CPU threads for BLAST
        word_size: Word size for seed matches
        max_target_seqs: Maximum aligned sequences
        evalue: E-value threshold
        timeout: Seconds before an alignment is cancelled (None for no limit)
    """

    num_threads: int = Field(default=1, ge=1, description="Number of CPU threads")
    word_size: int = Field(
        default=32,
        ge=4,
        description="Word size for seed matches",
    )
    max_target_seqs: int = Field(
        default=100_000,
        ge=1,
        description="Maximum aligned sequences",
    )
    evalue: float = Field(
        default=1e-20,
        gt=0,
        description="E-value threshold",
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Alignment timeout in seconds",
    )

    model_config = {"frozen": True}


def _flatten_yaml_config(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Flatten nested YAML config structure into TypingConfig keyword arguments.

    Maps the documented nested YAML structure:
        thresholds.min_identity -> min_identity
        schemes.exclude -> exclude
        weights.partial -> weights.partial (nested ScoreWeights)
    """
    flat: dict[str, Any] = {}

    thresholds = raw.get("thresholds", {})
    _map_if_present(thresholds, "min_identity", flat, "min_identity")
    _map_if_present(thresholds, "min_coverage", flat, "min_coverage")
    _map_if_present(thresholds, "min_score", flat, "min_score")

    schemes = raw.get("schemes", {})
    _map_if_present(schemes, "scheme", flat, "scheme")
    if "exclude" in schemes:
        flat["exclude"] = schemes["exclude"] or ()

    weights_raw = raw.get("weights", {})
    if weights_raw:
        weight_kwargs: dict[str, Any] = {}
        _map_if_present(weights_raw, "approximate", weight_kwargs, "approximate")
        _map_if_present(weights_raw, "partial", weight_kwargs, "partial")
        _map_if_present(weights_raw, "missing", weight_kwargs, "missing")
        flat["weights"] = ScoreWeights(**weight_kwargs)

    output_sec = raw.get("output", {})
    _map_if_present(output_sec, "legacy", flat, "legacy")
    if output_sec.get("novel") is not None:
        flat["novel_output"] = Path(output_sec["novel"])

    return flat


def _map_if_present(
    source: dict[str, Any],
    source_key: str,
    target: dict[str, Any],
    target_key: str,
) -> None:
    """Copy value from source dict to target dict if key exists."""
    if source_key in source and source[source_key] is not None:
        target[target_key] = source[source_key]


def _build_yaml_structure(config: TypingConfig) -> dict[str, Any]:
    """Build nested YAML dict from a TypingConfig instance."""
    return {
        "thresholds": {
            "min_identity": config.min_identity,
            "min_coverage": config.min_coverage,
            "min_score": config.min_score,
        },
        "schemes": {
            "scheme": config.scheme,
            "exclude": sorted(config.exclude),
        },
        "weights": {
            "approximate": config.weights.approximate,
            "partial": config.weights.partial,
            "missing": config.weights.missing,
        },
        "output": {
            "legacy": config.legacy,
            "novel": str(config.novel_output) if config.novel_output else None,
        },
    }

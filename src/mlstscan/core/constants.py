"""
Constants used throughout the mlstscan package.

Centralizes magic strings, default values, and threshold constants
to improve maintainability and consistency.
"""

from __future__ import annotations

# =============================================================================
# Sentinels and Separators
# =============================================================================

# Scheme and ST placeholder when nothing matched
NO_SCHEME = "-"
NO_SEQUENCE_TYPE = "-"

# Display label of a gene without any qualifying hit
MISSING_LABEL = "-"

# Markers used in allele display labels
APPROXIMATE_MARKER = "~"
PARTIAL_MARKER = "?"

# Separator between multiple exact allele numbers for one gene
ALLELE_JOIN = ","

# Separator between gene labels in a scheme signature
SIGNATURE_SEPARATOR = "/"

# =============================================================================
# BLAST Hit Table Layout
# =============================================================================

# Columns requested from blastn, in order
HIT_COLUMNS = (
    "sseqid",
    "slen",
    "length",
    "nident",
    "qseqid",
    "qstart",
    "qend",
    "qseq",
)

BLAST_OUTFMT_HITS = "6 " + " ".join(HIT_COLUMNS)

# =============================================================================
# Default Thresholds
# =============================================================================

# Minimum percent identity passed to blastn (-perc_identity)
DEFAULT_MIN_IDENTITY = 95.0

# Minimum percent of the allele covered by identical bases
DEFAULT_MIN_COVERAGE = 10.0

# Candidates must score strictly above this value
DEFAULT_MIN_SCORE = 50

# Schemes ignored unless a scheme is forced
DEFAULT_EXCLUDED_SCHEMES = ("ecoli_2", "abaumannii")

# =============================================================================
# Scoring Weights
#
# Exact calls are free. Approximate calls (full length, some substitutions)
# are cheap, partial calls are costlier and missing genes cost a whole gene.
# =============================================================================

APPROXIMATE_PENALTY = 0.2
PARTIAL_PENALTY = 0.5
MISSING_PENALTY = 1.0

# =============================================================================
# Reference Data Layout
# =============================================================================

# Allele FASTA extension inside a scheme directory
ALLELE_FASTA_SUFFIX = ".tfa"

# Profile table extension inside a scheme directory
PROFILE_TABLE_SUFFIX = ".txt"

# Name of the ST column in profile tables
PROFILE_ST_COLUMN = "ST"

# Environment variables for reference locations
ENV_DATADIR = "MLSTSCAN_DATADIR"
ENV_BLASTDB = "MLSTSCAN_BLASTDB"

"""
Wrappers for external bioinformatics tools.

Provides Python interfaces to the BLAST+ programs used for allele calling.
"""

from mlstscan.external.base import (
    ExternalTool,
    ToolExecutionError,
    ToolNotFoundError,
    ToolResult,
    ToolTimeoutError,
)
from mlstscan.external.blast import BlastN, MakeBlastDb, build_allele_database

__all__ = [
    "BlastN",
    "ExternalTool",
    "MakeBlastDb",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolResult",
    "ToolTimeoutError",
    "build_allele_database",
]

"""
mlstscan: multi-locus sequence typing of bacterial genome assemblies.

Scans contig files against PubMLST typing schemes, calls the allele of every
scheme gene, and reports the best matching scheme and sequence type.
"""

__version__ = "0.1.0"

from mlstscan.core.engine import MLSTTyper
from mlstscan.core.schemes import Scheme, SchemeCatalog
from mlstscan.models.calls import GeneCall
from mlstscan.models.config import TypingConfig
from mlstscan.models.results import GenomeResult

__all__ = [
    "GeneCall",
    "GenomeResult",
    "MLSTTyper",
    "Scheme",
    "SchemeCatalog",
    "TypingConfig",
    "__version__",
]

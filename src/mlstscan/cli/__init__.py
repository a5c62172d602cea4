"""
CLI commands for mlstscan.

Provides the command-line interface for typing genomes, listing schemes
and building the allele database.
"""

__all__ = ["database", "genotype", "main"]

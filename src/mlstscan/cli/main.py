"""
Main CLI entry point for mlstscan.

Provides subcommands:
- type: Assign scheme and sequence type to genome assemblies
- schemes: List available typing schemes
- makedb: Build the combined allele BLAST database
"""

from __future__ import annotations

import typer
from rich import print as rprint

from mlstscan import __version__
from mlstscan.cli import database, genotype

app = typer.Typer(
    name="mlstscan",
    help="Multi-locus sequence typing of bacterial genome assemblies",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"mlstscan version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    mlstscan: scan contig files against PubMLST typing schemes.

    Every assembly is aligned against the alleles of all known schemes, and
    the scheme with the most complete, most exact allelic profile is reported
    together with its sequence type.
    """


app.command(name="type")(genotype.type_genomes)
app.command(name="schemes")(database.list_schemes)
app.command(name="makedb")(database.make_database)


if __name__ == "__main__":
    app()

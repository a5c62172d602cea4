"""
Scheme listing and BLAST database commands.

- schemes: list the schemes found in the data directory
- makedb: combine all allele files into one BLAST nucleotide database
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from mlstscan.cli.genotype import exit_with_error
from mlstscan.cli.utils import (
    QuietConsole,
    resolve_blastdb,
    resolve_datadir,
    setup_logging,
    spinner_progress,
)
from mlstscan.core.constants import ENV_BLASTDB, ENV_DATADIR
from mlstscan.core.exceptions import MlstscanError
from mlstscan.core.schemes import SchemeCatalog
from mlstscan.external.base import ToolNotFoundError
from mlstscan.external.blast import MakeBlastDb, build_allele_database

console = Console()
err_console = Console(stderr=True)


def list_schemes(
    long: bool = typer.Option(
        False,
        "--long",
        help="One scheme per line with its genes",
    ),
    stats: bool = typer.Option(
        False,
        "--stats",
        help="Table of gene, profile and allele counts per scheme",
    ),
    datadir: Path | None = typer.Option(
        None,
        "--datadir",
        envvar=ENV_DATADIR,
        help="PubMLST scheme data directory [default: db/pubmlst]",
    ),
) -> None:
    """
    List available typing schemes.

    Example:

        mlstscan schemes

        mlstscan schemes --long
    """
    setup_logging()
    try:
        catalog = SchemeCatalog.from_directory(resolve_datadir(datadir))
    except MlstscanError as e:
        exit_with_error(e)

    if stats:
        table = Table(title=f"{len(catalog)} schemes")
        table.add_column("Scheme", style="cyan")
        table.add_column("Genes", justify="right")
        table.add_column("Profiles", justify="right")
        table.add_column("Alleles", justify="right")
        for scheme in catalog:
            alleles = sum(scheme.allele_count(gene) for gene in scheme.genes)
            table.add_row(
                scheme.name,
                str(scheme.num_genes),
                str(scheme.num_profiles),
                str(alleles),
            )
        console.print(table)
    elif long:
        for scheme in catalog:
            typer.echo("\t".join([scheme.name, *scheme.genes]))
    else:
        typer.echo(" ".join(catalog.names))


def make_database(
    datadir: Path | None = typer.Option(
        None,
        "--datadir",
        envvar=ENV_DATADIR,
        help="PubMLST scheme data directory [default: db/pubmlst]",
    ),
    blastdb: Path | None = typer.Option(
        None,
        "--blastdb",
        envvar=ENV_BLASTDB,
        help="Output database prefix [default: <datadir>/../blast/mlst.fa]",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Suppress progress output",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Write the combined FASTA and show the makeblastdb command without running it",
    ),
) -> None:
    """
    Build the combined allele BLAST database from the scheme data directory.

    Example:

        mlstscan makedb --datadir db/pubmlst
    """
    setup_logging(quiet=quiet)
    out = QuietConsole(err_console, quiet=quiet)

    try:
        data_path = resolve_datadir(datadir)
        catalog = SchemeCatalog.from_directory(data_path)
        database = resolve_blastdb(blastdb, data_path)
        builder = MakeBlastDb()
        if not MakeBlastDb.check_available():
            raise ToolNotFoundError(MakeBlastDb.TOOL_NAME, MakeBlastDb.INSTALL_HINT)
    except MlstscanError as e:
        exit_with_error(e)

    out.print(f"[bold]Step 1:[/bold] Combining alleles from {len(catalog)} schemes...")
    count = build_allele_database(catalog, database)
    out.print(f"  [green]Wrote {count} alleles to {database}[/green]")

    if dry_run:
        result = builder.run(input_fasta=database, output_db=database, dry_run=True)
        console.print(f"[dim]Command: {result.command_string}[/dim]", soft_wrap=True)
        raise typer.Exit(code=0)

    out.print("\n[bold]Step 2:[/bold] Building BLAST database...")
    with spinner_progress("Running makeblastdb...", err_console, quiet):
        try:
            result = builder.run_or_raise(input_fasta=database, output_db=database)
        except MlstscanError as e:
            exit_with_error(e)

    out.print(f"  [green]Database created ({result.elapsed_seconds:.1f}s)[/green]")

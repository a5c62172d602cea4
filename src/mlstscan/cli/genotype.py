"""
Type command: assign scheme and sequence type to genome assemblies.

Every genome is aligned against the combined allele database, its hits are
classified per gene, and the best scoring scheme is reported as one row per
genome on stdout.
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Any, NoReturn

import typer
import yaml
from rich.console import Console
from rich.markup import escape

from mlstscan.cli.utils import QuietConsole, resolve_blastdb, resolve_datadir, setup_logging
from mlstscan.core.constants import ENV_BLASTDB, ENV_DATADIR
from mlstscan.core.engine import MLSTTyper
from mlstscan.core.exceptions import (
    InvalidOptionError,
    MlstscanError,
    NoInputFilesError,
)
from mlstscan.core.report import COMMA, TAB, display_filename, format_header, format_row, write_json
from mlstscan.core.schemes import SchemeCatalog
from mlstscan.external.base import ToolNotFoundError
from mlstscan.external.blast import BlastN, blast_database_exists
from mlstscan.models.config import BlastConfig, TypingConfig
from mlstscan.models.results import GenomeResult

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)


def exit_with_error(error: MlstscanError) -> NoReturn:
    """Print an error with its suggestion and exit with code 1."""
    err_console.print(f"[red]Error:[/red] {escape(error.message)}")
    if error.suggestion:
        err_console.print(f"\n[dim]{escape(error.suggestion)}[/dim]")
    raise typer.Exit(code=1) from None


def build_typing_config(
    config_file: Path | None,
    **overrides: Any,
) -> TypingConfig:
    """Merge YAML settings (if any) with command-line overrides.

    Raises:
        InvalidOptionError: If the merged settings are invalid
    """
    try:
        if config_file is not None:
            return TypingConfig.from_yaml(config_file, **overrides)
        return TypingConfig(**{k: v for k, v in overrides.items() if v is not None})
    except (ValueError, yaml.YAMLError, OSError) as e:
        raise InvalidOptionError(
            f"Invalid typing configuration: {e}",
            "Check the threshold options and the --config file.",
        ) from e


def type_genomes(
    files: list[Path] | None = typer.Argument(
        None,
        help="Genome assemblies (FASTA, GenBank or EMBL, optionally gzipped)",
    ),
    scheme: str | None = typer.Option(
        None,
        "--scheme",
        help="Don't autodetect, force this scheme on all inputs",
    ),
    exclude: str | None = typer.Option(
        None,
        "--exclude",
        help="Comma-separated schemes to ignore [default: ecoli_2,abaumannii]",
    ),
    min_identity: float | None = typer.Option(
        None,
        "--minid",
        min=0.0,
        max=100.0,
        help="Minimum DNA %identity of full allele to consider 'similar' [default: 95]",
    ),
    min_coverage: float | None = typer.Option(
        None,
        "--mincov",
        min=0.0,
        max=100.0,
        help="Minimum DNA %coverage to report partial allele at all [default: 10]",
    ),
    min_score: float | None = typer.Option(
        None,
        "--minscore",
        min=0.0,
        max=100.0,
        help="Minimum score out of 100 to match a scheme [default: 50]",
    ),
    novel: Path | None = typer.Option(
        None,
        "--novel",
        help="Save novel alleles to this FASTA file",
    ),
    legacy: bool = typer.Option(
        False,
        "--legacy",
        help="Use old legacy output with allele header row (requires --scheme)",
    ),
    csv: bool = typer.Option(
        False,
        "--csv",
        help="Output CSV instead of TSV",
    ),
    json_output: Path | None = typer.Option(
        None,
        "--json",
        help="Also write results to this JSON file",
    ),
    label: str | None = typer.Option(
        None,
        "--label",
        help="Replace FILE with this name instead (single input only)",
    ),
    nopath: bool = typer.Option(
        False,
        "--nopath",
        help="Strip filename paths from FILE column",
    ),
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
        help="BLAST database prefix [default: <datadir>/../blast/mlst.fa]",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        exists=True,
        dir_okay=False,
        help="YAML file with thresholds, scheme filters and weights",
    ),
    threads: int = typer.Option(
        1,
        "--threads",
        min=1,
        help="Number of BLAST threads",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        min=1.0,
        help="Seconds allowed for aligning one genome",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Only show errors",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show progress for every genome",
    ),
) -> None:
    """
    Scan genome assemblies against PubMLST typing schemes.

    Prints one row per genome: FILE, SCHEME, ST and the allele of every gene.
    Alleles are shown as N (exact), ~N (novel full length), N? (partial)
    or - (missing).

    Example:

        mlstscan type contigs.fa

        mlstscan type --scheme saureus --legacy --csv *.fa
    """
    setup_logging(verbose=verbose, quiet=quiet)
    out = QuietConsole(err_console, quiet=quiet)

    try:
        if not files:
            raise NoInputFilesError()
        if label is not None and len(files) > 1:
            raise InvalidOptionError(
                f"--label can only be used with a single input, got {len(files)} files",
                "Drop --label, or use --nopath to shorten file names.",
            )
        if legacy and not scheme and config_file is None:
            raise InvalidOptionError(
                "--legacy requires --scheme",
                "Legacy output lists the genes of one scheme; choose it with --scheme.",
            )

        config = build_typing_config(
            config_file,
            scheme=scheme,
            exclude=exclude,
            min_identity=min_identity,
            min_coverage=min_coverage,
            min_score=min_score,
            legacy=legacy or None,
            novel_output=novel,
        )

        data_path = resolve_datadir(datadir)
        catalog = SchemeCatalog.from_directory(data_path)
        database = resolve_blastdb(blastdb, data_path)

        if not BlastN.check_available():
            raise ToolNotFoundError(BlastN.TOOL_NAME, BlastN.INSTALL_HINT)
        if not blast_database_exists(database):
            raise InvalidOptionError(
                f"BLAST database not found: {database}",
                "Build it with 'mlstscan makedb', or point --blastdb at an existing one.",
            )

        aligner = partial(
            BlastN().align,
            database=database,
            min_identity=config.min_identity,
            config=BlastConfig(num_threads=threads, timeout=timeout),
        )
        typer_engine = MLSTTyper(catalog, config, aligner)
    except MlstscanError as e:
        exit_with_error(e)

    logger.info(
        "Typing %d genomes against %d schemes (blastdb %s)",
        len(files),
        len(catalog),
        database,
    )

    separator = COMMA if csv else TAB
    if config.legacy and config.scheme:
        _print_row(format_header(catalog.get(config.scheme), separator))

    labels = [label] if label is not None else [display_filename(f, nopath) for f in files]
    results: list[GenomeResult] = []
    for result in typer_engine.type_genomes(files, labels):
        _print_row(format_row(result, legacy=config.legacy, separator=separator))
        results.append(result)

    if json_output is not None:
        write_json(results, json_output)
        out.print(f"[green]Wrote JSON results to {json_output}[/green]")

    novel_count = typer_engine.finish()
    if config.novel_output is not None:
        out.print(f"[green]Wrote {novel_count} novel alleles to {config.novel_output}[/green]")

    matched = sum(1 for r in results if r.matched)
    out.print(f"[dim]Typed {len(results)} genomes, {matched} matched a scheme[/dim]")


def _print_row(row: str) -> None:
    # Plain write; rich would expand the tab separators
    typer.echo(row)

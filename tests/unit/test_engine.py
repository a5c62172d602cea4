"""Unit tests for the typing engine.

The aligner is replaced by a callable returning prepared hit lines, so
no BLAST+ installation is needed.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from Bio import SeqIO

from mlstscan.core.engine import MLSTTyper
from mlstscan.core.exceptions import UnknownSchemeError
from mlstscan.core.schemes import SchemeCatalog
from mlstscan.models.config import TypingConfig
from tests.factories import SAUREUS_GENES, HitFactory, write_fasta


class FakeAligner:
    """Return canned hit lines keyed by FASTA file name."""

    def __init__(self, lines_by_name: dict[str, list[str]]):
        self.lines_by_name = lines_by_name
        self.calls: list[Path] = []

    def __call__(self, fasta: Path) -> list[str]:
        self.calls.append(fasta)
        return self.lines_by_name.get(fasta.name, [])


@pytest.fixture
def st5_lines(hits: HitFactory) -> list[str]:
    return hits.profile("saureus", SAUREUS_GENES, [1, 4, 1, 4, 12, 1, 10])


class TestTypeGenome:
    """Tests for single-genome typing."""

    def test_complete_profile(self, catalog: SchemeCatalog, temp_dir: Path, st5_lines):
        genome = write_fasta(temp_dir / "st5.fa")
        typer = MLSTTyper(catalog, TypingConfig(), FakeAligner({"st5.fa": st5_lines}))

        result = typer.type_genome(genome)

        assert result.filename == str(genome)
        assert result.scheme == "saureus"
        assert result.sequence_type == "5"
        assert result.score == 100
        assert result.matched
        assert list(result.allele_labels().values()) == ["1", "4", "1", "4", "12", "1", "10"]

    def test_label_overrides_filename(self, catalog: SchemeCatalog, temp_dir: Path, st5_lines):
        genome = write_fasta(temp_dir / "st5.fa")
        typer = MLSTTyper(catalog, TypingConfig(), FakeAligner({"st5.fa": st5_lines}))

        assert typer.type_genome(genome, label="isolate42").filename == "isolate42"

    def test_no_hits(self, catalog: SchemeCatalog, temp_dir: Path):
        genome = write_fasta(temp_dir / "empty_hits.fa")
        typer = MLSTTyper(catalog, TypingConfig(), FakeAligner({}))

        result = typer.type_genome(genome)

        assert result.scheme == "-"
        assert result.sequence_type == "-"
        assert not result.matched
        assert result.alleles == {}

    def test_second_exact_allele_warns(self, catalog: SchemeCatalog, temp_dir: Path, hits: HitFactory):
        lines = hits.profile("saureus", SAUREUS_GENES, [1, 4, 1, 4, 12, 1, 10])
        lines.append(hits.exact("saureus", "arcC", 3))
        genome = write_fasta(temp_dir / "mixed.fa")
        typer = MLSTTyper(catalog, TypingConfig(), FakeAligner({"mixed.fa": lines}))

        result = typer.type_genome(genome, label="mixed.fa")

        assert result.allele_labels()["arcC"] == "1,3"
        assert result.sequence_type == "-"
        assert result.score == 100
        assert len(result.warnings) == 1
        assert "additional exact allele match saureus.arcC-3" in result.warnings[0]

    def test_forced_scheme_without_hits(self, catalog: SchemeCatalog, temp_dir: Path):
        genome = write_fasta(temp_dir / "g.fa")
        typer = MLSTTyper(catalog, TypingConfig(scheme="saureus"), FakeAligner({}))

        result = typer.type_genome(genome)

        assert result.scheme == "saureus"
        assert result.sequence_type == "-"
        assert result.signature == "/".join(["-"] * 7)
        assert set(result.allele_labels().values()) == {"-"}

    def test_unknown_forced_scheme(self, catalog: SchemeCatalog):
        with pytest.raises(UnknownSchemeError):
            MLSTTyper(catalog, TypingConfig(scheme="kpneumoniae"), FakeAligner({}))


class TestTypeGenomes:
    """Tests for batch typing."""

    def test_input_order_preserved(self, catalog: SchemeCatalog, temp_dir: Path, hits: HitFactory):
        st8 = hits.profile("saureus", SAUREUS_GENES, [3, 3, 1, 1, 4, 4, 3])
        st1 = hits.profile("saureus", SAUREUS_GENES, [1] * 7)
        paths = [write_fasta(temp_dir / "b.fa"), write_fasta(temp_dir / "a.fa")]
        typer = MLSTTyper(catalog, TypingConfig(), FakeAligner({"b.fa": st8, "a.fa": st1}))

        results = list(typer.type_genomes(paths))

        assert [r.sequence_type for r in results] == ["8", "1"]

    def test_unreadable_genome_continues(self, catalog: SchemeCatalog, temp_dir: Path, st5_lines):
        good = write_fasta(temp_dir / "good.fa")
        paths = [temp_dir / "missing.fa", good]
        aligner = FakeAligner({"good.fa": st5_lines})
        typer = MLSTTyper(catalog, TypingConfig(), aligner)

        results = list(typer.type_genomes(paths, labels=["missing.fa", "good.fa"]))

        assert results[0].filename == "missing.fa"
        assert not results[0].matched
        assert "file not found" in results[0].warnings[0]
        assert results[1].sequence_type == "5"
        assert [p.name for p in aligner.calls] == ["good.fa"]

    def test_unreadable_genome_with_forced_scheme(self, catalog: SchemeCatalog, temp_dir: Path):
        """Failed genomes still report one label per gene of the forced scheme."""
        config = TypingConfig(scheme="saureus", legacy=True)
        typer = MLSTTyper(catalog, config, FakeAligner({}))

        [result] = typer.type_genomes([temp_dir / "missing.fa"], labels=["missing.fa"])

        assert result.scheme == "saureus"
        assert result.sequence_type == "-"
        assert list(result.allele_labels()) == SAUREUS_GENES
        assert set(result.allele_labels().values()) == {"-"}
        assert "file not found" in result.warnings[0]

    def test_label_count_mismatch(self, catalog: SchemeCatalog, temp_dir: Path):
        typer = MLSTTyper(catalog, TypingConfig(), FakeAligner({}))
        with pytest.raises(ValueError, match="labels"):
            list(typer.type_genomes([temp_dir / "a.fa"], labels=["a", "b"]))


class TestNovelAlleles:
    """Tests for run-level novel allele output."""

    def test_finish_without_tracking(self, catalog: SchemeCatalog):
        typer = MLSTTyper(catalog, TypingConfig(), FakeAligner({}))
        assert typer.registry is None
        assert typer.finish() == 0

    def test_novel_written_once_across_genomes(
        self, catalog: SchemeCatalog, temp_dir: Path, hits: HitFactory
    ):
        novel_line = hits.approximate("saureus", "arcC", 1)
        rest = [hits.exact("saureus", gene, 1) for gene in SAUREUS_GENES[1:]]
        lines = [novel_line, *rest]
        paths = [write_fasta(temp_dir / "g1.fa"), write_fasta(temp_dir / "g2.fa")]
        output = temp_dir / "out" / "novel.fa"
        config = TypingConfig(novel_output=output)
        typer = MLSTTyper(catalog, config, FakeAligner({"g1.fa": lines, "g2.fa": lines}))

        results = list(typer.type_genomes(paths, labels=["g1.fa", "g2.fa"]))
        count = typer.finish()

        assert results[0].allele_labels()["arcC"] == "~1"
        assert results[0].sequence_type == "-"
        assert results[0].score == 97
        assert count == 1
        records = list(SeqIO.parse(output, "fasta"))
        assert [r.id for r in records] == ["saureus.arcC-~1"]
        assert records[0].description == "saureus.arcC-~1 g1.fa"

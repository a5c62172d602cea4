"""
Shared pytest fixtures for mlstscan tests.

Provides reusable hit lines, in-memory and on-disk scheme catalogs,
and typing configurations for unit and integration testing.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from mlstscan.core.constants import SIGNATURE_SEPARATOR
from mlstscan.core.schemes import Scheme, SchemeCatalog
from mlstscan.external.base import ExternalTool
from mlstscan.external.blast import BlastN, MakeBlastDb
from mlstscan.models.config import TypingConfig
from tests.factories import (
    ECOLI2_GENES,
    ECOLI2_PROFILES,
    SAUREUS_GENES,
    SAUREUS_PROFILES,
    SEPIDERMIDIS_GENES,
    SEPIDERMIDIS_PROFILES,
    HitFactory,
    write_scheme,
)


def _profiles(table: dict[str, list[int]]) -> dict[str, str]:
    return {
        SIGNATURE_SEPARATOR.join(str(a) for a in alleles): st
        for st, alleles in table.items()
    }


# =============================================================================
# Hit Fixtures
# =============================================================================


@pytest.fixture
def hits() -> HitFactory:
    """Factory for 8-column hit lines."""
    return HitFactory()


@pytest.fixture
def valid_hit_line() -> str:
    """Single exact hit line."""
    return "saureus.arcC_3\t456\t456\t456\tcontig_7\t1001\t1456\t" + "A" * 456


# =============================================================================
# Scheme Fixtures
# =============================================================================


@pytest.fixture
def saureus_scheme() -> Scheme:
    """Seven-gene in-memory scheme with three STs."""
    return Scheme(name="saureus", genes=list(SAUREUS_GENES), profiles=_profiles(SAUREUS_PROFILES))


@pytest.fixture
def sepidermidis_scheme() -> Scheme:
    """Second seven-gene scheme sharing some gene names with saureus."""
    return Scheme(
        name="sepidermidis",
        genes=list(SEPIDERMIDIS_GENES),
        profiles=_profiles(SEPIDERMIDIS_PROFILES),
    )


@pytest.fixture
def catalog(saureus_scheme: Scheme, sepidermidis_scheme: Scheme) -> SchemeCatalog:
    """In-memory catalog including the excluded-by-default ecoli_2 scheme."""
    ecoli_2 = Scheme(name="ecoli_2", genes=list(ECOLI2_GENES), profiles=_profiles(ECOLI2_PROFILES))
    return SchemeCatalog([saureus_scheme, sepidermidis_scheme, ecoli_2])


@pytest.fixture
def default_config() -> TypingConfig:
    """Typing configuration with default thresholds."""
    return TypingConfig()


# =============================================================================
# Temporary File Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Path:
    """Temporary directory that is cleaned up after tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def scheme_datadir(temp_dir: Path) -> Path:
    """On-disk PubMLST-style data directory with three schemes."""
    datadir = temp_dir / "db" / "pubmlst"
    write_scheme(datadir, "saureus", SAUREUS_GENES, SAUREUS_PROFILES)
    write_scheme(datadir, "sepidermidis", SEPIDERMIDIS_GENES, SEPIDERMIDIS_PROFILES)
    write_scheme(datadir, "ecoli_2", ECOLI2_GENES, ECOLI2_PROFILES)
    return datadir


@pytest.fixture(autouse=True)
def _reset_tool_resolution():
    """Keep executable lookups from leaking between tests."""
    tools = (ExternalTool, BlastN, MakeBlastDb)
    for tool in tools:
        tool.reset_executable_resolver()
    yield
    for tool in tools:
        tool.reset_executable_resolver()

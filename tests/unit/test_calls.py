"""Unit tests for gene calls, display labels and call merging."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mlstscan.models.calls import (
    CallKind,
    GeneCall,
    format_label,
    is_exact_conflict,
    merge_call,
    parse_label,
)


class TestGeneCall:
    """Tests for GeneCall construction and validation."""

    def test_constructors(self):
        assert GeneCall.exact(3).kind is CallKind.EXACT
        assert GeneCall.approximate(3).kind is CallKind.APPROXIMATE
        assert GeneCall.partial(3).kind is CallKind.PARTIAL
        assert GeneCall.missing().alleles == ()

    def test_exact_requires_allele(self):
        with pytest.raises(ValidationError):
            GeneCall(kind=CallKind.EXACT)

    def test_missing_rejects_alleles(self):
        with pytest.raises(ValidationError):
            GeneCall(kind=CallKind.MISSING, alleles=(1,))

    def test_approximate_takes_one_allele(self):
        with pytest.raises(ValidationError):
            GeneCall(kind=CallKind.APPROXIMATE, alleles=(1, 2))

    def test_equality(self):
        """Calls are value objects."""
        assert GeneCall.exact(1, 2) == GeneCall.exact(1, 2)
        assert GeneCall.exact(1) != GeneCall.approximate(1)


class TestLabels:
    """Tests for display formatting and parsing."""

    @pytest.mark.parametrize(
        ("call", "label"),
        [
            (GeneCall.exact(12), "12"),
            (GeneCall.exact(12, 15), "12,15"),
            (GeneCall.approximate(12), "~12"),
            (GeneCall.partial(12), "12?"),
            (GeneCall.missing(), "-"),
        ],
    )
    def test_format_and_parse(self, call, label):
        assert format_label(call) == label
        assert call.label == label
        assert str(call) == label
        assert parse_label(label) == call

    def test_none_formats_as_missing(self):
        assert format_label(None) == "-"

    @pytest.mark.parametrize("label", ["", "~", "?", "abc", "~12?", "1,,2"])
    def test_invalid_labels(self, label):
        with pytest.raises(ValueError, match="Invalid allele label"):
            parse_label(label)


class TestMergeCall:
    """Tests for merge_call precedence rules."""

    def test_first_observation_taken(self):
        assert merge_call(None, GeneCall.partial(4)) == GeneCall.partial(4)

    def test_missing_is_replaced(self):
        assert merge_call(GeneCall.missing(), GeneCall.approximate(2)) == GeneCall.approximate(2)

    def test_exact_replaces_inexact(self):
        assert merge_call(GeneCall.approximate(2), GeneCall.exact(3)) == GeneCall.exact(3)
        assert merge_call(GeneCall.partial(2), GeneCall.exact(3)) == GeneCall.exact(3)

    @pytest.mark.parametrize("later", [GeneCall.approximate(9), GeneCall.partial(9)])
    def test_exact_is_never_downgraded(self, later):
        assert merge_call(GeneCall.exact(3), later) == GeneCall.exact(3)

    def test_first_inexact_wins(self):
        assert merge_call(GeneCall.approximate(2), GeneCall.approximate(5)) == GeneCall.approximate(2)
        assert merge_call(GeneCall.partial(2), GeneCall.approximate(5)) == GeneCall.partial(2)

    def test_second_exact_appended(self):
        merged = merge_call(GeneCall.exact(3), GeneCall.exact(7))
        assert merged == GeneCall.exact(3, 7)
        assert merged.label == "3,7"

    def test_repeated_exact_appended(self):
        merged = merge_call(GeneCall.exact(3), GeneCall.exact(3))
        assert merged == GeneCall.exact(3, 3)
        assert merged.label == "3,3"


class TestIsExactConflict:
    """Tests for duplicate exact detection."""

    def test_different_exact(self):
        assert is_exact_conflict(GeneCall.exact(3), GeneCall.exact(4))

    def test_same_exact(self):
        assert is_exact_conflict(GeneCall.exact(3), GeneCall.exact(3))

    def test_no_existing(self):
        assert not is_exact_conflict(None, GeneCall.exact(3))

    def test_inexact_existing(self):
        assert not is_exact_conflict(GeneCall.approximate(3), GeneCall.exact(4))

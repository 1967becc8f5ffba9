"""Tests for the Categorizer."""

from __future__ import annotations

import pytest

from skillgate.observability.error_codes import DiagnosticCode
from skillgate.skills.catalog import Catalog
from skillgate.skills.categorizer import Categorizer
from skillgate.skills.models import ScoredCandidate


def _c(name: str, confidence: float) -> ScoredCandidate:
    return ScoredCandidate(name=name, confidence=confidence, reason="test")


@pytest.fixture
def catalog() -> Catalog:
    return Catalog.from_mapping({"skills": {name: {} for name in "abcdefg"}})


def test_tiers_split_on_thresholds(catalog: Catalog) -> None:
    split = Categorizer().categorize(
        [_c("a", 0.9), _c("b", 0.65), _c("c", 0.5), _c("d", 0.49), _c("e", 0.66)], catalog
    )

    admit, consider = split.names()
    assert admit == ["a", "e"]
    # 0.65 is not strictly above the high threshold; 0.50 is inclusive.
    assert consider == ["b", "c"]
    assert [c.name for c in split.dropped] == ["d"]


def test_tiers_are_capped(catalog: Catalog) -> None:
    split = Categorizer(max_admit=2, max_consider=1).categorize(
        [_c("a", 0.7), _c("b", 0.9), _c("c", 0.8), _c("d", 0.6), _c("e", 0.55)], catalog
    )

    admit, consider = split.names()
    assert admit == ["b", "c"]
    assert consider == ["d"]


def test_equal_confidence_keeps_input_order(catalog: Catalog) -> None:
    split = Categorizer(max_admit=3).categorize(
        [_c("c", 0.8), _c("a", 0.8), _c("b", 0.8)], catalog
    )
    assert split.names()[0] == ["c", "a", "b"]


def test_unknown_names_are_dropped_silently(catalog: Catalog) -> None:
    split = Categorizer().categorize([_c("zzz", 0.99), _c("a", 0.7)], catalog)

    assert split.names() == (["a"], [])
    assert split.diagnostics == []


def test_confidence_is_clamped(catalog: Catalog) -> None:
    split = Categorizer().categorize([_c("a", 1.7), _c("b", -0.3)], catalog)

    assert split.admit[0].confidence == 1.0
    assert split.dropped[0].confidence == 0.0
    codes = [d.code for d in split.diagnostics]
    assert codes == [DiagnosticCode.SCORE_CONFIDENCE_CLAMPED] * 2


def test_nan_confidence_is_treated_as_zero(catalog: Catalog) -> None:
    split = Categorizer().categorize([_c("a", float("nan"))], catalog)

    assert split.names() == ([], [])
    assert split.dropped[0].confidence == 0.0


def test_duplicate_candidates_keep_highest(catalog: Catalog) -> None:
    split = Categorizer().categorize([_c("a", 0.55), _c("b", 0.6), _c("a", 0.9)], catalog)

    admit, consider = split.names()
    assert admit == ["a"]
    assert consider == ["b"]
    assert [d.code for d in split.diagnostics] == [DiagnosticCode.SCORE_DUPLICATE_CANDIDATE]


def test_empty_input(catalog: Catalog) -> None:
    split = Categorizer().categorize([], catalog)
    assert split.names() == ([], [])


def test_thresholds_must_be_ordered() -> None:
    with pytest.raises(ValueError):
        Categorizer(high_threshold=0.5, low_threshold=0.5)

# tests/epistemic_core/test_propositions.py

import math

import pytest

# Subject under test
from epistemic_core.epistemic.propositions import (
    NEGATION_MARKER,
    clamp_confidence,
    contradicts,
    is_negated,
    negate,
)

# Test Cases


@pytest.mark.parametrize("proposition", ["P", "SystemIsSecure", "", "¬", "¬¬P", "  spaced "])
def test_negate_is_an_involution(proposition):
    """
    Tests that negating twice returns the original string for any input.
    """
    assert negate(negate(proposition)) == proposition


def test_negate_adds_and_removes_marker():
    assert negate("P") == f"{NEGATION_MARKER}P"
    assert negate("¬P") == "P"
    assert is_negated("¬P")
    assert not is_negated("P")


def test_contradicts_is_symmetric_and_exact():
    """
    Tests that only a proposition and its exact negation contradict.
    """
    assert contradicts("P", "¬P")
    assert contradicts("¬P", "P")
    assert not contradicts("P", "P")
    assert not contradicts("P", "¬Q")
    assert not contradicts("P", "¬p")


@pytest.mark.parametrize(
    "raw, expected",
    [(-0.2, 0.0), (0.0, 0.0), (0.42, 0.42), (1.0, 1.0), (1.7, 1.0)],
)
def test_clamp_confidence_bounds(raw, expected):
    assert clamp_confidence(raw) == pytest.approx(expected)


def test_clamp_confidence_treats_nan_as_neutral():
    assert clamp_confidence(math.nan) == 0.5

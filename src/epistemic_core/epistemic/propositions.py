# src/epistemic_core/epistemic/propositions.py
"""
Helpers for working with propositions, the opaque claim identifiers that
beliefs are keyed by.

A proposition and its negation differ only by a leading negation marker.
"""

import math

import numpy as np

NEGATION_MARKER = "¬"

NEUTRAL_CONFIDENCE = 0.5


def is_negated(proposition: str) -> bool:
    """Returns True if the proposition carries the negation marker."""
    return proposition.startswith(NEGATION_MARKER)


def negate(proposition: str) -> str:
    """
    Returns the negation of a proposition.

    Negation is an involution: ``negate(negate(p)) == p`` for every string.
    """
    if is_negated(proposition):
        return proposition[len(NEGATION_MARKER) :]
    return NEGATION_MARKER + proposition


def contradicts(proposition_a: str, proposition_b: str) -> bool:
    """Two propositions contradict iff one is the other's negation."""
    return negate(proposition_a) == proposition_b


def clamp_confidence(value: float) -> float:
    """Clamps a confidence into [0, 1]. NaN is treated as neutral."""
    value = float(value)
    if math.isnan(value):
        return NEUTRAL_CONFIDENCE
    return float(np.clip(value, 0.0, 1.0))

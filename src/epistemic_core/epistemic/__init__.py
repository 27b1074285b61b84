# src/epistemic_core/epistemic/__init__.py

from .belief import Belief
from .conflict import ConflictResolutionOutcome, ConflictStatus, EpistemicConflict, ResolutionType
from .justification import (
    ElementType,
    Justification,
    JustificationElement,
    external_element,
    inference_element,
    observation_element,
    testimony_element,
    tool_result_element,
)
from .propositions import clamp_confidence, contradicts, is_negated, negate

__all__ = [
    "Belief",
    "ConflictResolutionOutcome",
    "ConflictStatus",
    "ElementType",
    "EpistemicConflict",
    "Justification",
    "JustificationElement",
    "ResolutionType",
    "clamp_confidence",
    "contradicts",
    "external_element",
    "inference_element",
    "is_negated",
    "negate",
    "observation_element",
    "testimony_element",
    "tool_result_element",
]

# src/epistemic_core/epistemic/belief.py

import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from epistemic_core.epistemic.justification import Justification, JustificationElement
from epistemic_core.epistemic.propositions import clamp_confidence, contradicts, is_negated, negate


@dataclass(frozen=True)
class Belief:
    """
    A proposition held with a confidence and the evidence behind it.

    Beliefs are values. Every update produces a new Belief that replaces the
    previous one in the owning agent's store. The confidence is clamped into
    [0, 1] on construction.
    """

    proposition: str
    confidence: float
    justification: Justification = field(default_factory=Justification)
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: f"belief_{uuid.uuid4().hex[:12]}")

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", clamp_confidence(self.confidence))

    @property
    def is_negated(self) -> bool:
        return is_negated(self.proposition)

    def negation(self) -> "Belief":
        """
        Returns a belief in the negated proposition with the same confidence
        and justification. Confidence in the negation is tracked on its own
        and is not 1 - confidence.
        """
        return Belief(
            proposition=negate(self.proposition),
            confidence=self.confidence,
            justification=self.justification,
        )

    def contradicts(self, other: "Belief") -> bool:
        return contradicts(self.proposition, other.proposition)

    def is_stronger_than(self, other: "Belief") -> bool:
        return self.confidence > other.confidence

    def meets(self, threshold: float) -> bool:
        """Inclusive threshold check used by every gate in the engine."""
        return self.confidence >= threshold

    def with_confidence(self, confidence: float) -> "Belief":
        return replace(self, confidence=confidence, timestamp=time.time(), id=f"belief_{uuid.uuid4().hex[:12]}")

    def with_updates(
        self, confidence: float, new_elements: Optional[Iterable[JustificationElement]] = None
    ) -> "Belief":
        """Returns the successor belief after an update."""
        elements = tuple(new_elements or ())
        return Belief(
            proposition=self.proposition,
            confidence=confidence,
            justification=self.justification.with_elements(*elements),
        )

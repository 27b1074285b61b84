# src/epistemic_core/epistemic/conflict.py

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from epistemic_core.epistemic.belief import Belief


class ConflictStatus(str, Enum):
    DETECTED = "detected"
    EXCHANGING = "exchanging"
    CLASSIFYING = "classifying"
    RESOLVED = "resolved"
    PERSISTENT = "persistent"


class ResolutionType(str, Enum):
    CONVERGED = "converged"
    PARTIAL_ADJUSTMENT = "partial_adjustment"
    PERSISTENT_DISAGREEMENT = "persistent_disagreement"


@dataclass(frozen=True)
class ConflictResolutionOutcome:
    """
    The terminal result of one justification exchange.

    An updated belief is None when that side's confidence did not change.
    A persistent disagreement has ``success=False`` but is not an error.
    """

    success: bool
    resolution_type: ResolutionType
    reason: str
    updated_belief_a: Optional[Belief] = None
    updated_belief_b: Optional[Belief] = None
    delta_a: float = 0.0
    delta_b: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "resolution_type": self.resolution_type.value,
            "reason": self.reason,
            "updated_confidence_a": self.updated_belief_a.confidence if self.updated_belief_a else None,
            "updated_confidence_b": self.updated_belief_b.confidence if self.updated_belief_b else None,
            "delta_a": self.delta_a,
            "delta_b": self.delta_b,
        }


@dataclass
class EpistemicConflict:
    """
    A detected pair of contradictory beliefs held by two agents.

    ``belief_a`` supports ``proposition`` and belongs to ``agent_a``;
    ``belief_b`` supports its negation and belongs to ``agent_b``. The
    beliefs are snapshots taken at detection time. Only ``status`` and
    ``outcome`` change while the conflict is processed.
    """

    agent_a: str
    agent_b: str
    proposition: str
    belief_a: Belief
    belief_b: Belief
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: f"conflict_{uuid.uuid4().hex[:12]}")
    status: ConflictStatus = ConflictStatus.DETECTED
    outcome: Optional[ConflictResolutionOutcome] = None

    @property
    def negated_proposition(self) -> str:
        return self.belief_b.proposition

    @property
    def is_resolved(self) -> bool:
        return self.status in (ConflictStatus.RESOLVED, ConflictStatus.PERSISTENT)

    def pair_key(self) -> frozenset:
        """Identifies the contradictory pair regardless of which side detected it."""
        return frozenset(
            {(self.agent_a, self.belief_a.proposition), (self.agent_b, self.belief_b.proposition)}
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conflict_id": self.id,
            "agent_a": self.agent_a,
            "agent_b": self.agent_b,
            "proposition": self.proposition,
            "confidence_a": self.belief_a.confidence,
            "confidence_b": self.belief_b.confidence,
            "status": self.status.value,
        }

# src/epistemic_engine/conflict/resolution.py

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from epistemic_core.core.events import EventType, make_event
from epistemic_core.epistemic.belief import Belief
from epistemic_core.epistemic.conflict import (
    ConflictResolutionOutcome,
    ConflictStatus,
    EpistemicConflict,
    ResolutionType,
)

if TYPE_CHECKING:
    from epistemic_core.core.event_bus import EventBus
    from epistemic_engine.agents.agent import EpistemicAgent


class ConflictResolutionStrategy(ABC):
    """
    Abstract Base Class for conflict resolution strategies.

    A strategy runs one atomic round over a single conflict and returns an
    outcome. It never writes into either agent's belief store; committing
    the updated beliefs is each agent's own job.
    """

    @abstractmethod
    async def resolve(
        self, conflict: EpistemicConflict, agent_a: "EpistemicAgent", agent_b: "EpistemicAgent"
    ) -> ConflictResolutionOutcome:
        """
        Args:
            conflict: The conflict to work on. ``agent_a`` and ``agent_b``
                      must be the agents it names, in the same order.
        """
        raise NotImplementedError


class JustificationExchangeStrategy(ConflictResolutionStrategy):
    """
    Each agent re-reads the other side's justification through its own frame.

    Classification, in order:
      * the two beliefs no longer both meet their conflict thresholds -> converged
      * both confidences moved by less than ``significance_threshold`` -> persistent disagreement
      * otherwise -> partial adjustment
    """

    def __init__(self, significance_threshold: float = 0.1, event_bus: Optional["EventBus"] = None) -> None:
        if not 0.0 <= significance_threshold <= 1.0:
            raise ValueError("significance_threshold must be within [0, 1].")
        self.significance_threshold = significance_threshold
        self.event_bus = event_bus

    def _publish(self, event_type: EventType, entity_id: str, **payload) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, make_event(event_type, entity_id, **payload))

    def _finish(self, conflict: EpistemicConflict, outcome: ConflictResolutionOutcome) -> ConflictResolutionOutcome:
        conflict.outcome = outcome
        conflict.status = (
            ConflictStatus.PERSISTENT
            if outcome.resolution_type == ResolutionType.PERSISTENT_DISAGREEMENT
            else ConflictStatus.RESOLVED
        )
        self._publish(
            EventType.CONFLICT_RESOLUTION,
            conflict.agent_a,
            conflict_id=conflict.id,
            agent_b=conflict.agent_b,
            proposition=conflict.proposition,
            **outcome.to_dict(),
        )
        return outcome

    async def resolve(
        self, conflict: EpistemicConflict, agent_a: "EpistemicAgent", agent_b: "EpistemicAgent"
    ) -> ConflictResolutionOutcome:
        if (agent_a.id, agent_b.id) != (conflict.agent_a, conflict.agent_b):
            raise ValueError(
                f"Agents ({agent_a.id}, {agent_b.id}) do not match conflict ({conflict.agent_a}, {conflict.agent_b})."
            )

        proposition_a = conflict.belief_a.proposition
        proposition_b = conflict.belief_b.proposition

        # Detected: read the current beliefs without touching either store.
        belief_a = agent_a.get_belief(proposition_a)
        belief_b = agent_b.get_belief(proposition_b)
        if belief_a is None or belief_b is None:
            missing = agent_a.id if belief_a is None else agent_b.id
            return self._finish(
                conflict,
                ConflictResolutionOutcome(
                    success=True,
                    resolution_type=ResolutionType.CONVERGED,
                    reason=f"Agent {missing} no longer holds its side of '{conflict.proposition}'.",
                ),
            )

        # Exchanging: each side evaluates the other's evidence through its own frame.
        conflict.status = ConflictStatus.EXCHANGING
        self._publish(
            EventType.JUSTIFICATION_EXCHANGE,
            agent_a.id,
            conflict_id=conflict.id,
            agent_b=agent_b.id,
            proposition=conflict.proposition,
            elements_sent=len(belief_a.justification),
            elements_received=len(belief_b.justification),
            frame_a=agent_a.frame.kind,
            frame_b=agent_b.frame.kind,
        )
        candidate_a = await agent_a.evaluate_counter_justification(
            belief_a, belief_b.justification, proposition_b, agent_b.id, agent_b.frame
        )
        candidate_b = await agent_b.evaluate_counter_justification(
            belief_b, belief_a.justification, proposition_a, agent_a.id, agent_a.frame
        )

        # Classifying.
        conflict.status = ConflictStatus.CLASSIFYING
        delta_a = candidate_a.confidence - belief_a.confidence
        delta_b = candidate_b.confidence - belief_b.confidence
        updated_a: Optional[Belief] = candidate_a if delta_a != 0 else None
        updated_b: Optional[Belief] = candidate_b if delta_b != 0 else None
        # Unchanged candidates are never offered for commit.
        if updated_a is None:
            agent_a.discard_exchange_candidates(candidate_a)
        if updated_b is None:
            agent_b.discard_exchange_candidates(candidate_b)

        still_conflicting = candidate_a.meets(agent_a.thresholds.conflict) and candidate_b.meets(
            agent_b.thresholds.conflict
        )
        summary = (
            f"{agent_a.id}: {belief_a.confidence:.3f} -> {candidate_a.confidence:.3f}, "
            f"{agent_b.id}: {belief_b.confidence:.3f} -> {candidate_b.confidence:.3f}"
        )

        if not still_conflicting:
            outcome = ConflictResolutionOutcome(
                success=True,
                resolution_type=ResolutionType.CONVERGED,
                reason=f"Beliefs no longer both exceed their conflict thresholds ({summary}).",
                updated_belief_a=updated_a,
                updated_belief_b=updated_b,
                delta_a=delta_a,
                delta_b=delta_b,
            )
        elif abs(delta_a) < self.significance_threshold and abs(delta_b) < self.significance_threshold:
            outcome = ConflictResolutionOutcome(
                success=False,
                resolution_type=ResolutionType.PERSISTENT_DISAGREEMENT,
                reason=(
                    f"Neither side moved by {self.significance_threshold} or more after exchanging "
                    f"justifications ({summary})."
                ),
                updated_belief_a=updated_a,
                updated_belief_b=updated_b,
                delta_a=delta_a,
                delta_b=delta_b,
            )
        else:
            outcome = ConflictResolutionOutcome(
                success=True,
                resolution_type=ResolutionType.PARTIAL_ADJUSTMENT,
                reason=f"Confidence shifted but the conflict remains ({summary}).",
                updated_belief_a=updated_a,
                updated_belief_b=updated_b,
                delta_a=delta_a,
                delta_b=delta_b,
            )

        return self._finish(conflict, outcome)

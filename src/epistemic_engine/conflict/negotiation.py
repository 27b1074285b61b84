# src/epistemic_engine/conflict/negotiation.py
"""
Multi-round negotiation between two agents, and escalation of
disagreements that do not resolve to a neutral arbiter frame.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from epistemic_core.core.events import EventType, make_event
from epistemic_core.epistemic.conflict import ConflictResolutionOutcome, EpistemicConflict, ResolutionType
from epistemic_core.frames.frame_interface import FrameInterface
from epistemic_core.frames.frame_registry import frame_registry

if TYPE_CHECKING:
    from epistemic_core.cognition.scaffolding import EvidenceScaffold
    from epistemic_core.core.event_bus import EventBus
    from epistemic_engine.agents.agent import EpistemicAgent


@dataclass
class NegotiationRound:
    round_number: int
    conflicts: List[EpistemicConflict] = field(default_factory=list)
    outcomes: List[ConflictResolutionOutcome] = field(default_factory=list)

    @property
    def all_persistent(self) -> bool:
        return bool(self.outcomes) and all(
            o.resolution_type == ResolutionType.PERSISTENT_DISAGREEMENT for o in self.outcomes
        )


@dataclass
class NegotiationResult:
    rounds: List[NegotiationRound] = field(default_factory=list)
    remaining_conflicts: List[EpistemicConflict] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return not self.remaining_conflicts

    @property
    def persistent_conflicts(self) -> List[EpistemicConflict]:
        if not self.rounds:
            return []
        return [
            c
            for c in self.rounds[-1].conflicts
            if c.outcome is not None and c.outcome.resolution_type == ResolutionType.PERSISTENT_DISAGREEMENT
        ]


async def negotiate(agent_a: "EpistemicAgent", agent_b: "EpistemicAgent", max_rounds: int = 3) -> NegotiationResult:
    """
    Repeats detect-then-exchange until no conflicts remain, every conflict
    in a round ends in persistent disagreement, or ``max_rounds`` is hit.

    Conflicts are re-detected from both sides before every round, so each
    round works on fresh beliefs. Exchanges within a round run one at a time.
    """
    if max_rounds <= 0:
        raise ValueError("max_rounds must be a positive integer.")

    result = NegotiationResult()
    for round_number in range(1, max_rounds + 1):
        conflicts = agent_a.detect_all_conflicts(agent_b)
        if not conflicts:
            break

        current = NegotiationRound(round_number=round_number, conflicts=conflicts)
        for conflict in conflicts:
            current.outcomes.append(await agent_a.exchange_justifications(conflict, agent_b))
        result.rounds.append(current)

        if current.all_persistent:
            break

    result.remaining_conflicts = agent_a.detect_all_conflicts(agent_b)
    return result


@dataclass(frozen=True)
class ArbitrationResult:
    conflict_id: str
    arbiter_frame: str
    confidence_a: float
    confidence_b: float
    favoured_proposition: Optional[str]
    reason: str


async def escalate_to_arbiter(
    conflict: EpistemicConflict,
    agent_a: "EpistemicAgent",
    agent_b: "EpistemicAgent",
    arbiter_frame: Optional[FrameInterface] = None,
    scaffold: Optional["EvidenceScaffold"] = None,
    margin: float = 0.05,
    event_bus: Optional["EventBus"] = None,
) -> ArbitrationResult:
    """
    Scores both sides' justifications through a third, neutral frame (a
    judge by default) and reports which proposition it favours. Neither
    agent's store is touched. Scores closer than ``margin`` favour nobody.
    """
    arbiter = arbiter_frame or frame_registry.create("judge")
    confidence_a = await arbiter.evaluate_external_justification(
        conflict.belief_a.proposition, conflict.belief_a.justification, agent_a.frame, scaffold
    )
    confidence_b = await arbiter.evaluate_external_justification(
        conflict.belief_b.proposition, conflict.belief_b.justification, agent_b.frame, scaffold
    )

    if abs(confidence_a - confidence_b) < margin:
        favoured = None
        reason = f"{arbiter.name} arbiter found the two cases too close to call ({confidence_a:.3f} vs {confidence_b:.3f})."
    elif confidence_a > confidence_b:
        favoured = conflict.belief_a.proposition
        reason = f"{arbiter.name} arbiter favours {agent_a.id} ({confidence_a:.3f} vs {confidence_b:.3f})."
    else:
        favoured = conflict.belief_b.proposition
        reason = f"{arbiter.name} arbiter favours {agent_b.id} ({confidence_b:.3f} vs {confidence_a:.3f})."

    result = ArbitrationResult(
        conflict_id=conflict.id,
        arbiter_frame=arbiter.kind,
        confidence_a=confidence_a,
        confidence_b=confidence_b,
        favoured_proposition=favoured,
        reason=reason,
    )
    if event_bus is not None:
        event_bus.publish(
            EventType.ARBITRATION,
            make_event(
                EventType.ARBITRATION,
                arbiter.id,
                conflict_id=conflict.id,
                proposition=conflict.proposition,
                favoured_proposition=favoured,
                confidence_a=confidence_a,
                confidence_b=confidence_b,
                reason=reason,
            ),
        )
    return result

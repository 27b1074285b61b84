# src/epistemic_engine/conflict/detector.py

from typing import TYPE_CHECKING, Dict, List, Mapping, Optional

from epistemic_core.core.events import EventType, make_event
from epistemic_core.epistemic.belief import Belief
from epistemic_core.epistemic.conflict import EpistemicConflict
from epistemic_core.epistemic.propositions import negate

if TYPE_CHECKING:
    from epistemic_core.core.event_bus import EventBus


def detect_conflicts(
    agent_a_id: str,
    beliefs_a: Mapping[str, Belief],
    threshold_a: float,
    agent_b_id: str,
    beliefs_b: Mapping[str, Belief],
    threshold_b: float,
    event_bus: Optional["EventBus"] = None,
) -> List[EpistemicConflict]:
    """
    Finds contradictions from agent A's point of view.

    For every belief of A at or above A's conflict threshold, B's belief in
    the negated proposition is looked up; if it is at or above B's threshold
    a conflict is emitted. Both boundaries are inclusive. The scan is
    one-directional, so use detect_conflicts_bidirectional to find every
    conflict between a pair whose thresholds differ.

    Args:
        beliefs_a: A snapshot of A's store, proposition -> Belief.
        beliefs_b: A snapshot of B's store, proposition -> Belief.
        event_bus: If given, one conflict_detection event is published per conflict.
    """
    conflicts: List[EpistemicConflict] = []
    for proposition, belief in beliefs_a.items():
        if not belief.meets(threshold_a):
            continue
        other = beliefs_b.get(negate(proposition))
        if other is None or not other.meets(threshold_b):
            continue
        conflict = EpistemicConflict(
            agent_a=agent_a_id,
            agent_b=agent_b_id,
            proposition=proposition,
            belief_a=belief,
            belief_b=other,
        )
        conflicts.append(conflict)
        if event_bus is not None:
            event_bus.publish(
                EventType.CONFLICT_DETECTION,
                make_event(EventType.CONFLICT_DETECTION, agent_a_id, **conflict.to_dict()),
            )
    return conflicts


def detect_conflicts_bidirectional(
    agent_a_id: str,
    beliefs_a: Mapping[str, Belief],
    threshold_a: float,
    agent_b_id: str,
    beliefs_b: Mapping[str, Belief],
    threshold_b: float,
    event_bus: Optional["EventBus"] = None,
) -> List[EpistemicConflict]:
    """
    Runs detection from both sides and keeps one record per contradictory
    pair. Conflicts found from B's side are re-oriented so ``agent_a`` is
    always A.
    """
    found: Dict[frozenset, EpistemicConflict] = {}
    for conflict in detect_conflicts(agent_a_id, beliefs_a, threshold_a, agent_b_id, beliefs_b, threshold_b):
        found.setdefault(conflict.pair_key(), conflict)
    for reverse in detect_conflicts(agent_b_id, beliefs_b, threshold_b, agent_a_id, beliefs_a, threshold_a):
        conflict = EpistemicConflict(
            agent_a=agent_a_id,
            agent_b=agent_b_id,
            proposition=reverse.belief_b.proposition,
            belief_a=reverse.belief_b,
            belief_b=reverse.belief_a,
        )
        found.setdefault(conflict.pair_key(), conflict)

    conflicts = list(found.values())
    if event_bus is not None:
        for conflict in conflicts:
            event_bus.publish(
                EventType.CONFLICT_DETECTION,
                make_event(EventType.CONFLICT_DETECTION, agent_a_id, **conflict.to_dict()),
            )
    return conflicts

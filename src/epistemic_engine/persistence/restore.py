# src/epistemic_engine/persistence/restore.py

from typing import TYPE_CHECKING, List, Optional

from epistemic_core.epistemic.belief import Belief
from epistemic_core.epistemic.justification import Justification, JustificationElement
from epistemic_core.frames.frame_interface import FrameInterface
from epistemic_core.frames.frame_registry import frame_registry
from epistemic_engine.persistence.models import AgentSnapshot, BeliefSnapshot, ElementSnapshot

if TYPE_CHECKING:
    from epistemic_core.cognition.scaffolding import EvidenceScaffold
    from epistemic_core.core.event_bus import EventBus
    from epistemic_engine.agents.agent import EpistemicAgent


def _frame_or_none(kind: Optional[str]) -> Optional[FrameInterface]:
    if kind is None or kind not in frame_registry:
        return None
    return frame_registry.create(kind)


def restore_element(snapshot: ElementSnapshot) -> JustificationElement:
    external: Optional[Justification] = None
    if snapshot.external_elements:
        external = Justification(tuple(restore_element(e) for e in snapshot.external_elements))
    return JustificationElement(
        type=snapshot.type,
        source=snapshot.source,
        content=snapshot.content,
        timestamp=snapshot.timestamp,
        id=snapshot.id,
        premises=tuple(snapshot.premises),
        inference_rule=snapshot.inference_rule,
        external_justification=external,
        source_frame=_frame_or_none(snapshot.source_frame),
        supports=snapshot.supports,
    )


def restore_belief(snapshot: BeliefSnapshot) -> Belief:
    return Belief(
        proposition=snapshot.proposition,
        confidence=snapshot.confidence,
        justification=Justification(
            elements=tuple(restore_element(e) for e in snapshot.elements),
            last_modified=snapshot.justification_last_modified,
        ),
        timestamp=snapshot.timestamp,
    )


async def restore_beliefs(agent: "EpistemicAgent", snapshot: AgentSnapshot) -> List[Belief]:
    """Writes the snapshot's beliefs into the agent through its own store API."""
    restored: List[Belief] = []
    for belief_snapshot in snapshot.beliefs:
        try:
            belief = await agent.adopt_belief(restore_belief(belief_snapshot))
        except Exception as e:
            print(f"WARNING: Could not restore belief '{belief_snapshot.proposition}' for agent {agent.id}: {e}")
            continue
        if belief is not None:
            restored.append(belief)
    return restored


async def restore_agent(
    snapshot: AgentSnapshot,
    scaffold: Optional["EvidenceScaffold"] = None,
    event_bus: Optional["EventBus"] = None,
) -> "EpistemicAgent":
    """
    Rebuilds an agent from a snapshot.

    Raises:
        ValueError: If the snapshot's frame kind is not registered.
    """
    from epistemic_engine.agents.agent import EpistemicAgent

    base = frame_registry.create(snapshot.frame)
    known = base.parameters
    overrides = {k: v for k, v in snapshot.frame_parameters.items() if known.get(k) != v}
    frame = base.with_parameters(**overrides) if overrides else base

    agent = EpistemicAgent(
        agent_id=snapshot.agent_id,
        frame=frame,
        scaffold=scaffold,
        event_bus=event_bus,
        thresholds=snapshot.thresholds.model_copy(),
        name=snapshot.name,
    )
    await restore_beliefs(agent, snapshot)
    return agent

# src/epistemic_engine/persistence/snapshot.py

import json
from typing import TYPE_CHECKING, Any, Iterable

from epistemic_core.epistemic.belief import Belief
from epistemic_core.epistemic.justification import JustificationElement
from epistemic_engine.persistence.models import AgentSnapshot, BeliefSnapshot, ElementSnapshot, EngineSnapshot

if TYPE_CHECKING:
    from epistemic_engine.agents.agent import EpistemicAgent


def _jsonable(content: Any) -> Any:
    return json.loads(json.dumps(content, default=str))


def snapshot_element(element: JustificationElement) -> ElementSnapshot:
    nested = element.external_justification.elements if element.external_justification is not None else ()
    return ElementSnapshot(
        id=element.id,
        type=element.type,
        source=element.source,
        content=_jsonable(element.content),
        timestamp=element.timestamp,
        premises=list(element.premises),
        inference_rule=element.inference_rule,
        supports=element.supports,
        source_frame=getattr(element.source_frame, "kind", None),
        external_elements=[snapshot_element(e) for e in nested],
    )


def snapshot_belief(belief: Belief) -> BeliefSnapshot:
    return BeliefSnapshot(
        proposition=belief.proposition,
        confidence=belief.confidence,
        timestamp=belief.timestamp,
        justification_last_modified=belief.justification.last_modified,
        elements=[snapshot_element(e) for e in belief.justification],
    )


def snapshot_agent(agent: "EpistemicAgent", only_memorable: bool = True) -> AgentSnapshot:
    """
    Captures an agent's frame, thresholds and beliefs. By default only
    beliefs at or above the memory threshold are retained.
    """
    beliefs = agent.memorable_beliefs() if only_memorable else agent.get_beliefs()
    return AgentSnapshot(
        agent_id=agent.id,
        name=agent.name,
        frame=agent.frame.kind,
        frame_parameters=dict(agent.frame.parameters),
        thresholds=agent.thresholds.model_copy(),
        beliefs=[snapshot_belief(b) for b in sorted(beliefs, key=lambda b: b.proposition)],
    )


def snapshot_agents(
    simulation_id: str, agents: Iterable["EpistemicAgent"], round_number: int = 0, only_memorable: bool = True
) -> EngineSnapshot:
    return EngineSnapshot(
        simulation_id=simulation_id,
        round=round_number,
        agents=[snapshot_agent(agent, only_memorable=only_memorable) for agent in agents],
    )

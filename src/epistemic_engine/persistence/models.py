# src/epistemic_engine/persistence/models.py

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from epistemic_engine.config.schemas import ThresholdsConfig


class ElementSnapshot(BaseModel):
    """
    A serialized justification element. Evaluator callables are not
    persisted; a restored element is scored by the frame and scorer.
    """

    id: str
    type: str
    source: str
    content: Any = None
    timestamp: float
    premises: List[str] = Field(default_factory=list)
    inference_rule: Optional[str] = None
    supports: Optional[str] = None
    source_frame: Optional[str] = Field(None, description="Kind of the frame an external element came from.")
    external_elements: List["ElementSnapshot"] = Field(default_factory=list)


class BeliefSnapshot(BaseModel):
    proposition: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    timestamp: float
    justification_last_modified: float
    elements: List[ElementSnapshot] = Field(default_factory=list)


class AgentSnapshot(BaseModel):
    """A snapshot of one agent's frame, thresholds and retained beliefs."""

    agent_id: str = Field(..., description="The unique identifier for the agent.")
    name: str
    frame: str = Field(..., description="Kind of the agent's active frame.")
    frame_parameters: Dict[str, float] = Field(default_factory=dict)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    beliefs: List[BeliefSnapshot] = Field(default_factory=list)


class EngineSnapshot(BaseModel):
    """The top-level record written by a StateStore."""

    simulation_id: str
    round: int = Field(0, ge=0, description="The round at which the snapshot was taken.")
    agents: List[AgentSnapshot] = Field(default_factory=list)


ElementSnapshot.model_rebuild()

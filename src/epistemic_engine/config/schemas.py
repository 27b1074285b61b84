# src/epistemic_engine/config/schemas.py

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from epistemic_core.frames.frame import FrameDefinition


class ThresholdsConfig(BaseModel):
    """Per-operation minimum confidences. Every gate is inclusive."""

    action: float = Field(0.7, ge=0.0, le=1.0)
    conflict: float = Field(0.6, ge=0.0, le=1.0)
    communication: float = Field(0.5, ge=0.0, le=1.0)
    memory: float = Field(0.3, ge=0.0, le=1.0)


# The name used throughout the engine.
ConfidenceThresholds = ThresholdsConfig


class ContextConfig(BaseModel):
    max_elements: int = Field(100, gt=0)
    max_age: float = Field(0.0, ge=0.0, description="Seconds; 0 disables age-based pruning.")


class ResolutionConfig(BaseModel):
    significance_threshold: float = Field(0.1, ge=0.0, le=1.0)
    max_negotiation_rounds: int = Field(3, gt=0)


class LLMConfig(BaseModel):
    provider: str = "openai"
    completion_model: str = "gpt-4.1-nano"
    temperature: float = Field(0.0, ge=0.0, le=1.0)
    max_tokens: int = Field(300, gt=0)
    timeout: float = Field(30.0, gt=0.0)


class ScorerConfig(BaseModel):
    kind: Literal["mock", "openai", "none"] = "mock"
    strengths: Dict[str, float] = Field(default_factory=dict, description="Overrides for the mock scorer.")
    verbose: bool = False


class AgentConfig(BaseModel):
    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    frame: str
    frame_overrides: Dict[str, Any] = Field(default_factory=dict)
    thresholds: Optional[ThresholdsConfig] = None


class SimulationConfig(BaseModel):
    rounds: int = Field(1, gt=0)
    runner: Literal["serial", "async"] = "async"
    enable_debug_logging: bool = False
    observer_history: int = Field(1000, gt=0)
    snapshot_directory: Optional[str] = None


class AppConfig(BaseModel):
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    scorer: ScorerConfig = Field(default_factory=ScorerConfig)
    frames: List[FrameDefinition] = Field(default_factory=list, description="Extra or replacement frame variants.")
    agents: List[AgentConfig] = Field(default_factory=list)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)

    @model_validator(mode="after")
    def _unique_agent_ids(self) -> "AppConfig":
        ids = [agent.id for agent in self.agents]
        duplicates = sorted({agent_id for agent_id in ids if ids.count(agent_id) > 1})
        if duplicates:
            raise ValueError(f"Duplicate agent ids in configuration: {duplicates}")
        return self


__all__ = [
    "AgentConfig",
    "AppConfig",
    "ConfidenceThresholds",
    "ContextConfig",
    "LLMConfig",
    "ResolutionConfig",
    "ScorerConfig",
    "SimulationConfig",
    "ThresholdsConfig",
]

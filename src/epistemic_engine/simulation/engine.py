# src/epistemic_engine/simulation/engine.py
"""
Runs a population of epistemic agents in rounds: deliver queued
perceptions, then detect and resolve conflicts between every pair.
"""

import itertools
import uuid
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from epistemic_core.cognition.ai_models.openai_client import OpenAIEvidenceScorer
from epistemic_core.cognition.scaffolding import EvidenceScaffold, MockEvidenceScorer
from epistemic_core.core.event_bus import EventBus
from epistemic_core.core.perception import Perception
from epistemic_core.epistemic.conflict import ConflictResolutionOutcome, EpistemicConflict
from epistemic_core.frames.frame_interface import FrameInterface
from epistemic_core.frames.frame_registry import frame_registry
from epistemic_engine.agents.agent import EpistemicAgent
from epistemic_engine.config.loader import apply_frame_definitions
from epistemic_engine.config.schemas import AgentConfig, AppConfig
from epistemic_engine.conflict.negotiation import ArbitrationResult, NegotiationResult, escalate_to_arbiter, negotiate
from epistemic_engine.conflict.resolution import JustificationExchangeStrategy
from epistemic_engine.observer.exporter_interface import ExporterInterface
from epistemic_engine.observer.observer import EpistemicObserver
from epistemic_engine.persistence.models import EngineSnapshot
from epistemic_engine.persistence.restore import restore_agent
from epistemic_engine.persistence.snapshot import snapshot_agents
from epistemic_engine.persistence.store import FileStateStore, RoundSnapshotStore
from epistemic_engine.simulation.runners import TurnRunner, build_runner
from epistemic_engine.utils.config_utils import get_config_value


def build_scaffold(config: AppConfig, event_bus: Optional[EventBus] = None) -> Optional[EvidenceScaffold]:
    """Builds the scaffold named by ``config.scorer.kind``, or None for "none"."""
    kind = get_config_value(config, "scorer.kind", "mock")
    if kind == "none":
        return None
    if kind == "openai":
        return EvidenceScaffold(OpenAIEvidenceScorer(llm_config=config.llm), event_bus=event_bus)
    return EvidenceScaffold(
        MockEvidenceScorer(strengths=config.scorer.strengths, verbose=config.scorer.verbose), event_bus=event_bus
    )


class AgentTurn:
    """Adapts an agent to the TurnProtocol: each round it perceives its queued perceptions."""

    def __init__(self, agent: EpistemicAgent, inbox: List[Perception]) -> None:
        self.agent = agent
        self.inbox = inbox

    def __repr__(self) -> str:
        return f"AgentTurn(agent='{self.agent.id}')"

    async def update(self, current_tick: int) -> None:
        perceptions, self.inbox[:] = list(self.inbox), []
        if perceptions:
            await self.agent.perceive_all(perceptions)


class EpistemicSimulation:
    """
    Owns the agents, the event bus and the observer for one run.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        event_bus: Optional[EventBus] = None,
        scaffold: Optional[EvidenceScaffold] = None,
        runner: Optional[TurnRunner] = None,
        exporters: Optional[List[ExporterInterface]] = None,
        simulation_id: Optional[str] = None,
    ) -> None:
        self.config = config or AppConfig()
        self.simulation_id = simulation_id or f"sim_{uuid.uuid4().hex[:8]}"
        self.event_bus = event_bus or EventBus(self.config)
        self.observer = EpistemicObserver(
            self.event_bus,
            exporters=exporters,
            max_history=get_config_value(self.config, "simulation.observer_history", 1000),
        )
        self.scaffold = scaffold if scaffold is not None else build_scaffold(self.config, self.event_bus)
        self.runner = runner or build_runner(self.config.simulation.runner)
        self.agents: Dict[str, EpistemicAgent] = {}
        self._inboxes: Dict[str, List[Perception]] = defaultdict(list)
        self.current_round = 0

        apply_frame_definitions(self.config)

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs: Any) -> "EpistemicSimulation":
        """Creates a simulation and every agent listed in ``config.agents``."""
        simulation = cls(config=config, **kwargs)
        for agent_config in config.agents:
            simulation.add_agent(simulation.build_agent(agent_config))
        return simulation

    def build_agent(self, agent_config: AgentConfig) -> EpistemicAgent:
        frame: FrameInterface = frame_registry.create(agent_config.frame, **agent_config.frame_overrides)
        return self.create_agent(
            agent_config.id, frame, name=agent_config.name, thresholds=agent_config.thresholds
        )

    def create_agent(self, agent_id: str, frame: Union[str, FrameInterface], **kwargs: Any) -> EpistemicAgent:
        """Builds an agent wired to this simulation's bus, scaffold and config."""
        if isinstance(frame, str):
            frame = frame_registry.create(frame)
        kwargs.setdefault("thresholds", None)
        if kwargs["thresholds"] is None:
            kwargs["thresholds"] = self.config.thresholds.model_copy()
        return EpistemicAgent(
            agent_id=agent_id,
            frame=frame,
            scaffold=self.scaffold,
            event_bus=self.event_bus,
            context_max_elements=self.config.context.max_elements,
            context_max_age=self.config.context.max_age,
            resolution_strategy=JustificationExchangeStrategy(
                significance_threshold=self.config.resolution.significance_threshold, event_bus=self.event_bus
            ),
            **kwargs,
        )

    def add_agent(self, agent: EpistemicAgent) -> EpistemicAgent:
        if agent.id in self.agents:
            raise ValueError(f"Agent with ID '{agent.id}' is already part of the simulation.")
        self.agents[agent.id] = agent
        return agent

    def get_agent(self, agent_id: str) -> EpistemicAgent:
        agent = self.agents.get(agent_id)
        if agent is None:
            raise ValueError(f"No agent with ID '{agent_id}' in the simulation.")
        return agent

    # --- Perceptions ---

    def queue_perception(self, agent_id: str, perception: Perception) -> None:
        self.get_agent(agent_id)
        self._inboxes[agent_id].append(perception)

    def broadcast(self, perception: Perception) -> None:
        for agent_id in self.agents:
            self._inboxes[agent_id].append(perception)

    # --- Rounds ---

    async def run_round(self) -> int:
        """Delivers every queued perception. Returns the round number."""
        self.current_round += 1
        turns = [AgentTurn(agent, self._inboxes[agent_id]) for agent_id, agent in self.agents.items()]
        await self.runner.run(turns, current_tick=self.current_round)
        await self.event_bus.flush()
        return self.current_round

    def detect_all_conflicts(self) -> List[EpistemicConflict]:
        conflicts: List[EpistemicConflict] = []
        for agent_a, agent_b in itertools.combinations(self.agents.values(), 2):
            conflicts.extend(agent_a.detect_all_conflicts(agent_b))
        return conflicts

    async def reconcile(self) -> List[ConflictResolutionOutcome]:
        """Runs one exchange for every conflict between every pair of agents."""
        outcomes: List[ConflictResolutionOutcome] = []
        for agent_a, agent_b in itertools.combinations(self.agents.values(), 2):
            for conflict in agent_a.detect_all_conflicts(agent_b):
                outcomes.append(await agent_a.exchange_justifications(conflict, agent_b))
        await self.event_bus.flush()
        return outcomes

    async def negotiate(self, agent_a_id: str, agent_b_id: str, max_rounds: Optional[int] = None) -> NegotiationResult:
        rounds = max_rounds if max_rounds is not None else self.config.resolution.max_negotiation_rounds
        result = await negotiate(self.get_agent(agent_a_id), self.get_agent(agent_b_id), max_rounds=rounds)
        await self.event_bus.flush()
        return result

    async def escalate(self, conflict: EpistemicConflict, arbiter_frame: Optional[FrameInterface] = None) -> ArbitrationResult:
        return await escalate_to_arbiter(
            conflict,
            self.get_agent(conflict.agent_a),
            self.get_agent(conflict.agent_b),
            arbiter_frame=arbiter_frame,
            scaffold=self.scaffold,
            event_bus=self.event_bus,
        )

    async def run(self, rounds: Optional[int] = None, perceptions: Optional[Sequence[Perception]] = None) -> None:
        """
        Runs ``rounds`` rounds (default from config). Optional perceptions
        are broadcast to every agent before the first round.
        """
        for perception in perceptions or ():
            self.broadcast(perception)

        total = rounds if rounds is not None else self.config.simulation.rounds
        for _ in range(total):
            round_number = await self.run_round()
            outcomes = await self.reconcile()
            await self.observer.export_round(
                round_number,
                {
                    "agents": len(self.agents),
                    "conflicts_resolved": sum(1 for o in outcomes if o.success),
                    "conflicts_persistent": sum(1 for o in outcomes if not o.success),
                },
            )
            snapshot_dir = self.config.simulation.snapshot_directory
            if snapshot_dir:
                RoundSnapshotStore(snapshot_dir).save(self.snapshot())

    # --- Persistence ---

    def snapshot(self) -> EngineSnapshot:
        return snapshot_agents(self.simulation_id, self.agents.values(), round_number=self.current_round)

    def save_state(self, file_path: Union[str, Path]) -> None:
        FileStateStore(file_path).save(self.snapshot())

    async def load_state(self, file_path: Union[str, Path]) -> None:
        """Replaces the simulation's agents with those in a snapshot file."""
        await self.restore(FileStateStore(file_path).load())

    async def restore(self, snapshot: EngineSnapshot) -> None:
        self.simulation_id = snapshot.simulation_id
        self.current_round = snapshot.round
        self.agents = {}
        self._inboxes.clear()
        for agent_snapshot in snapshot.agents:
            agent = await restore_agent(agent_snapshot, scaffold=self.scaffold, event_bus=self.event_bus)
            agent.resolution_strategy = JustificationExchangeStrategy(
                significance_threshold=self.config.resolution.significance_threshold, event_bus=self.event_bus
            )
            self.add_agent(agent)

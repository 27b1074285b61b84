# src/epistemic_engine/agents/agent.py

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from epistemic_core.cognition.scaffolding import EvidenceScaffold
from epistemic_core.core.context import WorkingContext
from epistemic_core.core.event_bus import EventBus
from epistemic_core.core.events import EventType, make_event
from epistemic_core.core.perception import Perception
from epistemic_core.epistemic.belief import Belief
from epistemic_core.epistemic.conflict import ConflictResolutionOutcome, EpistemicConflict
from epistemic_core.epistemic.justification import Justification, JustificationElement, external_element
from epistemic_core.frames.frame_interface import FrameInterface
from epistemic_engine.agents.belief_store import BeliefStore
from epistemic_engine.agents.planning import Goal, Plan, PlannerInterface
from epistemic_engine.config.schemas import ConfidenceThresholds
from epistemic_engine.conflict.detector import detect_conflicts, detect_conflicts_bidirectional
from epistemic_engine.conflict.resolution import ConflictResolutionStrategy, JustificationExchangeStrategy


class EpistemicAgent:
    """
    An agent that forms and revises beliefs through its active frame.

    The agent exclusively owns its BeliefStore. Other components read
    snapshots through the public getters and hand evidence over through
    ``process_external_justification`` or a conflict exchange; nothing else
    writes into the store.

    Every write for a proposition happens under that proposition's lock and
    is all-or-nothing: the new Belief is fully computed before the single
    store write. A result computed under a frame that has since been
    replaced is discarded rather than committed.
    """

    def __init__(
        self,
        agent_id: str,
        frame: FrameInterface,
        scaffold: Optional[EvidenceScaffold] = None,
        event_bus: Optional[EventBus] = None,
        thresholds: Optional[ConfidenceThresholds] = None,
        context_max_elements: int = 100,
        context_max_age: float = 0.0,
        name: Optional[str] = None,
        initial_beliefs: Iterable[Belief] = (),
        planner: Optional[PlannerInterface] = None,
        resolution_strategy: Optional[ConflictResolutionStrategy] = None,
    ) -> None:
        self.id = agent_id
        self.name = name or agent_id
        self.scaffold = scaffold
        self.event_bus = event_bus
        self.thresholds = thresholds or ConfidenceThresholds()
        self.context = WorkingContext(max_elements=context_max_elements, max_age=context_max_age)
        self.planner = planner
        self.resolution_strategy = resolution_strategy or JustificationExchangeStrategy(event_bus=event_bus)

        self._frame = frame
        self._frame_epoch = 0
        self._store = BeliefStore()
        for belief in initial_beliefs:
            self._store.put(belief)
        # proposition -> (candidate id, id of the belief it was derived from, frame epoch).
        # At most one open candidate per proposition; a newer evaluation replaces it.
        self._pending_candidates: Dict[str, Tuple[str, str, int]] = {}

    def __repr__(self) -> str:
        return f"EpistemicAgent(id='{self.id}', frame='{self._frame.kind}', beliefs={len(self._store)})"

    # --- Events ---

    def _publish(self, event_type: EventType, **payload: Any) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event_type, make_event(event_type, self.id, **payload))

    # --- Read access ---

    @property
    def frame(self) -> FrameInterface:
        return self._frame

    def get_belief(self, proposition: str) -> Optional[Belief]:
        return self._store.get(proposition)

    def get_beliefs(self, confidence_threshold: float = 0.0) -> List[Belief]:
        """Returns every belief at or above the threshold."""
        return self._store.above(confidence_threshold)

    def belief_snapshot(self) -> Dict[str, Belief]:
        return self._store.snapshot()

    def communicable_beliefs(self) -> List[Belief]:
        return self.get_beliefs(self.thresholds.communication)

    def memorable_beliefs(self) -> List[Belief]:
        return self.get_beliefs(self.thresholds.memory)

    # --- Commit ---

    def _commit(self, belief: Belief, previous: Optional[Belief], epoch: int, cause: str) -> Optional[Belief]:
        """Writes a fully computed belief. Caller holds the proposition's lock."""
        if epoch != self._frame_epoch:
            self._publish(
                EventType.UPDATE_DISCARDED,
                proposition=belief.proposition,
                reason="frame changed while the update was in flight",
                cause=cause,
            )
            return None

        self._store.put(belief)
        if previous is None:
            self._publish(
                EventType.BELIEF_FORMATION,
                proposition=belief.proposition,
                confidence=belief.confidence,
                justification_size=len(belief.justification),
                frame=self._frame.kind,
                cause=cause,
            )
        else:
            self._publish(
                EventType.BELIEF_UPDATE,
                proposition=belief.proposition,
                old_confidence=previous.confidence,
                new_confidence=belief.confidence,
                confidence_delta=belief.confidence - previous.confidence,
                frame=self._frame.kind,
                cause=cause,
            )
        return belief

    async def adopt_belief(self, belief: Belief) -> Optional[Belief]:
        """Stores a ready-made belief, e.g. one restored from a snapshot."""
        async with self._store.lock_for(belief.proposition):
            return self._commit(belief, self._store.get(belief.proposition), self._frame_epoch, "restore")

    # --- Perception ---

    async def perceive(self, perception: Perception) -> List[Belief]:
        """
        Processes one perception and returns the beliefs it wrote.

        Propositions are updated concurrently; updates to the same
        proposition from concurrent perceptions are serialised.
        """
        self._publish(
            EventType.PERCEPTION,
            perception_id=perception.id,
            perception_type=perception.kind,
            source=perception.source,
        )
        self.context.add_elements(perception.contextual_elements())

        frame = self._frame
        interpreted = await frame.interpret_perception(perception, self.scaffold)
        propositions = await frame.get_relevant_propositions(interpreted, self.scaffold)

        results = await asyncio.gather(
            *(self._apply_evidence(p, interpreted.justification_elements(p)) for p in propositions)
        )
        return [belief for belief in results if belief is not None]

    async def perceive_all(self, perceptions: Sequence[Perception]) -> List[Belief]:
        batches = await asyncio.gather(*(self.perceive(p) for p in perceptions))
        return [belief for batch in batches for belief in batch]

    async def _apply_evidence(self, proposition: str, elements: List[JustificationElement]) -> Optional[Belief]:
        async with self._store.lock_for(proposition):
            frame, epoch = self._frame, self._frame_epoch
            existing = self._store.get(proposition)

            if existing is not None:
                if not elements:
                    return None
                confidence = await frame.update_confidence(
                    proposition, existing.confidence, existing.justification, elements, self.scaffold
                )
                return self._commit(existing.with_updates(confidence, elements), existing, epoch, "perception")

            if not elements:
                return None
            confidence = await frame.compute_initial_confidence(proposition, elements, self.scaffold)
            belief = Belief(proposition=proposition, confidence=confidence, justification=Justification(tuple(elements)))
            return self._commit(belief, None, epoch, "perception")

    # --- Frames ---

    async def set_frame(self, frame: FrameInterface) -> List[Belief]:
        """
        Switches the active frame and recomputes every stored belief under it.

        Updates still in flight under the previous frame are discarded when
        they try to commit.
        """
        previous = self._frame
        self._frame = frame
        self._frame_epoch += 1
        self._publish(EventType.FRAME_CHANGE, old_frame=previous.kind, new_frame=frame.kind, new_frame_id=frame.id)

        results = await asyncio.gather(*(self._recompute(p) for p in self._store))
        return [belief for belief in results if belief is not None]

    async def _recompute(self, proposition: str) -> Optional[Belief]:
        async with self._store.lock_for(proposition):
            frame, epoch = self._frame, self._frame_epoch
            existing = self._store.get(proposition)
            if existing is None:
                return None
            confidence = await frame.recompute_confidence(
                proposition, existing.justification, existing.confidence, self.scaffold
            )
            belief = Belief(proposition=proposition, confidence=confidence, justification=existing.justification)
            return self._commit(belief, existing, epoch, "frame_change")

    # --- Evidence from other agents ---

    async def process_external_justification(
        self,
        proposition: str,
        justification: Justification,
        source_frame: FrameInterface,
        source_agent_id: str = "external",
    ) -> Optional[Belief]:
        """
        Takes in another agent's justification for a proposition.

        A new belief is scored with evaluate_external_justification; an
        existing one is updated with the justification as a single external
        element. An empty justification for an unknown proposition yields None.
        """
        element = external_element(source_agent_id, justification, source_frame, supports=proposition)
        async with self._store.lock_for(proposition):
            frame, epoch = self._frame, self._frame_epoch
            existing = self._store.get(proposition)
            if existing is None:
                if justification.is_empty:
                    return None
                confidence = await frame.evaluate_external_justification(
                    proposition, justification, source_frame, self.scaffold
                )
                belief = Belief(proposition=proposition, confidence=confidence, justification=Justification((element,)))
                return self._commit(belief, None, epoch, "external_justification")

            confidence = await frame.update_confidence(
                proposition, existing.confidence, existing.justification, [element], self.scaffold
            )
            return self._commit(existing.with_updates(confidence, [element]), existing, epoch, "external_justification")

    async def share_beliefs_with(self, other: "EpistemicAgent") -> List[Belief]:
        """Offers every communicable belief to another agent. Returns what the other agent wrote."""
        results = await asyncio.gather(
            *(
                other.process_external_justification(b.proposition, b.justification, self._frame, self.id)
                for b in self.communicable_beliefs()
            )
        )
        return [belief for belief in results if belief is not None]

    async def evaluate_counter_justification(
        self,
        belief: Belief,
        counter_justification: Justification,
        counter_proposition: str,
        source_agent_id: str,
        source_frame: FrameInterface,
    ) -> Belief:
        """
        Computes, without committing, what this agent's belief would become
        after reading the other side's justification through its own frame.
        """
        epoch = self._frame_epoch
        element = external_element(source_agent_id, counter_justification, source_frame, supports=counter_proposition)
        confidence = await self._frame.update_confidence(
            belief.proposition, belief.confidence, belief.justification, [element], self.scaffold
        )
        candidate = belief.with_updates(confidence, [element])
        self._pending_candidates[candidate.proposition] = (candidate.id, belief.id, epoch)
        return candidate

    async def accept_exchange_update(self, candidate: Optional[Belief]) -> Optional[Belief]:
        """
        Commits a candidate produced by evaluate_counter_justification, unless
        the stored belief it was derived from has been replaced meanwhile.
        """
        if candidate is None:
            return None
        origin = self._pending_candidates.get(candidate.proposition)
        if origin is None or origin[0] != candidate.id:
            print(f"WARNING: Agent {self.id} was offered an unknown exchange candidate for '{candidate.proposition}'.")
            return None
        del self._pending_candidates[candidate.proposition]
        _, base_id, epoch = origin
        async with self._store.lock_for(candidate.proposition):
            current = self._store.get(candidate.proposition)
            if current is None or current.id != base_id:
                self._publish(
                    EventType.UPDATE_DISCARDED,
                    proposition=candidate.proposition,
                    reason="belief changed during justification exchange",
                    cause="justification_exchange",
                )
                return None
            return self._commit(candidate, current, epoch, "justification_exchange")

    def discard_exchange_candidates(self, *candidates: Optional[Belief]) -> None:
        """Forgets the given open candidates, or all of them when none are named."""
        if not candidates:
            self._pending_candidates.clear()
            return
        for candidate in candidates:
            if candidate is None:
                continue
            origin = self._pending_candidates.get(candidate.proposition)
            if origin is not None and origin[0] == candidate.id:
                del self._pending_candidates[candidate.proposition]

    @property
    def open_exchange_candidates(self) -> int:
        return len(self._pending_candidates)

    # --- Conflicts ---

    def detect_conflicts(self, other: "EpistemicAgent") -> List[EpistemicConflict]:
        """Conflicts seen from this agent's side. Use detect_all_conflicts for both directions."""
        return detect_conflicts(
            self.id,
            self.belief_snapshot(),
            self.thresholds.conflict,
            other.id,
            other.belief_snapshot(),
            other.thresholds.conflict,
            event_bus=self.event_bus,
        )

    def detect_all_conflicts(self, other: "EpistemicAgent") -> List[EpistemicConflict]:
        return detect_conflicts_bidirectional(
            self.id,
            self.belief_snapshot(),
            self.thresholds.conflict,
            other.id,
            other.belief_snapshot(),
            other.thresholds.conflict,
            event_bus=self.event_bus,
        )

    async def exchange_justifications(
        self, conflict: EpistemicConflict, other: "EpistemicAgent"
    ) -> ConflictResolutionOutcome:
        """
        Runs one justification exchange round for a conflict between this
        agent and ``other``. Each agent then commits its own updated belief.

        Raises:
            ValueError: If the conflict is not between these two agents.
        """
        if (conflict.agent_a, conflict.agent_b) == (self.id, other.id):
            agent_a, agent_b = self, other
        elif (conflict.agent_a, conflict.agent_b) == (other.id, self.id):
            agent_a, agent_b = other, self
        else:
            raise ValueError(f"Conflict {conflict.id} is not between {self.id} and {other.id}.")

        try:
            outcome = await self.resolution_strategy.resolve(conflict, agent_a, agent_b)
            await agent_a.accept_exchange_update(outcome.updated_belief_a)
            await agent_b.accept_exchange_update(outcome.updated_belief_b)
        finally:
            agent_a.discard_exchange_candidates()
            agent_b.discard_exchange_candidates()
        return outcome

    # --- Planning ---

    async def _relevant_propositions(self, goal: Goal) -> List[str]:
        return await self._frame.get_relevant_propositions(goal, self.scaffold)

    def _gate(self, goal: Goal, proposition: str) -> Optional[Belief]:
        belief = self._store.get(proposition)
        if belief is None or not belief.meets(self.thresholds.action):
            self._publish(
                EventType.INSUFFICIENT_CONFIDENCE,
                goal_id=goal.id,
                proposition=proposition,
                confidence=belief.confidence if belief is not None else None,
                threshold=self.thresholds.action,
            )
            return None
        return belief

    async def plan(self, goal: Goal) -> Optional[Plan]:
        """
        Builds a plan only if every belief the goal depends on exists and is
        at or above the action threshold. Otherwise returns None.
        """
        supporting: List[Belief] = []
        for proposition in await self._relevant_propositions(goal):
            belief = self._gate(goal, proposition)
            if belief is None:
                return None
            supporting.append(belief)

        if self.planner is not None:
            plan = await self.planner.build_plan(goal, supporting, self._frame)
        else:
            plan = Plan(goal=goal, supporting_beliefs=supporting)

        if plan is not None:
            self._publish(
                EventType.PLAN_CREATION,
                goal_id=goal.id,
                plan_id=plan.id,
                steps=len(plan.steps),
                supporting_propositions=plan.supporting_propositions,
            )
        return plan

    def validate_plan(self, plan: Plan) -> bool:
        """Re-checks a plan's supporting beliefs against the current store before execution."""
        for belief in plan.supporting_beliefs:
            if self._gate(plan.goal, belief.proposition) is None:
                return False
        return True

# src/epistemic_engine/agents/planning.py

import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from epistemic_core.epistemic.belief import Belief

if TYPE_CHECKING:
    from epistemic_core.frames.frame_interface import FrameInterface


@dataclass(frozen=True)
class Goal:
    """
    Something an agent wants to achieve.

    ``propositions`` lists the beliefs the goal depends on. When it is
    empty, the active frame extracts them from ``description``.
    """

    description: str
    type: str = "generic"
    propositions: Tuple[str, ...] = ()
    priority: float = 0.5
    deadline: float = 0.0
    parameters: Dict[str, Any] = field(default_factory=dict, compare=False)
    id: str = field(default_factory=lambda: f"goal_{uuid.uuid4().hex[:12]}")
    created_at: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        if not isinstance(self.propositions, tuple):
            object.__setattr__(self, "propositions", tuple(self.propositions))

    def has_deadline(self) -> bool:
        return self.deadline > 0

    def is_overdue(self, now: Optional[float] = None) -> bool:
        if not self.has_deadline():
            return False
        return (now if now is not None else time.time()) > self.deadline

    @property
    def target_agents(self) -> List[str]:
        return list(self.parameters.get("target_agents", []))


class PlanStatus(str, Enum):
    CREATED = "created"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass
class Plan:
    """A goal, its steps, and the beliefs that justified making it."""

    goal: Goal
    steps: List[Any] = field(default_factory=list)
    supporting_beliefs: List[Belief] = field(default_factory=list)
    status: PlanStatus = PlanStatus.CREATED
    id: str = field(default_factory=lambda: f"plan_{uuid.uuid4().hex[:12]}")
    created_at: float = field(default_factory=time.time)

    @property
    def supporting_propositions(self) -> List[str]:
        return [belief.proposition for belief in self.supporting_beliefs]


class PlannerInterface(ABC):
    """
    Abstract Base Class for plan builders.

    The agent only calls a planner after every belief the goal depends on
    has passed its action threshold.
    """

    @abstractmethod
    async def build_plan(self, goal: Goal, beliefs: List[Belief], frame: "FrameInterface") -> Optional[Plan]:
        """
        Args:
            goal: The goal to plan for.
            beliefs: The supporting beliefs, all at or above the action threshold.
            frame: The agent's active frame.

        Returns:
            A plan, or None if no plan could be built.
        """
        raise NotImplementedError

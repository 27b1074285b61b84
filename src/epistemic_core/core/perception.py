# src/epistemic_core/core/perception.py
"""
Perceptions are the stimuli an agent receives from tools, other agents or
direct observation. Each variant knows which context elements it
contributes and which justification elements it offers for a proposition.
"""

import json
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple

from epistemic_core.core.context import ContextElement
from epistemic_core.epistemic.justification import (
    ElementType,
    Evaluator,
    JustificationElement,
    observation_element,
    testimony_element,
    tool_result_element,
)


def _stringify(data: Any) -> str:
    if isinstance(data, str):
        return data
    try:
        return json.dumps(data, default=str, sort_keys=True, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(data)


@dataclass(frozen=True)
class Perception:
    """
    Base perception.

    ``propositions`` lets the producer declare which propositions the
    stimulus bears on; frames prefer these over scorer extraction.
    ``evidence_type`` re-tags the justification elements this perception
    offers (e.g. "performance"), so frames with matching emphasis weight
    them higher.
    """

    data: Any
    source: Optional[str] = None
    propositions: Tuple[str, ...] = ()
    evidence_type: Optional[str] = None
    evaluator: Optional[Evaluator] = field(default=None, compare=False, repr=False)
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: f"perception_{uuid.uuid4().hex[:12]}")

    kind = "perception"

    def __post_init__(self) -> None:
        if not isinstance(self.propositions, tuple):
            object.__setattr__(self, "propositions", tuple(self.propositions))

    def with_data(self, data: Any) -> "Perception":
        """Returns a copy carrying transformed data. The original is untouched."""
        return replace(self, data=data)

    def with_propositions(self, propositions: List[str]) -> "Perception":
        return replace(self, propositions=tuple(propositions))

    def is_relevant_to(self, proposition: str) -> bool:
        """
        A perception is relevant to a proposition it declares explicitly, or
        whose text appears in its data (case-insensitive).
        """
        if proposition in self.propositions:
            return True
        return proposition.lower() in _stringify(self.data).lower()

    def contextual_elements(self) -> List[ContextElement]:
        return [ContextElement(type=self.kind, content=self.data, source=self.source, timestamp=self.timestamp)]

    def _build_element(self) -> JustificationElement:
        raise NotImplementedError

    def justification_elements(self, proposition: str) -> List[JustificationElement]:
        if not self.is_relevant_to(proposition):
            return []
        element = self._build_element()
        if self.evidence_type:
            element = element.with_type(self.evidence_type)
        return [element]


@dataclass(frozen=True)
class ToolResultPerception(Perception):
    kind = ElementType.TOOL_RESULT.value

    def _build_element(self) -> JustificationElement:
        return tool_result_element(self.source or "unknown_tool", self.data, evaluator=self.evaluator)


@dataclass(frozen=True)
class MessagePerception(Perception):
    """A message received from another entity. Its evidence is testimony."""

    kind = "message"

    def _build_element(self) -> JustificationElement:
        return testimony_element(self.source or "unknown_sender", self.data, evaluator=self.evaluator)


@dataclass(frozen=True)
class ObservationPerception(Perception):
    observation_type: str = "general"

    kind = ElementType.OBSERVATION.value

    def contextual_elements(self) -> List[ContextElement]:
        return [
            ContextElement(
                type=f"observation:{self.observation_type}",
                content=self.data,
                source=self.source,
                timestamp=self.timestamp,
            )
        ]

    def _build_element(self) -> JustificationElement:
        return observation_element(self.source or "direct_observation", self.data, evaluator=self.evaluator)

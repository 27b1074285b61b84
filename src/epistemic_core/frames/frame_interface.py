# src/epistemic_core/frames/frame_interface.py

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from epistemic_core.cognition.scaffolding import EvidenceScaffold
    from epistemic_core.core.perception import Perception
    from epistemic_core.epistemic.justification import Justification, JustificationElement


class FrameInterface(ABC):
    """
    Abstract Base Class for an interpretive frame.

    A frame decides how evidence is read and weighted. It holds no belief
    data: everything it touches is passed in, so an agent can swap its
    active frame at any time. Every scoring operation is a coroutine because
    it may consult the external evidence scorer through the scaffold.
    """

    id: str
    name: str
    kind: str

    @property
    @abstractmethod
    def parameters(self) -> Dict[str, float]:
        """The frame's weights and tuning values as a flat name -> scalar map."""
        raise NotImplementedError

    @abstractmethod
    async def interpret_perception(
        self, perception: "Perception", scaffold: Optional["EvidenceScaffold"] = None
    ) -> "Perception":
        """Returns the perception as this frame reads it. Never mutates the input."""
        raise NotImplementedError

    @abstractmethod
    async def get_relevant_propositions(self, source: Any, scaffold: Optional["EvidenceScaffold"] = None) -> List[str]:
        """Returns the propositions a perception or goal bears on."""
        raise NotImplementedError

    @abstractmethod
    async def compute_initial_confidence(
        self,
        proposition: str,
        elements: Sequence["JustificationElement"],
        scaffold: Optional["EvidenceScaffold"] = None,
    ) -> float:
        """Aggregates evidence into a starting confidence for a new belief."""
        raise NotImplementedError

    @abstractmethod
    async def update_confidence(
        self,
        proposition: str,
        current_confidence: float,
        current_justification: "Justification",
        new_elements: Sequence["JustificationElement"],
        scaffold: Optional["EvidenceScaffold"] = None,
        source_frame: Optional["FrameInterface"] = None,
    ) -> float:
        """Blends new evidence into an existing confidence."""
        raise NotImplementedError

    @abstractmethod
    async def recompute_confidence(
        self,
        proposition: str,
        justification: "Justification",
        current_confidence: Optional[float] = None,
        scaffold: Optional["EvidenceScaffold"] = None,
    ) -> float:
        """Re-derives a confidence from a whole justification after a frame switch."""
        raise NotImplementedError

    @abstractmethod
    async def evaluate_external_justification(
        self,
        proposition: str,
        external_justification: "Justification",
        source_frame: "FrameInterface",
        scaffold: Optional["EvidenceScaffold"] = None,
    ) -> float:
        """Scores evidence that was gathered under another agent's frame."""
        raise NotImplementedError

    @abstractmethod
    def get_compatibility(self, other: "FrameInterface") -> float:
        """How far evidence from ``other`` is trusted, in [0, 1]."""
        raise NotImplementedError

    @abstractmethod
    def with_parameters(self, **overrides: Any) -> "FrameInterface":
        """Returns a new frame of the same kind with some parameters replaced."""
        raise NotImplementedError

    def __str__(self) -> str:
        return f"Frame: {self.name} ({self.id})"

# src/epistemic_core/cognition/scorer_interface.py

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List

if TYPE_CHECKING:
    from epistemic_core.epistemic.justification import JustificationElement
    from epistemic_core.frames.frame_interface import FrameInterface


class EvidenceScorerInterface(ABC):
    """
    Abstract Base Class for the external evidence-scoring oracle.

    Implementations turn evidence into numbers and perception data into
    propositions. Every method may suspend on I/O and every method may fail;
    callers go through EvidenceScaffold, which substitutes neutral defaults.
    """

    @abstractmethod
    async def judge_evidence_strength(self, element: "JustificationElement", proposition: str) -> float:
        """
        Scores how strongly an element supports a proposition.

        Args:
            element: The evidence being judged.
            proposition: The claim the evidence is judged against.

        Returns:
            A strength in [0, 1].
        """
        raise NotImplementedError

    @abstractmethod
    async def judge_evidence_saliency(self, element: "JustificationElement", frame: "FrameInterface") -> float:
        """
        Scores how much an element matters from a frame's perspective.

        Returns:
            A weight in [0, 1].
        """
        raise NotImplementedError

    @abstractmethod
    async def extract_relevant_propositions(self, data: Any, frame: "FrameInterface") -> List[str]:
        """Returns the propositions the perception data bears on."""
        raise NotImplementedError

    @abstractmethod
    async def interpret_perception(self, data: Any, frame: "FrameInterface") -> Any:
        """Returns the perception data as the frame would read it."""
        raise NotImplementedError

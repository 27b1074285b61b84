# src/epistemic_core/cognition/scaffolding.py

import math
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from epistemic_core.cognition.scorer_interface import EvidenceScorerInterface
from epistemic_core.core.events import EventType, make_event
from epistemic_core.epistemic.propositions import NEUTRAL_CONFIDENCE, clamp_confidence

if TYPE_CHECKING:
    from epistemic_core.core.event_bus import EventBus
    from epistemic_core.epistemic.justification import JustificationElement
    from epistemic_core.frames.frame_interface import FrameInterface


class EvidenceScaffold:
    """
    The single entry point frames use to reach the evidence scorer.

    The scorer is an unreliable external oracle. The scaffold never lets one
    of its failures escape: an exception or a malformed answer is replaced by
    a neutral default (0.5 for scores, an empty list for propositions, the
    unmodified input for interpretation), a warning is printed and a
    ``scorer_fallback`` event is published. Numeric answers are clamped.
    """

    def __init__(
        self,
        scorer: EvidenceScorerInterface,
        event_bus: Optional["EventBus"] = None,
        entity_id: str = "scaffold",
    ) -> None:
        """Initializes the scaffold.

        Args:
            scorer: Any implementation of EvidenceScorerInterface.
            event_bus: Optional bus that receives fallback events.
            entity_id: The id reported on fallback events.
        """
        self.scorer = scorer
        self.event_bus = event_bus
        self.entity_id = entity_id
        self.fallback_count = 0

    def fallback(self, operation: str, reason: str, default: Any) -> Any:
        self.fallback_count += 1
        print(f"WARNING: Evidence scorer '{operation}' failed ({reason}). Using neutral default {default!r}.")
        if self.event_bus is not None:
            self.event_bus.publish(
                EventType.SCORER_FALLBACK,
                make_event(EventType.SCORER_FALLBACK, self.entity_id, operation=operation, reason=reason),
            )
        return default

    def _as_score(self, operation: str, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return self.fallback(operation, f"non-numeric result {value!r}", NEUTRAL_CONFIDENCE)
        if math.isnan(value):
            return self.fallback(operation, "NaN result", NEUTRAL_CONFIDENCE)
        return clamp_confidence(value)

    async def judge_evidence_strength(self, element: "JustificationElement", proposition: str) -> float:
        try:
            value = await self.scorer.judge_evidence_strength(element, proposition)
        except Exception as e:
            return self.fallback("judge_evidence_strength", str(e), NEUTRAL_CONFIDENCE)
        return self._as_score("judge_evidence_strength", value)

    async def judge_evidence_saliency(self, element: "JustificationElement", frame: "FrameInterface") -> float:
        try:
            value = await self.scorer.judge_evidence_saliency(element, frame)
        except Exception as e:
            return self.fallback("judge_evidence_saliency", str(e), NEUTRAL_CONFIDENCE)
        return self._as_score("judge_evidence_saliency", value)

    async def extract_relevant_propositions(self, data: Any, frame: "FrameInterface") -> List[str]:
        try:
            value = await self.scorer.extract_relevant_propositions(data, frame)
        except Exception as e:
            return self.fallback("extract_relevant_propositions", str(e), [])
        if not isinstance(value, (list, tuple)) or not all(isinstance(p, str) for p in value):
            return self.fallback("extract_relevant_propositions", f"malformed result {value!r}", [])
        # Preserve order, drop blanks and duplicates.
        seen: Dict[str, None] = {}
        for proposition in value:
            proposition = proposition.strip()
            if proposition:
                seen.setdefault(proposition, None)
        return list(seen)

    async def interpret_perception(self, data: Any, frame: "FrameInterface") -> Any:
        try:
            value = await self.scorer.interpret_perception(data, frame)
        except Exception as e:
            return self.fallback("interpret_perception", str(e), data)
        if value is None:
            return self.fallback("interpret_perception", "empty result", data)
        return value


class MockEvidenceScorer(EvidenceScorerInterface):
    """
    A deterministic, offline scorer for tests and demos.

    Strength depends only on the element type; saliency is high when the
    element carries the evidence tag the frame emphasises.
    """

    DEFAULT_STRENGTHS: Dict[str, float] = {
        "tool_result": 0.85,
        "observation": 0.75,
        "testimony": 0.6,
        "inference": 0.7,
        "external": 0.5,
    }
    FALLBACK_STRENGTH = 0.65

    FRAME_EMPHASIS: Dict[str, str] = {
        "efficiency": "performance",
        "thoroughness": "detailed",
        "security": "security",
    }

    FRAME_PROPOSITIONS: Dict[str, List[str]] = {
        "efficiency": [
            "SystemPerformanceIsOptimal",
            "FastResponseTimeIsAchieved",
            "ResourceUtilizationIsEfficient",
        ],
        "thoroughness": [
            "AllCasesAreCovered",
            "TestingIsComprehensive",
            "DocumentationIsComplete",
        ],
        "security": [
            "SystemIsSecureAgainstThreats",
            "DataIsProtected",
            "AccessControlsAreEffective",
        ],
    }
    DEFAULT_PROPOSITIONS = ["DefaultProposition1", "DefaultProposition2"]

    def __init__(self, strengths: Optional[Dict[str, float]] = None, verbose: bool = False) -> None:
        self.strengths = {**self.DEFAULT_STRENGTHS, **(strengths or {})}
        self.verbose = verbose

    def _log(self, message: str) -> None:
        if self.verbose:
            print(f"[MockEvidenceScorer] {message}")

    async def judge_evidence_strength(self, element: "JustificationElement", proposition: str) -> float:
        self._log(f"Judging evidence strength for: {proposition}")
        return self.strengths.get(element.type, self.FALLBACK_STRENGTH)

    async def judge_evidence_saliency(self, element: "JustificationElement", frame: "FrameInterface") -> float:
        self._log(f"Judging evidence saliency with {frame.name} frame")
        if self.FRAME_EMPHASIS.get(frame.kind) == element.type:
            return 0.9
        return 0.6

    async def extract_relevant_propositions(self, data: Any, frame: "FrameInterface") -> List[str]:
        self._log(f"Extracting propositions with {frame.name} frame")
        return list(self.FRAME_PROPOSITIONS.get(frame.kind, self.DEFAULT_PROPOSITIONS))

    async def interpret_perception(self, data: Any, frame: "FrameInterface") -> Any:
        self._log(f"Interpreting data through {frame.name} frame")
        note = f"Interpreted through {frame.name} frame"
        if isinstance(data, dict):
            return {**data, "interpretation": note}
        return {"content": data, "interpretation": note}

# src/epistemic_core/frames/frame.py
"""
The single concrete frame implementation.

Frame variants differ only in data. A FrameDefinition carries the weights,
inversion and bias rules, the initial-confidence cap and the compatibility
table; Frame runs the shared evidence-aggregation algorithms over it.
"""

import asyncio
import uuid
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, field_validator

from epistemic_core.epistemic.justification import Justification, JustificationElement
from epistemic_core.epistemic.propositions import NEUTRAL_CONFIDENCE, clamp_confidence, contradicts
from epistemic_core.frames.frame_interface import FrameInterface

if TYPE_CHECKING:
    from epistemic_core.cognition.scaffolding import EvidenceScaffold
    from epistemic_core.core.perception import Perception

INVERT_ALL = "*"


class FrameDefinition(BaseModel):
    """Plain-data parameters of one frame variant."""

    kind: str = Field(..., min_length=1, description="Registry key and compatibility key of the variant.")
    name: str
    description: str = ""
    weights: Dict[str, float] = Field(default_factory=dict, description="Evidence type or tag -> weight.")
    default_weight: float = Field(0.5, ge=0.0, le=1.0)
    use_scorer_saliency: bool = Field(
        True, description="Ask the scorer for a weight when an evidence tag is not in the table."
    )
    inverted_types: List[str] = Field(
        default_factory=list, description="Evidence types read as arguing against the claim. '*' inverts all."
    )
    bias_factor: float = Field(1.0, gt=0.0, description="Multiplier applied once after an update blend.")
    max_initial_confidence: float = Field(1.0, ge=0.0, le=1.0)
    recompute_blend: float = Field(0.5, ge=0.0, le=1.0, description="Share of the fresh score on recompute.")
    compatibility: Dict[str, float] = Field(default_factory=dict, description="Other frame kind -> trust.")
    default_compatibility: float = Field(0.5, ge=0.0, le=1.0)

    @field_validator("weights", "compatibility")
    @classmethod
    def _check_unit_interval(cls, value: Dict[str, float]) -> Dict[str, float]:
        for key, score in value.items():
            if not 0.0 <= score <= 1.0:
                raise ValueError(f"'{key}' must be within [0, 1], got {score}")
        return value

    def inverts(self, element_type: str) -> bool:
        return INVERT_ALL in self.inverted_types or element_type in self.inverted_types


_SCALAR_FIELDS = ("default_weight", "bias_factor", "max_initial_confidence", "recompute_blend", "default_compatibility")


class Frame(FrameInterface):
    """
    A frame configured entirely by its FrameDefinition.

    Strength of an element comes from its own evaluator, else the scorer,
    else 0.5, and is inverted for types the frame argues against. Weight
    comes from the frame's table, else the scorer's saliency judgement for
    unknown tags, else the frame's default weight.
    """

    def __init__(self, definition: FrameDefinition, frame_id: Optional[str] = None) -> None:
        self.definition = definition
        self.id = frame_id or f"{definition.kind}_{uuid.uuid4().hex[:8]}"
        self.name = definition.name
        self.kind = definition.kind

    def __repr__(self) -> str:
        return f"Frame(kind='{self.kind}', id='{self.id}')"

    @property
    def description(self) -> str:
        return self.definition.description

    @property
    def parameters(self) -> Dict[str, float]:
        params = {f"{tag}_weight": weight for tag, weight in self.definition.weights.items()}
        for field_name in _SCALAR_FIELDS:
            params[field_name] = getattr(self.definition, field_name)
        return params

    def with_parameters(self, **overrides: Any) -> "Frame":
        """
        Returns a new frame of the same kind. Accepts definition field names
        and ``<tag>_weight`` keys, e.g. ``with_parameters(tool_result_weight=0.3)``.
        """
        updates: Dict[str, Any] = {}
        weights = dict(self.definition.weights)
        for key, value in overrides.items():
            if key in FrameDefinition.model_fields:
                updates[key] = value
            elif key.endswith("_weight"):
                weights[key[: -len("_weight")]] = value
            else:
                raise ValueError(f"Unknown frame parameter '{key}' for frame '{self.kind}'.")
        if "weights" not in updates:
            updates["weights"] = weights
        data = self.definition.model_dump()
        data.update(updates)
        return Frame(FrameDefinition(**data), frame_id=self.id)

    # --- Compatibility ---

    def get_compatibility(self, other: Any) -> float:
        other_kind = getattr(other, "kind", other)
        return self.definition.compatibility.get(other_kind, self.definition.default_compatibility)

    # --- Element scoring ---

    async def _raw_strength(
        self, element: JustificationElement, proposition: str, scaffold: Optional["EvidenceScaffold"]
    ) -> float:
        if element.has_evaluator:
            try:
                return await element.evaluate_confidence(proposition)
            except Exception as e:
                reason = f"evaluator of element '{element.id}' raised {type(e).__name__}: {e}"
                if scaffold is not None:
                    return scaffold.fallback("evaluate_confidence", reason, NEUTRAL_CONFIDENCE)
                print(f"WARNING: Evidence {reason}. Using neutral default {NEUTRAL_CONFIDENCE!r}.")
                return NEUTRAL_CONFIDENCE
        if scaffold is not None:
            return await scaffold.judge_evidence_strength(element, proposition)
        return NEUTRAL_CONFIDENCE

    async def _strength(
        self, element: JustificationElement, proposition: str, scaffold: Optional["EvidenceScaffold"]
    ) -> float:
        if element.is_external and element.external_justification is not None:
            # The wrapped trail is read through this frame, element by element,
            # toward the claim it was gathered for.
            target = element.supports or proposition
            average = await self._weighted_average(target, element.external_justification.elements, scaffold)
            return 1.0 - average if contradicts(target, proposition) else average
        strength = await self._raw_strength(element, proposition, scaffold)
        if self.definition.inverts(element.type):
            strength = 1.0 - strength
        return strength

    async def _weight(self, element: JustificationElement, scaffold: Optional["EvidenceScaffold"]) -> float:
        weights = self.definition.weights
        if element.type in weights:
            return weights[element.type]
        if scaffold is not None and self.definition.use_scorer_saliency:
            return await scaffold.judge_evidence_saliency(element, self)
        return self.definition.default_weight

    async def _score_element(
        self, element: JustificationElement, proposition: str, scaffold: Optional["EvidenceScaffold"]
    ) -> Tuple[float, float]:
        strength, weight = await asyncio.gather(
            self._strength(element, proposition, scaffold), self._weight(element, scaffold)
        )
        return strength, weight

    async def _score_elements(
        self, proposition: str, elements: Sequence[JustificationElement], scaffold: Optional["EvidenceScaffold"]
    ) -> List[Tuple[float, float]]:
        return list(await asyncio.gather(*(self._score_element(e, proposition, scaffold) for e in elements)))

    async def _weighted_average(
        self, proposition: str, elements: Sequence[JustificationElement], scaffold: Optional["EvidenceScaffold"]
    ) -> float:
        """sum(strength * weight) / sum(weight), or 0.5 with no usable evidence."""
        if not elements:
            return NEUTRAL_CONFIDENCE
        scored = await self._score_elements(proposition, elements, scaffold)
        total_weight = sum(weight for _, weight in scored)
        if total_weight <= 0:
            return NEUTRAL_CONFIDENCE
        return clamp_confidence(sum(strength * weight for strength, weight in scored) / total_weight)

    # --- Frame operations ---

    async def interpret_perception(
        self, perception: "Perception", scaffold: Optional["EvidenceScaffold"] = None
    ) -> "Perception":
        if scaffold is None:
            return perception
        interpreted = await scaffold.interpret_perception(perception.data, self)
        if interpreted is perception.data:
            return perception
        return perception.with_data(interpreted)

    async def get_relevant_propositions(self, source: Any, scaffold: Optional["EvidenceScaffold"] = None) -> List[str]:
        declared = getattr(source, "propositions", ())
        if declared:
            return list(dict.fromkeys(declared))
        if scaffold is None:
            return []
        data = getattr(source, "data", None)
        if data is None:
            data = getattr(source, "description", source)
        return await scaffold.extract_relevant_propositions(data, self)

    async def compute_initial_confidence(
        self,
        proposition: str,
        elements: Sequence[JustificationElement],
        scaffold: Optional["EvidenceScaffold"] = None,
    ) -> float:
        if not elements:
            return NEUTRAL_CONFIDENCE
        average = await self._weighted_average(proposition, elements, scaffold)
        return clamp_confidence(min(average, self.definition.max_initial_confidence))

    async def update_confidence(
        self,
        proposition: str,
        current_confidence: float,
        current_justification: Justification,
        new_elements: Sequence[JustificationElement],
        scaffold: Optional["EvidenceScaffold"] = None,
        source_frame: Optional[FrameInterface] = None,
    ) -> float:
        """
        Sequential blend ``c = (1 - w) * c + w * s`` over the new elements in
        order, then the frame's bias factor, then a clamp.

        The blend weight of an element that came from another frame (an
        external element, or any element when ``source_frame`` is given) is
        multiplied by this frame's compatibility with that frame.
        """
        if not new_elements:
            return current_confidence

        scored = await self._score_elements(proposition, new_elements, scaffold)

        confidence = clamp_confidence(current_confidence)
        for element, (strength, weight) in zip(new_elements, scored):
            origin = element.source_frame if element.is_external else None
            if origin is None:
                origin = source_frame
            if origin is not None:
                weight *= self.get_compatibility(origin)
            elif element.is_external:
                weight *= self.definition.default_compatibility
            confidence = (1.0 - weight) * confidence + weight * strength

        return clamp_confidence(confidence * self.definition.bias_factor)

    async def recompute_confidence(
        self,
        proposition: str,
        justification: Justification,
        current_confidence: Optional[float] = None,
        scaffold: Optional["EvidenceScaffold"] = None,
    ) -> float:
        fresh = await self._weighted_average(proposition, justification.elements, scaffold)
        if current_confidence is None:
            return fresh
        blend = self.definition.recompute_blend
        return clamp_confidence(blend * fresh + (1.0 - blend) * current_confidence)

    async def evaluate_external_justification(
        self,
        proposition: str,
        external_justification: Justification,
        source_frame: FrameInterface,
        scaffold: Optional["EvidenceScaffold"] = None,
    ) -> float:
        raw = await self._weighted_average(proposition, external_justification.elements, scaffold)
        return clamp_confidence(raw * self.get_compatibility(source_frame))

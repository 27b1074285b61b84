# src/epistemic_core/epistemic/justification.py
"""
Evidence records that back a belief.

A JustificationElement is an immutable, tagged piece of evidence. A
Justification is the ordered, append-only trail of such elements. Neither
carries behaviour beyond construction and querying; the only hook is the
optional per-element evaluator that frames consult for a strength score.
"""

import inspect
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Iterator, Optional, Tuple, Union

from epistemic_core.epistemic.propositions import clamp_confidence

if TYPE_CHECKING:
    from epistemic_core.frames.frame_interface import FrameInterface

# An evaluator maps a proposition to a strength. It may be sync or async.
Evaluator = Callable[[str], Union[float, Awaitable[float]]]


class ElementType(str, Enum):
    """The fixed vocabulary of evidence kinds."""

    TOOL_RESULT = "tool_result"
    TESTIMONY = "testimony"
    OBSERVATION = "observation"
    INFERENCE = "inference"
    EXTERNAL = "external"


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class JustificationElement:
    """
    A single piece of evidence.

    ``type`` is usually an ElementType value, but frames also recognise
    free-form evidence tags such as "performance" or "security", so any
    string is accepted.
    """

    type: str
    source: str
    content: Any
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: _new_id("je"))
    evaluator: Optional[Evaluator] = field(default=None, compare=False, repr=False)
    premises: Tuple[str, ...] = ()
    inference_rule: Optional[str] = None
    external_justification: Optional["Justification"] = field(default=None, compare=False)
    source_frame: Optional["FrameInterface"] = field(default=None, compare=False, repr=False)
    supports: Optional[str] = None

    def __post_init__(self) -> None:
        # Accept ElementType members but always store the plain string tag.
        if isinstance(self.type, ElementType):
            object.__setattr__(self, "type", self.type.value)

    @property
    def is_external(self) -> bool:
        return self.type == ElementType.EXTERNAL.value

    @property
    def has_evaluator(self) -> bool:
        return self.evaluator is not None

    async def evaluate_confidence(self, proposition: str) -> Optional[float]:
        """
        Returns this element's own strength toward the proposition, or None
        if the element has no evaluator of its own.
        """
        if self.evaluator is None:
            return None
        result = self.evaluator(proposition)
        if inspect.isawaitable(result):
            result = await result
        return clamp_confidence(result)

    def with_type(self, element_type: Union[str, ElementType]) -> "JustificationElement":
        """Returns a copy re-tagged with a different evidence type."""
        return replace(self, type=element_type)


def tool_result_element(
    tool_name: str, result: Any, evaluator: Optional[Evaluator] = None, timestamp: Optional[float] = None
) -> JustificationElement:
    return JustificationElement(
        type=ElementType.TOOL_RESULT,
        source=tool_name,
        content=result,
        timestamp=timestamp if timestamp is not None else time.time(),
        evaluator=evaluator,
    )


def testimony_element(
    speaker_id: str, statement: Any, evaluator: Optional[Evaluator] = None, timestamp: Optional[float] = None
) -> JustificationElement:
    return JustificationElement(
        type=ElementType.TESTIMONY,
        source=speaker_id,
        content=statement,
        timestamp=timestamp if timestamp is not None else time.time(),
        evaluator=evaluator,
    )


def observation_element(
    source: str, observation: Any, evaluator: Optional[Evaluator] = None, timestamp: Optional[float] = None
) -> JustificationElement:
    return JustificationElement(
        type=ElementType.OBSERVATION,
        source=source,
        content=observation,
        timestamp=timestamp if timestamp is not None else time.time(),
        evaluator=evaluator,
    )


def inference_element(
    premises: Iterable[str],
    inference_rule: str,
    conclusion: Any = None,
    evaluator: Optional[Evaluator] = None,
    timestamp: Optional[float] = None,
) -> JustificationElement:
    """Evidence derived from other propositions by a named rule."""
    premise_tuple = tuple(premises)
    return JustificationElement(
        type=ElementType.INFERENCE,
        source=inference_rule,
        content=conclusion if conclusion is not None else {"premises": list(premise_tuple), "rule": inference_rule},
        timestamp=timestamp if timestamp is not None else time.time(),
        evaluator=evaluator,
        premises=premise_tuple,
        inference_rule=inference_rule,
    )


def external_element(
    source_agent_id: str,
    justification: "Justification",
    source_frame: Optional["FrameInterface"] = None,
    supports: Optional[str] = None,
    timestamp: Optional[float] = None,
) -> JustificationElement:
    """
    Wraps another agent's whole justification as a single element.

    ``source_frame`` is the frame the other agent formed it under; the
    receiving frame uses it to discount the evidence by compatibility.
    ``supports`` names the proposition the wrapped trail was gathered for.
    When it is the negation of the proposition being scored, the trail
    counts as evidence against it.
    """
    return JustificationElement(
        type=ElementType.EXTERNAL,
        source=source_agent_id,
        content={
            "elements": len(justification),
            "source_frame": getattr(source_frame, "kind", None),
            "supports": supports,
        },
        timestamp=timestamp if timestamp is not None else time.time(),
        external_justification=justification,
        source_frame=source_frame,
        supports=supports,
    )


@dataclass(frozen=True)
class Justification:
    """An ordered, append-only evidence trail."""

    elements: Tuple[JustificationElement, ...] = ()
    last_modified: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[JustificationElement]:
        return iter(self.elements)

    def __bool__(self) -> bool:
        # An empty justification is still a justification.
        return True

    @property
    def is_empty(self) -> bool:
        return not self.elements

    def with_elements(self, *elements: JustificationElement) -> "Justification":
        """Returns a new justification with the elements appended."""
        if not elements:
            return self
        return Justification(elements=self.elements + tuple(elements), last_modified=time.time())

    def merge(self, other: "Justification") -> "Justification":
        """Concatenates two trails. Duplicates are kept."""
        return Justification(
            elements=self.elements + other.elements,
            last_modified=max(time.time(), self.last_modified, other.last_modified),
        )

    def of_type(self, element_type: Union[str, ElementType]) -> Tuple[JustificationElement, ...]:
        tag = element_type.value if isinstance(element_type, ElementType) else element_type
        return tuple(e for e in self.elements if e.type == tag)

    def from_source(self, source: str) -> Tuple[JustificationElement, ...]:
        return tuple(e for e in self.elements if e.source == source)

    def filter(self, predicate: Callable[[JustificationElement], bool]) -> Tuple[JustificationElement, ...]:
        return tuple(e for e in self.elements if predicate(e))

    @property
    def latest(self) -> Optional[JustificationElement]:
        return self.elements[-1] if self.elements else None

# src/epistemic_core/core/context.py

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Iterable, List, Optional


@dataclass(frozen=True)
class ContextElement:
    """A single item of situational context picked up from a perception."""

    type: str
    content: Any
    source: Optional[str] = None
    timestamp: float = field(default_factory=time.time)


class WorkingContext:
    """
    A bounded working memory of recent context elements.

    Once ``max_elements`` is reached the oldest element is evicted. When
    ``max_age`` is positive, elements older than that many seconds are
    dropped on every insertion.
    """

    def __init__(
        self,
        max_elements: int = 100,
        max_age: float = 0.0,
        initial_elements: Optional[Iterable[ContextElement]] = None,
    ) -> None:
        if max_elements <= 0:
            raise ValueError("max_elements must be a positive integer.")
        self.max_elements = max_elements
        self.max_age = max_age
        self._elements: Deque[ContextElement] = deque(maxlen=max_elements)
        if initial_elements:
            self.add_elements(initial_elements)

    def __len__(self) -> int:
        return len(self._elements)

    @property
    def elements(self) -> List[ContextElement]:
        return list(self._elements)

    def add_elements(self, elements: Iterable[ContextElement]) -> None:
        self._elements.extend(elements)
        self._prune_expired()

    def _prune_expired(self) -> None:
        if self.max_age <= 0:
            return
        cutoff = time.time() - self.max_age
        while self._elements and self._elements[0].timestamp < cutoff:
            self._elements.popleft()

    def clear(self) -> None:
        self._elements.clear()

    def by_type(self, element_type: str) -> List[ContextElement]:
        return [e for e in self._elements if e.type == element_type]

    def by_source(self, source: str) -> List[ContextElement]:
        return [e for e in self._elements if e.source == source]

    def most_recent(self, predicate: Optional[Callable[[ContextElement], bool]] = None) -> Optional[ContextElement]:
        for element in reversed(self._elements):
            if predicate is None or predicate(element):
                return element
        return None

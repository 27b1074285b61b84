# src/epistemic_engine/agents/belief_store.py

import asyncio
from collections import defaultdict
from typing import Dict, Iterator, List, Optional

from epistemic_core.epistemic.belief import Belief


class BeliefStore:
    """
    One agent's beliefs, keyed by proposition.

    Values are immutable Beliefs and are only ever replaced, never mutated.
    Read-modify-write on one proposition is serialised with a
    per-proposition asyncio.Lock; different propositions proceed in parallel.
    """

    def __init__(self) -> None:
        self._beliefs: Dict[str, Belief] = {}
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def __len__(self) -> int:
        return len(self._beliefs)

    def __contains__(self, proposition: str) -> bool:
        return proposition in self._beliefs

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._beliefs))

    def lock_for(self, proposition: str) -> asyncio.Lock:
        return self._locks[proposition]

    def get(self, proposition: str) -> Optional[Belief]:
        return self._beliefs.get(proposition)

    def put(self, belief: Belief) -> Optional[Belief]:
        """Replaces the belief for its proposition and returns the previous one."""
        previous = self._beliefs.get(belief.proposition)
        self._beliefs[belief.proposition] = belief
        return previous

    def remove(self, proposition: str) -> Optional[Belief]:
        return self._beliefs.pop(proposition, None)

    def snapshot(self) -> Dict[str, Belief]:
        """A shallow copy that later writes do not affect."""
        return dict(self._beliefs)

    def above(self, threshold: float) -> List[Belief]:
        return [belief for belief in self._beliefs.values() if belief.meets(threshold)]

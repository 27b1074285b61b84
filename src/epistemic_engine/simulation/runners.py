# src/epistemic_engine/simulation/runners.py

import asyncio
import traceback
from abc import ABC, abstractmethod
from typing import Protocol, Sequence


class TurnProtocol(Protocol):
    """
    Anything with an async ``update(current_tick)`` can be run for a round,
    e.g. an agent's turn wrapper.
    """

    async def update(self, current_tick: int) -> None: ...

    def __repr__(self) -> str: ...


class TurnRunner(ABC):
    """
    Abstract Base Class for turn runners.
    """

    @abstractmethod
    async def run(self, turns: Sequence[TurnProtocol], current_tick: int) -> None:
        """
        Executes one round of turns.

        Args:
            turns: Objects conforming to TurnProtocol.
            current_tick: The round number passed to each ``update``.
        """
        raise NotImplementedError


class SerialTurnRunner(TurnRunner):
    """
    Runs turns one after another. A failing turn is reported and the rest
    still run.
    """

    async def run(self, turns: Sequence[TurnProtocol], current_tick: int) -> None:
        for turn in turns:
            try:
                await turn.update(current_tick=current_tick)
            except Exception as e:
                print(f"ERROR: Turn '{turn!r}' failed during serial update at round {current_tick}: {e}")
                traceback.print_exc()


class AsyncTurnRunner(TurnRunner):
    """
    Runs all turns concurrently with asyncio.gather. One failing turn does
    not stop the others.
    """

    async def run(self, turns: Sequence[TurnProtocol], current_tick: int) -> None:
        tasks = [asyncio.create_task(turn.update(current_tick=current_tick)) for turn in turns]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for result, turn in zip(results, turns):
            if isinstance(result, Exception):
                print(f"ERROR: Turn '{turn!r}' failed during concurrent update at round {current_tick}: {result}")
                traceback.print_exception(type(result), result, result.__traceback__)


def build_runner(kind: str) -> TurnRunner:
    """Returns the runner named in SimulationConfig.runner."""
    if kind == "serial":
        return SerialTurnRunner()
    if kind == "async":
        return AsyncTurnRunner()
    raise ValueError(f"Unknown runner: {kind}")

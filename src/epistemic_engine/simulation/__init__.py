# src/epistemic_engine/simulation/__init__.py

from .engine import AgentTurn, EpistemicSimulation, build_scaffold
from .runners import AsyncTurnRunner, SerialTurnRunner, TurnRunner, build_runner

__all__ = [
    "AgentTurn",
    "AsyncTurnRunner",
    "EpistemicSimulation",
    "SerialTurnRunner",
    "TurnRunner",
    "build_runner",
    "build_scaffold",
]

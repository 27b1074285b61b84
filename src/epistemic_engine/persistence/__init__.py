# src/epistemic_engine/persistence/__init__.py
"""
Saving and restoring agent belief stores.

Snapshots are pydantic models written as JSON by a StateStore. Only
beliefs at or above an agent's memory threshold are retained by default.
"""

from .models import AgentSnapshot, BeliefSnapshot, ElementSnapshot, EngineSnapshot
from .restore import restore_agent, restore_beliefs
from .snapshot import snapshot_agent, snapshot_agents
from .store import FileStateStore, RoundSnapshotStore, StateStore

__all__ = [
    "AgentSnapshot",
    "BeliefSnapshot",
    "ElementSnapshot",
    "EngineSnapshot",
    "FileStateStore",
    "RoundSnapshotStore",
    "StateStore",
    "restore_agent",
    "restore_beliefs",
    "snapshot_agent",
    "snapshot_agents",
]

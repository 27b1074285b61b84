# tests/epistemic_engine/conftest.py
"""
Shared fixtures for engine tests: frames from the built-in registry, a
deterministic scaffold and helpers that seed agents with known beliefs.
"""

from unittest.mock import MagicMock

import pytest

from epistemic_core.cognition.scaffolding import EvidenceScaffold, MockEvidenceScorer
from epistemic_core.core.event_bus import EventBus
from epistemic_core.core.events import ALL_EVENT_TYPES
from epistemic_core.epistemic.belief import Belief
from epistemic_core.epistemic.justification import Justification, observation_element, tool_result_element
from epistemic_core.frames.frame_registry import frame_registry
from epistemic_engine.agents.agent import EpistemicAgent


def _seeded_belief(factory, source):
    def _build(proposition, confidence, strength):
        element = factory(source, {"claim": proposition}, evaluator=lambda p: strength)
        return Belief(proposition, confidence, Justification((element,)))

    return _build


@pytest.fixture
def event_bus():
    return EventBus(config={})


@pytest.fixture
def recorder(event_bus):
    """A MagicMock subscribed to every event on the bus."""
    handler = MagicMock()
    event_bus.subscribe_many(ALL_EVENT_TYPES, handler)
    return handler


@pytest.fixture
def recorded():
    """Returns the events of one type a recorder has seen, in order."""

    def _recorded(handler, event_type):
        return [c.args[0] for c in handler.call_args_list if c.args[0]["event_type"] == str(event_type)]

    return _recorded


@pytest.fixture
def scaffold():
    return EvidenceScaffold(MockEvidenceScorer())


@pytest.fixture
def tool_belief():
    """Builds a belief backed by one tool result whose evaluator returns ``strength``."""
    return _seeded_belief(tool_result_element, "benchmark")


@pytest.fixture
def observation_belief():
    """Builds a belief backed by one observation whose evaluator returns ``strength``."""
    return _seeded_belief(observation_element, "audit")


@pytest.fixture
def make_agent(event_bus):
    """Builds an agent on the shared bus with a built-in frame and optional seeded beliefs."""

    def _make(agent_id, frame="efficiency", beliefs=(), **kwargs):
        frame_obj = frame_registry.create(frame) if isinstance(frame, str) else frame
        return EpistemicAgent(agent_id, frame_obj, event_bus=event_bus, initial_beliefs=beliefs, **kwargs)

    return _make

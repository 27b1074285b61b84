# conftest.py
"""
Pytest-wide fixtures for the entire project.
"""

import os

import pytest

import epistemic_core.cognition.ai_models.openai_client as oac
from epistemic_core.frames.frame_registry import frame_registry


@pytest.fixture(autouse=True)
def _offline_llm(monkeypatch):
    """No test talks to the real API: a dummy key is set and the cached client is cleared."""
    monkeypatch.setitem(os.environ, "OPENAI_API_KEY", "test-key")
    oac._client = None
    yield
    oac._client = None


@pytest.fixture(autouse=True)
def _restore_frame_registry():
    """Frames registered or replaced by a test do not leak into the next one."""
    import epistemic_engine.frames  # noqa: F401

    saved = dict(frame_registry._definitions)
    yield
    frame_registry._definitions.clear()
    frame_registry._definitions.update(saved)

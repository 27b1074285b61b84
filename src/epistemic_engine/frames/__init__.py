# src/epistemic_engine/frames/__init__.py
"""
Importing this package registers the built-in frame variants, so
``frame_registry.create(name)`` works for all of them.
"""

from epistemic_core.frames.frame_registry import frame_registry

from .definitions import BUILTIN_FRAMES, DEBATE_FRAMES, NEGOTIATION_FRAMES, register_builtin_frames

__all__ = ["BUILTIN_FRAMES", "DEBATE_FRAMES", "NEGOTIATION_FRAMES", "frame_registry", "register_builtin_frames"]

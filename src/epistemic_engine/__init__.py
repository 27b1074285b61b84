# src/epistemic_engine/__init__.py
"""
Agents, conflict resolution, persistence and simulation built on
epistemic_core. Importing the package registers the built-in frames.
"""

from . import frames  # noqa: F401

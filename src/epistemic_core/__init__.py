# src/epistemic_core/__init__.py
"""
Frame-weighted beliefs: propositions, justifications, frames and the
evidence scaffolding that scores them.
"""

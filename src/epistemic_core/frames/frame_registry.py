# src/epistemic_core/frames/frame_registry.py
"""
Defines the FrameRegistry, a singleton that stores every known frame
variant by name so frames can be constructed from configuration.
"""

import importlib
from typing import Any, Dict, Iterable, List, Optional, Union

from epistemic_core.frames.frame import Frame, FrameDefinition


class FrameRegistry:
    """
    A registry of frame definitions, keyed by kind.

    Lookup is case-insensitive and also accepts a variant's display name,
    so ``create("efficiency")`` and ``create("Efficiency")`` are the same.
    """

    def __init__(self) -> None:
        self._definitions: Dict[str, FrameDefinition] = {}

    def load_definitions_from_paths(self, module_paths: List[str]) -> None:
        """
        Imports modules that register frame definitions as a side effect.

        Args:
            module_paths: Dotted module paths, e.g.
                          ["epistemic_engine.frames.definitions"].
        """
        for path in module_paths:
            try:
                importlib.import_module(path)
            except ImportError as e:
                print(f"WARNING: Could not import frame module at '{path}'. Error: {e}")

    def register(
        self, definition: Union[FrameDefinition, Dict[str, Any]], replace: bool = False
    ) -> FrameDefinition:
        """
        Registers a frame variant. Dicts are validated into a FrameDefinition.

        Raises:
            ValueError: If the kind is already registered and ``replace`` is False.
        """
        if not isinstance(definition, FrameDefinition):
            definition = FrameDefinition(**definition)
        key = definition.kind.lower()
        if key in self._definitions and not replace:
            raise ValueError(f"Frame with kind '{definition.kind}' is already registered.")
        self._definitions[key] = definition
        return definition

    def register_many(self, definitions: Iterable[Union[FrameDefinition, Dict[str, Any]]], replace: bool = True) -> None:
        for definition in definitions:
            self.register(definition, replace=replace)

    def unregister(self, kind: str) -> None:
        self._definitions.pop(kind.lower(), None)

    def _resolve(self, name: str) -> Optional[FrameDefinition]:
        key = name.lower()
        if key in self._definitions:
            return self._definitions[key]
        for definition in self._definitions.values():
            if definition.name.lower() == key:
                return definition
        return None

    def get_definition(self, name: str) -> FrameDefinition:
        definition = self._resolve(name)
        if definition is None:
            raise ValueError(f"Unknown frame: {name}")
        return definition

    def create(self, name: str, frame_id: Optional[str] = None, **overrides: Any) -> Frame:
        """
        Builds a frame by name.

        Raises:
            ValueError: If no variant with that kind or name is registered.
        """
        frame = Frame(self.get_definition(name), frame_id=frame_id)
        if overrides:
            frame = frame.with_parameters(**overrides)
        return frame

    def __contains__(self, name: str) -> bool:
        return self._resolve(name) is not None

    @property
    def available(self) -> List[str]:
        """Returns a sorted list of all registered frame kinds."""
        return sorted(self._definitions.keys())


# Global singleton. Built-in variants are registered by
# epistemic_engine.frames.definitions.
frame_registry = FrameRegistry()

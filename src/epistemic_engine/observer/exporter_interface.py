# src/epistemic_engine/observer/exporter_interface.py

from abc import ABC, abstractmethod
from typing import Any, Dict


class ExporterInterface(ABC):
    """
    A sink for engine events and per-round metrics. How they are displayed or
    stored is entirely up to the implementation.
    """

    @abstractmethod
    async def log_event(self, event_data: Dict[str, Any]) -> None:
        """Logs a single structured event."""
        raise NotImplementedError

    @abstractmethod
    async def export_metrics(self, round_number: int, metrics: Dict[str, Any]) -> None:
        """Exports aggregated metrics for a simulation round."""
        raise NotImplementedError

# src/epistemic_engine/observer/observer.py

from collections import Counter, defaultdict, deque
from typing import Any, Deque, Dict, List, Optional

from epistemic_core.core.event_bus import EventBus
from epistemic_core.core.events import ALL_EVENT_TYPES
from epistemic_engine.observer.exporter_interface import ExporterInterface


class EpistemicObserver:
    """
    Subscribes to every engine event, keeps a bounded history per entity and
    forwards events to the configured exporters.

    Recording is synchronous so history is complete as soon as an event is
    published; exporter forwarding runs as an async handler and is awaited
    by ``EventBus.flush()``.
    """

    def __init__(
        self,
        event_bus: EventBus,
        exporters: Optional[List[ExporterInterface]] = None,
        max_history: int = 1000,
    ) -> None:
        self.event_bus = event_bus
        self.exporters = list(exporters or [])
        self.max_history = max_history
        self._history: Deque[Dict[str, Any]] = deque(maxlen=max_history)
        self._by_entity: Dict[str, Deque[Dict[str, Any]]] = defaultdict(lambda: deque(maxlen=max_history))
        self._counts: Counter = Counter()

        event_bus.subscribe_many(ALL_EVENT_TYPES, self.record)
        if self.exporters:
            event_bus.subscribe_many(ALL_EVENT_TYPES, self.forward)

    def record(self, event_data: Dict[str, Any]) -> None:
        self._history.append(event_data)
        self._by_entity[event_data.get("entity_id", "unknown")].append(event_data)
        self._counts[event_data.get("event_type", "unknown")] += 1

    async def forward(self, event_data: Dict[str, Any]) -> None:
        for exporter in self.exporters:
            try:
                await exporter.log_event(event_data)
            except Exception as e:
                print(f"WARNING: Exporter {type(exporter).__name__} failed to log event: {e}")

    def get_history(self, entity_id: Optional[str] = None, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
        events = self._by_entity.get(entity_id, ()) if entity_id is not None else self._history
        if event_type is None:
            return list(events)
        return [e for e in events if e.get("event_type") == str(event_type)]

    def count(self, event_type: str) -> int:
        return self._counts[str(event_type)]

    def summary(self) -> Dict[str, int]:
        return dict(self._counts)

    async def export_round(self, round_number: int, extra: Optional[Dict[str, Any]] = None) -> None:
        metrics = {**self.summary(), **(extra or {})}
        for exporter in self.exporters:
            try:
                await exporter.export_metrics(round_number, metrics)
            except Exception as e:
                print(f"WARNING: Exporter {type(exporter).__name__} failed to export metrics: {e}")

    def clear(self) -> None:
        self._history.clear()
        self._by_entity.clear()
        self._counts.clear()

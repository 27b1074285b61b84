# src/epistemic_engine/observer/exporters.py

import json
from pathlib import Path
from typing import Any, Dict, Union

from epistemic_engine.observer.exporter_interface import ExporterInterface

_EVENT_SUMMARIES = {
    "perception": lambda e: f"perceived {e.get('perception_type')} from {e.get('source')}",
    "belief_formation": lambda e: f"formed '{e.get('proposition')}' at {e.get('confidence', 0.0):.3f}",
    "belief_update": lambda e: (
        f"updated '{e.get('proposition')}' {e.get('old_confidence', 0.0):.3f} -> "
        f"{e.get('new_confidence', 0.0):.3f} ({e.get('confidence_delta', 0.0):+.3f})"
    ),
    "conflict_detection": lambda e: f"conflict with {e.get('agent_b')} on '{e.get('proposition')}'",
    "justification_exchange": lambda e: f"exchanging justifications with {e.get('agent_b')} on '{e.get('proposition')}'",
    "conflict_resolution": lambda e: f"{e.get('resolution_type')}: {e.get('reason')}",
    "frame_change": lambda e: f"frame {e.get('old_frame')} -> {e.get('new_frame')}",
    "insufficient_confidence": lambda e: (
        f"insufficient confidence in '{e.get('proposition')}' for goal {e.get('goal_id')}"
    ),
}


def format_event(event_data: Dict[str, Any]) -> str:
    event_type = event_data.get("event_type", "unknown")
    summary = _EVENT_SUMMARIES.get(event_type)
    detail = summary(event_data) if summary else json.dumps(event_data, default=str, sort_keys=True)
    return f"[{event_data.get('entity_id')}] {event_type}: {detail}"


class ConsoleExporter(ExporterInterface):
    """Prints one human-readable line per event."""

    def __init__(self, verbose: bool = True) -> None:
        self.verbose = verbose

    async def log_event(self, event_data: Dict[str, Any]) -> None:
        if self.verbose:
            print(format_event(event_data))

    async def export_metrics(self, round_number: int, metrics: Dict[str, Any]) -> None:
        print(f"--- Round {round_number} metrics: {json.dumps(metrics, default=str, sort_keys=True)}")


class JsonLinesExporter(ExporterInterface):
    """Appends every event and metrics record to a JSON Lines file."""

    def __init__(self, file_path: Union[str, Path]) -> None:
        self.file_path = Path(file_path)
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def _append(self, record: Dict[str, Any]) -> None:
        with self.file_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, default=str) + "\n")

    async def log_event(self, event_data: Dict[str, Any]) -> None:
        self._append(event_data)

    async def export_metrics(self, round_number: int, metrics: Dict[str, Any]) -> None:
        self._append({"event_type": "round_metrics", "round": round_number, **metrics})

# src/epistemic_core/core/events.py
"""
The event vocabulary published on the EventBus.

Every event is a plain dict carrying ``event_type``, ``entity_id`` and
``timestamp`` plus the payload fields named by its type. How events are
displayed or stored is up to the subscribers.
"""

import time
from enum import Enum
from typing import Any, Dict, Optional


class EventType(str, Enum):
    PERCEPTION = "perception"
    BELIEF_FORMATION = "belief_formation"
    BELIEF_UPDATE = "belief_update"
    CONFLICT_DETECTION = "conflict_detection"
    JUSTIFICATION_EXCHANGE = "justification_exchange"
    CONFLICT_RESOLUTION = "conflict_resolution"
    ARBITRATION = "arbitration"
    FRAME_CHANGE = "frame_change"
    INSUFFICIENT_CONFIDENCE = "insufficient_confidence"
    PLAN_CREATION = "plan_creation"
    UPDATE_DISCARDED = "update_discarded"
    SCORER_FALLBACK = "scorer_fallback"

    def __str__(self) -> str:
        return self.value


ALL_EVENT_TYPES = [event_type.value for event_type in EventType]


def make_event(event_type: EventType, entity_id: str, timestamp: Optional[float] = None, **payload: Any) -> Dict[str, Any]:
    """Builds the dict published for an event."""
    event: Dict[str, Any] = {
        "event_type": EventType(event_type).value,
        "entity_id": entity_id,
        "timestamp": timestamp if timestamp is not None else time.time(),
    }
    event.update(payload)
    return event

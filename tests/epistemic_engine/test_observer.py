# tests/epistemic_engine/test_observer.py
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

# Subject under test
from epistemic_core.core.event_bus import EventBus
from epistemic_core.core.events import EventType, make_event
from epistemic_engine.observer.exporter_interface import ExporterInterface
from epistemic_engine.observer.exporters import ConsoleExporter, JsonLinesExporter, format_event
from epistemic_engine.observer.observer import EpistemicObserver

# Test Fixtures


@pytest.fixture
def event_bus():
    return EventBus(config={})


@pytest.fixture
def exporter():
    mock_exporter = MagicMock(spec=ExporterInterface)
    mock_exporter.log_event = AsyncMock()
    mock_exporter.export_metrics = AsyncMock()
    return mock_exporter


def _publish(bus, event_type, entity_id, **payload):
    bus.publish(event_type, make_event(event_type, entity_id, **payload))


# Test Cases


def test_observer_records_history_per_entity(event_bus):
    # Arrange
    observer = EpistemicObserver(event_bus)

    # Act
    _publish(event_bus, EventType.BELIEF_FORMATION, "a", proposition="P", confidence=0.8)
    _publish(event_bus, EventType.BELIEF_UPDATE, "a", proposition="P")
    _publish(event_bus, EventType.BELIEF_FORMATION, "b", proposition="Q", confidence=0.7)

    # Assert
    assert len(observer.get_history()) == 3
    assert len(observer.get_history("a")) == 2
    assert len(observer.get_history("a", EventType.BELIEF_UPDATE)) == 1
    assert observer.get_history("nobody") == []
    assert observer.count(EventType.BELIEF_FORMATION) == 2
    assert observer.summary() == {"belief_formation": 2, "belief_update": 1}


def test_history_is_bounded(event_bus):
    observer = EpistemicObserver(event_bus, max_history=2)
    for i in range(5):
        _publish(event_bus, EventType.PERCEPTION, "a", n=i)
    assert [e["n"] for e in observer.get_history()] == [3, 4]
    assert observer.count(EventType.PERCEPTION) == 5


@pytest.mark.asyncio
async def test_observer_forwards_events_to_exporters(event_bus, exporter):
    observer = EpistemicObserver(event_bus, exporters=[exporter])

    _publish(event_bus, EventType.FRAME_CHANGE, "a", old_frame="efficiency", new_frame="security")
    await event_bus.flush()

    exporter.log_event.assert_awaited_once()
    assert exporter.log_event.call_args.args[0]["new_frame"] == "security"
    assert len(observer.get_history()) == 1


@pytest.mark.asyncio
async def test_failing_exporter_does_not_break_recording(event_bus, exporter, capsys):
    exporter.log_event.side_effect = IOError("disk full")
    observer = EpistemicObserver(event_bus, exporters=[exporter])

    _publish(event_bus, EventType.PERCEPTION, "a")
    await event_bus.flush()

    assert observer.count(EventType.PERCEPTION) == 1
    assert "WARNING: Exporter" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_export_round_merges_counts_and_extra_metrics(event_bus, exporter):
    observer = EpistemicObserver(event_bus, exporters=[exporter])
    _publish(event_bus, EventType.CONFLICT_DETECTION, "a")

    await observer.export_round(3, {"agents": 2})

    exporter.export_metrics.assert_awaited_once_with(3, {"conflict_detection": 1, "agents": 2})
    observer.clear()
    assert observer.summary() == {}


def test_format_event():
    event = make_event(EventType.BELIEF_UPDATE, "a", proposition="P", old_confidence=0.5, new_confidence=0.6, confidence_delta=0.1)
    assert format_event(event) == "[a] belief_update: updated 'P' 0.500 -> 0.600 (+0.100)"
    assert format_event({"event_type": "custom", "entity_id": "x", "k": 1}).startswith("[x] custom: {")


@pytest.mark.asyncio
async def test_console_exporter(capsys):
    exporter = ConsoleExporter()
    await exporter.log_event(make_event(EventType.FRAME_CHANGE, "a", old_frame="pro", new_frame="con"))
    await exporter.export_metrics(1, {"agents": 2})

    out = capsys.readouterr().out
    assert "[a] frame_change: frame pro -> con" in out
    assert "--- Round 1 metrics:" in out


@pytest.mark.asyncio
async def test_json_lines_exporter(tmp_path):
    path = tmp_path / "logs" / "events.jsonl"
    exporter = JsonLinesExporter(path)

    await exporter.log_event(make_event(EventType.PERCEPTION, "a", timestamp=1.0))
    await exporter.export_metrics(1, {"agents": 2})

    lines = [json.loads(line) for line in path.read_text().splitlines()]
    assert lines[0]["event_type"] == "perception"
    assert lines[1] == {"event_type": "round_metrics", "round": 1, "agents": 2}

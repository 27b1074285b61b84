# tests/epistemic_engine/test_negotiation.py

import pytest

# Subject under test
from epistemic_core.core.events import EventType
from epistemic_core.epistemic.conflict import ResolutionType
from epistemic_core.frames.frame_registry import frame_registry
from epistemic_engine.conflict.negotiation import escalate_to_arbiter, negotiate

# Test Fixtures


@pytest.fixture
def stubborn_pair(make_agent, tool_belief, observation_belief):
    a = make_agent("a", "efficiency", beliefs=[tool_belief("P", 0.85, 0.9)])
    b = make_agent("b", "thoroughness", beliefs=[observation_belief("¬P", 0.78, 0.85)])
    return a, b


@pytest.fixture
def yielding_pair(make_agent, tool_belief, observation_belief):
    a = make_agent("a", "efficiency", beliefs=[tool_belief("P", 0.85, 0.95)])
    b = make_agent("b", "security", beliefs=[observation_belief("¬P", 0.62, 0.7)])
    return a, b


# Test Cases

## 1. negotiate()


@pytest.mark.asyncio
async def test_negotiation_stops_when_all_conflicts_persist(stubborn_pair):
    # Arrange
    a, b = stubborn_pair

    # Act
    result = await negotiate(a, b, max_rounds=5)

    # Assert
    assert len(result.rounds) == 1
    assert result.rounds[0].all_persistent
    assert not result.resolved
    assert [c.proposition for c in result.persistent_conflicts] == ["P"]
    assert [c.proposition for c in result.remaining_conflicts] == ["P"]


@pytest.mark.asyncio
async def test_negotiation_resolves_converging_conflict(yielding_pair):
    a, b = yielding_pair

    result = await negotiate(a, b)

    assert result.resolved
    assert len(result.rounds) == 1
    assert result.rounds[0].outcomes[0].resolution_type == ResolutionType.CONVERGED
    assert b.get_belief("¬P").confidence < b.thresholds.conflict


@pytest.mark.asyncio
async def test_negotiation_without_conflicts_has_no_rounds(make_agent, tool_belief):
    a = make_agent("a", beliefs=[tool_belief("P", 0.9, 0.9)])
    b = make_agent("b", beliefs=[tool_belief("P", 0.9, 0.9)])

    result = await negotiate(a, b)

    assert result.rounds == []
    assert result.resolved


@pytest.mark.asyncio
async def test_negotiation_rejects_non_positive_rounds(stubborn_pair):
    with pytest.raises(ValueError):
        await negotiate(*stubborn_pair, max_rounds=0)


## 2. escalate_to_arbiter()


@pytest.mark.asyncio
async def test_arbiter_finds_close_cases_undecided(stubborn_pair, recorder, recorded):
    """
    Tests that a judge scoring both sides within the margin favours nobody.
    """
    # Arrange
    a, b = stubborn_pair
    [conflict] = a.detect_all_conflicts(b)

    # Act
    result = await escalate_to_arbiter(conflict, a, b, event_bus=a.event_bus)

    # Assert
    # judge reads both at full strength, discounted by its default trust (0.6)
    assert result.confidence_a == pytest.approx(0.54)
    assert result.confidence_b == pytest.approx(0.51)
    assert result.favoured_proposition is None
    assert result.arbiter_frame == "judge"
    assert recorded(recorder, EventType.ARBITRATION)[0]["conflict_id"] == conflict.id


@pytest.mark.asyncio
async def test_arbiter_favours_stronger_case(stubborn_pair):
    a, b = stubborn_pair
    [conflict] = a.detect_all_conflicts(b)

    result = await escalate_to_arbiter(conflict, a, b, margin=0.01)

    assert result.favoured_proposition == "P"
    assert "favours a" in result.reason


@pytest.mark.asyncio
async def test_arbiter_leaves_stores_untouched(stubborn_pair):
    a, b = stubborn_pair
    [conflict] = a.detect_all_conflicts(b)

    await escalate_to_arbiter(conflict, a, b, arbiter_frame=frame_registry.create("moderator"))

    assert a.get_belief("P").confidence == 0.85
    assert b.get_belief("¬P").confidence == 0.78

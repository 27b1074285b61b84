# tests/epistemic_engine/test_runners.py

from unittest.mock import AsyncMock

import pytest

# Subject under test
from epistemic_engine.simulation.runners import AsyncTurnRunner, SerialTurnRunner, build_runner

# --- Mocks and Fixtures ---


class MockTurn:
    """A mock turn that conforms to the TurnProtocol for testing."""

    def __init__(self, name: str, should_fail: bool = False):
        self.name = name
        self.update = AsyncMock()
        if should_fail:
            self.update.side_effect = RuntimeError(f"Turn '{self.name}' failed as designed.")

    def __repr__(self) -> str:
        return f"MockTurn(name='{self.name}')"


@pytest.fixture
def turns():
    return [MockTurn("A"), MockTurn("B")]


@pytest.fixture
def turns_with_failure():
    return [MockTurn("A"), MockTurn("B", should_fail=True), MockTurn("C")]


# --- Test Cases ---


@pytest.mark.asyncio
@pytest.mark.parametrize("runner", [SerialTurnRunner(), AsyncTurnRunner()])
async def test_runner_executes_all_turns(runner, turns):
    # Act
    await runner.run(turns, current_tick=10)

    # Assert
    for turn in turns:
        turn.update.assert_awaited_once_with(current_tick=10)


@pytest.mark.asyncio
async def test_serial_runner_handles_failure_and_continues(turns_with_failure, capsys):
    """
    Tests that the SerialTurnRunner continues with later turns even if one fails.
    """
    # Act
    await SerialTurnRunner().run(turns_with_failure, current_tick=20)

    # Assert
    for turn in turns_with_failure:
        turn.update.assert_awaited_once_with(current_tick=20)
    captured = capsys.readouterr()
    full_output = captured.out + captured.err
    assert "ERROR: Turn 'MockTurn(name='B')' failed during serial update" in full_output
    assert "RuntimeError: Turn 'B' failed as designed." in full_output


@pytest.mark.asyncio
async def test_async_runner_handles_failure_gracefully(turns_with_failure, capsys):
    # Act
    await AsyncTurnRunner().run(turns_with_failure, current_tick=40)

    # Assert
    for turn in turns_with_failure:
        turn.update.assert_awaited_once_with(current_tick=40)
    captured = capsys.readouterr()
    full_output = captured.out + captured.err
    assert "ERROR: Turn 'MockTurn(name='B')' failed during concurrent update" in full_output
    assert "RuntimeError: Turn 'B' failed as designed." in full_output


def test_build_runner():
    assert isinstance(build_runner("serial"), SerialTurnRunner)
    assert isinstance(build_runner("async"), AsyncTurnRunner)
    with pytest.raises(ValueError, match="Unknown runner"):
        build_runner("threaded")

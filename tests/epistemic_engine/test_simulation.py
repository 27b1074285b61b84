# tests/epistemic_engine/test_simulation.py

from unittest.mock import AsyncMock, MagicMock

import pytest

# Subject under test
from epistemic_core.cognition.ai_models.openai_client import OpenAIEvidenceScorer
from epistemic_core.cognition.scaffolding import MockEvidenceScorer
from epistemic_core.core.events import EventType
from epistemic_core.core.perception import ToolResultPerception
from epistemic_engine.config.loader import load_config
from epistemic_engine.config.schemas import AppConfig
from epistemic_engine.observer.exporter_interface import ExporterInterface
from epistemic_engine.simulation.engine import AgentTurn, EpistemicSimulation, build_scaffold
from epistemic_engine.simulation.runners import SerialTurnRunner

PERFORMANCE = "SystemPerformanceIsOptimal"

# Test Fixtures


@pytest.fixture
def config():
    return load_config(overrides={"simulation": {"runner": "serial"}})


@pytest.fixture
def simulation(config):
    return EpistemicSimulation.from_config(config, simulation_id="sim_test")


@pytest.fixture
def benchmark():
    return ToolResultPerception(data={"latency_ms": 20}, source="benchmark", propositions=(PERFORMANCE,))


@pytest.fixture
def exporter():
    mock_exporter = MagicMock(spec=ExporterInterface)
    mock_exporter.log_event = AsyncMock()
    mock_exporter.export_metrics = AsyncMock()
    return mock_exporter


# Test Cases

## 1. Construction


def test_from_config_builds_configured_agents(simulation):
    assert set(simulation.agents) == {"agent_efficiency", "agent_security"}
    assert simulation.get_agent("agent_security").frame.kind == "security"
    assert simulation.get_agent("agent_efficiency").name == "Efficiency Analyst"
    assert isinstance(simulation.runner, SerialTurnRunner)
    assert isinstance(simulation.scaffold.scorer, MockEvidenceScorer)


def test_agent_overrides_and_thresholds_are_applied():
    config = AppConfig(
        agents=[
            {
                "id": "j",
                "frame": "judge",
                "frame_overrides": {"default_weight": 0.4},
                "thresholds": {"action": 0.9},
            },
            {"id": "k", "frame": "pro"},
        ],
        thresholds={"conflict": 0.65},
    )
    simulation = EpistemicSimulation.from_config(config)

    judge = simulation.get_agent("j")
    assert judge.frame.parameters["default_weight"] == 0.4
    assert judge.thresholds.action == 0.9
    assert simulation.get_agent("k").thresholds.conflict == 0.65


def test_build_scaffold_by_kind():
    assert build_scaffold(AppConfig(scorer={"kind": "none"})) is None
    assert isinstance(build_scaffold(AppConfig(scorer={"kind": "openai"})).scorer, OpenAIEvidenceScorer)
    mock = build_scaffold(AppConfig(scorer={"kind": "mock", "strengths": {"tool_result": 0.4}}))
    assert mock.scorer.strengths["tool_result"] == 0.4


def test_duplicate_and_unknown_agents(simulation):
    with pytest.raises(ValueError, match="already part of the simulation"):
        simulation.add_agent(simulation.get_agent("agent_security"))
    with pytest.raises(ValueError, match="No agent with ID"):
        simulation.queue_perception("ghost", ToolResultPerception(data="x"))


## 2. Rounds


@pytest.mark.asyncio
async def test_run_round_delivers_queued_perceptions(simulation, benchmark):
    # Arrange
    simulation.broadcast(benchmark)

    # Act
    round_number = await simulation.run_round()

    # Assert
    assert round_number == 1
    assert simulation.get_agent("agent_efficiency").get_belief(PERFORMANCE).confidence == pytest.approx(0.85)
    assert simulation.get_agent("agent_security").get_belief(PERFORMANCE).confidence == pytest.approx(0.6)
    assert simulation.observer.count(EventType.BELIEF_FORMATION) == 2


@pytest.mark.asyncio
async def test_inbox_is_drained_after_a_round(simulation, benchmark):
    simulation.queue_perception("agent_efficiency", benchmark)
    await simulation.run_round()
    await simulation.run_round()

    assert len(simulation.get_agent("agent_efficiency").get_belief(PERFORMANCE).justification) == 1
    assert simulation.get_agent("agent_security").get_belief(PERFORMANCE) is None


@pytest.mark.asyncio
async def test_agent_turn_skips_empty_inbox():
    agent = MagicMock()
    agent.id = "a"
    agent.perceive_all = AsyncMock()

    await AgentTurn(agent, []).update(current_tick=1)

    agent.perceive_all.assert_not_awaited()
    assert repr(AgentTurn(agent, [])) == "AgentTurn(agent='a')"


@pytest.mark.asyncio
async def test_reconcile_resolves_conflicts_between_every_pair(simulation, tool_belief, observation_belief):
    # Arrange
    await simulation.get_agent("agent_efficiency").adopt_belief(tool_belief("P", 0.85, 0.95))
    await simulation.get_agent("agent_security").adopt_belief(observation_belief("¬P", 0.62, 0.7))

    # Act
    outcomes = await simulation.reconcile()

    # Assert
    assert len(outcomes) == 1
    assert outcomes[0].success
    assert simulation.detect_all_conflicts() == []


@pytest.mark.asyncio
async def test_negotiate_and_escalate(simulation, tool_belief, observation_belief):
    efficiency = simulation.get_agent("agent_efficiency")
    security = simulation.get_agent("agent_security")
    await efficiency.adopt_belief(tool_belief("P", 0.85, 0.95))
    await security.adopt_belief(observation_belief("¬P", 0.62, 0.7))
    [conflict] = simulation.detect_all_conflicts()

    arbitration = await simulation.escalate(conflict)
    result = await simulation.negotiate("agent_efficiency", "agent_security")

    assert arbitration.arbiter_frame == "judge"
    assert result.resolved


@pytest.mark.asyncio
async def test_run_exports_metrics_and_snapshots(tmp_path, benchmark, exporter):
    # Arrange
    config = load_config(overrides={"simulation": {"rounds": 2, "snapshot_directory": str(tmp_path)}})
    simulation = EpistemicSimulation.from_config(config, exporters=[exporter])

    # Act
    await simulation.run(perceptions=[benchmark])

    # Assert
    assert simulation.current_round == 2
    assert exporter.export_metrics.await_count == 2
    round_number, metrics = exporter.export_metrics.call_args.args
    assert round_number == 2
    assert metrics["agents"] == 2
    assert (tmp_path / "snapshot_round_1.json").is_file()
    assert (tmp_path / "snapshot_round_2.json").is_file()
    exporter.log_event.assert_awaited()


## 3. Persistence


@pytest.mark.asyncio
async def test_save_and_load_state(tmp_path, simulation, benchmark):
    # Arrange
    simulation.broadcast(benchmark)
    await simulation.run_round()
    path = tmp_path / "state.json"

    # Act
    simulation.save_state(path)
    fresh = EpistemicSimulation(config=simulation.config)
    await fresh.load_state(path)

    # Assert
    assert fresh.simulation_id == "sim_test"
    assert fresh.current_round == 1
    assert set(fresh.agents) == {"agent_efficiency", "agent_security"}
    assert fresh.get_agent("agent_security").get_belief(PERFORMANCE).confidence == pytest.approx(0.6)
    assert fresh.get_agent("agent_security").resolution_strategy.significance_threshold == 0.1

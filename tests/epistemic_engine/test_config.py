# tests/epistemic_engine/test_config.py

import pytest
from omegaconf import OmegaConf
from pydantic import ValidationError

# Subject under test
from epistemic_core.frames.frame_registry import frame_registry
from epistemic_engine.config.loader import apply_frame_definitions, load_config
from epistemic_engine.config.schemas import AgentConfig, AppConfig
from epistemic_engine.utils.config_utils import get_config_value

# Test Cases

## 1. Schemas


def test_defaults_match_documented_thresholds():
    config = AppConfig()
    assert config.thresholds.action == 0.7
    assert config.thresholds.conflict == 0.6
    assert config.thresholds.communication == 0.5
    assert config.thresholds.memory == 0.3
    assert config.resolution.significance_threshold == 0.1


@pytest.mark.parametrize("field, value", [("action", 1.2), ("memory", -0.1)])
def test_thresholds_must_be_in_unit_interval(field, value):
    with pytest.raises(ValidationError):
        AppConfig(thresholds={field: value})


def test_duplicate_agent_ids_are_rejected():
    with pytest.raises(ValidationError, match="Duplicate agent ids"):
        AppConfig(agents=[AgentConfig(id="a", frame="efficiency"), AgentConfig(id="a", frame="security")])


def test_unknown_scorer_kind_is_rejected():
    with pytest.raises(ValidationError):
        AppConfig(scorer={"kind": "oracle"})


## 2. Loader


def test_load_base_config():
    config = load_config()
    assert [agent.id for agent in config.agents] == ["agent_efficiency", "agent_security"]
    assert config.scorer.kind == "mock"
    assert config.simulation.runner == "async"


def test_load_config_merges_overrides():
    config = load_config(overrides={"thresholds": {"action": 0.8}, "simulation": {"rounds": 4}})
    assert config.thresholds.action == 0.8
    assert config.thresholds.conflict == 0.6
    assert config.simulation.rounds == 4


def test_load_config_from_yaml_file(tmp_path):
    path = tmp_path / "experiment.yml"
    path.write_text(
        "agents:\n"
        "  - id: judge_1\n"
        "    frame: judge\n"
        "    frame_overrides: {default_weight: 0.4}\n"
        "resolution:\n"
        "  max_negotiation_rounds: 5\n"
    )

    config = load_config(path)

    assert config.agents[0].frame_overrides == {"default_weight": 0.4}
    assert config.resolution.max_negotiation_rounds == 5


def test_invalid_config_is_reported_and_raised(capsys):
    with pytest.raises(ValueError):
        load_config(overrides={"thresholds": {"action": 3.0}})
    assert "ERROR: Configuration validation failed" in capsys.readouterr().out


def test_apply_frame_definitions_registers_config_frames():
    config = AppConfig(
        frames=[{"kind": "cautious", "name": "Cautious", "weights": {"observation": 0.9}, "max_initial_confidence": 0.5}]
    )

    apply_frame_definitions(config)

    assert frame_registry.create("cautious").parameters["observation_weight"] == 0.9
    assert "efficiency" in frame_registry


## 3. get_config_value()


def test_get_config_value_from_pydantic_model():
    config = AppConfig()
    assert get_config_value(config, "thresholds.action") == 0.7
    assert get_config_value(config, "thresholds.missing", "fallback") == "fallback"


def test_get_config_value_from_dict_and_omegaconf():
    data = {"simulation": {"rounds": 3, "snapshot_directory": None}}
    assert get_config_value(data, "simulation.rounds") == 3
    assert get_config_value(data, "simulation.snapshot_directory", "x") is None
    assert get_config_value(OmegaConf.create(data), "simulation.rounds") == 3
    assert get_config_value(data, "simulation.rounds.deeper", 9) == 9
    assert get_config_value(data, "", 1) == 1

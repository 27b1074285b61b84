# src/epistemic_engine/config/__init__.py

from .loader import BASE_CONFIG_PATH, apply_frame_definitions, load_config
from .schemas import AgentConfig, AppConfig, ConfidenceThresholds, ThresholdsConfig

__all__ = [
    "BASE_CONFIG_PATH",
    "AgentConfig",
    "AppConfig",
    "ConfidenceThresholds",
    "ThresholdsConfig",
    "apply_frame_definitions",
    "load_config",
]

# src/epistemic_engine/config/loader.py

from pathlib import Path
from typing import Any, Dict, Optional, Union

from omegaconf import DictConfig, OmegaConf

from epistemic_core.frames.frame_registry import frame_registry
from epistemic_engine.config.schemas import AppConfig

BASE_CONFIG_PATH = Path(__file__).parent / "base_config.yml"


def load_config(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Union[Dict[str, Any], DictConfig]] = None,
) -> AppConfig:
    """
    Loads the base YAML configuration, merges optional overrides on top and
    validates the result.

    Args:
        path: A YAML file to use instead of the packaged base config.
        overrides: A nested dict or DictConfig merged over the loaded file.

    Raises:
        ValueError: If the merged configuration fails validation.
        TypeError: If the YAML does not resolve to a mapping.
    """
    config_path = Path(path) if path is not None else BASE_CONFIG_PATH
    try:
        base_config = OmegaConf.load(config_path)
        merged = OmegaConf.merge(base_config, overrides or {})
        final_config_dict = OmegaConf.to_container(merged, resolve=True)
        if not isinstance(final_config_dict, dict):
            raise TypeError("Resolved config is not a dictionary.")
        config = AppConfig(**final_config_dict)
    except Exception as e:
        print(f"ERROR: Configuration validation failed for {config_path}: {e}")
        raise

    if config.simulation.enable_debug_logging:
        print(f"DEBUG: Configuration loaded from {config_path}")
    return config


def apply_frame_definitions(config: AppConfig) -> None:
    """Registers the frame variants declared in the config, replacing built-ins of the same kind."""
    # Importing the package registers the built-ins first.
    import epistemic_engine.frames  # noqa: F401

    frame_registry.register_many(config.frames, replace=True)

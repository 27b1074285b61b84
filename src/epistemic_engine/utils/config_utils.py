# src/epistemic_engine/utils/config_utils.py

from typing import Any

from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel

# A sentinel object to detect if a key is missing, distinguishing it from a value of None.
_sentinel = object()


def get_config_value(config: Any, path: str, default: Any = None) -> Any:
    """
    Safely retrieves a value from a nested dict, OmegaConf object or pydantic
    model using a dot-separated path.
    """
    if isinstance(config, DictConfig):
        return OmegaConf.select(config, path, default=default)

    if not path:
        return default

    value: Any = config
    for key in path.split("."):
        if isinstance(value, dict):
            value = value.get(key, _sentinel)
        elif isinstance(value, BaseModel):
            value = getattr(value, key, _sentinel)
        else:
            return default
        if value is _sentinel:
            return default

    return value

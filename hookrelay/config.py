"""Configuration models and loading for hookrelay."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CONFIG_FILENAME = ".hookrelay.yaml"


class RegistryConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_priority: int = 10
    default_accepted_args: int = Field(default=1, ge=0)
    catch_all_hook: str = "all"
    identity_strategy: Literal["object_id", "sequence"] = "object_id"
    log_dispatch: bool = False


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML at {path} must decode to a mapping")
    return data


def load_registry_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> RegistryConfig:
    """Load config with precedence overrides > YAML file > built-in defaults.

    ``path`` may point at a YAML file or at a directory holding ``.hookrelay.yaml``.
    """
    merged: dict[str, Any] = {}
    if path is not None:
        candidate = Path(path)
        if candidate.is_dir():
            candidate = candidate / DEFAULT_CONFIG_FILENAME
        merged = _deep_merge(merged, _load_yaml(candidate))
    if overrides:
        merged = _deep_merge(merged, overrides)

    return RegistryConfig.model_validate(merged)

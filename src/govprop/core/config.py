# src/govprop/core/config.py
"""Framework settings: schema, presets and YAML loading.

Uses Pydantic for validation with frozen (immutable) models.
Configuration precedence: CLI > YAML file > preset > defaults.

Settings only supply DEFAULTS. A PropertyTest that carries its own
ExecutionConfig always keeps it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from govprop.contracts.property import ExecutionConfig

PRESETS_DIR = Path(__file__).parent / "presets"


class LoggingSettings(BaseModel):
    """Logging output settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level",
    )
    json_output: bool = Field(
        default=False,
        description="Emit JSON lines instead of console output",
    )


class GovpropSettings(BaseModel):
    """Top-level framework settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    execution: ExecutionConfig = Field(
        default_factory=ExecutionConfig,
        description="Execution bounds for tests that do not declare their own",
    )
    parallel_workers: int = Field(
        default=1,
        ge=1,
        description="Worker threads for tests with parallel_execution enabled (1 = sequential)",
    )
    history_limit: int = Field(
        default=100,
        ge=0,
        description="Number of finished executions retained in framework history",
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    preset_name: str | None = Field(
        default=None,
        description="Preset these settings were layered on, if any",
    )


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dicts, with override taking precedence.

    Returns:
        Merged dict (new dict, does not mutate inputs).
    """
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def list_presets(presets_dir: Path = PRESETS_DIR) -> list[str]:
    """Sorted preset names (YAML stems) available in presets_dir."""
    if not presets_dir.exists():
        return []
    return sorted(p.stem for p in presets_dir.glob("*.yaml"))


def _read_mapping(path: Path, label: str) -> dict[str, Any]:
    with path.open(encoding="utf-8") as f:
        loaded = yaml.safe_load(f)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{label} must be a YAML mapping, got {type(loaded).__name__}")
    return loaded


def load_preset(preset_name: str, presets_dir: Path = PRESETS_DIR) -> dict[str, Any]:
    """Load a preset by name.

    Raises:
        FileNotFoundError: If preset does not exist.
        yaml.YAMLError: If preset YAML is malformed.
        ValueError: If preset is not a YAML mapping.
    """
    preset_path = presets_dir / f"{preset_name}.yaml"
    if not preset_path.exists():
        available = list_presets(presets_dir)
        raise FileNotFoundError(f"Preset '{preset_name}' not found. Available presets: {available}")
    return _read_mapping(preset_path, f"Preset '{preset_name}'")


def load_settings(
    *,
    preset: str | None = None,
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
    presets_dir: Path = PRESETS_DIR,
) -> GovpropSettings:
    """Layer preset, YAML file and CLI overrides, then validate.

    Precedence (highest to lowest):
    1. cli_overrides - Direct overrides from CLI flags
    2. config_file - User's YAML configuration file
    3. preset - Named preset configuration
    4. defaults - Built-in Pydantic defaults

    Raises:
        FileNotFoundError: If preset or config_file not found.
        yaml.YAMLError: If YAML is malformed.
        pydantic.ValidationError: If final settings fail validation.
    """
    config_dict: dict[str, Any] = {}

    if preset is not None:
        config_dict = load_preset(preset, presets_dir)

    if config_file is not None:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        config_dict = deep_merge(config_dict, _read_mapping(config_file, f"Config file {config_file}"))

    if cli_overrides is not None:
        config_dict = deep_merge(config_dict, cli_overrides)

    config_dict["preset_name"] = preset
    return GovpropSettings(**config_dict)

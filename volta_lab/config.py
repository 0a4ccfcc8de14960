"""Configuration loader for the Volta Lab simulation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from volta_lab.core.settings import SimulationSettings
from volta_lab.tutor.client import TutorSettings

DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"
SETTINGS_PATH: Path = DATA_DIR / "settings.yaml"


@dataclass(frozen=True)
class Settings:
    """Top-level settings: one section per subsystem."""

    simulation: SimulationSettings = field(default_factory=SimulationSettings)
    tutor: TutorSettings = field(default_factory=TutorSettings)


# field name -> accepted types
_SIMULATION_FIELDS: dict[str, tuple[type, ...]] = {
    "tick_period_ms": (int, float),
    "charge_period_ms": (int, float),
    "charge_increment": (int, float),
    "history_capacity": (int,),
    "default_layer_count": (int,),
    "default_electrolyte_quality": (int, float),
    "default_resistance": (int, float),
    "max_catch_up_ms": (int, float),
}

_TUTOR_FIELDS: dict[str, tuple[type, ...]] = {
    "model": (str,),
    "api_key_env": (str,),
    "language": (str,),
    "max_workers": (int,),
}


def _read_section(
    data: dict[str, Any],
    section: str,
    fields: dict[str, tuple[type, ...]],
) -> dict[str, Any]:
    """Type-check one section; unknown keys and wrong types are rejected."""
    raw = data.get(section) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Section '{section}' must be a mapping")

    values: dict[str, Any] = {}
    for key, val in raw.items():
        if key not in fields:
            raise ValueError(f"Unknown setting '{section}.{key}'")
        accepted = fields[key]
        # bool is an int subclass; never accept it for a numeric field.
        if isinstance(val, bool) or not isinstance(val, accepted):
            raise ValueError(
                f"'{section}.{key}' must be "
                f"{' or '.join(t.__name__ for t in accepted)}, "
                f"got {type(val).__name__}"
            )
        values[key] = val
    return values


def load_settings(path: Path | None = None) -> Settings:
    """Load runtime settings from a YAML file.

    Missing keys fall back to the dataclass defaults; present keys are
    type-checked and range-validated.

    Args:
        path: Optional override for the settings file path.

    Returns:
        A :class:`Settings` instance.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ValueError: If a key is unknown, mistyped or out of range.
    """
    settings_path = path or SETTINGS_PATH
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with open(settings_path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Settings file {settings_path} must contain a mapping")

    sim_values = _read_section(data, "simulation", _SIMULATION_FIELDS)
    tutor_values = _read_section(data, "tutor", _TUTOR_FIELDS)

    return Settings(
        simulation=SimulationSettings(**sim_values),
        tutor=TutorSettings(**tutor_values),
    )

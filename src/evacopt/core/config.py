"""Configuration management with pydantic and YAML support.

Simulation settings can be written in snake_case YAML or in the camelCase
JSON layout used by existing simulation configuration files; both parse to
the same ``SimulationConfig``.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_EXIT_WIDTH, EXIT_PRECISION


class FloorFieldKind(str, Enum):
    """Static floor field used to guide pedestrians."""

    DIJKSTRA_STATIC_MOORE = "DijkstraStaticMoore"
    DIJKSTRA_STATIC_VON_NEUMANN = "DijkstraStaticVonNeumann"
    MANHATTAN_STATIC = "ManhattanStatic"


class NeighbourhoodKind(str, Enum):
    """Cell neighbourhood used by the automaton."""

    MOORE = "Moore"
    VON_NEUMANN = "VonNeumann"


class Aggregation(str, Enum):
    """Policy folding per-run fitness values into one candidate fitness."""

    WORST = "worst"
    MEDIAN = "median"


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class Interval(_Model):
    """Closed sampling range ``[min, max]``."""

    min: float
    max: float

    @classmethod
    def of(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            if len(value) != 2:
                raise ValueError(f"interval must have exactly two values, got {value!r}")
            return {"min": value[0], "max": value[1]}
        return value

    @model_validator(mode="after")
    def _ordered(self) -> Interval:
        if self.min > self.max:
            raise ValueError(f"interval min {self.min} exceeds max {self.max}")
        return self

    def as_tuple(self) -> tuple[float, float]:
        return (self.min, self.max)


class CellularAutomatonConfig(_Model):
    """Discretization and movement rules."""

    cell_dimension: float = Field(default=0.4, gt=0.0)
    neighborhood: NeighbourhoodKind = NeighbourhoodKind.MOORE
    floor_field: FloorFieldKind = FloorFieldKind.DIJKSTRA_STATIC_MOORE


class SimulatorConfig(_Model):
    """Simulator selection and limits."""

    simulator_type: Literal["CA"] = "CA"
    time_limit: float = Field(default=600.0, gt=0.0)
    cellular_automaton: CellularAutomatonConfig = Field(
        default_factory=CellularAutomatonConfig,
        alias="cellularAutomatonParameters",
    )

    @field_validator("simulator_type", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class CrowdConfig(_Model):
    """Ranges for randomized crowd generation."""

    pedestrian_reference_velocity: float = Field(default=1.3, gt=0.0)
    num_pedestrians: Interval = Field(default_factory=lambda: Interval(min=50, max=100))
    attraction_bias: Interval = Field(default_factory=lambda: Interval(min=0.5, max=1.0))
    crowd_repulsion: Interval = Field(default_factory=lambda: Interval(min=0.0, max=0.5))
    velocity_factor: Interval = Field(default_factory=lambda: Interval(min=0.6, max=1.0))

    @field_validator(
        "num_pedestrians", "attraction_bias", "crowd_repulsion", "velocity_factor", mode="before"
    )
    @classmethod
    def _interval(cls, v: Any) -> Any:
        return Interval.of(v)

    @field_validator("num_pedestrians")
    @classmethod
    def _non_negative_count(cls, v: Interval) -> Interval:
        if v.min < 0:
            raise ValueError("num_pedestrians must be non-negative")
        return v


class SimulationConfig(_Model):
    """Root simulation configuration."""

    seed: int = Field(default=1, ge=0)
    num_simulations: int = Field(default=1, ge=1)
    aggregation: Aggregation = Aggregation.WORST
    simulator: SimulatorConfig = Field(default_factory=SimulatorConfig)
    crowd: CrowdConfig = Field(default_factory=CrowdConfig)

    @property
    def time_limit(self) -> float:
        return self.simulator.time_limit


class ExitPlacementSettings(_Model):
    """Problem-level settings for placing additional exits."""

    num_exits: int = Field(default=1, ge=1)
    exit_width: float = Field(default=DEFAULT_EXIT_WIDTH, gt=0.0)
    exit_precision: float = Field(default=EXIT_PRECISION, gt=0.0)


def load_config(path: str | Path) -> SimulationConfig:
    """Load configuration from a YAML or JSON file.

    Args:
        path: Path to config file.

    Returns:
        Parsed SimulationConfig object.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return SimulationConfig.model_validate(data or {})


def save_config(config: SimulationConfig, path: str | Path) -> None:
    """Save configuration to YAML file.

    Args:
        config: Configuration to save.
        path: Output path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(config.model_dump(mode="json"), f, default_flow_style=False)


def default_config() -> SimulationConfig:
    """Return default configuration."""
    return SimulationConfig()


def merge_config(base: SimulationConfig, overrides: dict[str, Any]) -> SimulationConfig:
    """Merge overrides into base configuration.

    Args:
        base: Base configuration.
        overrides: Dictionary of override values (snake_case keys).

    Returns:
        New configuration with overrides applied.
    """
    base_dict = base.model_dump(mode="json")

    def deep_merge(d1: dict, d2: dict) -> dict:
        result = d1.copy()
        for k, v in d2.items():
            if k in result and isinstance(result[k], dict) and isinstance(v, dict):
                result[k] = deep_merge(result[k], v)
            else:
                result[k] = v
        return result

    merged = deep_merge(base_dict, overrides)
    return SimulationConfig.model_validate(merged)

"""Interfaces consumed from a pedestrian evacuation simulator.

The optimization layer only relies on these protocols:

    simulator.build_scenario(domain, cell_dimension, floor_field) -> Scenario
    simulator.build_automaton(scenario, neighbourhood, time_limit, reference_velocity)
        -> Automaton
    automaton.reset()
    automaton.add_pedestrians_uniformly(count, sampler, rng)
    automaton.run()
    automaton.number_of_non_evacuees() -> int
    automaton.distances_to_closest_exit() -> sequence of float
    automaton.evacuation_times() -> sequence of float

Randomness is never ambient: every stochastic call receives the
``numpy.random.Generator`` it must draw from.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import numpy as np

if TYPE_CHECKING:
    from ..core.config import FloorFieldKind, NeighbourhoodKind
    from ..core.types import Domain


@dataclass(frozen=True)
class PedestrianParameters:
    """Behavioural parameters of one pedestrian."""

    field_attraction_bias: float
    crowd_repulsion: float
    velocity_percent: float


PedestrianSampler = Callable[[np.random.Generator], PedestrianParameters]


class Scenario(Protocol):
    """Simulation-ready view of a domain."""

    domain: Domain


class Automaton(Protocol):
    """One reusable simulation engine bound to a scenario."""

    def reset(self) -> None: ...

    def add_pedestrians_uniformly(
        self, count: int, sampler: PedestrianSampler, rng: np.random.Generator
    ) -> None: ...

    def run(self) -> None: ...

    def number_of_non_evacuees(self) -> int: ...

    def distances_to_closest_exit(self) -> Sequence[float]: ...

    def evacuation_times(self) -> Sequence[float]: ...


class Simulator(Protocol):
    """Factory for scenarios and automata."""

    def build_scenario(
        self, domain: Domain, cell_dimension: float, floor_field: FloorFieldKind
    ) -> Scenario: ...

    def build_automaton(
        self,
        scenario: Scenario,
        neighbourhood: NeighbourhoodKind,
        time_limit: float,
        reference_velocity: float,
    ) -> Automaton: ...

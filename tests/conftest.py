"""Pytest configuration for evacopt.

All tests run in-process against the straight-line reference simulator or
small fake simulators defined here; nothing needs a cellular-automaton
engine or network access.
"""

from __future__ import annotations

import numpy as np
import pytest

from evacopt.core.config import ExitPlacementSettings, SimulationConfig
from evacopt.core.evaluator import SimulationEvaluator
from evacopt.core.objective import ExitPlacementObjective
from evacopt.core.types import Access, Domain, Rectangle
from evacopt.greedy.placement import GreedyPlacement
from evacopt.simulator.straight_line import StraightLineSimulator


class CountingSimulator:
    """Reference simulator that records every domain it is asked to build."""

    def __init__(self) -> None:
        self.inner = StraightLineSimulator()
        self.domains: list[Domain] = []

    @property
    def n_scenarios(self) -> int:
        return len(self.domains)

    def build_scenario(self, domain, cell_dimension, floor_field):
        self.domains.append(domain)
        return self.inner.build_scenario(domain, cell_dimension, floor_field)

    def build_automaton(self, scenario, neighbourhood, time_limit, reference_velocity):
        return self.inner.build_automaton(scenario, neighbourhood, time_limit, reference_velocity)


class _CrashingAutomaton:
    def reset(self) -> None:
        pass

    def add_pedestrians_uniformly(self, count, sampler, rng) -> None:
        pass

    def run(self) -> None:
        raise RuntimeError("simulator crashed")


class FailingSimulator(CountingSimulator):
    """Simulator whose runs always raise."""

    def build_automaton(self, scenario, neighbourhood, time_limit, reference_velocity):
        return _CrashingAutomaton()


@pytest.fixture
def domain() -> Domain:
    """10 x 5 room (perimeter 30) without exits."""
    return Domain(width=10.0, height=5.0)


@pytest.fixture
def domain_with_exit() -> Domain:
    """10 x 5 room with one fixed door on the left wall."""
    door = Access(id=100, name="door", shape=Rectangle(0.0, 2.0, 0.1, 1.0))
    return Domain(width=10.0, height=5.0, accesses=(door,))


@pytest.fixture
def config() -> SimulationConfig:
    return SimulationConfig(
        seed=7,
        num_simulations=3,
        simulator={"time_limit": 600.0},
        crowd={"num_pedestrians": [10, 20]},
    )


@pytest.fixture
def counting_simulator() -> CountingSimulator:
    return CountingSimulator()


@pytest.fixture
def failing_simulator() -> FailingSimulator:
    return FailingSimulator()


@pytest.fixture
def evaluator(domain, config) -> SimulationEvaluator:
    return SimulationEvaluator(domain, config)


@pytest.fixture
def settings() -> ExitPlacementSettings:
    return ExitPlacementSettings(num_exits=2, exit_width=2.0)


@pytest.fixture
def objective(evaluator, settings) -> ExitPlacementObjective:
    return ExitPlacementObjective(evaluator, settings)


@pytest.fixture
def greedy(evaluator, settings) -> GreedyPlacement:
    return GreedyPlacement(
        evaluator, settings.exit_width, rng=np.random.default_rng(3), precision=settings.exit_precision
    )

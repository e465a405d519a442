"""Straight-line queueing simulator (low fidelity).

A cheap stand-in for a cellular-automaton engine. Pedestrians sit on the
centres of free cells, walk straight to their nearest access and queue at
its aperture, which discharges at a rate proportional to its length. It
honours the :mod:`evacopt.simulator.interfaces` contract so the whole
optimization stack can run in-process.

Movement model:
    path   = d(position, nearest access) * (1 + 1 / (1 + attraction_bias))
    speed  = reference_velocity * velocity_percent
    service time at an access = (1 + crowd_repulsion) / (SPECIFIC_FLOW * aperture length)

``d`` is Euclidean for Moore movement and Manhattan for Von Neumann
movement or a Manhattan floor field. Obstacles block cells but are not
routed around.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from ..core.config import FloorFieldKind, NeighbourhoodKind
from ..core.constants import SPECIFIC_FLOW
from ..core.types import Domain
from .interfaces import PedestrianSampler


@dataclass
class GridScenario:
    """Domain discretized into square cells."""

    domain: Domain
    cell_dimension: float
    floor_field: FloorFieldKind
    cells: np.ndarray = field(init=False)  # (n_free, 2) cell centres
    exits: np.ndarray = field(init=False)  # (n_exits, 4) left, bottom, right, top
    exit_lengths: np.ndarray = field(init=False)  # (n_exits,) extent along the wall

    def __post_init__(self) -> None:
        if self.cell_dimension <= 0:
            raise ValueError(f"cell_dimension must be positive, got {self.cell_dimension}")

        d = self.domain
        nx = max(1, int(d.width // self.cell_dimension))
        ny = max(1, int(d.height // self.cell_dimension))
        xs = (np.arange(nx) + 0.5) * self.cell_dimension
        ys = (np.arange(ny) + 0.5) * self.cell_dimension
        gx, gy = np.meshgrid(xs, ys, indexing="ij")
        centres = np.column_stack([gx.ravel(), gy.ravel()])

        blocked = np.zeros(len(centres), dtype=bool)
        for obstacle in d.obstacles:
            s = obstacle.shape
            blocked |= (
                (centres[:, 0] >= s.left)
                & (centres[:, 0] <= s.right)
                & (centres[:, 1] >= s.bottom)
                & (centres[:, 1] <= s.top)
            )
        self.cells = centres[~blocked]

        self.exits = np.array(
            [[a.shape.left, a.shape.bottom, a.shape.right, a.shape.top] for a in d.accesses],
            dtype=np.float64,
        ).reshape(-1, 4)
        self.exit_lengths = np.array([a.opening_length for a in d.accesses], dtype=np.float64)


class StraightLineAutomaton:
    """Automaton for :class:`GridScenario` (see module docstring)."""

    def __init__(
        self,
        scenario: GridScenario,
        neighbourhood: NeighbourhoodKind,
        time_limit: float,
        reference_velocity: float,
    ) -> None:
        if time_limit <= 0:
            raise ValueError(f"time_limit must be positive, got {time_limit}")
        if reference_velocity <= 0:
            raise ValueError(f"reference_velocity must be positive, got {reference_velocity}")

        self.scenario = scenario
        self.time_limit = float(time_limit)
        self.reference_velocity = float(reference_velocity)
        self.manhattan = (
            neighbourhood == NeighbourhoodKind.VON_NEUMANN
            or scenario.floor_field != FloorFieldKind.DIJKSTRA_STATIC_MOORE
        )
        self.reset()

    def reset(self) -> None:
        self._occupied = np.zeros(len(self.scenario.cells), dtype=bool)
        self._positions = np.empty((0, 2))
        self._params = np.empty((0, 3))
        self._exit_times = np.empty(0)
        self._remaining = np.empty(0)
        self._done = False

    def add_pedestrians_uniformly(
        self, count: int, sampler: PedestrianSampler, rng: np.random.Generator
    ) -> None:
        free = np.flatnonzero(~self._occupied)
        n = min(int(count), len(free))
        if n <= 0:
            return
        chosen = rng.choice(free, size=n, replace=False)
        self._occupied[chosen] = True

        params = []
        for _ in range(n):
            p = sampler(rng)
            params.append([p.field_attraction_bias, p.crowd_repulsion, p.velocity_percent])

        self._positions = np.vstack([self._positions, self.scenario.cells[chosen]])
        self._params = np.vstack([self._params, np.asarray(params, dtype=np.float64)])
        self._done = False

    def _distances(self) -> np.ndarray:
        """(n_pedestrians, n_exits) distance from each pedestrian to each access."""
        exits = self.scenario.exits
        px = self._positions[:, 0:1]
        py = self._positions[:, 1:2]
        dx = np.abs(px - np.clip(px, exits[:, 0], exits[:, 2]))
        dy = np.abs(py - np.clip(py, exits[:, 1], exits[:, 3]))
        if self.manhattan:
            return dx + dy
        return np.hypot(dx, dy)

    def run(self) -> None:
        n = len(self._positions)
        exits = self.scenario.exits

        if n == 0:
            self._exit_times = np.empty(0)
            self._remaining = np.empty(0)
        elif len(exits) == 0:
            self._exit_times = np.full(n, np.inf)
            self._remaining = np.full(n, self.scenario.domain.diameter)
        else:
            bias, repulsion, velocity = self._params.T
            dist = self._distances()
            target = np.argmin(dist, axis=1)
            path = dist[np.arange(n), target] * (1.0 + 1.0 / (1.0 + bias))
            speed = self.reference_velocity * velocity
            arrival = path / speed

            lengths = self.scenario.exit_lengths
            service = (1.0 + repulsion) / (SPECIFIC_FLOW * lengths[target])

            exit_times = np.empty(n)
            for e in np.unique(target):
                queue = np.flatnonzero(target == e)
                queue = queue[np.argsort(arrival[queue], kind="stable")]
                released = 0.0
                for k in queue:
                    released = max(arrival[k], released) + service[k]
                    exit_times[k] = released

            self._exit_times = exit_times
            self._remaining = np.maximum(path - speed * self.time_limit, 0.0)

        self._done = True

    def _evacuated(self) -> np.ndarray:
        if not self._done:
            raise RuntimeError("simulation has not been run")
        return self._exit_times <= self.time_limit

    def number_of_non_evacuees(self) -> int:
        return int(np.count_nonzero(~self._evacuated()))

    def distances_to_closest_exit(self) -> list[float]:
        return self._remaining[~self._evacuated()].tolist()

    def evacuation_times(self) -> list[float]:
        return self._exit_times[self._evacuated()].tolist()


class StraightLineSimulator:
    """Simulator factory producing :class:`StraightLineAutomaton` instances."""

    def build_scenario(
        self, domain: Domain, cell_dimension: float, floor_field: FloorFieldKind
    ) -> GridScenario:
        return GridScenario(domain, cell_dimension, FloorFieldKind(floor_field))

    def build_automaton(
        self,
        scenario: GridScenario,
        neighbourhood: NeighbourhoodKind,
        time_limit: float,
        reference_velocity: float,
    ) -> StraightLineAutomaton:
        return StraightLineAutomaton(
            scenario, NeighbourhoodKind(neighbourhood), time_limit, reference_velocity
        )

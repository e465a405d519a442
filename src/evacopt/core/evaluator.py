"""Simulation evaluator: the interface between the simulator and optimizers.

Interface:
    SimulationEvaluator(domain, config).evaluate(accesses) -> fitness

Flow:
    1. Build a new Domain = fixed accesses + candidate accesses
    2. For run i: seed rng (config.seed, i), place a random crowd, run
    3. Summarize each run (SimulationSummary) and score it (run_fitness)
    4. Aggregate run scores (worst case or median)

The caller's Domain is never modified, so it holds exactly the fixed
accesses before and after every evaluation, whether or not the simulator
raised.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Sequence

import numpy as np

from ..simulator.interfaces import PedestrianParameters, Simulator
from .config import Aggregation, CrowdConfig, SimulationConfig
from .constants import ANALYSIS_SIMULATIONS
from .types import Access, Domain, EvalRecord, SimulationSummary

logger = logging.getLogger(__name__)


class EvaluationCancelled(RuntimeError):
    """Raised when an evaluation outlives its deadline or is cancelled."""


class Deadline:
    """Cancellation token checked between simulator runs.

    Args:
        seconds: Wall-clock budget from construction (None = unlimited).
        event: Optional event; setting it cancels the evaluation.
    """

    def __init__(self, seconds: float | None = None, event: threading.Event | None = None):
        self._expires = None if seconds is None else time.monotonic() + seconds
        self._event = event

    def cancel(self) -> None:
        if self._event is None:
            self._event = threading.Event()
        self._event.set()

    @property
    def expired(self) -> bool:
        if self._event is not None and self._event.is_set():
            return True
        return self._expires is not None and time.monotonic() >= self._expires

    def check(self) -> None:
        if self.expired:
            raise EvaluationCancelled("evaluation deadline exceeded or cancelled")


def run_fitness(summary: SimulationSummary, diameter: float, time_limit: float) -> float:
    """Score one simulation outcome (minimize).

    Any non-evacuee outweighs every complete evacuation: the count is at
    least 1 while the distance terms are normalized by the domain diameter.
    Complete evacuations are ranked by normalized last and mean exit times.
    """
    f = float(summary.non_evacuees)
    if f > 0:
        f += summary.min_distance / diameter + summary.mean_distance / diameter**2
    else:
        f += summary.max_time / time_limit + summary.mean_time / time_limit**2
    return f


def aggregate(run_scores: Sequence[float], policy: Aggregation) -> float:
    """Fold per-run scores into one fitness according to ``policy``."""
    if len(run_scores) == 0:
        raise ValueError("cannot aggregate an empty set of runs")
    scores = np.asarray(run_scores, dtype=np.float64)
    if policy == Aggregation.WORST:
        return float(scores.max())
    if policy == Aggregation.MEDIAN:
        return float(np.median(scores))
    raise ValueError(f"Unknown aggregation policy: {policy}")


def _sample(rng: np.random.Generator, low: float, high: float) -> float:
    """Draw from ``[low, high)``; a degenerate interval returns ``low``."""
    if low == high:
        return low
    return float(rng.uniform(low, high))


def pedestrian_sampler(crowd: CrowdConfig):
    """Build the per-pedestrian parameter sampler for a crowd configuration."""

    def sampler(rng: np.random.Generator) -> PedestrianParameters:
        return PedestrianParameters(
            field_attraction_bias=_sample(rng, *crowd.attraction_bias.as_tuple()),
            crowd_repulsion=_sample(rng, *crowd.crowd_repulsion.as_tuple()),
            velocity_percent=_sample(rng, *crowd.velocity_factor.as_tuple()),
        )

    return sampler


class SimulationEvaluator:
    """Turns a stochastic simulator into a scalar fitness for candidate exits.

    Args:
        domain: Domain with its fixed accesses.
        config: Simulation configuration.
        simulator: Simulator implementation (defaults to the in-process
            straight-line simulator).
    """

    def __init__(
        self,
        domain: Domain,
        config: SimulationConfig,
        simulator: Simulator | None = None,
    ) -> None:
        if simulator is None:
            from ..simulator.straight_line import StraightLineSimulator

            simulator = StraightLineSimulator()

        self.domain = domain
        self.config = config
        self.simulator = simulator
        self.diameter = domain.diameter
        self.time_limit = config.time_limit
        self._sampler = pedestrian_sampler(config.crowd)
        self._n_runs = 0

    @property
    def fixed_accesses(self) -> tuple[Access, ...]:
        return self.domain.accesses

    @property
    def num_simulations(self) -> int:
        return self.config.num_simulations

    @property
    def n_runs(self) -> int:
        """Total number of simulator runs performed."""
        return self._n_runs

    def simulate(
        self,
        accesses: Sequence[Access],
        num_simulations: int | None = None,
        deadline: Deadline | None = None,
    ) -> list[SimulationSummary]:
        """Run independent simulations with ``accesses`` added to the domain.

        Args:
            accesses: Candidate accesses (appended after the fixed ones).
            num_simulations: Number of runs (default: from config).
            deadline: Optional cancellation token, checked before each run.

        Returns:
            One SimulationSummary per run, in run order.
        """
        n = self.num_simulations if num_simulations is None else int(num_simulations)
        if n < 1:
            raise ValueError(f"num_simulations must be >= 1, got {n}")

        ca = self.config.simulator.cellular_automaton
        crowd = self.config.crowd
        domain = self.domain.with_accesses(accesses)

        scenario = self.simulator.build_scenario(domain, ca.cell_dimension, ca.floor_field)
        automaton = self.simulator.build_automaton(
            scenario,
            ca.neighborhood,
            self.time_limit,
            crowd.pedestrian_reference_velocity,
        )

        n_min, n_max = crowd.num_pedestrians.as_tuple()
        summaries: list[SimulationSummary] = []
        for i in range(n):
            if deadline is not None:
                deadline.check()

            # Same seed for run i of every candidate (common random numbers)
            rng = np.random.default_rng((self.config.seed, i))
            automaton.reset()
            count = int(rng.integers(int(n_min), int(n_max) + 1))
            automaton.add_pedestrians_uniformly(count, self._sampler, rng)
            automaton.run()
            self._n_runs += 1

            summaries.append(self._summarize(automaton))

        return summaries

    @staticmethod
    def _summarize(automaton) -> SimulationSummary:
        non_evacuees = automaton.number_of_non_evacuees()
        if non_evacuees > 0:
            distances = np.asarray(automaton.distances_to_closest_exit(), dtype=np.float64)
            return SimulationSummary(
                non_evacuees=float(non_evacuees),
                min_distance=float(distances.min()) if distances.size else 0.0,
                mean_distance=float(distances.mean()) if distances.size else 0.0,
            )
        times = np.asarray(automaton.evacuation_times(), dtype=np.float64)
        return SimulationSummary(
            non_evacuees=0.0,
            max_time=float(times.max()) if times.size else 0.0,
            mean_time=float(times.mean()) if times.size else 0.0,
        )

    def fitness(self, summary: SimulationSummary) -> float:
        """Score of a single run."""
        return run_fitness(summary, self.diameter, self.time_limit)

    def aggregate(self, summaries: Sequence[SimulationSummary]) -> float:
        """Candidate fitness from its run summaries (configured policy)."""
        return aggregate([self.fitness(s) for s in summaries], self.config.aggregation)

    def evaluate(
        self,
        accesses: Sequence[Access],
        num_simulations: int | None = None,
        deadline: Deadline | None = None,
    ) -> float:
        """Fitness (minimize) of the domain with ``accesses`` added."""
        return self.evaluate_record(accesses, num_simulations, deadline).fitness

    def evaluate_record(
        self,
        accesses: Sequence[Access],
        num_simulations: int | None = None,
        deadline: Deadline | None = None,
    ) -> EvalRecord:
        """Like :meth:`evaluate`, keeping per-run outcomes and timings."""
        t0 = time.perf_counter()
        summaries = self.simulate(accesses, num_simulations, deadline)
        scores = [self.fitness(s) for s in summaries]
        fitness = aggregate(scores, self.config.aggregation)
        t_total = time.perf_counter() - t0

        logger.debug(
            "evaluated %d accesses over %d runs: fitness=%.6g (%.1f ms)",
            len(accesses),
            len(summaries),
            fitness,
            t_total * 1000,
        )
        return EvalRecord(
            fitness=fitness,
            summaries=summaries,
            run_fitness=scores,
            diag={
                "aggregation": self.config.aggregation.value,
                "n_accesses": len(accesses),
                "timings": {"total_ms": t_total * 1000},
            },
        )

    def fitness_distribution(
        self,
        accesses: Sequence[Access],
        num_simulations: int = ANALYSIS_SIMULATIONS,
    ) -> np.ndarray:
        """Per-run scores of a solution over many runs, for offline analysis."""
        return np.array(
            [self.fitness(s) for s in self.simulate(accesses, num_simulations)],
            dtype=np.float64,
        )

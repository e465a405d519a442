"""Driver-agnostic objective for exit placement.

Exposes what generic search drivers need (``num_variables``,
``variable_bounds``, ``evaluate``) plus ``decode`` so a reported solution
can be re-simulated at a higher sample count.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from .cache import EvalCache
from .config import ExitPlacementSettings
from .encoding import bounds, decode_solution, to_locations
from .evaluator import Deadline, SimulationEvaluator
from .perimeter import AccessDecoder
from .types import Access

logger = logging.getLogger(__name__)


@dataclass
class SimulationBudget:
    """Computational budget measured in candidate evaluations.

    Attributes:
        evaluations: Objective calls (cache hits included, as a driver sees them).
        extra: Candidate evaluations performed inside greedy operators.
    """

    evaluations: int = 0
    extra: float = 0.0

    def charge(self, cost: float) -> None:
        self.extra += cost

    @property
    def total(self) -> float:
        return self.evaluations + self.extra


@dataclass
class SearchResult:
    """Outcome of one search driver run.

    Attributes:
        x: Best genome found (fractions of the perimeter).
        fitness: Fitness of ``x`` (minimize).
        budget: Budget consumed by the run.
        history: Per-iteration records (driver specific).
    """

    x: np.ndarray
    fitness: float
    budget: SimulationBudget
    history: list[dict] = field(default_factory=list)


class ExitPlacementObjective:
    """Fitness of a genome of ``num_exits`` perimeter fractions.

    Args:
        evaluator: Simulation evaluator bound to the domain.
        settings: Number of exits, exit width and location precision.
        cache: Fitness cache (a fresh unbounded cache by default).
    """

    def __init__(
        self,
        evaluator: SimulationEvaluator,
        settings: ExitPlacementSettings,
        cache: EvalCache | None = None,
    ) -> None:
        self.evaluator = evaluator
        self.settings = settings
        self.decoder = AccessDecoder(evaluator.domain, settings.exit_width)
        if cache is None:
            cache = EvalCache(self.decoder.perimeter_length, settings.exit_precision)
        self.cache = cache
        self.budget = SimulationBudget()

    @property
    def num_variables(self) -> int:
        return self.settings.num_exits

    @property
    def variable_bounds(self) -> tuple[np.ndarray, np.ndarray]:
        return bounds(self.num_variables)

    @property
    def perimeter_length(self) -> float:
        return self.decoder.perimeter_length

    def _check(self, x: np.ndarray | Sequence[float]) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        if x.shape != (self.num_variables,):
            raise ValueError(f"Expected {self.num_variables} variables, got shape {x.shape}")
        return x

    def locations(self, x: np.ndarray | Sequence[float]) -> list[float]:
        """Quantized perimeter locations of a genome."""
        return to_locations(self._check(x), self.perimeter_length, self.settings.exit_precision)

    def decode(self, x: np.ndarray | Sequence[float]) -> list[Access]:
        """Accesses encoded by a genome."""
        return decode_solution(self._check(x), self.decoder, self.settings.exit_precision)

    def evaluate(self, x: np.ndarray | Sequence[float], deadline: Deadline | None = None) -> float:
        """Fitness of a genome, memoized on its order-independent form."""
        x = self._check(x)
        self.budget.evaluations += 1

        cached = self.cache.get(x)
        if cached is not None:
            logger.debug("cache hit for %s", self.cache.key(x).locations)
            return cached

        fitness = self.evaluator.evaluate(self.decode(x), deadline=deadline)
        self.cache.put(x, fitness)
        return fitness

"""Greedy ring-search exit placement.

Each new exit is placed at the best of ``numpos = ceil(P / w)`` equally
spaced perimeter positions ``pos0, pos0 + 1/numpos, ...`` (mod 1), where
``pos0`` is drawn uniformly at random. Every position is scored with the
simulation evaluator given the exits already placed, so one decision
costs ``numpos`` candidate evaluations.

Positions are returned as fractions of the perimeter length, the same
encoding the search drivers use.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

import numpy as np

from ..core.constants import EXIT_PRECISION
from ..core.encoding import quantize_location
from ..core.evaluator import Deadline, SimulationEvaluator
from ..core.perimeter import AccessDecoder
from ..core.types import Access

logger = logging.getLogger(__name__)


class GreedyPlacement:
    """Constructive/repair heuristic placing exits one at a time.

    Args:
        evaluator: Simulation evaluator for the domain.
        exit_width: Width of each new exit (perimeter units).
        rng: Random source for the ring phase.
        precision: Location granularity in perimeter units; candidates are
            decoded at the same rounding the objective uses.
    """

    def __init__(
        self,
        evaluator: SimulationEvaluator,
        exit_width: float,
        rng: np.random.Generator | None = None,
        precision: float = EXIT_PRECISION,
    ) -> None:
        self.evaluator = evaluator
        self.decoder = AccessDecoder(evaluator.domain, exit_width)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.perimeter_length = self.decoder.perimeter_length
        self.precision = precision
        self.numpos = math.ceil(self.perimeter_length / exit_width)
        self.inc = 1.0 / self.numpos
        self.n_evals = 0

    @property
    def cost_per_decision(self) -> int:
        """Candidate evaluations spent on one placement decision."""
        return self.numpos

    def ring(self, pos0: float | None = None) -> np.ndarray:
        """Candidate positions of one ring scan."""
        if pos0 is None:
            pos0 = float(self.rng.random())
        return np.mod(pos0 + np.arange(self.numpos) * self.inc, 1.0)

    def location(self, pos: float) -> float:
        """Perimeter location of an encoded position, rounded to ``precision``."""
        return quantize_location(pos, self.perimeter_length, self.precision)

    def to_accesses(self, positions: Iterable[float]) -> list[Access]:
        """Accesses for encoded positions; exit ``i`` is labelled ``i``."""
        return self.decoder.decode_locations([self.location(p) for p in positions])

    def _extend(self, accesses: list[Access], pos: float, label: int) -> None:
        accesses.extend(self.decoder.decode_access(self.location(pos), label, len(accesses)))

    def _score(
        self, current: Sequence[Access], pos: float, label: int, deadline: Deadline | None
    ) -> float:
        candidate = self.decoder.decode_access(self.location(pos), label, len(current))
        self.n_evals += 1
        return self.evaluator.evaluate(list(current) + candidate, deadline=deadline)

    def place_next(
        self,
        current: Sequence[Access],
        deadline: Deadline | None = None,
        label: int | None = None,
    ) -> float:
        """Best position for one more exit given the accesses already placed.

        ``label`` is the new exit's index; by default it is one past the
        highest exit label already in ``current``.
        """
        if label is None:
            label = len({a.name.rsplit("-", 1)[0] for a in current})
        best = math.inf
        best_pos = -1.0
        for pos in self.ring():
            quality = self._score(current, float(pos), label, deadline)
            if quality < best:
                best = quality
                best_pos = float(pos)
                logger.debug("new best: %.6f (%.6g)", best_pos, best)

        logger.info("placed exit %d at %.6f (fitness %.6g)", label, best_pos, best)
        return best_pos

    def place_next_from(
        self, positions: Sequence[float], deadline: Deadline | None = None
    ) -> float:
        """Best position for one more exit given encoded retained exits."""
        return self.place_next(self.to_accesses(positions), deadline, label=len(positions))

    def place_all(self, num_exits: int, deadline: Deadline | None = None) -> list[float]:
        """Place ``num_exits`` exits sequentially, without backtracking."""
        positions: list[float] = []
        accesses: list[Access] = []
        for i in range(num_exits):
            pos = self.place_next(accesses, deadline, label=i)
            self._extend(accesses, pos, i)
            positions.append(pos)
        return positions

    def select_from(
        self,
        num_exits: int,
        candidates: Iterable[float],
        deadline: Deadline | None = None,
    ) -> list[float]:
        """Greedily choose ``num_exits`` positions out of a finite pool.

        At step ``i`` every remaining candidate is scored together with the
        ``i`` positions already chosen; the pool shrinks by one per step.
        """
        pool = sorted(set(float(c) for c in candidates))
        if len(pool) < num_exits:
            raise ValueError(
                f"need at least {num_exits} distinct candidates, got {len(pool)}"
            )

        chosen: list[float] = []
        accesses: list[Access] = []
        for label in range(num_exits):
            best = math.inf
            best_pos = pool[0]
            for pos in pool:
                quality = self._score(accesses, pos, label, deadline)
                if quality < best:
                    best = quality
                    best_pos = pos
            pool.remove(best_pos)
            self._extend(accesses, best_pos, label)
            chosen.append(best_pos)
        return chosen

    @staticmethod
    def selection_cost(pool_size: int, num_exits: int) -> int:
        """Candidate evaluations spent by :meth:`select_from`."""
        return sum(pool_size - i for i in range(num_exits))

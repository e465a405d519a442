"""Population diversity for sets of circular locations.

A genome is treated as a set of points on a circle of circumference
``range``. The distance from set A to set B sums, over every point of A,
the circular distance to its nearest point in B. Population diversity is
the mean of that distance over all ordered pairs of distinct individuals.
"""

from __future__ import annotations

import builtins
import logging

import numpy as np
from pymoo.core.callback import Callback

logger = logging.getLogger(__name__)


def circular_set_distance(a: np.ndarray, b: np.ndarray, range: float = 1.0) -> float:
    """Sum over ``a`` of the circular distance to the closest point of ``b``."""
    a = np.mod(np.asarray(a, dtype=np.float64), range)
    b = np.mod(np.asarray(b, dtype=np.float64), range)
    diff = np.abs(a[:, None] - b[None, :])
    circ = np.minimum(diff, range - diff)
    return float(np.sum(np.min(circ, axis=1)))


def circular_set_diversity(X: np.ndarray, range: float = 1.0) -> float:
    """Mean directed set distance over ordered pairs of a population.

    Args:
        X: Population matrix of shape (mu, n_var).
        range: Circumference of the circular coordinate.

    Returns:
        Diversity value; 0.0 for fewer than two individuals.
    """
    X = np.atleast_2d(np.asarray(X, dtype=np.float64))
    mu = X.shape[0]
    if mu < 2:
        return 0.0

    total = 0.0
    for i in builtins.range(mu):
        for j in builtins.range(mu):
            if i != j:
                total += circular_set_distance(X[i], X[j], range)
    return total / (mu * (mu - 1))


class DiversityCallback(Callback):
    """Record best fitness and population diversity after each generation."""

    def __init__(self, range: float = 1.0) -> None:
        super().__init__()
        self.range = range
        self.history: list[dict] = []

    def notify(self, algorithm):
        pop = algorithm.pop
        F = pop.get("F")
        X = pop.get("X")

        row = {
            "gen": algorithm.n_gen,
            "best": float(np.min(F[:, 0])),
            "diversity": circular_set_diversity(X, self.range),
        }
        self.history.append(row)
        logger.debug(
            "gen %d: best %.6g, diversity %.4f", row["gen"], row["best"], row["diversity"]
        )

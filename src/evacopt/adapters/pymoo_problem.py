"""PyMoo adapter for single-objective exit placement.

This module wraps ``ExitPlacementObjective.evaluate`` for use with pymoo.
"""

from __future__ import annotations

import numpy as np
from pymoo.core.problem import Problem

from ..core.encoding import wrap
from ..core.objective import ExitPlacementObjective, SimulationBudget


class ExitPlacementProblem(Problem):
    """PyMoo Problem wrapper for exit placement.

    Uses ExitPlacementObjective.evaluate (cached) as the underlying
    evaluation function. Genes are wrapped into [0, 1) before evaluation,
    since the perimeter coordinate is circular.
    """

    def __init__(self, objective: ExitPlacementObjective, **kwargs) -> None:
        """Initialize problem.

        Args:
            objective: Exit placement objective (evaluator, cache, budget).
            **kwargs: Additional arguments passed to pymoo Problem.
        """
        xl, xu = objective.variable_bounds

        super().__init__(
            n_var=objective.num_variables,
            n_obj=1,
            n_ieq_constr=0,
            xl=xl,
            xu=xu,
            **kwargs,
        )

        self.objective = objective

    def _evaluate(
        self,
        X: np.ndarray,
        out: dict,
        *args,
        **kwargs,
    ) -> None:
        """Evaluate population.

        Args:
            X: Decision matrix of shape (pop_size, n_var).
            out: Output dict for F.
        """
        X = np.atleast_2d(X)
        F = np.zeros((X.shape[0], 1), dtype=np.float64)

        for i, x in enumerate(X):
            F[i, 0] = self.objective.evaluate(wrap(x))

        out["F"] = F

    @property
    def budget(self) -> SimulationBudget:
        return self.objective.budget

    @property
    def n_evals(self) -> int:
        """Total number of objective calls performed."""
        return self.objective.budget.evaluations

"""Termination on the simulation budget rather than on generations."""

from __future__ import annotations

from pymoo.core.termination import Termination

from ..core.objective import SimulationBudget


class SimulationBudgetTermination(Termination):
    """Stop once ``budget.total`` reaches ``max_evals``.

    The budget counts objective calls plus the candidate evaluations
    performed inside greedy operators, so runs with and without greedy
    operators are compared at equal simulation cost.
    """

    def __init__(self, budget: SimulationBudget, max_evals: float) -> None:
        super().__init__()
        if max_evals <= 0:
            raise ValueError(f"max_evals must be positive, got {max_evals}")
        self.budget = budget
        self.max_evals = max_evals

    def _update(self, algorithm):
        return self.budget.total / self.max_evals

"""Repeated greedy construction as a standalone search driver."""

from __future__ import annotations

import logging

import numpy as np

from ..core.objective import ExitPlacementObjective, SearchResult
from .placement import GreedyPlacement

logger = logging.getLogger(__name__)


def run_greedy(
    objective: ExitPlacementObjective,
    greedy: GreedyPlacement,
    max_evals: int,
) -> SearchResult:
    """Build greedy solutions from random ring offsets until the budget is spent.

    One construction costs ``num_exits * numpos`` candidate evaluations: the
    ring scans are charged to the budget, less the final objective call that
    scores the finished solution. At least one solution is always built.
    """
    budget = objective.budget
    n = objective.num_variables
    limit = budget.total + max_evals

    best_x = None
    best_f = np.inf
    history = []

    logger.info("greedy: %d exits, %d per solution, budget %d", n, n * greedy.numpos, max_evals)
    while best_x is None or budget.total < limit:
        x = np.asarray(greedy.place_all(n))
        budget.charge(n * greedy.cost_per_decision - 1)
        f = objective.evaluate(x)
        if f < best_f:
            best_f, best_x = f, x
        history.append({"solution": len(history), "fitness": f, "evals": budget.total})

    logger.info("greedy done: best %.6g from %d solutions", best_f, len(history))
    return SearchResult(x=best_x, fitness=float(best_f), budget=budget, history=history)

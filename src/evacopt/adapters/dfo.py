"""Derivative-free local search drivers with random restarts.

Interface:
    run_nelder_mead(objective, max_evals, seed) -> SearchResult
    run_hooke_jeeves(objective, max_evals, seed) -> SearchResult

Flow:
    1. Draw a random start in [0, 1)^n
    2. Run the local method until it converges or the budget is spent
    3. Restart from a new random point while budget remains
    4. Return the best genome seen over all restarts

Variables are not bounded: genes are wrapped into [0, 1) before every
evaluation, so the search space is a torus.
"""

from __future__ import annotations

import logging

import numpy as np
from pymoo.algorithms.soo.nonconvex.pattern import PatternSearch
from pymoo.optimize import minimize as pymoo_minimize
from pymoo.termination.collection import TerminationCollection
from pymoo.termination.default import DefaultSingleObjectiveTermination
from scipy.optimize import minimize

from ..core.encoding import random_solution, wrap
from ..core.objective import ExitPlacementObjective, SearchResult
from .pymoo_problem import ExitPlacementProblem
from .termination import SimulationBudgetTermination

logger = logging.getLogger(__name__)


class _BudgetExhausted(Exception):
    pass


def _xtol(objective: ExitPlacementObjective) -> float:
    # Genes closer than the location precision decode to the same exits
    return objective.settings.exit_precision / objective.perimeter_length


def run_nelder_mead(
    objective: ExitPlacementObjective,
    max_evals: int,
    seed: int | None = None,
    initial_step: float = 0.1,
    fatol: float = 1e-9,
) -> SearchResult:
    """Iterated Nelder-Mead on the circular genome.

    Args:
        objective: Exit placement objective.
        max_evals: Objective calls allowed over all restarts.
        seed: Seed for the restart points.
        initial_step: Edge length of the initial simplex (fraction of P).
        fatol: Absolute fitness tolerance for convergence.

    Returns:
        SearchResult with the best genome and per-restart history.
    """
    rng = np.random.default_rng(seed)
    budget = objective.budget
    n = objective.num_variables
    start = budget.total

    best_x = None
    best_f = np.inf

    def fun(x):
        nonlocal best_x, best_f
        if budget.total - start >= max_evals:
            raise _BudgetExhausted
        x = wrap(x)
        f = objective.evaluate(x)
        if f < best_f:
            best_f, best_x = f, x
        return f

    logger.info("Nelder-Mead: %d variables, budget %d", n, max_evals)
    history = []
    while budget.total - start < max_evals:
        x0 = random_solution(n, rng)
        simplex = np.vstack([x0, x0 + initial_step * np.eye(n)])
        try:
            res = minimize(
                fun,
                x0,
                method="Nelder-Mead",
                options={
                    "initial_simplex": simplex,
                    "xatol": _xtol(objective),
                    "fatol": fatol,
                    "maxfev": max_evals,
                    "disp": False,
                },
            )
            message = str(res.message)
        except _BudgetExhausted:
            message = "budget exhausted"

        history.append({"restart": len(history), "best": best_f, "evals": budget.total - start})
        logger.debug("restart %d: %s (best %.6g)", len(history) - 1, message, best_f)

    logger.info("Nelder-Mead done: best %.6g after %d restarts", best_f, len(history))
    return SearchResult(x=best_x, fitness=float(best_f), budget=budget, history=history)


def run_hooke_jeeves(
    objective: ExitPlacementObjective,
    max_evals: int,
    seed: int | None = None,
    init_delta: float = 0.25,
    period: int = 20,
) -> SearchResult:
    """Iterated Hooke-Jeeves pattern search (pymoo ``PatternSearch``).

    Each restart ends when the pattern stops moving (design-space and
    objective tolerances over ``period`` iterations) or the simulation
    budget is spent. The budget is checked once per iteration, so the
    last iteration may overrun it slightly.

    Args:
        objective: Exit placement objective.
        max_evals: Budget (simulation units) allowed over all restarts.
        seed: Seed for restart points and pymoo.
        init_delta: Initial pattern step (fraction of the variable range).
        period: Iterations without progress before a restart.

    Returns:
        SearchResult with the best genome and per-restart history.
    """
    rng = np.random.default_rng(seed)
    problem = ExitPlacementProblem(objective)
    budget = objective.budget
    limit = budget.total + max_evals

    best_x = None
    best_f = np.inf
    history = []

    logger.info("Hooke-Jeeves: %d variables, budget %d", problem.n_var, max_evals)
    while budget.total < limit:
        x0 = random_solution(problem.n_var, rng)
        algorithm = PatternSearch(x0=x0, init_delta=init_delta)
        termination = TerminationCollection(
            SimulationBudgetTermination(budget, limit),
            DefaultSingleObjectiveTermination(xtol=_xtol(objective), ftol=1e-9, period=period),
        )
        res = pymoo_minimize(
            problem,
            algorithm,
            termination,
            seed=int(rng.integers(2**31)),
            copy_algorithm=False,
            copy_termination=False,
            verbose=False,
        )

        if res.F is not None and float(res.F[0]) < best_f:
            best_f = float(res.F[0])
            best_x = wrap(res.X)

        history.append({"restart": len(history), "best": best_f, "evals": budget.total})
        logger.debug("restart %d: best %.6g", len(history) - 1, best_f)

    logger.info("Hooke-Jeeves done: best %.6g after %d restarts", best_f, len(history))
    return SearchResult(x=best_x, fitness=float(best_f), budget=budget, history=history)

"""Steady evolutionary search with greedy operators (pymoo ``GA``).

Interface:
    run_ga(objective, greedy, max_evals, ...) -> SearchResult

The initial population, recombination and mutation each use the greedy
ring search with a configurable probability. Termination is on the
simulation budget, which includes the greedy operators' hidden cost.
"""

from __future__ import annotations

import logging

import numpy as np
from pymoo.algorithms.soo.nonconvex.ga import GA
from pymoo.optimize import minimize

from ..core.encoding import wrap
from ..core.objective import ExitPlacementObjective, SearchResult
from ..greedy.placement import GreedyPlacement
from .diversity import DiversityCallback
from .pymoo_operators import GreedyOperators
from .pymoo_problem import ExitPlacementProblem
from .termination import SimulationBudgetTermination

logger = logging.getLogger(__name__)


def run_ga(
    objective: ExitPlacementObjective,
    greedy: GreedyPlacement,
    max_evals: int,
    pop_size: int = 10,
    n_offsprings: int | None = None,
    p_init: float = 0.0,
    p_recombination: float = 0.0,
    p_mutation: float = 0.0,
    num_exits_mutated: int = 1,
    sigma: float = 0.05,
    macro: bool = False,
    seed: int = 1,
) -> SearchResult:
    """Run a genetic algorithm with greedy variation operators.

    Args:
        objective: Exit placement objective (its budget is shared).
        greedy: Greedy engine used by the operators.
        max_evals: Simulation budget for the whole run.
        pop_size: Population size.
        n_offsprings: Offspring per generation (default: ``pop_size``).
        p_init: Probability of greedy construction for each initial individual.
        p_recombination: Probability of greedy recombination.
        p_mutation: Probability of greedy mutation (or macro-mutation).
        num_exits_mutated: Exits re-placed by greedy mutation (<= 0: all).
        sigma: Standard deviation of the Gaussian fallback mutation.
        macro: Use greedy macro-mutation instead of greedy mutation.
        seed: Random seed for pymoo and the operators.

    Returns:
        SearchResult with the best genome and per-generation diversity history.
    """
    problem = ExitPlacementProblem(objective)
    budget = objective.budget
    ops = GreedyOperators(greedy, budget, np.random.default_rng(seed))

    if macro:
        mutation = ops.macro_mutation(p_mutation, sigma)
    else:
        mutation = ops.mutation(p_mutation, num_exits_mutated, sigma)

    algorithm = GA(
        pop_size=pop_size,
        n_offsprings=n_offsprings,
        sampling=ops.sampling(p_init),
        crossover=ops.recombination(p_recombination),
        mutation=mutation,
        eliminate_duplicates=False,
    )
    callback = DiversityCallback()
    termination = SimulationBudgetTermination(budget, budget.total + max_evals)

    logger.info(
        "GA: pop=%d, budget=%d, greedy p=(%.2f, %.2f, %.2f)",
        pop_size,
        max_evals,
        p_init,
        p_recombination,
        p_mutation,
    )
    # Operators and termination share the objective's budget: no copies
    res = minimize(
        problem,
        algorithm,
        termination,
        seed=seed,
        callback=callback,
        copy_algorithm=False,
        copy_termination=False,
        verbose=False,
    )

    x = wrap(res.X)
    fitness = float(res.F[0])
    logger.info("GA done: best %.6g after %d generations", fitness, res.algorithm.n_gen)
    return SearchResult(x=x, fitness=fitness, budget=budget, history=callback.history)

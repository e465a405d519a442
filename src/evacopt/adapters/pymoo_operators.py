"""Greedy variation operators for pymoo.

Each operator applies the greedy ring search with some probability and a
conventional operator otherwise. Operators get the greedy engine and the
simulation budget from a ``GreedyOperators`` provider at construction;
they never inspect the pymoo problem to find them.

Cost accounting: the candidate evaluations hidden inside a greedy step
are charged to the budget, less the one evaluation the driver then
spends on the resulting individual.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from pymoo.core.crossover import Crossover
from pymoo.core.mutation import Mutation
from pymoo.core.sampling import Sampling

from ..core.encoding import wrap
from ..core.objective import SimulationBudget
from ..greedy.placement import GreedyPlacement

logger = logging.getLogger(__name__)


@dataclass
class GreedyOperators:
    """Provider of problem-specific operators for a generic search framework.

    Attributes:
        greedy: Greedy placement engine bound to the evaluator.
        budget: Budget charged with the greedy's hidden evaluations.
        rng: Random source for operator decisions.
    """

    greedy: GreedyPlacement
    budget: SimulationBudget
    rng: np.random.Generator

    def sampling(self, prob: float) -> GreedySampling:
        return GreedySampling(self, prob)

    def mutation(self, prob: float, num_exits_mutated: int = 1, sigma: float = 0.05) -> GreedyMutation:
        return GreedyMutation(self, prob, num_exits_mutated, sigma)

    def recombination(self, prob: float, n_parents: int = 2) -> GreedyRecombination:
        return GreedyRecombination(self, prob, n_parents)

    def macro_mutation(self, prob: float, sigma: float = 0.05) -> GreedyMacroMutation:
        return GreedyMacroMutation(self, prob, sigma)

    # Shared helpers --------------------------------------------------------

    def gaussian(self, x: np.ndarray, sigma: float) -> np.ndarray:
        """Gaussian perturbation of every gene, wrapped around [0, 1)."""
        return wrap(x + self.rng.normal(0.0, sigma, size=len(x)))

    def pool(self, genes: np.ndarray, size: int) -> list[float]:
        """Distinct genes, topped up with random ones to at least ``size``."""
        pool = {float(g) for g in wrap(np.ravel(genes))}
        while len(pool) < size:
            pool.add(float(self.rng.random()))
        return sorted(pool)

    def greedy_select(self, genes: np.ndarray, size: int) -> np.ndarray:
        pool = self.pool(genes, size)
        logger.debug("greedy selection of %d from %d candidates", size, len(pool))
        self.budget.charge(GreedyPlacement.selection_cost(len(pool), size) - 1)
        return np.asarray(self.greedy.select_from(size, pool))


class GreedySampling(Sampling):
    """Greedy construction with probability ``prob``, else uniform random."""

    def __init__(self, provider: GreedyOperators, prob: float) -> None:
        super().__init__()
        self.provider = provider
        self.prob = prob

    def _do(self, problem, n_samples, **kwargs):
        p = self.provider
        X = np.empty((n_samples, problem.n_var))
        for i in range(n_samples):
            if p.rng.random() < self.prob:
                X[i] = p.greedy.place_all(problem.n_var)
                p.budget.charge(problem.n_var * p.greedy.cost_per_decision - 1)
            else:
                X[i] = p.rng.random(problem.n_var)
        return X

    def __repr__(self) -> str:
        return f"GreedySampling({self.prob})"


class GreedyMutation(Mutation):
    """Re-place ``k`` randomly chosen exits greedily, else Gaussian mutation.

    ``num_exits_mutated <= 0`` re-places every exit.
    """

    def __init__(
        self,
        provider: GreedyOperators,
        prob: float,
        num_exits_mutated: int = 1,
        sigma: float = 0.05,
    ) -> None:
        super().__init__(prob=1.0)
        self.provider = provider
        self.greedy_prob = prob
        self.num_exits_mutated = num_exits_mutated
        self.sigma = sigma

    def _do(self, problem, X, **kwargs):
        p = self.provider
        Xp = np.array(X, dtype=np.float64, copy=True)
        n_var = Xp.shape[1]
        num = n_var if self.num_exits_mutated <= 0 else min(self.num_exits_mutated, n_var)

        for i, x in enumerate(Xp):
            if p.rng.random() < self.greedy_prob:
                order = p.rng.permutation(n_var)
                kept = [float(g) for g in wrap(x[order[num:]])]
                for _ in range(num):
                    kept.append(p.greedy.place_next_from(kept))
                Xp[i] = kept
                p.budget.charge(num * p.greedy.cost_per_decision - 1)
            else:
                Xp[i] = p.gaussian(x, self.sigma)
        return Xp

    def __repr__(self) -> str:
        return f"GreedyMutation({self.greedy_prob}, {self.num_exits_mutated}, {self.sigma})"


class GreedyRecombination(Crossover):
    """Greedy down-selection from the union of parent exits.

    With probability ``prob`` the child is built by greedily choosing
    ``n_var`` positions among all parents' genes; otherwise ``n_var``
    of them are drawn at random without replacement.
    """

    def __init__(self, provider: GreedyOperators, prob: float, n_parents: int = 2) -> None:
        super().__init__(n_parents=n_parents, n_offsprings=1, prob=1.0)
        self.provider = provider
        self.greedy_prob = prob

    def _do(self, problem, X, **kwargs):
        p = self.provider
        _, n_matings, n_var = X.shape
        Y = np.empty((1, n_matings, n_var))

        for k in range(n_matings):
            genes = X[:, k, :]
            if p.rng.random() < self.greedy_prob:
                Y[0, k] = p.greedy_select(genes, n_var)
            else:
                pool = p.pool(genes, n_var)
                Y[0, k] = p.rng.choice(pool, size=n_var, replace=False)
        return Y

    def __repr__(self) -> str:
        return f"GreedyRecombination({self.greedy_prob}, {self.n_parents})"


class GreedyMacroMutation(Mutation):
    """Greedy recombination with a fresh random solution, else Gaussian mutation."""

    def __init__(self, provider: GreedyOperators, prob: float, sigma: float = 0.05) -> None:
        super().__init__(prob=1.0)
        self.provider = provider
        self.greedy_prob = prob
        self.sigma = sigma

    def _do(self, problem, X, **kwargs):
        p = self.provider
        Xp = np.array(X, dtype=np.float64, copy=True)
        n_var = Xp.shape[1]

        for i, x in enumerate(Xp):
            if p.rng.random() < self.greedy_prob:
                immigrant = p.rng.random(n_var)
                Xp[i] = p.greedy_select(np.concatenate([x, immigrant]), n_var)
            else:
                Xp[i] = p.gaussian(x, self.sigma)
        return Xp

    def __repr__(self) -> str:
        return f"GreedyMacroMutation({self.greedy_prob}, {self.sigma})"

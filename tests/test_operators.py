"""Tests for the greedy pymoo operators and budget termination."""

import numpy as np
import pytest

from evacopt.adapters.pymoo_operators import GreedyOperators
from evacopt.adapters.pymoo_problem import ExitPlacementProblem
from evacopt.adapters.termination import SimulationBudgetTermination
from evacopt.greedy.placement import GreedyPlacement


@pytest.fixture
def problem(objective):
    return ExitPlacementProblem(objective)


@pytest.fixture
def ops(greedy, objective):
    return GreedyOperators(greedy, objective.budget, np.random.default_rng(11))


@pytest.fixture
def parents():
    return np.array([[0.05, 0.30], [0.55, 0.80], [0.15, 0.65]])


def test_problem_evaluates_population(problem, objective):
    out = {}
    problem._evaluate(np.array([[0.1, 0.6], [1.1, 0.6]]), out)

    assert out["F"].shape == (2, 1)
    # 1.1 wraps onto 0.1
    assert out["F"][0, 0] == out["F"][1, 0]
    assert problem.n_evals == 2
    assert problem.budget is objective.budget


def test_greedy_sampling(problem, ops, greedy):
    X = ops.sampling(1.0)._do(problem, 3)

    assert X.shape == (3, 2)
    assert np.all((X >= 0.0) & (X < 1.0))
    assert greedy.n_evals == 3 * 2 * greedy.numpos
    assert ops.budget.extra == 3 * (2 * greedy.numpos - 1)


def test_random_sampling_costs_nothing(problem, ops, greedy):
    X = ops.sampling(0.0)._do(problem, 4)

    assert X.shape == (4, 2)
    assert greedy.n_evals == 0
    assert ops.budget.extra == 0


def test_greedy_mutation_keeps_other_exits(problem, ops, greedy, parents):
    Xp = ops.mutation(1.0, num_exits_mutated=1)._do(problem, parents)

    assert Xp.shape == parents.shape
    for child, parent in zip(Xp, parents):
        assert child[0] in parent
    assert greedy.n_evals == 3 * greedy.numpos
    assert ops.budget.extra == 3 * (greedy.numpos - 1)


def test_greedy_mutation_all_exits(problem, ops, greedy, parents):
    ops.mutation(1.0, num_exits_mutated=0)._do(problem, parents)
    assert greedy.n_evals == 3 * 2 * greedy.numpos


def test_gaussian_mutation_fallback(problem, ops, greedy, parents):
    Xp = ops.mutation(0.0, sigma=0.05)._do(problem, parents)

    assert Xp.shape == parents.shape
    assert np.all((Xp >= 0.0) & (Xp < 1.0))
    assert not np.array_equal(Xp, parents)
    assert greedy.n_evals == 0


def test_greedy_recombination(problem, ops, greedy, parents):
    X = np.stack([parents, parents[::-1]])  # (n_parents, n_matings, n_var)

    Y = ops.recombination(1.0)._do(problem, X)

    assert Y.shape == (1, 3, 2)
    for k in range(3):
        assert set(Y[0, k]) <= set(X[:, k, :].ravel())
        assert len(set(Y[0, k])) == 2
    assert ops.budget.extra == sum(
        GreedyPlacement.selection_cost(len(set(X[:, k, :].ravel())), 2) - 1 for k in range(3)
    )


def test_random_set_recombination(problem, ops, greedy, parents):
    X = np.stack([parents, parents[::-1]])

    Y = ops.recombination(0.0)._do(problem, X)

    for k in range(3):
        assert set(Y[0, k]) <= set(X[:, k, :].ravel())
        assert len(set(Y[0, k])) == 2
    assert greedy.n_evals == 0


def test_recombination_of_identical_parents(problem, ops):
    X = np.stack([np.array([[0.2, 0.2]]), np.array([[0.2, 0.2]])])

    Y = ops.recombination(1.0)._do(problem, X)

    assert Y.shape == (1, 1, 2)
    assert len(set(Y[0, 0])) == 2


def test_macro_mutation(problem, ops, greedy, parents):
    Xp = ops.macro_mutation(1.0)._do(problem, parents)

    assert Xp.shape == parents.shape
    assert np.all((Xp >= 0.0) & (Xp < 1.0))
    assert ops.budget.extra == 3 * (GreedyPlacement.selection_cost(4, 2) - 1)


def test_budget_termination(objective):
    class _Algorithm:
        pass

    termination = SimulationBudgetTermination(objective.budget, 10)
    assert not termination.has_terminated()

    objective.budget.evaluations = 4
    objective.budget.charge(6)
    termination.update(_Algorithm())
    assert termination.has_terminated()

    with pytest.raises(ValueError):
        SimulationBudgetTermination(objective.budget, 0)

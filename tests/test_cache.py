"""Tests for the evaluation cache and the cached objective."""

import numpy as np
import pytest

from evacopt.core.cache import EvalCache, make_cache_key
from evacopt.core.evaluator import SimulationEvaluator
from evacopt.core.objective import ExitPlacementObjective


def test_key_ignores_gene_order():
    assert make_cache_key([0.1, 0.5, 0.8], 30.0) == make_cache_key([0.8, 0.1, 0.5], 30.0)
    assert make_cache_key([0.1, 0.5], 30.0) != make_cache_key([0.1, 0.6], 30.0)


def test_key_quantizes_locations():
    # 0.001 perimeter units apart: below the 0.1 location precision
    assert make_cache_key([0.5], 30.0) == make_cache_key([0.5 + 0.001 / 30.0], 30.0)
    assert make_cache_key([0.0], 30.0) == make_cache_key([1.0], 30.0)


def test_cache_get_put_clear():
    cache = EvalCache(30.0)
    assert cache.get([0.2, 0.4]) is None

    cache.put([0.2, 0.4], 1.5)
    assert cache.get([0.4, 0.2]) == 1.5
    assert len(cache) == 1
    assert cache.stats == {"hits": 1, "misses": 1, "size": 1}

    cache.clear()
    assert len(cache) == 0
    assert cache.stats["hits"] == 0


def test_permutations_simulated_once(domain, config, settings, counting_simulator):
    evaluator = SimulationEvaluator(domain, config, simulator=counting_simulator)
    objective = ExitPlacementObjective(evaluator, settings)

    f1 = objective.evaluate(np.array([0.2, 0.7]))
    f2 = objective.evaluate(np.array([0.7, 0.2]))

    assert f1 == f2
    assert counting_simulator.n_scenarios == 1
    assert objective.budget.evaluations == 2
    assert objective.cache.stats["hits"] == 1


def test_objective_rejects_wrong_length(objective):
    with pytest.raises(ValueError):
        objective.evaluate(np.array([0.1, 0.2, 0.3]))


def test_objective_decode(objective):
    accesses = objective.decode([0.0, 0.5])

    assert [a.name for a in accesses] == ["access 0-0", "access 1-0"]
    assert objective.locations([0.0, 0.5]) == [0.0, 15.0]
    assert objective.num_variables == 2
    xl, xu = objective.variable_bounds
    np.testing.assert_array_equal(xl, [0.0, 0.0])
    np.testing.assert_array_equal(xu, [1.0, 1.0])


def test_injected_empty_cache_is_used(evaluator, settings):
    shared = EvalCache(30.0)
    objective = ExitPlacementObjective(evaluator, settings, cache=shared)

    objective.evaluate(np.array([0.2, 0.7]))

    assert objective.cache is shared
    assert len(shared) == 1
    assert shared.get([0.7, 0.2]) is not None

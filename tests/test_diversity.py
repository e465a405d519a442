"""Tests for circular set diversity."""

import numpy as np
import pytest

from evacopt.adapters.diversity import circular_set_distance, circular_set_diversity


def test_distance_wraps_around():
    assert circular_set_distance([0.05], [0.95]) == pytest.approx(0.1)
    assert circular_set_distance([0.2, 0.7], [0.2, 0.7]) == 0.0


def test_distance_is_directed():
    a, b = [0.0, 0.5], [0.0]
    assert circular_set_distance(a, b) == pytest.approx(0.5)
    assert circular_set_distance(b, a) == 0.0


def test_distance_with_custom_range():
    assert circular_set_distance([1.0], [29.0], range=30.0) == pytest.approx(2.0)


def test_diversity():
    assert circular_set_diversity(np.array([[0.0], [0.5]])) == pytest.approx(0.5)
    assert circular_set_diversity(np.array([[0.0, 0.5], [0.0, 0.0]])) == pytest.approx(0.25)


def test_diversity_degenerate_populations():
    assert circular_set_diversity(np.array([[0.3, 0.6]] * 4)) == 0.0
    assert circular_set_diversity(np.array([[0.3, 0.6]])) == 0.0

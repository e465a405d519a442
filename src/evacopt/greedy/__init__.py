"""Greedy ring-search exit placement."""

from .placement import GreedyPlacement
from .search import run_greedy

__all__ = ["GreedyPlacement", "run_greedy"]

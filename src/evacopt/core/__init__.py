"""Core module: types, perimeter decoding, encoding, evaluator, cache."""

from .cache import EvalCache, make_cache_key
from .config import Aggregation, ExitPlacementSettings, SimulationConfig, load_config
from .encoding import bounds, decode_solution, random_solution, wrap
from .evaluator import Deadline, EvaluationCancelled, SimulationEvaluator
from .objective import ExitPlacementObjective, SearchResult, SimulationBudget
from .perimeter import AccessDecoder, Perimeter, WallPiece
from .types import Access, Domain, Obstacle, Rectangle, SimulationSummary

__all__ = [
    "Access",
    "AccessDecoder",
    "Aggregation",
    "Deadline",
    "Domain",
    "EvalCache",
    "EvaluationCancelled",
    "ExitPlacementObjective",
    "ExitPlacementSettings",
    "Obstacle",
    "Perimeter",
    "Rectangle",
    "SearchResult",
    "SimulationBudget",
    "SimulationConfig",
    "SimulationEvaluator",
    "SimulationSummary",
    "WallPiece",
    "bounds",
    "decode_solution",
    "load_config",
    "make_cache_key",
    "random_solution",
    "wrap",
]

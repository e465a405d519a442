"""Solution encoding and decoding.

A candidate solution is a flat vector ``x`` of ``num_exits`` genes, each a
fraction of the perimeter length in ``[0, 1)``. The vector is ordered for
the search drivers, but its meaning is a set: permuting the genes does not
change the decoded geometry.

Layout:
    x[i] - start of exit ``i`` as a fraction of P
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .constants import EXIT_PRECISION
from .perimeter import AccessDecoder
from .types import Access


def wrap(x: np.ndarray | Sequence[float]) -> np.ndarray:
    """Wrap genes into ``[0, 1)`` (the encoding is circular)."""
    x = np.mod(np.asarray(x, dtype=np.float64), 1.0)
    # mod of a tiny negative value can round to exactly 1.0
    x[x >= 1.0] = 0.0
    return x


def quantize_location(
    gene: float, perimeter_length: float, precision: float = EXIT_PRECISION
) -> float:
    """Scale a gene to perimeter units and round to ``precision``.

    Args:
        gene: Fraction of the perimeter.
        perimeter_length: Perimeter length P.
        precision: Granularity in perimeter units.

    Returns:
        Location along the perimeter, rounded to a multiple of ``precision``.
    """
    factor = 1.0 / precision
    return round(float(gene) * perimeter_length * factor) / factor


def to_locations(
    x: np.ndarray | Sequence[float],
    perimeter_length: float,
    precision: float = EXIT_PRECISION,
) -> list[float]:
    """Convert a genome to quantized perimeter locations (same order)."""
    return [quantize_location(g, perimeter_length, precision) for g in np.asarray(x, dtype=float)]


def canonical_locations(
    x: np.ndarray | Sequence[float],
    perimeter_length: float,
    precision: float = EXIT_PRECISION,
) -> tuple[float, ...]:
    """Order-independent form of a genome.

    Locations are quantized, reduced modulo P (so 0 and P coincide) and
    collected as a sorted tuple of distinct values.
    """
    locations = set()
    for loc in to_locations(x, perimeter_length, precision):
        loc = round(loc % perimeter_length, 10)
        if loc >= perimeter_length:
            loc = 0.0
        locations.add(loc)
    return tuple(sorted(locations))


def decode_solution(
    x: np.ndarray | Sequence[float],
    decoder: AccessDecoder,
    precision: float = EXIT_PRECISION,
) -> list[Access]:
    """Decode a genome into accesses.

    Exit ``i`` is labelled ``i``; ids are consecutive from 0.
    """
    return decoder.decode_locations(to_locations(x, decoder.perimeter_length, precision))


def bounds(num_exits: int) -> tuple[np.ndarray, np.ndarray]:
    """Return lower and upper bounds for decision variables.

    Returns:
        (xl, xu) tuple of bound arrays, each of length ``num_exits``.
    """
    return np.zeros(num_exits), np.ones(num_exits)


def random_solution(num_exits: int, rng: np.random.Generator | None = None) -> np.ndarray:
    """Generate a uniformly random genome.

    Args:
        num_exits: Number of genes.
        rng: Random number generator (uses default if None).

    Returns:
        Random decision vector in ``[0, 1)``.
    """
    if rng is None:
        rng = np.random.default_rng()

    return rng.random(num_exits)

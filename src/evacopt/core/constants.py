"""Core constants for evacopt.

This module defines system-wide invariants such as:
- Default aperture geometry
- Location quantization for caching
- Reference simulator coefficients
"""

from __future__ import annotations

# Exit geometry
DEFAULT_EXIT_WIDTH = 2.0  # m
OPENING_THICKNESS = 0.1  # m, depth of the rectangle drawn for an aperture

# Granularity of exit locations along the perimeter (perimeter units)
EXIT_PRECISION = 0.1

# Cache versioning
# Bump when fitness semantics change
CACHE_VERSION = "0.1.0"

# Reference simulator
SPECIFIC_FLOW = 1.3  # pedestrians / (m s) through an aperture

# Number of runs used when re-simulating a reported solution for analysis
ANALYSIS_SIMULATIONS = 1000

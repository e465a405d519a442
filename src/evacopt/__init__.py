"""Simulation-based placement of emergency exits on a building perimeter."""

__version__ = "0.1.0"

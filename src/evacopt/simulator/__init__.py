"""Simulator interface and the in-process reference simulator."""

from .interfaces import Automaton, PedestrianParameters, Scenario, Simulator
from .straight_line import StraightLineSimulator

__all__ = ["Automaton", "PedestrianParameters", "Scenario", "Simulator", "StraightLineSimulator"]

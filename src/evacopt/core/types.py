"""Core types for the exit placement problem.

This module defines the canonical value types shared by the decoder,
the simulation evaluator and the search drivers. All geometry is
immutable: evaluations build new ``Domain`` values instead of editing
the caller's.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangle in domain coordinates."""

    left: float
    bottom: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def top(self) -> float:
        return self.bottom + self.height

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Rectangle:
        return cls(
            left=float(data["left"]),
            bottom=float(data["bottom"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "left": self.left,
            "bottom": self.bottom,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class Access:
    """An opening in the domain boundary through which pedestrians leave.

    Attributes:
        id: Numeric identifier, unique within one access list.
        name: Display name. Decoded exits are named ``"access <label>-<r>"``
            where ``r`` is the sub-index of the piece (corner splits).
        shape: Rectangle in domain coordinates.
        length: Extent along the wall. Decoded exits always carry it; for
            openings declared by hand it defaults to the long side of
            ``shape``.
    """

    id: int
    name: str
    shape: Rectangle
    description: str = ""
    length: float | None = None

    @property
    def opening_length(self) -> float:
        if self.length is not None:
            return self.length
        return max(self.shape.width, self.shape.height)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Access:
        return cls(
            id=int(data["id"]),
            name=str(data.get("name", f"access {data['id']}")),
            shape=Rectangle.from_dict(data["shape"]),
            description=str(data.get("description", "")),
            length=float(data["length"]) if data.get("length") is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "shape": self.shape.to_dict(),
        }
        if self.length is not None:
            data["length"] = self.length
        return data


@dataclass(frozen=True)
class Obstacle:
    """Fixed interior obstacle."""

    id: int
    shape: Rectangle
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Obstacle:
        return cls(
            id=int(data["id"]),
            shape=Rectangle.from_dict(data["shape"]),
            name=str(data.get("name", "")),
        )


@dataclass(frozen=True)
class Domain:
    """Rectangular floor area with obstacles and accesses.

    ``accesses`` holds the fixed (pre-existing) exits. Candidate exits are
    never written into a caller's Domain; use :meth:`with_accesses` to
    obtain a new value for one evaluation.
    """

    width: float
    height: float
    obstacles: tuple[Obstacle, ...] = ()
    accesses: tuple[Access, ...] = ()

    def __post_init__(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise ValueError(
                f"Domain must have positive size, got {self.width} x {self.height}"
            )
        # Normalize sequences to tuples so the value stays hashable/immutable
        object.__setattr__(self, "obstacles", tuple(self.obstacles))
        object.__setattr__(self, "accesses", tuple(self.accesses))

    @property
    def perimeter_length(self) -> float:
        return 2.0 * (self.width + self.height)

    @property
    def diameter(self) -> float:
        return math.hypot(self.width, self.height)

    def with_accesses(self, extra: Iterable[Access]) -> Domain:
        """Return a copy with ``extra`` appended after the fixed accesses."""
        return replace(self, accesses=self.accesses + tuple(extra))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Domain:
        """Build a domain from the rectangle subset of an environment description."""
        return cls(
            width=float(data["width"]),
            height=float(data["height"]),
            obstacles=tuple(Obstacle.from_dict(o) for o in data.get("obstacles", [])),
            accesses=tuple(Access.from_dict(a) for a in data.get("accesses", [])),
        )


@dataclass(frozen=True)
class SimulationSummary:
    """Main descriptors of one simulation outcome.

    Attributes:
        non_evacuees: Number of pedestrians who did not make it outside.
        min_distance: Minimum distance of a non-evacuee to its nearest exit.
        mean_distance: Mean distance of non-evacuees to their nearest exit.
        max_time: Time at which the last evacuee reached an exit.
        mean_time: Mean time at which evacuees reached an exit.
    """

    non_evacuees: float
    min_distance: float = 0.0
    mean_distance: float = 0.0
    max_time: float = 0.0
    mean_time: float = 0.0


@dataclass
class EvalRecord:
    """Fitness of one candidate together with its raw run outcomes."""

    fitness: float
    summaries: list[SimulationSummary] = field(default_factory=list)
    run_fitness: list[float] = field(default_factory=list)
    diag: dict[str, Any] = field(default_factory=dict)

"""Perimeter model and aperture decoder.

The rectangle boundary is a circular 1-D coordinate of length
``P = 2 * (W + H)``, walked counter-clockwise from the origin::

                         side 2 (top, right -> left)
          2W+H +-------------------------------+ W+H
               |                               |
      side 3   |                               |  side 1
      (left,   |                               |  (right,
      top ->   |                               |  bottom ->
      bottom)  |                               |  top)
             0 +-------------------------------+ W
                         side 0 (bottom, left -> right)

An aperture of length ``w`` starting at offset ``s`` covers ``[s, s + w)``
modulo ``P`` and is emitted as one wall piece per side it touches. A piece
knows its side, so its length along the wall survives even when it is
shorter than the opening thickness.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .constants import OPENING_THICKNESS
from .types import Access, Domain, Rectangle

BOTTOM, RIGHT, TOP, LEFT = 0, 1, 2, 3

# Pieces shorter than this are rounding residue, not openings
_LENGTH_EPS = 1e-9


@dataclass(frozen=True)
class Perimeter:
    """Circular coordinate along the boundary of a ``width x height`` rectangle."""

    width: float
    height: float

    def __post_init__(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise ValueError(
                f"Perimeter requires a positive size, got {self.width} x {self.height}"
            )

    @classmethod
    def of(cls, domain: Domain) -> Perimeter:
        return cls(domain.width, domain.height)

    @property
    def length(self) -> float:
        return 2.0 * (self.width + self.height)

    def normalize(self, offset: float) -> float:
        """Map ``offset`` into ``[0, P)``."""
        p = self.length
        offset = math.fmod(offset, p)
        if offset < 0.0:
            offset += p
        # fmod of a value just below a multiple of P can round up to P
        if offset >= p:
            offset -= p
        return offset

    def side_of(self, offset: float) -> int:
        """Side index (0..3) containing ``offset``."""
        w, h = self.width, self.height
        offset = self.normalize(offset)
        if offset < w:
            return BOTTOM
        if offset < w + h:
            return RIGHT
        if offset < 2 * w + h:
            return TOP
        return LEFT

    def side_end(self, side: int) -> float:
        """Perimeter coordinate at which ``side`` ends."""
        w, h = self.width, self.height
        return (w, w + h, 2 * w + h, 2 * w + 2 * h)[side]


@dataclass(frozen=True)
class WallPiece:
    """Part of an aperture lying on one side of the perimeter."""

    side: int
    shape: Rectangle

    @property
    def length(self) -> float:
        """Extent along the wall."""
        if self.side in (BOTTOM, TOP):
            return self.shape.width
        return self.shape.height


def decode(
    perimeter: Perimeter,
    offset: float,
    aperture_width: float,
    thickness: float = OPENING_THICKNESS,
) -> list[WallPiece]:
    """Map an aperture starting at ``offset`` into wall pieces.

    Args:
        perimeter: Perimeter of the domain.
        offset: Start of the aperture along the perimeter (any real; taken mod P).
        aperture_width: Aperture length; must satisfy ``0 <= w < P``.
        thickness: Depth of the rectangles drawn inside the wall.

    Returns:
        Pieces in walking order; more than one when the aperture turns a
        corner. Empty for a zero-width aperture.
    """
    if aperture_width < 0 or aperture_width >= perimeter.length:
        raise ValueError(
            f"aperture width {aperture_width} must be in [0, {perimeter.length})"
        )

    w, h = perimeter.width, perimeter.height
    remaining = aperture_width
    pieces: list[WallPiece] = []

    while remaining > _LENGTH_EPS:
        offset = perimeter.normalize(offset)
        side = perimeter.side_of(offset)
        step = min(remaining, perimeter.side_end(side) - offset)
        if step <= _LENGTH_EPS:
            # Sitting on a corner after rounding; move onto the next side
            offset = perimeter.side_end(side)
            continue

        if side == BOTTOM:
            rect = Rectangle(offset, 0.0, step, thickness)
        elif side == RIGHT:
            rect = Rectangle(w - thickness, offset - w, thickness, step)
        elif side == TOP:
            right = w - (offset - (w + h))
            rect = Rectangle(right - step, h - thickness, step, thickness)
        else:
            top = h - (offset - (2 * w + h))
            rect = Rectangle(0.0, top - step, thickness, step)

        pieces.append(WallPiece(side, rect))
        offset += step
        remaining -= step

    return pieces


class AccessDecoder:
    """Turns perimeter locations into named ``Access`` objects for one domain."""

    def __init__(
        self,
        domain: Domain,
        exit_width: float,
        thickness: float = OPENING_THICKNESS,
    ) -> None:
        self.perimeter = Perimeter.of(domain)
        if not (0.0 < exit_width < self.perimeter.length):
            raise ValueError(
                f"exit width {exit_width} must be in (0, {self.perimeter.length})"
            )
        self.exit_width = exit_width
        self.thickness = thickness

    @property
    def perimeter_length(self) -> float:
        return self.perimeter.length

    def decode_access(self, location: float, label: int, base_id: int) -> list[Access]:
        """Accesses for one exit at perimeter ``location``.

        Each corner piece becomes its own access; pieces share ``label`` in
        their name and receive consecutive ids starting at ``base_id``.
        """
        pieces = decode(self.perimeter, location, self.exit_width, self.thickness)
        return [
            Access(
                id=base_id + r,
                name=f"access {label}-{r}",
                shape=piece.shape,
                length=piece.length,
            )
            for r, piece in enumerate(pieces)
        ]

    def decode_locations(self, locations: Sequence[float], base_id: int = 0) -> list[Access]:
        """Accesses for a sequence of perimeter locations (perimeter units)."""
        accesses: list[Access] = []
        for label, location in enumerate(locations):
            accesses.extend(
                self.decode_access(location, label, base_id + len(accesses))
            )
        return accesses

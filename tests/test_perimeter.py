"""Tests for the perimeter model and the aperture decoder."""

import numpy as np
import pytest

from evacopt.core.perimeter import (
    BOTTOM,
    LEFT,
    RIGHT,
    TOP,
    AccessDecoder,
    Perimeter,
    decode,
)
from evacopt.core.types import Domain, Rectangle


@pytest.fixture
def perimeter():
    return Perimeter(10.0, 5.0)


def _same(a: Rectangle, b: Rectangle) -> None:
    assert a.left == pytest.approx(b.left)
    assert a.bottom == pytest.approx(b.bottom)
    assert a.width == pytest.approx(b.width)
    assert a.height == pytest.approx(b.height)


def test_length_and_sides(perimeter):
    assert perimeter.length == 30.0
    assert perimeter.side_of(0.0) == BOTTOM
    assert perimeter.side_of(10.0) == RIGHT
    assert perimeter.side_of(15.0) == TOP
    assert perimeter.side_of(25.0) == LEFT
    assert perimeter.side_of(30.0) == BOTTOM
    assert perimeter.side_of(-1.0) == LEFT


def test_decode_single_side(perimeter):
    (piece,) = decode(perimeter, 2.0, 2.0)
    assert piece.side == BOTTOM
    _same(piece.shape, Rectangle(2.0, 0.0, 2.0, 0.1))

    (piece,) = decode(perimeter, 16.0, 2.0)
    assert piece.side == TOP
    _same(piece.shape, Rectangle(7.0, 4.9, 2.0, 0.1))


def test_decode_splits_at_corner(perimeter):
    """An exit straddling the bottom-right corner becomes two openings."""
    pieces = decode(perimeter, 9.0, 2.0)

    assert [p.side for p in pieces] == [BOTTOM, RIGHT]
    _same(pieces[0].shape, Rectangle(9.0, 0.0, 1.0, 0.1))
    _same(pieces[1].shape, Rectangle(9.9, 0.0, 0.1, 1.0))


def test_decode_wraps_around_origin(perimeter):
    pieces = decode(perimeter, 29.0, 2.0)

    assert [p.side for p in pieces] == [LEFT, BOTTOM]
    _same(pieces[0].shape, Rectangle(0.0, 0.0, 0.1, 1.0))
    _same(pieces[1].shape, Rectangle(0.0, 0.0, 1.0, 0.1))


def test_decode_offset_is_periodic(perimeter):
    assert decode(perimeter, 39.0, 2.0) == decode(perimeter, 9.0, 2.0)
    assert decode(perimeter, -1.0, 2.0) == decode(perimeter, 29.0, 2.0)


def test_decode_covers_exact_length(perimeter):
    rng = np.random.default_rng(0)
    for offset in rng.uniform(0.0, 30.0, size=50):
        pieces = decode(perimeter, float(offset), 2.5)
        assert sum(p.length for p in pieces) == pytest.approx(2.5)
        for p in pieces:
            assert p.shape.left >= -1e-9 and p.shape.right <= 10.0 + 1e-9
            assert p.shape.bottom >= -1e-9 and p.shape.top <= 5.0 + 1e-9


@pytest.mark.parametrize("offset", [9.95, 14.97, 24.99, 29.96])
def test_short_corner_piece_keeps_its_length(perimeter, offset):
    # the first piece is thinner than the 0.1 opening depth
    pieces = decode(perimeter, offset, 2.0)

    assert len(pieces) == 2
    assert pieces[0].length < 0.1
    assert sum(p.length for p in pieces) == pytest.approx(2.0)


def test_decode_zero_width(perimeter):
    assert decode(perimeter, 4.0, 0.0) == []


@pytest.mark.parametrize("width", [-1.0, 30.0, 31.0])
def test_decode_rejects_invalid_width(perimeter, width):
    with pytest.raises(ValueError):
        decode(perimeter, 0.0, width)


def test_access_decoder_names_and_ids():
    decoder = AccessDecoder(Domain(10.0, 5.0), exit_width=2.0)

    pieces = decoder.decode_access(9.0, label=3, base_id=5)
    assert [a.name for a in pieces] == ["access 3-0", "access 3-1"]
    assert [a.id for a in pieces] == [5, 6]

    accesses = decoder.decode_locations([9.0, 2.0])
    assert [a.id for a in accesses] == [0, 1, 2]
    assert [a.name for a in accesses] == ["access 0-0", "access 0-1", "access 1-0"]


@pytest.mark.parametrize("width", [0.0, 30.0])
def test_access_decoder_rejects_degenerate_width(width):
    with pytest.raises(ValueError):
        AccessDecoder(Domain(10.0, 5.0), exit_width=width)


def test_decoded_accesses_carry_wall_length():
    decoder = AccessDecoder(Domain(10.0, 5.0), exit_width=2.0)

    first, second = decoder.decode_access(9.95, label=0, base_id=0)

    assert first.length == pytest.approx(0.05)
    assert second.length == pytest.approx(1.95)
    assert first.opening_length + second.opening_length == pytest.approx(2.0)

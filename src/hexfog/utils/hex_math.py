"""Axial hex-grid math for hexfog.

Everything in hexfog addresses the map by axial ``(q, r)`` coordinates.
Distances and range queries go through the equivalent cube form
``(x, y, z)`` with ``x + y + z == 0``, where ``x = q`` and ``z = r``; the
hex distance is then the Chebyshev distance of the cube vectors.

Screen placement uses a flat-top layout with hex radius ``size``::

    x = size * 3/2 * q
    y = size * sqrt(3) * (r + q/2)

See https://www.redblobgames.com/grids/hexagons/ for the derivations.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

HEX_SIZE = 1.0

_SQRT3 = math.sqrt(3)


@dataclass(frozen=True)
class HexCoord:
    """Axial map coordinate.

    Equal coordinates hash equally, so they key dicts and sets directly.
    Ordering is row-major (by ``r``, then ``q``) which keeps sorted output
    stable across runs.

    Example:
        >>> sorted([HexCoord(q=1, r=1), HexCoord(q=5, r=0)])
        [HexCoord(q=5, r=0), HexCoord(q=1, r=1)]
    """

    q: int
    r: int

    def __hash__(self) -> int:
        return hash((self.q, self.r))

    def __lt__(self, other: HexCoord) -> bool:
        if not isinstance(other, HexCoord):
            return NotImplemented
        return (self.r, self.q) < (other.r, other.q)

    def __str__(self) -> str:
        return f"({self.q}, {self.r})"


def axial_to_cube(coord: HexCoord) -> tuple[int, int, int]:
    """Return the cube form ``(x, y, z)`` of an axial coordinate.

    Example:
        >>> axial_to_cube(HexCoord(q=1, r=2))
        (1, -3, 2)
    """
    return coord.q, -coord.q - coord.r, coord.r


def cube_to_axial(x: int, y: int, z: int) -> HexCoord:  # noqa: ARG001
    """Drop the redundant ``y`` component of a cube coordinate."""
    return HexCoord(q=x, r=z)


def hex_distance(a: HexCoord, b: HexCoord) -> int:
    """Number of single-hex steps between ``a`` and ``b``.

    Computed directly on axial deltas as
    ``max(|dq|, |dr|, |dq + dr|)``. This is a metric (symmetric, zero only
    for equal coordinates, obeys the triangle inequality), so
    ``{c : hex_distance(center, c) <= n}`` is a proper ball.

    Example:
        >>> hex_distance(HexCoord(q=0, r=0), HexCoord(q=2, r=1))
        3
    """
    dq = a.q - b.q
    dr = a.r - b.r
    return max(abs(dq), abs(dr), abs(dq + dr))


# Axial offsets, counter-clockwise from east.
_NEIGHBOR_DIRECTIONS: tuple[tuple[int, int], ...] = (
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, 0),
    (-1, 1),
    (0, 1),
)


def hex_neighbors(coord: HexCoord) -> list[HexCoord]:
    """The six coordinates at distance 1 (whether or not they are on a map)."""
    return [HexCoord(q=coord.q + dq, r=coord.r + dr) for dq, dr in _NEIGHBOR_DIRECTIONS]


def hexes_in_range(center: HexCoord, n: int) -> list[HexCoord]:
    """Every coordinate within distance ``n`` of ``center``, centre included.

    The result holds exactly ``3n^2 + 3n + 1`` distinct coordinates and is
    not clipped to any map.

    Raises:
        ValueError: If n is negative

    Example:
        >>> len(hexes_in_range(HexCoord(q=0, r=0), n=2))
        19
    """
    if n < 0:
        msg = f"Range n must be non-negative, got {n}"
        raise ValueError(msg)

    ball: list[HexCoord] = []
    for dq in range(-n, n + 1):
        for dr in range(max(-n, -dq - n), min(n, -dq + n) + 1):
            ball.append(HexCoord(q=center.q + dq, r=center.r + dr))
    return ball


def hex_ring(center: HexCoord, n: int) -> list[HexCoord]:
    """
    Find all hexes at exactly distance n from the center.

    Ring 0 is the center itself; ring n > 0 holds 6n hexes.

    Raises:
        ValueError: If n is negative
    """
    if n < 0:
        msg = f"Ring radius must be non-negative, got {n}"
        raise ValueError(msg)
    if n == 0:
        return [center]

    # Start n steps to the southwest and walk the six sides.
    dq, dr = _NEIGHBOR_DIRECTIONS[4]
    current = HexCoord(q=center.q + dq * n, r=center.r + dr * n)
    ring = []
    for step_q, step_r in _NEIGHBOR_DIRECTIONS:
        for _ in range(n):
            ring.append(current)
            current = HexCoord(q=current.q + step_q, r=current.r + step_r)
    return ring


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def cube_round(fq: float, fr: float, fs: float) -> HexCoord:
    """
    Round fractional cube coordinates to the nearest hex.

    The component with the largest rounding error is recomputed from the other
    two so the result still satisfies q + r + s == 0. Halves round up, so points
    on an edge resolve the same way whatever the parity of the coordinates.
    """
    q = _round_half_up(fq)
    r = _round_half_up(fr)
    s = _round_half_up(fs)

    q_diff = abs(q - fq)
    r_diff = abs(r - fr)
    s_diff = abs(s - fs)

    if q_diff > r_diff and q_diff > s_diff:
        q = -r - s
    elif r_diff > s_diff:
        r = -q - s

    return HexCoord(q=int(q), r=int(r))


def to_planar_position(coord: HexCoord, size: float = HEX_SIZE) -> tuple[float, float]:
    """Map an axial coordinate to its planar (x, y) layout position.

    Pure and uncached. Distinct integer coordinates always map to distinct
    positions: q is recoverable from x, and then r from y.
    """
    x = size * 1.5 * coord.q
    y = size * _SQRT3 * (coord.r + coord.q / 2)
    return x, y


class HexLayout:
    """Planar layout for a hex map with an instance-owned position cache.

    The renderer and any culling logic ask for the same positions over and
    over, so :meth:`to_planar` memoises results. The cache belongs to the
    layout object; two layouts never share entries.
    """

    def __init__(self, size: float = HEX_SIZE) -> None:
        if size <= 0:
            msg = f"Hex size must be positive, got {size}"
            raise ValueError(msg)
        self.size = size
        self._positions: dict[HexCoord, tuple[float, float]] = {}

    @property
    def cache_size(self) -> int:
        return len(self._positions)

    def to_planar(self, coord: HexCoord) -> tuple[float, float]:
        """Return the cached planar position of ``coord``."""

        position = self._positions.get(coord)
        if position is None:
            position = to_planar_position(coord, self.size)
            self._positions[coord] = position
        return position

    def from_planar(self, x: float, y: float) -> HexCoord:
        """Return the hex containing the planar point (x, y).

        Inverse of :meth:`to_planar` for hex centres; any point inside a hex
        resolves to that hex.
        """
        fq = (2 / 3 * x) / self.size
        fr = (-1 / 3 * x + _SQRT3 / 3 * y) / self.size
        return cube_round(fq, fr, -fq - fr)

    def clear_cache(self) -> None:
        self._positions.clear()

"""Utility functions for the hexfog map model."""

from hexfog.utils.hex_math import (
    HEX_SIZE,
    HexCoord,
    HexLayout,
    axial_to_cube,
    cube_round,
    cube_to_axial,
    hex_distance,
    hex_neighbors,
    hex_ring,
    hexes_in_range,
    to_planar_position,
)

__all__ = [
    "HEX_SIZE",
    "HexCoord",
    "HexLayout",
    "axial_to_cube",
    "cube_round",
    "cube_to_axial",
    "hex_distance",
    "hex_neighbors",
    "hex_ring",
    "hexes_in_range",
    "to_planar_position",
]

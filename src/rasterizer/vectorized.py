"""Vectorized (numpy) coverage for a whole bounding box.

Evaluates jitter and edge tests for every lattice point of the bounding box at
once. Decisions are identical to core.iter_hits(); tests/test_parity_* holds
the two paths together. Use it for coverage-only queries (antialiasing weight
estimation, golden hit counts) on large triangles.

Arithmetic is int64. Coordinates are limited to |c| < 2**30 so the edge cross
products cannot overflow; larger inputs must go through the scalar path.

Usage:
    from src.rasterizer.vectorized import coverage_mask
    grid = coverage_mask(tri, screen, cfg)
    grid.hit_count, grid.hits.shape  # (len(grid.xs), len(grid.ys))
"""

from dataclasses import dataclass

import numpy as np

from .bbox import get_bounding_box
from .edge import EDGE_TABLE, edge_cross
from .jitter import (
    JITTER_GRID_SHIFT,
    JITTER_SCALE_SHIFT,
    LANE_BITS,
    PACK_SHIFT,
    WORD_BITS,
)
from .primitives import BoundingBox, RasterConfig, Screen, Triangle

MAX_ABS_COORD = 1 << 30

_WORD_MASK = np.int64((1 << WORD_BITS) - 1)


@dataclass(frozen=True)
class CoverageGrid:
    """Hit decisions over the bounding-box lattice.

    Attributes
    ----------
    bbox : BoundingBox
        Box the lattice was built from
    xs, ys : np.ndarray
        (Nx,), (Ny,) int64 lattice coordinates
    hits : np.ndarray
        (Nx, Ny) bool, indexed [ix, iy] (x outer, like the scalar walk)
    """

    bbox: BoundingBox
    xs: np.ndarray
    ys: np.ndarray
    hits: np.ndarray

    @property
    def hit_count(self) -> int:
        return int(np.count_nonzero(self.hits))

    def hit_samples(self) -> np.ndarray:
        """(N, 2) int64 unjittered hit positions in scalar visitation order."""
        idx = np.argwhere(self.hits)
        return np.stack([self.xs[idx[:, 0]], self.ys[idx[:, 1]]], axis=1)


def hash_40to8_np(word: np.ndarray, shift: int) -> np.ndarray:
    """Array version of jitter.hash_40to8()."""
    lanes = [(word >> (LANE_BITS * i)) & 0xFF for i in range(WORD_BITS // LANE_BITS)]
    l32 = [lanes[i] ^ lanes[i + 1] for i in range(4)]
    l16 = [l32[0] ^ l32[2], l32[1] ^ l32[3]]
    return (l16[0] ^ l16[1]) & (0x00FF >> shift)


def jitter_np(xs: np.ndarray, ys: np.ndarray, ss_w_lg2: int):
    """Unscaled jitter for broadcastable coordinate arrays; returns (jx, jy)."""
    gx = xs >> JITTER_GRID_SHIFT
    gy = ys >> JITTER_GRID_SHIFT
    word_x = ((gy << PACK_SHIFT) | gx) & _WORD_MASK
    word_y = ((gx << PACK_SHIFT) | gy) & _WORD_MASK
    return hash_40to8_np(word_x, ss_w_lg2), hash_40to8_np(word_y, ss_w_lg2)


def sample_test_np(triangle: Triangle, px: np.ndarray, py: np.ndarray) -> np.ndarray:
    """Array version of edge.sample_test(); returns a bool array."""
    shifted = [(v.x - px, v.y - py) for v in triangle.vertices]
    inside = np.ones(np.broadcast(px, py).shape, dtype=bool)
    for start, end, accepts in EDGE_TABLE:
        ax, ay = shifted[start]
        bx, by = shifted[end]
        inside &= accepts(edge_cross(ax, ay, bx, by), 0)
    return inside


def _check_range(triangle: Triangle, screen: Screen) -> None:
    coords = [c for v in triangle.vertices for c in (v.x, v.y)]
    coords += [screen.width, screen.height]
    worst = max(abs(c) for c in coords)
    if worst >= MAX_ABS_COORD:
        raise ValueError(
            f"Coordinate magnitude {worst} exceeds the int64-safe range "
            f"(< {MAX_ABS_COORD}); use core.rasterize_triangle instead"
        )


def coverage_mask(triangle: Triangle, screen: Screen, config: RasterConfig) -> CoverageGrid:
    """Compute hit decisions for every lattice point in the bounding box.

    Parameters
    ----------
    triangle : Triangle
        Triangle in fixed-point screen coordinates
    screen : Screen
        Screen extent (fixed point)
    config : RasterConfig
        Subsampling configuration

    Returns
    -------
    CoverageGrid
        Empty (0, 0) grid when the bounding box is invalid

    Raises
    ------
    ValueError
        If any coordinate is outside the int64-safe range
    """
    _check_range(triangle, screen)
    bbox = get_bounding_box(triangle, screen, config)

    if not bbox.valid:
        empty = np.zeros(0, dtype=np.int64)
        return CoverageGrid(bbox, empty, empty, np.zeros((0, 0), dtype=bool))

    ll, ur = bbox.lower_left, bbox.upper_right
    xs = np.arange(ll.x, ur.x + 1, config.ss_i, dtype=np.int64)
    ys = np.arange(ll.y, ur.y + 1, config.ss_i, dtype=np.int64)

    gx, gy = np.meshgrid(xs, ys, indexing='ij')
    jx, jy = jitter_np(gx, gy, config.ss_w_lg2)

    hits = sample_test_np(
        triangle,
        gx + (jx << JITTER_SCALE_SHIFT),
        gy + (jy << JITTER_SCALE_SHIFT),
    )
    return CoverageGrid(bbox, xs, ys, hits)

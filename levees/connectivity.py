from __future__ import annotations

import logging
from enum import Enum
from typing import Any

import numpy as np

from .grid import Category, Grid, Terrain, barrier_mask
from .kernels import bfs_fill


log = logging.getLogger(__name__)


class CornerClosure(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


def boundary_seeds(grid: Grid) -> np.ndarray:
    """Flat indices of the boundary cells in row-major order."""
    return np.flatnonzero(grid.boundary_mask().reshape(-1)).astype(np.int64)


def _close_corners(blocked: np.ndarray, sources: np.ndarray) -> None:
    # In-place. A diagonal pair only closes its counterpart when one of the
    # pair is a barrier or was closed earlier; repeat until nothing changes.
    while True:
        a, b = blocked[:-1, :-1], blocked[:-1, 1:]
        c, d = blocked[1:, :-1], blocked[1:, 1:]
        sa, sb = sources[:-1, :-1], sources[:-1, 1:]
        sc, sd = sources[1:, :-1], sources[1:, 1:]

        main = a & d & (sa | sd)
        anti = b & c & (sb | sc)

        closed = np.zeros_like(blocked)
        closed[:-1, 1:] |= main
        closed[1:, :-1] |= main
        closed[:-1, :-1] |= anti
        closed[1:, 1:] |= anti
        closed &= ~blocked
        if not closed.any():
            return
        blocked |= closed
        sources |= closed


def compute_blocked_mask(
    grid: Grid,
    barriers: Any = None,
    corner_closure: CornerClosure = CornerClosure.ENABLED,
) -> np.ndarray:
    """Obstacle terrain plus valid barriers, optionally corner-closed.

    Returns a fresh (H, W) bool array.
    """
    levees = barrier_mask(grid, barriers)
    blocked = (grid.terrain == Terrain.OBSTACLE) | levees
    if CornerClosure(corner_closure) is CornerClosure.ENABLED and levees.any():
        _close_corners(blocked, levees.copy())
    return blocked


def reachable_from_boundary(grid: Grid, blocked: np.ndarray) -> np.ndarray:
    """Cells with a 4-connected open path to an open boundary cell."""
    flat_blocked = np.ascontiguousarray(blocked, dtype=np.bool_).reshape(-1)
    reached = np.zeros(grid.cell_count, dtype=np.bool_)
    order = np.empty(grid.cell_count, dtype=np.int64)
    bfs_fill(flat_blocked, boundary_seeds(grid), grid.width, reached, order)
    return reached.reshape(grid.height, grid.width)


def detect_containment(grid: Grid, barriers: Any = None) -> bool:
    """True when some residence is cut off by the barriers but open on bare terrain.

    A residence already sealed in by terrain alone never counts.
    """
    residences = grid.points_of(Category.RESIDENCE)
    if not residences:
        return False

    with_barriers = reachable_from_boundary(
        grid, compute_blocked_mask(grid, barriers, CornerClosure.ENABLED)
    )
    terrain_only = reachable_from_boundary(
        grid, compute_blocked_mask(grid, None, CornerClosure.DISABLED)
    )
    for p in residences:
        if not with_barriers[p.y, p.x] and terrain_only[p.y, p.x]:
            log.debug("Containment transition at residence (%d, %d)", p.x, p.y)
            return True
    return False


evaluate_containment = detect_containment

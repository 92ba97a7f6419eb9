from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from .config import ScoringConfig
from .connectivity import CornerClosure, compute_blocked_mask, detect_containment
from .grid import Grid, Terrain, barrier_mask
from .kernels import bfs_fill
from .scoring import score_outcome


log = logging.getLogger(__name__)


@dataclass
class FloodResult:
    flooded: np.ndarray  # (H*W,) bool
    flood_order: np.ndarray  # flat indices in arrival order
    score: int
    dry_land: int
    flooded_count: int
    containment_active: bool

    @property
    def water_active(self) -> bool:
        return self.containment_active

    def flooded_grid(self, grid: Grid) -> np.ndarray:
        return self.flooded.reshape(grid.height, grid.width)


def flood_seeds(grid: Grid) -> np.ndarray:
    """Boundary cells and water sources, row-major. Blocked seeds are skipped by the fill."""
    seeds = grid.boundary_mask() | (grid.terrain == Terrain.WATER_SOURCE)
    return np.flatnonzero(seeds.reshape(-1)).astype(np.int64)


def _field_buffer(grid: Grid, out: Optional[np.ndarray]) -> np.ndarray:
    if out is not None and out.dtype == np.bool_ and out.shape == (grid.cell_count,):
        out.fill(False)
        return out
    if out is not None:
        log.debug("Discarding flood buffer with shape %s", out.shape)
    return np.zeros(grid.cell_count, dtype=np.bool_)


def run_simulation(
    grid: Grid,
    barriers: Any = None,
    *,
    scoring: Optional[ScoringConfig] = None,
    out: Optional[np.ndarray] = None,
) -> FloodResult:
    """Release the water if the barriers have sealed off a residence.

    ``out`` may be a previous result's flooded field; it is overwritten.
    Without a containment transition the inert result is returned.
    """
    flooded = _field_buffer(grid, out)
    if not detect_containment(grid, barriers):
        return FloodResult(
            flooded=flooded,
            flood_order=np.empty(0, dtype=np.int64),
            score=0,
            dry_land=0,
            flooded_count=0,
            containment_active=False,
        )

    levees = barrier_mask(grid, barriers)
    blocked = compute_blocked_mask(grid, levees, CornerClosure.ENABLED).reshape(-1)
    order = np.empty(grid.cell_count, dtype=np.int64)
    count = int(bfs_fill(blocked, flood_seeds(grid), grid.width, flooded, order))

    score, dry_land = score_outcome(grid, flooded, levees, scoring)
    log.debug("Flooded %d/%d cells, dry land %d, score %d", count, grid.cell_count, dry_land, score)
    return FloodResult(
        flooded=flooded,
        flood_order=order[:count].copy(),
        score=score,
        dry_land=dry_land,
        flooded_count=count,
        containment_active=True,
    )


evaluate_flood = run_simulation

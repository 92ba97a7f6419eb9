from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np

from .config import ScoringConfig
from .grid import Category, Grid, Terrain


_ORTHOGONAL_OFFSETS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


def count_dry_land(grid: Grid, flooded: np.ndarray, levees: np.ndarray) -> int:
    """Open cells that are neither flooded nor under a barrier."""
    flooded_grid = flooded.reshape(grid.height, grid.width)
    levee_grid = levees.reshape(grid.height, grid.width)
    dry = (grid.terrain == Terrain.OPEN) & ~flooded_grid & ~levee_grid
    return int(dry.sum())


def adjacent_residences(grid: Grid, x: int, y: int, categories: Dict[Tuple[int, int], Category]) -> int:
    homes = 0
    for dx, dy in _ORTHOGONAL_OFFSETS:
        nx, ny = x + dx, y + dy
        if grid.in_bounds(nx, ny) and categories.get((nx, ny)) == Category.RESIDENCE:
            homes += 1
    return homes


def score_outcome(
    grid: Grid,
    flooded: np.ndarray,
    levees: np.ndarray,
    cfg: Optional[ScoringConfig] = None,
) -> Tuple[int, int]:
    """Score a flood outcome. Returns ``(score, dry_land)``.

    Dry land is the base score. Unflooded residences and critical facilities
    earn their bonus; every flooded hazard facility costs its penalty plus one
    adjacent-residence penalty per orthogonally neighbouring residence,
    whether or not that residence is itself flooded.
    """
    cfg = cfg or ScoringConfig()
    flooded_grid = flooded.reshape(grid.height, grid.width)
    dry_land = count_dry_land(grid, flooded, levees)

    score = dry_land
    categories: Dict[Tuple[int, int], Category] = {}
    for p in grid.protected_points:
        categories[(p.x, p.y)] = p.category
        wet = bool(flooded_grid[p.y, p.x])
        if p.category == Category.RESIDENCE and not wet:
            score += cfg.residence_bonus
        elif p.category == Category.CRITICAL_FACILITY and not wet:
            score += cfg.critical_facility_bonus
        elif p.category == Category.HAZARD_FACILITY and wet:
            score -= cfg.hazard_penalty

    for p in grid.points_of(Category.HAZARD_FACILITY):
        if not flooded_grid[p.y, p.x]:
            continue
        score -= cfg.hazard_adjacent_residence_penalty * adjacent_residences(grid, p.x, p.y, categories)

    return int(score), dry_land

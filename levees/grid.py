from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import yaml


log = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a grid cannot be built from the supplied terrain."""


class Terrain(IntEnum):
    OPEN = 0
    WATER_SOURCE = 1
    OBSTACLE = 2
    OUTFLOW = 3


class Category(str, Enum):
    RESIDENCE = "residence"
    CRITICAL_FACILITY = "critical_facility"
    HAZARD_FACILITY = "hazard_facility"


_TILE_CHARS: Dict[str, Terrain] = {
    "L": Terrain.OPEN,
    "W": Terrain.WATER_SOURCE,
    "R": Terrain.OBSTACLE,
    "O": Terrain.OUTFLOW,
}

# Level files written for the browser build use the district names.
_CATEGORY_ALIASES: Dict[str, Category] = {
    "home": Category.RESIDENCE,
    "hospital": Category.CRITICAL_FACILITY,
    "power_station": Category.HAZARD_FACILITY,
}


def parse_category(value: Any) -> Category:
    if isinstance(value, Category):
        return value
    key = str(value).strip().lower()
    if key in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[key]
    try:
        return Category(key)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown protected point category: {value!r}") from exc


@dataclass(frozen=True)
class ProtectedPoint:
    category: Category
    x: int
    y: int


class Grid:
    """Immutable puzzle field.

    Terrain is held as a read-only (H, W) uint8 array. Flat cell indices are
    row-major: ``y * width + x``. Protected points outside the field or on
    obstacle terrain are dropped on construction.
    """

    def __init__(
        self,
        width: int,
        height: int,
        terrain: Sequence[int] | np.ndarray,
        protected_points: Iterable[ProtectedPoint] = (),
    ):
        if int(width) <= 0 or int(height) <= 0:
            raise ConfigurationError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.cell_count = self.width * self.height

        arr = np.asarray(terrain)
        if arr.size != self.cell_count:
            raise ConfigurationError(
                f"Terrain size mismatch. expected={self.cell_count} got={arr.size}"
            )
        known = np.isin(arr, [int(t) for t in Terrain])
        if not known.all():
            bad = int(arr.reshape(-1)[np.flatnonzero(~known.reshape(-1))[0]])
            raise ConfigurationError(f"Unsupported terrain value {bad}")
        self.terrain = arr.astype(np.uint8).reshape(self.height, self.width)
        self.terrain.setflags(write=False)

        points: List[ProtectedPoint] = []
        for p in protected_points:
            if not self.in_bounds(p.x, p.y):
                log.debug("Dropping out-of-range protected point %s", p)
                continue
            if self.terrain[p.y, p.x] == Terrain.OBSTACLE:
                log.debug("Dropping protected point on obstacle terrain %s", p)
                continue
            points.append(ProtectedPoint(parse_category(p.category), int(p.x), int(p.y)))
        self.protected_points: Tuple[ProtectedPoint, ...] = tuple(points)

        protected = np.zeros((self.height, self.width), dtype=bool)
        for p in self.protected_points:
            protected[p.y, p.x] = True
        protected.setflags(write=False)
        self.protected_mask = protected

        placeable = (self.terrain == Terrain.OPEN) & ~protected
        placeable.setflags(write=False)
        self.placeable_mask = placeable

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[str],
        protected_points: Iterable[ProtectedPoint] = (),
    ) -> "Grid":
        if not rows:
            raise ConfigurationError("Grid needs at least one tile row")
        height = len(rows)
        width = len(rows[0])
        terrain = np.zeros((height, width), dtype=np.uint8)
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ConfigurationError(f"Tile width mismatch at row={y}")
            for x, ch in enumerate(row):
                kind = _TILE_CHARS.get(ch)
                if kind is None:
                    raise ConfigurationError(f"Unsupported tile '{ch}' at ({x}, {y}).")
                terrain[y, x] = kind
        return cls(width, height, terrain, protected_points)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def index(self, x: int, y: int) -> int:
        return y * self.width + x

    def points_of(self, category: Category) -> Tuple[ProtectedPoint, ...]:
        return tuple(p for p in self.protected_points if p.category == category)

    def boundary_mask(self) -> np.ndarray:
        mask = np.zeros((self.height, self.width), dtype=bool)
        mask[0, :] = True
        mask[-1, :] = True
        mask[:, 0] = True
        mask[:, -1] = True
        return mask

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, points={len(self.protected_points)})"


def barrier_mask(grid: Grid, barriers: Any) -> np.ndarray:
    """Normalize a barrier snapshot into a fresh (H, W) bool array.

    Accepts an iterable of ``(x, y)`` pairs or a bool array shaped (H, W) or
    (H*W,). Entries outside the grid, on non-open terrain or on protected
    points are dropped.
    """
    mask = np.zeros((grid.height, grid.width), dtype=bool)
    if barriers is None:
        return mask

    if isinstance(barriers, np.ndarray):
        arr = barriers.astype(bool, copy=False)
        if arr.size != grid.cell_count:
            log.debug("Ignoring barrier array of size %d for %r", arr.size, grid)
            return mask
        mask[...] = arr.reshape(grid.height, grid.width)
    else:
        for x, y in barriers:
            x, y = int(x), int(y)
            if not grid.in_bounds(x, y):
                log.debug("Ignoring out-of-range barrier (%d, %d)", x, y)
                continue
            mask[y, x] = True

    invalid = mask & ~grid.placeable_mask
    if invalid.any():
        log.debug("Ignoring %d barrier(s) on non-placeable cells", int(invalid.sum()))
        mask &= grid.placeable_mask
    return mask


def load_level(path: str, label: Optional[str] = None) -> Tuple[Grid, Dict[str, Any]]:
    """Read a YAML level: ``size``, ``tiles`` rows and ``districts``.

    Returns the grid plus the remaining level metadata (``label``,
    ``wall_budget``, ``notes`` when present).
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    size = data.get("size")
    if isinstance(size, (list, tuple)):
        width, height = int(size[0]), int(size[1])
    elif size is not None:
        width = height = int(size)
    else:
        width = height = None
    rows = list(data.get("tiles") or [])
    if height is not None and len(rows) != height:
        raise ConfigurationError(f"Level tile rows mismatch. expected={height} got={len(rows)}")

    points = []
    for d in data.get("districts") or []:
        try:
            points.append(ProtectedPoint(parse_category(d.get("type")), int(d.get("x")), int(d.get("y"))))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Malformed district entry: {d!r}") from exc
    grid = Grid.from_rows(rows, points)
    if width is not None and grid.width != width:
        raise ConfigurationError(f"Level width mismatch. expected={width} got={grid.width}")

    meta: Dict[str, Any] = {"label": str(data.get("label", data.get("date", label or "")))}
    if "wall_budget" in data:
        meta["wall_budget"] = int(data["wall_budget"])
    if data.get("notes"):
        meta["notes"] = str(data["notes"])
    return grid, meta

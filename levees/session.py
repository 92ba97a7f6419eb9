from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .config import ScoringConfig, SessionConfig
from .connectivity import detect_containment
from .flood import FloodResult, run_simulation
from .grid import Grid


log = logging.getLogger(__name__)


@dataclass
class SessionState:
    width: int
    height: int
    label: str
    wall_budget: int
    placements_remaining: int
    barriers: List[List[bool]]
    flooded: List[List[bool]]
    flood_order: List[int]
    score: int
    dry_land: int
    flooded_count: int
    containment_active: bool
    can_undo: bool
    share_code: str


def _to_base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


class LeveeSession:
    """Interactive barrier layout over one grid.

    Every accepted change recomputes containment and flood from scratch.
    """

    def __init__(
        self,
        grid: Grid,
        config: Optional[SessionConfig] = None,
        scoring: Optional[ScoringConfig] = None,
    ) -> None:
        self.grid = grid
        self.cfg = config or SessionConfig()
        self.scoring = scoring or ScoringConfig()
        self.levees = np.zeros((grid.height, grid.width), dtype=bool)
        self._history: List[np.ndarray] = []
        self.result: FloodResult = run_simulation(grid, self.levees, scoring=self.scoring)

    @property
    def placed(self) -> int:
        return int(self.levees.sum())

    def _check_bounds(self, x: int, y: int) -> None:
        if not self.grid.in_bounds(x, y):
            raise ValueError(f"Cell out of bounds: ({x}, {y})")

    def _push_history(self) -> None:
        self._history.append(self.levees.copy())
        if len(self._history) > self.cfg.max_history:
            self._history.pop(0)

    def _recompute(self) -> None:
        self.result = run_simulation(self.grid, self.levees, scoring=self.scoring, out=self.result.flooded)

    def toggle_barrier(self, x: int, y: int) -> SessionState:
        self._check_bounds(x, y)
        if not self.grid.placeable_mask[y, x]:
            return self.current_state()
        if not self.levees[y, x] and self.placed >= self.cfg.wall_budget:
            log.info("Barrier budget of %d reached", self.cfg.wall_budget)
            return self.current_state()
        self._push_history()
        self.levees[y, x] = not self.levees[y, x]
        self._recompute()
        log.info(
            "%s barrier at (%d, %d): containment=%s score=%d",
            "Placed" if self.levees[y, x] else "Removed",
            x,
            y,
            self.result.containment_active,
            self.result.score,
        )
        return self.current_state()

    def undo(self) -> SessionState:
        if not self._history:
            return self.current_state()
        self.levees[...] = self._history.pop()
        self._recompute()
        return self.current_state()

    def restart(self) -> SessionState:
        self.levees.fill(False)
        self._history.clear()
        self._recompute()
        return self.current_state()

    def is_contained(self) -> bool:
        return detect_containment(self.grid, self.levees)

    def share_code(self) -> str:
        placed = np.flatnonzero(self.levees.reshape(-1))
        encoded = ".".join(_to_base36(int(i)) for i in placed)
        return f"{self.cfg.label}|{encoded}"

    def apply_share_code(self, code: str) -> SessionState:
        """Load a layout from ``share_code`` output; codes for another level are ignored."""
        label, _, encoded = code.partition("|")
        if label != self.cfg.label or not encoded:
            return self.current_state()
        layout = np.zeros_like(self.levees)
        flat = layout.reshape(-1)
        for piece in filter(None, encoded.split(".")):
            try:
                index = int(piece, 36)
            except ValueError:
                log.debug("Skipping malformed share code entry %r", piece)
                continue
            if index < 0 or index >= self.grid.cell_count:
                continue
            flat[index] = True
        layout &= self.grid.placeable_mask
        over = np.flatnonzero(layout.reshape(-1))[int(self.cfg.wall_budget) :]
        if over.size:
            log.debug("Share code exceeds budget of %d; dropping %d barrier(s)", self.cfg.wall_budget, over.size)
            flat[over] = False
        self.levees[...] = layout
        self._history.clear()
        self._recompute()
        return self.current_state()

    def current_state(self) -> SessionState:
        result = self.result
        return SessionState(
            width=self.grid.width,
            height=self.grid.height,
            label=self.cfg.label,
            wall_budget=int(self.cfg.wall_budget),
            placements_remaining=max(0, int(self.cfg.wall_budget) - self.placed),
            barriers=self.levees.astype(bool).tolist(),
            flooded=result.flooded_grid(self.grid).astype(bool).tolist(),
            flood_order=[int(i) for i in result.flood_order],
            score=int(result.score),
            dry_land=int(result.dry_land),
            flooded_count=int(result.flooded_count),
            containment_active=bool(result.containment_active),
            can_undo=bool(self._history),
            share_code=self.share_code(),
        )

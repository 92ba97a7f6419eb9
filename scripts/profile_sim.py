from __future__ import annotations

import argparse
import logging
import time

import numpy as np

from levees.grid import Category, Grid, ProtectedPoint, Terrain
from levees.flood import run_simulation


def random_grid(size: int, rng: np.random.Generator) -> Grid:
    terrain = rng.choice(
        [Terrain.OPEN, Terrain.OBSTACLE, Terrain.WATER_SOURCE],
        size=(size, size),
        p=[0.8, 0.15, 0.05],
    ).astype(np.uint8)
    c = size // 2
    terrain[c - 2 : c + 3, c - 2 : c + 3] = Terrain.OPEN
    return Grid(size, size, terrain, [ProtectedPoint(Category.RESIDENCE, c, c)])


def ring_layout(size: int) -> list[tuple[int, int]]:
    c = size // 2
    return [
        (x, y)
        for y in range(c - 2, c + 3)
        for x in range(c - 2, c + 3)
        if max(abs(x - c), abs(y - c)) == 2
    ]


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--size", type=int, default=16)
    parser.add_argument("--grids", type=int, default=64)
    parser.add_argument("--evals", type=int, default=100)
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='[%(asctime)s] %(message)s', datefmt='%H:%M:%S')
    log = logging.getLogger("profile_sim")

    rng = np.random.default_rng(args.seed)
    grids = [random_grid(args.size, rng) for _ in range(args.grids)]
    layout = ring_layout(args.size)

    # warm the jit cache before timing
    run_simulation(grids[0], layout)

    active = 0
    t0 = time.time()
    for _ in range(args.evals):
        for grid in grids:
            result = run_simulation(grid, layout)
            active += int(result.containment_active)
    dt = time.time() - t0
    total = args.evals * args.grids
    log.info(
        "Ran %d evaluations on %dx%d grids in %.3fs -> %.1f evals/s (%d active)",
        total,
        args.size,
        args.size,
        dt,
        total / dt,
        active,
    )


if __name__ == "__main__":
    main()

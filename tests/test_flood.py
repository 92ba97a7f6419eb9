import numpy as np
import pytest

from levees.connectivity import CornerClosure, compute_blocked_mask
from levees.flood import evaluate_flood, flood_seeds, run_simulation
from levees.grid import Category, Grid, ProtectedPoint, Terrain

from conftest import CHAMBER_GAP, CHAMBER_ROWS, RING_GAP


def _assert_breadth_first(grid, barriers, result):
    order = result.flood_order.tolist()
    assert len(order) == len(set(order)) == result.flooded_count
    assert set(order) == set(np.flatnonzero(result.flooded).tolist())

    blocked = compute_blocked_mask(grid, barriers, CornerClosure.ENABLED).reshape(-1)
    seeds = {int(i) for i in flood_seeds(grid) if not blocked[i]}
    step = {cell: k for k, cell in enumerate(order)}
    for cell, k in step.items():
        if cell in seeds:
            continue
        x, y = cell % grid.width, cell // grid.width
        earlier = [
            step[grid.index(nx, ny)]
            for nx, ny in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1))
            if grid.in_bounds(nx, ny) and grid.index(nx, ny) in step
        ]
        assert earlier and min(earlier) < k


def test_no_containment_gives_inert_result(ring_grid):
    result = run_simulation(ring_grid, [])
    assert result.containment_active is False
    assert result.water_active is False
    assert not result.flooded.any()
    assert result.flooded.shape == (25,)
    assert result.flood_order.size == 0
    assert (result.score, result.dry_land, result.flooded_count) == (0, 0, 0)


def test_ring_scenario(ring_grid):
    result = evaluate_flood(ring_grid, [RING_GAP])
    assert result.containment_active is True
    border = [0, 1, 2, 3, 4, 5, 9, 10, 14, 15, 19, 20, 21, 22, 23, 24]
    assert result.flood_order.tolist() == border
    assert result.flooded_count == 16
    assert result.dry_land == 1
    assert result.score == 1 + 3
    flooded = result.flooded_grid(ring_grid)
    assert not flooded[1:4, 1:4].any()


def test_interior_water_source_seeds_the_flood(chamber_grid):
    result = run_simulation(chamber_grid, [CHAMBER_GAP])
    assert result.containment_active is True
    flooded = result.flooded_grid(chamber_grid)
    assert flooded[2, 2] and flooded[2, 3]
    assert not flooded[2, 6]
    assert result.flooded_count == 26
    # the hospital next to the source comes last, after every seed
    assert result.flood_order[-1] == chamber_grid.index(3, 2)
    assert result.dry_land == 1
    assert result.score == 1 + 3


def test_without_water_source_the_hospital_stays_dry():
    rows = list(CHAMBER_ROWS)
    rows[2] = rows[2].replace("W", "L")
    grid = Grid.from_rows(
        rows,
        [
            ProtectedPoint(Category.RESIDENCE, 6, 2),
            ProtectedPoint(Category.CRITICAL_FACILITY, 3, 2),
        ],
    )
    result = run_simulation(grid, [CHAMBER_GAP])
    assert result.flooded_count == 24
    assert result.dry_land == 3
    assert result.score == 3 + 3 + 10


def test_corner_closed_water_source_does_not_seed():
    grid = Grid.from_rows(
        ["LLLLLLLLL", "LRLRLRLRL", "LRWRLRLRL", "LRRRLRRRL", "LLLLLLLLL"],
        [ProtectedPoint(Category.RESIDENCE, 6, 2)],
    )
    sealed = run_simulation(grid, [(2, 1), (6, 1)])
    assert sealed.containment_active is True
    flooded = sealed.flooded_grid(grid)
    assert not flooded[2, 2]
    assert flooded[3, 4]
    assert sealed.flooded_count == 27
    assert (sealed.dry_land, sealed.score) == (1, 4)

    leaking = run_simulation(grid, [(6, 1)])
    assert leaking.flooded_grid(grid)[2, 2]
    assert leaking.flooded_grid(grid)[1, 2]


def test_repeated_evaluation_is_identical(chamber_grid):
    first = run_simulation(chamber_grid, [CHAMBER_GAP])
    second = run_simulation(chamber_grid, [CHAMBER_GAP])
    assert first.flooded.tobytes() == second.flooded.tobytes()
    assert first.flood_order.tobytes() == second.flood_order.tobytes()
    assert (first.score, first.dry_land, first.flooded_count) == (
        second.score,
        second.dry_land,
        second.flooded_count,
    )


def test_flood_order_is_breadth_first(chamber_grid, ring_grid):
    _assert_breadth_first(chamber_grid, [CHAMBER_GAP], run_simulation(chamber_grid, [CHAMBER_GAP]))
    _assert_breadth_first(ring_grid, [RING_GAP], run_simulation(ring_grid, [RING_GAP]))


@pytest.mark.parametrize("seed", range(8))
def test_random_layouts_keep_flood_invariants(seed):
    rng = np.random.default_rng(seed)
    size = 12
    terrain = rng.choice([0, 1, 2], size=(size, size), p=[0.8, 0.05, 0.15]).astype(np.uint8)
    c = size // 2
    terrain[c - 2 : c + 3, c - 2 : c + 3] = Terrain.OPEN
    grid = Grid(size, size, terrain, [ProtectedPoint(Category.RESIDENCE, c, c)])
    ring = [
        (x, y)
        for y in range(c - 2, c + 3)
        for x in range(c - 2, c + 3)
        if max(abs(x - c), abs(y - c)) == 2
    ]
    result = run_simulation(grid, ring)
    if not result.containment_active:
        assert result.flood_order.size == 0
        return
    _assert_breadth_first(grid, ring, result)
    blocked = compute_blocked_mask(grid, ring, CornerClosure.ENABLED).reshape(-1)
    assert not (result.flooded & blocked).any()
    assert not result.flooded_grid(grid)[c, c]


def test_invalid_barriers_do_not_crash(ring_grid):
    result = run_simulation(ring_grid, [RING_GAP, (1, 1), (2, 2), (40, 40), (-3, 0)])
    assert result.containment_active is True
    assert result.score == 4


def test_caller_buffer_is_overwritten_and_reused(ring_grid):
    buffer = np.ones(25, dtype=bool)
    result = run_simulation(ring_grid, [RING_GAP], out=buffer)
    assert result.flooded is buffer
    assert int(buffer.sum()) == 16

    inert = run_simulation(ring_grid, [], out=buffer)
    assert inert.flooded is buffer
    assert not buffer.any()


def test_wrong_sized_buffer_is_replaced(ring_grid):
    buffer = np.ones(7, dtype=bool)
    result = run_simulation(ring_grid, [RING_GAP], out=buffer)
    assert result.flooded is not buffer
    assert buffer.all()


def test_barrier_input_is_not_mutated(ring_grid):
    levees = np.zeros((5, 5), dtype=bool)
    levees[1, 2] = True
    levees[2, 2] = True  # residence, ignored
    snapshot = levees.copy()
    run_simulation(ring_grid, levees)
    assert np.array_equal(levees, snapshot)

from __future__ import annotations

import pytest

from levees.grid import Category, Grid, ProtectedPoint


RING_ROWS = [
    "LLLLL",
    "LRLRL",
    "LRLRL",
    "LRRRL",
    "LLLLL",
]
RING_GAP = (2, 1)

# Left chamber: a water source next to a hospital, sealed by rock.
# Right chamber: a house with a one-cell gap to the top edge at (6, 1).
CHAMBER_ROWS = [
    "LLLLLLLLL",
    "LRRRRRLRL",
    "LRWLRRLRL",
    "LRRRRRRRL",
    "LLLLLLLLL",
]
CHAMBER_GAP = (6, 1)


@pytest.fixture
def ring_grid() -> Grid:
    return Grid.from_rows(RING_ROWS, [ProtectedPoint(Category.RESIDENCE, 2, 2)])


@pytest.fixture
def chamber_grid() -> Grid:
    return Grid.from_rows(
        CHAMBER_ROWS,
        [
            ProtectedPoint(Category.RESIDENCE, 6, 2),
            ProtectedPoint(Category.CRITICAL_FACILITY, 3, 2),
        ],
    )

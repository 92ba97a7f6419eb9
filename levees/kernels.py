from __future__ import annotations

import numpy as np
from numba import njit


@njit(cache=True)
def _push(ni: int, blocked: np.ndarray, reached: np.ndarray, order: np.ndarray, tail: int) -> int:
    if reached[ni] or blocked[ni]:
        return tail
    reached[ni] = True
    order[tail] = ni
    return tail + 1


@njit(cache=True)
def bfs_fill(
    blocked: np.ndarray,
    seeds: np.ndarray,
    width: int,
    reached: np.ndarray,
    order: np.ndarray,
) -> int:
    """Multi-source breadth-first fill over a flat row-major field.

    ``reached`` must arrive all False; ``order`` needs room for every cell.
    Seeds are taken in the given order, then neighbours east, west, south,
    north. Returns the number of cells written to ``order``.
    """
    total = blocked.shape[0]
    height = total // width

    tail = 0
    for k in range(seeds.shape[0]):
        tail = _push(seeds[k], blocked, reached, order, tail)

    head = 0
    while head < tail:
        index = order[head]
        head += 1
        x = index % width
        y = index // width

        if x + 1 < width:
            tail = _push(index + 1, blocked, reached, order, tail)
        if x > 0:
            tail = _push(index - 1, blocked, reached, order, tail)
        if y + 1 < height:
            tail = _push(index + width, blocked, reached, order, tail)
        if y > 0:
            tail = _push(index - width, blocked, reached, order, tail)

    return tail

"""
Deterministic point-budget sampling.

Grids are thinned in two steps: a row/column stride picks an evenly spread
subset of cells before any per-cell work is done, and a flat stride over the
surviving points enforces the hard upper bound. No randomness is involved,
so the same grid always yields the same points in the same order.
"""

import math
from typing import List, Sequence, Tuple, TypeVar

import numpy as np

T = TypeVar("T")


def _check_budget(budget: int) -> None:
    if budget < 1:
        raise ValueError(f"Point budget must be at least 1, got {budget}")


def compute_stride(total_points: int, budget: int) -> int:
    """
    Per-axis stride so a strided 2D grid holds roughly ``budget`` cells.

    Parameters
    ----------
    total_points : int
        Number of cells in the full grid
    budget : int
        Maximum number of points wanted

    Returns
    -------
    int
        ``floor(sqrt(total_points / budget))``, at least 1
    """
    _check_budget(budget)
    if total_points <= budget:
        return 1
    return max(1, int(math.floor(math.sqrt(total_points / budget))))


def grid_strides(n_rows: int, n_cols: int, budget: int) -> Tuple[int, int]:
    """
    Row and column strides for an ``n_rows x n_cols`` grid.

    The row stride comes from ``compute_stride``; the column stride is then
    chosen so the kept cell count stays close to the budget even for very
    elongated grids (a single row, say).
    """
    row_stride = min(max(n_rows, 1), compute_stride(n_rows * n_cols, budget))
    kept_rows = math.ceil(n_rows / row_stride)
    col_stride = max(1, math.ceil(n_cols * kept_rows / budget))
    return row_stride, col_stride


def sample_grid_indices(n_rows: int, n_cols: int, budget: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Strided (row, column) indices in row-major order.

    Returns
    -------
    rows, cols : np.ndarray
        Flattened int64 index arrays of equal length
    """
    row_stride, col_stride = grid_strides(n_rows, n_cols, budget)
    r = np.arange(0, n_rows, row_stride, dtype=np.int64)
    c = np.arange(0, n_cols, col_stride, dtype=np.int64)
    rr, cc = np.meshgrid(r, c, indexing='ij')
    return rr.ravel(), cc.ravel()


def cap_indices(n: int, budget: int) -> np.ndarray:
    """
    Evenly spaced positions selecting at most ``budget`` of ``n`` items.

    Uses a flat stride of ``ceil(n / budget)``, so the first item is always
    kept and the result never exceeds the budget.
    """
    _check_budget(budget)
    stride = max(1, math.ceil(n / budget))
    return np.arange(0, n, stride, dtype=np.int64)


def cap_points(points: Sequence[T], budget: int) -> List[T]:
    """List form of ``cap_indices``."""
    return [points[i] for i in cap_indices(len(points), budget)]

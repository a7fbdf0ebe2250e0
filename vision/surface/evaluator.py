"""Surface evaluation over control grids."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from vision.frame import ControlGrid


class SurfaceEvaluator(ABC):
    """Map parameters ``(u, v)`` in [0, 1]^2 to points on a control grid surface."""

    @abstractmethod
    def evaluate(
        self, grid: ControlGrid, u: np.ndarray | float, v: np.ndarray | float
    ) -> np.ndarray:
        """Return points of shape ``broadcast(u, v).shape + (3,)``."""


class BilinearEvaluator(SurfaceEvaluator):
    """
    Piecewise bilinear interpolation between the four control points
    surrounding ``(u, v)``. Stands in for rational basis evaluation.
    """

    def evaluate(
        self, grid: ControlGrid, u: np.ndarray | float, v: np.ndarray | float
    ) -> np.ndarray:
        grid = np.asarray(grid, dtype=np.float64)
        rows, cols = grid.shape[:2]
        if rows < 2 or cols < 2:
            raise ValueError(f"Control grid must be at least 2x2, got {rows}x{cols}")
        u, v = np.broadcast_arrays(
            np.asarray(u, dtype=np.float64), np.asarray(v, dtype=np.float64)
        )
        fu = u * (rows - 1)
        fv = v * (cols - 1)
        i = np.clip(fu.astype(np.intp), 0, rows - 2)
        j = np.clip(fv.astype(np.intp), 0, cols - 2)
        lu = (fu - i)[..., None]
        lv = (fv - j)[..., None]

        p00 = grid[i, j]
        p10 = grid[i + 1, j]
        p01 = grid[i, j + 1]
        p11 = grid[i + 1, j + 1]
        p0 = p00 * (1 - lu) + p10 * lu
        p1 = p01 * (1 - lu) + p11 * lu
        return p0 * (1 - lv) + p1 * lv

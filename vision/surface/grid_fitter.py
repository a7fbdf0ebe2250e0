"""Fixed-size control grid fitting over a centered point cluster."""

from __future__ import annotations

import numpy as np

from utils.settings import SurfaceCfg, surface as SURFACE_CFG
from vision.frame import ControlGrid


class GridFitter:
    """
    Fit an R x C control grid to cluster-local points.

    Cell (i, j) is placed at ``u = i / (R - 1)``, ``v = j / (C - 1)`` across
    the bounding box: x follows u, z follows v and y is seeded with the
    ``u * v`` cross term. The y of each cell is then replaced by the y of the
    input point nearest in the xz plane, so the grid follows the sampled
    surface instead of staying flat.
    """

    def __init__(self, cfg: SurfaceCfg = SURFACE_CFG) -> None:
        if cfg.grid_size < 2:
            raise ValueError(f"Control grid size must be >= 2, got {cfg.grid_size}")
        self.rows = cfg.grid_size
        self.cols = cfg.grid_size

    def fit(self, local_points: np.ndarray) -> ControlGrid:
        points = np.asarray(local_points, dtype=np.float64).reshape(-1, 3)
        if len(points) == 0:
            raise ValueError("Cannot fit a control grid to an empty point set")
        lo = points.min(axis=0)
        extent = points.max(axis=0) - lo

        u = np.arange(self.rows) / (self.rows - 1)
        v = np.arange(self.cols) / (self.cols - 1)
        U, V = np.meshgrid(u, v, indexing="ij")
        grid = np.empty((self.rows, self.cols, 3), dtype=np.float64)
        grid[..., 0] = lo[0] + U * extent[0]
        grid[..., 1] = lo[1] + U * V * extent[1]
        grid[..., 2] = lo[2] + V * extent[2]

        # O(R*C*n); argmin keeps the first point on ties
        cx = grid[..., 0].reshape(-1, 1)
        cz = grid[..., 2].reshape(-1, 1)
        d2 = (cx - points[:, 0]) ** 2 + (cz - points[:, 2]) ** 2
        nearest = np.argmin(d2, axis=1)
        grid[..., 1] = points[nearest, 1].reshape(self.rows, self.cols)
        return grid

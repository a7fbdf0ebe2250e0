"""Regular-grid tessellation of evaluated surfaces."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from utils.settings import SurfaceCfg, surface as SURFACE_CFG
from vision.frame import ControlGrid
from .evaluator import BilinearEvaluator, SurfaceEvaluator


@dataclass(frozen=True, eq=False)
class TriangleMesh:
    """Vertex positions, unit normals and a flat uint32 triangle index buffer."""

    positions: np.ndarray
    normals: np.ndarray
    indices: np.ndarray

    @property
    def triangles(self) -> np.ndarray:
        return self.indices.reshape(-1, 3)


def grid_indices(resolution: int) -> np.ndarray:
    """
    Two triangles per quad of a ``resolution`` x ``resolution`` vertex grid,
    row-major vertices, winding (tl, bl, tr), (tr, bl, br).
    """
    r = np.arange(resolution - 1)
    i, j = np.meshgrid(r, r, indexing="ij")
    tl = (i * resolution + j).ravel()
    tr = tl + 1
    bl = tl + resolution
    br = bl + 1
    quads = np.stack([tl, bl, tr, tr, bl, br], axis=1)
    return quads.reshape(-1).astype(np.uint32)


def vertex_normals(
    positions: np.ndarray,
    indices: np.ndarray,
    up: tuple[float, float, float] = SURFACE_CFG.up_normal,
    eps: float = SURFACE_CFG.normal_eps,
) -> np.ndarray:
    """
    Area-weighted face normal average per vertex. Vertices whose accumulated
    normal is shorter than ``eps`` get ``up``.
    """
    tris = indices.reshape(-1, 3).astype(np.intp)
    p0, p1, p2 = (positions[tris[:, k]] for k in range(3))
    face = np.cross(p1 - p0, p2 - p0)
    acc = np.zeros_like(positions)
    for k in range(3):
        np.add.at(acc, tris[:, k], face)
    length = np.linalg.norm(acc, axis=1)
    degenerate = length < eps
    normals = np.empty_like(acc)
    normals[~degenerate] = acc[~degenerate] / length[~degenerate, None]
    normals[degenerate] = up
    return normals


class Tessellator:
    """Sample an evaluator on a regular (u, v) lattice and mesh the result."""

    def __init__(
        self,
        cfg: SurfaceCfg = SURFACE_CFG,
        evaluator: SurfaceEvaluator | None = None,
    ) -> None:
        if cfg.resolution < 2:
            raise ValueError(f"Tessellation resolution must be >= 2, got {cfg.resolution}")
        self.cfg = cfg
        self.resolution = cfg.resolution
        self.evaluator = evaluator or BilinearEvaluator()
        self._indices = grid_indices(self.resolution)

    def tessellate(self, grid: ControlGrid) -> TriangleMesh:
        t = np.arange(self.resolution) / (self.resolution - 1)
        U, V = np.meshgrid(t, t, indexing="ij")
        positions = self.evaluator.evaluate(grid, U, V).reshape(-1, 3)
        normals = vertex_normals(
            positions, self._indices, self.cfg.up_normal, self.cfg.normal_eps
        )
        return TriangleMesh(
            positions=positions.astype(np.float32),
            normals=normals.astype(np.float32),
            indices=self._indices.copy(),
        )

import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
import numpy as np

from utils.settings import SurfaceCfg
from vision.surface.evaluator import BilinearEvaluator
from vision.surface.tessellator import Tessellator, grid_indices


def flat_grid(size: int = 10) -> np.ndarray:
    t = np.linspace(0.0, 1.0, size)
    U, V = np.meshgrid(t, t, indexing="ij")
    return np.stack([U, np.zeros_like(U), V], axis=-1)


def test_evaluator_hits_control_corners():
    grid = np.random.default_rng(0).normal(size=(10, 10, 3))
    ev = BilinearEvaluator()
    assert np.allclose(ev.evaluate(grid, 0.0, 0.0), grid[0, 0])
    assert np.allclose(ev.evaluate(grid, 1.0, 1.0), grid[9, 9])
    assert np.allclose(ev.evaluate(grid, 1.0, 0.0), grid[9, 0])
    assert np.allclose(ev.evaluate(grid, 1 / 9, 2 / 9), grid[1, 2])


def test_evaluator_interpolates_between_cells():
    grid = np.random.default_rng(1).normal(size=(10, 10, 3))
    mid = BilinearEvaluator().evaluate(grid, 0.5 / 9, 0.5 / 9)
    assert np.allclose(mid, grid[:2, :2].reshape(-1, 3).mean(axis=0))


def test_mesh_size_law():
    for resolution in (2, 5, 20):
        mesh = Tessellator(SurfaceCfg(resolution=resolution)).tessellate(flat_grid())
        assert len(mesh.positions) == resolution**2
        assert len(mesh.normals) == resolution**2
        assert len(mesh.indices) == 3 * 2 * (resolution - 1) ** 2
        assert mesh.indices.dtype == np.uint32
        assert mesh.indices.max() == resolution**2 - 1
        assert mesh.triangles.shape == (2 * (resolution - 1) ** 2, 3)


def test_winding_order():
    assert grid_indices(3)[:6].tolist() == [0, 3, 1, 1, 3, 4]


def test_flat_grid_normals_are_unit_and_vertical():
    mesh = Tessellator().tessellate(flat_grid())
    assert np.allclose(np.linalg.norm(mesh.normals, axis=1), 1.0, atol=1e-6)
    assert np.allclose(np.abs(mesh.normals[:, 1]), 1.0, atol=1e-6)


def test_degenerate_grid_gets_default_normal():
    mesh = Tessellator().tessellate(np.zeros((10, 10, 3)))
    assert np.all(np.isfinite(mesh.normals))
    assert np.allclose(mesh.normals, [0.0, 1.0, 0.0])

import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
import numpy as np
import pytest

from utils.settings import SurfaceCfg
from vision.surface.grid_fitter import GridFitter


def terrain(n: int = 400, seed: int = 1) -> np.ndarray:
    rng = np.random.default_rng(seed)
    xz = rng.uniform(-1.0, 1.0, size=(n, 2))
    y = 0.2 * xz[:, 0] - 0.1 * xz[:, 1] ** 2
    return np.column_stack([xz[:, 0], y, xz[:, 1]])


def test_grid_shape_and_extent():
    points = terrain()
    grid = GridFitter().fit(points)
    assert grid.shape == (10, 10, 3)
    assert np.isclose(grid[0, 0, 0], points[:, 0].min())
    assert np.isclose(grid[-1, 0, 0], points[:, 0].max())
    assert np.isclose(grid[0, 0, 2], points[:, 2].min())
    assert np.isclose(grid[0, -1, 2], points[:, 2].max())
    # x follows rows, z follows columns
    assert np.all(np.diff(grid[:, 0, 0]) > 0)
    assert np.all(np.diff(grid[0, :, 2]) > 0)


def test_height_comes_from_nearest_xz_neighbour():
    points = terrain()
    grid = GridFitter().fit(points)
    for i, j in [(0, 0), (3, 7), (9, 9), (5, 2)]:
        cell = grid[i, j]
        d = np.hypot(points[:, 0] - cell[0], points[:, 2] - cell[2])
        assert grid[i, j, 1] == points[np.argmin(d), 1]


def test_fit_is_deterministic():
    points = terrain()
    assert np.array_equal(GridFitter().fit(points), GridFitter().fit(points))


def test_custom_grid_size():
    grid = GridFitter(SurfaceCfg(grid_size=4)).fit(terrain())
    assert grid.shape == (4, 4, 3)


def test_coincident_points_do_not_fail():
    grid = GridFitter().fit(np.zeros((9, 3)))
    assert np.allclose(grid, 0.0)


def test_empty_points_raise():
    with pytest.raises(ValueError):
        GridFitter().fit(np.empty((0, 3)))

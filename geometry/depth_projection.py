"""Depth pixel to world-space projection helpers.

Intrinsics are a row-major 3x3 matrix::

    [[fx, 0, cx],
     [0, fy, cy],
     [0,  0,  1]]

so ``K[0, 0]``/``K[1, 1]`` hold the focal lengths and ``K[0, 2]``/``K[1, 2]``
the principal point. The principal point is assumed centered, hence the image
extent is ``(2 * cx, 2 * cy)``. Cameras look down their negative z axis.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

__all__ = [
    "intrinsics_matrix",
    "image_size_from_intrinsics",
    "pixel_to_camera",
    "unproject_point",
    "unproject_points",
    "project_point",
]


def intrinsics_matrix(fx: float, fy: float, cx: float, cy: float) -> np.ndarray:
    """Build the 3x3 pinhole intrinsics matrix."""
    return np.array(
        [[fx, 0.0, cx], [0.0, fy, cy], [0.0, 0.0, 1.0]], dtype=np.float64
    )


def image_size_from_intrinsics(K: np.ndarray) -> Tuple[float, float]:
    """Return ``(width, height)`` implied by a centered principal point."""
    return 2.0 * K[0, 2], 2.0 * K[1, 2]


def pixel_to_camera(
    pixel_x: np.ndarray | float,
    pixel_y: np.ndarray | float,
    depth: np.ndarray | float,
    K: np.ndarray,
) -> np.ndarray:
    """
    Back-project pixels with depth into camera coordinates (+z forward).

    Returns an (..., 3) array ``[x, y, depth]``.
    """
    x = (np.asarray(pixel_x) - K[0, 2]) * depth / K[0, 0]
    y = (np.asarray(pixel_y) - K[1, 2]) * depth / K[1, 1]
    z = np.broadcast_to(np.asarray(depth, dtype=np.float64), np.shape(x))
    return np.stack([x, y, z], axis=-1).astype(np.float64)


def unproject_points(
    uv: np.ndarray, depth: np.ndarray, K: np.ndarray, cam_to_world: np.ndarray
) -> np.ndarray:
    """
    Unproject normalized pixel coordinates into world space.

    Args:
        uv: (N, 2) normalized pixel coordinates in [0, 1).
        depth: (N,) depth in meters.
        K: 3x3 intrinsics matrix.
        cam_to_world: 4x4 camera-to-world transform.

    Returns:
        (N, 3) world-space points.
    """
    uv = np.asarray(uv, dtype=np.float64).reshape(-1, 2)
    depth = np.asarray(depth, dtype=np.float64).reshape(-1)
    width, height = image_size_from_intrinsics(K)
    cam = pixel_to_camera(uv[:, 0] * width, uv[:, 1] * height, depth, K)
    # camera looks down -z
    cam_h = np.column_stack([cam[:, 0], cam[:, 1], -cam[:, 2], np.ones(len(cam))])
    return (cam_to_world @ cam_h.T).T[:, :3]


def unproject_point(
    u: float, v: float, depth: float, K: np.ndarray, cam_to_world: np.ndarray
) -> np.ndarray:
    """Unproject a single normalized pixel ``(u, v)`` at ``depth``."""
    return unproject_points(np.array([[u, v]]), np.array([depth]), K, cam_to_world)[0]


def project_point(
    point: np.ndarray, K: np.ndarray, cam_to_world: np.ndarray
) -> Tuple[float, float, float]:
    """
    Project a world point to normalized pixel coordinates.

    Returns ``(u, v, depth)``, the inverse of :func:`unproject_point`.
    """
    world_h = np.append(np.asarray(point, dtype=np.float64), 1.0)
    cam = np.linalg.inv(cam_to_world) @ world_h
    depth = -cam[2]
    width, height = image_size_from_intrinsics(K)
    pixel_x = cam[0] * K[0, 0] / depth + K[0, 2]
    pixel_y = cam[1] * K[1, 1] / depth + K[1, 2]
    return float(pixel_x / width), float(pixel_y / height), float(depth)

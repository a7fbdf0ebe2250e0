from __future__ import annotations
from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation

__all__ = [
    "euler_to_matrix",
    "make_transform",
    "decompose_transform",
    "invert_transform",
    "pose_from_euler",
    "transform_points",
]


def euler_to_matrix(
    rx: float, ry: float, rz: float, *, degrees: bool = True
) -> np.ndarray:
    """Return a rotation matrix from Euler angles."""
    return Rotation.from_euler("xyz", [rx, ry, rz], degrees=degrees).as_matrix()


def make_transform(R: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Build a homogeneous transform from ``R`` and ``t``."""
    T = np.eye(4)
    T[:3, :3] = R
    T[:3, 3] = np.asarray(t, dtype=np.float64).flatten()
    return T


def decompose_transform(T: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Return rotation matrix and translation vector from a transform."""
    return T[:3, :3], T[:3, 3]


def invert_transform(T: np.ndarray) -> np.ndarray:
    """Return the inverse of a rigid homogeneous transform."""
    R, t = decompose_transform(T)
    R_inv = R.T
    t_inv = -R_inv @ t
    return make_transform(R_inv, t_inv)


def pose_from_euler(
    position: tuple[float, float, float],
    angles: tuple[float, float, float],
    *,
    degrees: bool = True,
) -> np.ndarray:
    """Return a 4x4 pose from a position (meters) and xyz Euler angles."""
    return make_transform(euler_to_matrix(*angles, degrees=degrees), np.array(position))


def transform_points(points: np.ndarray, T: np.ndarray) -> np.ndarray:
    """Apply a 4x4 transform to Nx3 points."""
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    points_h = np.hstack([points, np.ones((points.shape[0], 1))])
    return (T @ points_h.T).T[:, :3]

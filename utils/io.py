"""File I/O helpers for recorded depth maps and camera parameters."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Tuple

import cv2
import numpy as np

from utils.settings import DEPTH_EXT, DEPTH_PNG_EXT, DEPTH_SCALE


def load_json(path: str | Path) -> Any:
    """Load JSON data from ``path``."""
    with open(path, "r") as f:
        return json.load(f)


def save_json(path: str | Path, data: Any) -> None:
    """Write data as JSON to ``path``."""
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def load_npy(path: str | Path) -> np.ndarray:
    """Load an ``.npy`` array."""
    return np.load(path)


def read_depth(path: str | Path, depth_scale: float = DEPTH_SCALE) -> np.ndarray:
    """
    Return a depth map in meters.

    ``.npy`` files are float meters (integer arrays are scaled by
    ``depth_scale``); ``.png`` files are 16-bit sensor units.
    """
    path = Path(path)
    if path.suffix == DEPTH_EXT:
        depth = load_npy(path)
    elif path.suffix == DEPTH_PNG_EXT:
        depth = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if depth is None:
            raise IOError(f"Failed to read depth image {path}")
    else:
        raise ValueError(f"Unsupported depth file: {path}")
    if np.issubdtype(depth.dtype, np.integer):
        depth = depth.astype(np.float32) * depth_scale
    return depth.astype(np.float32)


def load_camera_json(path: str | Path) -> Tuple[np.ndarray, np.ndarray]:
    """
    Read ``{"K": 3x3, "pose": 4x4}`` from ``path``.
    ``pose`` is optional and defaults to identity.
    """
    data = load_json(path)
    K = np.asarray(data["K"], dtype=np.float64)
    pose = np.asarray(data.get("pose", np.eye(4)), dtype=np.float64)
    return K, pose


def list_depth_files(data_dir: str | Path) -> list[Path]:
    """Return sorted depth recordings (``.npy`` and ``.png``) in ``data_dir``."""
    data_dir = Path(data_dir)
    files = [
        p
        for p in data_dir.iterdir()
        if p.suffix in (DEPTH_EXT, DEPTH_PNG_EXT) and p.is_file()
    ]
    return sorted(files)

"""Synthetic scenes for demos and tests."""

from __future__ import annotations

import numpy as np

from geometry.depth_projection import intrinsics_matrix
from utils.settings import SyntheticCfg, synthetic as SYNTH_CFG
from vision.frame import DepthFrame, MeshAnchor


def wall_frame(
    depth: float = SYNTH_CFG.wall_depth,
    cfg: SyntheticCfg = SYNTH_CFG,
    cam_to_world: np.ndarray | None = None,
    timestamp: float = 0.0,
) -> DepthFrame:
    """Flat wall facing the camera at constant ``depth``."""
    K = intrinsics_matrix(cfg.fx, cfg.fy, cfg.width / 2.0, cfg.height / 2.0)
    buffer = np.full((cfg.height, cfg.width), depth, dtype=np.float32)
    return DepthFrame(
        depth=buffer,
        width=cfg.width,
        height=cfg.height,
        intrinsics=K,
        cam_to_world=np.eye(4) if cam_to_world is None else cam_to_world,
        timestamp=timestamp,
    )


def point_blobs(
    centers=SYNTH_CFG.blob_centers,
    radius: float = SYNTH_CFG.blob_radius,
    count: int = SYNTH_CFG.blob_points,
    seed: int = 0,
) -> np.ndarray:
    """Uniform points inside a ball of ``radius`` around each center."""
    rng = np.random.default_rng(seed)
    blobs = []
    for center in centers:
        direction = rng.normal(size=(count, 3))
        direction /= np.linalg.norm(direction, axis=1, keepdims=True)
        r = radius * rng.random(count) ** (1.0 / 3.0)
        blobs.append(np.asarray(center, dtype=np.float64) + direction * r[:, None])
    return np.vstack(blobs)


def blob_anchors(points: np.ndarray, chunks: int = 2, stride: int = 3) -> list[MeshAnchor]:
    """Split world points into mesh anchors with translated local frames."""
    anchors = []
    for chunk in np.array_split(np.asarray(points, dtype=np.float64), chunks):
        if len(chunk) == 0:
            continue
        origin = chunk.mean(axis=0)
        T = np.eye(4)
        T[:3, 3] = origin
        local = chunk - origin
        if stride > 3:
            padded = np.zeros((len(local), stride), dtype=np.float32)
            padded[:, :3] = local
            local = padded
        anchors.append(
            MeshAnchor(
                vertices=np.asarray(local, dtype=np.float32).reshape(-1),
                transform=T,
                stride=stride,
            )
        )
    return anchors

"""Depth buffer and mesh anchor sampling into world-space point sets."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from geometry.depth_projection import unproject_points
from utils.logger import Logger, LoggerType
from utils.math_utils import transform_points
from utils.settings import SamplerCfg, sampler as SAMPLER_CFG
from vision.frame import DepthFrame, MeshAnchor


class PointSampler:
    """Walk depth buffers at a fixed stride and unproject valid samples."""

    def __init__(
        self, cfg: SamplerCfg = SAMPLER_CFG, logger: LoggerType | None = None
    ) -> None:
        self.cfg = cfg
        self.logger = logger or Logger.get_logger("vision.pointcloud.sampler")

    def sample_depth(self, frame: DepthFrame) -> np.ndarray:
        """
        Return (N, 3) world points from every ``stride``-th pixel of ``frame``.

        Samples outside ``(min_depth, max_depth)`` and non-finite samples are
        dropped. A missing buffer yields an empty set; a buffer that does not
        match the declared size raises :class:`MalformedFrameError`.
        """
        if frame.is_empty:
            self.logger.debug("Empty depth buffer, no points sampled")
            return np.empty((0, 3), dtype=np.float64)
        depth = frame.depth_map()
        step = self.cfg.stride
        ys, xs = np.mgrid[0 : frame.height : step, 0 : frame.width : step]
        zs = depth[ys, xs]
        with np.errstate(invalid="ignore"):
            mask = (zs > self.cfg.min_depth) & (zs < self.cfg.max_depth)
        ys, xs, zs = ys[mask], xs[mask], zs[mask]
        uv = np.column_stack([xs / frame.width, ys / frame.height])
        points = unproject_points(uv, zs, frame.intrinsics, frame.cam_to_world)
        self.logger.debug(
            f"Sampled {len(points)} of {mask.size} depth samples (stride {step})"
        )
        return points

    def sample_mesh_anchors(self, anchors: Iterable[MeshAnchor]) -> np.ndarray:
        """
        Return every anchor vertex transformed to world space. Anchors without
        vertex data are skipped.
        """
        clouds = []
        for anchor in anchors:
            if anchor.is_empty:
                self.logger.debug("Skipping mesh anchor without vertices")
                continue
            clouds.append(transform_points(anchor.positions(), anchor.transform))
        if not clouds:
            return np.empty((0, 3), dtype=np.float64)
        points = np.vstack(clouds)
        self.logger.debug(f"Collected {len(points)} vertices from {len(clouds)} anchors")
        return points

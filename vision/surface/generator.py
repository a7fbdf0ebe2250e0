"""Point set to surface patch generation."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from utils.logger import Logger, LoggerType
from vision.pointcloud.clusterer import SpatialClusterer
from .grid_fitter import GridFitter
from .patch import PatchBuilder, SurfacePatch
from .tessellator import Tessellator


@dataclass
class SurfaceGenerator:
    """Cluster a point set and turn each cluster into a surface patch."""

    clusterer: SpatialClusterer = field(default_factory=SpatialClusterer)
    fitter: GridFitter = field(default_factory=GridFitter)
    tessellator: Tessellator = field(default_factory=Tessellator)
    builder: PatchBuilder = field(default_factory=PatchBuilder)
    logger: LoggerType = field(
        default_factory=lambda: Logger.get_logger("vision.surface.generator")
    )

    def generate(self, points: np.ndarray) -> list[SurfacePatch]:
        clusters = self.clusterer.cluster(points)
        patches = []
        for index, cluster in enumerate(clusters):
            grid = self.fitter.fit(cluster.local_points())
            mesh = self.tessellator.tessellate(grid)
            patches.append(self.builder.build(index, mesh, cluster.centroid))
        self.logger.debug(f"Generated {len(patches)} patches from {len(points)} points")
        return patches

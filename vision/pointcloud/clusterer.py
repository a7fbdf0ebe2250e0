"""Single-pass seed-radius clustering of world-space points."""

from __future__ import annotations

import numpy as np
from scipy.spatial import cKDTree

from utils.logger import Logger, LoggerType
from utils.settings import ClusterCfg, cluster as CLUSTER_CFG
from vision.frame import PointCluster


class SpatialClusterer:
    """
    Partition points into at most ``max_clusters`` proximity clusters.

    The last unassigned point seeds a cluster which absorbs every unassigned
    point closer than ``radius`` to the seed. Undersized clusters are dropped
    but their points stay consumed. The pool keeps input order, so the result
    depends only on point order.
    """

    def __init__(
        self, cfg: ClusterCfg = CLUSTER_CFG, logger: LoggerType | None = None
    ) -> None:
        self.cfg = cfg
        self.logger = logger or Logger.get_logger("vision.pointcloud.clusterer")

    def cluster(self, points: np.ndarray) -> list[PointCluster]:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(points) < self.cfg.min_total_points:
            self.logger.debug(
                f"{len(points)} points below minimum {self.cfg.min_total_points}"
            )
            return []

        tree = cKDTree(points)
        assigned = np.zeros(len(points), dtype=bool)
        last = len(points) - 1
        clusters: list[PointCluster] = []
        while last >= 0 and len(clusters) < self.cfg.max_clusters:
            seed = points[last]
            candidates = np.asarray(
                tree.query_ball_point(seed, self.cfg.radius), dtype=np.intp
            )
            candidates = candidates[~assigned[candidates]]
            dist = np.linalg.norm(points[candidates] - seed, axis=1)
            members = np.union1d(candidates[dist < self.cfg.radius], [last])
            assigned[members] = True

            if len(members) >= self.cfg.min_points:
                clusters.append(PointCluster(points=points[members], seed=seed))
            else:
                self.logger.debug(
                    f"Discarded cluster of {len(members)} points at {np.round(seed, 3)}"
                )
            while last >= 0 and assigned[last]:
                last -= 1

        self.logger.debug(
            f"Formed {len(clusters)} clusters from {len(points)} points "
            f"({int(np.count_nonzero(~assigned))} unassigned)"
        )
        return clusters

"""Depth frame to surface patch pipeline.

The vision package turns range sensor depth frames into smooth surface
patches: points are sampled from the depth buffer, clustered by proximity,
fitted with a control grid, evaluated and tessellated, then published by the
frame orchestrator as identity-keyed patches.
"""

from .frame import ControlGrid, DepthFrame, MeshAnchor, PointCluster
from .orchestrator import (
    FrameOrchestrator,
    FrameRateMeter,
    FrameResult,
    PatchDiff,
    PatchRegistry,
    PipelineMetrics,
    build_orchestrator,
)

__all__ = [
    "ControlGrid",
    "DepthFrame",
    "MeshAnchor",
    "PointCluster",
    "FrameOrchestrator",
    "FrameRateMeter",
    "FrameResult",
    "PatchDiff",
    "PatchRegistry",
    "PipelineMetrics",
    "build_orchestrator",
]

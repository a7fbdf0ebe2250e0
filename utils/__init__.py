"""Shared helper modules used across the project.

The :mod:`utils` package contains lightweight helpers for logging, settings,
YAML configuration, CLI dispatching, error tracking, rigid transforms and
simple file I/O.
"""

from .logger import Logger, LoggerType
from .settings import (
    DEPTH_SCALE,
    DEPTH_EXT,
    DEPTH_PNG_EXT,
    paths,
    logging,
    sampler,
    cluster,
    surface,
    material,
    pipeline,
    synthetic,
)
from .error_tracker import (
    ErrorTracker,
    MalformedFrameError,
    PipelineStoppedError,
    SurfaceError,
)
from .math_utils import (
    euler_to_matrix,
    make_transform,
    decompose_transform,
    invert_transform,
    pose_from_euler,
    transform_points,
)

__all__ = [
    "DEPTH_SCALE",
    "DEPTH_EXT",
    "DEPTH_PNG_EXT",
    "Logger",
    "LoggerType",
    "ErrorTracker",
    "MalformedFrameError",
    "PipelineStoppedError",
    "SurfaceError",
    "paths",
    "logging",
    "sampler",
    "cluster",
    "surface",
    "material",
    "pipeline",
    "synthetic",
    "euler_to_matrix",
    "make_transform",
    "decompose_transform",
    "invert_transform",
    "pose_from_euler",
    "transform_points",
]

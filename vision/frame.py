"""Frame and point set containers exchanged between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from utils.error_tracker import MalformedFrameError

# (R, C, 3) control point lattice, local to a cluster centroid
ControlGrid = np.ndarray


@dataclass(frozen=True, eq=False)
class DepthFrame:
    """
    One depth capture delivered by the host.

    - depth: row-major float meters, either (height, width) or flat with
      stride ``width``. ``None`` or empty means the sensor had no data.
    - intrinsics: 3x3 pinhole matrix (see :mod:`geometry.depth_projection`).
    - cam_to_world: 4x4 camera pose.
    """

    depth: np.ndarray | None
    width: int
    height: int
    intrinsics: np.ndarray
    cam_to_world: np.ndarray
    timestamp: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.depth is None or np.size(self.depth) == 0

    def depth_map(self) -> np.ndarray:
        """Return the depth buffer as a (height, width) float array."""
        self.validate()
        return np.asarray(self.depth, dtype=np.float32).reshape(self.height, self.width)

    def validate(self) -> None:
        """Raise :class:`MalformedFrameError` if the layout is inconsistent."""
        if self.width <= 0 or self.height <= 0:
            raise MalformedFrameError(
                f"Invalid frame size {self.width}x{self.height}"
            )
        if self.depth is not None and np.size(self.depth) != self.width * self.height:
            raise MalformedFrameError(
                f"Depth buffer has {np.size(self.depth)} samples, "
                f"expected {self.width}x{self.height}"
            )
        if self.depth is not None and np.ndim(self.depth) == 2:
            if np.shape(self.depth) != (self.height, self.width):
                raise MalformedFrameError(
                    f"Depth map shape {np.shape(self.depth)} does not match "
                    f"{self.height}x{self.width}"
                )
        K = np.asarray(self.intrinsics)
        if K.shape != (3, 3) or not np.all(np.isfinite(K)):
            raise MalformedFrameError(f"Invalid intrinsics shape {K.shape}")
        if K[0, 0] == 0 or K[1, 1] == 0:
            raise MalformedFrameError("Focal length must be non-zero")
        T = np.asarray(self.cam_to_world)
        if T.shape != (4, 4) or not np.all(np.isfinite(T)):
            raise MalformedFrameError(f"Invalid camera pose shape {T.shape}")


@dataclass(frozen=True, eq=False)
class MeshAnchor:
    """
    Sensor mesh chunk with its local-to-world transform.

    ``vertices`` is a flat float buffer holding ``stride`` floats per vertex,
    position components starting at ``offset``.
    """

    vertices: np.ndarray | None
    transform: np.ndarray
    stride: int = 3
    offset: int = 0

    @property
    def is_empty(self) -> bool:
        return self.vertices is None or np.size(self.vertices) == 0

    def positions(self) -> np.ndarray:
        """Return local vertex positions as an (N, 3) array."""
        if self.is_empty:
            return np.empty((0, 3), dtype=np.float64)
        buf = np.asarray(self.vertices, dtype=np.float64).reshape(-1)
        if self.stride < 3 or self.offset < 0 or self.offset + 3 > self.stride:
            raise MalformedFrameError(
                f"Invalid vertex layout stride={self.stride} offset={self.offset}"
            )
        if buf.size % self.stride:
            raise MalformedFrameError(
                f"Vertex buffer of {buf.size} floats is not a multiple of {self.stride}"
            )
        T = np.asarray(self.transform)
        if T.shape != (4, 4):
            raise MalformedFrameError(f"Invalid anchor transform shape {T.shape}")
        return buf.reshape(-1, self.stride)[:, self.offset : self.offset + 3]


@dataclass(frozen=True, eq=False)
class PointCluster:
    """Points absorbed around one seed, with the derived centroid."""

    points: np.ndarray
    seed: np.ndarray
    centroid: np.ndarray = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "centroid", np.mean(self.points, axis=0))

    def __len__(self) -> int:
        return len(self.points)

    def local_points(self) -> np.ndarray:
        """Return members relative to the centroid."""
        return self.points - self.centroid

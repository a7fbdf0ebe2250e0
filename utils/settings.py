"""Project wide configuration dataclasses and default values."""

from dataclasses import dataclass, field
from pathlib import Path

# Root dir
BASE_DIR = Path(__file__).resolve().parent.parent

# File name extensions for recorded depth maps
DEPTH_EXT = ".npy"
DEPTH_PNG_EXT = ".png"

# Depth scale of 16-bit depth PNG recordings (meters per unit)
DEPTH_SCALE = 0.001


@dataclass(frozen=True)
class Paths:
    """
    Dataclass aggregating all important filesystem paths used in the project.
    """

    CONFIG_FILE: Path = BASE_DIR / "conf" / "app.yaml"


paths = Paths()


@dataclass(frozen=True)
class LoggingCfg:
    """
    Logging configuration for the project.

    - level: Log level ("INFO", "DEBUG", etc.)
    - json: Enable/disable structured JSON logging.
    - log_dir: Directory where log files are stored.
    - log_format: Console log output format.
    - log_file_format: File log output format.
    - progress_bar_format: TQDM progress bar format.
    """

    level: str = "INFO"
    json: bool = True
    log_dir: Path = Path(".logs")
    log_format: str = (
        "<green>{time:MM-DD HH:mm:ss}</green>"
        "[<level>{level:.3}</level>]"
        "[<cyan>{extra[module]:.16}</cyan>:<cyan>{line:<3}</cyan>]"
        "<level>{message}</level>"
    )
    log_file_format: str = "{time:YYYY-MM-DD HH:mm:ss}[{level}][{file}:{line}]{message}"
    progress_bar_format: str = (
        "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"
    )


logging = LoggingCfg()


@dataclass(frozen=True)
class SamplerCfg:
    """
    Depth buffer sampling parameters.
    Samples outside (min_depth, max_depth) are treated as sensor noise.
    """

    stride: int = 8  # px, both axes
    min_depth: float = 0.1  # m
    max_depth: float = 10.0  # m


sampler = SamplerCfg()


@dataclass(frozen=True)
class ClusterCfg:
    """
    Seed-radius clustering parameters.

    - max_clusters: upper bound K on clusters per frame.
    - radius: absorption radius around the seed point (meters).
    - min_points: clusters smaller than this are discarded.
    - min_total_points: frames with fewer points produce no clusters.
    """

    max_clusters: int = 5
    radius: float = 1.0
    min_points: int = 9
    min_total_points: int = 17


cluster = ClusterCfg()


@dataclass(frozen=True)
class SurfaceCfg:
    """
    Control grid and tessellation parameters.
    """

    grid_size: int = 10  # control points per side
    resolution: int = 20  # samples per side of the tessellated patch
    up_normal: tuple[float, float, float] = (0.0, 1.0, 0.0)
    normal_eps: float = 1e-8


surface = SurfaceCfg()


@dataclass(frozen=True)
class MaterialCfg:
    """
    Display material attached to every emitted patch.
    """

    color: tuple[float, float, float, float] = (0.2, 0.6, 0.9, 0.75)  # RGBA
    roughness: float = 0.4
    metallic: bool = False


material = MaterialCfg()


@dataclass(frozen=True)
class PipelineCfg:
    """
    Frame orchestration parameters.

    - workers: number of processing threads.
    - input_queue_size: pending frames before the oldest is dropped.
    - output_queue_size: unread results before the oldest is dropped.
    - fps_window: frame rate averaging window (seconds).
    - patch_prefix: prefix of stable patch identities.
    """

    workers: int = 2
    input_queue_size: int = 4
    output_queue_size: int = 8
    fps_window: float = 1.0
    patch_prefix: str = "surface"


pipeline = PipelineCfg()


@dataclass(frozen=True)
class SyntheticCfg:
    """
    Synthetic scene used by the demo command and the tests.
    Intrinsics follow the centered principal point convention.
    """

    width: int = 256
    height: int = 192
    fx: float = 500.0
    fy: float = 500.0
    wall_depth: float = 2.0
    blob_centers: tuple[tuple[float, float, float], ...] = field(
        default_factory=lambda: ((-1.5, 0.0, -2.0), (1.5, 0.0, -2.0))
    )
    blob_radius: float = 0.3
    blob_points: int = 200


synthetic = SyntheticCfg()

__all__ = [
    "Paths",
    "LoggingCfg",
    "SamplerCfg",
    "ClusterCfg",
    "SurfaceCfg",
    "MaterialCfg",
    "PipelineCfg",
    "SyntheticCfg",
    "DEPTH_SCALE",
    "DEPTH_EXT",
    "DEPTH_PNG_EXT",
    "paths",
    "logging",
    "sampler",
    "cluster",
    "surface",
    "material",
    "pipeline",
    "synthetic",
]

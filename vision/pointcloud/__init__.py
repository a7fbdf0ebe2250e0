"""Point set acquisition and clustering."""
from .sampler import PointSampler
from .clusterer import SpatialClusterer

__all__ = [
    "PointSampler",
    "SpatialClusterer",
]

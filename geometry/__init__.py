from .depth_projection import (
    intrinsics_matrix,
    image_size_from_intrinsics,
    pixel_to_camera,
    unproject_point,
    unproject_points,
    project_point,
)

__all__ = [
    "intrinsics_matrix",
    "image_size_from_intrinsics",
    "pixel_to_camera",
    "unproject_point",
    "unproject_points",
    "project_point",
]

"""Control grid fitting, evaluation, tessellation and patch assembly."""
from .grid_fitter import GridFitter
from .evaluator import BilinearEvaluator, SurfaceEvaluator
from .tessellator import Tessellator, TriangleMesh, grid_indices, vertex_normals
from .patch import Material, PatchBuilder, SurfacePatch
from .generator import SurfaceGenerator

__all__ = [
    "GridFitter",
    "BilinearEvaluator",
    "SurfaceEvaluator",
    "Tessellator",
    "TriangleMesh",
    "grid_indices",
    "vertex_normals",
    "Material",
    "PatchBuilder",
    "SurfacePatch",
    "SurfaceGenerator",
]

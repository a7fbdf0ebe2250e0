"""Emit-ready surface patches."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import open3d as o3d

from utils.settings import MaterialCfg, material as MATERIAL_CFG
from .tessellator import TriangleMesh


@dataclass(frozen=True)
class Material:
    """Display material descriptor handed to the host renderer."""

    color: tuple[float, float, float, float] = MATERIAL_CFG.color
    roughness: float = MATERIAL_CFG.roughness
    metallic: bool = MATERIAL_CFG.metallic

    @classmethod
    def from_cfg(cls, cfg: MaterialCfg) -> "Material":
        return cls(color=tuple(cfg.color), roughness=cfg.roughness, metallic=cfg.metallic)


@dataclass(frozen=True, eq=False)
class SurfacePatch:
    """
    Tessellated surface of one cluster.

    Vertex positions are local to ``centroid``; the host places the patch by
    translating it to the centroid. ``patch_id`` is stable across frames.
    """

    patch_id: str
    positions: np.ndarray
    normals: np.ndarray
    indices: np.ndarray
    centroid: np.ndarray
    material: Material = field(default_factory=Material)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def world_positions(self) -> np.ndarray:
        """Return vertex positions translated to world space."""
        return self.positions.astype(np.float64) + self.centroid

    def to_open3d(self) -> o3d.geometry.TriangleMesh:
        """Build an Open3D mesh in world space for local viewing."""
        mesh = o3d.geometry.TriangleMesh()
        mesh.vertices = o3d.utility.Vector3dVector(self.world_positions())
        mesh.triangles = o3d.utility.Vector3iVector(
            self.indices.reshape(-1, 3).astype(np.int32)
        )
        mesh.vertex_normals = o3d.utility.Vector3dVector(
            self.normals.astype(np.float64)
        )
        mesh.paint_uniform_color(list(self.material.color[:3]))
        return mesh


class PatchBuilder:
    """Attach identity, placement and material to tessellated geometry."""

    def __init__(self, material: Material | None = None, prefix: str = "surface") -> None:
        self.material = material or Material()
        self.prefix = prefix

    def patch_id(self, index: int) -> str:
        return f"{self.prefix}_{index}"

    def build(self, index: int, mesh: TriangleMesh, centroid: np.ndarray) -> SurfacePatch:
        return SurfacePatch(
            patch_id=self.patch_id(index),
            positions=mesh.positions,
            normals=mesh.normals,
            indices=mesh.indices,
            centroid=np.asarray(centroid, dtype=np.float64),
            material=self.material,
        )

import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
import numpy as np

from utils.math_utils import invert_transform, pose_from_euler, transform_points
from vision.frame import MeshAnchor
from vision.orchestrator import FrameOrchestrator
from vision.pointcloud.sampler import PointSampler
from vision.surface.generator import SurfaceGenerator
from vision.synthetic import blob_anchors, point_blobs, wall_frame


def test_flat_wall_yields_patches_at_wall_depth():
    result = FrameOrchestrator().process_frame(wall_frame(2.0))
    assert result.metrics.surface_count >= 1
    for patch in result.patches:
        world = patch.world_positions()
        assert np.all(np.abs(world[:, 2] + 2.0) < 1e-4)
        assert patch.vertex_count == 400
        assert patch.triangle_count == 2 * 19**2
        assert np.allclose(np.linalg.norm(patch.normals, axis=1), 1.0, atol=1e-5)


def test_wall_seen_from_translated_camera_stays_at_wall_depth_in_camera_space():
    pose = pose_from_euler((0.5, 1.2, -0.3), (0.0, 0.0, 0.0))
    result = FrameOrchestrator().process_frame(wall_frame(2.0, cam_to_world=pose))
    assert result.patches
    to_camera = invert_transform(pose)
    for patch in result.patches:
        cam = transform_points(patch.world_positions(), to_camera)
        assert np.all(np.abs(cam[:, 2] + 2.0) < 1e-4)


def test_two_blobs_yield_two_patches():
    points = point_blobs()
    patches = SurfaceGenerator().generate(points)
    assert len(patches) == 2
    centroids = sorted(p.centroid[0] for p in patches)
    assert np.allclose(centroids, [-1.5, 1.5], atol=0.1)


def test_mesh_anchor_frame():
    points = point_blobs()
    anchors = blob_anchors(points, chunks=3, stride=4)
    assert np.allclose(np.sort(PointSampler().sample_mesh_anchors(anchors), axis=0),
                       np.sort(points, axis=0), atol=1e-5)
    result = FrameOrchestrator().process_mesh_anchors(anchors)
    assert result.metrics.point_count == len(points)
    assert result.metrics.surface_count == 2


def test_empty_input_gives_no_patches():
    assert SurfaceGenerator().generate(np.empty((0, 3))) == []
    result = FrameOrchestrator().process_mesh_anchors([])
    assert result.patches == ()
    assert result.metrics.surface_count == 0


def test_anchor_without_vertices_does_not_drop_frame():
    points = point_blobs()
    anchors = blob_anchors(points) + [MeshAnchor(vertices=None, transform=np.eye(4))]
    result = FrameOrchestrator().process_mesh_anchors(anchors)
    assert result is not None
    assert result.metrics.point_count == len(points)
    assert result.metrics.surface_count == 2

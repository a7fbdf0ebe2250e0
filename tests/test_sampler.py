import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
import numpy as np
import pytest

from geometry.depth_projection import intrinsics_matrix
from utils.error_tracker import MalformedFrameError
from utils.settings import SamplerCfg
from vision.frame import DepthFrame, MeshAnchor
from vision.pointcloud.sampler import PointSampler
from vision.synthetic import wall_frame


def test_stride_sampling_count():
    points = PointSampler().sample_depth(wall_frame(2.0))
    assert points.shape == (32 * 24, 3)
    assert np.allclose(points[:, 2], -2.0)


def test_custom_stride():
    points = PointSampler(SamplerCfg(stride=16)).sample_depth(wall_frame(2.0))
    assert len(points) == 16 * 12


def test_invalid_depths_are_dropped():
    frame = wall_frame(2.0)
    depth = frame.depth.copy()
    depth[0, 0] = 0.05
    depth[0, 8] = 0.0
    depth[0, 16] = 10.0
    depth[0, 24] = np.nan
    depth[8, 0] = 12.0
    depth[8, 8] = 0.1
    bad = DepthFrame(depth, frame.width, frame.height, frame.intrinsics, frame.cam_to_world)
    points = PointSampler().sample_depth(bad)
    assert len(points) == 32 * 24 - 6
    assert np.all(np.isfinite(points))


def test_missing_buffer_yields_no_points():
    K = intrinsics_matrix(500.0, 500.0, 128.0, 96.0)
    for depth in (None, np.empty(0, dtype=np.float32)):
        frame = DepthFrame(depth, 256, 192, K, np.eye(4))
        assert PointSampler().sample_depth(frame).shape == (0, 3)


def test_flat_buffer_with_row_stride():
    frame = wall_frame(2.0)
    flat = DepthFrame(
        frame.depth.reshape(-1), frame.width, frame.height, frame.intrinsics, frame.cam_to_world
    )
    sampler = PointSampler()
    assert np.allclose(sampler.sample_depth(flat), sampler.sample_depth(frame))


def test_dimension_mismatch_raises():
    K = intrinsics_matrix(500.0, 500.0, 128.0, 96.0)
    frame = DepthFrame(np.ones(100, dtype=np.float32), 256, 192, K, np.eye(4))
    with pytest.raises(MalformedFrameError):
        PointSampler().sample_depth(frame)
    transposed = DepthFrame(np.ones((256, 192), dtype=np.float32), 256, 192, K, np.eye(4))
    with pytest.raises(MalformedFrameError):
        PointSampler().sample_depth(transposed)


def test_bad_pose_raises():
    frame = wall_frame(2.0)
    bad = DepthFrame(frame.depth, frame.width, frame.height, frame.intrinsics, np.eye(3))
    with pytest.raises(MalformedFrameError):
        PointSampler().sample_depth(bad)


def test_mesh_anchor_vertices_are_transformed():
    T = np.eye(4)
    T[:3, 3] = [1.0, 0.0, -1.0]
    # xyz + normal per vertex
    vertices = np.array(
        [[0.0, 0.0, 0.0, 0.0, 1.0, 0.0], [1.0, 2.0, 3.0, 0.0, 1.0, 0.0]],
        dtype=np.float32,
    ).reshape(-1)
    anchor = MeshAnchor(vertices=vertices, transform=T, stride=6)
    points = PointSampler().sample_mesh_anchors([anchor, anchor])
    assert points.shape == (4, 3)
    assert np.allclose(points[:2], [[1.0, 0.0, -1.0], [2.0, 2.0, 2.0]])


def test_no_mesh_anchors():
    assert PointSampler().sample_mesh_anchors([]).shape == (0, 3)


def test_bad_vertex_layout_raises():
    anchor = MeshAnchor(vertices=np.zeros(7, dtype=np.float32), transform=np.eye(4))
    with pytest.raises(MalformedFrameError):
        PointSampler().sample_mesh_anchors([anchor])


def test_mesh_anchor_without_vertices_is_skipped():
    anchor = MeshAnchor(vertices=np.zeros(6, dtype=np.float32), transform=np.eye(4))
    anchors = [
        MeshAnchor(vertices=None, transform=np.eye(4)),
        anchor,
        MeshAnchor(vertices=np.empty(0, dtype=np.float32), transform=np.eye(4)),
    ]
    points = PointSampler().sample_mesh_anchors(anchors)
    assert points.shape == (2, 3)
    assert PointSampler().sample_mesh_anchors(anchors[:1]).shape == (0, 3)

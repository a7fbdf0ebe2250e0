import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
import numpy as np

from utils.settings import ClusterCfg
from vision.pointcloud.clusterer import SpatialClusterer
from vision.synthetic import point_blobs


def test_radius_invariant_holds_for_every_member():
    rng = np.random.default_rng(3)
    points = rng.uniform(-2.0, 2.0, size=(2000, 3))
    clusters = SpatialClusterer().cluster(points)
    assert clusters
    for cluster in clusters:
        dist = np.linalg.norm(cluster.points - cluster.seed, axis=1)
        assert np.all(dist <= 1.0)


def test_cluster_count_and_size_bounds():
    centers = [(3.0 * i, 0.0, 0.0) for i in range(8)]
    points = point_blobs(centers=centers, radius=0.2, count=50)
    clusters = SpatialClusterer().cluster(points)
    assert len(clusters) == 5
    assert all(len(c) >= 9 for c in clusters)


def test_seed_is_last_remaining_point():
    points = point_blobs(centers=[(0.0, 0.0, 0.0), (5.0, 0.0, 0.0)], count=30)
    clusters = SpatialClusterer().cluster(points)
    assert np.allclose(clusters[0].seed, points[-1])
    assert np.allclose(clusters[0].centroid, points[30:].mean(axis=0))


def test_two_separated_blobs_give_two_clusters():
    points = point_blobs()
    clusters = SpatialClusterer().cluster(points)
    assert len(clusters) == 2
    assert sorted(len(c) for c in clusters) == [200, 200]


def test_too_few_points_give_no_clusters():
    points = np.zeros((16, 3))
    assert SpatialClusterer().cluster(points) == []
    assert SpatialClusterer().cluster(np.empty((0, 3))) == []


def test_small_clusters_are_discarded():
    # 8 isolated points followed by a dense blob
    sparse = np.array([[10.0 * i, 50.0, 0.0] for i in range(8)])
    dense = point_blobs(centers=[(0.0, 0.0, 0.0)], radius=0.1, count=20)
    points = np.vstack([sparse, dense])
    clusters = SpatialClusterer().cluster(points)
    assert len(clusters) == 1
    assert len(clusters[0]) == 20


def test_discarded_clusters_do_not_count_towards_limit():
    sparse = np.array([[10.0 * i, 50.0, 0.0] for i in range(6)])
    blobs = point_blobs(centers=[(0.0, 0.0, 0.0), (4.0, 0.0, 0.0)], count=20)
    points = np.vstack([blobs, sparse])
    clusters = SpatialClusterer(ClusterCfg(max_clusters=2)).cluster(points)
    assert len(clusters) == 2


def test_clustering_is_deterministic():
    points = np.random.default_rng(5).uniform(-3.0, 3.0, size=(500, 3))
    a = SpatialClusterer().cluster(points)
    b = SpatialClusterer().cluster(points)
    assert len(a) == len(b)
    for ca, cb in zip(a, b):
        assert np.array_equal(ca.points, cb.points)

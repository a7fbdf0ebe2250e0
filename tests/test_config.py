import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))
import pytest

from utils.config import Config, DictConfigLoader, YamlConfigLoader
from utils.settings import ClusterCfg, cluster
from vision.orchestrator import build_orchestrator
from vision.synthetic import wall_frame


@pytest.fixture
def dict_config():
    def _use(data):
        Config.set_loader(DictConfigLoader(data))
        Config.load(force_reload=True)

    yield _use
    Config.set_loader(YamlConfigLoader())


def test_section_overlays_defaults(dict_config):
    dict_config({"cluster": {"max_clusters": 2, "radius": 0.5}})
    cfg = Config.section("cluster", cluster)
    assert cfg == ClusterCfg(max_clusters=2, radius=0.5)
    assert Config.get("cluster.min_points", 9) == 9


def test_default_yaml_matches_settings():
    Config.set_loader(YamlConfigLoader())
    Config.load(force_reload=True)
    assert Config.section("cluster", cluster) == cluster
    assert Config.get("pipeline.patch_prefix") == "surface"


def test_build_orchestrator_from_config(dict_config):
    dict_config(
        {
            "sampler": {"stride": 16},
            "surface": {"resolution": 5},
            "material": {"color": [1.0, 0.0, 0.0, 1.0]},
            "pipeline": {"patch_prefix": "wall"},
        }
    )
    orchestrator = build_orchestrator()
    result = orchestrator.process_frame(wall_frame(2.0))
    assert result.metrics.point_count == 16 * 12
    assert all(p.patch_id.startswith("wall_") for p in result.patches)
    assert all(p.vertex_count == 25 for p in result.patches)
    assert all(p.material.color == (1.0, 0.0, 0.0, 1.0) for p in result.patches)


def test_missing_default_config_falls_back_to_settings(tmp_path, monkeypatch):
    monkeypatch.setattr("utils.config.DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml")
    Config.set_loader(YamlConfigLoader())
    try:
        assert Config.section("cluster", cluster) == cluster
        assert Config.get("pipeline.patch_prefix", "surface") == "surface"
        result = build_orchestrator().process_frame(wall_frame(2.0))
        assert result.metrics.point_count == 32 * 24
        assert all(p.patch_id.startswith("surface_") for p in result.patches)
    finally:
        Config.set_loader(YamlConfigLoader())


def test_missing_explicit_config_raises(tmp_path):
    Config.set_loader(YamlConfigLoader())
    with pytest.raises(FileNotFoundError):
        Config.load(tmp_path / "missing.yaml", force_reload=True)
    Config.set_loader(YamlConfigLoader())

import json

import pytest

from trail_engine import config


@pytest.fixture
def config_paths(tmp_path, monkeypatch):
    global_path = tmp_path / "global" / "trail-engine.json"
    local_path = tmp_path / "local" / "trail-engine.json"
    monkeypatch.setattr(config, "CONFIG_PATH", global_path)
    monkeypatch.setattr(config, "LOCAL_CONFIG_PATH", local_path)
    return global_path, local_path


class TestLoadConfig:
    def test_no_files(self, config_paths):
        assert config.load_config() == {}

    def test_local_overrides_global(self, config_paths):
        global_path, local_path = config_paths
        global_path.parent.mkdir()
        local_path.parent.mkdir()
        global_path.write_text(json.dumps({"cluster_radius_px": 40, "debounce_ms": 200}))
        local_path.write_text(json.dumps({"cluster_radius_px": 60}))
        assert config.load_config() == {"cluster_radius_px": 60, "debounce_ms": 200}

    def test_malformed_file_skipped(self, config_paths):
        global_path, _ = config_paths
        global_path.parent.mkdir()
        global_path.write_text("{not json")
        assert config.load_config() == {}

    def test_non_object_file_skipped(self, config_paths):
        global_path, local_path = config_paths
        global_path.parent.mkdir()
        local_path.parent.mkdir()
        global_path.write_text(json.dumps({"viewport_margin": 1.5}))
        local_path.write_text(json.dumps([1, 2, 3]))
        assert config.load_config() == {"viewport_margin": 1.5}


class TestGetSetting:
    def test_default(self):
        assert config.get_setting("viewport_margin", {}) == 1.2

    def test_override(self):
        assert config.get_setting("viewport_margin", {"viewport_margin": 1.5}) == 1.5

    def test_reads_files_when_no_config_given(self, config_paths):
        global_path, _ = config_paths
        global_path.parent.mkdir()
        global_path.write_text(json.dumps({"debounce_ms": 150}))
        assert config.get_setting("debounce_ms") == 150

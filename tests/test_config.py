"""Tests for DownloaderConfig."""

import json

import pytest

from tile_prefetcher.downloader import FORMAT_DEFAULT, FORMAT_SPECIAL, DownloaderConfig
from tile_prefetcher.exceptions import ConfigError


def test_defaults():
    config = DownloaderConfig()
    assert config.max_threads == 5
    assert config.retries == 3
    assert config.tile_path is None
    assert config.write_format == FORMAT_DEFAULT
    assert config.progress_interval == 0.3
    assert config.retry_interval == 5.0
    assert not config.disk_mode


@pytest.mark.parametrize("kwargs", [
    {"max_threads": 0},
    {"retries": -1},
    {"retry_limit": -2},
    {"write_format": ""},
    {"write_format": "/{z}/{x}.png"},
    {"progress_interval": 0},
    {"tile_path": "  "},
])
def test_invalid_values(kwargs):
    with pytest.raises(ConfigError):
        DownloaderConfig(**kwargs)


def test_preset_name_is_resolved():
    assert DownloaderConfig(write_format="special").write_format == FORMAT_SPECIAL


def test_with_overrides_ignores_none(tmp_path):
    config = DownloaderConfig(retries=1).with_overrides(retries=None, tile_path=str(tmp_path))
    assert config.retries == 1
    assert config.disk_mode
    assert config.tile_path == str(tmp_path)


@pytest.mark.parametrize("tile_path", ["D:/tiles", "C:\\maps\\cache", "/mnt/d/tiles", "relative/tiles"])
def test_tile_path_kept_as_given(tile_path):
    assert DownloaderConfig(tile_path=tile_path).tile_path == tile_path


def test_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"max_threads": 8, "retries": 0, "write_format": "normal"}))
    config = DownloaderConfig.from_file(path)
    assert config.max_threads == 8
    assert config.retries == 0
    assert config.write_format == "/{z}/{x}_{y}.png"


def test_from_file_rejects_unknown_keys(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"threads": 8}))
    with pytest.raises(ConfigError, match="threads"):
        DownloaderConfig.from_file(path)


def test_from_file_rejects_bad_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError):
        DownloaderConfig.from_file(path)


def test_to_dict_round_trip():
    config = DownloaderConfig(max_threads=3, retry_limit=0)
    assert DownloaderConfig.from_dict(config.to_dict()) == config

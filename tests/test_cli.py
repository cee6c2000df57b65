"""Tests for the command line front end."""

import json
import sys

import pytest
from loguru import logger

from tile_prefetcher import cli
from tile_prefetcher.cache import SqliteTileCache
from tile_prefetcher.providers import ProviderManager
from tile_prefetcher.tile import TileCoord

from conftest import StubOverlay, StubProvider


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def stub_provider():
    provider = StubProvider(name="cli_stub")
    ProviderManager.register_provider(provider)
    return provider


@pytest.fixture
def fast_config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"progress_interval": 0.01, "retry_interval": 0.01}))
    return path


def test_list_providers(stub_provider, capsys):
    assert cli.main(["list"]) == 0
    out = capsys.readouterr().out
    assert "osm" in out
    assert "cli_stub" in out


def test_fetch_to_disk(tmp_path, stub_provider, fast_config_file):
    tiles_file = tmp_path / "tiles.txt"
    tiles_file.write_text("# two tiles\n3/1/2\n3 4 5\n", encoding="utf-8")
    out_dir = tmp_path / "out"

    code = cli.main([
        "--log-level", "WARNING",
        "fetch",
        "--provider", "cli_stub",
        "--tiles-file", str(tiles_file),
        "--tile", "2/0/0",
        "--output-dir", str(out_dir),
        "--format", "normal",
        "--threads", "2",
        "--config", str(fast_config_file),
    ])

    assert code == 0
    for z, x, y in [(3, 1, 2), (3, 4, 5), (2, 0, 0)]:
        assert (out_dir / "_alllayers" / str(z) / f"{x}_{y}.png").read_bytes() == b"\x2a"


def test_fetch_to_cache(tmp_path, stub_provider, fast_config_file):
    db = tmp_path / "cache.db"
    code = cli.main([
        "fetch", "--provider", "cli_stub", "--tile", "6/7/8",
        "--cache-db", str(db), "--config", str(fast_config_file),
    ])
    assert code == 0
    cache = SqliteTileCache(db)
    try:
        assert cache.get("cli_stub", TileCoord(6, 7, 8), 6) == b"\x2a"
    finally:
        cache.close()


def test_fetch_reports_failures(tmp_path, fast_config_file):
    ProviderManager.register_provider(
        StubProvider(name="cli_broken", overlays=[StubOverlay(name="cli_broken", fail_times=-1)])
    )
    config = tmp_path / "broken.json"
    config.write_text(json.dumps({
        "progress_interval": 0.01, "retry_interval": 0.01, "retries": 0, "retry_limit": 1,
    }))
    code = cli.main([
        "fetch", "--provider", "cli_broken", "--tile", "1/0/0",
        "--output-dir", str(tmp_path / "out"), "--config", str(config),
    ])
    assert code == 1


def test_fetch_requires_a_sink(stub_provider):
    assert cli.main(["fetch", "--provider", "cli_stub", "--tile", "1/0/0"]) == 2


def test_bad_tile_is_reported(stub_provider, tmp_path):
    code = cli.main(["fetch", "--provider", "cli_stub", "--tile", "x/y", "--output-dir", str(tmp_path)])
    assert code == 2


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_output_dir_kept_as_given():
    args = cli.build_parser().parse_args(["fetch", "--provider", "osm", "--output-dir", "D:/tiles"])
    assert cli.build_config(args).tile_path == "D:/tiles"


def test_wsl_path_converts_drive_letter():
    args = cli.build_parser().parse_args(
        ["fetch", "--provider", "osm", "--output-dir", "D:\\tiles", "--wsl-path"]
    )
    assert cli.build_config(args).tile_path == "/mnt/d/tiles"

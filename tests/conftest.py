"""Pytest fixtures: stub overlays/providers and an event recorder."""

import threading
from collections import defaultdict

import pytest

from tile_prefetcher.downloader import DownloaderConfig, EventType
from tile_prefetcher.providers import TileOverlay, TileProviderType


class StubOverlay(TileOverlay):
    """
    按计划返回数据的图层

    fail_times: 每个坐标先失败多少次（int 对所有坐标生效，dict 按坐标指定，-1 表示一直失败）
    raises: 失败时抛异常而不是返回 None
    """

    def __init__(self, name="stub", data=b"\x2a", fail_times=0, raises=False, gate=None):
        super().__init__(name=name)
        self.data = data
        self.fail_times = fail_times
        self.raises = raises
        self.gate = gate
        self.calls = defaultdict(int)
        self.callers = defaultdict(list)
        self._lock = threading.Lock()

    def _failures_for(self, key):
        if isinstance(self.fail_times, dict):
            return self.fail_times.get(key, 0)
        return self.fail_times

    def get_tile_image(self, x, y, zoom):
        if self.gate is not None:
            self.gate.wait(5)
        key = (zoom, x, y)
        with self._lock:
            self.calls[key] += 1
            attempt = self.calls[key]
            self.callers[key].append(threading.current_thread().name)
        failures = self._failures_for(key)
        if failures < 0 or attempt <= failures:
            if self.raises:
                raise ConnectionError(f"stub failure {key}")
            return None
        return self.data


class StubProvider:
    def __init__(self, name="stub", overlays=None):
        self.name = name
        self.overlays = overlays if overlays is not None else [StubOverlay(name)]
        self.provider_type = TileProviderType.CUSTOM
        self.min_zoom = 0
        self.max_zoom = 23

    @property
    def provider_id(self):
        return self.name


class EventRecorder:
    def __init__(self):
        self.events = []
        self._lock = threading.Lock()

    def __call__(self, event):
        with self._lock:
            self.events.append(event)

    def of(self, kind: EventType):
        with self._lock:
            return [e for e in self.events if e.kind == kind]

    def attach(self, downloader):
        downloader.subscribe(on_start=self, on_progress=self, on_complete=self)
        return self


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def fast_config(tmp_path):
    """缩短进度和重试间隔的配置工厂"""

    def make(**kwargs):
        kwargs.setdefault("progress_interval", 0.01)
        kwargs.setdefault("retry_interval", 0.01)
        return DownloaderConfig(**kwargs)

    return make

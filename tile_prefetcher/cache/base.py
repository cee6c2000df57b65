# tile_prefetcher/cache/base.py

import threading
from typing import Optional, Tuple

from ..tile import TileCoord


class TileCache:
    """
    共享瓦片缓存接口，按 (提供商, 坐标, 缩放级别) 存取瓦片字节

    两个空闲行为开关：
        use_memory_cache: 是否使用内存缓存层
        cache_on_idle_read: 空闲时是否从缓存读取
    下载期间由下载器关闭，下载完成后恢复为下载前的值
    """

    def __init__(self):
        self.use_memory_cache = True
        self.cache_on_idle_read = True
        self._saved_idle: Optional[Tuple[bool, bool]] = None
        self._idle_lock = threading.Lock()

    def put(self, data: bytes, provider_id: str, coord: TileCoord, zoom: int):
        """
        写入一个瓦片

        Args:
            data: 图片字节
            provider_id: 提供商/图层的缓存键
            coord: 瓦片坐标
            zoom: 缩放级别
        """
        raise NotImplementedError

    def get(self, provider_id: str, coord: TileCoord, zoom: int) -> Optional[bytes]:
        raise NotImplementedError

    def suspend_idle(self):
        """
        关闭空闲行为并记住原值，重复调用只记录第一次的值
        """
        with self._idle_lock:
            if self._saved_idle is None:
                self._saved_idle = (self.use_memory_cache, self.cache_on_idle_read)
            self.use_memory_cache = False
            self.cache_on_idle_read = False
        self._on_idle_changed()

    def restore_idle(self):
        """
        恢复 suspend_idle 之前的空闲行为
        """
        with self._idle_lock:
            if self._saved_idle is None:
                return
            self.use_memory_cache, self.cache_on_idle_read = self._saved_idle
            self._saved_idle = None
        self._on_idle_changed()

    def _on_idle_changed(self):
        pass

    def close(self):
        pass

# tile_prefetcher/cache/memory.py

import threading
from typing import Dict, Optional, Tuple

from ..tile import TileCoord
from .base import TileCache


class MemoryTileCache(TileCache):
    """
    基于字典的内存瓦片缓存，线程安全
    """

    def __init__(self):
        super().__init__()
        self._tiles: Dict[Tuple[str, int, int, int], bytes] = {}
        self._lock = threading.Lock()

    def put(self, data: bytes, provider_id: str, coord: TileCoord, zoom: int):
        with self._lock:
            self._tiles[(provider_id, zoom, coord.x, coord.y)] = bytes(data)

    def get(self, provider_id: str, coord: TileCoord, zoom: int) -> Optional[bytes]:
        with self._lock:
            return self._tiles.get((provider_id, zoom, coord.x, coord.y))

    def __len__(self) -> int:
        with self._lock:
            return len(self._tiles)

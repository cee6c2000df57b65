# tile_prefetcher/cache/__init__.py

from .base import TileCache
from .memory import MemoryTileCache
from .sqlite import SqliteTileCache

__all__ = ['TileCache', 'MemoryTileCache', 'SqliteTileCache']

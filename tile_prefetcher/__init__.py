# tile_prefetcher/__init__.py

from .exceptions import ConfigError, TileWriteError
from .tile import TileCoord, WorkItem, load_tile_list, parse_tile
from .cache import MemoryTileCache, SqliteTileCache, TileCache
from .providers import ProviderManager, TileOverlay, TileProvider
from .downloader import (
    BatchDownloader,
    DownloaderConfig,
    DownloaderState,
    EventType,
    PathFormatter,
    TileDownloadEvent,
    TileDownloader,
)

__version__ = "1.0.0"

__all__ = [
    'ConfigError', 'TileWriteError',
    'TileCoord', 'WorkItem', 'load_tile_list', 'parse_tile',
    'TileCache', 'MemoryTileCache', 'SqliteTileCache',
    'ProviderManager', 'TileOverlay', 'TileProvider',
    'BatchDownloader', 'DownloaderConfig', 'DownloaderState', 'EventType',
    'PathFormatter', 'TileDownloadEvent', 'TileDownloader',
]

# tile_prefetcher/downloader/__init__.py

from .base import TileDownloader, DownloaderState
from .batch import BatchDownloader
from .config import DownloaderConfig
from .fetcher import TileFetcher
from .path_format import (
    FORMAT_DEFAULT,
    FORMAT_NORMAL,
    FORMAT_SPECIAL,
    TILE_WRITE_FORMATS,
    PathFormatter,
    external_to_internal,
    internal_to_external,
)
from .progress import EventType, TileDownloadEvent
from .retry import RetryQueue
from .sink import CacheTileSink, DiskTileSink, TileSink
from .utils import convert_path, partition_ranges

__all__ = [
    'TileDownloader', 'DownloaderState', 'BatchDownloader', 'DownloaderConfig',
    'TileFetcher', 'PathFormatter', 'external_to_internal', 'internal_to_external',
    'FORMAT_DEFAULT', 'FORMAT_NORMAL', 'FORMAT_SPECIAL', 'TILE_WRITE_FORMATS',
    'EventType', 'TileDownloadEvent', 'RetryQueue',
    'TileSink', 'DiskTileSink', 'CacheTileSink', 'convert_path', 'partition_ranges',
]

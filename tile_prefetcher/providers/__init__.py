# tile_prefetcher/providers/__init__.py

from .base import TileOverlay, TileProvider, TileProviderType
from .osm import OSMTileProvider
from .bing import BingTileProvider
from .custom import CustomTileProvider
from .composite import CompositeTileProvider
from .manager import ProviderManager

__all__ = [
    'TileOverlay',
    'TileProvider',
    'TileProviderType',
    'OSMTileProvider',
    'BingTileProvider',
    'CustomTileProvider',
    'CompositeTileProvider',
    'ProviderManager'
]

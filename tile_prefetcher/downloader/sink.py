# tile_prefetcher/downloader/sink.py

from pathlib import Path
from typing import Union

from loguru import logger

from ..cache import TileCache
from ..exceptions import TileWriteError
from ..providers import TileOverlay
from ..tile import TileCoord
from .path_format import PathFormatter
from .utils import ensure_directory


class TileSink:
    """
    瓦片落地：磁盘目录或共享缓存
    """

    def put(self, data: bytes, overlay: TileOverlay, coord: TileCoord):
        raise NotImplementedError


class DiskTileSink(TileSink):
    """
    写入磁盘：<tile_path>/_alllayers<格式化路径>，每个坐标路径唯一，线程之间互不影响
    """

    def __init__(self, tile_path: Union[str, Path], formatter: PathFormatter):
        self.tile_path = Path(tile_path)
        self.formatter = formatter

    def put(self, data: bytes, overlay: TileOverlay, coord: TileCoord):
        try:
            file_path = self.formatter.format_path(self.tile_path, coord)
            ensure_directory(file_path.parent)
            with open(file_path, 'wb') as f:
                f.write(data)
        except (OSError, ValueError) as e:
            raise TileWriteError(f"文件写入错误 {coord}: {e}") from e
        logger.debug(f"写入瓦片: {file_path} ({len(data)} 字节)")


class CacheTileSink(TileSink):
    """
    写入共享缓存，下载期间关闭缓存的空闲行为，结束后恢复
    """

    def __init__(self, cache: TileCache):
        self.cache = cache

    def put(self, data: bytes, overlay: TileOverlay, coord: TileCoord):
        try:
            self.cache.put(data, overlay.db_id, coord, coord.zoom)
        except Exception as e:
            raise TileWriteError(f"缓存写入错误 {coord}: {e}") from e

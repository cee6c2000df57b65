# tile_prefetcher/downloader/fetcher.py

from loguru import logger

from ..tile import WorkItem
from .sink import TileSink


class TileFetcher:
    """
    获取单个瓦片的所有图层并交给 sink 落地

    任何一个图层返回 None、抛出异常或写入失败，整个瓦片都算临时失败；
    之前已写入的图层在重试时会被重新覆盖写入
    """

    def __init__(self, sink: TileSink):
        self.sink = sink

    def fetch(self, item: WorkItem) -> bool:
        coord = item.coord
        for overlay in item.provider.overlays:
            try:
                data = overlay.get_tile_image(coord.x, coord.y, coord.zoom)
            except Exception as e:
                logger.warning(f"图层 {overlay.name} 下载失败: {coord} - {e}")
                return False

            if data is None:
                logger.debug(f"图层 {overlay.name} 无数据: {coord}")
                return False

            try:
                self.sink.put(data, overlay, coord)
            except Exception as e:
                logger.warning(f"图层 {overlay.name} 保存失败: {coord} - {e}")
                return False
        return True

# tile_prefetcher/downloader/batch.py

from typing import Dict, Sequence

from ..cache import TileCache
from ..providers import ProviderManager
from ..tile import TileCoord
from .base import TileDownloader
from .config import DownloaderConfig


class BatchDownloader:
    """
    批量下载工具：提供阻塞式的高级接口
    """

    @staticmethod
    def download_tiles(
        provider_name: str,
        tiles: Sequence[TileCoord],
        output_dir: str = None,
        cache: TileCache = None,
        max_threads: int = None,
        retries: int = None,
        write_format: str = None,
        config: DownloaderConfig = None,
        timeout: float = None,
    ) -> Dict[str, int]:
        """
        下载瓦片列表并等待完成

        Args:
            provider_name: 瓦片提供商名称
            tiles: 瓦片坐标列表
            output_dir: 输出目录，为空时写入 cache
            cache: 共享瓦片缓存
            max_threads: 线程数
            retries: 下载线程内的重试次数
            write_format: 瓦片路径模板
            config: 基础配置，其余参数覆盖其中对应项
            timeout: 最长等待时间（秒），超时后取消下载

        Returns:
            Dict[str, int]: 下载统计信息
        """
        provider = ProviderManager.get_provider(provider_name)
        config = (config or DownloaderConfig()).with_overrides(
            tile_path=output_dir,
            max_threads=max_threads,
            retries=retries,
            write_format=write_format,
        )
        dl = TileDownloader(config, cache=cache)
        dl.start(provider, tiles)
        if not dl.wait(timeout):
            dl.cancel()
            dl.wait()
        return dl.get_statistics()

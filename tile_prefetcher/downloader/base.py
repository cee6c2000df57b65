# tile_prefetcher/downloader/base.py

import threading
import time
from enum import Enum
from typing import Dict, List, Optional, Sequence

from loguru import logger

from ..cache import TileCache
from ..exceptions import ConfigError
from ..tile import TileCoord, WorkItem
from .config import DownloaderConfig
from .fetcher import TileFetcher
from .path_format import PathFormatter
from .progress import (
    DownloadEvents,
    EventCallback,
    EventType,
    ProgressReporter,
    ProgressSnapshot,
    TileDownloadEvent,
)
from .retry import RetryQueue
from .sink import CacheTileSink, DiskTileSink, TileSink
from .utils import partition_ranges


class DownloaderState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"


class TileDownloader:
    """
    核心下载器：把瓦片列表分给多个线程并发下载

    - 每个线程按顺序处理分到的瓦片，失败时原地重试 retries 次，
      仍失败则放入重试队列
    - 重试线程不断从重试队列取出瓦片再次尝试
    - 进度线程定时发出进度事件，完成时发出唯一一次完成事件
    - 已完成数 done 只在 self.lock 内修改，每个瓦片最多计数一次
    """

    def __init__(self, config: DownloaderConfig = None, cache: TileCache = None):
        """
        初始化下载器

        Args:
            config: 下载器配置，默认使用 DownloaderConfig()
            cache: 共享瓦片缓存，未配置 tile_path 时必须提供；
                   磁盘模式下也会在下载期间关闭它的空闲行为
        """
        self.config = config or DownloaderConfig()
        self.cache = cache

        if self.config.disk_mode:
            self.sink: TileSink = DiskTileSink(self.config.tile_path, PathFormatter(self.config.write_format))
        elif cache is not None:
            self.sink = CacheTileSink(cache)
        else:
            raise ConfigError("未配置瓦片目录时必须提供瓦片缓存")

        self.fetcher = TileFetcher(self.sink)
        self.events = DownloadEvents()
        self.lock = threading.Lock()

        self.provider = None
        self.total_tasks = 0
        self.downloaded_count = 0
        self.failed_count = 0
        self._complete = False
        self._cancelled = False
        self._state = DownloaderState.IDLE

        self.retry_queue = RetryQueue()
        self.worker_threads: List[threading.Thread] = []
        self.retry_thread: Optional[threading.Thread] = None
        self.reporter: Optional[ProgressReporter] = None

        # 停止信号：取消或全部完成时设置，唤醒等待中的重试线程
        self.stop_event = threading.Event()
        # 完成事件已发出
        self.finished_event = threading.Event()
        self.finished_event.set()

        logger.info(
            f"初始化下载器: threads={self.config.max_threads}, retries={self.config.retries}, "
            f"mode={'disk' if self.config.disk_mode else 'cache'}, tile_path={self.config.tile_path}"
        )

    # ---- 观察者 ----

    def subscribe(
        self,
        on_start: EventCallback = None,
        on_progress: EventCallback = None,
        on_complete: EventCallback = None,
    ):
        """
        订阅下载事件，回调参数为 TileDownloadEvent
        """
        if on_start:
            self.events.subscribe(EventType.START, on_start)
        if on_progress:
            self.events.subscribe(EventType.PROGRESS, on_progress)
        if on_complete:
            self.events.subscribe(EventType.COMPLETE, on_complete)

    # ---- 状态 ----

    @property
    def state(self) -> DownloaderState:
        return self._state

    @property
    def is_complete(self) -> bool:
        return self._complete

    def _snapshot(self) -> ProgressSnapshot:
        with self.lock:
            return ProgressSnapshot(
                self.total_tasks, self.downloaded_count, self.failed_count,
                self._complete, self._cancelled,
            )

    def get_statistics(self) -> Dict[str, int]:
        """
        获取下载统计信息

        Returns:
            Dict[str, int]: downloaded / failed / pending / total
        """
        with self.lock:
            pending = self.total_tasks - self.downloaded_count - self.failed_count
            return {
                'downloaded': self.downloaded_count,
                'failed': self.failed_count,
                'pending': max(0, pending),
                'total': self.total_tasks,
            }

    # ---- 生命周期 ----

    def start(self, provider, tiles: Sequence[TileCoord]):
        """
        开始下载，立即返回；通过事件或 wait() 获取结果

        Args:
            provider: 瓦片提供商，需要提供 overlays 和 provider_id
            tiles: 瓦片坐标列表
        """
        if not self.finished_event.is_set():
            raise RuntimeError("下载器正在运行")

        items = [WorkItem(coord, provider) for coord in tiles]

        # 上一次下载的线程在完成后会自行退出
        for t in self.worker_threads + [self.retry_thread]:
            if t is not None:
                t.join()

        with self.lock:
            self.provider = provider
            self.total_tasks = len(items)
            self.downloaded_count = 0
            self.failed_count = 0
            self._complete = self.total_tasks == 0
            self._cancelled = False
            self._state = DownloaderState.COMPLETE if self._complete else DownloaderState.RUNNING

        self.retry_queue = RetryQueue()
        self.stop_event.clear()
        self.finished_event.clear()
        if self.cache is not None:
            # 下载期间关闭共享缓存的空闲行为，磁盘模式也一样
            self.cache.suspend_idle()

        logger.info(f"开始下载，瓦片数={self.total_tasks}，provider={getattr(provider, 'name', provider)}")
        self.events.emit(TileDownloadEvent(EventType.START, total=self.total_tasks))

        ranges = partition_ranges(self.total_tasks, self.config.max_threads)
        self.worker_threads = []
        for i, index_range in enumerate(ranges):
            t = threading.Thread(
                target=self._worker,
                args=(items[index_range.start:index_range.stop],),
                name=f"Downloader-{i+1}",
                daemon=True,
            )
            self.worker_threads.append(t)
            t.start()
        logger.info(f"已启动 {len(ranges)} 个下载线程")

        self.retry_thread = threading.Thread(target=self._retry_worker, name="RetryDownloader", daemon=True)
        self.retry_thread.start()

        self.reporter = ProgressReporter(
            self._snapshot,
            self.events,
            interval=self.config.progress_interval,
            on_finish=self._on_finished,
        )
        self.reporter.start()

    def wait(self, timeout: float = None) -> bool:
        """
        等待完成事件发出

        Returns:
            bool: 超时前是否已完成
        """
        return self.finished_event.wait(timeout)

    def cancel(self) -> Dict[str, int]:
        """
        取消下载：等待所有线程退出后标记完成，完成事件随后由进度线程发出
        """
        if self.finished_event.is_set():
            return self.get_statistics()

        logger.info("取消下载任务")
        cancel_start_time = time.time()
        self.stop_event.set()
        for t in self.worker_threads:
            t.join()
        if self.retry_thread is not None:
            self.retry_thread.join()

        with self.lock:
            if not self._complete:
                self._cancelled = True
                self._complete = True
                self._state = DownloaderState.COMPLETE

        logger.info(f"取消操作完成，耗时: {time.time() - cancel_start_time:.2f} 秒")
        return self.get_statistics()

    def _on_finished(self):
        self.stop_event.set()
        try:
            if self.cache is not None:
                self.cache.restore_idle()
        except Exception:
            logger.exception("恢复缓存空闲行为失败")
        stats = self.get_statistics()
        logger.info(
            f"下载结束: 成功 {stats['downloaded']}/{stats['total']}，放弃 {stats['failed']}"
            f"{'（已取消）' if self._cancelled else ''}"
        )
        self.finished_event.set()

    # ---- 计数 ----

    def _mark_downloaded(self):
        with self.lock:
            self.downloaded_count += 1
            self._check_complete()

    def _mark_failed(self):
        with self.lock:
            self.failed_count += 1
            self._check_complete()

    def _check_complete(self):
        # 调用方持有 self.lock
        if self.downloaded_count + self.failed_count == self.total_tasks:
            self._complete = True
            self._state = DownloaderState.COMPLETE
            self.stop_event.set()

    # ---- 线程 ----

    def _attempt(self, item: WorkItem) -> bool:
        try:
            return self.fetcher.fetch(item)
        except Exception:
            # 意外异常和临时失败一样处理，瓦片不会被丢弃
            logger.exception(f"{threading.current_thread().name} - 任务处理错误: {item.coord}")
            return False

    def _worker(self, items: List[WorkItem]):
        """
        下载线程：按顺序处理分到的瓦片
        """
        thread_name = threading.current_thread().name
        logger.debug(f"{thread_name} 启动，分配瓦片数: {len(items)}")
        thread_start_time = time.time()
        retry_count = 0
        queued = 0
        i = 0

        while i < len(items):
            if self.stop_event.is_set():
                logger.info(f"{thread_name} - 收到停止信号，退出")
                break

            item = items[i]
            if self._attempt(item):
                self._mark_downloaded()
                retry_count = 0
                i += 1
            elif retry_count + 1 <= self.config.retries:
                retry_count += 1
                logger.debug(f"{thread_name} - 重试 {item.coord} ({retry_count}/{self.config.retries})")
            else:
                retry_count = 0
                self.retry_queue.push(item)
                queued += 1
                logger.warning(f"{thread_name} - 下载失败，放入重试队列: {item.coord}")
                i += 1

        logger.info(
            f"{thread_name} 结束 - 运行时间: {time.time() - thread_start_time:.2f} 秒, "
            f"处理任务: {i}, 进入重试队列: {queued}"
        )

    def _retry_worker(self):
        """
        重试线程：直到完成前不断处理重试队列
        """
        limit = self.config.retry_limit
        while not self._complete and not self.stop_event.is_set():
            item = self.retry_queue.pop()
            if item is None:
                self.stop_event.wait(self.config.retry_interval)
                continue

            if self._attempt(item):
                self.retry_queue.forget(item)
                self._mark_downloaded()
                logger.info(f"重试下载成功: {item.coord}")
                continue

            failures = self.retry_queue.record_failure(item)
            if limit and failures >= limit:
                self.retry_queue.forget(item)
                logger.error(f"重试 {failures} 次后放弃瓦片: {item.coord}")
                self._mark_failed()
            else:
                self.retry_queue.push(item)
        logger.info("重试线程结束")

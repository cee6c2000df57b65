# tile_prefetcher/downloader/retry.py

from queue import Queue, Empty
from typing import Dict, Optional

from ..tile import TileCoord, WorkItem


class RetryQueue:
    """
    重试队列：多个下载线程放入，重试线程单独取出（先进先出）
    同时记录每个瓦片在重试线程中失败的次数
    """

    def __init__(self):
        self._queue: Queue = Queue()
        # 只由重试线程读写
        self._failures: Dict[TileCoord, int] = {}

    def push(self, item: WorkItem):
        self._queue.put(item)

    def pop(self) -> Optional[WorkItem]:
        """
        非阻塞取出一个瓦片，队列为空时返回 None
        """
        try:
            return self._queue.get_nowait()
        except Empty:
            return None

    def record_failure(self, item: WorkItem) -> int:
        """
        记录一次重试失败

        Returns:
            int: 该瓦片在重试线程中累计失败次数
        """
        count = self._failures.get(item.coord, 0) + 1
        self._failures[item.coord] = count
        return count

    def forget(self, item: WorkItem):
        self._failures.pop(item.coord, None)

    def empty(self) -> bool:
        return self._queue.empty()

    def __len__(self) -> int:
        return self._queue.qsize()

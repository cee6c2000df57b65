# tile_prefetcher/downloader/progress.py

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional

from loguru import logger


class EventType(Enum):
    START = "start"
    PROGRESS = "progress"
    COMPLETE = "complete"


@dataclass(frozen=True)
class TileDownloadEvent:
    """
    下载事件

    Attributes:
        kind: 事件类型
        total: 瓦片总数
        done: 已成功保存的瓦片数
        failed: 放弃下载的瓦片数
        percent: 完成百分比，完成事件固定为100
        cancelled: 是否因取消而结束
    """
    kind: EventType
    total: int = 0
    done: int = 0
    failed: int = 0
    percent: int = 0
    cancelled: bool = False


EventCallback = Callable[[TileDownloadEvent], None]


class ProgressSnapshot(NamedTuple):
    total: int
    done: int
    failed: int
    complete: bool
    cancelled: bool


class DownloadEvents:
    """
    事件观察者列表：start / progress / complete 三种事件
    回调在锁外调用，回调抛出的异常只记录日志，不影响其它观察者
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: Dict[EventType, List[EventCallback]] = {kind: [] for kind in EventType}

    def subscribe(self, kind: EventType, callback: EventCallback) -> EventCallback:
        with self._lock:
            self._listeners[kind].append(callback)
        return callback

    def unsubscribe(self, kind: EventType, callback: EventCallback):
        with self._lock:
            if callback in self._listeners[kind]:
                self._listeners[kind].remove(callback)

    def emit(self, event: TileDownloadEvent):
        with self._lock:
            listeners = list(self._listeners[event.kind])
        for callback in listeners:
            try:
                callback(event)
            except Exception:
                logger.exception(f"{event.kind.value} 事件回调异常")


class ProgressReporter:
    """
    定时进度报告：未完成时每个周期发出一次进度事件；
    观察到完成后停止，发出最后一次进度事件和唯一一次完成事件，再调用 on_finish
    """

    def __init__(
        self,
        snapshot: Callable[[], ProgressSnapshot],
        events: DownloadEvents,
        interval: float = 0.3,
        on_finish: Optional[Callable[[], None]] = None,
    ):
        self.snapshot = snapshot
        self.events = events
        self.interval = interval
        self.on_finish = on_finish
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="ProgressReporter", daemon=True)
        self._thread.start()

    def stop(self):
        self._stop_event.set()

    def join(self, timeout: float = None):
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self):
        while not self._stop_event.wait(self.interval):
            state = self.snapshot()
            if not state.complete:
                self._report_progress(state)
                continue

            self._stop_event.set()
            self._report_progress(state)
            self.events.emit(TileDownloadEvent(
                EventType.COMPLETE,
                total=state.total,
                done=state.done,
                failed=state.failed,
                percent=100,
                cancelled=state.cancelled,
            ))
            if self.on_finish:
                self.on_finish()
            return

    def _report_progress(self, state: ProgressSnapshot):
        percent = state.done * 100 // state.total if state.total else 100
        self.events.emit(TileDownloadEvent(
            EventType.PROGRESS,
            total=state.total,
            done=state.done,
            failed=state.failed,
            percent=percent,
            cancelled=state.cancelled,
        ))

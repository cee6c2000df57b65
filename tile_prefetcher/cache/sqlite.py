# tile_prefetcher/cache/sqlite.py

import sqlite3
import threading
import time
from collections import OrderedDict
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from ..tile import TileCoord
from .base import TileCache


class SqliteTileCache(TileCache):
    """
    SQLite 瓦片缓存，所有线程共享一个连接，由锁保护

    下载期间（cache_on_idle_read 关闭）每 batch_size 个瓦片提交一次事务，
    空闲行为恢复时立即提交剩余写入
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        batch_size: int = 1000,
        memory_cache_size: int = 2000,
    ):
        super().__init__()
        self.db_path = Path(db_path)
        self.batch_size = batch_size
        self.memory_cache_size = memory_cache_size
        self._lock = threading.Lock()
        self._pending = 0
        self._memory: "OrderedDict[tuple, bytes]" = OrderedDict()
        self.conn = None
        self._init_db()

    def _init_db(self, max_retries: int = 5):
        """
        初始化缓存数据库，数据库被锁定时指数退避重试
        """
        retry_delay = 1
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        for attempt in range(max_retries):
            try:
                self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
                self.conn.execute('PRAGMA journal_mode=WAL;')
                self.conn.execute('PRAGMA synchronous=NORMAL;')
                self.conn.execute('PRAGMA busy_timeout=30000;')
                self.conn.execute('''
                    CREATE TABLE IF NOT EXISTS tiles (
                        provider_id TEXT,
                        zoom_level INTEGER,
                        tile_column INTEGER,
                        tile_row INTEGER,
                        tile_data BLOB,
                        cache_time REAL,
                        PRIMARY KEY (provider_id, zoom_level, tile_column, tile_row)
                    )
                ''')
                self.conn.commit()
                logger.info(f"瓦片缓存数据库初始化完成: {self.db_path}")
                return
            except sqlite3.OperationalError as e:
                if self.conn:
                    self.conn.close()
                    self.conn = None
                if "database is locked" not in str(e) or attempt == max_retries - 1:
                    logger.error(f"瓦片缓存数据库初始化失败: {e}")
                    raise
                logger.warning(f"瓦片缓存数据库被锁定，尝试重试 ({attempt+1}/{max_retries})...")
                time.sleep(retry_delay)
                retry_delay *= 2

    def put(self, data: bytes, provider_id: str, coord: TileCoord, zoom: int):
        key = (provider_id, zoom, coord.x, coord.y)
        with self._lock:
            self.conn.execute(
                'INSERT OR REPLACE INTO tiles '
                '(provider_id, zoom_level, tile_column, tile_row, tile_data, cache_time) '
                'VALUES (?, ?, ?, ?, ?, ?)',
                (provider_id, zoom, coord.x, coord.y, sqlite3.Binary(data), time.time())
            )
            self._pending += 1
            if self.cache_on_idle_read or self._pending >= self.batch_size:
                self.conn.commit()
                logger.debug(f"提交瓦片缓存事务: {self._pending} 个瓦片")
                self._pending = 0
            if self.use_memory_cache:
                self._remember(key, bytes(data))
            else:
                self._memory.pop(key, None)

    def get(self, provider_id: str, coord: TileCoord, zoom: int) -> Optional[bytes]:
        key = (provider_id, zoom, coord.x, coord.y)
        with self._lock:
            if self.use_memory_cache and key in self._memory:
                self._memory.move_to_end(key)
                return self._memory[key]
            row = self.conn.execute(
                'SELECT tile_data FROM tiles '
                'WHERE provider_id = ? AND zoom_level = ? AND tile_column = ? AND tile_row = ?',
                key
            ).fetchone()
            if row is None:
                return None
            data = bytes(row[0])
            if self.use_memory_cache:
                self._remember(key, data)
            return data

    def count(self) -> int:
        with self._lock:
            return self.conn.execute('SELECT COUNT(*) FROM tiles').fetchone()[0]

    def _remember(self, key: tuple, data: bytes):
        self._memory[key] = data
        self._memory.move_to_end(key)
        while len(self._memory) > self.memory_cache_size:
            self._memory.popitem(last=False)

    def flush(self):
        """
        提交所有未提交的写入
        """
        with self._lock:
            if self.conn and self._pending:
                self.conn.commit()
                logger.debug(f"提交瓦片缓存事务: {self._pending} 个瓦片")
                self._pending = 0

    def _on_idle_changed(self):
        if self.cache_on_idle_read:
            self.flush()
        if not self.use_memory_cache:
            with self._lock:
                self._memory.clear()

    def close(self):
        self.flush()
        with self._lock:
            if self.conn:
                self.conn.close()
                self.conn = None
                logger.debug(f"关闭瓦片缓存数据库: {self.db_path}")

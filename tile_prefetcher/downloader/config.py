# tile_prefetcher/downloader/config.py

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..exceptions import ConfigError
from .path_format import FORMAT_DEFAULT, validate_write_format


@dataclass(frozen=True)
class DownloaderConfig:
    """
    下载器配置，创建下载器时确定，下载过程中不可修改

    Attributes:
        max_threads: 下载线程数
        retries: 每个瓦片在下载线程内的重试次数，超过后进入重试队列
        tile_path: 瓦片根目录；为 None 时写入共享缓存
        write_format: 瓦片路径模板（或 default/normal/special 预置名称）
        progress_interval: 进度事件间隔（秒）
        retry_interval: 重试队列为空时重试线程的等待时间（秒）
        retry_limit: 重试线程对单个瓦片的最大尝试次数，0 表示不限
    """
    max_threads: int = 5
    retries: int = 3
    tile_path: Optional[str] = None
    write_format: str = FORMAT_DEFAULT
    progress_interval: float = 0.3
    retry_interval: float = 5.0
    retry_limit: int = 10

    def __post_init__(self):
        if not isinstance(self.max_threads, int) or self.max_threads < 1:
            raise ConfigError(f"线程数必须是正整数: {self.max_threads}")
        if not isinstance(self.retries, int) or self.retries < 0:
            raise ConfigError(f"重试次数不能为负数: {self.retries}")
        if not isinstance(self.retry_limit, int) or self.retry_limit < 0:
            raise ConfigError(f"重试上限不能为负数: {self.retry_limit}")
        if self.progress_interval <= 0 or self.retry_interval <= 0:
            raise ConfigError("进度间隔和重试间隔必须大于0")
        if self.tile_path is not None and not str(self.tile_path).strip():
            raise ConfigError("瓦片目录不能为空字符串")
        # frozen dataclass 只能通过 object.__setattr__ 规范化字段
        object.__setattr__(self, 'write_format', validate_write_format(self.write_format))

    @property
    def disk_mode(self) -> bool:
        return self.tile_path is not None

    def with_overrides(self, **overrides) -> 'DownloaderConfig':
        """
        返回替换了部分字段的新配置，值为 None 的项忽略
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DownloaderConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"未知配置项: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'DownloaderConfig':
        """
        从 JSON 文件加载配置
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"读取配置文件失败: {path} - {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"配置文件必须是 JSON 对象: {path}")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

# tile_prefetcher/tile.py

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Union


@dataclass(frozen=True)
class TileCoord:
    """
    瓦片坐标 (zoom, x, y)，不可变，按值比较
    """
    zoom: int
    x: int
    y: int

    def __str__(self) -> str:
        return f"{self.zoom}/{self.x}/{self.y}"


@dataclass(frozen=True)
class WorkItem:
    """
    下载任务：瓦片坐标 + 绑定的瓦片提供商
    """
    coord: TileCoord
    provider: object

    @property
    def zoom(self) -> int:
        return self.coord.zoom


_TILE_LINE = re.compile(r'^\s*(\d+)\s*[/,\s]\s*(-?\d+)\s*[/,\s]\s*(-?\d+)\s*$')


def parse_tile(text: str) -> TileCoord:
    """
    解析单个瓦片坐标，支持 z/x/y、z x y、z,x,y 三种写法

    Args:
        text: 坐标字符串

    Returns:
        TileCoord: 瓦片坐标

    Raises:
        ValueError: 格式不正确
    """
    match = _TILE_LINE.match(text)
    if not match:
        raise ValueError(f"无法解析瓦片坐标: {text!r}")
    z, x, y = (int(v) for v in match.groups())
    if z > 255:
        raise ValueError(f"缩放级别超出范围: {z}")
    return TileCoord(z, x, y)


def parse_tile_lines(lines: Iterable[str]) -> List[TileCoord]:
    """
    逐行解析瓦片列表，忽略空行和 # 注释
    """
    tiles = []
    for lineno, line in enumerate(lines, start=1):
        line = line.split('#', 1)[0].strip()
        if not line:
            continue
        try:
            tiles.append(parse_tile(line))
        except ValueError as e:
            raise ValueError(f"第 {lineno} 行: {e}") from e
    return tiles


def load_tile_list(path: Union[str, Path]) -> List[TileCoord]:
    """
    从文本文件加载瓦片列表

    Args:
        path: 瓦片列表文件，每行一个瓦片

    Returns:
        List[TileCoord]: 按文件顺序排列的瓦片坐标
    """
    with open(path, 'r', encoding='utf-8') as f:
        return parse_tile_lines(f)

# tile_prefetcher/downloader/path_format.py

import re
from pathlib import Path
from typing import Dict, Union

from ..exceptions import ConfigError
from ..tile import TileCoord

# 预置的输出格式
# 默认瓦片格式：L{两位十进制级别}/R{八位十六进制行}/L{八位十六进制列}
FORMAT_DEFAULT = "/L{z:02d}/R{y:08x}/L{x:08x}.png"
# 常用瓦片格式
FORMAT_NORMAL = "/{z}/{x}_{y}.png"
# 特定瓦片格式
FORMAT_SPECIAL = "/{z}/{x}/{y}/x={x}&y={y}&z={z}.png"

TILE_WRITE_FORMATS: Dict[str, str] = {
    "default": FORMAT_DEFAULT,
    "normal": FORMAT_NORMAL,
    "special": FORMAT_SPECIAL,
}

# 所有瓦片都写在根目录下的该子目录中
LAYERS_DIR = "_alllayers"

_EXTERNAL_FIELD = re.compile(r'\{([zxy])(?=[:}])')
_INTERNAL_FIELD = re.compile(r'\{([012])(?=[:}])')
_MARKER = re.compile(r'\{([zxy])(?::[^{}]*)?\}')

_TO_INDEX = {"z": "0", "x": "1", "y": "2"}
_TO_NAME = {v: k for k, v in _TO_INDEX.items()}


def external_to_internal(write_format: str) -> str:
    """
    {z}/{x}/{y} 占位符 -> 位置占位符 {0}/{1}/{2}，保留格式说明符
    """
    return _EXTERNAL_FIELD.sub(lambda m: "{" + _TO_INDEX[m.group(1)], write_format)


def internal_to_external(write_format: str) -> str:
    """
    位置占位符 {0}/{1}/{2} -> {z}/{x}/{y}
    """
    return _INTERNAL_FIELD.sub(lambda m: "{" + _TO_NAME[m.group(1)], write_format)


def resolve_write_format(write_format: str) -> str:
    """
    解析用户输入的格式：预置名称（default/normal/special）或自定义模板，
    不以 / 开头时自动补上

    Raises:
        ConfigError: 模板为空
    """
    if not write_format or not write_format.strip():
        raise ConfigError("瓦片输出格式不能为空")
    write_format = TILE_WRITE_FORMATS.get(write_format.strip().lower(), write_format)
    if not write_format.startswith("/"):
        write_format = "/" + write_format
    return write_format


def validate_write_format(write_format: str) -> str:
    """
    检查模板包含 {z}、{x}、{y} 三个占位符且能够正常格式化

    Returns:
        str: 规范化后的外部格式
    """
    write_format = resolve_write_format(write_format)
    missing = {"z", "x", "y"} - set(_MARKER.findall(write_format))
    if missing:
        raise ConfigError(f"瓦片输出格式缺少占位符 {sorted(missing)}: {write_format}")
    try:
        external_to_internal(write_format).format(0, 0, 0)
    except (ValueError, IndexError, KeyError) as e:
        raise ConfigError(f"瓦片输出格式无效: {write_format} - {e}") from e
    return write_format


class PathFormatter:
    """
    将瓦片坐标转换为磁盘路径：<root>/_alllayers<格式化后的路径>
    """

    def __init__(self, write_format: str = FORMAT_DEFAULT):
        self.write_format = resolve_write_format(write_format)
        self._internal_format = external_to_internal(self.write_format)

    def relative_path(self, coord: TileCoord) -> str:
        """
        获取瓦片相对路径，以 / 开头

        Args:
            coord: 瓦片坐标

        Returns:
            str: 例如默认格式下 /L02/R00000001/L00000000.png
        """
        if not self._internal_format:
            raise ConfigError("瓦片输出格式不能为空")
        return self._internal_format.format(coord.zoom, coord.x, coord.y)

    def format_path(self, root: Union[str, Path], coord: TileCoord) -> Path:
        """
        获取瓦片完整保存路径

        Args:
            root: 瓦片根目录
            coord: 瓦片坐标

        Returns:
            Path: 瓦片保存路径
        """
        return Path(f"{root}/{LAYERS_DIR}{self.relative_path(coord)}")

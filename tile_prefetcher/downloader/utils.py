# tile_prefetcher/downloader/utils.py

from pathlib import Path
from typing import List

from loguru import logger


# 路径转换函数：处理Windows路径和Linux路径
def convert_path(output_dir: str) -> Path:
    """
    转换路径，支持Windows路径和Linux路径，在WSL2环境中自动转换

    Args:
        output_dir: 输入的路径，可以是Windows路径（如D:/tiles）或Linux路径（如/mnt/d/tiles）

    Returns:
        Path: 转换后的Path对象
    """
    output_dir = str(output_dir).strip()

    if output_dir.startswith('/mnt/'):
        return Path(output_dir)

    # Windows路径（包含盘符）：D:\tiles -> /mnt/d/tiles
    if len(output_dir) > 1 and output_dir[1] == ':':
        drive_letter = output_dir[0].lower()
        wsl_path = output_dir[2:].replace('\\', '/')
        full_path = f"/mnt/{drive_letter}/{wsl_path.lstrip('/')}"
        logger.info(f"转换Windows路径到WSL2路径: {output_dir} -> {full_path}")
        return Path(full_path)

    return Path(output_dir)


def ensure_directory(directory: Path):
    """
    确保目录存在，不存在则创建；多个线程同时创建同一目录是安全的
    """
    directory.mkdir(parents=True, exist_ok=True)


def partition_ranges(total: int, worker_count: int) -> List[range]:
    """
    把 [0, total) 平均分给 worker_count 个线程，余数归最后一个线程；
    每个线程分不到一个瓦片时退化为单线程处理全部瓦片

    Args:
        total: 瓦片总数
        worker_count: 线程数

    Returns:
        List[range]: 每个线程负责的下标区间
    """
    if worker_count < 1:
        raise ValueError(f"线程数必须大于0: {worker_count}")
    per_worker = total // worker_count
    if per_worker == 0:
        return [range(0, total)]
    ranges = [range(i * per_worker, (i + 1) * per_worker) for i in range(worker_count)]
    ranges[-1] = range(ranges[-1].start, total)
    return ranges

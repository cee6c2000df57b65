# tile_prefetcher/exceptions.py


class ConfigError(ValueError):
    """
    配置错误：线程数、重试次数、瓦片路径模板等参数不合法
    """


class TileWriteError(IOError):
    """
    瓦片写入失败（磁盘或缓存），下载器将其视为可重试的临时失败
    """

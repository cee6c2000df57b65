# tile_prefetcher/providers/base.py

import threading
from enum import Enum
from typing import Dict, List, Optional

import requests
from loguru import logger
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


class TileProviderType(Enum):
    """
    瓦片提供商类型枚举
    """
    OSM = "osm"
    BING = "bing"
    CUSTOM = "custom"
    COMPOSITE = "composite"


class TileOverlay:
    """
    瓦片图层：按 (x, y, zoom) 返回图片字节，取不到时返回 None
    """

    def __init__(self, name: str, db_id: Optional[str] = None):
        self.name = name
        # 缓存键，默认使用图层名称
        self.db_id = db_id or name

    def get_tile_image(self, x: int, y: int, zoom: int) -> Optional[bytes]:
        """
        获取瓦片图片

        Args:
            x: 瓦片x坐标
            y: 瓦片y坐标
            zoom: 缩放级别

        Returns:
            Optional[bytes]: 图片字节，取不到时返回 None
        """
        raise NotImplementedError


class TileProvider(TileOverlay):
    """
    HTTP 瓦片提供商基类，具体的 OSM / Bing 等继承它
    默认只有一个图层（自身），组合提供商可以包含多个图层
    """

    user_agent = "TilePrefetcher/1.0"

    def __init__(
        self,
        name: str,
        provider_type: TileProviderType,
        url_template: str,
        min_zoom: int,
        max_zoom: int,
        subdomains: list,
        attribution: str = "",
        timeout: float = 10,
        headers: Dict[str, str] = None,
    ):
        """
        初始化瓦片提供商

        Args:
            name: 提供商名称，同时作为缓存键
            provider_type: 提供商类型
            url_template: URL模板
            min_zoom: 最小缩放级别
            max_zoom: 最大缩放级别
            subdomains: 子域名列表
            attribution: 版权信息
            timeout: 单次请求超时（秒）
            headers: 额外的请求头
        """
        super().__init__(name=name, db_id=name)
        self.provider_type = provider_type
        self.url_template = url_template
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.subdomains = subdomains or []
        self.attribution = attribution
        self.timeout = timeout
        self.headers = dict(headers or {})
        # 每个线程一个会话，requests.Session 不保证线程安全
        self._local = threading.local()

    @property
    def provider_id(self) -> str:
        return self.db_id

    @property
    def overlays(self) -> List[TileOverlay]:
        return [self]

    def get_tile_url(self, x: int, y: int, zoom: int) -> str:
        """
        获取瓦片URL

        Args:
            x: 瓦片x坐标
            y: 瓦片y坐标
            zoom: 缩放级别

        Returns:
            str: 瓦片URL
        """
        raise NotImplementedError

    def subdomain_for(self, x: int, y: int) -> str:
        return self.subdomains[(x + y) % len(self.subdomains)] if self.subdomains else ""

    def get_tile_image(self, x: int, y: int, zoom: int) -> Optional[bytes]:
        """
        下载瓦片。非200响应、非图片响应和空响应返回 None，网络异常向上抛出
        """
        url = self.get_tile_url(x, y, zoom)
        session = self._get_session()
        response = session.get(url, timeout=self.timeout, allow_redirects=True)
        try:
            if response.status_code != 200:
                logger.warning(f"[HTTP {response.status_code}] {url}")
                return None

            content_type = response.headers.get('Content-Type', '')
            if not ('image' in content_type or 'jpeg' in content_type or 'png' in content_type):
                logger.warning(f"非图片响应: {url}, Content-Type: {content_type}")
                return None

            data = response.content
            if not data:
                logger.error(f"下载数据为空: {url}")
                return None
            logger.debug(f"下载成功: {url} ({len(data)} 字节)")
            return data
        finally:
            response.close()

    def _get_session(self) -> requests.Session:
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._create_request_session()
            self._local.session = session
        return session

    def _create_request_session(self) -> requests.Session:
        """
        创建并配置请求会话：连接池 + 对 429/5xx 的自动重试
        """
        session = requests.Session()
        session.headers.update({
            'User-Agent': self.user_agent,
            'Accept': 'image/*',
            'Accept-Encoding': 'gzip, deflate',
            'Connection': 'keep-alive',
        })
        session.headers.update(self.headers)
        session.max_redirects = 3

        adapter = HTTPAdapter(
            pool_connections=64,
            pool_maxsize=64,
            pool_block=False,
            max_retries=Retry(
                total=3,
                backoff_factor=0.5,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["GET"],
            ),
        )
        session.mount('http://', adapter)
        session.mount('https://', adapter)

        logger.debug(f"{self.name}: 创建新的请求会话")
        return session

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

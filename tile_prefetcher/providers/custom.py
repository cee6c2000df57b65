# tile_prefetcher/providers/custom.py

from typing import Dict

from .base import TileProvider, TileProviderType


class CustomTileProvider(TileProvider):
    """
    自定义瓦片提供商，URL模板支持 {s} {z} {x} {y} {q}
    """

    def __init__(
        self,
        name: str,
        url_template: str,
        subdomains: list = None,
        min_zoom: int = 0,
        max_zoom: int = 23,
        headers: Dict[str, str] = None,
    ):
        super().__init__(
            name=name,
            provider_type=TileProviderType.CUSTOM,
            url_template=url_template,
            min_zoom=min_zoom,
            max_zoom=max_zoom,
            subdomains=subdomains or [],
            attribution="Custom Provider",
            headers=headers,
        )

    def get_tile_url(self, x: int, y: int, zoom: int) -> str:
        url = self.url_template

        if "{q}" in url:
            # 需要 QuadKey
            from .bing import BingTileProvider
            url = url.replace("{q}", BingTileProvider.tile_to_quadkey(x, y, zoom))

        url = url.replace("{z}", str(zoom))
        url = url.replace("{x}", str(x))
        url = url.replace("{y}", str(y))

        if "{s}" in url and self.subdomains:
            url = url.replace("{s}", self.subdomain_for(x, y))

        return url

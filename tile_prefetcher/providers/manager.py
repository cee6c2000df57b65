# tile_prefetcher/providers/manager.py

from typing import Dict, List

from .bing import BingTileProvider
from .composite import CompositeTileProvider
from .custom import CustomTileProvider
from .osm import OSMTileProvider


class ProviderManager:
    """
    简单的 provider 注册 / 获取
    """

    _providers: Dict[str, object] = {}

    @classmethod
    def register_provider(cls, provider):
        """
        注册瓦片提供商（普通提供商或组合提供商）
        """
        cls._providers[provider.name.lower()] = provider

    @classmethod
    def get_provider(cls, name: str):
        """
        获取瓦片提供商

        Raises:
            ValueError: 未知的瓦片提供商
        """
        p = cls._providers.get(name.lower())
        if not p:
            raise ValueError(f"未知瓦片源: {name}")
        return p

    @classmethod
    def list_providers(cls) -> List[str]:
        return list(cls._providers.keys())

    @classmethod
    def create_custom_provider(
        cls,
        name: str,
        url_template: str,
        subdomains: list = None,
        min_zoom: int = 0,
        max_zoom: int = 23,
    ) -> CustomTileProvider:
        """
        创建、注册并返回一个自定义瓦片提供商
        """
        provider = CustomTileProvider(
            name=name,
            url_template=url_template,
            subdomains=subdomains or [],
            min_zoom=min_zoom,
            max_zoom=max_zoom,
        )
        cls.register_provider(provider)
        return provider

    @classmethod
    def create_composite_provider(cls, name: str, overlay_names: List[str]) -> CompositeTileProvider:
        """
        用已注册的提供商组合出一个多图层提供商并注册
        """
        overlays = []
        for overlay_name in overlay_names:
            overlays.extend(cls.get_provider(overlay_name).overlays)
        provider = CompositeTileProvider(name, overlays)
        cls.register_provider(provider)
        return provider


# 注册默认 provider
ProviderManager.register_provider(OSMTileProvider())
ProviderManager.register_provider(BingTileProvider())

# tile_prefetcher/providers/composite.py

from typing import List

from .base import TileOverlay, TileProviderType


class CompositeTileProvider:
    """
    组合提供商：一个瓦片由多个图层叠加而成（例如影像 + 注记），
    下载时逐个图层获取，任何一个图层失败整个瓦片都算失败
    """

    provider_type = TileProviderType.COMPOSITE

    def __init__(self, name: str, overlays: List[TileOverlay]):
        if not overlays:
            raise ValueError(f"组合提供商 {name} 至少需要一个图层")
        self.name = name
        self._overlays = list(overlays)
        self.min_zoom = max(getattr(o, 'min_zoom', 0) for o in self._overlays)
        self.max_zoom = min(getattr(o, 'max_zoom', 23) for o in self._overlays)

    @property
    def provider_id(self) -> str:
        return self.name

    @property
    def overlays(self) -> List[TileOverlay]:
        return list(self._overlays)

    def __repr__(self) -> str:
        names = ", ".join(o.name for o in self._overlays)
        return f"<CompositeTileProvider {self.name}: {names}>"

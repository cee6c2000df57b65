# tile_prefetcher/providers/osm.py

from .base import TileProvider, TileProviderType


class OSMTileProvider(TileProvider):
    """
    OpenStreetMap 标准 XYZ 瓦片
    """

    def __init__(self):
        super().__init__(
            name="osm",
            provider_type=TileProviderType.OSM,
            url_template="https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
            min_zoom=0,
            max_zoom=19,
            subdomains=["a", "b", "c"],
            attribution="© OpenStreetMap contributors",
        )

    def get_tile_url(self, x: int, y: int, zoom: int) -> str:
        return self.url_template.format(s=self.subdomain_for(x, y), z=zoom, x=x, y=y)

# tile_prefetcher/providers/bing.py

from .base import TileProvider, TileProviderType


class BingTileProvider(TileProvider):
    """
    Bing 地图，采用 QuadKey，子域轮询 t0-t3
    """

    def __init__(self):
        super().__init__(
            name="bing",
            provider_type=TileProviderType.BING,
            url_template="http://ecn.{s}.tiles.virtualearth.net/tiles/a{q}.jpeg?g=1",
            min_zoom=1,
            max_zoom=23,
            subdomains=["t0", "t1", "t2", "t3"],
            attribution="© Microsoft Corporation",
        )

    @staticmethod
    def tile_to_quadkey(x: int, y: int, zoom: int) -> str:
        """
        将瓦片坐标转换为QuadKey

        Args:
            x: 瓦片x坐标
            y: 瓦片y坐标
            zoom: 缩放级别

        Returns:
            str: QuadKey，长度等于缩放级别
        """
        digits = []
        for i in range(zoom, 0, -1):
            mask = 1 << (i - 1)
            digit = 0
            if x & mask:
                digit += 1
            if y & mask:
                digit += 2
            digits.append(str(digit))
        return "".join(digits)

    def get_tile_url(self, x: int, y: int, zoom: int) -> str:
        q = self.tile_to_quadkey(x, y, zoom)
        return self.url_template.format(s=self.subdomain_for(x, y), q=q)

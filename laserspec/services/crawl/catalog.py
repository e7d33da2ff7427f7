"""Brand knowledge used across the crawl: curated targets, discovery sources,
host allow-lists, origin countries and laser-type defaults.
"""

from __future__ import annotations

import re
from typing import Dict, List, Pattern, Tuple

from .base import Target


BRAND_COUNTRY: Dict[str, str] = {
    "TRUMPF": "DE",
    "Trumpf": "DE",
    "Bystronic": "CH",
    "AMADA": "JP",
    "Mazak": "JP",
    "LVD": "BE",
    "Prima": "IT",
    "Prima Power": "IT",
    "Mitsubishi": "JP",
    "Han's Laser": "CN",
    "Bodor": "CN",
    "Epilog": "US",
    "Trotec": "AT",
    "Universal Laser": "US",
    "ULS": "US",
}

# Engravers: always CO2 whatever the page says.
CO2_BRANDS = frozenset({"Epilog", "Trotec", "Universal Laser", "ULS"})

# Sheet-metal cutters: Fiber unless the page says otherwise.
FIBER_BRANDS = frozenset(
    {"TRUMPF", "Bystronic", "AMADA", "Mazak", "LVD", "Mitsubishi", "Bodor", "Han's Laser", "Prima Power"}
)

BRAND_ALLOWED_HOSTS: Dict[str, List[str]] = {
    "TRUMPF": ["www.trumpf.com"],
    "Bystronic": ["www.bystronic.com"],
    "AMADA": ["www.amada.com", "www.amada.co.uk", "www.amada.eu"],
    "Mazak": ["www.mazakoptilas.com"],
    "LVD": ["www.lvdgroup.com"],
    "Prima Power": ["www.primapower.com"],
    "Mitsubishi": ["us.mitsubishilaser.com"],
    "Han's Laser": ["www.hanslaser.net"],
    "Bodor": ["www.bodor.com"],
    "Epilog": ["www.epiloglaser.com"],
    "Trotec": ["www.troteclaser.com"],
    "Universal Laser": ["www.ulsinc.com"],
    "ULS": ["www.ulsinc.com"],
}

# Extra substrings a product URL must contain for the brand.
BRAND_URL_REQUIREMENTS: Dict[str, str] = {
    "Epilog": "laser-machines",
    "Bystronic": "laser-cutting",
    "Han's Laser": "laser-cutting",
}


def _t(brand: str, model: str, url: str) -> Target:
    return Target(brand=brand, model=model, url=url)


STATIC_TARGETS: Tuple[Target, ...] = (
    _t("TRUMPF", "TruLaser 5030", "https://www.trumpf.com/en_US/products/machines-systems/2d-laser-cutting-machines/trulaser-5030-5040-5060-fiber/"),
    _t("TRUMPF", "TruLaser 3030", "https://www.trumpf.com/en_US/products/machines-systems/2d-laser-cutting-machines/trulaser-3030-fiber/"),
    _t("Bystronic", "ByStar Fiber 4020", "https://www.bystronic.com/en/products/laser-cutting-systems/bystar-fiber"),
    _t("Bystronic", "BySmart Fiber 3015", "https://www.bystronic.com/en/products/laser-cutting-systems/bysmart-fiber"),
    _t("AMADA", "LCG AJ 4020", "https://www.amada.com/america/product/laser-cutting/aj-fiber"),
    _t("AMADA", "ENSIS 3015 AJ", "https://www.amada.com/america/product/laser-cutting/ensis-aj"),
    _t("Mazak", "OPTIPLEX 3015", "https://www.mazakoptilas.com/products/optiplex-3015-fiber"),
    _t("Mazak", "OPTIPLEX NEXUS 3015", "https://www.mazakoptilas.com/products/optiplex-nexus-3015-fiber"),
    _t("LVD", "Electra FL-3015", "https://www.lvdgroup.com/en/electra-fiber-laser-cutting-machine"),
    _t("LVD", "Phoenix FL 4020", "https://www.lvdgroup.com/en/phoenix-fiber-laser-cutting-machine"),
    _t("Prima Power", "Fiber EVO 4", "https://www.primapower.com/products/laser-cutting/platino-fiber"),
    _t("Prima Power", "Laser Genius+", "https://www.primapower.com/products/laser-cutting/laser-genius-plus"),
    _t("Mitsubishi", "ML3015eX-F40", "https://us.mitsubishilaser.com/products/ml3015-ex-fiber"),
    _t("Mitsubishi", "GX-F 3015", "https://us.mitsubishilaser.com/products/gx-f"),
    _t("Han's Laser", "G3015F", "https://www.hanslaser.net/product/laser-cutting/g3015f"),
    _t("Han's Laser", "G4020H", "https://www.hanslaser.net/product/laser-cutting/g4020h"),
    _t("Bodor", "P3015", "https://www.bodor.com/product/p-series"),
    _t("Bodor", "A3", "https://www.bodor.com/product/a-series"),
    _t("Epilog", "Fusion Pro 48", "https://www.epiloglaser.com/laser-machines/fusion-pro-laser-series/"),
    _t("Epilog", "Fusion Edge 36", "https://www.epiloglaser.com/laser-machines/fusion-edge-laser-series/"),
    _t("Trotec", "Speedy 400", "https://www.troteclaser.com/en/laser-machines/speedy-laser-engraver"),
    _t("Trotec", "Speedy 300", "https://www.troteclaser.com/en/laser-machines/laser-engraving-machines/speedy-300"),
    _t("Universal Laser", "PLS6.150D", "https://www.ulsinc.com/products/pls6-150d"),
    _t("ULS", "VLS 6.60", "https://www.ulsinc.com/products/vls-660"),
)


class ListingSource:
    """A listing page whose anchors point at product pages."""

    def __init__(self, brand: str, url: str, match: str, max_urls: int = 8) -> None:
        self.brand = brand
        self.url = url
        self.match: Pattern[str] = re.compile(match, re.IGNORECASE)
        self.max_urls = int(max_urls)

    def __repr__(self) -> str:
        return f"ListingSource({self.brand!r}, {self.url!r})"


class SitemapSource:
    def __init__(self, brand: str, base: str, sitemap: str = "/sitemap.xml") -> None:
        self.brand = brand
        self.base = base.rstrip("/")
        self.sitemap = sitemap

    @property
    def url(self) -> str:
        return self.base + self.sitemap

    def __repr__(self) -> str:
        return f"SitemapSource({self.brand!r}, {self.url!r})"


LISTING_SOURCES: Tuple[ListingSource, ...] = (
    ListingSource("Han's Laser", "https://www.hanslaser.net/product/laser-cutting", r"/product/laser-cutting/", 8),
    ListingSource("Bystronic", "https://www.bystronic.com/en/products/laser-cutting-systems", r"/products/laser-cutting-systems/", 8),
    ListingSource("Epilog", "https://www.epiloglaser.com/laser-machines/", r"/laser-machines/", 6),
)

SITEMAP_SOURCES: Tuple[SitemapSource, ...] = (
    SitemapSource("TRUMPF", "https://www.trumpf.com"),
    SitemapSource("Bystronic", "https://www.bystronic.com"),
    SitemapSource("AMADA", "https://www.amada.com"),
    SitemapSource("Mazak", "https://www.mazakoptilas.com"),
    SitemapSource("LVD", "https://www.lvdgroup.com"),
    SitemapSource("Prima Power", "https://www.primapower.com"),
    SitemapSource("Mitsubishi", "https://us.mitsubishilaser.com"),
    SitemapSource("Han's Laser", "https://www.hanslaser.net"),
    SitemapSource("Bodor", "https://www.bodor.com"),
    SitemapSource("Epilog", "https://www.epiloglaser.com"),
    SitemapSource("Trotec", "https://www.troteclaser.com"),
    SitemapSource("ULS", "https://www.ulsinc.com"),
)

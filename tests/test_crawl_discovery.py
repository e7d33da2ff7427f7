from pathlib import Path

import httpx
import pytest

from laserspec.services.crawl.catalog import STATIC_TARGETS, ListingSource, SitemapSource
from laserspec.services.crawl.discovery import (
    discover_from_listings,
    discover_from_sitemaps,
    extract_sitemap_locs,
    load_seed_file,
    split_sitemap_urls,
)
from laserspec.services.crawl.fetcher import Fetcher
from laserspec.services.crawl.pipeline import merge_targets


FIXTURES = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def make_fetcher(routes):
    def handler(request):
        body = routes.get(str(request.url))
        if body is None:
            return httpx.Response(500)
        return httpx.Response(200, text=body)

    return Fetcher(retries=0, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_extract_sitemap_locs_unescapes():
    xml = "<urlset><url><loc> https://x.com/a?b=1&amp;c=2 </loc></url><url><loc></loc></url></urlset>"
    assert extract_sitemap_locs(xml) == ["https://x.com/a?b=1&c=2"]
    assert extract_sitemap_locs("not xml at all") == []


def test_split_sitemap_urls():
    pages, pdfs = split_sitemap_urls(extract_sitemap_locs(read_fixture("bodor_sitemap.xml")), "Bodor")
    assert pages == [
        "https://www.bodor.com/product/laser-cutting/p3",
        "https://www.bodor.com/product/a-series",
    ]
    assert pdfs == ["https://www.bodor.com/files/p3-datasheet.pdf"]

    pages, pdfs = split_sitemap_urls(
        extract_sitemap_locs(read_fixture("bodor_sitemap.xml")), "Bodor", max_pages=1, max_pdfs=0
    )
    assert len(pages) == 1 and pdfs == []


def test_sitemap_failure_does_not_stop_other_brands():
    fetcher = make_fetcher({"https://www.bodor.com/sitemap.xml": read_fixture("bodor_sitemap.xml")})
    sources = [SitemapSource("TRUMPF", "https://www.trumpf.com"), SitemapSource("Bodor", "https://www.bodor.com")]
    targets = discover_from_sitemaps(fetcher, sources)
    assert isinstance(targets, tuple)
    assert [t.brand for t in targets] == ["Bodor", "Bodor", "Bodor"]
    pdf = targets[-1]
    assert pdf.source_kind == "pdf"
    assert pdf.model == "P3 Datasheet"


def test_discovery_only_adds_unseen_urls():
    fetcher = make_fetcher({"https://www.bodor.com/sitemap.xml": read_fixture("bodor_sitemap.xml")})
    discovered = discover_from_sitemaps(fetcher, [SitemapSource("Bodor", "https://www.bodor.com")])
    merged = merge_targets(STATIC_TARGETS, discovered, brand="Bodor")
    urls = [t.url for t in merged]
    assert len(urls) == len(set(urls))
    # Static targets come first and keep their curated model names
    assert merged[0].model == "P3015"
    assert merged[1].model == "A3"
    assert urls[2:] == [
        "https://www.bodor.com/product/laser-cutting/p3",
        "https://www.bodor.com/files/p3-datasheet.pdf",
    ]


def test_listing_discovery():
    listing = """
    <html><body>
      <a href="/product/laser-cutting/g3015f">G3015F</a>
      <a href="https://www.hanslaser.net/product/laser-cutting/g4020h">G4020H</a>
      <a href="/product/laser-cutting/g3015f">G3015F again</a>
      <a href="/product/laser-marking/m1">Marking</a>
      <a href="/product/laser-cutting/g6025">G6025</a>
    </body></html>
    """
    src = ListingSource("Han's Laser", "https://www.hanslaser.net/product/laser-cutting", r"/product/laser-cutting/", 2)
    broken = ListingSource("Bystronic", "https://www.bystronic.com/en/products/laser-cutting-systems", r"/x/", 8)
    fetcher = make_fetcher({src.url: listing})
    sleeps = []
    targets = discover_from_listings(fetcher, [broken, src], delay=0.25, sleep=sleeps.append)
    assert [t.url for t in targets] == [
        "https://www.hanslaser.net/product/laser-cutting/g3015f",
        "https://www.hanslaser.net/product/laser-cutting/g4020h",
    ]
    assert targets[0].model == "G3015f"
    assert sleeps == [0.25]


def test_load_seed_file():
    seeds = load_seed_file(str(FIXTURES / "seeds.json"))
    assert [(t.brand, t.model) for t in seeds] == [("TRUMPF", "TruLaser 1030"), ("Bodor", "Model")]
    assert load_seed_file(str(FIXTURES / "seeds.json"), brand="bodor")[0].url.endswith("/c3")


def test_load_seed_file_rejects_non_array(tmp_path):
    p = tmp_path / "seeds.json"
    p.write_text('{"brand": "Bodor"}', encoding="utf-8")
    with pytest.raises(ValueError):
        load_seed_file(str(p))
    p.write_text("[not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_seed_file(str(p))


def test_load_seed_file_skips_non_string_fields(tmp_path):
    p = tmp_path / "seeds.json"
    p.write_text(
        '[{"brand": "Bodor", "url": 42}, {"brand": ["Bodor"], "url": "https://www.bodor.com/x"},'
        ' {"brand": "Bodor", "url": "https://www.bodor.com/y", "model": 7},'
        ' {"brand": "Bodor", "url": "https://www.bodor.com/product/c3", "model": null}]',
        encoding="utf-8",
    )
    seeds = load_seed_file(str(p))
    assert [(t.model, t.url) for t in seeds] == [("Model", "https://www.bodor.com/product/c3")]

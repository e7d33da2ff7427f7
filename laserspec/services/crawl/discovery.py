"""Candidate discovery: seed files, brand sitemaps and listing pages.

Every strategy returns an immutable tuple of Targets; merging and dedup happen
in pipeline.merge_targets(). A failing brand contributes nothing and the
remaining brands are still crawled.
"""

from __future__ import annotations

import html
import json
import logging
import re
import time
from typing import Callable, Iterable, List, Optional, Tuple
from urllib.parse import urljoin

from .base import Target
from .catalog import ListingSource, SitemapSource
from .fetcher import Fetcher
from .policy import is_host_allowed, is_likely_product_url, is_likely_spec_pdf

logger = logging.getLogger(__name__)

_LOC = re.compile(r"<loc>\s*(.*?)\s*</loc>", re.IGNORECASE | re.DOTALL)


def extract_sitemap_locs(xml_text: str) -> List[str]:
    """Pull every <loc> value out of a sitemap without validating the XML."""
    return [html.unescape(m.group(1)) for m in _LOC.finditer(xml_text or "") if m.group(1)]


def _unique(urls: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(urls))


def split_sitemap_urls(
    urls: Iterable[str],
    brand: str,
    *,
    max_pages: int = 30,
    max_pdfs: int = 50,
) -> Tuple[List[str], List[str]]:
    """Partition sitemap URLs into (product pages, spec PDFs), each capped."""
    urls = _unique(urls)
    pages = [u for u in urls if is_likely_product_url(u, brand)]
    pdfs = [u for u in urls if is_likely_spec_pdf(u) and is_host_allowed(u, brand)]
    return pages[:max_pages], pdfs[:max_pdfs]


def discover_from_sitemaps(
    fetcher: Fetcher,
    sources: Iterable[SitemapSource],
    *,
    max_pages: int = 30,
    max_pdfs: int = 50,
    delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> Tuple[Target, ...]:
    out: List[Target] = []
    for src in sources:
        try:
            xml_text = fetcher.fetch_text(src.url)
            pages, pdfs = split_sitemap_urls(
                extract_sitemap_locs(xml_text), src.brand, max_pages=max_pages, max_pdfs=max_pdfs
            )
        except Exception as exc:
            logger.warning("Sitemap discovery failed for %s: %s", src.brand, exc)
            continue
        out.extend(Target.from_url(src.brand, u) for u in pages)
        out.extend(Target.from_url(src.brand, u) for u in pdfs)
        logger.info("Sitemap discovered for %s: %d pages, %d pdfs", src.brand, len(pages), len(pdfs))
        if delay:
            sleep(delay)
    return tuple(out)


def extract_listing_urls(doc, source: ListingSource) -> List[str]:
    """Absolute product URLs linked from a listing page, in page order."""
    found: List[str] = []
    for a in doc.css("a[href]"):
        href = (a.attributes.get("href") or "").strip()
        if not href or not source.match.search(href):
            continue
        try:
            found.append(urljoin(source.url, href))
        except ValueError:
            continue
    return _unique(found)[: source.max_urls]


def discover_from_listings(
    fetcher: Fetcher,
    sources: Iterable[ListingSource],
    *,
    delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> Tuple[Target, ...]:
    out: List[Target] = []
    for src in sources:
        try:
            doc = fetcher.fetch_page(src.url)
            urls = extract_listing_urls(doc, src)
        except Exception as exc:
            logger.warning("Listing discovery failed for %s: %s", src.brand, exc)
            continue
        out.extend(Target.from_url(src.brand, u) for u in urls)
        logger.info("Discovered %d %s URLs from listing", len(urls), src.brand)
        if delay:
            sleep(delay)
    return tuple(out)


def load_seed_file(path: str, *, brand: Optional[str] = None) -> Tuple[Target, ...]:
    """Read a JSON array of {brand, url, model?} objects.

    Entries without string brand and url (or with a non-string model) are
    skipped; model defaults to "Model".
    Raises ValueError when the file is not a JSON array.
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Seed file {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise ValueError(f"Seed file {path} must contain a JSON array")

    seeds: List[Target] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        b, url, model = item.get("brand"), item.get("url"), item.get("model")
        if not isinstance(b, str) or not isinstance(url, str) or not isinstance(model, (str, type(None))):
            logger.warning("Skipping malformed seed entry: %r", item)
            continue
        b, url = b.strip(), url.strip()
        if not b or not url:
            continue
        if brand and b.lower() != brand.lower():
            continue
        seeds.append(Target(brand=b, model=(model or "Model"), url=url))
    logger.info("Loaded %d seeds from %s", len(seeds), path)
    return tuple(seeds)

"""URL admission filters for discovery.

All predicates are total: any input string (including garbage) yields a bool.
"""

from __future__ import annotations

import re
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlparse

from .catalog import BRAND_ALLOWED_HOSTS, BRAND_URL_REQUIREMENTS


_HTTP_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_STATIC_ASSET = re.compile(r"\.(xml|jpg|jpeg|png|webp|gif|svg|css|js)(?:$|\?)", re.IGNORECASE)
_PRODUCT_WORDS = re.compile(r"(product|products|machines|systems|laser|cutting|engraving)")
_NOISE_WORDS = re.compile(r"(contact|about|news|sitemap|category|tag|search|download|driver|install|support|guide)")
_PDF = re.compile(r"\.pdf($|\?)", re.IGNORECASE)
_SPEC_PDF_WORDS = re.compile(r"(spec|brochure|data|datasheet)")
_NON_SPEC_PDF_WORDS = re.compile(r"(user|guide|manual|driver|install|report)")
_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalized_host(url: str) -> str:
    """Lowercased host, with the port only when it is not the scheme default.

    Returns '' for anything that does not parse.
    """
    try:
        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
        port = parsed.port
    except (TypeError, ValueError):
        return ""
    if port is None or port == _DEFAULT_PORTS.get(parsed.scheme.lower()):
        return host
    return f"{host}:{port}"


def is_host_allowed(
    url: str,
    brand: str,
    *,
    allowed_hosts: Optional[Mapping[str, List[str]]] = None,
) -> bool:
    table: Mapping[str, List[str]] = BRAND_ALLOWED_HOSTS if allowed_hosts is None else allowed_hosts
    allowed = table.get(brand)
    if not allowed:
        return True
    if not isinstance(url, str):
        return False
    host = normalized_host(url)
    return bool(host) and host in {h.lower() for h in allowed}


def is_likely_product_url(
    url: str,
    brand: str,
    *,
    allowed_hosts: Optional[Mapping[str, List[str]]] = None,
    requirements: Optional[Dict[str, str]] = None,
) -> bool:
    if not isinstance(url, str) or not _HTTP_SCHEME.match(url):
        return False
    if _STATIC_ASSET.search(url):
        return False
    u = url.lower()
    if not _PRODUCT_WORDS.search(u):
        return False
    if _NOISE_WORDS.search(u):
        return False
    required = (BRAND_URL_REQUIREMENTS if requirements is None else requirements).get(brand)
    if required and required not in u:
        return False
    return is_host_allowed(url, brand, allowed_hosts=allowed_hosts)


def is_likely_spec_pdf(url: str) -> bool:
    if not isinstance(url, str) or not _PDF.search(url):
        return False
    u = url.lower()
    return bool(_SPEC_PDF_WORDS.search(u)) and not _NON_SPEC_PDF_WORDS.search(u)

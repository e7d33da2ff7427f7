"""Crawl configuration.

Environment variables (CLI flags in runner.py take precedence):

- BRAND: only process targets of this brand (case-insensitive)
- DRY_RUN=true: write a file instead of calling the import endpoint
- OUTPUT: output file; a .csv suffix selects CSV, anything else JSON
- SEEDS: JSON file with extra [{brand, model, url}] targets
- IMPORT_URL: admin import endpoint (default http://localhost:3000/api/admin/import)
- CRAWL_CONCURRENCY, CRAWL_TIMEOUT, CRAWL_RETRIES, CRAWL_DELAY, CRAWL_DISCOVER
- MAX_THICKNESS_MM, MIN_WORK_AREA_MM: numeric sanity bounds
- LOG_LEVEL
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional


DEFAULT_IMPORT_URL = "http://localhost:3000/api/admin/import"
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; LaserSpecHubBot/1.0; +https://example.com)"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, float(default)))


@dataclass(frozen=True)
class Thresholds:
    """Numeric sanity bounds applied while extracting and gating.

    Thickness values outside (0, max_thickness_mm] are treated as parsing noise.
    A work area is only accepted when both sides reach min_work_area_mm.
    """

    max_thickness_mm: float = 80.0
    min_work_area_mm: int = 500
    gate_min_length_mm: int = 500
    gate_min_width_mm: int = 300

    @classmethod
    def from_env(cls) -> "Thresholds":
        return cls(
            max_thickness_mm=_env_float("MAX_THICKNESS_MM", cls.max_thickness_mm),
            min_work_area_mm=_env_int("MIN_WORK_AREA_MM", cls.min_work_area_mm),
        )

    def thickness_ok(self, value: Optional[float]) -> bool:
        return value is not None and 0 < value <= self.max_thickness_mm


@dataclass
class CrawlSettings:
    brand: Optional[str] = None
    dry_run: bool = False
    output: Optional[str] = None
    seeds: Optional[str] = None
    import_url: str = DEFAULT_IMPORT_URL
    concurrency: int = 1
    timeout: float = 20.0
    retries: int = 2
    delay: float = 0.5
    discover: bool = True
    preview: bool = False
    user_agent: str = DEFAULT_USER_AGENT
    sitemap_max_pages: int = 30
    sitemap_max_pdfs: int = 50
    log_level: str = "INFO"
    thresholds: Thresholds = field(default_factory=Thresholds)

    @classmethod
    def from_env(cls) -> "CrawlSettings":
        return cls(
            brand=os.getenv("BRAND") or None,
            dry_run=_env_bool("DRY_RUN"),
            output=os.getenv("OUTPUT") or None,
            seeds=os.getenv("SEEDS") or None,
            import_url=os.getenv("IMPORT_URL") or DEFAULT_IMPORT_URL,
            concurrency=max(1, _env_int("CRAWL_CONCURRENCY", 1)),
            timeout=_env_float("CRAWL_TIMEOUT", 20.0),
            retries=max(0, _env_int("CRAWL_RETRIES", 2)),
            delay=max(0.0, _env_float("CRAWL_DELAY", 0.5)),
            discover=_env_bool("CRAWL_DISCOVER", True),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
            thresholds=Thresholds.from_env(),
        )

    @property
    def writes_file(self) -> bool:
        return self.dry_run or bool(self.output)

    def matches_brand(self, brand: str) -> bool:
        if not self.brand:
            return True
        return brand.lower() == self.brand.lower()

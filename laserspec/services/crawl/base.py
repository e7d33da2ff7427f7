from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse


_PDF_PATH = re.compile(r"\.pdf$", re.IGNORECASE)
_SLUG_SEP = re.compile(r"[-_]")
_WORD_START = re.compile(r"\b\w")
_WS = re.compile(r"\s+")


def collapse_ws(text: Optional[str]) -> str:
    return _WS.sub(" ", text or "").strip()


def url_path(url: str) -> str:
    try:
        return urlparse(url).path or ""
    except ValueError:
        return ""


def model_from_url(url: str, *, default: str = "Model", limit: int = 40, strip_extension: bool = False) -> str:
    """Human-readable model label from the last path segment of a URL.

    'https://x/product/laser-cutting/g3015f' -> 'G3015f'
    '.../bystar-fiber_4020' -> 'Bystar Fiber 4020'
    With strip_extension (documents), a trailing '.pdf' style suffix is dropped;
    page slugs keep their dots: '.../vls-6.60' -> 'Vls 6.60'.
    """
    segments = [s for s in url_path(url).split("/") if s]
    slug = segments[-1] if segments else ""
    if strip_extension and "." in slug:
        slug = slug.rsplit(".", 1)[0]
    label = _SLUG_SEP.sub(" ", slug)
    label = _WORD_START.sub(lambda m: m.group(0).upper(), label).strip()
    return label[:limit] or default


@dataclass(frozen=True)
class Target:
    """A (brand, model, url) crawl candidate."""

    brand: str
    model: str
    url: str

    @property
    def source_kind(self) -> str:
        return "pdf" if _PDF_PATH.search(url_path(self.url)) else "html"

    @classmethod
    def from_url(cls, brand: str, url: str) -> "Target":
        is_pdf = bool(_PDF_PATH.search(url_path(url)))
        model = model_from_url(url, default="Spec" if is_pdf else "Model", strip_extension=is_pdf)
        return cls(brand=brand, model=model, url=url)


@dataclass
class EquipmentDraft:
    """Partially extracted record. Every field is optional until finalize()."""

    laser_type: Optional[str] = None
    power_kw: Optional[float] = None
    work_area_length: Optional[int] = None
    work_area_width: Optional[int] = None
    wavelength: Optional[int] = None
    control_system: Optional[str] = None
    cooling_type: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    spec_sheet_url: Optional[str] = None
    max_cutting_thickness: Optional[Dict[str, float]] = None
    cutting_speed: Optional[Dict[str, float]] = None

    def merge(self, partial: Optional[Mapping[str, Any]]) -> "EquipmentDraft":
        """Overlay a partial result field by field; the later writer wins.

        Keys that are unknown or carry None/empty values leave the draft untouched.
        """
        if not partial:
            return self
        known = {f.name for f in fields(self)}
        for key, value in partial.items():
            if key not in known or value is None:
                continue
            if isinstance(value, dict) and not value:
                continue
            setattr(self, key, value)
        return self

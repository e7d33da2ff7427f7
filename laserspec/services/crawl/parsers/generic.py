"""Brand-agnostic spec heuristics applied to any product page.

Each field is extracted independently; a miss (or an exception inside one
heuristic) leaves that field None and never blocks the others.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Union
from urllib.parse import urljoin

from selectolax.parser import HTMLParser

from ..base import collapse_ws
from ..settings import Thresholds

logger = logging.getLogger(__name__)

POWER_RE = re.compile(r"(?<![\d.])(\d{1,2}(?:\.\d)?)\s*kW\b", re.IGNORECASE)
WORK_AREA_RE = re.compile(r"(\d{3,5})\s*[x×]\s*(\d{3,5})\s*mm", re.IGNORECASE)
_PDF_HREF = re.compile(r"\.pdf($|\?)", re.IGNORECASE)

WAVELENGTH_NM = {"Fiber": 1070, "CO2": 10600}
DEFAULT_COOLING = {"Fiber": "Water", "CO2": "Air"}

CONTROL_SYSTEMS = (
    ("siemens", "Siemens 840D"),
    ("beckhoff", "Beckhoff TwinCAT"),
    ("fanuc", "Fanuc CNC"),
    ("cypcut", "Cypcut"),
    ("amnc", "AMNC"),
)
WATER_COOLING_PHRASES = ("water cooling", "water-cooled", "water cooled", "chiller")
SPEC_LINK_WORDS = ("spec", "brochure", "data")


@dataclass
class ParsedPage:
    """A fetched product page plus the text views the heuristics need."""

    doc: HTMLParser
    url: str
    body_text: str

    def scoped_text(self, selector: str) -> str:
        """Whitespace-collapsed text of the first node matching selector ('' if none)."""
        node = self.doc.css_first(selector)
        if node is None:
            return ""
        return collapse_ws(node.text(deep=True, separator=" "))


def load_page(source: Union[str, HTMLParser], url: str) -> ParsedPage:
    doc = source if isinstance(source, HTMLParser) else HTMLParser(source or "")
    doc.strip_tags(["script", "style", "noscript", "template"])
    root = doc.body or doc.root
    text = collapse_ws(root.text(deep=True, separator=" ")) if root is not None else ""
    return ParsedPage(doc=doc, url=url, body_text=text)


# --- Individual heuristics (pure, operate on text) ---

def detect_laser_type(text: str) -> Optional[str]:
    t = (text or "").lower()
    if "fiber" in t:
        return "Fiber"
    if "co2" in t or "co₂" in t:
        return "CO2"
    if "solid state" in t or "solid-state" in t:
        return "Solid"
    return None


def find_power_kw(text: str) -> Optional[float]:
    m = POWER_RE.search(text or "")
    return float(m.group(1)) if m else None


def find_work_area(text: str, *, min_side: int = 500) -> Optional[Tuple[int, int]]:
    """First 'L x W mm' pair whose sides both reach min_side.

    Small pairs (screw sizes, nozzle specs) are skipped rather than accepted.
    """
    for m in WORK_AREA_RE.finditer(text or ""):
        length, width = int(m.group(1)), int(m.group(2))
        if length >= min_side and width >= min_side:
            return length, width
    return None


def infer_wavelength(laser_type: Optional[str]) -> Optional[int]:
    return WAVELENGTH_NM.get(laser_type or "")


def detect_control_system(text: str) -> Optional[str]:
    t = (text or "").lower()
    for keyword, label in CONTROL_SYSTEMS:
        if keyword in t:
            return label
    return None


def detect_cooling(text: str, laser_type: Optional[str]) -> Optional[str]:
    t = (text or "").lower()
    if any(p in t for p in WATER_COOLING_PHRASES):
        return "Water"
    return DEFAULT_COOLING.get(laser_type or "")


def _meta_content(doc: HTMLParser, selector: str) -> Optional[str]:
    node = doc.css_first(selector)
    if node is None:
        return None
    value = (node.attributes.get("content") or "").strip()
    return value or None


def find_image_url(page: ParsedPage) -> Optional[str]:
    raw = _meta_content(page.doc, 'meta[property="og:image"]')
    return urljoin(page.url, raw) if raw else None


def find_description(page: ParsedPage) -> Optional[str]:
    return _meta_content(page.doc, 'meta[property="og:description"]') or _meta_content(
        page.doc, 'meta[name="description"]'
    )


def find_spec_sheet_url(page: ParsedPage) -> Optional[str]:
    for a in page.doc.css("a[href]"):
        href = (a.attributes.get("href") or "").strip()
        if not href or not _PDF_HREF.search(href):
            continue
        label = a.text(deep=True, separator=" ").lower()
        if any(w in label for w in SPEC_LINK_WORDS):
            return urljoin(page.url, href)
    return None


def _safe(name: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    try:
        return fn(*args, **kwargs)
    except Exception as exc:
        logger.debug("Heuristic %s failed: %s", name, exc)
        return None


def parse_specs(page: ParsedPage, thresholds: Optional[Thresholds] = None) -> Dict[str, Any]:
    """Baseline spec guess for any page. Never raises; unknown fields are None."""
    th = thresholds or Thresholds()
    text = page.body_text

    laser_type = _safe("laser_type", detect_laser_type, text)
    area = _safe("work_area", find_work_area, text, min_side=th.min_work_area_mm)

    return {
        "laser_type": laser_type,
        "power_kw": _safe("power_kw", find_power_kw, text),
        "work_area_length": area[0] if area else None,
        "work_area_width": area[1] if area else None,
        "wavelength": infer_wavelength(laser_type),
        "control_system": _safe("control_system", detect_control_system, text),
        "cooling_type": _safe("cooling_type", detect_cooling, text, laser_type),
        "image_url": _safe("image_url", find_image_url, page),
        "description": _safe("description", find_description, page),
        "spec_sheet_url": _safe("spec_sheet_url", find_spec_sheet_url, page),
    }

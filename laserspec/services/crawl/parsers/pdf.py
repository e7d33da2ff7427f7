"""Best-effort spec recovery from spec-sheet PDFs.

PDF text has no usable table structure, so thickness is approximated with a
'<material> ... N mm' proximity match. Any failure to read the document
yields an empty result.
"""

from __future__ import annotations

import io
import logging
import re
from typing import Any, Dict, Optional

from pypdf import PdfReader

from ..base import collapse_ws
from ..settings import Thresholds
from .generic import detect_laser_type, find_power_kw, find_work_area, infer_wavelength

logger = logging.getLogger(__name__)

# How far (in characters) a thickness value may sit after its material name.
PROXIMITY_CHARS = 60

_MATERIAL_PATTERNS = {
    "steel": r"(?<!stainless )\bsteel",
    "stainless": r"\bstainless(?: steel)?",
    "aluminum": r"\balumin(?:i)?um",
    "brass": r"\bbrass",
    "copper": r"\bcopper",
}
_MATERIAL_THICKNESS = {
    material: re.compile(
        pattern + r"[^.;]{0,%d}?(?<![\d.])(\d{1,3}(?:\.\d+)?)\s*mm(?!/)" % PROXIMITY_CHARS,
        re.IGNORECASE,
    )
    for material, pattern in _MATERIAL_PATTERNS.items()
}


def pdf_text(buf: bytes) -> str:
    reader = PdfReader(io.BytesIO(buf))
    parts = []
    for page in reader.pages:
        parts.append(page.extract_text() or "")
    return collapse_ws(" ".join(parts))


def thickness_from_text(text: str, thresholds: Optional[Thresholds] = None) -> Dict[str, float]:
    th = thresholds or Thresholds()
    out: Dict[str, float] = {}
    for material, rx in _MATERIAL_THICKNESS.items():
        for m in rx.finditer(text):
            value = float(m.group(1))
            if not th.thickness_ok(value):
                logger.debug("Discarding PDF %s thickness %s mm: outside (0, %s]", material, value, th.max_thickness_mm)
                continue
            out[material] = max(out.get(material, 0.0), value)
    return out


def specs_from_text(text: str, thresholds: Optional[Thresholds] = None) -> Dict[str, Any]:
    th = thresholds or Thresholds()
    out: Dict[str, Any] = {}
    kw = find_power_kw(text)
    if kw is not None:
        out["power_kw"] = kw
    area = find_work_area(text, min_side=th.min_work_area_mm)
    if area:
        out["work_area_length"], out["work_area_width"] = area
    laser_type = detect_laser_type(text)
    if laser_type:
        out["laser_type"] = laser_type
        wavelength = infer_wavelength(laser_type)
        if wavelength:
            out["wavelength"] = wavelength
    thickness = thickness_from_text(text, th)
    if thickness:
        out["max_cutting_thickness"] = thickness
    return out


def parse_pdf_specs(buf: bytes, thresholds: Optional[Thresholds] = None) -> Dict[str, Any]:
    """Partial record from PDF bytes; {} if the file cannot be read."""
    try:
        text = pdf_text(buf)
    except Exception as exc:
        logger.warning("Could not read PDF (%d bytes): %s", len(buf or b""), exc)
        return {}
    try:
        return specs_from_text(text, thresholds)
    except Exception as exc:
        logger.warning("PDF heuristics failed: %s", exc)
        return {}

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from selectolax.parser import HTMLParser

from ..settings import Thresholds

logger = logging.getLogger(__name__)

MATERIALS = ("steel", "stainless", "aluminum", "brass", "copper")

_NUMBER = re.compile(r"\d+(?:\.\d+)?")
_MM_CELL = re.compile(r"mm(?!/)", re.IGNORECASE)
_SPEED_UNIT = re.compile(r"(m/min|mm/s)", re.IGNORECASE)
_THICKNESS = re.compile(r"(\d+(?:\.\d+)?)\s*mm(?!/)", re.IGNORECASE)
_SPEED = re.compile(r"(\d+(?:\.\d+)?)\s*(m/min|mm/s)", re.IGNORECASE)


def classify_material(text: str) -> Optional[str]:
    t = (text or "").lower()
    if "stainless" in t:
        return "stainless"
    if "steel" in t:
        return "steel"
    if "aluminum" in t or "aluminium" in t:
        return "aluminum"
    if "brass" in t:
        return "brass"
    if "copper" in t:
        return "copper"
    return None


def mm_per_s_to_m_per_min(value: float) -> float:
    return value * 60 / 1000


def _first_number(text: Optional[str]) -> Optional[float]:
    m = _NUMBER.search(text or "")
    return float(m.group(0)) if m else None


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _row_cells(tr) -> List[str]:
    return [c.text(deep=True, separator=" ", strip=True) for c in tr.iter() if c.tag in ("td", "th")]


class TableAccumulator:
    """Max-seen-value-wins maps built up over every table row of a page."""

    def __init__(self, thresholds: Optional[Thresholds] = None) -> None:
        self.thresholds = thresholds or Thresholds()
        self.thickness: Dict[str, float] = {}
        self.speed: Dict[str, float] = {}

    def add_row(self, cells: List[str]) -> None:
        cells = [c for c in cells if c is not None]
        if not cells:
            return
        row = " ".join(cells).lower()
        material = classify_material(cells[0]) or classify_material(row)

        if material:
            value_cell = next((c for c in cells if _MM_CELL.search(c)), cells[1] if len(cells) > 1 else None)
            self._add_thickness(material, _first_number(value_cell))

        if _SPEED_UNIT.search(row):
            thick = _THICKNESS.search(row)
            speed = _SPEED.search(row)
            if thick and speed:
                self._add_speed(material or "steel", float(thick.group(1)), float(speed.group(1)), speed.group(2))

    def _add_thickness(self, material: str, value: Optional[float]) -> None:
        if value is None:
            return
        if not self.thresholds.thickness_ok(value):
            logger.debug("Discarding %s thickness %s mm: outside (0, %s]", material, value, self.thresholds.max_thickness_mm)
            return
        self.thickness[material] = max(self.thickness.get(material, 0.0), value)

    def _add_speed(self, material: str, thickness: float, value: float, unit: str) -> None:
        if not self.thresholds.thickness_ok(thickness):
            logger.debug("Discarding speed row for %s mm %s: thickness out of range", _fmt(thickness), material)
            return
        if unit.lower() == "mm/s":
            value = mm_per_s_to_m_per_min(value)
        key = f"{material}_{_fmt(thickness)}mm"
        self.speed[key] = max(self.speed.get(key, 0.0), value)

    def result(self) -> Dict[str, Optional[Dict[str, float]]]:
        return {
            "max_cutting_thickness": dict(self.thickness) or None,
            "cutting_speed": dict(self.speed) or None,
        }


def extract_tables(doc: HTMLParser, thresholds: Optional[Thresholds] = None) -> Dict[str, Optional[Dict[str, float]]]:
    """Thickness and speed maps from every <table> on the page.

    Malformed markup yields empty (None) maps, never an exception.
    """
    acc = TableAccumulator(thresholds)
    try:
        tables = doc.css("table")
    except Exception as exc:
        logger.debug("Table lookup failed: %s", exc)
        return acc.result()
    for table in tables:
        for tr in table.css("tr"):
            try:
                acc.add_row(_row_cells(tr))
            except Exception as exc:
                logger.debug("Skipping unreadable table row: %s", exc)
    return acc.result()

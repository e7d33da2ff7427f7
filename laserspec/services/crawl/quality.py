"""Admission control for scraped records, and the draft -> record step."""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

from pydantic import ValidationError

from laserspec.models.equipment import EquipmentRecord

from .base import EquipmentDraft, Target
from .catalog import BRAND_COUNTRY, CO2_BRANDS, FIBER_BRANDS
from .parsers.generic import DEFAULT_COOLING, infer_wavelength
from .settings import Thresholds

logger = logging.getLogger(__name__)

# Navigation labels that leak through slug-derived model names.
BAD_MODELS = frozenset(
    {"About", "Contact", "News", "Sitemap", "Activity", "Become A Dealer", "Solutions And Products"}
)
_NOISE_URL = re.compile(r"(welder|welding|driver|install|category|tag|search)")
_XML_URL = re.compile(r"\.xml$")


def rejection_reason(record: EquipmentRecord, thresholds: Optional[Thresholds] = None) -> Optional[str]:
    """Why the record must not be emitted, or None when it passes."""
    th = thresholds or Thresholds()
    if not record.brand or not record.model:
        return "missing brand/model"
    if not record.laser_type:
        return "missing laser_type"

    has_core = (
        (record.power_kw is not None and record.power_kw > 0)
        or (record.work_area_length is not None and record.work_area_length >= th.gate_min_length_mm)
        or (record.work_area_width is not None and record.work_area_width >= th.gate_min_width_mm)
        or bool(record.max_cutting_thickness)
    )
    if not has_core:
        return "no core spec (power, work area or thickness)"

    if record.model in BAD_MODELS:
        return f"navigation model name {record.model!r}"
    url = (record.manufacturer_url or "").lower()
    if _XML_URL.search(url):
        return "xml source url"
    if _NOISE_URL.search(url):
        return "noise source url"
    return None


def is_good_record(record: EquipmentRecord, thresholds: Optional[Thresholds] = None) -> bool:
    return rejection_reason(record, thresholds) is None


def apply_brand_defaults(draft: EquipmentDraft, brand: str) -> EquipmentDraft:
    """CO2-only brands are forced to CO2; fiber cutters default to Fiber.

    Wavelength and cooling are filled from the resulting type when missing.
    """
    if brand in CO2_BRANDS and draft.laser_type != "CO2":
        draft.laser_type = "CO2"
        draft.wavelength = infer_wavelength("CO2")
    elif not draft.laser_type and brand in FIBER_BRANDS:
        draft.laser_type = "Fiber"
    if draft.laser_type:
        if draft.wavelength is None:
            draft.wavelength = infer_wavelength(draft.laser_type)
        if draft.cooling_type is None:
            draft.cooling_type = DEFAULT_COOLING.get(draft.laser_type)
    return draft


def build_record(draft: EquipmentDraft, target: Target) -> EquipmentRecord:
    return EquipmentRecord(
        brand=target.brand,
        model=target.model,
        laser_type=draft.laser_type,
        power_kw=draft.power_kw,
        work_area_length=draft.work_area_length,
        work_area_width=draft.work_area_width,
        max_cutting_thickness=draft.max_cutting_thickness or None,
        cutting_speed=draft.cutting_speed or None,
        wavelength=draft.wavelength,
        control_system=draft.control_system,
        cooling_type=draft.cooling_type,
        manufacturer_url=target.url,
        spec_sheet_url=draft.spec_sheet_url,
        image_url=draft.image_url,
        description=draft.description,
        origin_country=BRAND_COUNTRY.get(target.brand),
    )


def finalize(
    draft: EquipmentDraft,
    target: Target,
    thresholds: Optional[Thresholds] = None,
    *,
    gate: bool = True,
) -> Tuple[Optional[EquipmentRecord], Optional[str]]:
    """Turn a draft into an immutable record and run the quality gate.

    Total: returns (record, None) on success or (None, reason) otherwise.
    With gate=False the record is returned even if it would be rejected.
    """
    apply_brand_defaults(draft, target.brand)
    try:
        record = build_record(draft, target)
    except ValidationError as exc:
        return None, f"invalid record: {exc.error_count()} field error(s)"
    if not gate:
        return record, None
    reason = rejection_reason(record, thresholds)
    if reason:
        return None, reason
    return record, None

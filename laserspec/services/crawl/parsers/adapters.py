"""Brand-specific overrides layered on top of the generic parse.

An adapter returns only the fields it is confident about; the registry merges
them over the generic result field by field. Brands without an adapter are a
normal case and keep the generic result.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from ..settings import Thresholds
from .generic import ParsedPage, find_power_kw, find_work_area

logger = logging.getLogger(__name__)


class BrandAdapter:
    """Configurable adapter.

    - laser_type: value forced for the brand (None keeps the generic guess)
    - scope: CSS selector whose text is searched instead of the whole body,
      which keeps navigation/footer numbers out of the match
    - power / work_area: which numeric heuristics to re-run on the scoped text
    """

    def __init__(
        self,
        brand: str,
        *,
        laser_type: Optional[str] = None,
        scope: Optional[str] = None,
        power: bool = False,
        work_area: bool = False,
    ) -> None:
        self.brand = brand
        self.laser_type = laser_type
        self.scope = scope
        self.power = power
        self.work_area = work_area

    def text(self, page: ParsedPage) -> str:
        if self.scope:
            return page.scoped_text(self.scope)
        return page.body_text

    def override(self, page: ParsedPage, thresholds: Optional[Thresholds] = None) -> Dict[str, Any]:
        th = thresholds or Thresholds()
        out: Dict[str, Any] = {}
        if self.power or self.work_area:
            text = self.text(page)
            if self.power:
                kw = find_power_kw(text)
                if kw is not None:
                    out["power_kw"] = kw
            if self.work_area:
                area = find_work_area(text, min_side=th.min_work_area_mm)
                if area:
                    out["work_area_length"], out["work_area_width"] = area
        if self.laser_type:
            out["laser_type"] = self.laser_type
        return out

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.brand!r})"


class AdapterRegistry:
    def __init__(self, adapters: Iterable[BrandAdapter] = ()) -> None:
        self._adapters: Dict[str, BrandAdapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: BrandAdapter) -> None:
        self._adapters[adapter.brand] = adapter

    def __contains__(self, brand: str) -> bool:
        return brand in self._adapters

    def override(self, brand: str, page: ParsedPage, thresholds: Optional[Thresholds] = None) -> Dict[str, Any]:
        """Adapter fields for brand, or {} when there is no adapter or it fails."""
        adapter = self._adapters.get(brand)
        if adapter is None:
            return {}
        try:
            return adapter.override(page, thresholds) or {}
        except Exception as exc:
            logger.warning("Adapter %r failed on %s, using generic result: %s", adapter, page.url, exc)
            return {}


def default_registry() -> AdapterRegistry:
    return AdapterRegistry(
        [
            BrandAdapter("TRUMPF", laser_type="Fiber", scope="main", power=True, work_area=True),
            BrandAdapter("AMADA", laser_type="Fiber", work_area=True),
            BrandAdapter("Mazak", laser_type="Fiber", power=True),
            BrandAdapter("LVD", laser_type="Fiber", work_area=True),
            BrandAdapter("Prima Power", laser_type="Fiber", power=True),
            BrandAdapter("Mitsubishi", laser_type="Fiber", work_area=True),
            BrandAdapter("Han's Laser", laser_type="Fiber"),
            BrandAdapter("Bodor", laser_type="Fiber"),
            BrandAdapter("Trotec", laser_type="CO2"),
            BrandAdapter("Universal Laser", laser_type="CO2"),
            BrandAdapter("ULS", laser_type="CO2"),
        ]
    )

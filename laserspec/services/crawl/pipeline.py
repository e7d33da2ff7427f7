from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Set, Tuple

from laserspec.models.equipment import EquipmentRecord

from .base import EquipmentDraft, Target
from .fetcher import Fetcher
from .parsers.adapters import AdapterRegistry, default_registry
from .parsers.generic import detect_cooling, infer_wavelength, load_page, parse_specs
from .parsers.pdf import parse_pdf_specs
from .parsers.tables import extract_tables
from .quality import finalize
from .settings import Thresholds

logger = logging.getLogger(__name__)


class TargetPool:
    """Ordered target collection keyed by exact URL string.

    The first occurrence of a URL wins; later duplicates are dropped.
    """

    def __init__(self) -> None:
        self._seen: Set[str] = set()
        self._targets: List[Target] = []

    def add(self, target: Target) -> bool:
        if target.url in self._seen:
            return False
        self._seen.add(target.url)
        self._targets.append(target)
        return True

    def extend(self, targets: Iterable[Target]) -> int:
        return sum(1 for t in targets if self.add(t))

    def __contains__(self, url: str) -> bool:
        return url in self._seen

    def freeze(self) -> Tuple[Target, ...]:
        return tuple(self._targets)


def merge_targets(*groups: Iterable[Target], brand: Optional[str] = None) -> Tuple[Target, ...]:
    """Merge target groups in order, deduplicating by URL and filtering by brand."""
    pool = TargetPool()
    for group in groups:
        pool.extend(t for t in group if not brand or t.brand.lower() == brand.lower())
    return pool.freeze()


@dataclass
class TargetOutcome:
    target: Target
    record: Optional[EquipmentRecord] = None
    reason: Optional[str] = None
    error: Optional[str] = None


@dataclass
class PipelineResult:
    records: List[EquipmentRecord] = field(default_factory=list)
    skipped: List[Tuple[Target, str]] = field(default_factory=list)
    failed: List[Tuple[Target, str]] = field(default_factory=list)

    def add(self, outcome: TargetOutcome) -> None:
        if outcome.record is not None:
            self.records.append(outcome.record)
        elif outcome.error is not None:
            self.failed.append((outcome.target, outcome.error))
        else:
            self.skipped.append((outcome.target, outcome.reason or "rejected"))


class SpecPipeline:
    """Fetch -> generic parse -> brand adapter -> tables/PDF -> finalize, per target."""

    def __init__(
        self,
        fetcher: Fetcher,
        *,
        registry: Optional[AdapterRegistry] = None,
        thresholds: Optional[Thresholds] = None,
        gate: bool = True,
    ) -> None:
        self.fetcher = fetcher
        self.registry = registry if registry is not None else default_registry()
        self.thresholds = thresholds or Thresholds()
        self.gate = gate

    def extract(self, target: Target) -> EquipmentDraft:
        th = self.thresholds
        draft = EquipmentDraft()
        if target.source_kind == "pdf":
            buf = self.fetcher.fetch_pdf_buffer(target.url)
            draft.merge(parse_pdf_specs(buf, th))
            draft.spec_sheet_url = target.url
            return draft

        page = load_page(self.fetcher.fetch_page(target.url), target.url)
        draft.merge(parse_specs(page, th))
        generic_type = draft.laser_type
        draft.merge(self.registry.override(target.brand, page, th))
        if draft.laser_type != generic_type:
            draft.wavelength = infer_wavelength(draft.laser_type)
            draft.cooling_type = detect_cooling(page.body_text, draft.laser_type)
        draft.merge(extract_tables(page.doc, th))
        return draft

    def process(self, target: Target) -> TargetOutcome:
        """Never raises: fetch/parse failures and gate rejections become outcomes."""
        try:
            draft = self.extract(target)
        except Exception as exc:
            logger.warning("Error on %s %s: %s", target.brand, target.model, exc)
            return TargetOutcome(target, error=str(exc))

        record, reason = finalize(draft, target, self.thresholds, gate=self.gate)
        if record is None:
            logger.warning("Skip (quality gate): %s %s (%s)", target.brand, target.model, reason)
            return TargetOutcome(target, reason=reason)
        logger.info("Prepared: %s %s", target.brand, target.model)
        return TargetOutcome(target, record=record)


def run_targets(
    targets: Iterable[Target],
    process: Callable[[Target], TargetOutcome],
    *,
    concurrency: int = 1,
    delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> PipelineResult:
    """Process targets with a bounded worker pool, keeping input order.

    concurrency=1 runs strictly one target at a time. Each worker pauses for
    `delay` seconds after every target before taking the next one.
    """

    def _one(target: Target) -> TargetOutcome:
        try:
            return process(target)
        except Exception as exc:
            logger.warning("Error on %s %s: %s", target.brand, target.model, exc)
            return TargetOutcome(target, error=str(exc))
        finally:
            if delay:
                sleep(delay)

    result = PipelineResult()
    if concurrency <= 1:
        for target in targets:
            result.add(_one(target))
        return result

    with ThreadPoolExecutor(max_workers=int(concurrency)) as pool:
        for outcome in pool.map(_one, targets):
            result.add(outcome)
    return result

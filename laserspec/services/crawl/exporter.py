from __future__ import annotations

import csv
import json
import logging
import os
import time
from typing import Any, Dict, Iterable, List, Optional

from laserspec.models.equipment import RECORD_FIELDS, EquipmentRecord

logger = logging.getLogger(__name__)

PREVIEW_PATH = "scrape-preview.json"


def ensure_dir(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def default_output_path(brand: Optional[str] = None, *, out_dir: str = "data", now_ms: Optional[int] = None) -> str:
    """data/equipment-import-[<brand, lowercased>-]<epoch-ms>.json"""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    prefix = f"{brand.lower()}-" if brand else ""
    return os.path.join(out_dir, f"equipment-import-{prefix}{stamp}.json")


def records_payload(records: Iterable[EquipmentRecord]) -> Dict[str, List[Dict[str, Any]]]:
    """The {records: [...]} body shared by the JSON file and the import POST."""
    return {"records": [r.model_dump(mode="json") for r in records]}


def _csv_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def write_json(path: str, records: Iterable[EquipmentRecord]) -> str:
    ensure_dir(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        json.dump(records_payload(records), f, ensure_ascii=False, indent=2)
    return path


def write_csv(path: str, records: Iterable[EquipmentRecord]) -> str:
    """One header row of the 24 record fields, then one row per record.

    Map and list fields are written as JSON strings; the csv module quotes
    any cell containing a comma, quote or newline and doubles embedded quotes.
    """
    ensure_dir(os.path.dirname(path))
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(RECORD_FIELDS)
        for rec in records:
            data = rec.model_dump(mode="json")
            writer.writerow([_csv_cell(data.get(name)) for name in RECORD_FIELDS])
    return path


def write_records(path: str, records: Iterable[EquipmentRecord]) -> str:
    """Write JSON, or CSV when the path ends in .csv. Returns the path."""
    records = list(records)
    if path.lower().endswith(".csv"):
        write_csv(path, records)
    else:
        write_json(path, records)
    logger.info("Wrote %d records to %s", len(records), path)
    return path

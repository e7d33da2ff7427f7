from __future__ import annotations

import logging
from typing import Iterable, Optional

import httpx
from pydantic import ValidationError

from laserspec.models.equipment import EquipmentRecord, ImportSummary

from .exporter import records_payload

logger = logging.getLogger(__name__)


class ImportServiceError(RuntimeError):
    """The import endpoint failed, answered garbage, or reported success=false."""


def post_records(
    records: Iterable[EquipmentRecord],
    import_url: str,
    *,
    client: Optional[httpx.Client] = None,
    timeout: float = 60.0,
) -> ImportSummary:
    """POST {records: [...]} to the import endpoint and return its summary.

    Raises ImportServiceError on transport failure, non-2xx status, an
    undecodable body, or success=false.
    """
    payload = records_payload(records)
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        resp = http.post(import_url, json=payload, timeout=timeout)
        resp.raise_for_status()
        body = resp.json()
    except httpx.HTTPStatusError as exc:
        raise ImportServiceError(
            f"Import failed: HTTP {exc.response.status_code} {exc.response.text[:200]}"
        ) from exc
    except httpx.HTTPError as exc:
        raise ImportServiceError(f"Import failed: {exc}") from exc
    except ValueError as exc:
        raise ImportServiceError(f"Import response is not JSON: {exc}") from exc
    finally:
        if owns_client:
            http.close()

    try:
        summary = ImportSummary.model_validate(body)
    except ValidationError as exc:
        raise ImportServiceError(f"Unexpected import response: {body!r}") from exc
    if not summary.success:
        raise ImportServiceError(f"Import failed: {body!r}")
    logger.info("Import success: inserted %d, updated %d", summary.inserted, summary.updated)
    return summary

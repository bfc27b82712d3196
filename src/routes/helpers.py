"""
Shared helpers for API routes.
Contains: type coercion, date parsing, JSON-safe conversion of results.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from analytics.series import to_date

log = logging.getLogger("api")


# ─── Type coercion ──────────────────────────────────────────

def _num(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return out if math.isfinite(out) else None


def _text(value: Any) -> str:
    return str(value) if value is not None else ""


def _parse_date(value: Any) -> Optional[date]:
    """None for a missing value; ValueError for one that is not a date."""
    if value is None or _text(value).strip() == "":
        return None
    return to_date(value)


# ─── JSON conversion ───────────────────────────────────────

def _to_jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, np.generic):
        return value.item()
    return value


# ─── Request bodies ────────────────────────────────────────

def _entry_rows(entries: Iterable[Any]) -> List[Dict[str, Any]]:
    """Pydantic entry models (or plain mappings) as plain dicts."""
    rows: List[Dict[str, Any]] = []
    for e in entries:
        row = e.model_dump() if hasattr(e, "model_dump") else dict(e)
        rows.append(row)
    return rows

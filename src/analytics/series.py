"""Date-aligned metric series built from logged entry rows."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

log = logging.getLogger("series")


def to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value or "").strip()
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}") from None


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and pd.isna(value))


def entry_value(entry: Dict[str, Any]) -> Optional[float]:
    """Numeric value of a logged entry; booleans map to 1.0 / 0.0.

    Zero and False are real values, only None/NaN count as missing.
    """
    numeric = entry.get("numeric_value")
    if not _missing(numeric):
        return float(numeric)
    boolean = entry.get("boolean_value")
    if not _missing(boolean):
        return 1.0 if bool(boolean) else 0.0
    return None


def window_bounds(days: int, today: Optional[date] = None) -> Tuple[date, date]:
    """Inclusive (start, end) for the last *days* days ending today."""
    if days < 1:
        raise ValueError(f"days must be >= 1, got {days}")
    end = to_date(today) if today is not None else date.today()
    return end - timedelta(days=days - 1), end


def formatted_date(day: date, today: Optional[date] = None) -> str:
    """'Feb 3', or 'Feb 3, 2025' when the year is not the current one."""
    ref = today or date.today()
    label = f"{day.strftime('%b')} {day.day}"
    if day.year != ref.year:
        label += f", {day.year}"
    return label


def _daily_frame(
    entries: Iterable[Dict[str, Any]],
    metric_ids: Sequence[str],
    start: date,
    end: date,
) -> pd.DataFrame:
    """One row per calendar day in [start, end], one column per metric id."""
    grid = pd.date_range(start, end, freq="D")
    wanted = set(metric_ids)
    records: List[Dict[str, Any]] = []
    for entry in entries:
        item_id = entry.get("trackable_item_id")
        if item_id not in wanted:
            continue
        value = entry_value(entry)
        if value is None:
            continue
        day = to_date(entry.get("entry_date"))
        if day < start or day > end:
            continue
        records.append({"date": pd.Timestamp(day), "item": item_id, "value": value})

    if records:
        df = pd.DataFrame.from_records(records)
        # Later rows for the same (day, item) win
        wide = df.groupby(["date", "item"])["value"].last().unstack("item")
    else:
        wide = pd.DataFrame()
    return wide.reindex(index=grid, columns=list(metric_ids))


def _cell(frame: pd.DataFrame, ts: pd.Timestamp, metric_id: Optional[str]) -> Optional[float]:
    if metric_id is None:
        return None
    value = frame.at[ts, metric_id]
    return None if pd.isna(value) else float(value)


def build_dual_metric_series(
    entries: Iterable[Dict[str, Any]],
    primary_id: str,
    comparison_id: Optional[str],
    start_date: Any,
    end_date: Any,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """Primary and comparison values for every day in the window.

    Days with no entry hold None so charts show gaps and callers can tell
    "not logged" apart from a logged zero.
    """
    start = to_date(start_date)
    end = to_date(end_date)
    if end < start:
        raise ValueError(f"end_date {end} is before start_date {start}")

    ids = list(dict.fromkeys(i for i in (primary_id, comparison_id) if i is not None))
    frame = _daily_frame(entries, ids, start, end)

    rows: List[Dict[str, Any]] = []
    for ts in frame.index:
        day = ts.date()
        rows.append({
            "date": day.isoformat(),
            "formatted_date": formatted_date(day, today),
            "primary_value": _cell(frame, ts, primary_id),
            "comparison_value": _cell(frame, ts, comparison_id),
        })
    log.debug("Built %d-day dual series for %s vs %s", len(rows), primary_id, comparison_id)
    return rows


def build_metric_series(
    entries: Iterable[Dict[str, Any]],
    metric_id: str,
    start_date: Any,
    end_date: Any,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    rows = build_dual_metric_series(entries, metric_id, None, start_date, end_date, today=today)
    return [
        {"date": r["date"], "formatted_date": r["formatted_date"], "value": r["primary_value"]}
        for r in rows
    ]


def paired_values(rows: Sequence[Dict[str, Any]]) -> Tuple[List[float], List[float]]:
    """Primary/comparison values for rows where both metrics were logged."""
    primary: List[float] = []
    comparison: List[float] = []
    for row in rows:
        p = row.get("primary_value")
        c = row.get("comparison_value")
        if p is None or c is None:
            continue
        primary.append(p)
        comparison.append(c)
    return primary, comparison

"""Logging streak and dashboard header statistics."""

import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, Optional

from analytics.series import to_date

log = logging.getLogger("streaks")


def current_streak(entry_dates: Iterable[Any], today: Optional[date] = None) -> int:
    """Consecutive days with at least one entry, counting back from today.

    No entry today means no streak, even if yesterday was logged.
    """
    logged = {to_date(d) for d in entry_dates}
    day = today or date.today()
    streak = 0
    while day in logged:
        streak += 1
        day -= timedelta(days=1)
    return streak


def dashboard_stats(
    entry_dates: Iterable[Any], active_metric_count: int, today: Optional[date] = None
) -> Dict[str, int]:
    dates = list(entry_dates)
    stats = {
        "current_streak": current_streak(dates, today=today),
        "total_metrics": active_metric_count,
        "total_entries": len(dates),
    }
    log.debug("Dashboard stats: %s", stats)
    return stats


def todays_entries_map(
    entries: Iterable[Dict[str, Any]], today: Optional[date] = None
) -> Dict[str, Any]:
    """trackable_item_id -> today's value (numeric, then boolean, then text)."""
    ref = today or date.today()
    values: Dict[str, Any] = {}
    for entry in entries:
        if to_date(entry.get("entry_date")) != ref:
            continue
        for field in ("numeric_value", "boolean_value", "text_value"):
            value = entry.get(field)
            if value is not None and value != "":
                values[entry["trackable_item_id"]] = value
                break
    return values

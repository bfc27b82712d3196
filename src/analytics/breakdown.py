"""
Relationship breakdown: how the primary metric behaves under different
conditions of the comparison metric.

  conditional_averages  ─ Yes/No days (boolean) or High/Low days split at
                          the comparison median (numeric, 1-10 scale).
  consistency_analysis  ─ primary average inside vs outside runs of 3+
                          consecutive "positive" comparison days.

Inputs are dual-metric rows from analytics.series.  Sparse data returns
None for the affected section; nothing here raises for lack of data.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from constants import BOOLEAN, MIN_STREAK_DAYS, MODERATE_IMPACT, STRONG_IMPACT

log = logging.getLogger("breakdown")


def valid_points(rows: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Rows where both primary and comparison were logged, in date order."""
    points = [
        r for r in rows
        if r.get("primary_value") is not None and r.get("comparison_value") is not None
    ]
    return sorted(points, key=lambda r: r.get("date") or "")


def impact_strength(difference: float) -> str:
    size = abs(difference)
    if size >= STRONG_IMPACT:
        return "Strong"
    if size >= MODERATE_IMPACT:
        return "Moderate"
    return "Minimal"


def _mean(values: Sequence[float]) -> float:
    return float(np.mean(values))


def _comparison_median(points: Sequence[Dict[str, Any]]) -> Optional[float]:
    """Median of comparison values, or None when they are all the same."""
    values = np.array([p["comparison_value"] for p in points], dtype=float)
    if len(np.unique(values)) < 2:
        return None
    return float(np.median(values))


def _group(label: str, values: Sequence[float]) -> Dict[str, Any]:
    return {"label": label, "average": _mean(values), "count": len(values)}


def conditional_averages(
    rows: Sequence[Dict[str, Any]], comparison_type: str, comparison_name: str
) -> Optional[Dict[str, Any]]:
    points = valid_points(rows)
    if len(points) < 2:
        return None

    if comparison_type == BOOLEAN:
        kind = "boolean"
        first = [p["primary_value"] for p in points if p["comparison_value"] == 1]
        second = [p["primary_value"] for p in points if p["comparison_value"] == 0]
        labels = (f"On days {comparison_name} was Yes", f"On days {comparison_name} was No")
    else:
        kind = "numeric"
        median = _comparison_median(points)
        if median is None:
            return None
        first = [p["primary_value"] for p in points if p["comparison_value"] > median]
        second = [p["primary_value"] for p in points if p["comparison_value"] <= median]
        labels = (f"On High {comparison_name} days", f"On Low {comparison_name} days")

    if not first or not second:
        return None

    group1 = _group(labels[0], first)
    group2 = _group(labels[1], second)
    difference = group1["average"] - group2["average"]
    return {
        "type": kind,
        "group1": group1,
        "group2": group2,
        "difference": difference,
        "impact": impact_strength(difference),
    }


def _streak_condition(
    points: Sequence[Dict[str, Any]], comparison_type: str
) -> Optional[Callable[[float], bool]]:
    if comparison_type == BOOLEAN:
        return lambda v: v == 1
    median = _comparison_median(points)
    if median is None:
        return None
    return lambda v: v > median


def _find_streaks(flags: Sequence[bool]) -> List[List[int]]:
    """Index runs of at least MIN_STREAK_DAYS consecutive True flags."""
    streaks: List[List[int]] = []
    current: List[int] = []
    for i, flag in enumerate(flags):
        if flag:
            current.append(i)
            continue
        if len(current) >= MIN_STREAK_DAYS:
            streaks.append(current)
        current = []
    if len(current) >= MIN_STREAK_DAYS:
        streaks.append(current)
    return streaks


def consistency_analysis(
    rows: Sequence[Dict[str, Any]], comparison_type: str
) -> Optional[Dict[str, Any]]:
    points = valid_points(rows)
    if len(points) < MIN_STREAK_DAYS:
        return None

    condition = _streak_condition(points, comparison_type)
    if condition is None:
        return None

    streaks = _find_streaks([condition(p["comparison_value"]) for p in points])
    if not streaks:
        return None

    in_streak = {i for s in streaks for i in s}
    inside = [p["primary_value"] for i, p in enumerate(points) if i in in_streak]
    outside = [p["primary_value"] for i, p in enumerate(points) if i not in in_streak]
    if not inside or not outside:
        return None

    in_avg = _mean(inside)
    out_avg = _mean(outside)
    difference = in_avg - out_avg
    return {
        "in_streak_average": in_avg,
        "out_of_streak_average": out_avg,
        "in_streak_count": len(inside),
        "out_of_streak_count": len(outside),
        "total_streaks": len(streaks),
        "longest_streak": max(len(s) for s in streaks),
        "difference": difference,
        "impact": impact_strength(difference),
    }


def has_insufficient_variance(rows: Sequence[Dict[str, Any]]) -> bool:
    points = valid_points(rows)
    if len(points) < 2:
        return False
    return len({p["comparison_value"] for p in points}) < 2


def relationship_breakdown(
    rows: Sequence[Dict[str, Any]], comparison_type: str, comparison_name: str
) -> Dict[str, Any]:
    result = {
        "conditional_averages": conditional_averages(rows, comparison_type, comparison_name),
        "consistency": consistency_analysis(rows, comparison_type),
        "insufficient_variance": has_insufficient_variance(rows),
    }
    log.debug(
        "Breakdown for %s (%s): averages=%s streaks=%s",
        comparison_name,
        comparison_type,
        result["conditional_averages"] is not None,
        result["consistency"] is not None,
    )
    return result

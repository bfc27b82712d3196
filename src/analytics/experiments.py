"""
Experiment analysis for the lab: compare the dependent metric on days the
independent variable was in its positive condition against the other days.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, Optional, Tuple

from analytics.series import build_dual_metric_series, to_date
from constants import (
    BOOLEAN,
    MODERATE_IMPACT,
    SCALE_1_10,
    SCALE_POSITIVE_CUTOFF,
    STRONG_IMPACT,
    WEAK_IMPACT,
)

log = logging.getLogger("experiments")

ACTIVE = "ACTIVE"
COMPLETED = "COMPLETED"


def _independent_type(experiment: Dict[str, Any]) -> Optional[str]:
    kind = experiment.get("independent_variable_type")
    if kind is None:
        kind = (experiment.get("independent_variable") or {}).get("type")
    return kind


def is_positive_condition(value: float, variable_type: Optional[str]) -> bool:
    if variable_type == BOOLEAN:
        return value == 1
    if variable_type == SCALE_1_10:
        return value > SCALE_POSITIVE_CUTOFF
    return value > 0


def experiment_impact_strength(difference: Optional[float]) -> str:
    if difference is None:
        return "Insufficient Data"
    size = abs(difference)
    if size >= STRONG_IMPACT:
        return "Strong"
    if size >= MODERATE_IMPACT:
        return "Moderate"
    if size >= WEAK_IMPACT:
        return "Weak"
    return "Minimal"


def experiment_impact_direction(difference: Optional[float]) -> str:
    if difference is None:
        return ""
    if difference > 0:
        return "Positive"
    if difference < 0:
        return "Negative"
    return "No"


def condition_labels(variable_type: Optional[str]) -> Tuple[str, str]:
    if variable_type == BOOLEAN:
        return "Yes", "No"
    if variable_type == SCALE_1_10:
        return "High (6-10)", "Low (1-5)"
    return "High", "Low"


def experiment_status(experiment: Dict[str, Any], today: Optional[date] = None) -> str:
    """COMPLETED once the end date has passed, otherwise the stored status."""
    ref = today or date.today()
    if to_date(experiment["end_date"]) < ref:
        return COMPLETED
    return experiment.get("status") or ACTIVE


def analyze_experiment_results(
    experiment: Dict[str, Any], entries: Iterable[Dict[str, Any]]
) -> Dict[str, Any]:
    """Condition averages and data completeness over the experiment window.

    Raises ValueError when the window ends before it starts or a date
    cannot be parsed.
    """
    start = to_date(experiment["start_date"])
    end = to_date(experiment["end_date"])
    if end < start:
        raise ValueError(f"Experiment end_date {end} is before start_date {start}")

    independent_type = _independent_type(experiment)
    rows = build_dual_metric_series(
        entries,
        experiment["independent_variable_id"],
        experiment["dependent_variable_id"],
        start,
        end,
    )

    positive, negative = [], []
    logged_days, missing_days = [], []
    for row in rows:
        independent = row["primary_value"]
        dependent = row["comparison_value"]
        if independent is None or dependent is None:
            missing_days.append(row["date"])
            continue
        logged_days.append(row["date"])
        if is_positive_condition(independent, independent_type):
            positive.append(dependent)
        else:
            negative.append(dependent)

    total_days = (end - start).days + 1
    positive_avg = sum(positive) / len(positive) if positive else None
    negative_avg = sum(negative) / len(negative) if negative else None
    difference = (
        positive_avg - negative_avg
        if positive_avg is not None and negative_avg is not None
        else None
    )
    positive_label, negative_label = condition_labels(independent_type)

    results = {
        "experiment_id": experiment.get("id"),
        "positive_condition_average": positive_avg,
        "negative_condition_average": negative_avg,
        "positive_condition_count": len(positive),
        "negative_condition_count": len(negative),
        "total_days": total_days,
        "days_with_data": len(logged_days),
        "missing_days": missing_days,
        "logged_days": logged_days,
        "data_completeness_pct": len(logged_days) / total_days * 100 if total_days else 0.0,
        "difference": difference,
        "impact_strength": experiment_impact_strength(difference),
        "impact_direction": experiment_impact_direction(difference),
        "positive_label": positive_label,
        "negative_label": negative_label,
    }
    log.info(
        "Experiment %s: %d/%d days logged, difference=%s",
        experiment.get("id"),
        len(logged_days),
        total_days,
        f"{difference:.2f}" if difference is not None else "n/a",
    )
    return results

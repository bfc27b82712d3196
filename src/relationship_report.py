"""
Relationship Report: offline analysis of an entry export
=======================================================
Reads a CSV export of logged entries and reports how two metrics move
together over a date window: Pearson correlation, its plain-language
reading and the conditional/streak breakdown.

CSV columns: entry_date, trackable_item_id, numeric_value
             (optional) boolean_value, text_value

Usage:
    python relationship_report.py --csv entries.csv --primary sleep --comparison coffee
    python relationship_report.py --csv entries.csv --primary mood --comparison run \\
        --comparison-type BOOLEAN --start 2025-01-01 --end 2025-01-31 --json
    python relationship_report.py --csv entries.csv --primary mood --days 14 --html chart.html
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd

import config
from analytics.breakdown import relationship_breakdown
from analytics.relationship import describe_correlation
from analytics.series import build_dual_metric_series, to_date, window_bounds
from constants import METRIC_TYPES, NUMERIC
from correlation_engine import CorrelationEngine
from visualizations import RelationshipChartBuilder

log = logging.getLogger("relationship_report")

_TRUE = {"true", "t", "yes", "y", "1"}
_FALSE = {"false", "f", "no", "n", "0"}


# ─── Input ────────────────────────────────────────────────────

def _parse_bool(value: Any) -> Optional[bool]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    return None


def load_entries(path: str) -> List[Dict[str, Any]]:
    """Entry rows from a CSV export; empty cells become None."""
    df = pd.read_csv(path, dtype={"entry_date": str, "trackable_item_id": str})
    missing = {"entry_date", "trackable_item_id"} - set(df.columns)
    if missing:
        raise ValueError(f"CSV is missing columns: {', '.join(sorted(missing))}")

    for col in ("numeric_value", "boolean_value", "text_value"):
        if col not in df.columns:
            df[col] = None
    df["numeric_value"] = pd.to_numeric(df["numeric_value"], errors="coerce")
    df["boolean_value"] = df["boolean_value"].map(_parse_bool)
    df = df.astype(object).where(pd.notna(df), None)

    log.info("Loaded %d entries from %s", len(df), path)
    return df.to_dict("records")


# ─── Report ───────────────────────────────────────────────────

def build_report(
    entries: List[Dict[str, Any]],
    primary_id: str,
    comparison_id: Optional[str] = None,
    comparison_type: str = NUMERIC,
    primary_name: Optional[str] = None,
    comparison_name: Optional[str] = None,
    days: Optional[int] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    today = today or date.today()
    if start or end:
        if not (start and end):
            raise ValueError("--start and --end must be given together")
        start_date, end_date = to_date(start), to_date(end)
    else:
        window = days if days is not None else config.DEFAULT_WINDOW_DAYS
        start_date, end_date = window_bounds(window, today)

    primary_name = primary_name or primary_id
    comparison_name = comparison_name or comparison_id or "Comparison"
    rows = build_dual_metric_series(
        entries, primary_id, comparison_id, start_date, end_date, today=today
    )

    report: Dict[str, Any] = {
        "primary": {"id": primary_id, "name": primary_name},
        "comparison": None,
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "total_days": len(rows),
        "series": rows,
        "correlation": None,
        "breakdown": None,
    }
    if comparison_id is None:
        return report

    result = CorrelationEngine().correlate_series(rows)
    correlation = result.to_dict()
    correlation["relationship"] = describe_correlation(result.r, primary_name, comparison_name)
    report["comparison"] = {"id": comparison_id, "name": comparison_name, "type": comparison_type}
    report["correlation"] = correlation
    report["breakdown"] = relationship_breakdown(rows, comparison_type, comparison_name)
    return report


def format_report(report: Dict[str, Any]) -> str:
    primary = report["primary"]["name"]
    lines = [
        "=" * 60,
        f"  RELATIONSHIP REPORT  {report['start_date']} → {report['end_date']}",
        "=" * 60,
    ]
    comparison = report.get("comparison")
    if comparison is None:
        logged = sum(1 for r in report["series"] if r["primary_value"] is not None)
        lines.append(f"  {primary}: {logged}/{report['total_days']} days logged")
        return "\n".join(lines)

    corr = report["correlation"]
    rel = corr["relationship"]
    lines.append(f"  {primary} vs {comparison['name']}")
    lines.append(f"  Paired days: {corr['n']}/{report['total_days']}")

    if not rel["defined"]:
        lines.append(f"  {rel['headline']}")
        lines.append(f"  {rel['message']}")
    else:
        card = rel["card"]
        story = rel["story"]
        p = corr["p_value"]
        lines.append(
            f"  r = {card['score']}  ({card['title']})"
            + (f"  p = {p:.3f}" if p is not None else "")
        )
        lines.append(f"  {story['headline']}: {story['description']}")

    breakdown = report["breakdown"] or {}
    averages = breakdown.get("conditional_averages")
    if averages:
        lines.append("")
        for key in ("group1", "group2"):
            g = averages[key]
            lines.append(f"  {g['label']}: {primary} avg {g['average']:.2f} ({g['count']} days)")
        lines.append(f"  Difference: {averages['difference']:+.2f} ({averages['impact']} impact)")
    consistency = breakdown.get("consistency")
    if consistency:
        lines.append("")
        lines.append(
            f"  Streaks: {consistency['total_streaks']} (longest {consistency['longest_streak']} days)"
        )
        lines.append(
            f"  In streak avg {consistency['in_streak_average']:.2f}  vs  "
            f"outside {consistency['out_of_streak_average']:.2f}  ({consistency['impact']} impact)"
        )
    if breakdown.get("insufficient_variance"):
        lines.append(f"  {comparison['name']} never changed in this window.")
    return "\n".join(lines)


# ═══════════════════════════════════════════════════════════════
#  CLI
# ═══════════════════════════════════════════════════════════════

def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Correlation report for two tracked metrics"
    )
    parser.add_argument("--csv", required=True,
                        help="CSV export of logged entries")
    parser.add_argument("--primary", required=True,
                        help="trackable_item_id of the primary metric")
    parser.add_argument("--comparison",
                        help="trackable_item_id of the comparison metric")
    parser.add_argument("--primary-type", default=NUMERIC, choices=sorted(METRIC_TYPES),
                        help="Primary metric type (default: NUMERIC)")
    parser.add_argument("--comparison-type", default=NUMERIC, choices=sorted(METRIC_TYPES),
                        help="Comparison metric type (default: NUMERIC)")
    parser.add_argument("--primary-name", help="Display name for the primary metric")
    parser.add_argument("--comparison-name", help="Display name for the comparison metric")
    parser.add_argument("--days", type=int, default=None,
                        help=f"Days ending today (default: {config.DEFAULT_WINDOW_DAYS})")
    parser.add_argument("--start", help="Window start date (YYYY-MM-DD)")
    parser.add_argument("--end", help="Window end date (YYYY-MM-DD)")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--html", help="Also write the relationship chart to this HTML file")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s  %(levelname)-8s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        entries = load_entries(args.csv)
        report = build_report(
            entries,
            args.primary,
            comparison_id=args.comparison,
            comparison_type=args.comparison_type,
            primary_name=args.primary_name,
            comparison_name=args.comparison_name,
            days=args.days,
            start=args.start,
            end=args.end,
        )
        if args.html:
            builder = RelationshipChartBuilder()
            fig = builder.build(
                report["series"],
                report["primary"]["name"],
                (report["comparison"] or {}).get("name"),
                primary_type=args.primary_type,
                comparison_type=args.comparison_type if args.comparison else None,
            )
            builder.export_html(fig, args.html)
    except (OSError, ValueError) as e:
        log.error("Report failed: %s", e)
        sys.exit(1)

    if args.json:
        print(json.dumps(report, indent=2, default=str))
    else:
        print(format_report(report))
    sys.exit(0)


if __name__ == "__main__":
    main()

"""
Relationship Chart
==================
Dual-axis Plotly chart of a primary metric against a comparison metric.

Axis synchronisation follows the metric types so the two lines are
readable on one canvas:
    NUMERIC vs SCALE_1_10   ─ right axis stretched over the left range,
                              labelled 1..10
    SCALE_1_10 vs BOOLEAN   ─ Yes/No drawn at 7.5 / 2.5 on the 1-10 axis
    anything else           ─ each axis sized to its own metric
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from constants import BOOLEAN, NUMERIC, SCALE_1_10

log = logging.getLogger("visualizations")

SCALE_DOMAIN = [1, 10]
BOOLEAN_YES_POSITION = 7.5
BOOLEAN_NO_POSITION = 2.5


def _column_max(rows: Sequence[Dict[str, Any]], key: str) -> float:
    values = [r[key] for r in rows if r.get(key) is not None]
    return max(values) if values else 10


def _padded(max_value: float) -> List[float]:
    return [0, max(max_value * 1.1, 1)]


def axis_config(
    rows: Sequence[Dict[str, Any]],
    primary_type: str,
    comparison_type: Optional[str] = None,
) -> Dict[str, Any]:
    """Left/right axis ranges and right-axis ticks for the relationship chart."""
    primary_max = _column_max(rows, "primary_value")
    comparison_max = _column_max(rows, "comparison_value")
    config: Dict[str, Any] = {
        "left_domain": None,
        "right_domain": None,
        "right_ticks": None,
        "right_tick_labels": None,
        "normalize_comparison": False,
    }

    if comparison_type is None:
        config["left_domain"] = SCALE_DOMAIN if primary_type == SCALE_1_10 else _padded(primary_max)
        config["right_domain"] = [0, 10]

    elif primary_type == NUMERIC and comparison_type == SCALE_1_10:
        scaled_max = max(primary_max * 1.1, 1)
        config["left_domain"] = [0, scaled_max]
        config["right_domain"] = [0, scaled_max]
        config["right_ticks"] = [(i + 1) / 10 * scaled_max for i in range(10)]
        config["right_tick_labels"] = [str(i + 1) for i in range(10)]

    elif primary_type == SCALE_1_10 and comparison_type == NUMERIC:
        config["left_domain"] = SCALE_DOMAIN
        config["right_domain"] = _padded(comparison_max)

    elif primary_type == SCALE_1_10 and comparison_type == BOOLEAN:
        config["left_domain"] = SCALE_DOMAIN
        config["right_domain"] = SCALE_DOMAIN
        config["right_ticks"] = [BOOLEAN_NO_POSITION, BOOLEAN_YES_POSITION]
        config["right_tick_labels"] = ["No", "Yes"]
        config["normalize_comparison"] = True

    else:
        config["left_domain"] = SCALE_DOMAIN if primary_type == SCALE_1_10 else _padded(primary_max)
        config["right_domain"] = (
            SCALE_DOMAIN if comparison_type == SCALE_1_10 else _padded(comparison_max)
        )

    return config


def normalized_comparison(value: Optional[float]) -> Optional[float]:
    """Position of a boolean value on the 1-10 axis."""
    if value == 1:
        return BOOLEAN_YES_POSITION
    if value == 0:
        return BOOLEAN_NO_POSITION
    return None


class RelationshipChartBuilder:
    """Builds the dual-axis relationship chart from dual-metric rows."""

    def __init__(self):
        self.colors = {
            "primary": "#00B8A9",
            "comparison": "#5C7CFA",
        }

    def build(
        self,
        rows: Sequence[Dict[str, Any]],
        primary_name: str,
        comparison_name: Optional[str] = None,
        primary_type: str = NUMERIC,
        comparison_type: Optional[str] = None,
    ) -> go.Figure:
        config = axis_config(rows, primary_type, comparison_type)
        dates = [r["date"] for r in rows]

        fig = make_subplots(specs=[[{"secondary_y": True}]])
        fig.add_trace(
            go.Scatter(x=dates, y=[r.get("primary_value") for r in rows],
                       name=primary_name, mode="lines+markers",
                       line=dict(color=self.colors["primary"], width=2),
                       connectgaps=False),
            secondary_y=False,
        )

        if comparison_type is not None:
            if config["normalize_comparison"]:
                y = [normalized_comparison(r.get("comparison_value")) for r in rows]
            else:
                y = [r.get("comparison_value") for r in rows]
            fig.add_trace(
                go.Scatter(x=dates, y=y,
                           name=comparison_name or "Comparison", mode="lines+markers",
                           line=dict(color=self.colors["comparison"], width=2, dash="dash"),
                           connectgaps=False),
                secondary_y=True,
            )

        fig.update_yaxes(title_text=primary_name, range=config["left_domain"], secondary_y=False)
        right_axis: Dict[str, Any] = {"range": config["right_domain"]}
        if comparison_name:
            right_axis["title_text"] = comparison_name
        if config["right_ticks"] is not None:
            right_axis["tickvals"] = config["right_ticks"]
            right_axis["ticktext"] = config["right_tick_labels"]
        fig.update_yaxes(secondary_y=True, **right_axis)

        title = primary_name if not comparison_name else f"{primary_name} vs {comparison_name}"
        fig.update_layout(title_text=title, hovermode="x unified", showlegend=True)
        log.debug("Built relationship chart with %d days", len(rows))
        return fig

    def export_html(self, fig: go.Figure, path: str) -> str:
        fig.write_html(path)
        log.info("Saved: %s", path)
        return path

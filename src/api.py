"""
FastAPI backend contract for the PIDMe frontend.

Stateless: every request carries the rows it analyses.  Route handlers are
defined here; shared utilities live in routes/helpers.py.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

import config
from analytics.breakdown import relationship_breakdown
from analytics.experiments import analyze_experiment_results, experiment_status
from analytics.relationship import describe_correlation
from analytics.series import build_dual_metric_series, window_bounds
from analytics.streaks import dashboard_stats, todays_entries_map
from constants import NUMERIC
from correlation_engine import CorrelationEngine, CorrelationResult
from routes.helpers import _entry_rows, _num, _parse_date, _text, _to_jsonable
from visualizations import axis_config

log = logging.getLogger("api")
log.setLevel(config.LOG_LEVEL)


# ─── App setup ─────────────────────────────────────────────

app = FastAPI(title="PIDMe Analytics API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.frontend_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

_engine = CorrelationEngine()


# ─── Request bodies ────────────────────────────────────────

class EntryIn(BaseModel):
    entry_date: str
    trackable_item_id: str
    numeric_value: Optional[float] = None
    boolean_value: Optional[bool] = None
    text_value: Optional[str] = None


class MetricIn(BaseModel):
    id: str
    name: str = ""
    type: str = NUMERIC


class CorrelationRequest(BaseModel):
    x: List[Any]
    y: List[Any]
    primary_name: Optional[str] = None
    comparison_name: Optional[str] = None


class RelationshipRequest(BaseModel):
    entries: List[EntryIn] = []
    primary_metric: MetricIn
    comparison_metric: Optional[MetricIn] = None
    days: Optional[int] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    today: Optional[str] = None


class ExperimentIn(BaseModel):
    id: Optional[str] = None
    title: str = ""
    start_date: str
    end_date: str
    independent_variable_id: str
    dependent_variable_id: str
    independent_variable_type: Optional[str] = None
    dependent_variable_name: Optional[str] = None
    status: Optional[str] = None


class ExperimentRequest(BaseModel):
    experiment: ExperimentIn
    entries: List[EntryIn] = []
    today: Optional[str] = None


class DashboardRequest(BaseModel):
    entries: List[EntryIn] = []
    active_metric_count: int = 0
    today: Optional[str] = None


# ─── Helpers ───────────────────────────────────────────────

def _metric_name(metric: Optional[MetricIn], fallback: str) -> str:
    if metric is None:
        return fallback
    return _text(metric.name) or metric.id


def _correlation_payload(
    result: CorrelationResult, primary_name: str, comparison_name: str
) -> Dict[str, Any]:
    out = result.to_dict()
    out["relationship"] = describe_correlation(result.r, primary_name, comparison_name)
    return out


def _resolve_window(body: RelationshipRequest, today: date) -> Tuple[date, date]:
    start = _parse_date(body.start_date)
    end = _parse_date(body.end_date)
    if start is not None or end is not None:
        if start is None or end is None:
            raise ValueError("start_date and end_date must be given together")
        return start, end
    days = body.days if body.days is not None else config.DEFAULT_WINDOW_DAYS
    return window_bounds(days, today)


# ─── Routes ────────────────────────────────────────────────

@app.get("/")
def root() -> Dict[str, Any]:
    return {"service": "pidme-analytics-api", "status": "ok"}


@app.get("/health-check")
def health_check() -> Dict[str, Any]:
    return {"status": "Online"}


@app.post("/api/v1/correlation")
def correlation(body: CorrelationRequest) -> Dict[str, Any]:
    try:
        x = [_num(v) for v in body.x]
        y = [_num(v) for v in body.y]
        result = _engine.analyze(x, y)
        return _to_jsonable(_correlation_payload(
            result,
            _text(body.primary_name) or "the first metric",
            _text(body.comparison_name) or "the second metric",
        ))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("correlation failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/v1/relationships/analyze")
def relationships_analyze(body: RelationshipRequest) -> Dict[str, Any]:
    try:
        today = _parse_date(body.today) or date.today()
        start, end = _resolve_window(body, today)
        primary = body.primary_metric
        comparison = body.comparison_metric
        primary_name = _metric_name(primary, "Primary")
        comparison_name = _metric_name(comparison, "Comparison")

        rows = build_dual_metric_series(
            _entry_rows(body.entries),
            primary.id,
            comparison.id if comparison else None,
            start,
            end,
            today=today,
        )
        out: Dict[str, Any] = {
            "start_date": start,
            "end_date": end,
            "series": rows,
            "axis_config": axis_config(rows, primary.type, comparison.type if comparison else None),
            "correlation": None,
            "breakdown": None,
        }
        if comparison is not None:
            result = _engine.correlate_series(rows)
            out["correlation"] = _correlation_payload(result, primary_name, comparison_name)
            out["breakdown"] = relationship_breakdown(rows, comparison.type, comparison_name)
        return _to_jsonable(out)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("relationship analysis failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/v1/experiments/analyze")
def experiments_analyze(body: ExperimentRequest) -> Dict[str, Any]:
    try:
        experiment = body.experiment.model_dump()
        today = _parse_date(body.today) or date.today()
        out = analyze_experiment_results(experiment, _entry_rows(body.entries))
        out["status"] = experiment_status(experiment, today=today)
        return _to_jsonable(out)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("experiment analysis failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/v1/dashboard/stats")
def dashboard(body: DashboardRequest) -> Dict[str, Any]:
    try:
        today = _parse_date(body.today) or date.today()
        rows = _entry_rows(body.entries)
        out = dashboard_stats([r["entry_date"] for r in rows], body.active_metric_count, today=today)
        out["todays_entries"] = todays_entries_map(rows, today=today)
        return _to_jsonable(out)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log.exception("dashboard stats failed")
        raise HTTPException(status_code=500, detail=str(e))

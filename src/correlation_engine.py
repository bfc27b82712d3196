"""
Correlation Engine
==================
Pearson correlation between two paired metric series, as shown by the
relationship story, correlation card and community-finding previews.

Layers:
  Core     ─ calculate_pearson_correlation(): pure function, returns r in
             [-1, 1] or None when the statistic is undefined.
  Tagged   ─ analyze_correlation(): same statistic plus the number of pairs,
             a reason code for undefined results and a two-sided p-value.
  Facade   ─ CorrelationEngine: stateless wrapper used by the API and CLI,
             including pairing of date-aligned metric rows.

Undefined is a normal outcome (too few days logged, a metric that never
changes) and is never raised as an error.  Callers show a neutral
"no clear relationship" message instead.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy import stats as sp_stats

from analytics.series import paired_values
from constants import MIN_PAIRED_OBSERVATIONS

log = logging.getLogger("correlation_engine")


# ═══════════════════════════════════════════════════════════════
#  CONSTANTS
# ═══════════════════════════════════════════════════════════════

# Reason codes for CorrelationResult.reason
REASON_OK = "ok"
REASON_MISSING_INPUT = "missing_input"
REASON_LENGTH_MISMATCH = "length_mismatch"
REASON_INSUFFICIENT_DATA = "insufficient_data"
REASON_NON_FINITE = "non_finite"
REASON_ZERO_VARIANCE = "zero_variance"

UNDEFINED_REASONS = (
    REASON_MISSING_INPUT,
    REASON_LENGTH_MISMATCH,
    REASON_INSUFFICIENT_DATA,
    REASON_NON_FINITE,
    REASON_ZERO_VARIANCE,
)


@dataclass
class CorrelationResult:
    r: Optional[float]
    n: int
    reason: str
    p_value: Optional[float] = None

    @property
    def is_defined(self) -> bool:
        return self.reason == REASON_OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correlation": self.r,
            "n": self.n,
            "reason": self.reason,
            "p_value": self.p_value,
            "defined": self.is_defined,
        }


# ═══════════════════════════════════════════════════════════════
#  CORE
# ═══════════════════════════════════════════════════════════════

def _as_list(values: Any) -> Optional[List[Any]]:
    if values is None:
        return None
    try:
        return list(values)
    except TypeError:
        return None


def _finite_floats(values: Sequence[Any]) -> Optional[List[float]]:
    out: List[float] = []
    for v in values:
        if not isinstance(v, (numbers.Real, np.bool_)):
            return None
        fv = float(v)
        if not math.isfinite(fv):
            return None
        out.append(fv)
    return out


def _unit_deviations(values: List[float]) -> List[float]:
    """Deviations from the mean, rescaled so the largest one is +/-1.

    r does not change under scaling; sums of squares stay in [1, n].
    """
    peak = max(abs(v) for v in values)
    scaled = [v / peak for v in values]
    mean = sum(scaled) / len(scaled)
    devs = [v - mean for v in scaled]
    spread = max(abs(d) for d in devs)
    if spread == 0:
        return devs
    return [d / spread for d in devs]


def _pearson_with_reason(x: Any, y: Any) -> Tuple[Optional[float], int, str]:
    xs = _as_list(x)
    ys = _as_list(y)
    if not xs or not ys:
        return None, 0, REASON_MISSING_INPUT
    if len(xs) != len(ys):
        return None, 0, REASON_LENGTH_MISMATCH

    n = len(xs)
    if n < MIN_PAIRED_OBSERVATIONS:
        return None, n, REASON_INSUFFICIENT_DATA

    fx = _finite_floats(xs)
    fy = _finite_floats(ys)
    if fx is None or fy is None:
        return None, n, REASON_NON_FINITE

    # A constant series has zero variance even when float rounding makes
    # the mean differ from the values by an ulp.
    if min(fx) == max(fx) or min(fy) == max(fy):
        return None, n, REASON_ZERO_VARIANCE

    dxs = _unit_deviations(fx)
    dys = _unit_deviations(fy)
    num = 0.0
    sum_sq_x = 0.0
    sum_sq_y = 0.0
    for dx, dy in zip(dxs, dys):
        num += dx * dy
        sum_sq_x += dx * dx
        sum_sq_y += dy * dy

    denominator = math.sqrt(sum_sq_x * sum_sq_y)
    if denominator == 0:
        return None, n, REASON_ZERO_VARIANCE

    r = num / denominator
    # Rounding can push |r| a hair past 1
    return max(-1.0, min(1.0, r)), n, REASON_OK


def calculate_pearson_correlation(x: Any, y: Any) -> Optional[float]:
    """Pearson product-moment correlation of two paired numeric sequences.

    Returns r clamped to [-1, 1], or None when the statistic is undefined:
    missing/empty input, different lengths, fewer than 2 pairs, a
    non-finite element, or zero variance in either sequence.  Never raises.
    """
    r, _, _ = _pearson_with_reason(x, y)
    return r


def _two_sided_p_value(r: float, n: int) -> Optional[float]:
    """t-test for H0: rho = 0 with n-2 degrees of freedom."""
    if n < 3:
        return None
    residual = 1 - r * r
    if residual <= 0:
        return 0.0
    t_stat = r * math.sqrt(n - 2) / math.sqrt(residual)
    return float(2 * sp_stats.t.sf(abs(t_stat), n - 2))


def analyze_correlation(x: Any, y: Any) -> CorrelationResult:
    """Pearson r plus pair count, reason code and p-value."""
    r, n, reason = _pearson_with_reason(x, y)
    if r is None:
        log.debug("Correlation undefined (%s, n=%d)", reason, n)
        return CorrelationResult(r=None, n=n, reason=reason)
    return CorrelationResult(r=r, n=n, reason=reason, p_value=_two_sided_p_value(r, n))


# ═══════════════════════════════════════════════════════════════
#  ENGINE
# ═══════════════════════════════════════════════════════════════

class CorrelationEngine:
    """
    Stateless facade over the Pearson core.
    Safe to share between requests: no instance state is mutated.
    """

    def correlate(self, x: Any, y: Any) -> Optional[float]:
        return calculate_pearson_correlation(x, y)

    def analyze(self, x: Any, y: Any) -> CorrelationResult:
        return analyze_correlation(x, y)

    def correlate_series(self, rows: Sequence[Dict[str, Any]]) -> CorrelationResult:
        """Correlate primary vs comparison over days where both were logged.

        *rows* are dual-metric rows from analytics.series; days missing
        either value are dropped before the statistic is computed.
        """
        primary, comparison = paired_values(rows)
        result = analyze_correlation(primary, comparison)
        log.info(
            "Correlation over %d paired days (of %d): r=%s reason=%s",
            len(primary),
            len(rows),
            f"{result.r:.3f}" if result.r is not None else "n/a",
            result.reason,
        )
        return result

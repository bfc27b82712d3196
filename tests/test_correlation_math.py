"""
Tests for the correlation engine mathematical computations.

Covers: Pearson core, undefined cases and reason codes, p-value,
statistical properties (bounds, symmetry, translation invariance) and
the series-level facade.
"""
import math

import numpy as np
import pandas as pd
import pytest

from correlation_engine import (
    REASON_INSUFFICIENT_DATA,
    REASON_LENGTH_MISMATCH,
    REASON_MISSING_INPUT,
    REASON_NON_FINITE,
    REASON_OK,
    REASON_ZERO_VARIANCE,
    CorrelationEngine,
    CorrelationResult,
    analyze_correlation,
    calculate_pearson_correlation,
)


# ─── Concrete scenarios ───────────────────────────────────────


class TestConcreteScenarios:

    def test_perfect_positive(self):
        r = calculate_pearson_correlation([1, 2, 3, 4, 5], [2, 4, 6, 8, 10])
        assert r == pytest.approx(1.0)

    def test_perfect_negative(self):
        r = calculate_pearson_correlation([1, 2, 3, 4, 5], [10, 8, 6, 4, 2])
        assert r == pytest.approx(-1.0)

    def test_zero_variance_in_y(self):
        assert calculate_pearson_correlation([1, 2, 3], [5, 5, 5]) is None

    def test_length_mismatch(self):
        assert calculate_pearson_correlation([1, 2], [1, 2, 3]) is None

    def test_single_point(self):
        assert calculate_pearson_correlation([7], [9]) is None

    def test_two_points_are_enough(self):
        assert calculate_pearson_correlation([1, 2], [3, 1]) == pytest.approx(-1.0)

    def test_matches_numpy(self):
        x = [3.1, 4.7, 1.2, 8.8, 5.0, 6.4]
        y = [2.0, 3.9, 1.5, 7.1, 4.2, 4.0]
        expected = np.corrcoef(x, y)[0, 1]
        assert calculate_pearson_correlation(x, y) == pytest.approx(expected)


# ─── Undefined inputs ─────────────────────────────────────────


class TestUndefinedInputs:

    @pytest.mark.parametrize("x, y", [
        (None, [1, 2]),
        ([1, 2], None),
        ([], []),
        ([], [1]),
    ])
    def test_missing_or_empty(self, x, y):
        assert calculate_pearson_correlation(x, y) is None
        assert analyze_correlation(x, y).reason == REASON_MISSING_INPUT

    def test_zero_variance_in_both(self):
        assert calculate_pearson_correlation([4, 4, 4], [4, 4, 4]) is None

    def test_constant_floats_are_zero_variance(self):
        # Mean of [0.1]*3 is not exactly 0.1 in floating point
        result = analyze_correlation([0.1, 0.1, 0.1], [1, 2, 3])
        assert result.r is None
        assert result.reason == REASON_ZERO_VARIANCE

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), -float("inf"), None, "3"])
    def test_non_finite_or_non_numeric(self, bad):
        result = analyze_correlation([1, 2, bad], [1, 2, 3])
        assert result.r is None
        assert result.reason == REASON_NON_FINITE

    def test_does_not_raise_on_non_iterable(self):
        assert calculate_pearson_correlation(5, 6) is None


# ─── Reason codes ─────────────────────────────────────────────


class TestAnalyzeCorrelation:

    def test_ok_result(self):
        result = analyze_correlation([1, 2, 3, 4], [2, 4, 5, 9])
        assert isinstance(result, CorrelationResult)
        assert result.reason == REASON_OK
        assert result.is_defined
        assert result.n == 4

    def test_length_mismatch_reports_zero_pairs(self):
        result = analyze_correlation([1, 2], [1, 2, 3])
        assert result.reason == REASON_LENGTH_MISMATCH
        assert result.n == 0
        assert not result.is_defined

    def test_insufficient_data_counts_pairs(self):
        result = analyze_correlation([7], [9])
        assert result.reason == REASON_INSUFFICIENT_DATA
        assert result.n == 1

    def test_r_agrees_with_core(self):
        np.random.seed(3)
        for _ in range(20):
            x = np.random.randn(8).tolist()
            y = np.random.randn(8).tolist()
            assert analyze_correlation(x, y).r == calculate_pearson_correlation(x, y)

    def test_to_dict_shape(self):
        out = analyze_correlation([1, 2, 3], [1, 3, 2]).to_dict()
        assert set(out) == {"correlation", "n", "reason", "p_value", "defined"}
        assert out["defined"] is True


# ─── p-value ──────────────────────────────────────────────────


class TestPValue:

    def test_no_p_value_for_two_points(self):
        result = analyze_correlation([1, 2], [1, 2])
        assert result.r == pytest.approx(1.0)
        assert result.p_value is None

    def test_perfect_correlation_is_zero(self):
        assert analyze_correlation([1, 2, 3, 4], [2, 4, 6, 8]).p_value == 0.0

    def test_matches_scipy_pearsonr(self):
        from scipy import stats

        x = [1.0, 2.5, 3.1, 4.8, 5.2, 6.9, 7.3]
        y = [2.2, 2.9, 3.5, 3.1, 5.8, 6.0, 6.1]
        expected_r, expected_p = stats.pearsonr(x, y)
        result = analyze_correlation(x, y)
        assert result.r == pytest.approx(expected_r)
        assert result.p_value == pytest.approx(expected_p, rel=1e-6)

    def test_undefined_has_no_p_value(self):
        assert analyze_correlation([1, 2, 3], [5, 5, 5]).p_value is None


# ─── Statistical properties ───────────────────────────────────


class TestProperties:

    def test_bounded(self):
        np.random.seed(42)
        for _ in range(100):
            n = np.random.randint(2, 40)
            x = np.random.randn(n) * 100
            y = np.random.randn(n) * 0.01
            r = calculate_pearson_correlation(x, y)
            assert r is not None
            assert -1.0 <= r <= 1.0

    def test_symmetric(self):
        np.random.seed(7)
        for _ in range(50):
            x = np.random.randn(12).tolist()
            y = np.random.randn(12).tolist()
            assert calculate_pearson_correlation(x, y) == pytest.approx(
                calculate_pearson_correlation(y, x)
            )

    def test_self_correlation_is_one(self):
        x = [3, 1, 4, 1, 5, 9, 2, 6]
        assert calculate_pearson_correlation(x, x) == pytest.approx(1.0)
        assert calculate_pearson_correlation(x, [-v for v in x]) == pytest.approx(-1.0)

    @pytest.mark.parametrize("shift", [-1000.0, -3.5, 0.25, 42.0, 1e6])
    def test_translation_invariant(self, shift):
        np.random.seed(11)
        x = np.random.randn(15).tolist()
        y = np.random.randn(15).tolist()
        base = calculate_pearson_correlation(x, y)
        shifted = calculate_pearson_correlation([v + shift for v in x], y)
        assert shifted == pytest.approx(base, abs=1e-6)

    def test_scale_invariant_for_positive_factor(self):
        x = [1, 4, 2, 8, 5]
        y = [2, 3, 1, 9, 4]
        assert calculate_pearson_correlation([v * 10 for v in x], y) == pytest.approx(
            calculate_pearson_correlation(x, y)
        )

    def test_accepts_numpy_and_pandas(self):
        x = [1, 2, 3, 4]
        y = [1, 3, 2, 4]
        expected = calculate_pearson_correlation(x, y)
        assert calculate_pearson_correlation(np.array(x), np.array(y)) == pytest.approx(expected)
        assert calculate_pearson_correlation(pd.Series(x), pd.Series(y)) == pytest.approx(expected)

    def test_booleans_count_as_zero_one(self):
        r = calculate_pearson_correlation([True, False, True, False], [1, 0, 1, 0])
        assert r == pytest.approx(1.0)

    def test_numpy_and_pandas_booleans(self):
        flags = [True, False, True, False]
        by_array = analyze_correlation(np.array(flags, dtype=bool), [1, 0, 1, 0])
        by_series = analyze_correlation(pd.Series(flags, dtype=bool), [1, 0, 1, 0])
        assert by_array.reason == REASON_OK
        assert by_array.r == pytest.approx(1.0)
        assert by_series.r == pytest.approx(1.0)

    def test_huge_values_self_correlate(self):
        x = [0.0, 1e100, 2e100]
        assert calculate_pearson_correlation(x, x) == pytest.approx(1.0)
        big = [0.0, 1e300, 3e300, 2e300]
        assert calculate_pearson_correlation(big, [1, 2, 4, 3]) == pytest.approx(1.0)

    def test_tiny_values_are_not_zero_variance(self):
        result = analyze_correlation([0.0, 1e-170, 2e-170], [1, 2, 3])
        assert result.reason == REASON_OK
        assert result.r == pytest.approx(1.0)

    def test_rounding_past_one_is_clamped(self, monkeypatch):
        real_sqrt = math.sqrt
        # Shrink the denominator so the raw quotient lands just above 1
        monkeypatch.setattr(math, "sqrt", lambda v: real_sqrt(v) * (1 - 1e-12))
        assert calculate_pearson_correlation([1, 2, 3], [1, 2, 3]) == 1.0
        assert calculate_pearson_correlation([1, 2, 3], [3, 2, 1]) == -1.0

    def test_result_is_never_nan(self):
        np.random.seed(5)
        for _ in range(50):
            x = np.random.choice([0.0, 1.0], size=4).tolist()
            y = np.random.randn(4).tolist()
            r = calculate_pearson_correlation(x, y)
            assert r is None or not math.isnan(r)


# ─── Engine facade ────────────────────────────────────────────


class TestCorrelationEngine:

    def test_correlate_delegates(self):
        engine = CorrelationEngine()
        assert engine.correlate([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
        assert engine.analyze([1, 2, 3], [5, 5, 5]).reason == REASON_ZERO_VARIANCE

    def test_correlate_series_drops_unpaired_days(self):
        rows = [
            {"date": "2025-03-01", "primary_value": 1.0, "comparison_value": 2.0},
            {"date": "2025-03-02", "primary_value": None, "comparison_value": 100.0},
            {"date": "2025-03-03", "primary_value": 2.0, "comparison_value": 4.0},
            {"date": "2025-03-04", "primary_value": 50.0, "comparison_value": None},
            {"date": "2025-03-05", "primary_value": 3.0, "comparison_value": 6.0},
        ]
        result = CorrelationEngine().correlate_series(rows)
        assert result.n == 3
        assert result.r == pytest.approx(1.0)

    def test_correlate_series_logged_zero_is_a_value(self):
        rows = [
            {"date": "2025-03-01", "primary_value": 0.0, "comparison_value": 0.0},
            {"date": "2025-03-02", "primary_value": 1.0, "comparison_value": 1.0},
        ]
        assert CorrelationEngine().correlate_series(rows).r == pytest.approx(1.0)

    def test_correlate_series_empty(self):
        result = CorrelationEngine().correlate_series([])
        assert result.r is None
        assert result.reason == REASON_MISSING_INPUT

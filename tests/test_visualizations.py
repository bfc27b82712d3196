"""
Tests for dual-axis synchronisation and the relationship chart.
"""
import plotly.graph_objects as go
import pytest

from constants import BOOLEAN, NUMERIC, SCALE_1_10
from visualizations import RelationshipChartBuilder, axis_config, normalized_comparison


def _rows(primary, comparison):
    return [
        {"date": f"2025-03-{i + 1:02d}", "primary_value": p, "comparison_value": c}
        for i, (p, c) in enumerate(zip(primary, comparison))
    ]


class TestAxisConfig:

    def test_single_scale_metric(self):
        cfg = axis_config(_rows([3, 7], [None, None]), SCALE_1_10)
        assert cfg["left_domain"] == [1, 10]
        assert cfg["right_domain"] == [0, 10]

    def test_single_numeric_metric_padded(self):
        cfg = axis_config(_rows([100, 200], [None, None]), NUMERIC)
        assert cfg["left_domain"] == pytest.approx([0, 220])

    def test_numeric_vs_scale_shares_range(self):
        cfg = axis_config(_rows([0, 50], [2, 9]), NUMERIC, SCALE_1_10)
        assert cfg["left_domain"] == pytest.approx([0, 55])
        assert cfg["right_domain"] == pytest.approx([0, 55])
        assert len(cfg["right_ticks"]) == 10
        assert cfg["right_ticks"][0] == pytest.approx(5.5)
        assert cfg["right_ticks"][-1] == pytest.approx(55)
        assert cfg["right_tick_labels"] == [str(i) for i in range(1, 11)]

    def test_scale_vs_numeric(self):
        cfg = axis_config(_rows([5, 6], [1000, 3000]), SCALE_1_10, NUMERIC)
        assert cfg["left_domain"] == [1, 10]
        assert cfg["right_domain"] == pytest.approx([0, 3300])

    def test_scale_vs_boolean_normalizes(self):
        cfg = axis_config(_rows([5, 6], [1, 0]), SCALE_1_10, BOOLEAN)
        assert cfg["normalize_comparison"] is True
        assert cfg["right_ticks"] == [2.5, 7.5]
        assert cfg["right_tick_labels"] == ["No", "Yes"]

    def test_small_values_get_minimum_range(self):
        cfg = axis_config(_rows([0, 0.2], [0, 0.1]), NUMERIC, NUMERIC)
        assert cfg["left_domain"] == [0, 1]
        assert cfg["right_domain"] == [0, 1]

    def test_empty_column_defaults_to_ten(self):
        cfg = axis_config(_rows([None], [None]), NUMERIC, NUMERIC)
        assert cfg["left_domain"] == pytest.approx([0, 11])


class TestNormalizedComparison:

    @pytest.mark.parametrize("value, expected", [(1, 7.5), (0, 2.5), (None, None), (0.5, None)])
    def test_positions(self, value, expected):
        assert normalized_comparison(value) == expected


class TestChartBuilder:

    def test_dual_axis_figure(self):
        rows = _rows([5, None, 7], [1, 0, None])
        fig = RelationshipChartBuilder().build(rows, "Mood", "Run", SCALE_1_10, BOOLEAN)
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 2
        assert list(fig.data[0].y) == [5, None, 7]
        assert list(fig.data[1].y) == [7.5, 2.5, None]
        assert list(fig.layout.yaxis2.tickvals) == [2.5, 7.5]

    def test_single_metric_figure(self):
        fig = RelationshipChartBuilder().build(_rows([1, 2], [None, None]), "Sleep")
        assert len(fig.data) == 1
        assert fig.layout.title.text == "Sleep"

    def test_export_html(self, tmp_path):
        builder = RelationshipChartBuilder()
        fig = builder.build(_rows([1, 2], [3, 4]), "A", "B", NUMERIC, NUMERIC)
        path = builder.export_html(fig, str(tmp_path / "chart.html"))
        assert (tmp_path / "chart.html").exists()
        assert path.endswith("chart.html")

"""
Unit tests for column ranking.
"""
import pytest
from chartadvisor.core.schemas import DateAnalysis, NumberAnalysis, StringAnalysis
from chartadvisor.services.chart_types import CHART_TYPES
from chartadvisor.services.ranking import get_ranked_column_options, score_column


@pytest.fixture
def analysis():
    """Columns for ranking."""
    return [
        NumberAnalysis(column_name="revenue", cardinality=100),
        StringAnalysis(column_name="customer_id", semantic="identifier", cardinality=500),
        DateAnalysis(column_name="order_date", cardinality=60),
        StringAnalysis(column_name="region", cardinality=4),
        NumberAnalysis(column_name="profit", cardinality=80),
    ]


@pytest.mark.unit
def test_bar_x_ranking(analysis):
    """Test that categories and dates rank above measures and ids on bar X."""
    options = get_ranked_column_options(
        ["revenue", "customer_id", "order_date", "region"], "x", "barY", analysis
    )

    assert [option.value for option in options] == ["region", "order_date", "revenue", "customer_id"]
    assert options[0].score == 150
    assert options[1].score == 130
    assert options[2].warning is not None
    assert options[3].score == -100


@pytest.mark.unit
def test_bar_y_prefers_measures(analysis):
    """Test that measures rank first on bar Y."""
    options = get_ranked_column_options(["region", "revenue"], "y", "barY", analysis)
    assert options[0].value == "revenue"
    assert options[0].label == "revenue"


@pytest.mark.unit
def test_same_as_other_axis_penalty(analysis):
    """Test that the column already on the other axis sinks to the bottom."""
    options = get_ranked_column_options(["revenue", "profit"], "y", "dot", analysis, other_axis_column="revenue")

    assert options[0].value == "profit"
    assert options[1].value == "revenue"
    assert options[1].warning.message == "Same column on both axes"
    assert options[1].score == 50 + 100 - 200 - 50


@pytest.mark.unit
def test_line_x_prefers_dates(analysis):
    """Test line X ordering: date, then number, then category."""
    options = get_ranked_column_options(["region", "revenue", "order_date"], "x", "line", analysis)
    assert [option.value for option in options] == ["order_date", "revenue", "region"]


@pytest.mark.unit
def test_missing_columns_score_zero(analysis):
    """Test that columns absent from the analysis score 0 and keep input order on ties."""
    options = get_ranked_column_options(["ghost", "phantom"], "x", "hexbin", analysis)
    assert [option.value for option in options] == ["ghost", "phantom"]
    assert all(option.score == 0 for option in options)


@pytest.mark.unit
def test_identifier_penalty_applies_everywhere():
    """Test the identifier penalty on charts without specific axis scoring."""
    user_id = NumberAnalysis(column_name="user_id", cardinality=1000)
    amount = NumberAnalysis(column_name="amount", cardinality=1000)

    assert score_column("x", "hexbin", user_id, False, False) == -50
    assert score_column("x", "hexbin", amount, False, False) == 50
    assert score_column("y", "barY", amount, True, False) == 100


@pytest.mark.unit
@pytest.mark.parametrize("chart_type", CHART_TYPES)
@pytest.mark.parametrize("axis", ["x", "y"])
@pytest.mark.parametrize("same_as_other_axis", [False, True])
def test_warning_never_raises_a_score(chart_type, axis, same_as_other_axis, analysis):
    """Test a warned column always scores below the same column without a warning."""
    for column in analysis:
        warned = score_column(axis, chart_type, column, True, same_as_other_axis)
        clean = score_column(axis, chart_type, column, False, same_as_other_axis)
        assert warned < clean


@pytest.mark.unit
def test_equal_scores_keep_input_order(analysis):
    """Test columns with the same score stay in the order they were given."""
    options = get_ranked_column_options(["profit", "revenue"], "y", "barY", analysis)
    assert options[0].score == options[1].score
    assert [option.value for option in options] == ["profit", "revenue"]

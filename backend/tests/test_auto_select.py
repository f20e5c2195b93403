"""
Unit tests for encoding auto-selection on chart type switches.
"""
import pytest
import pandas as pd
from chartadvisor.core.schemas import Field, Insight, InsightMetric, NumberAnalysis, StringAnalysis
from chartadvisor.services.auto_select import auto_select_encoding


@pytest.fixture
def sales_df():
    """Regional revenue."""
    return pd.DataFrame({
        "region": ["North", "South", "East", "West"],
        "revenue": [120.0, 80.5, 99.9, 140.0],
    })


@pytest.fixture
def orders_columns():
    """Column descriptors of an orders table."""
    return [
        {"name": "order_id", "type": "integer"},
        {"name": "region", "type": "string"},
        {"name": "order_date", "type": "date"},
        {"name": "raw_value", "type": "number"},
        {"name": "total_revenue", "type": "number"},
    ]


@pytest.mark.unit
def test_bar_from_dataframe(sales_df):
    """Test that a bar chart gets the category on X and the measure on Y."""
    encoding = auto_select_encoding("barY", sales_df)
    assert encoding == {"x": "region", "y": "revenue"}


@pytest.mark.unit
def test_metric_name_preferred_for_y(orders_columns):
    """Test that a column named after an insight metric wins Y over earlier numbers."""
    insight = Insight(metrics=[
        InsightMetric(id="m1", name="total_revenue", aggregation="sum", column_name="raw_value")
    ])
    encoding = auto_select_encoding("barY", orders_columns, insight=insight)
    assert encoding["y"] == "total_revenue"


@pytest.mark.unit
def test_identifier_names_avoided_for_y(orders_columns):
    """Test that id-like numbers are skipped as measures."""
    encoding = auto_select_encoding("barY", orders_columns)
    assert encoding["x"] == "region"
    assert encoding["y"] == "raw_value"


@pytest.mark.unit
def test_identifier_fields_avoided_for_y():
    """Test that fields flagged as identifiers are skipped as measures."""
    columns = [{"name": "ticket_number", "type": "number"}, {"name": "amount", "type": "number"}]
    fields = {"f1": Field(id="f1", column_name="ticket_number", is_identifier=True)}
    encoding = auto_select_encoding("barY", columns, fields=fields)
    assert encoding["y"] == "amount"


@pytest.mark.unit
def test_line_prefers_dates(orders_columns):
    """Test that line and area charts put a date on X."""
    assert auto_select_encoding("line", orders_columns)["x"] == "order_date"
    assert auto_select_encoding("areaY", orders_columns)["x"] == "order_date"


@pytest.mark.unit
def test_horizontal_bar_mirrors(sales_df):
    """Test that barX puts the category on Y and the measure on X."""
    encoding = auto_select_encoding("barX", sales_df)
    assert encoding == {"x": "revenue", "y": "region"}


@pytest.mark.unit
def test_keeps_fitting_choices(orders_columns):
    """Test that an existing X and a numerical Y survive the switch."""
    current = {"x": "order_date", "y": "total_revenue"}
    encoding = auto_select_encoding("barY", orders_columns, current_encoding=current)
    assert encoding == current


@pytest.mark.unit
def test_replaces_non_numerical_y(orders_columns):
    """Test that a non-numerical Y is replaced."""
    encoding = auto_select_encoding("line", orders_columns, current_encoding={"x": "order_date", "y": "region"})
    assert encoding["x"] == "order_date"
    assert encoding["y"] == "raw_value"


@pytest.mark.unit
def test_does_not_mutate_current_encoding(sales_df):
    """Test the input encoding is left untouched and extra keys carry over."""
    current = {"x": "missing", "y": "region", "color": "region"}
    encoding = auto_select_encoding("barY", sales_df, current_encoding=current)

    assert current == {"x": "missing", "y": "region", "color": "region"}
    assert encoding == {"x": "region", "y": "revenue", "color": "region"}


@pytest.mark.unit
def test_scatter_picks_two_numbers(orders_columns):
    """Test scatter X and Y are distinct numbers, avoiding ids on both axes."""
    encoding = auto_select_encoding("dot", orders_columns)
    assert encoding["x"] == "raw_value"
    assert encoding["y"] == "total_revenue"


@pytest.mark.unit
def test_scatter_prefers_metric_named_column():
    """Test a column named after an insight metric is placed on a scatter axis."""
    columns = [
        {"name": "raw_value", "type": "number"},
        {"name": "qty", "type": "number"},
        {"name": "total_revenue", "type": "number"},
    ]
    insight = Insight(metrics=[InsightMetric(id="m1", name="total_revenue", aggregation="sum")])

    encoding = auto_select_encoding("dot", columns, insight=insight)

    assert encoding == {"x": "total_revenue", "y": "raw_value"}


@pytest.mark.unit
def test_scatter_fills_missing_axis_around_kept_one():
    """Test a replaced scatter axis avoids the column kept on the other axis."""
    columns = [{"name": "total_revenue", "type": "number"}, {"name": "qty", "type": "number"}]
    insight = Insight(metrics=[InsightMetric(id="m1", name="total_revenue")])

    encoding = auto_select_encoding("dot", columns, current_encoding={"x": "region", "y": "total_revenue"}, insight=insight)

    assert encoding == {"x": "qty", "y": "total_revenue"}


@pytest.mark.unit
def test_scatter_keeps_numerical_choices(orders_columns):
    """Test scatter keeps numerical axes already chosen."""
    current = {"x": "total_revenue", "y": "raw_value"}
    assert auto_select_encoding("dot", orders_columns, current_encoding=current) == current


@pytest.mark.unit
def test_scatter_with_single_number():
    """Test scatter with only one numerical column uses it on both axes."""
    encoding = auto_select_encoding("dot", [{"name": "region", "type": "string"}, {"name": "v", "type": "number"}])
    assert encoding == {"x": "v", "y": "v"}


@pytest.mark.unit
def test_accepts_analyses():
    """Test that column analyses can be passed directly."""
    analysis = [StringAnalysis(column_name="segment", cardinality=3), NumberAnalysis(column_name="spend")]
    assert auto_select_encoding("barY", analysis) == {"x": "segment", "y": "spend"}


@pytest.mark.unit
def test_density_types_pass_through(sales_df):
    """Test that density charts keep the current encoding."""
    assert auto_select_encoding("hexbin", sales_df, current_encoding={"x": "a"}) == {"x": "a"}


@pytest.mark.unit
def test_empty_columns():
    """Test that no columns gives empty axes."""
    assert auto_select_encoding("barY", []) == {"x": None, "y": None}

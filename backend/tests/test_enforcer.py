"""
Unit tests for the encoding enforcer.
"""
import pytest
from chartadvisor.core.schemas import (
    BooleanAnalysis,
    CompiledInsight,
    DateAnalysis,
    Field,
    InsightMetric,
    NumberAnalysis,
    StringAnalysis,
)
from chartadvisor.services.chart_types import CHART_TYPES, DENSITY_CHART_TYPES
from chartadvisor.services.enforcer import (
    BAR_X_TYPE,
    BAR_Y_FIELD,
    BARX_X_FIELD,
    COLUMN_NOT_IN_ANALYSIS,
    FIELD_NOT_FOUND,
    IDENTIFIER_AS_CATEGORY,
    IDENTIFIER_FALLBACK,
    IDENTIFIER_ON_AXIS,
    INVALID_ENCODING_FORMAT,
    LINE_X_TYPE,
    NO_COLUMN_SELECTED,
    SCATTER_TYPE,
    get_axis_semantic_label,
    get_column_suitability,
    get_swapped_chart_type,
    get_valid_columns_for_channel,
    is_column_valid_for_channel,
    is_metric_allowed_on_channel,
    is_swap_allowed,
    validate_encoding,
)


@pytest.fixture
def analysis():
    """Analysed columns of a small orders table."""
    return [
        StringAnalysis(column_name="region", cardinality=4),
        DateAnalysis(column_name="order_date", cardinality=200),
        NumberAnalysis(column_name="revenue", cardinality=150, min=0, max=900),
        StringAnalysis(column_name="customer_id", semantic="identifier", cardinality=500),
        BooleanAnalysis(column_name="returned", cardinality=2),
        StringAnalysis(column_name="notes", semantic="text", cardinality=300),
    ]


@pytest.fixture
def compiled_insight():
    """Compiled insight referencing the orders columns."""
    return CompiledInsight(
        dimensions=[
            Field(id="f_region", column_name="region"),
            Field(id="f_date", column_name="order_date"),
            Field(id="f_revenue", column_name="revenue"),
            Field(id="f_customer", column_name="customer_id"),
            Field(id="f_returned", column_name="returned"),
            Field(id="f_notes", column_name="notes"),
            Field(id="f_gone", column_name="deleted_column"),
        ],
        metrics=[InsightMetric(id="m1", name="total_revenue", column_name="revenue")],
    )


@pytest.mark.unit
def test_metric_rejected_on_bar_x():
    """Test that a metric on a bar chart's X axis asks for a dimension."""
    result = is_column_valid_for_channel(
        "metric:m1", "x", "barY", [], CompiledInsight(metrics=[InsightMetric(id="m1")])
    )
    assert result.suitable is False
    assert "dimension" in result.reason


@pytest.mark.unit
def test_swap_rules():
    """Test which chart types allow swapping axes."""
    assert is_swap_allowed("line") is False
    assert is_swap_allowed("areaY") is False
    assert is_swap_allowed("barY") is True
    assert is_swap_allowed("dot") is True
    assert get_swapped_chart_type("barY") == "barX"
    assert get_swapped_chart_type("barX") == "barY"
    assert get_swapped_chart_type("dot") == "dot"


@pytest.mark.unit
def test_bar_x_accepts_dimensions(analysis, compiled_insight):
    """Test that categories, dates and booleans are valid bar X values."""
    for value in ("field:f_region", "field:f_date", "field:f_returned"):
        assert is_column_valid_for_channel(value, "x", "barY", analysis, compiled_insight).suitable


@pytest.mark.unit
def test_bar_x_rejects_numbers_and_text(analysis, compiled_insight):
    """Test that measures and free text are not bar categories."""
    assert is_column_valid_for_channel("field:f_revenue", "x", "barY", analysis, compiled_insight).reason == BAR_X_TYPE
    assert is_column_valid_for_channel("field:f_notes", "x", "barY", analysis, compiled_insight).reason == BAR_X_TYPE


@pytest.mark.unit
def test_identifiers_blocked_on_axes(analysis, compiled_insight):
    """Test identifier columns are rejected with an axis-specific reason."""
    bar = is_column_valid_for_channel("field:f_customer", "x", "barY", analysis, compiled_insight)
    assert bar.reason == IDENTIFIER_AS_CATEGORY
    line = is_column_valid_for_channel("field:f_customer", "x", "line", analysis, compiled_insight)
    assert line.reason == IDENTIFIER_ON_AXIS


@pytest.mark.unit
def test_bar_y_requires_metric(analysis, compiled_insight):
    """Test that bar Y rejects fields and accepts metrics."""
    field_result = is_column_valid_for_channel("field:f_revenue", "y", "barY", analysis, compiled_insight)
    assert field_result.reason == BAR_Y_FIELD
    assert is_column_valid_for_channel("metric:m1", "y", "barY", analysis, compiled_insight).suitable


@pytest.mark.unit
def test_horizontal_bar_mirrors_vertical(analysis, compiled_insight):
    """Test barX puts the metric on X and the dimension on Y."""
    assert is_column_valid_for_channel("metric:m1", "x", "barX", analysis, compiled_insight).suitable
    assert is_column_valid_for_channel("field:f_region", "x", "barX", analysis, compiled_insight).reason == BARX_X_FIELD
    assert is_column_valid_for_channel("field:f_region", "y", "barX", analysis, compiled_insight).suitable
    assert "dimension" in is_column_valid_for_channel("metric:m1", "y", "barX", analysis, compiled_insight).reason


@pytest.mark.unit
def test_line_x_needs_continuous(analysis, compiled_insight):
    """Test line and area X accept dates and numbers only."""
    assert is_column_valid_for_channel("field:f_date", "x", "line", analysis, compiled_insight).suitable
    assert is_column_valid_for_channel("field:f_revenue", "x", "areaY", analysis, compiled_insight).suitable
    assert is_column_valid_for_channel("field:f_region", "x", "line", analysis, compiled_insight).reason == LINE_X_TYPE
    assert "dimension" in is_column_valid_for_channel("metric:m1", "x", "line", analysis, compiled_insight).reason


@pytest.mark.unit
def test_scatter_accepts_metrics_and_continuous_fields(analysis, compiled_insight):
    """Test scatter axes."""
    assert is_column_valid_for_channel("metric:m1", "x", "dot", analysis, compiled_insight).suitable
    assert is_column_valid_for_channel("field:f_revenue", "y", "dot", analysis, compiled_insight).suitable
    assert is_column_valid_for_channel("field:f_region", "y", "dot", analysis, compiled_insight).reason == SCATTER_TYPE


@pytest.mark.unit
def test_value_errors(analysis, compiled_insight):
    """Test empty, malformed and unresolvable values."""
    assert is_column_valid_for_channel("", "x", "barY", analysis, compiled_insight).reason == NO_COLUMN_SELECTED
    assert is_column_valid_for_channel(None, "x", "barY", analysis, compiled_insight).reason == NO_COLUMN_SELECTED
    assert is_column_valid_for_channel("region", "x", "barY", analysis, compiled_insight).reason == INVALID_ENCODING_FORMAT
    assert is_column_valid_for_channel("sum(revenue)", "y", "barY", analysis, compiled_insight).reason == INVALID_ENCODING_FORMAT
    assert is_column_valid_for_channel("field:nope", "x", "barY", analysis, compiled_insight).reason == FIELD_NOT_FOUND
    assert is_column_valid_for_channel("metric:nope", "y", "barY", analysis, compiled_insight).reason == FIELD_NOT_FOUND
    assert is_column_valid_for_channel("field:f_gone", "x", "barY", analysis, compiled_insight).reason == COLUMN_NOT_IN_ANALYSIS


@pytest.mark.unit
def test_color_size_and_density_unconstrained(analysis, compiled_insight):
    """Test channels and chart types without hard rules."""
    assert is_column_valid_for_channel("field:f_customer", "color", "barY", analysis, compiled_insight).suitable
    assert is_column_valid_for_channel("anything", "size", "dot", analysis, compiled_insight).suitable
    assert is_column_valid_for_channel("field:f_region", "x", "hexbin", analysis, compiled_insight).suitable
    assert is_column_valid_for_channel("region", "x", "hexbin", analysis, compiled_insight).reason == INVALID_ENCODING_FORMAT


@pytest.mark.unit
def test_metric_allowed_on_channel():
    """Test the metric-per-channel table."""
    assert is_metric_allowed_on_channel("y", "barY")
    assert not is_metric_allowed_on_channel("x", "barY")
    assert is_metric_allowed_on_channel("x", "barX")
    assert is_metric_allowed_on_channel("x", "dot")
    assert not is_metric_allowed_on_channel("x", "hexbin")


@pytest.mark.unit
def test_column_suitability_for_analysed_columns(analysis):
    """Test suitability of analysed columns without encodings."""
    region, _, revenue, customer = analysis[:4]
    assert get_column_suitability(region, "x", "barY").suitable
    assert not get_column_suitability(revenue, "y", "barY").suitable
    assert not get_column_suitability(customer, "x", "hexbin").suitable
    assert get_column_suitability(customer, "color", "barY").suitable


@pytest.mark.unit
def test_valid_columns_for_channel(analysis, compiled_insight):
    """Test listing valid columns per channel."""
    assert get_valid_columns_for_channel("x", "barY", analysis) == ["region", "order_date", "returned"]
    assert get_valid_columns_for_channel("y", "barY", analysis, compiled_insight) == ["total_revenue"]
    assert get_valid_columns_for_channel("x", "dot", analysis, compiled_insight) == ["order_date", "revenue", "total_revenue"]
    assert len(get_valid_columns_for_channel("color", "barY", analysis)) == len(analysis)


@pytest.mark.unit
def test_validate_encoding(analysis, compiled_insight):
    """Test validation of a whole encoding."""
    assert validate_encoding({"x": "field:f_region", "y": "metric:m1"}, "barY", analysis, compiled_insight) == {}

    errors = validate_encoding({"x": "field:f_revenue", "y": "field:f_region"}, "barY", analysis, compiled_insight)
    assert errors == {"x": BAR_X_TYPE, "y": BAR_Y_FIELD}

    assert validate_encoding({"x": "field:f_region", "y": None}, "barY", analysis, compiled_insight) == {}


@pytest.mark.unit
def test_validate_encoding_skips_empty_analysis(compiled_insight):
    """Test that nothing is validated before the analysis is available."""
    assert validate_encoding({"x": "garbage", "y": "garbage"}, "barY", [], compiled_insight) == {}


@pytest.mark.unit
def test_axis_semantic_labels():
    """Test axis labels per chart type."""
    assert get_axis_semantic_label("x", "barY") == "Category"
    assert get_axis_semantic_label("y", "barY") == "Value"
    assert get_axis_semantic_label("x", "barX") == "Value"
    assert get_axis_semantic_label("x", "line") == "Continuous"
    assert get_axis_semantic_label("y", "areaY") == "Measure"
    assert get_axis_semantic_label("x", "hexbin") == ""


@pytest.mark.unit
@pytest.mark.parametrize("chart_type", DENSITY_CHART_TYPES)
def test_density_axes_resolve_the_value(chart_type, analysis, compiled_insight):
    """Test density charts still reject unknown ids, missing columns and identifiers."""
    def check(value, axis="x"):
        return is_column_valid_for_channel(value, axis, chart_type, analysis, compiled_insight)

    assert check("field:ghost").reason == FIELD_NOT_FOUND
    assert check("metric:ghost", "y").reason == FIELD_NOT_FOUND
    assert check("field:f_gone").reason == COLUMN_NOT_IN_ANALYSIS
    assert check("field:f_customer").reason == IDENTIFIER_FALLBACK
    assert check("field:f_revenue", "y").suitable
    assert check("metric:m1").suitable


@pytest.mark.unit
@pytest.mark.parametrize("chart_type", CHART_TYPES)
@pytest.mark.parametrize("axis", ["x", "y"])
def test_value_check_agrees_with_valid_columns(chart_type, axis, analysis, compiled_insight):
    """Test a field is accepted exactly when its column is listed as valid."""
    valid = get_valid_columns_for_channel(axis, chart_type, analysis, compiled_insight)
    analysed = {column.column_name for column in analysis}

    for field in compiled_insight.dimensions:
        if field.column_name not in analysed:
            continue
        result = is_column_valid_for_channel(f"field:{field.id}", axis, chart_type, analysis, compiled_insight)
        assert result.suitable == (field.column_name in valid), (field.id, result.reason)


@pytest.mark.unit
@pytest.mark.parametrize("encoding", [
    {"x": "field:f_region", "y": "metric:m1"},
    {"x": "field:f_revenue", "y": "field:f_customer"},
    {"x": "bogus", "y": "metric:nope"},
])
@pytest.mark.parametrize("chart_type", CHART_TYPES)
def test_validate_encoding_is_repeatable(encoding, chart_type, analysis, compiled_insight):
    """Test validating the same encoding twice gives the same verdict."""
    first = validate_encoding(dict(encoding), chart_type, analysis, compiled_insight)
    second = validate_encoding(dict(encoding), chart_type, analysis, compiled_insight)
    assert first == second

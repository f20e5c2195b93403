"""
Axis warnings: soft heuristics for legal but poor channel choices.

Warnings never block an encoding; they explain why a column is likely to
produce a weak chart.
"""
from typing import Dict, Optional, Sequence

from chartadvisor.core.classification import (
    COLOR_MAX,
    DIMENSION_SEMANTICS,
    HIGH_CARDINALITY,
    IDENTIFIER_SEMANTICS,
    REFERENCE_SEMANTICS,
    find_column,
    looks_like_identifier,
)
from chartadvisor.core.schemas import AnalysisBase, AxisWarning, CompiledInsight
from chartadvisor.services.encoding import parse_encoding, resolve_for_analysis

CHART_NAMES = {"line": "Line", "areaY": "Area", "dot": "Scatter"}


class ColumnFlags:
    """Semantic flags of one column as the warning and scoring rules see it."""

    def __init__(self, column: AnalysisBase):
        self.is_identifier = column.semantic in IDENTIFIER_SEMANTICS or looks_like_identifier(column.column_name)
        self.is_reference = column.semantic in REFERENCE_SEMANTICS
        self.is_numerical = column.semantic == "numerical"
        self.is_temporal = column.semantic == "temporal"
        self.is_categorical = column.semantic == "categorical"
        self.is_boolean = column.semantic == "boolean"


def _color_warning(column: AnalysisBase, flags: ColumnFlags, others: Dict[str, Optional[str]]) -> Optional[AxisWarning]:
    if flags.is_identifier or flags.is_reference:
        return AxisWarning(
            message="Not suitable for color",
            reason="Unique IDs or references create too many distinct colors to be meaningful.",
        )
    if column.column_name in (others.get("x"), others.get("y")):
        return AxisWarning(
            message="Already used on axis",
            reason="This column is already encoded on an axis. Color works best with a different dimension to add information.",
        )
    if (flags.is_categorical or flags.is_boolean) and column.cardinality > COLOR_MAX:
        return AxisWarning(
            message="Too many categories",
            reason=f"More than {COLOR_MAX} distinct colors are hard to distinguish. Consider filtering or grouping.",
        )
    if flags.is_numerical and not flags.is_temporal and column.cardinality > HIGH_CARDINALITY:
        return AxisWarning(
            message="Consider a categorical column",
            reason="Numerical measures work better on axes. Color is most effective with categories (2-12 values) for clear visual distinction.",
        )
    return None


def _size_warning(column: AnalysisBase, flags: ColumnFlags, others: Dict[str, Optional[str]]) -> Optional[AxisWarning]:
    if not flags.is_numerical:
        return AxisWarning(
            message="Numerical column recommended",
            reason="Size encoding requires numerical values to map to point sizes.",
        )
    if column.column_name in (others.get("x"), others.get("y")):
        return AxisWarning(
            message="Already used on axis",
            reason="Using the same column for both axis and size is redundant.",
        )
    return None


def _bar_warning(
    column: AnalysisBase,
    flags: ColumnFlags,
    other_axis_column: Optional[str],
    other_axis_semantic: Optional[str],
) -> Optional[AxisWarning]:
    if flags.is_identifier or flags.is_reference:
        return AxisWarning(
            message="Not suitable for bar charts",
            reason="This column contains unique labels or IDs. Bar charts work best with categorical dimensions or numerical measures.",
        )
    if other_axis_semantic == "numerical" and flags.is_numerical:
        return AxisWarning(
            message="Consider a categorical column",
            reason="The other axis already has a numerical measure. Bar charts need one dimension (categorical/temporal) and one measure (numerical).",
        )
    if other_axis_semantic in DIMENSION_SEMANTICS and not flags.is_numerical:
        return AxisWarning(
            message="Numerical column recommended",
            reason="The other axis already has a categorical dimension. Bar charts need a numerical measure on the other axis.",
        )
    if not other_axis_column and flags.is_numerical and column.cardinality > HIGH_CARDINALITY:
        return AxisWarning(
            message="Many unique values",
            reason="A numerical column with many values might be better suited for a Histogram or Scatter plot.",
        )
    return None


def _y_axis_warning(flags: ColumnFlags, chart_type: str) -> Optional[AxisWarning]:
    if flags.is_identifier or flags.is_reference:
        return AxisWarning(
            message="Not a measurable value",
            reason="This column contains unique labels or IDs, which cannot be aggregated (sum/avg) meaningfully.",
        )
    if chart_type in CHART_NAMES and not flags.is_numerical:
        return AxisWarning(
            message="Numerical column recommended",
            reason=f"{CHART_NAMES[chart_type]} charts need numerical values on the Y-axis to show height, trends, or position.",
        )
    return None


def _x_axis_warning(column: AnalysisBase, flags: ColumnFlags, chart_type: str) -> Optional[AxisWarning]:
    if chart_type == "dot" and not flags.is_numerical:
        return AxisWarning(
            message="Numerical column recommended",
            reason="Scatter plots need numerical values on both axes to show correlations between two measures.",
        )
    if chart_type in ("line", "areaY"):
        if flags.is_categorical and column.cardinality > HIGH_CARDINALITY:
            return AxisWarning(
                message="Too many categories",
                reason="Line charts with many categories can look cluttered. Consider a Bar chart or filtering.",
            )
        if not flags.is_temporal and not flags.is_numerical and not flags.is_categorical:
            return AxisWarning(
                message="Ordered column recommended",
                reason="Line charts work best with time-series or continuous data.",
            )
    return None


def get_column_warning(
    column_name: Optional[str],
    channel: str,
    chart_type: str,
    analysis: Sequence[AnalysisBase],
    other_columns: Optional[Dict[str, Optional[str]]] = None,
) -> Optional[AxisWarning]:
    """
    Warn about a column choice for a channel.

    Works on column names; use ``get_encoding_warning`` for encoding values.

    Args:
        column_name: Selected column
        channel: x, y, color or size
        chart_type: Current chart type
        analysis: Column analyses (metrics included as numerical columns)
        other_columns: Columns currently on the other channels, keyed by channel

    Returns:
        AxisWarning, or None when the choice is fine or the column is unknown
    """
    if not column_name:
        return None
    column = find_column(analysis, column_name)
    if column is None:
        return None

    flags = ColumnFlags(column)
    others = other_columns or {}

    if channel == "color":
        return _color_warning(column, flags, others)
    if channel == "size":
        return _size_warning(column, flags, others)

    other_axis_column = others.get("y") if channel == "x" else others.get("x")
    if other_axis_column and column_name == other_axis_column:
        return AxisWarning(
            message="Same column on both axes",
            reason="Comparing a column to itself usually doesn't show meaningful insights.",
        )

    if chart_type == "barY":
        other_column = find_column(analysis, other_axis_column)
        other_semantic = other_column.semantic if other_column is not None else None
        return _bar_warning(column, flags, other_axis_column, other_semantic)

    if channel == "y":
        return _y_axis_warning(flags, chart_type)
    if channel == "x":
        return _x_axis_warning(column, flags, chart_type)
    return None


def get_encoding_warning(
    encoding_value: Optional[str],
    channel: str,
    chart_type: str,
    analysis: Sequence[AnalysisBase],
    compiled_insight: Optional[CompiledInsight] = None,
    other_axis_encoding_value: Optional[str] = None,
) -> Optional[AxisWarning]:
    """
    Warn about an encoding value (``field:<id>`` / ``metric:<id>``).

    Metrics count as numerical and only warn when the same metric sits on
    both axes. Fields resolve to their column and go through the column rules.
    """
    if not encoding_value:
        return None

    parsed = parse_encoding(encoding_value)
    if parsed is None:
        return AxisWarning(
            message="Invalid encoding",
            reason="This encoding value has an invalid format.",
        )

    if parsed.type == "metric":
        if other_axis_encoding_value and encoding_value == other_axis_encoding_value:
            return AxisWarning(
                message="Same metric on both axes",
                reason="Comparing a metric to itself usually doesn't show meaningful insights.",
            )
        return None

    resolved = resolve_for_analysis(encoding_value, compiled_insight)
    if not resolved.valid or not resolved.column_name:
        return AxisWarning(
            message="Field not found",
            reason="The referenced field could not be resolved.",
        )

    other_axis_column = None
    if other_axis_encoding_value:
        other = resolve_for_analysis(other_axis_encoding_value, compiled_insight)
        if other.valid and not other.is_metric:
            other_axis_column = other.column_name

    other_columns: Dict[str, Optional[str]] = {}
    if channel == "x":
        other_columns["y"] = other_axis_column
    elif channel == "y":
        other_columns["x"] = other_axis_column

    return get_column_warning(resolved.column_name, channel, chart_type, analysis, other_columns)

"""
Encoding enforcer: hard per-chart-type channel constraints.

- barY: X is a dimension (category, date or boolean), Y is a metric
- barX: X is a metric, Y is a dimension
- line/areaY: X is continuous (date or number), Y is a metric
- dot: both axes continuous; metrics count as numerical
- hexbin/heatmap/raster: any resolvable field or metric that is not identifier-like

Identifier-like columns are never allowed on an axis. Color and size carry
no hard constraint.
"""
import logging
from typing import Callable, Dict, List, Optional, Sequence

from chartadvisor.core.classification import (
    find_column,
    is_blocked_column,
    is_categorical,
    is_continuous,
    is_temporal,
)
from chartadvisor.core.schemas import AnalysisBase, ColumnSuitability, CompiledInsight
from chartadvisor.services.encoding import parse_encoding, resolve_for_analysis

logger = logging.getLogger(__name__)

NO_COLUMN_SELECTED = "No column selected"
INVALID_ENCODING_FORMAT = "Invalid encoding format"
FIELD_NOT_FOUND = "Field not found"
COLUMN_NOT_IN_ANALYSIS = "Column not found in analysis"
IDENTIFIER_AS_CATEGORY = "Identifiers cannot be used as categories"
IDENTIFIER_ON_AXIS = "Identifiers cannot be used on axes"
IDENTIFIER_FALLBACK = "Identifiers cannot be used"

BAR_X_METRIC = "Bar chart X axis needs a dimension, not a metric"
BAR_X_TYPE = "Bar chart X axis needs a category or date"
BAR_Y_FIELD = "Bar chart Y axis needs a metric (add an aggregation in the insight)"
BARX_X_FIELD = "Horizontal bar X axis needs a metric (add an aggregation in the insight)"
BARX_Y_METRIC = "Horizontal bar Y axis needs a dimension, not a metric"
BARX_Y_TYPE = "Horizontal bar Y axis needs a category or date"
LINE_X_METRIC = "Line/Area X axis needs a dimension, not a metric"
LINE_X_TYPE = "Line/Area X axis needs a date or number (continuous)"
LINE_Y_FIELD = "Line/Area Y axis needs a metric (add an aggregation in the insight)"
SCATTER_TYPE = "Scatter plot axes need dates or numbers (continuous)"

SUITABLE = ColumnSuitability(suitable=True)


def _unsuitable(reason: str) -> ColumnSuitability:
    return ColumnSuitability(suitable=False, reason=reason)


# Column rules, keyed by the kind of column an axis accepts

def _dimension_rule(type_reason: str) -> Callable[[AnalysisBase], ColumnSuitability]:
    def check(column: AnalysisBase) -> ColumnSuitability:
        if is_blocked_column(column):
            return _unsuitable(IDENTIFIER_AS_CATEGORY)
        if is_categorical(column) or is_temporal(column):
            return SUITABLE
        return _unsuitable(type_reason)
    return check


def _continuous_rule(type_reason: str) -> Callable[[AnalysisBase], ColumnSuitability]:
    def check(column: AnalysisBase) -> ColumnSuitability:
        if is_blocked_column(column):
            return _unsuitable(IDENTIFIER_ON_AXIS)
        if is_continuous(column):
            return SUITABLE
        return _unsuitable(type_reason)
    return check


def _not_blocked(column: AnalysisBase) -> ColumnSuitability:
    if is_blocked_column(column):
        return _unsuitable(IDENTIFIER_FALLBACK)
    return SUITABLE


class _AxisRule:
    """What one axis of one chart type accepts."""

    def __init__(
        self,
        column_rule: Optional[Callable[[AnalysisBase], ColumnSuitability]] = None,
        metric_reason: Optional[str] = None,
        field_reason: Optional[str] = None,
        accepts_metric: bool = False,
    ):
        self.column_rule = column_rule
        self.metric_reason = metric_reason
        self.field_reason = field_reason
        self.accepts_metric = accepts_metric

    @property
    def accepts_field(self) -> bool:
        return self.column_rule is not None

    def check_column(self, column: AnalysisBase) -> ColumnSuitability:
        if self.column_rule is None:
            return _unsuitable(self.field_reason)
        return self.column_rule(column)


_AXIS_RULES: Dict[str, Dict[str, _AxisRule]] = {
    "barY": {
        "x": _AxisRule(_dimension_rule(BAR_X_TYPE), metric_reason=BAR_X_METRIC),
        "y": _AxisRule(field_reason=BAR_Y_FIELD, accepts_metric=True),
    },
    "barX": {
        "x": _AxisRule(field_reason=BARX_X_FIELD, accepts_metric=True),
        "y": _AxisRule(_dimension_rule(BARX_Y_TYPE), metric_reason=BARX_Y_METRIC),
    },
    "line": {
        "x": _AxisRule(_continuous_rule(LINE_X_TYPE), metric_reason=LINE_X_METRIC),
        "y": _AxisRule(field_reason=LINE_Y_FIELD, accepts_metric=True),
    },
    "dot": {
        "x": _AxisRule(_continuous_rule(SCATTER_TYPE), accepts_metric=True),
        "y": _AxisRule(_continuous_rule(SCATTER_TYPE), accepts_metric=True),
    },
}
_AXIS_RULES["areaY"] = _AXIS_RULES["line"]


def is_metric_allowed_on_channel(channel: str, chart_type: str) -> bool:
    rule = _AXIS_RULES.get(chart_type, {}).get(channel)
    return rule is not None and rule.accepts_metric


def get_column_suitability(column: AnalysisBase, channel: str, chart_type: str) -> ColumnSuitability:
    """
    Check an analysed column (not an encoding value) against a channel.

    This is the filter behind ``get_valid_columns_for_channel``; metric-only
    axes reject every column.
    """
    if channel in ("color", "size"):
        return SUITABLE
    rule = _AXIS_RULES.get(chart_type, {}).get(channel)
    if rule is None:
        return _not_blocked(column)
    return rule.check_column(column)


def get_valid_columns_for_channel(
    channel: str,
    chart_type: str,
    analysis: Sequence[AnalysisBase],
    compiled_insight: Optional[CompiledInsight] = None,
) -> List[str]:
    """
    List the column names (and metric names) a channel accepts.

    Args:
        channel: x, y, color or size
        chart_type: Chart type being configured
        analysis: Column analyses of the insight's data
        compiled_insight: Supplies metrics for channels that accept them

    Returns:
        Suitable analysis column names in input order, followed by metric
        names when the channel accepts metrics
    """
    if channel in ("color", "size"):
        return [column.column_name for column in analysis]

    valid = [
        column.column_name
        for column in analysis
        if get_column_suitability(column, channel, chart_type).suitable
    ]

    if compiled_insight is not None and is_metric_allowed_on_channel(channel, chart_type):
        valid.extend(metric.name for metric in compiled_insight.metrics if metric.name)

    return valid


def is_column_valid_for_channel(
    encoding_value: Optional[str],
    channel: str,
    chart_type: str,
    analysis: Sequence[AnalysisBase],
    compiled_insight: Optional[CompiledInsight] = None,
) -> ColumnSuitability:
    """
    Validate an encoding value (``field:<id>`` / ``metric:<id>``) for a channel.

    Returns:
        ColumnSuitability with the blocking reason when not suitable
    """
    if channel in ("color", "size"):
        return SUITABLE

    if not encoding_value:
        return _unsuitable(NO_COLUMN_SELECTED)
    parsed = parse_encoding(encoding_value)
    if parsed is None:
        return _unsuitable(INVALID_ENCODING_FORMAT)

    rule = _AXIS_RULES.get(chart_type, {}).get(channel)
    is_metric = parsed.type == "metric"
    if rule is not None:
        if is_metric:
            if not rule.accepts_metric:
                return _unsuitable(rule.metric_reason)
        elif not rule.accepts_field:
            return _unsuitable(rule.field_reason)

    resolved = resolve_for_analysis(encoding_value, compiled_insight)
    if not resolved.valid:
        return _unsuitable(FIELD_NOT_FOUND)
    if is_metric:
        return SUITABLE

    if not resolved.column_name:
        return _unsuitable(FIELD_NOT_FOUND)
    column = find_column(analysis, resolved.column_name)
    if column is None:
        return _unsuitable(COLUMN_NOT_IN_ANALYSIS)
    if rule is None:
        # Density charts only exclude identifier-like columns
        return _not_blocked(column)
    return rule.check_column(column)


def validate_encoding(
    encoding: Dict[str, Optional[str]],
    chart_type: str,
    analysis: Sequence[AnalysisBase],
    compiled_insight: Optional[CompiledInsight] = None,
) -> Dict[str, str]:
    """
    Validate the x and y values of an encoding.

    Only keys with a value are checked, and nothing is checked while the
    analysis is still empty.

    Returns:
        Mapping of failing channel -> reason; empty when the encoding is valid
    """
    errors: Dict[str, str] = {}
    if not analysis:
        return errors
    for channel in ("x", "y"):
        value = encoding.get(channel)
        if not value:
            continue
        result = is_column_valid_for_channel(value, channel, chart_type, analysis, compiled_insight)
        if not result.suitable:
            errors[channel] = result.reason
    if errors:
        logger.debug(f"Encoding rejected for {chart_type}", extra={"errors": errors})
    return errors


def is_swap_allowed(chart_type: str) -> bool:
    return chart_type in ("barY", "barX", "dot")


def get_swapped_chart_type(chart_type: str) -> str:
    return {"barY": "barX", "barX": "barY"}.get(chart_type, chart_type)


_AXIS_LABELS = {
    "barY": ("Category", "Value"),
    "barX": ("Value", "Category"),
    "line": ("Continuous", "Measure"),
    "areaY": ("Continuous", "Measure"),
    "dot": ("Continuous", "Continuous"),
}


def get_axis_semantic_label(axis: str, chart_type: str) -> str:
    """Short label describing what belongs on an axis ("" when unconstrained)."""
    labels = _AXIS_LABELS.get(chart_type)
    if labels is None:
        return ""
    return labels[0] if axis == "x" else labels[1]

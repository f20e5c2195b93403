"""
Column ranking for axis dropdowns: best-fitting columns first.
"""
from typing import Dict, List, Optional, Sequence

from chartadvisor.core.classification import find_column
from chartadvisor.core.schemas import AnalysisBase, RankedColumnOption
from chartadvisor.services.axis_warnings import ColumnFlags, get_column_warning

BASE_SCORE = 50
IDENTIFIER_PENALTY = 100
SAME_AS_OTHER_AXIS_PENALTY = 200
WARNING_PENALTY = 50


def _dimension_axis_score(flags: ColumnFlags) -> int:
    score = 0
    if flags.is_categorical:
        score += 100
    if flags.is_temporal:
        score += 80
    if flags.is_numerical:
        score -= 50
    return score


def _measure_axis_score(flags: ColumnFlags) -> int:
    return 100 if flags.is_numerical else -50


def _chart_score(axis: str, chart_type: str, flags: ColumnFlags) -> int:
    if chart_type == "barY":
        return _dimension_axis_score(flags) if axis == "x" else _measure_axis_score(flags)
    if chart_type == "barX":
        return _measure_axis_score(flags) if axis == "x" else _dimension_axis_score(flags)

    if axis == "y":
        score = 100 if flags.is_numerical else 0
        if not flags.is_numerical and chart_type in ("line", "areaY", "dot"):
            score -= 50
        return score

    if chart_type in ("line", "areaY"):
        score = 0
        if flags.is_temporal:
            score += 100
        if flags.is_numerical:
            score += 60
        if flags.is_categorical:
            score += 20
        return score
    if chart_type == "dot":
        return _measure_axis_score(flags)
    return 0


def score_column(
    axis: str,
    chart_type: str,
    column: AnalysisBase,
    has_warning: bool,
    is_same_as_other_axis: bool,
) -> int:
    """
    Suitability score of one analysed column for an axis.

    Starts at 50, adds the chart-specific fit, then subtracts the identifier,
    duplicate-axis and warning penalties.
    """
    flags = ColumnFlags(column)
    score = BASE_SCORE + _chart_score(axis, chart_type, flags)
    if flags.is_identifier:
        score -= IDENTIFIER_PENALTY
    if is_same_as_other_axis:
        score -= SAME_AS_OTHER_AXIS_PENALTY
    if has_warning:
        score -= WARNING_PENALTY
    return score


def get_ranked_column_options(
    columns: Sequence[str],
    axis: str,
    chart_type: str,
    analysis: Sequence[AnalysisBase],
    other_axis_column: Optional[str] = None,
) -> List[RankedColumnOption]:
    """
    Rank columns for an axis, attaching each column's warning.

    Args:
        columns: Column names to rank
        axis: "x" or "y"
        chart_type: Current chart type
        analysis: Column analyses
        other_axis_column: Column currently on the other axis

    Returns:
        Options sorted by descending score; ties keep input order
    """
    other_columns: Dict[str, Optional[str]] = {}
    if other_axis_column:
        other_columns = {"y": other_axis_column} if axis == "x" else {"x": other_axis_column}

    options = []
    for name in columns:
        warning = get_column_warning(name, axis, chart_type, analysis, other_columns)
        column = find_column(analysis, name)
        if column is None:
            score = 0
        else:
            score = score_column(axis, chart_type, column, warning is not None, name == other_axis_column)
        options.append(RankedColumnOption(label=name, value=name, score=score, warning=warning))

    return sorted(options, key=lambda option: option.score, reverse=True)

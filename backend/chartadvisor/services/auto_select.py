"""
Auto-selection of x/y when the user switches chart type.

Current choices are kept when they still fit the new chart type; otherwise
each axis falls back through a fixed preference chain.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set

import pandas as pd

from chartadvisor.core.classification import (
    CATEGORY_LIKE_SEMANTICS,
    find_column,
    looks_like_identifier,
)
from chartadvisor.core.schemas import AnalysisBase, Field, parse_analyses
from chartadvisor.services.profiler import analysis_from_columns, analysis_from_dataframe

logger = logging.getLogger(__name__)

_DIMENSION_FIRST = ("barY", "line", "areaY")


def _to_analysis(columns_or_dataframe: Any) -> List[AnalysisBase]:
    if isinstance(columns_or_dataframe, pd.DataFrame):
        return analysis_from_dataframe(columns_or_dataframe)

    items = list(columns_or_dataframe or [])
    if not items:
        return []
    first = items[0]
    if isinstance(first, AnalysisBase) or (isinstance(first, Mapping) and "data_type" in first):
        return parse_analyses(items)
    descriptors = [item if isinstance(item, Mapping) else item.model_dump() for item in items]
    return analysis_from_columns(descriptors)


def _identifier_columns(fields: Optional[Mapping[str, Field]]) -> Set[str]:
    names: Set[str] = set()
    for field in (fields or {}).values():
        if field.is_identifier or field.is_reference:
            names.update(name for name in (field.column_name, field.source_column) if name)
    return names


def _pick_dimension(analysis: Sequence[AnalysisBase], prefer_temporal: bool) -> Optional[str]:
    chain = []
    if prefer_temporal:
        chain.append(lambda column: column.semantic == "temporal")
    chain.append(lambda column: column.semantic in CATEGORY_LIKE_SEMANTICS)
    chain.append(lambda column: column.semantic != "numerical")

    for predicate in chain:
        for column in analysis:
            if predicate(column):
                return column.column_name
    return analysis[0].column_name if analysis else None


def _pick_measure(
    analysis: Sequence[AnalysisBase],
    metric_names: Set[str],
    identifier_columns: Set[str],
    taken: Optional[str] = None,
) -> Optional[str]:
    """Metric-named number, then a non-identifier number, then any number; ``taken`` is used last."""
    numerical = [column.column_name for column in analysis if column.semantic == "numerical"]
    if not numerical:
        return None
    free = [name for name in numerical if name != taken] or numerical
    for name in free:
        if name in metric_names:
            return name
    for name in free:
        if not looks_like_identifier(name) and name not in identifier_columns:
            return name
    return free[0]


def _is_numerical(analysis: Sequence[AnalysisBase], column_name: Optional[str]) -> bool:
    column = find_column(analysis, column_name)
    return column is not None and column.semantic == "numerical"


def auto_select_encoding(
    chart_type: str,
    columns_or_dataframe: Any,
    fields: Optional[Mapping[str, Field]] = None,
    current_encoding: Optional[Mapping[str, Any]] = None,
    insight: Any = None,
) -> Dict[str, Any]:
    """
    Choose x and y for ``chart_type``, keeping current choices that still fit.

    Args:
        chart_type: Chart type being switched to
        columns_or_dataframe: A DataFrame, ``{name, type}`` descriptors or
            column analyses
        fields: Field definitions keyed by id; identifier/reference fields are
            avoided as measures
        current_encoding: Encoding before the switch (not mutated)
        insight: Anything with ``metrics``; metric names are preferred as Y

    Returns:
        New encoding dict; keys other than x and y are carried over unchanged
    """
    analysis = _to_analysis(columns_or_dataframe)
    encoding: Dict[str, Any] = dict(current_encoding or {})
    metric_names = {metric.name for metric in getattr(insight, "metrics", None) or [] if metric.name}
    identifier_columns = _identifier_columns(fields)

    if chart_type in _DIMENSION_FIRST or chart_type == "barX":
        dimension_axis, measure_axis = ("y", "x") if chart_type == "barX" else ("x", "y")

        dimension = encoding.get(dimension_axis)
        if find_column(analysis, dimension) is None:
            dimension = _pick_dimension(analysis, prefer_temporal=chart_type in ("line", "areaY"))

        measure = encoding.get(measure_axis)
        if not _is_numerical(analysis, measure):
            measure = _pick_measure(analysis, metric_names, identifier_columns)

        encoding[dimension_axis] = dimension
        encoding[measure_axis] = measure

    elif chart_type == "dot":
        # Both scatter axes are measures
        x, y = encoding.get("x"), encoding.get("y")
        keep_x, keep_y = _is_numerical(analysis, x), _is_numerical(analysis, y)

        if not keep_x:
            x = _pick_measure(analysis, metric_names, identifier_columns, taken=y if keep_y else None)
        if not keep_y:
            y = _pick_measure(analysis, metric_names, identifier_columns, taken=x)

        encoding["x"] = x
        encoding["y"] = y

    logger.debug(
        f"Auto-selected encoding for {chart_type}",
        extra={"x": encoding.get("x"), "y": encoding.get("y")},
    )
    return encoding

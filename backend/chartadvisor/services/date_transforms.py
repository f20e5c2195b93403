"""
Date transforms for temporal channels.

A temporal transform bins dates on a time scale (week, month, year); a
categorical transform folds them into repeating buckets (month name, day of
week, quarter) that render on an ordinal scale.
"""
from typing import Optional

from chartadvisor.core.schemas import (
    CategoricalDateTransform,
    ChannelTransform,
    TemporalDateTransform,
)

MS_PER_DAY = 24 * 60 * 60 * 1000

# Range upper bounds in days
_AGGREGATION_BY_RANGE = (
    (14, "none"),
    (180, "yearWeek"),
    (1825, "yearMonth"),
)


def select_temporal_aggregation(min_date: Optional[float], max_date: Optional[float]) -> str:
    """
    Pick a time bin that keeps a date range readable.

    Args:
        min_date: Earliest value, epoch milliseconds
        max_date: Latest value, epoch milliseconds

    Returns:
        "none" under two weeks, "yearWeek" under ~6 months, "yearMonth" under
        5 years, otherwise "year". Missing bounds give "yearMonth".
    """
    if min_date is None or max_date is None:
        return "yearMonth"
    range_days = (max_date - min_date) / MS_PER_DAY
    for upper_days, aggregation in _AGGREGATION_BY_RANGE:
        if range_days < upper_days:
            return aggregation
    return "year"


def temporal_transform(aggregation: str) -> TemporalDateTransform:
    return TemporalDateTransform(aggregation=aggregation)


def categorical_transform(group_by: str) -> CategoricalDateTransform:
    return CategoricalDateTransform(group_by=group_by)


def channel_date_transform(min_date: Optional[float], max_date: Optional[float]) -> ChannelTransform:
    """Channel transform with an auto-selected temporal aggregation."""
    return ChannelTransform(transform=temporal_transform(select_temporal_aggregation(min_date, max_date)))


def get_axis_type_for_transform(transform) -> str:
    return "temporal" if transform.kind == "temporal" else "ordinal"

"""
Unit tests for date transforms.
"""
import pytest
from chartadvisor.services.date_transforms import (
    MS_PER_DAY,
    categorical_transform,
    channel_date_transform,
    get_axis_type_for_transform,
    select_temporal_aggregation,
    temporal_transform,
)


@pytest.mark.unit
@pytest.mark.parametrize("days,expected", [
    (0, "none"),
    (7, "none"),
    (14, "yearWeek"),
    (90, "yearWeek"),
    (180, "yearMonth"),
    (1000, "yearMonth"),
    (1825, "year"),
    (5000, "year"),
])
def test_select_temporal_aggregation(days, expected):
    """Test aggregation chosen for a date range."""
    assert select_temporal_aggregation(0, days * MS_PER_DAY) == expected


@pytest.mark.unit
def test_select_temporal_aggregation_without_bounds():
    """Test that missing bounds fall back to monthly bins."""
    assert select_temporal_aggregation(None, 10) == "yearMonth"
    assert select_temporal_aggregation(10, None) == "yearMonth"


@pytest.mark.unit
def test_channel_date_transform():
    """Test the channel transform wraps an auto-selected temporal aggregation."""
    transform = channel_date_transform(0, 30 * MS_PER_DAY)
    assert transform.type == "date"
    assert transform.transform.kind == "temporal"
    assert transform.transform.aggregation == "yearWeek"


@pytest.mark.unit
def test_axis_type_for_transform():
    """Test temporal transforms keep a time scale and categorical ones become ordinal."""
    assert get_axis_type_for_transform(temporal_transform("year")) == "temporal"
    assert get_axis_type_for_transform(categorical_transform("monthName")) == "ordinal"


@pytest.mark.unit
def test_transform_values_are_validated():
    """Test that unknown aggregations are rejected."""
    with pytest.raises(ValueError):
        temporal_transform("decade")
    with pytest.raises(ValueError):
        categorical_transform("weekOfYear")

"""
Chart type catalogue: display metadata and the analytical tags each chart
type serves.
"""
from typing import Dict, List

from pydantic import BaseModel

SCATTER_MAX_POINTS = 5000

CHART_TYPES = ["barY", "barX", "line", "areaY", "dot", "hexbin", "heatmap", "raster"]
CHART_TAGS = ["comparison", "trend", "correlation", "distribution"]

DENSITY_CHART_TYPES = ("hexbin", "heatmap", "raster")


class ChartTypeMetadata(BaseModel):
    tags: List[str]
    display_name: str
    description: str
    hint: str


class ChartTagMetadata(BaseModel):
    display_name: str
    description: str


CHART_TYPE_METADATA: Dict[str, ChartTypeMetadata] = {
    "barY": ChartTypeMetadata(
        tags=["comparison", "trend"],
        display_name="Bar",
        description="Vertical bars sized by a measure for each category",
        hint="Compare values across categories",
    ),
    "barX": ChartTypeMetadata(
        tags=["comparison"],
        display_name="Horizontal bar",
        description="Horizontal bars for long category labels",
        hint="Best for ranking many categories",
    ),
    "line": ChartTypeMetadata(
        tags=["trend"],
        display_name="Line",
        description="Connected points that show trends",
        hint="Track changes over time",
    ),
    "areaY": ChartTypeMetadata(
        tags=["trend"],
        display_name="Area",
        description="Filled area under a line to emphasize volume",
        hint="Show cumulative totals over time",
    ),
    "dot": ChartTypeMetadata(
        tags=["correlation"],
        display_name="Scatter",
        description="Individual points that reveal correlation between two measures",
        hint="Works best under 5K points",
    ),
    "hexbin": ChartTypeMetadata(
        tags=["correlation", "distribution"],
        display_name="Hexbin",
        description="Density of points aggregated into hexagonal bins",
        hint="Large datasets binned into hex cells",
    ),
    "heatmap": ChartTypeMetadata(
        tags=["correlation", "distribution"],
        display_name="Heatmap",
        description="Color-encoded density over a two-dimensional grid",
        hint="Spot clusters and hot spots",
    ),
    "raster": ChartTypeMetadata(
        tags=["correlation"],
        display_name="Raster",
        description="Pixel-level density rendering for very large datasets",
        hint="Handles 100K+ points",
    ),
}

CHART_TAG_METADATA: Dict[str, ChartTagMetadata] = {
    "comparison": ChartTagMetadata(
        display_name="Comparison",
        description="Compare values across categories",
    ),
    "trend": ChartTagMetadata(
        display_name="Trend",
        description="See how values change over time",
    ),
    "correlation": ChartTagMetadata(
        display_name="Correlation",
        description="Find relationships between two measures",
    ),
    "distribution": ChartTagMetadata(
        display_name="Distribution",
        description="Understand the spread and density of values",
    ),
}


def is_chart_type(value) -> bool:
    return value in CHART_TYPE_METADATA


def get_available_tags() -> List[str]:
    return list(CHART_TAGS)


def get_chart_types_for_tag(tag: str) -> List[str]:
    return [chart_type for chart_type in CHART_TYPES if tag in CHART_TYPE_METADATA[chart_type].tags]


def get_tags_for_chart_type(chart_type: str) -> List[str]:
    metadata = CHART_TYPE_METADATA.get(chart_type)
    return list(metadata.tags) if metadata else []


def get_alternative_chart_types(chart_type: str) -> List[str]:
    """Chart types sharing at least one tag with ``chart_type``, excluding it."""
    tags = set(get_tags_for_chart_type(chart_type))
    return [
        other for other in CHART_TYPES
        if other != chart_type and tags.intersection(CHART_TYPE_METADATA[other].tags)
    ]

"""
Chart suggestion engine.

Turns column analyses and an insight's metrics into complete, ranked chart
configurations. Each chart type has an eligibility gate; eligible types get
their best column pairing, and bulk results are deduplicated, filtered,
ranked and annotated with the fields they would add to the insight.

Passing ``seed`` in the options shuffles candidate pools and samples among
the top pairings with a seeded PRNG, so regenerating with a new seed gives
variety while the same seed always gives the same list.
"""
import re
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, TypeVar, Union

from chartadvisor.core.classification import (
    BLOCKED_SEMANTICS,
    CATEGORICAL_X_MAX,
    CATEGORY_LIKE_SEMANTICS,
    COLOR_MAX,
    looks_like_identifier,
)
from chartadvisor.core.schemas import (
    AnalysisBase,
    ChartEncoding,
    ChartSuggestion,
    Field,
    Insight,
    NumberAnalysis,
    SuggestionOptions,
    TagSuggestion,
)
from chartadvisor.services.chart_types import (
    CHART_TAG_METADATA,
    CHART_TYPE_METADATA,
    DENSITY_CHART_TYPES,
    SCATTER_MAX_POINTS,
    get_alternative_chart_types,
    get_available_tags,
)
from chartadvisor.services.date_transforms import channel_date_transform

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_NULL_RATIO = 0.5
MAX_ZERO_RATIO = 0.8
COLOR_POOL_MAX = 15
GROUPED_COLOR_MAX = 6
GROUPED_MAX_BARS = 18
GROUPED_MAX_FREQUENCY_RATIO = 0.7
TOP_CANDIDATES = 5

CHART_PRIORITY = {
    "line": 1,
    "areaY": 1,
    "barY": 2,
    "barX": 2,
    "dot": 3,
    "hexbin": 3,
    "heatmap": 3,
    "raster": 3,
}

# Name patterns that suggest a numerical column is a meaningful measure
METRIC_PATTERNS: List[Tuple[re.Pattern, int]] = [
    (re.compile(r"^(total|sum|count|amount|revenue|sales|profit|cost|price|value|qty|quantity)$", re.IGNORECASE), 10),
    (re.compile(r"(total|sum|count|amount|revenue|sales|profit|cost|price|value|qty|quantity)$", re.IGNORECASE), 8),
    (re.compile(r"^(avg|average|mean|rate|ratio|percent|pct|score)$", re.IGNORECASE), 8),
    (re.compile(r"(avg|average|mean|rate|ratio|percent|pct|score)$", re.IGNORECASE), 6),
    (re.compile(r"(spend|spent|income|expense|fee|charge|balance|budget)$", re.IGNORECASE), 6),
    (re.compile(r"(duration|time|hours|minutes|seconds|days|weeks|months)$", re.IGNORECASE), 5),
    (re.compile(r"(size|length|width|height|weight|distance)$", re.IGNORECASE), 4),
    (re.compile(r"^(n|num|number|val)$", re.IGNORECASE), 2),
]

# Name patterns of ids and codes stored as numbers
NON_METRIC_PATTERNS: List[re.Pattern] = [
    re.compile(r"id$", re.IGNORECASE),
    re.compile(r"key$", re.IGNORECASE),
    re.compile(r"code$", re.IGNORECASE),
    re.compile(r"no$", re.IGNORECASE),
    re.compile(r"num$", re.IGNORECASE),
    re.compile(r"index$", re.IGNORECASE),
    re.compile(r"seq$", re.IGNORECASE),
    re.compile(r"^_"),
]

METRIC_SCORE = 10

_AGGREGATE_WRAPPER = re.compile(r"^(?:sum|avg|count|min|max|count_distinct)\((.+)\)$", re.IGNORECASE)
_FIELD_WRAPPER = re.compile(
    r"^(?:sum|avg|count|min|max|count_distinct|dateMonth|dateYear|dateDay)\(([^)]+)\)$", re.IGNORECASE
)


def get_metric_score(column_name: str) -> int:
    """
    Score how likely a numerical column is a meaningful measure.

    Returns:
        0 for id/code-like names, 1 for unremarkable names, up to 10 for
        names like ``revenue`` or ``total``
    """
    if any(pattern.search(column_name) for pattern in NON_METRIC_PATTERNS):
        return 0
    for pattern, score in METRIC_PATTERNS:
        if pattern.search(column_name):
            return score
    return 1


class SeededRandom:
    """xorshift32 generator; identical seeds give identical sequences."""

    MASK = 0xFFFFFFFF

    def __init__(self, seed: int):
        state = (seed ^ 0x9E3779B9) & self.MASK
        self._state = state or 0x9E3779B9

    def random(self) -> float:
        """Next float in [0, 1)."""
        x = self._state
        x ^= (x << 13) & self.MASK
        x ^= x >> 17
        x ^= (x << 5) & self.MASK
        self._state = x
        return x / (self.MASK + 1)


def shuffle_with_seed(items: Sequence[T], random: Optional[SeededRandom]) -> List[T]:
    """Fisher-Yates shuffle of a copy; without a generator the order is kept."""
    result = list(items)
    if random is None:
        return result
    for i in range(len(result) - 1, 0, -1):
        j = int(random.random() * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result


def _weighted_pick(scored: List[Tuple[float, T]], random: Optional[SeededRandom]) -> T:
    """Best item, or with a generator a (score + 1)^2-weighted pick among the top few."""
    scored = sorted(scored, key=lambda item: item[0], reverse=True)
    if random is None or len(scored) == 1:
        return scored[0][1]

    candidates = scored[:TOP_CANDIDATES]
    weights = [(score + 1) ** 2 for score, _ in candidates]
    remaining = random.random() * sum(weights)
    for weight, (_, item) in zip(weights, candidates):
        remaining -= weight
        if remaining <= 0:
            return item
    return candidates[-1][1]


def _normalize_column_reference(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    match = _AGGREGATE_WRAPPER.match(value)
    return match.group(1) if match else value


def _tables_for(columns: Iterable[Optional[str]], column_table_map: Optional[Mapping[str, List[str]]]) -> Set[str]:
    tables: Set[str] = set()
    if not column_table_map:
        return tables
    for column in columns:
        normalized = _normalize_column_reference(column)
        if normalized:
            tables.update(column_table_map.get(normalized, []))
    return tables


def coverage_score(columns: Iterable[Optional[str]], column_table_map: Optional[Mapping[str, List[str]]] = None) -> int:
    """Number of distinct tables the columns come from."""
    return len(_tables_for(columns, column_table_map))


def _fill_rate(column: AnalysisBase) -> float:
    return 1 - column.null_count / max(column.cardinality + column.null_count, 1)


def pick_best_pair(
    first: Sequence[AnalysisBase],
    second: Sequence[AnalysisBase],
    column_table_map: Optional[Mapping[str, List[str]]] = None,
    disallow_same: bool = False,
    prefer_metric_y: bool = False,
    random: Optional[SeededRandom] = None,
    metric_names: Optional[Set[str]] = None,
) -> Optional[Tuple[AnalysisBase, AnalysisBase]]:
    """
    Choose the best (x, y) pairing from two candidate pools.

    Each pair scores table coverage, the Y metric-name score (x100, id-like
    names skipped) when ``prefer_metric_y`` is set, a fill-rate bonus and a
    bonus for an X cardinality that keeps the chart readable.

    Returns:
        The highest-scoring pair (first in input order on ties), a weighted
        pick among the top pairs when ``random`` is given, or None
    """
    metric_names = metric_names or set()
    scored: List[Tuple[float, Tuple[AnalysisBase, AnalysisBase]]] = []

    for a in first:
        for b in second:
            if disallow_same and a.column_name == b.column_name:
                continue

            score: float = coverage_score([a.column_name, b.column_name], column_table_map)

            if prefer_metric_y:
                metric_score = METRIC_SCORE if b.column_name in metric_names else get_metric_score(b.column_name)
                if metric_score == 0:
                    continue
                score += metric_score * 100

            score += (_fill_rate(a) + _fill_rate(b)) * 5

            if 3 <= a.cardinality <= 20:
                score += 10
            elif 2 <= a.cardinality <= 30:
                score += 5

            scored.append((score, (a, b)))

    if not scored:
        return None
    return _weighted_pick(scored, random)


def pick_best_triple(
    x_candidates: Sequence[AnalysisBase],
    color_candidates: Sequence[AnalysisBase],
    measures: Sequence[AnalysisBase],
    column_table_map: Optional[Mapping[str, List[str]]] = None,
    random: Optional[SeededRandom] = None,
    metric_names: Optional[Set[str]] = None,
) -> Optional[Tuple[AnalysisBase, AnalysisBase, AnalysisBase]]:
    """Choose (x, color, y) for a grouped bar; fewer colors score higher."""
    metric_names = metric_names or set()
    scored: List[Tuple[float, Tuple[AnalysisBase, AnalysisBase, AnalysisBase]]] = []

    for x in x_candidates:
        for color in color_candidates:
            if color.column_name == x.column_name:
                continue
            for y in measures:
                metric_score = METRIC_SCORE if y.column_name in metric_names else get_metric_score(y.column_name)
                if metric_score == 0:
                    continue
                score: float = coverage_score([x.column_name, color.column_name, y.column_name], column_table_map)
                score += metric_score * 100
                if color.cardinality <= 5:
                    score += 20
                elif color.cardinality <= 10:
                    score += 10
                scored.append((score, (x, color, y)))

    if not scored:
        return None
    return _weighted_pick(scored, random)


def get_axis_type(column: AnalysisBase) -> str:
    if column.semantic == "numerical":
        return "quantitative"
    if column.semantic == "temporal":
        return "temporal"
    return "nominal"


def extract_fields_from_encoding(encoding: ChartEncoding) -> List[str]:
    """Raw field names used by an encoding, with aggregation wrappers stripped."""
    used = []
    for value in (encoding.x, encoding.y, encoding.color, encoding.size):
        if not value:
            continue
        match = _FIELD_WRAPPER.match(value)
        used.append(match.group(1) if match else value)
    return used


# Candidate pools

class _SuggestionContext:
    """Everything one suggestion call needs, computed once."""

    def __init__(
        self,
        insight: Optional[Insight],
        analysis: Sequence[AnalysisBase],
        row_count: int,
        fields: Optional[Mapping[str, Field]],
        options: SuggestionOptions,
    ):
        self.insight = insight or Insight()
        self.row_count = row_count
        self.fields = dict(fields or {})
        self.options = options
        self.random = SeededRandom(options.seed) if options.seed is not None else None
        self.column_table_map = options.column_table_map
        self.metric_names: Set[str] = {metric.name for metric in self.insight.metrics if metric.name}

        metric_columns = [column for column in analysis if column.column_name in self.metric_names]
        plain = [column for column in analysis if column.column_name not in self.metric_names]

        self.numerical = shuffle_with_seed(
            [c for c in plain if c.semantic == "numerical" and not self._is_blocked(c) and self._has_variance(c)],
            self.random,
        )
        self.temporal = shuffle_with_seed(
            [c for c in plain if c.semantic == "temporal" and not self._is_blocked(c)],
            self.random,
        )
        self.categorical = shuffle_with_seed(
            [
                c for c in plain
                if c.semantic in CATEGORY_LIKE_SEMANTICS and not self._is_blocked(c)
                and 2 <= c.cardinality <= CATEGORICAL_X_MAX
            ],
            self.random,
        )
        self.color = shuffle_with_seed(
            [
                c for c in plain
                if c.semantic in CATEGORY_LIKE_SEMANTICS and not self._is_blocked(c)
                and 2 <= c.cardinality <= COLOR_POOL_MAX
            ],
            self.random,
        )

        # Insight metrics are always measures
        known = {column.column_name for column in metric_columns}
        synthetic = [
            NumberAnalysis(column_name=name, cardinality=max(row_count, 0))
            for name in sorted(self.metric_names - known)
        ]
        self.measures = self._metric_candidates(metric_columns + synthetic) + self.numerical

        logger.debug(
            "Suggestion candidate pools",
            extra={
                "total_columns": len(analysis),
                "numerical": len(self.numerical),
                "temporal": len(self.temporal),
                "categorical": len(self.categorical),
                "color_suitable": len(self.color),
                "metrics": len(self.metric_names),
            },
        )

    def _metric_candidates(self, columns: List[AnalysisBase]) -> List[AnalysisBase]:
        order = [metric.name for metric in self.insight.metrics if metric.name]
        return sorted(columns, key=lambda column: order.index(column.column_name))

    def _field_for(self, column: AnalysisBase) -> Optional[Field]:
        if column.field_id and column.field_id in self.fields:
            return self.fields[column.field_id]
        if column.column_name in self.fields:
            return self.fields[column.column_name]
        for field in self.fields.values():
            if field.column_name == column.column_name:
                return field
        return None

    def _is_blocked(self, column: AnalysisBase) -> bool:
        if column.semantic in BLOCKED_SEMANTICS or looks_like_identifier(column.column_name):
            return True
        field = self._field_for(column)
        if field is not None and (field.is_identifier or field.is_reference):
            return True
        return self.row_count > 0 and column.null_count / self.row_count > MAX_NULL_RATIO

    def _has_variance(self, column: AnalysisBase) -> bool:
        minimum = getattr(column, "min", None)
        maximum = getattr(column, "max", None)
        if minimum is not None and maximum is not None:
            if minimum == maximum:
                return False
            zero_count = getattr(column, "zero_count", None)
            if zero_count is not None and self.row_count > 0 and zero_count / self.row_count > MAX_ZERO_RATIO:
                return False
            return True
        return column.cardinality > 1

    def measure_value(self, column: AnalysisBase) -> str:
        if column.column_name in self.metric_names:
            return column.column_name
        return f"sum({column.column_name})"

    def best_pair(self, first, second, **kwargs):
        return pick_best_pair(
            first,
            second,
            self.column_table_map,
            random=self.random,
            metric_names=self.metric_names,
            **kwargs,
        )


def _dimension_channel(column: AnalysisBase) -> Dict[str, Any]:
    if column.semantic == "temporal":
        return {
            "type": "temporal",
            "transform": channel_date_transform(getattr(column, "min_date", None), getattr(column, "max_date", None)),
        }
    return {"type": get_axis_type(column), "transform": None}


# Per chart type builders

def _bar_dimension_pool(ctx: _SuggestionContext) -> List[AnalysisBase]:
    if ctx.options.tag_context == "trend" or not ctx.categorical:
        return ctx.temporal
    return ctx.categorical


def _build_bar_y(ctx: _SuggestionContext) -> Optional[ChartSuggestion]:
    pair = ctx.best_pair(_bar_dimension_pool(ctx), ctx.measures, prefer_metric_y=True)
    if pair is None:
        return None
    x_col, y_col = pair
    x_channel = _dimension_channel(x_col)
    y_value = ctx.measure_value(y_col)
    temporal = x_col.semantic == "temporal"
    return ChartSuggestion(
        id=f"barY-{x_col.column_name}-{y_col.column_name}",
        title=f"{y_col.column_name} by {x_col.column_name}",
        chart_type="barY",
        encoding=ChartEncoding(
            x=x_col.column_name,
            y=y_value,
            x_type=x_channel["type"],
            y_type="quantitative",
            x_transform=x_channel["transform"],
        ),
        rationale="Measure compared across time periods" if temporal else "Categorical dimension with numeric measure",
    )


def _build_bar_x(ctx: _SuggestionContext) -> Optional[ChartSuggestion]:
    pair = ctx.best_pair(_bar_dimension_pool(ctx), ctx.measures, prefer_metric_y=True)
    if pair is None:
        return None
    category, measure = pair
    y_channel = _dimension_channel(category)
    return ChartSuggestion(
        id=f"barX-{category.column_name}-{measure.column_name}",
        title=f"{measure.column_name} by {category.column_name}",
        chart_type="barX",
        encoding=ChartEncoding(
            x=ctx.measure_value(measure),
            y=category.column_name,
            x_type="quantitative",
            y_type=y_channel["type"],
            y_transform=y_channel["transform"],
        ),
        rationale="Horizontal bars keep long category labels readable",
    )


def _build_time_series(chart_type: str) -> Callable[[_SuggestionContext], Optional[ChartSuggestion]]:
    def build(ctx: _SuggestionContext) -> Optional[ChartSuggestion]:
        pair = ctx.best_pair(ctx.temporal, ctx.measures, prefer_metric_y=True)
        if pair is None:
            return None
        x_col, y_col = pair
        x_channel = _dimension_channel(x_col)
        aggregation = x_channel["transform"].transform.aggregation
        if chart_type == "line":
            title = f"{y_col.column_name} over time"
            rationale = f"Time series aggregated by {aggregation}" if aggregation != "none" else "Time series at full resolution"
        else:
            title = f"{y_col.column_name} trend"
            rationale = "Cumulative trend over time"
        return ChartSuggestion(
            id=f"{chart_type}-{x_col.column_name}-{y_col.column_name}",
            title=title,
            chart_type=chart_type,
            encoding=ChartEncoding(
                x=x_col.column_name,
                y=ctx.measure_value(y_col),
                x_type="temporal",
                y_type="quantitative",
                x_transform=x_channel["transform"],
            ),
            rationale=rationale,
        )
    return build


def _first_distinct_pair(measures: Sequence[AnalysisBase]) -> Optional[Tuple[AnalysisBase, AnalysisBase]]:
    for i, x_col in enumerate(measures):
        for j, y_col in enumerate(measures):
            if i != j and x_col.column_name != y_col.column_name:
                return x_col, y_col
    return None


def _build_two_measure(chart_type: str) -> Callable[[_SuggestionContext], Optional[ChartSuggestion]]:
    def build(ctx: _SuggestionContext) -> Optional[ChartSuggestion]:
        if chart_type == "dot" and ctx.row_count > SCATTER_MAX_POINTS:
            return None
        pair = _first_distinct_pair(ctx.measures)
        if pair is None:
            return None
        x_col, y_col = pair
        if chart_type == "dot":
            rationale = "Two numeric measures for correlation"
        elif ctx.row_count > SCATTER_MAX_POINTS:
            rationale = f"Density plot for large dataset ({ctx.row_count} rows)"
        else:
            rationale = "Density of two numeric measures"
        return ChartSuggestion(
            id=f"{chart_type}-{x_col.column_name}-{y_col.column_name}",
            title=f"{y_col.column_name} vs {x_col.column_name}",
            chart_type=chart_type,
            encoding=ChartEncoding(
                x=x_col.column_name,
                y=y_col.column_name,
                x_type="quantitative",
                y_type="quantitative",
            ),
            rationale=rationale,
        )
    return build


def _build_grouped_bar(ctx: _SuggestionContext) -> Optional[ChartSuggestion]:
    if not ctx.categorical or not ctx.color or not ctx.measures:
        return None

    x_col = min(ctx.categorical, key=lambda column: column.cardinality)
    colors = [
        column for column in ctx.color
        if column.column_name != x_col.column_name
        and 2 <= column.cardinality <= GROUPED_COLOR_MAX
        and x_col.cardinality * column.cardinality <= GROUPED_MAX_BARS
        and (getattr(column, "max_frequency_ratio", None) or 1) <= GROUPED_MAX_FREQUENCY_RATIO
    ]
    triple = pick_best_triple([x_col], colors, ctx.measures, ctx.column_table_map, ctx.random, ctx.metric_names)
    if triple is None:
        return None
    x_col, color_col, y_col = triple
    return ChartSuggestion(
        id=f"barY-grouped-{x_col.column_name}-{color_col.column_name}-{y_col.column_name}",
        title=f"{y_col.column_name} by {x_col.column_name} and {color_col.column_name}",
        chart_type="barY",
        encoding=ChartEncoding(
            x=x_col.column_name,
            y=ctx.measure_value(y_col),
            color=color_col.column_name,
            x_type=get_axis_type(x_col),
            y_type="quantitative",
        ),
        rationale="Multi-dimensional categorical comparison",
    )


_BUILDERS: Dict[str, Callable[[_SuggestionContext], Optional[ChartSuggestion]]] = {
    "barY": _build_bar_y,
    "barX": _build_bar_x,
    "line": _build_time_series("line"),
    "areaY": _build_time_series("areaY"),
    "dot": _build_two_measure("dot"),
    "hexbin": _build_two_measure("hexbin"),
    "heatmap": _build_two_measure("heatmap"),
    "raster": _build_two_measure("raster"),
}


# Ranking and annotation

def _annotate(suggestion: ChartSuggestion, existing_fields: Set[str]) -> ChartSuggestion:
    new_fields = [name for name in extract_fields_from_encoding(suggestion.encoding) if name not in existing_fields]
    return suggestion.model_copy(update={
        "new_fields": new_fields or None,
        "uses_existing_fields_only": not new_fields,
    })


def rank_suggestions(
    suggestions: Sequence[ChartSuggestion],
    column_table_map: Optional[Mapping[str, List[str]]] = None,
    total_tables: int = 1,
    existing_fields: Optional[Set[str]] = None,
) -> List[ChartSuggestion]:
    """
    Order suggestions best-first.

    Fewer new fields first, then suggestions covering every table of a
    multi-table insight, then more tables, then trend before comparison
    before correlation charts, then plain before color-grouped.
    """
    existing_fields = existing_fields or set()

    def key(suggestion: ChartSuggestion):
        if existing_fields:
            new_count = sum(1 for name in extract_fields_from_encoding(suggestion.encoding) if name not in existing_fields)
        else:
            new_count = 0
        encoding = suggestion.encoding
        tables = _tables_for((encoding.x, encoding.y, encoding.color, encoding.size), column_table_map)
        uses_all = total_tables > 1 and len(tables) >= total_tables
        return (
            new_count,
            not uses_all,
            -len(tables),
            CHART_PRIORITY.get(suggestion.chart_type, 5),
            1 if encoding.color else 0,
        )

    return sorted(suggestions, key=key)


def _coerce_options(options: Union[SuggestionOptions, Mapping[str, Any], None]) -> SuggestionOptions:
    if options is None:
        return SuggestionOptions()
    if isinstance(options, SuggestionOptions):
        return options
    return SuggestionOptions(**options)


def suggest_charts(
    insight: Optional[Insight],
    analysis: Sequence[AnalysisBase],
    row_count: int,
    fields: Optional[Mapping[str, Field]] = None,
    options: Union[SuggestionOptions, Mapping[str, Any], None] = None,
) -> List[ChartSuggestion]:
    """
    Suggest up to ``options.limit`` complete charts for an insight.

    Proposes a bar, line, area, scatter (hexbin above SCATTER_MAX_POINTS
    rows) and a color-grouped bar where the data supports them, drops
    excluded chart types and encodings and duplicates, then ranks.

    Args:
        insight: Insight whose metrics and joins steer the choice
        analysis: Column analyses of the insight's data
        row_count: Number of rows in the data
        fields: Field definitions keyed by id
        options: SuggestionOptions or an equivalent mapping

    Returns:
        Ranked, annotated suggestions
    """
    options = _coerce_options(options)
    ctx = _SuggestionContext(insight, analysis, row_count, fields, options)

    correlation_type = "hexbin" if row_count > SCATTER_MAX_POINTS else "dot"
    candidates = [
        _build_bar_y(ctx),
        _BUILDERS["line"](ctx),
        _BUILDERS["areaY"](ctx),
        _BUILDERS[correlation_type](ctx),
        _build_grouped_bar(ctx),
    ]

    excluded_types = set(options.exclude_chart_types)
    seen: Set[Tuple[str, str]] = set()
    kept: List[ChartSuggestion] = []
    for suggestion in candidates:
        if suggestion is None or suggestion.chart_type in excluded_types:
            continue
        signature = suggestion.encoding.signature
        if signature in options.exclude_encodings:
            continue
        if (suggestion.chart_type, signature) in seen:
            continue
        seen.add((suggestion.chart_type, signature))
        kept.append(suggestion)

    existing = set(options.existing_fields)
    ranked = rank_suggestions(kept, ctx.column_table_map, 1 + len(ctx.insight.joins), existing)
    result = [_annotate(suggestion, existing) for suggestion in ranked[:options.limit]]

    logger.info(
        f"Generated {len(result)} chart suggestions",
        extra={"candidates": len(kept), "row_count": row_count},
    )
    return result


def suggest_by_chart_type(
    insight: Optional[Insight],
    analysis: Sequence[AnalysisBase],
    row_count: int,
    fields: Optional[Mapping[str, Field]],
    chart_type: str,
    options: Union[SuggestionOptions, Mapping[str, Any], None] = None,
) -> Optional[ChartSuggestion]:
    """
    Best suggestion for one chart type.

    Returns:
        The suggestion, or None when the data does not pass the chart type's
        gate or the only pairing is excluded
    """
    builder = _BUILDERS.get(chart_type)
    if builder is None:
        raise ValueError(f"Unknown chart type '{chart_type}'")

    options = _coerce_options(options)
    ctx = _SuggestionContext(insight, analysis, row_count, fields, options)
    suggestion = builder(ctx)
    if suggestion is None or suggestion.encoding.signature in options.exclude_encodings:
        return None
    return _annotate(suggestion, set(options.existing_fields))


def suggest_for_all_chart_types(
    insight: Optional[Insight],
    analysis: Sequence[AnalysisBase],
    row_count: int,
    fields: Optional[Mapping[str, Field]],
    chart_types: Sequence[str],
    options: Union[SuggestionOptions, Mapping[str, Any], None] = None,
) -> Dict[str, Optional[ChartSuggestion]]:
    return {
        chart_type: suggest_by_chart_type(insight, analysis, row_count, fields, chart_type, options)
        for chart_type in chart_types
    }


def get_chart_type_unavailable_reason(chart_type: str, analysis: Sequence[AnalysisBase]) -> Optional[str]:
    """
    Short explanation of why the data cannot support a chart type.

    Returns:
        A "Requires ..." reason, or None when the chart type is available
    """
    usable = [
        column for column in analysis
        if column.semantic not in BLOCKED_SEMANTICS and not looks_like_identifier(column.column_name)
    ]
    numeric = sum(1 for column in usable if column.semantic == "numerical")
    dates = sum(1 for column in usable if column.semantic == "temporal")
    categories = sum(1 for column in usable if column.semantic in CATEGORY_LIKE_SEMANTICS) + dates

    if chart_type in ("line", "areaY"):
        if dates == 0:
            return "Requires date column"
        if numeric == 0:
            return "Requires numeric column"
    elif chart_type == "dot" or chart_type in DENSITY_CHART_TYPES:
        if numeric < 2:
            return "Requires 2+ numeric columns"
    elif chart_type in ("barY", "barX"):
        if categories == 0:
            return "Requires category column"
        if numeric == 0:
            return "Requires numeric column"
    return None


def _comparison_suggestion(insight, analysis, row_count, fields, options) -> Optional[ChartSuggestion]:
    vertical = suggest_by_chart_type(insight, analysis, row_count, fields, "barY", options)
    if vertical is None:
        return None
    x_column = next((column for column in analysis if column.column_name == vertical.encoding.x), None)
    if x_column is not None and x_column.cardinality > COLOR_MAX:
        return suggest_by_chart_type(insight, analysis, row_count, fields, "barX", options) or vertical
    return vertical


def suggest_by_tag(
    insight: Optional[Insight],
    analysis: Sequence[AnalysisBase],
    row_count: int,
    fields: Optional[Mapping[str, Field]] = None,
    options: Union[SuggestionOptions, Mapping[str, Any], None] = None,
) -> List[TagSuggestion]:
    """
    One suggestion per analytical tag, in tag order.

    comparison uses a bar (horizontal past 12 categories), trend a line,
    correlation a scatter (hexbin above SCATTER_MAX_POINTS rows) and
    distribution a hexbin. Tags the data cannot serve are left out.
    """
    base = _coerce_options(options)
    results: List[TagSuggestion] = []

    for tag in get_available_tags():
        tag_options = base.model_copy(update={"tag_context": tag})
        if tag == "comparison":
            suggestion = _comparison_suggestion(insight, analysis, row_count, fields, tag_options)
        elif tag == "trend":
            suggestion = suggest_by_chart_type(insight, analysis, row_count, fields, "line", tag_options)
        elif tag == "correlation":
            chart_type = "hexbin" if row_count > SCATTER_MAX_POINTS else "dot"
            suggestion = suggest_by_chart_type(insight, analysis, row_count, fields, chart_type, tag_options)
        else:
            suggestion = suggest_by_chart_type(insight, analysis, row_count, fields, "hexbin", tag_options)

        if suggestion is None:
            continue
        tag_meta = CHART_TAG_METADATA[tag]
        results.append(TagSuggestion(
            tag=tag,
            chart_type=suggestion.chart_type,
            tag_display_name=tag_meta.display_name,
            tag_description=tag_meta.description,
            chart_display_name=CHART_TYPE_METADATA[suggestion.chart_type].display_name,
            suggestion=suggestion,
        ))

    return results


__all__ = [
    "SCATTER_MAX_POINTS",
    "SeededRandom",
    "get_alternative_chart_types",
    "get_chart_type_unavailable_reason",
    "get_metric_score",
    "pick_best_pair",
    "pick_best_triple",
    "rank_suggestions",
    "shuffle_with_seed",
    "suggest_by_chart_type",
    "suggest_by_tag",
    "suggest_for_all_chart_types",
    "suggest_charts",
]

"""
Encoding value codec.

Channel assignments travel as prefixed ids: ``field:<id>`` for dimension
fields and ``metric:<id>`` for insight metrics. Ids stay stable when fields
or metrics are renamed. Anything else (bare column names, SQL expressions
like ``sum(revenue)``) is invalid and never coerced.
"""
from typing import Iterable, Optional

from chartadvisor.core.schemas import (
    CompiledInsight,
    EncodingResolution,
    Field,
    InsightMetric,
    ParsedEncoding,
)

FIELD_PREFIX = "field:"
METRIC_PREFIX = "metric:"

_PREFIXES = {"field": FIELD_PREFIX, "metric": METRIC_PREFIX}


def parse_encoding(value: Optional[str]) -> Optional[ParsedEncoding]:
    """
    Split an encoding value into its kind and id.

    Returns:
        ParsedEncoding, or None for an empty value, an unknown prefix or an
        empty id
    """
    if not value:
        return None
    for kind, prefix in _PREFIXES.items():
        if value.startswith(prefix):
            encoding_id = value[len(prefix):]
            if not encoding_id:
                return None
            return ParsedEncoding(type=kind, id=encoding_id)
    return None


def build_encoding(kind: str, encoding_id: str) -> str:
    if kind not in _PREFIXES:
        raise ValueError(f"Unknown encoding kind '{kind}', expected 'field' or 'metric'")
    if not encoding_id:
        raise ValueError("Encoding id must not be empty")
    return f"{_PREFIXES[kind]}{encoding_id}"


def field_encoding(field_id: str) -> str:
    return build_encoding("field", field_id)


def metric_encoding(metric_id: str) -> str:
    return build_encoding("metric", metric_id)


def is_field_encoding(value: Optional[str]) -> bool:
    parsed = parse_encoding(value)
    return parsed is not None and parsed.type == "field"


def is_metric_encoding(value: Optional[str]) -> bool:
    parsed = parse_encoding(value)
    return parsed is not None and parsed.type == "metric"


def is_valid_encoding(value: Optional[str]) -> bool:
    return parse_encoding(value) is not None


def _find_by_id(items: Iterable, item_id: str):
    for item in items:
        if item.id == item_id:
            return item
    return None


def resolve_for_analysis(value: Optional[str], context: Optional[CompiledInsight]) -> EncodingResolution:
    """
    Resolve an encoding value to the column it reads, for analysis lookups.

    A field resolves to its ``column_name`` (falling back to
    ``source_column``). A metric resolves to the column it aggregates, which
    may be None for ``count(*)``-style metrics.

    Args:
        value: Encoding value
        context: Compiled insight holding the known dimensions and metrics

    Returns:
        EncodingResolution; ``valid`` is False for a malformed value or an id
        that is not known to the insight
    """
    parsed = parse_encoding(value)
    if parsed is None:
        return EncodingResolution(valid=False)

    context = context or CompiledInsight()

    if parsed.type == "metric":
        metric: Optional[InsightMetric] = _find_by_id(context.metrics, parsed.id)
        if metric is None:
            return EncodingResolution(valid=False, is_metric=True)
        return EncodingResolution(valid=True, is_metric=True, column_name=metric.column_name)

    field: Optional[Field] = _find_by_id(context.dimensions, parsed.id)
    if field is None:
        return EncodingResolution(valid=False)
    return EncodingResolution(
        valid=True,
        is_metric=False,
        column_name=field.column_name or field.source_column,
    )

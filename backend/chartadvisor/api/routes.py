import logging
from typing import Any, Dict, List, Literal, Optional

import pydantic
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from chartadvisor.core.config import get_settings
from chartadvisor.core.errors import ErrorCodes, get_error_response
from chartadvisor.core.performance import track_performance
from chartadvisor.core.rate_limit import engine_rate_limit, limiter
from chartadvisor.core.schemas import (
    AnalysisBase,
    ColumnAnalysis,
    CompiledInsight,
    EncodingChannel,
    Field as InsightField,
    Insight,
    SuggestionOptions,
)
from chartadvisor.services.auto_select import auto_select_encoding
from chartadvisor.services.axis_warnings import get_encoding_warning
from chartadvisor.services.chart_types import (
    CHART_TAG_METADATA,
    CHART_TYPE_METADATA,
    CHART_TYPES,
    get_alternative_chart_types,
    get_available_tags,
    get_chart_types_for_tag,
    get_tags_for_chart_type,
    is_chart_type,
)
from chartadvisor.services.enforcer import (
    get_axis_semantic_label,
    get_swapped_chart_type,
    get_valid_columns_for_channel,
    is_column_valid_for_channel,
    is_swap_allowed,
    validate_encoding,
)
from chartadvisor.services.ranking import get_ranked_column_options
from chartadvisor.services.suggestions import (
    get_chart_type_unavailable_reason,
    suggest_by_chart_type,
    suggest_by_tag,
    suggest_charts,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# Request bodies

class SuggestionRequest(BaseModel):
    insight: Insight = Insight()
    analysis: List[ColumnAnalysis] = []
    row_count: int = pydantic.Field(default=0, ge=0)
    fields: Dict[str, InsightField] = {}
    options: SuggestionOptions = SuggestionOptions()


class EncodingValidationRequest(BaseModel):
    chart_type: str
    encoding: Dict[str, Optional[str]] = {}
    analysis: List[ColumnAnalysis] = []
    compiled_insight: Optional[CompiledInsight] = None


class ValidColumnsRequest(BaseModel):
    channel: EncodingChannel
    chart_type: str
    analysis: List[ColumnAnalysis] = []
    compiled_insight: Optional[CompiledInsight] = None


class ColumnCheckRequest(BaseModel):
    encoding_value: Optional[str] = None
    channel: EncodingChannel
    chart_type: str
    analysis: List[ColumnAnalysis] = []
    compiled_insight: Optional[CompiledInsight] = None


class EncodingWarningRequest(ColumnCheckRequest):
    other_axis_encoding_value: Optional[str] = None


class RankColumnsRequest(BaseModel):
    columns: List[str]
    axis: Literal["x", "y"]
    chart_type: str
    analysis: List[ColumnAnalysis] = []
    other_axis_column: Optional[str] = None


class ColumnDescriptor(BaseModel):
    name: str
    type: str = "string"


class AutoSelectRequest(BaseModel):
    chart_type: str
    columns: List[ColumnDescriptor] = []
    analysis: List[ColumnAnalysis] = []
    fields: Dict[str, InsightField] = {}
    current_encoding: Dict[str, Any] = {}
    insight: Optional[Insight] = None


# Request guards

def _correlation_id(request: Request) -> str:
    return getattr(request.state, 'correlation_id', 'unknown')


def _require_chart_type(chart_type: str, request: Request) -> None:
    if is_chart_type(chart_type):
        return
    error_info = get_error_response(ErrorCodes.UNKNOWN_CHART_TYPE, f"Received '{chart_type}'.")
    error_info['correlation_id'] = _correlation_id(request)
    raise HTTPException(status_code=400, detail=error_info)


def _require_column_count(analysis: List[AnalysisBase], request: Request) -> None:
    max_columns = get_settings().max_analysis_columns
    if len(analysis) <= max_columns:
        return
    error_info = get_error_response(
        ErrorCodes.TOO_MANY_COLUMNS,
        f"Maximum is {max_columns} columns. Your request has {len(analysis)}."
    )
    error_info['correlation_id'] = _correlation_id(request)
    raise HTTPException(status_code=413, detail=error_info)


def _effective_options(options: SuggestionOptions) -> SuggestionOptions:
    """Apply the configured default limit and clamp to the configured maximum."""
    settings = get_settings()
    limit = options.limit if 'limit' in options.model_fields_set else settings.default_suggestion_limit
    return options.model_copy(update={'limit': min(limit, settings.max_suggestion_limit)})


# Catalogue

@router.get("/health")
async def health_check():
    return {"status": "ok"}


@router.get("/chart-types")
async def list_chart_types():
    """List every chart type with its metadata, and every tag with its chart types."""
    return {
        "chart_types": [
            {"chart_type": chart_type, **CHART_TYPE_METADATA[chart_type].model_dump()}
            for chart_type in CHART_TYPES
        ],
        "tags": [
            {
                "tag": tag,
                **CHART_TAG_METADATA[tag].model_dump(),
                "chart_types": get_chart_types_for_tag(tag),
            }
            for tag in get_available_tags()
        ],
    }


@router.get("/chart-types/{chart_type}")
async def get_chart_type(chart_type: str, request: Request):
    _require_chart_type(chart_type, request)
    return {
        "chart_type": chart_type,
        **CHART_TYPE_METADATA[chart_type].model_dump(),
        "swap_allowed": is_swap_allowed(chart_type),
        "swapped_chart_type": get_swapped_chart_type(chart_type),
        "axis_labels": {
            "x": get_axis_semantic_label("x", chart_type),
            "y": get_axis_semantic_label("y", chart_type),
        },
        "alternatives": get_alternative_chart_types(chart_type),
        "tags": get_tags_for_chart_type(chart_type),
    }


# Suggestions

@router.post("/suggestions")
@limiter.limit(engine_rate_limit)
@track_performance("suggest_charts")
async def suggestions(request: Request, body: SuggestionRequest):
    """
    Suggest complete, ranked charts for an insight.

    The response carries at most ``options.limit`` suggestions; the limit
    defaults to DEFAULT_SUGGESTION_LIMIT and is capped at MAX_SUGGESTION_LIMIT.
    """
    _require_column_count(body.analysis, request)

    options = _effective_options(body.options)
    results = suggest_charts(body.insight, body.analysis, body.row_count, body.fields, options)
    return {"suggestions": results}


@router.post("/suggestions/by-tag")
@limiter.limit(engine_rate_limit)
@track_performance("suggest_by_tag")
async def suggestions_by_tag(request: Request, body: SuggestionRequest):
    """One suggestion per analytical tag the data can serve."""
    _require_column_count(body.analysis, request)
    results = suggest_by_tag(body.insight, body.analysis, body.row_count, body.fields, body.options)
    return {"suggestions": results}


@router.post("/suggestions/{chart_type}")
@limiter.limit(engine_rate_limit)
@track_performance("suggest_by_chart_type")
async def suggestion_for_chart_type(chart_type: str, request: Request, body: SuggestionRequest):
    """
    Best suggestion for one chart type.

    When the data can't support the chart type, ``suggestion`` is null and
    ``unavailable_reason`` explains what is missing.
    """
    _require_chart_type(chart_type, request)
    _require_column_count(body.analysis, request)

    suggestion = suggest_by_chart_type(
        body.insight, body.analysis, body.row_count, body.fields, chart_type, body.options
    )
    return {
        "chart_type": chart_type,
        "suggestion": suggestion,
        "unavailable_reason": get_chart_type_unavailable_reason(chart_type, body.analysis),
    }


# Encoding rules

@router.post("/encodings/validate")
@limiter.limit(engine_rate_limit)
@track_performance("validate_encoding")
async def validate_encoding_endpoint(request: Request, body: EncodingValidationRequest):
    _require_chart_type(body.chart_type, request)
    _require_column_count(body.analysis, request)
    errors = validate_encoding(body.encoding, body.chart_type, body.analysis, body.compiled_insight)
    return {"valid": not errors, "errors": errors}


@router.post("/encodings/valid-columns")
@limiter.limit(engine_rate_limit)
@track_performance("valid_columns")
async def valid_columns(request: Request, body: ValidColumnsRequest):
    _require_chart_type(body.chart_type, request)
    _require_column_count(body.analysis, request)
    columns = get_valid_columns_for_channel(body.channel, body.chart_type, body.analysis, body.compiled_insight)
    return {"columns": columns}


@router.post("/encodings/check")
@limiter.limit(engine_rate_limit)
@track_performance("check_encoding")
async def check_encoding(request: Request, body: ColumnCheckRequest):
    _require_chart_type(body.chart_type, request)
    _require_column_count(body.analysis, request)
    return is_column_valid_for_channel(
        body.encoding_value, body.channel, body.chart_type, body.analysis, body.compiled_insight
    )


@router.post("/encodings/warning")
@limiter.limit(engine_rate_limit)
@track_performance("encoding_warning")
async def encoding_warning(request: Request, body: EncodingWarningRequest):
    _require_chart_type(body.chart_type, request)
    _require_column_count(body.analysis, request)
    warning = get_encoding_warning(
        body.encoding_value,
        body.channel,
        body.chart_type,
        body.analysis,
        body.compiled_insight,
        body.other_axis_encoding_value,
    )
    return {"warning": warning}


@router.post("/columns/rank")
@limiter.limit(engine_rate_limit)
@track_performance("rank_columns")
async def rank_columns(request: Request, body: RankColumnsRequest):
    _require_chart_type(body.chart_type, request)
    _require_column_count(body.analysis, request)
    options = get_ranked_column_options(
        body.columns, body.axis, body.chart_type, body.analysis, body.other_axis_column
    )
    return {"options": options}


@router.post("/encodings/auto-select")
@limiter.limit(engine_rate_limit)
@track_performance("auto_select_encoding")
async def auto_select(request: Request, body: AutoSelectRequest):
    """
    Pick x and y for a chart type switch.

    Column analyses are used when given; otherwise the ``{name, type}``
    column descriptors are typed on the fly.
    """
    _require_chart_type(body.chart_type, request)
    columns = body.analysis or [column.model_dump() for column in body.columns]
    _require_column_count(columns, request)

    encoding = auto_select_encoding(
        body.chart_type, columns, body.fields, body.current_encoding, body.insight
    )
    return {"encoding": encoding}

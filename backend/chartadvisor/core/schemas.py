"""
Pydantic schemas shared by the encoding engine and the API.

Column analyses are a tagged union keyed by ``data_type``; each variant only
carries the statistics that make sense for it and restricts ``semantic`` to
the tags allowed for that data type.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Set, Union

import pydantic
from pydantic import BaseModel, BeforeValidator, ConfigDict, TypeAdapter


ChartType = Literal["barY", "barX", "line", "areaY", "dot", "hexbin", "heatmap", "raster"]
ChartTag = Literal["comparison", "trend", "correlation", "distribution"]
EncodingChannel = Literal["x", "y", "color", "size"]
AxisType = Literal["quantitative", "nominal", "ordinal", "temporal"]
AggregationType = Literal["sum", "avg", "count", "count_distinct", "min", "max"]

SEMANTICS_BY_DATA_TYPE: Dict[str, Set[str]] = {
    "string": {"text", "identifier", "email", "url", "uuid", "categorical"},
    "number": {"numerical", "identifier"},
    "date": {"temporal"},
    "boolean": {"boolean"},
    "array": {"reference"},
    "unknown": {"unknown"},
}


# Column analysis variants

class AnalysisBase(BaseModel):
    column_name: str
    field_id: Optional[str] = None
    cardinality: int = pydantic.Field(default=0, ge=0)
    uniqueness: float = pydantic.Field(default=0.0, ge=0.0, le=1.0)
    null_count: int = pydantic.Field(default=0, ge=0)
    sample_values: List[Any] = []


class StringAnalysis(AnalysisBase):
    data_type: Literal["string"] = "string"
    semantic: Literal["text", "identifier", "email", "url", "uuid", "categorical"] = "categorical"
    min_length: Optional[float] = None
    max_length: Optional[float] = None
    avg_length: Optional[float] = None
    pattern: Optional[str] = None
    max_frequency_ratio: Optional[float] = None


class NumberAnalysis(AnalysisBase):
    data_type: Literal["number"] = "number"
    semantic: Literal["numerical", "identifier"] = "numerical"
    min: Optional[float] = None
    max: Optional[float] = None
    std_dev: Optional[float] = None
    zero_count: Optional[int] = None


class DateAnalysis(AnalysisBase):
    data_type: Literal["date"] = "date"
    semantic: Literal["temporal"] = "temporal"
    min_date: Optional[float] = None  # epoch milliseconds
    max_date: Optional[float] = None


class BooleanAnalysis(AnalysisBase):
    data_type: Literal["boolean"] = "boolean"
    semantic: Literal["boolean"] = "boolean"
    true_count: Optional[int] = None
    false_count: Optional[int] = None


class ArrayAnalysis(AnalysisBase):
    data_type: Literal["array"] = "array"
    semantic: Literal["reference"] = "reference"
    avg_length: Optional[float] = None


class UnknownAnalysis(AnalysisBase):
    data_type: Literal["unknown"] = "unknown"
    semantic: Literal["unknown"] = "unknown"


_COMMON_ANALYSIS_KEYS = ("column_name", "field_id", "cardinality", "uniqueness", "null_count", "sample_values")


def _coerce_unrecognised(value: Any) -> Any:
    """Read records with an unknown data type or a foreign semantic as ``unknown``."""
    if not isinstance(value, dict):
        return value
    data_type = value.get("data_type")
    semantics = SEMANTICS_BY_DATA_TYPE.get(data_type)
    if semantics is not None and value.get("semantic", "") in semantics | {""}:
        return value
    coerced = {key: value[key] for key in _COMMON_ANALYSIS_KEYS if key in value}
    coerced["data_type"] = "unknown"
    coerced["semantic"] = "unknown"
    return coerced


ColumnAnalysis = Annotated[
    Union[StringAnalysis, NumberAnalysis, DateAnalysis, BooleanAnalysis, ArrayAnalysis, UnknownAnalysis],
    pydantic.Field(discriminator="data_type"),
    BeforeValidator(_coerce_unrecognised),
]

_analysis_list_adapter = TypeAdapter(List[ColumnAnalysis])


def parse_analyses(records: List[Any]) -> List[AnalysisBase]:
    """Validate a list of analysis records (dicts or models) into variant models."""
    return _analysis_list_adapter.validate_python(list(records))


class TableAnalysis(BaseModel):
    """Cached analysis of one table, as handed over by the column analyzer."""
    id: str
    columns: List[ColumnAnalysis] = []
    field_hash: Optional[str] = None
    row_count: Optional[int] = None


# Insight model

class Field(BaseModel):
    """A named dimension backed by a source column."""
    id: str
    name: str = ""
    column_name: Optional[str] = None
    source_column: Optional[str] = None
    data_type: Optional[str] = None
    table_id: Optional[str] = None
    is_identifier: bool = False
    is_reference: bool = False


class InsightMetric(BaseModel):
    """A named aggregation over a field."""
    id: str
    name: Optional[str] = None
    aggregation: AggregationType = "sum"
    field_id: Optional[str] = None
    column_name: Optional[str] = None
    source_table: Optional[str] = None


class CompiledInsight(BaseModel):
    dimensions: List[Field] = []
    metrics: List[InsightMetric] = []


class Insight(BaseModel):
    id: str = ""
    name: str = ""
    selected_fields: List[str] = []
    metrics: List[InsightMetric] = []
    joins: List[Dict[str, Any]] = []


# Encodings

class ParsedEncoding(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["field", "metric"]
    id: str


class EncodingResolution(BaseModel):
    valid: bool
    is_metric: bool = False
    column_name: Optional[str] = None


class TemporalDateTransform(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["temporal"] = "temporal"
    aggregation: Literal["none", "yearWeek", "yearMonth", "year"]


class CategoricalDateTransform(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["categorical"] = "categorical"
    group_by: Literal["monthName", "dayOfWeek", "quarter"]


DateTransform = Annotated[
    Union[TemporalDateTransform, CategoricalDateTransform],
    pydantic.Field(discriminator="kind"),
]


class ChannelTransform(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["date"] = "date"
    transform: DateTransform


class ChartEncoding(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: Optional[str] = None
    y: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    x_type: Optional[AxisType] = None
    y_type: Optional[AxisType] = None
    x_transform: Optional[ChannelTransform] = None
    y_transform: Optional[ChannelTransform] = None

    @property
    def signature(self) -> str:
        """Composite ``x|y|color`` key used for dedupe and exclusion."""
        return "|".join([self.x or "", self.y or "", self.color or ""])


# Engine results

class ColumnSuitability(BaseModel):
    suitable: bool
    reason: Optional[str] = None


class AxisWarning(BaseModel):
    message: str
    reason: str


class RankedColumnOption(BaseModel):
    label: str
    value: str
    score: int
    warning: Optional[AxisWarning] = None


class ChartSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    chart_type: ChartType
    encoding: ChartEncoding
    rationale: Optional[str] = None
    new_fields: Optional[List[str]] = None
    uses_existing_fields_only: Optional[bool] = None


class TagSuggestion(BaseModel):
    tag: ChartTag
    chart_type: ChartType
    tag_display_name: str
    tag_description: str
    chart_display_name: str
    suggestion: ChartSuggestion


class SuggestionOptions(BaseModel):
    """Knobs for suggestion generation; unknown keys are rejected."""
    model_config = ConfigDict(extra="forbid")

    limit: int = pydantic.Field(default=3, ge=1)
    seed: Optional[int] = None
    exclude_chart_types: List[ChartType] = []
    exclude_encodings: Set[str] = set()
    existing_fields: List[str] = []
    column_table_map: Optional[Dict[str, List[str]]] = None
    tag_context: Optional[ChartTag] = None

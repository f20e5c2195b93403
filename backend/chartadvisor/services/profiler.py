"""
Type-only column analyses.

Auto-selection only needs to know which columns are numbers, dates,
booleans or categories. These helpers derive that from a pandas DataFrame's
dtypes or from ``{name, type}`` column descriptors without computing any
statistics.
"""
import logging
from typing import Any, Dict, List, Sequence

import pandas as pd
from pandas.api.types import is_bool_dtype, is_datetime64_any_dtype, is_numeric_dtype

from chartadvisor.core.schemas import (
    AnalysisBase,
    BooleanAnalysis,
    DateAnalysis,
    NumberAnalysis,
    StringAnalysis,
)

logger = logging.getLogger(__name__)

NUMBER_TYPES = {"number", "integer", "float", "decimal", "double"}
DATE_TYPES = {"date", "datetime", "timestamp", "time"}


def infer_column_type(dtype) -> str:
    """Map a pandas dtype (or Series) to number, date, boolean or string."""
    # bool is checked first: pandas treats it as numeric
    if is_bool_dtype(dtype):
        return 'boolean'
    if is_datetime64_any_dtype(dtype):
        return 'date'
    if is_numeric_dtype(dtype):
        return 'number'
    return 'string'


def _analysis_for_type(column_name: str, type_name: str) -> AnalysisBase:
    type_name = str(type_name).lower()
    if type_name in NUMBER_TYPES:
        return NumberAnalysis(column_name=column_name, min=0, max=0)
    if type_name in DATE_TYPES:
        return DateAnalysis(column_name=column_name, min_date=0, max_date=0)
    if type_name == 'boolean':
        return BooleanAnalysis(column_name=column_name, true_count=0, false_count=0)
    return StringAnalysis(column_name=column_name, semantic='categorical')


def analysis_from_columns(columns: Sequence[Dict[str, Any]]) -> List[AnalysisBase]:
    """
    Build type-only analyses from column descriptors.

    Args:
        columns: Items with ``name`` and ``type``; type strings are matched
            case-insensitively and anything unrecognised becomes a
            categorical string

    Returns:
        One analysis per descriptor, in input order
    """
    return [_analysis_for_type(column["name"], column.get("type", "")) for column in columns]


def analysis_from_dataframe(df: pd.DataFrame) -> List[AnalysisBase]:
    """Build type-only analyses from a DataFrame's dtypes."""
    analyses = [
        _analysis_for_type(str(column_name), infer_column_type(dtype))
        for column_name, dtype in zip(df.columns, df.dtypes)
    ]
    logger.debug(f"Derived {len(analyses)} column types from DataFrame")
    return analyses

"""
Column classification helpers.

Thresholds, the identifier-name heuristic and the semantic predicates every
rule layer (enforcer, warnings, ranking, suggestions) reads from.
"""
import re
import logging
from typing import Dict, Iterable, List, Mapping, Optional

from chartadvisor.core.schemas import AnalysisBase, TableAnalysis

logger = logging.getLogger(__name__)

# Cardinality thresholds
COLOR_MAX = 12
COLOR_MIN = 2
CATEGORICAL_X_MAX = 50
CATEGORICAL_RATIO = 0.2

# Above this many distinct values a column is "high cardinality" for
# numerical-on-color, bar-axis and line-X heuristics.
HIGH_CARDINALITY = 20

BLOCKED_SEMANTICS = frozenset({"identifier", "reference", "email", "url", "uuid"})
IDENTIFIER_SEMANTICS = frozenset({"identifier", "uuid"})
REFERENCE_SEMANTICS = frozenset({"reference", "url", "email"})
DIMENSION_SEMANTICS = frozenset({"categorical", "temporal", "boolean"})
CATEGORY_LIKE_SEMANTICS = frozenset({"categorical", "text", "boolean"})

_ID_PATTERNS = [
    re.compile(r"^id$", re.IGNORECASE),
    re.compile(r"_id$", re.IGNORECASE),
    re.compile(r"^id_", re.IGNORECASE),
    re.compile(r"Id$"),  # camelCase userId, orderId
    re.compile(r"^uuid$", re.IGNORECASE),
    re.compile(r"^guid$", re.IGNORECASE),
    re.compile(r"^_rowindex$", re.IGNORECASE),
    re.compile(r"^rowindex$", re.IGNORECASE),
    re.compile(r"key$", re.IGNORECASE),
    re.compile(r"^pk$", re.IGNORECASE),
]

_NOT_ID_PATTERNS = [
    re.compile(r"zipcode$", re.IGNORECASE),
    re.compile(r"postcode$", re.IGNORECASE),
    re.compile(r"areacode$", re.IGNORECASE),
]


def looks_like_identifier(column_name: Optional[str]) -> bool:
    """
    Guess from a column name alone whether it holds identifiers.

    Names like ``zipcode`` are excluded before the identifier patterns run.

    Args:
        column_name: Column name to inspect

    Returns:
        True if the name matches an identifier pattern
    """
    if not column_name:
        return False
    if any(pattern.search(column_name) for pattern in _NOT_ID_PATTERNS):
        return False
    return any(pattern.search(column_name) for pattern in _ID_PATTERNS)


def is_blocked_column(column: AnalysisBase) -> bool:
    """Identifier/reference semantics or an identifier-looking name."""
    return column.semantic in BLOCKED_SEMANTICS or looks_like_identifier(column.column_name)


def is_categorical(column: AnalysisBase) -> bool:
    return column.semantic in ("categorical", "boolean")


def is_temporal(column: AnalysisBase) -> bool:
    return column.semantic == "temporal"


def is_numerical(column: AnalysisBase) -> bool:
    return column.semantic == "numerical"


def is_continuous(column: AnalysisBase) -> bool:
    return column.semantic in ("temporal", "numerical")


def find_column(analysis: Iterable[AnalysisBase], column_name: Optional[str]) -> Optional[AnalysisBase]:
    if not column_name:
        return None
    for column in analysis:
        if column.column_name == column_name:
            return column
    return None


def merge_analyses(table_analyses: List[TableAnalysis]) -> List[AnalysisBase]:
    """
    Combine the cached analyses of several tables into one column list.

    Used for joined views. When two tables report the same column name the
    first occurrence wins.
    """
    if not table_analyses:
        return []
    if len(table_analyses) == 1:
        return list(table_analyses[0].columns)

    seen = set()
    merged: List[AnalysisBase] = []
    for table in table_analyses:
        for column in table.columns:
            if column.column_name in seen:
                logger.debug(f"Skipping duplicate column {column.column_name} from table {table.id}")
                continue
            seen.add(column.column_name)
            merged.append(column)
    return merged


def are_analyses_valid(
    analyses: Mapping[str, Optional[TableAnalysis]],
    expected_field_hashes: Dict[str, str],
) -> bool:
    """
    Check that every table has a usable, up-to-date analysis.

    Args:
        analyses: Table id -> cached analysis (None when missing)
        expected_field_hashes: Table id -> field hash the analysis must match

    Returns:
        False if any analysis is missing, stale or empty
    """
    for table_id, analysis in analyses.items():
        if analysis is None:
            logger.debug(f"Missing analysis for table {table_id}")
            return False

        expected_hash = expected_field_hashes.get(table_id)
        if expected_hash and analysis.field_hash != expected_hash:
            logger.debug(
                f"Field hash mismatch for table {table_id}",
                extra={"expected": expected_hash, "actual": analysis.field_hash},
            )
            return False

        if not analysis.columns:
            logger.debug(f"Empty analysis for table {table_id}")
            return False

    return True

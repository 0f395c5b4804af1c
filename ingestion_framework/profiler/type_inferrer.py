"""
Type Inferrer - cell classification, numeric coercion and type inference.

This module holds the small pure functions that both the preview path and
the finalize path rely on, so the two can never disagree about what counts
as missing or numeric:

    classify_cell("  ")    -> CellFlag.MISSING
    classify_cell("N/A")   -> CellFlag.PLACEHOLDER
    coerce_number(" 3.5")  -> 3.5
    coerce_number("1_000") -> None   (strict decimal literals only)

Design Decisions:
    - Numeric parsing is deliberately strict: optional sign, digits with an
      optional fraction, optional exponent. Python's float() would accept
      "nan", "inf" and "1_000", none of which should make a column numeric.
    - A coercion failure is never an error; the value is simply excluded
      from numeric aggregates.
    - Target inference favours regression for wide numeric ranges, but a
      numeric target with at most two distinct values is always treated as
      a binary label.
"""

import logging
import math
import re
from typing import Any, Iterable, List, Optional

from ingestion_framework.core.constants import (
    CLASSIFICATION_UNIQUE_RATIO,
    MAX_CLASSIFICATION_UNIQUE,
    MISSING_VALUE,
    PLACEHOLDER_TOKENS,
)
from ingestion_framework.core.results import CellFlag, InferredType, TargetType

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')

# No leading zeros, no explicit plus sign
_CANONICAL_INTEGER_RE = re.compile(r'^-?(?:0|[1-9]\d*)$')
_CANONICAL_DECIMAL_RE = re.compile(r'^-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?$')

# Numeric targets with this many distinct values or fewer are binary labels
BINARY_MAX_UNIQUE = 2


def coerce_number(value: Any) -> Optional[float]:
    """
    Parse a value as a number.

    Args:
        value: Raw cell (usually a string) or an already-numeric value

    Returns:
        The float value, or None if the value is not numeric
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if number == number and number not in (float("inf"), float("-inf")) else None

    text = str(value).strip()
    if not _NUMBER_RE.match(text):
        return None
    number = float(text)
    # "1e999" overflows to inf
    return number if math.isfinite(number) else None


def is_numeric(value: Any) -> bool:
    return coerce_number(value) is not None


def classify_cell(value: Any, tokens: frozenset = PLACEHOLDER_TOKENS) -> CellFlag:
    """
    Classify a raw cell as missing, placeholder or valid.

    Args:
        value: Raw cell value (None counts as missing)
        tokens: Placeholder token set (lowercase)

    Returns:
        CellFlag
    """
    if value is None:
        return CellFlag.MISSING
    trimmed = str(value).strip()
    if trimmed == "":
        return CellFlag.MISSING
    if trimmed.lower() in tokens:
        return CellFlag.PLACEHOLDER
    return CellFlag.VALID


def normalize_cell(value: Any, tokens: frozenset = PLACEHOLDER_TOKENS) -> Any:
    """
    Unify missing and placeholder cells into the single missing representation.

    Valid cells are returned unchanged (not trimmed).
    """
    if classify_cell(value, tokens) is CellFlag.VALID:
        return value
    return MISSING_VALUE


def is_missing(value: Any) -> bool:
    """True for None or a blank string (post-normalization check)."""
    return value is None or (isinstance(value, str) and value.strip() == "")


def to_typed_value(value: Any) -> Any:
    """
    Convert a normalized cell to its final typed form.

    Blank strings become None, canonical integer literals become int and
    canonical decimal literals become float. Anything else is kept verbatim,
    including codes such as "007" or "+5" whose conversion would lose
    characters. Non-string values (computed replacements) pass through.
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if text == "":
        return None
    if _CANONICAL_INTEGER_RE.match(text):
        return int(text)
    if _CANONICAL_DECIMAL_RE.match(text) and coerce_number(text) is not None:
        return float(text)
    return value


class TypeInferrer:
    """
    Column and target type inference.

    Attributes:
        placeholder_tokens: Tokens treated as placeholders (lowercase)
        max_classification_unique: Upper bound on distinct numeric values for
            a classification target
        classification_unique_ratio: Distinct count must be below this
            fraction of non-missing values for a classification target

    Example:
        >>> inferrer = TypeInferrer()
        >>> inferrer.infer_column_type(["1", "2", "NA", ""])
        <InferredType.NUMERIC: 'numeric'>
        >>> inferrer.infer_target_type(["yes", "no", "yes"])
        <TargetType.CLASSIFICATION: 'classification'>
    """

    def __init__(
        self,
        placeholder_tokens: frozenset = PLACEHOLDER_TOKENS,
        max_classification_unique: int = MAX_CLASSIFICATION_UNIQUE,
        classification_unique_ratio: float = CLASSIFICATION_UNIQUE_RATIO
    ):
        self.placeholder_tokens = frozenset(t.lower() for t in placeholder_tokens)
        self.max_classification_unique = max_classification_unique
        self.classification_unique_ratio = classification_unique_ratio

    def classify(self, value: Any) -> CellFlag:
        return classify_cell(value, self.placeholder_tokens)

    def infer_column_type(self, values: Iterable[Any]) -> InferredType:
        """
        Infer a column type from raw cells.

        Only valid cells are considered; missing and placeholder cells never
        affect the type.

        Returns:
            EMPTY if no valid cell, NUMERIC if all valid cells are numeric,
            CATEGORICAL if none are, MIXED otherwise
        """
        valid = [v for v in values if self.classify(v) is CellFlag.VALID]
        if not valid:
            return InferredType.EMPTY

        numeric_count = sum(1 for v in valid if is_numeric(v))
        if numeric_count == len(valid):
            return InferredType.NUMERIC
        if numeric_count == 0:
            return InferredType.CATEGORICAL
        return InferredType.MIXED

    def infer_target_type(self, values: Iterable[Any]) -> TargetType:
        """
        Decide whether a target column describes classification or regression.

        Rules over non-missing values:
            - none at all: regression
            - any non-numeric value: classification
            - at most two distinct numbers: classification (binary label)
            - distinct count <= max_classification_unique AND below
              classification_unique_ratio of the values: classification
            - otherwise: regression

        Args:
            values: Final target values (None or blank = missing)
        """
        present = [v for v in values if not is_missing(v)]
        if not present:
            return TargetType.REGRESSION

        numbers: List[float] = []
        for value in present:
            number = coerce_number(value)
            if number is None:
                return TargetType.CLASSIFICATION
            numbers.append(number)

        unique_count = len(set(numbers))
        if unique_count <= BINARY_MAX_UNIQUE:
            return TargetType.CLASSIFICATION

        is_discrete = (
            unique_count <= self.max_classification_unique
            and unique_count < len(present) * self.classification_unique_ratio
        )
        logger.debug(
            f"Target inference: {unique_count} distinct numeric values over "
            f"{len(present):,} samples -> {'classification' if is_discrete else 'regression'}"
        )
        return TargetType.CLASSIFICATION if is_discrete else TargetType.REGRESSION

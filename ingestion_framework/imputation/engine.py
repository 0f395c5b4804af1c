"""
Imputation Engine - normalization, row dropping and missing-value replacement.

The engine runs four steps over the complete table, in this order:

1. Normalization: blank and placeholder cells in feature and target columns
   become the single missing representation ("").
2. Replacement computation: one value per imputing feature, computed over
   the entire normalized column (zero / constant / mean / median / mode).
3. Row filtering: rows are removed once, before imputation, according to
   the policy's drop switches.
4. Imputation: missing feature cells in the surviving rows receive the
   precomputed replacement.

The target column is only ever subject to row dropping, never imputed, so
no label is fabricated.

No step raises for a malformed cell: values that do not parse as numbers
are excluded from mean/median and otherwise left alone.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import numpy as np

from ingestion_framework.core.constants import PLACEHOLDER_TOKENS
from ingestion_framework.core.policy import ResolvedPolicy, Strategy, StrategyKind
from ingestion_framework.profiler.type_inferrer import coerce_number, is_missing, normalize_cell

logger = logging.getLogger(__name__)

# Replacement used when a column offers nothing to compute from
FALLBACK_REPLACEMENT = 0

Record = Dict[str, Any]


@dataclass
class ImputationOutcome:
    """
    Result of one engine run.

    Attributes:
        rows: Surviving rows with replacements applied
        replacements: Replacement value per imputing feature
        original_row_count: Rows before filtering
        dropped_row_count: Rows removed by filtering
    """
    rows: List[Record] = field(default_factory=list)
    replacements: Dict[str, Any] = field(default_factory=dict)
    original_row_count: int = 0
    dropped_row_count: int = 0


class ImputationEngine:
    """
    Apply a ResolvedPolicy to a table of records.

    Example:
        >>> policy = resolve_policy(["a", "b"], "y", Strategy.parse("zero"))
        >>> outcome = ImputationEngine(policy).run(records)
        >>> outcome.dropped_row_count
        0
    """

    def __init__(self, policy: ResolvedPolicy, placeholder_tokens: frozenset = PLACEHOLDER_TOKENS):
        self.policy = policy
        self.placeholder_tokens = placeholder_tokens

    @property
    def governed_columns(self) -> List[str]:
        """Features plus target: the columns normalization applies to."""
        columns = list(self.policy.features)
        if self.policy.target is not None and self.policy.target not in columns:
            columns.append(self.policy.target)
        return columns

    def run(self, records: Sequence[Record]) -> ImputationOutcome:
        """
        Execute normalization, replacement computation, filtering and imputation.

        Args:
            records: Data rows as column -> raw value mappings (not modified)

        Returns:
            ImputationOutcome
        """
        normalized = self.normalize(records)
        replacements = self.compute_replacements(normalized)
        kept = self.filter_rows(normalized)
        rows = self.apply(kept, replacements)

        outcome = ImputationOutcome(
            rows=rows,
            replacements=replacements,
            original_row_count=len(normalized),
            dropped_row_count=len(normalized) - len(kept),
        )
        logger.info(
            f"Imputation complete: {outcome.original_row_count:,} rows in, "
            f"{outcome.dropped_row_count:,} dropped, {len(replacements)} columns imputed"
        )
        return outcome

    def normalize(self, records: Sequence[Record]) -> List[Record]:
        """Copy records, rewriting blank and placeholder governed cells to ""."""
        columns = self.governed_columns
        normalized = []
        for record in records:
            row = dict(record)
            for column in columns:
                if column in row:
                    row[column] = normalize_cell(row[column], self.placeholder_tokens)
            normalized.append(row)
        return normalized

    def compute_replacements(self, records: Sequence[Record]) -> Dict[str, Any]:
        """
        Compute one replacement value per imputing feature.

        Computed over all rows passed in, before any row is dropped.
        """
        replacements = {}
        for column in self.policy.imputing_columns():
            strategy = self.policy.strategy_for(column)
            present = [r.get(column) for r in records if not is_missing(r.get(column))]
            replacements[column] = compute_replacement(strategy, present)
            logger.debug(f"Replacement for '{column}' ({strategy}): {replacements[column]!r}")
        return replacements

    def filter_rows(self, records: Sequence[Record]) -> List[Record]:
        """
        Remove rows according to the drop switches.

        A row is dropped if global drop is on and any feature is missing, if
        any drop-row column is missing, or if target drop is on and the
        target is missing.
        """
        policy = self.policy
        if not policy.drop_applied:
            return list(records)

        checked = list(policy.features) if policy.global_drop else list(policy.drop_columns)
        kept = []
        for record in records:
            if any(is_missing(record.get(c)) for c in checked):
                continue
            if policy.target_drop and policy.target is not None and is_missing(record.get(policy.target)):
                continue
            kept.append(record)
        return kept

    def apply(self, records: Sequence[Record], replacements: Dict[str, Any]) -> List[Record]:
        """Fill missing feature cells with their column's replacement."""
        result = []
        for record in records:
            row = dict(record)
            for column, replacement in replacements.items():
                if is_missing(row.get(column)):
                    row[column] = replacement
            result.append(row)
        return result


def compute_replacement(strategy: Strategy, present: Sequence[Any]) -> Any:
    """
    Compute the replacement value for one column.

    Args:
        strategy: An imputing strategy (zero, constant, mean, median, mode)
        present: Non-missing normalized values of the column, in scan order

    Returns:
        zero -> 0, constant -> the literal, mean/median -> float over the
        numeric values, mode -> most frequent raw value (first seen wins
        ties). Falls back to 0 when there is nothing to compute from.
    """
    kind = strategy.kind
    if kind is StrategyKind.ZERO:
        return 0
    if kind is StrategyKind.CONSTANT:
        return strategy.value
    if not present:
        return FALLBACK_REPLACEMENT

    if kind is StrategyKind.MODE:
        # Counter.most_common orders equal counts by first occurrence
        return Counter(present).most_common(1)[0][0]

    numbers = [n for n in (coerce_number(v) for v in present) if n is not None]
    if not numbers:
        return FALLBACK_REPLACEMENT

    values = np.asarray(numbers, dtype=float)
    if kind is StrategyKind.MEAN:
        # Clamp to the observed range; float summation can drift past it
        return float(np.clip(values.mean(), values.min(), values.max()))
    if kind is StrategyKind.MEDIAN:
        return float(np.median(values))

    raise ValueError(f"Strategy {strategy} does not compute a replacement")



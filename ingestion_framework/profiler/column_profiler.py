"""
Column Profiler - per-column statistics over the preview window.

Produces the cell classifications and ColumnStats that drive interactive
display. Everything here is a pure function of the rows and structure it is
given; running it twice on the same input yields equal results.
"""

import logging
from typing import Dict, List, Sequence, Tuple

from ingestion_framework.core.constants import MAX_PLACEHOLDER_EXAMPLES
from ingestion_framework.core.results import CellFlag, ColumnStats
from ingestion_framework.profiler.structure import TableStructure, row_to_record
from ingestion_framework.profiler.type_inferrer import TypeInferrer, is_numeric

logger = logging.getLogger(__name__)


class ColumnProfiler:
    """
    Classify preview cells and aggregate per-column statistics.

    Example:
        >>> profiler = ColumnProfiler()
        >>> records, flags = profiler.flag_rows(rows[:50], structure.columns)
        >>> stats = profiler.profile(rows[:50], structure)
        >>> stats["age"].inferred_type
        <InferredType.NUMERIC: 'numeric'>
    """

    def __init__(self, type_inferrer: TypeInferrer = None):
        self.type_inferrer = type_inferrer or TypeInferrer()

    def flag_rows(
        self,
        rows: Sequence[Sequence[str]],
        columns: Sequence[str]
    ) -> Tuple[List[Dict[str, str]], List[List[CellFlag]]]:
        """
        Map rows to records and classify every cell.

        Args:
            rows: Raw rows (any rows, header included)
            columns: Resolved column names

        Returns:
            (records, cell_flags), aligned with rows
        """
        records = []
        flags = []
        for row in rows:
            record = row_to_record(row, columns)
            records.append(record)
            flags.append([self.type_inferrer.classify(record[col]) for col in columns])
        return records, flags

    def profile(self, rows: Sequence[Sequence[str]], structure: TableStructure) -> Dict[str, ColumnStats]:
        """
        Compute ColumnStats for every column.

        Only rows at or after structure.data_start_index are counted. The
        rows argument is the preview window, indexed from the first raw row.

        numeric_fraction is numeric valid values divided by non-missing
        values, where non-missing includes placeholder cells (a placeholder
        is never numeric).

        Args:
            rows: Preview window of raw rows
            structure: Resolved structure of the full input

        Returns:
            Mapping column name -> ColumnStats, in column order
        """
        data_rows = rows[structure.data_start_index:]
        records = [row_to_record(row, structure.columns) for row in data_rows]

        stats: Dict[str, ColumnStats] = {}
        for column in structure.columns:
            stats[column] = self._profile_column([r[column] for r in records])

        logger.debug(f"Profiled {len(structure.columns)} columns over {len(records)} preview data rows")
        return stats

    def _profile_column(self, values: List[str]) -> ColumnStats:
        missing = 0
        placeholder = 0
        numeric = 0
        examples: List[str] = []
        distinct = set()

        for value in values:
            flag = self.type_inferrer.classify(value)
            if flag is CellFlag.MISSING:
                missing += 1
                continue

            distinct.add(value)
            if flag is CellFlag.PLACEHOLDER:
                placeholder += 1
                token = value.strip().lower()
                if len(examples) < MAX_PLACEHOLDER_EXAMPLES and token not in examples:
                    examples.append(token)
            elif is_numeric(value):
                numeric += 1

        non_missing = len(values) - missing
        return ColumnStats(
            missing=missing,
            placeholder=placeholder,
            inferred_type=self.type_inferrer.infer_column_type(values),
            unique=len(distinct),
            numeric_fraction=numeric / non_missing if non_missing else None,
            example_placeholders=examples,
        )

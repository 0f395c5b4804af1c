"""
Structural resolution of raw rows.

Locates the header row after skipping leading rows, derives unique column
names and computes where the data rows begin. Used unchanged by both the
preview and finalize paths.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

from ingestion_framework.core.constants import EMPTY_COLUMN_NAME
from ingestion_framework.core.exceptions import (
    EmptyInputError,
    NoDataRowsError,
    OutOfRangeError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableStructure:
    """
    Resolved header and data boundaries.

    Attributes:
        columns: Unique column names in header order
        header_index: Absolute index of the header row
        data_start_index: Absolute index of the first data row
        total_rows: Number of raw rows
    """
    columns: List[str]
    header_index: int
    data_start_index: int
    total_rows: int

    @property
    def data_row_count(self) -> int:
        return max(self.total_rows - self.data_start_index, 0)


def dedupe_column_names(header: Sequence[str]) -> List[str]:
    """
    Trim header cells and make the names unique.

    Blank names become "col". The first occurrence of a name keeps it; the
    k-th later duplicate becomes "{name}_{k}" (k is bumped further if a
    literal header already uses that name).

    Example:
        >>> dedupe_column_names(["x", "x", "y", ""])
        ['x', 'x_1', 'y', 'col']
    """
    seen: Dict[str, int] = {}
    used = set()
    columns = []
    for cell in header:
        base = (cell or "").strip() or EMPTY_COLUMN_NAME
        count = seen.get(base, 0)
        name = base if count == 0 else f"{base}_{count}"
        # A literal header such as "x_1" may already occupy the suffixed name
        while name in used:
            count += 1
            name = f"{base}_{count}"
        seen[base] = count + 1
        used.add(name)
        columns.append(name)
    return columns


def resolve_structure(rows: Sequence[Sequence[str]], skip_rows: int, header_row: int) -> TableStructure:
    """
    Locate the header and data boundaries.

    Args:
        rows: All raw rows
        skip_rows: Rows to ignore before the header search
        header_row: Header position relative to the first non-skipped row

    Returns:
        TableStructure

    Raises:
        EmptyInputError: If there are no rows
        OutOfRangeError: If skip_rows or skip_rows + header_row is past the end
    """
    total_rows = len(rows)
    if total_rows == 0:
        raise EmptyInputError()

    if skip_rows < 0 or header_row < 0:
        raise OutOfRangeError(
            "skip_rows and header_row must be non-negative",
            skip_rows=skip_rows, header_row=header_row, total_rows=total_rows
        )
    if skip_rows >= total_rows:
        raise OutOfRangeError(
            f"skip_rows ({skip_rows}) must be less than the total number of rows ({total_rows})",
            skip_rows=skip_rows, header_row=header_row, total_rows=total_rows
        )

    header_index = skip_rows + header_row
    if header_index >= total_rows:
        raise OutOfRangeError(
            f"header_row ({header_row}) is out of range after skipping {skip_rows} rows "
            f"({total_rows} rows total)",
            skip_rows=skip_rows, header_row=header_row, total_rows=total_rows
        )

    columns = dedupe_column_names(rows[header_index])
    structure = TableStructure(
        columns=columns,
        header_index=header_index,
        data_start_index=header_index + 1,
        total_rows=total_rows,
    )
    logger.debug(
        f"Header at row {header_index}, {len(columns)} columns, "
        f"{structure.data_row_count:,} data rows"
    )
    return structure


def require_data_rows(structure: TableStructure) -> None:
    """Raise NoDataRowsError if nothing follows the header."""
    if structure.data_row_count == 0:
        raise NoDataRowsError()


def row_to_record(row: Sequence[str], columns: Sequence[str]) -> Dict[str, str]:
    """Map a raw row onto column names; short rows are padded with blanks."""
    return {col: (row[i] if i < len(row) and row[i] is not None else "") for i, col in enumerate(columns)}

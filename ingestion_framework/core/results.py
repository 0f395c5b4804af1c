"""
Ingestion Result Classes.

This module defines dataclasses for the two handoff artifacts of the
pipeline and the pieces they are built from:
- PreviewResult: structural preview for interactive display
- Dataset: the finalized, typed table handed to model-training code
- FinalizeResult: wrapper distinguishing "no dataset" from "dataset failed"
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pandas as pd


class CellFlag(Enum):
    """Classification of a single raw cell."""
    MISSING = "missing"
    PLACEHOLDER = "placeholder"
    VALID = "valid"


class InferredType(Enum):
    """Column type inferred from the preview window."""
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    MIXED = "mixed"
    EMPTY = "empty"


class TargetType(Enum):
    """Learning task implied by the target column."""
    CLASSIFICATION = "classification"
    REGRESSION = "regression"


@dataclass(frozen=True)
class LimitViolation:
    """
    One dataset-size limit that the input exceeds.

    Attributes:
        limit: Limit key (max_rows, max_columns, max_file_bytes, structure)
        message: Human-readable explanation
    """
    limit: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"limit": self.limit, "message": self.message}


@dataclass
class ColumnStats:
    """
    Preview statistics for one column.

    Computed over the preview window only; drives display and operator
    decisions but is never authoritative for the final dataset.

    Attributes:
        missing: Cells that are empty after trimming
        placeholder: Cells holding a placeholder token (counted separately)
        inferred_type: numeric / categorical / mixed / empty
        unique: Distinct non-missing raw values (placeholders included)
        numeric_fraction: Numeric values / non-missing values, None if no non-missing values
        example_placeholders: Up to 5 distinct lowercased placeholder tokens
    """
    missing: int = 0
    placeholder: int = 0
    inferred_type: InferredType = InferredType.EMPTY
    unique: int = 0
    numeric_fraction: Optional[float] = None
    example_placeholders: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "missing": self.missing,
            "placeholder": self.placeholder,
            "inferred_type": self.inferred_type.value,
            "unique": self.unique,
            "numeric_fraction": round(self.numeric_fraction, 4) if self.numeric_fraction is not None else None,
            "example_placeholders": list(self.example_placeholders),
        }


@dataclass
class PreviewResult:
    """
    Structural preview of raw text under one configuration.

    preview_records and cell_flags cover the first preview_limit RAW rows
    (skipped and header rows included, so display code can show them);
    stats only count rows at or after data_start_index.
    """
    success: bool
    error: Optional[str] = None
    error_details: Optional[Dict[str, Any]] = None
    raw_row_count: int = 0
    header_index: Optional[int] = None
    data_start_index: Optional[int] = None
    columns: List[str] = field(default_factory=list)
    preview_records: List[Dict[str, str]] = field(default_factory=list)
    cell_flags: List[List[CellFlag]] = field(default_factory=list)
    stats: Dict[str, ColumnStats] = field(default_factory=dict)
    config: Optional[Any] = None
    limit_errors: List[LimitViolation] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        """True while finalization must be refused."""
        return not self.success or bool(self.limit_errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "error": self.error,
            "error_details": self.error_details,
            "raw_row_count": self.raw_row_count,
            "header_index": self.header_index,
            "data_start_index": self.data_start_index,
            "columns": list(self.columns),
            "preview_records": [dict(r) for r in self.preview_records],
            "cell_flags": [[f.value for f in row] for row in self.cell_flags],
            "stats": {c: s.to_dict() for c, s in self.stats.items()},
            "config": self.config.to_dict() if self.config is not None else None,
            "limit_errors": [v.to_dict() for v in self.limit_errors],
        }


@dataclass(frozen=True)
class ImputationSummary:
    """Provenance of the row-drop and imputation pass."""
    original_row_count: int
    dropped_row_count: int
    drop_applied: bool
    drop_columns: Tuple[str, ...] = ()
    global_drop: bool = False
    target_drop: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_row_count": self.original_row_count,
            "dropped_row_count": self.dropped_row_count,
            "drop_applied": self.drop_applied,
            "drop_columns": list(self.drop_columns),
            "global_drop": self.global_drop,
            "target_drop": self.target_drop,
        }


@dataclass(frozen=True)
class Dataset:
    """
    Final, typed dataset produced by one confirmed ingestion.

    Immutable: a new ingestion replaces it wholesale.

    Attributes:
        rows: Records mapping column name to typed value (None = missing)
        features: Feature column names in order
        target: Target column name
        target_type: classification or regression
        num_classes: Distinct target values, only for classification
    """
    rows: Tuple[Mapping[str, Any], ...]
    features: Tuple[str, ...]
    target: str
    target_type: TargetType
    num_samples: int
    num_features: int
    imputation_summary: ImputationSummary
    skip_rows: int = 0
    header_row: int = 0
    num_classes: Optional[int] = None

    def column_values(self, column: str) -> List[Any]:
        return [row.get(column) for row in self.rows]

    def to_frame(self) -> pd.DataFrame:
        """Rows as a DataFrame with columns features + [target]."""
        columns = list(self.features) + [self.target]
        return pd.DataFrame([dict(r) for r in self.rows], columns=columns)

    def to_dict(self, include_rows: bool = True) -> Dict[str, Any]:
        result = {
            "features": list(self.features),
            "target": self.target,
            "target_type": self.target_type.value,
            "num_samples": self.num_samples,
            "num_features": self.num_features,
            "num_classes": self.num_classes,
            "skip_rows": self.skip_rows,
            "header_row": self.header_row,
            "imputation_summary": self.imputation_summary.to_dict(),
        }
        if include_rows:
            result["rows"] = [dict(r) for r in self.rows]
        return result


@dataclass
class FinalizeResult:
    """Outcome of a finalize attempt; exactly one of dataset / error is set."""
    success: bool
    dataset: Optional[Dataset] = None
    error: Optional[str] = None
    error_details: Optional[Dict[str, Any]] = None
    limit_errors: List[LimitViolation] = field(default_factory=list)

    def to_dict(self, include_rows: bool = False) -> Dict[str, Any]:
        return {
            "success": self.success,
            "error": self.error,
            "error_details": self.error_details,
            "limit_errors": [v.to_dict() for v in self.limit_errors],
            "dataset": self.dataset.to_dict(include_rows=include_rows) if self.dataset else None,
        }

"""Dataset Finalizer - typed records, target type and provenance summary."""

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Sequence

from ingestion_framework.core.policy import ResolvedPolicy
from ingestion_framework.core.results import Dataset, ImputationSummary, TargetType
from ingestion_framework.imputation.engine import ImputationOutcome
from ingestion_framework.profiler.type_inferrer import TypeInferrer, is_missing, to_typed_value

logger = logging.getLogger(__name__)


class DatasetFinalizer:
    """
    Package an ImputationOutcome as an immutable Dataset.

    Records are restricted to the feature and target columns and their cells
    converted to typed values (int / float / str, None for missing).
    """

    def __init__(self, type_inferrer: TypeInferrer = None):
        self.type_inferrer = type_inferrer or TypeInferrer()

    def finalize(
        self,
        outcome: ImputationOutcome,
        policy: ResolvedPolicy,
        skip_rows: int = 0,
        header_row: int = 0
    ) -> Dataset:
        """
        Build the final Dataset.

        Args:
            outcome: Rows and counts from the imputation engine
            policy: Policy the engine ran with (features, target, drop switches)
            skip_rows: Structural setting recorded for provenance
            header_row: Structural setting recorded for provenance

        Returns:
            Dataset
        """
        features = list(policy.features)
        target = policy.target
        columns = features + ([target] if target is not None and target not in features else [])

        rows = tuple(self._typed_record(r, columns) for r in outcome.rows)
        target_values = [r.get(target) for r in rows] if target is not None else []

        target_type = self.type_inferrer.infer_target_type(target_values)
        num_classes = None
        if target_type is TargetType.CLASSIFICATION:
            num_classes = count_classes(target_values)

        summary = ImputationSummary(
            original_row_count=outcome.original_row_count,
            dropped_row_count=outcome.dropped_row_count,
            drop_applied=policy.drop_applied,
            drop_columns=tuple(policy.drop_columns),
            global_drop=policy.global_drop,
            target_drop=policy.target_drop,
        )

        dataset = Dataset(
            rows=rows,
            features=tuple(features),
            target=target,
            target_type=target_type,
            num_samples=len(rows),
            num_features=len(features),
            num_classes=num_classes,
            skip_rows=skip_rows,
            header_row=header_row,
            imputation_summary=summary,
        )
        logger.info(
            f"Dataset finalized: {dataset.num_samples:,} samples, {dataset.num_features} features, "
            f"target '{target}' ({target_type.value}"
            + (f", {num_classes} classes)" if num_classes is not None else ")")
        )
        return dataset

    @staticmethod
    def _typed_record(record: Dict[str, Any], columns: List[str]) -> Mapping[str, Any]:
        return MappingProxyType({col: to_typed_value(record.get(col, "")) for col in columns})


def count_classes(values: Sequence[Any]) -> int:
    """Number of distinct non-missing values."""
    return len({v for v in values if not is_missing(v)})

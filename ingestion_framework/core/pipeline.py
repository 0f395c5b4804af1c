"""
Ingestion pipeline - orchestrates the preview and finalize paths.

Preview path (cheap, re-run on every configuration edit):
1. Split raw text into rows
2. Resolve header and data boundaries
3. Check dataset size limits (reported, not blocking)
4. Classify preview cells and profile columns

Finalize path (run once on confirmation):
1. Split the full text again, untruncated
2. Resolve structure and refuse while any size limit is exceeded
3. Resolve target/feature columns and the missing-value policy
4. Run the imputation engine and package the Dataset

Both entry points return result values. IngestionError subclasses are
caught and reported in the result; they never reach the caller.
"""

from typing import Callable, List, Optional, Sequence, Tuple

from ingestion_framework.core.config import DataLimits, IngestionConfig
from ingestion_framework.core.constants import (
    LIMIT_MAX_COLUMNS,
    LIMIT_MAX_FILE_BYTES,
    LIMIT_MAX_ROWS,
)
from ingestion_framework.core.exceptions import (
    ColumnNotFoundError,
    IngestionError,
    LimitExceededError,
)
from ingestion_framework.core.logging_config import get_logger
from ingestion_framework.core.policy import resolve_policy
from ingestion_framework.core.results import FinalizeResult, LimitViolation, PreviewResult
from ingestion_framework.imputation.engine import ImputationEngine
from ingestion_framework.imputation.finalizer import DatasetFinalizer
from ingestion_framework.loaders.row_splitter import split_rows
from ingestion_framework.profiler.column_profiler import ColumnProfiler
from ingestion_framework.profiler.structure import (
    TableStructure,
    require_data_rows,
    resolve_structure,
    row_to_record,
)
from ingestion_framework.profiler.type_inferrer import TypeInferrer

logger = get_logger(__name__)

RowSplitter = Callable[[str], List[List[str]]]


def check_limits(total_rows: int, column_count: int, byte_size: int, limits: DataLimits) -> List[LimitViolation]:
    """
    Compare table dimensions against the configured limits.

    Returns:
        One LimitViolation per exceeded limit (empty if within limits)
    """
    violations = []
    if total_rows > limits.max_rows:
        violations.append(LimitViolation(
            LIMIT_MAX_ROWS,
            f"Row count {total_rows:,} exceeds maximum {limits.max_rows:,}"
        ))
    if column_count > limits.max_columns:
        violations.append(LimitViolation(
            LIMIT_MAX_COLUMNS,
            f"Column count {column_count:,} exceeds maximum {limits.max_columns:,}"
        ))
    if byte_size > limits.max_file_bytes:
        violations.append(LimitViolation(
            LIMIT_MAX_FILE_BYTES,
            f"File size {byte_size:,} bytes exceeds maximum {limits.max_file_bytes:,} bytes"
        ))
    return violations


def resolve_columns(columns: Sequence[str], config: IngestionConfig) -> Tuple[str, List[str]]:
    """
    Determine target and feature columns.

    Target defaults to the last column; features default to every other
    column when feature_columns is None. An explicitly empty list selects
    no features. The target is never kept among the features.

    Raises:
        ColumnNotFoundError: If a configured name is not a resolved column
    """
    target = config.target_column or columns[-1]
    if target not in columns:
        raise ColumnNotFoundError(target, list(columns), role="target")

    if config.feature_columns is not None:
        for feature in config.feature_columns:
            if feature not in columns:
                raise ColumnNotFoundError(feature, list(columns), role="feature")
        features = [c for c in config.feature_columns if c != target]
    else:
        features = [c for c in columns if c != target]
    return target, features


class IngestionPipeline:
    """
    Preview and finalize raw delimited text under one configuration.

    Example usage:
        pipeline = IngestionPipeline(IngestionConfig(global_strategy="median"))
        preview = pipeline.preview(text)
        if not preview.blocked:
            result = pipeline.finalize(text)
            dataset = result.dataset
    """

    def __init__(
        self,
        config: Optional[IngestionConfig] = None,
        splitter: Optional[RowSplitter] = None,
        type_inferrer: Optional[TypeInferrer] = None
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            config: Ingestion configuration (defaults apply when None)
            splitter: Row splitter callable; defaults to the csv-based splitter
                honouring config.delimiter
            type_inferrer: Shared inferrer for profiling and target typing
        """
        self.config: IngestionConfig = config or IngestionConfig()
        self.splitter: RowSplitter = splitter or (lambda text: split_rows(text, self.config.delimiter))
        self.type_inferrer: TypeInferrer = type_inferrer or TypeInferrer()
        self.profiler = ColumnProfiler(self.type_inferrer)
        self.finalizer = DatasetFinalizer(self.type_inferrer)

    @classmethod
    def from_config(cls, config_path: str) -> "IngestionPipeline":
        """Create a pipeline from a YAML configuration file."""
        return cls(IngestionConfig.from_yaml(config_path))

    def _split_and_resolve(self, text: str) -> Tuple[List[List[str]], TableStructure]:
        rows = self.splitter(text or "")
        structure = resolve_structure(rows, self.config.skip_rows, self.config.header_row)
        return rows, structure

    def _limit_violations(self, text: str, structure: TableStructure) -> List[LimitViolation]:
        return check_limits(
            total_rows=structure.total_rows,
            column_count=len(structure.columns),
            byte_size=len((text or "").encode("utf-8")),
            limits=self.config.limits,
        )

    def preview(self, text: str) -> PreviewResult:
        """
        Generate a structural preview.

        The preview window is the first preview_limit raw rows; limit
        violations are reported but do not prevent the preview.

        Args:
            text: Raw delimited text

        Returns:
            PreviewResult (success=False with the error message on
            structural or tokenization errors)
        """
        config = self.config
        try:
            rows, structure = self._split_and_resolve(text)
        except IngestionError as e:
            logger.warning(f"Preview failed: {e.message}")
            return PreviewResult(
                success=False,
                error=e.message,
                error_details=e.to_dict(),
                config=config,
            )

        limit_errors = self._limit_violations(text, structure)
        for violation in limit_errors:
            logger.warning(f"Limit exceeded ({violation.limit}): {violation.message}")

        window = rows[:config.preview_limit]
        records, flags = self.profiler.flag_rows(window, structure.columns)
        stats = self.profiler.profile(window, structure)

        logger.debug(
            f"Preview generated: {structure.total_rows:,} raw rows, "
            f"{len(structure.columns)} columns, window of {len(window)}"
        )
        return PreviewResult(
            success=True,
            raw_row_count=structure.total_rows,
            header_index=structure.header_index,
            data_start_index=structure.data_start_index,
            columns=list(structure.columns),
            preview_records=records,
            cell_flags=flags,
            stats=stats,
            config=config,
            limit_errors=limit_errors,
        )

    def finalize(self, text: str) -> FinalizeResult:
        """
        Materialize the final Dataset from the complete text.

        Args:
            text: Raw delimited text (parsed in full)

        Returns:
            FinalizeResult carrying either the Dataset or the error; limit
            violations refuse finalization and are listed in limit_errors
        """
        config = self.config
        try:
            rows, structure = self._split_and_resolve(text)

            violations = self._limit_violations(text, structure)
            if violations:
                raise LimitExceededError(violations)

            require_data_rows(structure)
            target, features = resolve_columns(structure.columns, config)

            policy = resolve_policy(
                features=features,
                target=target,
                global_strategy=config.global_strategy,
                column_strategies=config.column_strategies,
                implicit_target_drop=config.implicit_target_drop,
            )

            records = [row_to_record(r, structure.columns) for r in rows[structure.data_start_index:]]
            outcome = ImputationEngine(policy, self.type_inferrer.placeholder_tokens).run(records)
            dataset = self.finalizer.finalize(
                outcome,
                policy,
                skip_rows=config.skip_rows,
                header_row=config.header_row,
            )

        except LimitExceededError as e:
            logger.warning(f"Finalize refused: {e.message}")
            return FinalizeResult(
                success=False,
                error=e.message,
                error_details=e.to_dict(),
                limit_errors=e.violations,
            )
        except IngestionError as e:
            logger.warning(f"Finalize failed: {e.message}")
            return FinalizeResult(success=False, error=e.message, error_details=e.to_dict())

        return FinalizeResult(success=True, dataset=dataset)


def generate_preview(
    text: str,
    config: Optional[IngestionConfig] = None,
    splitter: Optional[RowSplitter] = None
) -> PreviewResult:
    """Convenience wrapper: IngestionPipeline(config, splitter).preview(text)."""
    return IngestionPipeline(config, splitter).preview(text)


def finalize_dataset(
    text: str,
    config: Optional[IngestionConfig] = None,
    splitter: Optional[RowSplitter] = None
) -> FinalizeResult:
    """Convenience wrapper: IngestionPipeline(config, splitter).finalize(text)."""
    return IngestionPipeline(config, splitter).finalize(text)

"""
Interactive ingestion session.

Holds the raw text and the configuration an operator is editing, caches the
preview, and hands both to the pipeline on confirmation. A session is
single-writer: no locking is provided.
"""

from typing import Any, Optional

from ingestion_framework.core.config import IngestionConfig
from ingestion_framework.core.logging_config import get_logger
from ingestion_framework.core.pipeline import IngestionPipeline, RowSplitter
from ingestion_framework.core.policy import Strategy
from ingestion_framework.core.results import FinalizeResult, PreviewResult

logger = get_logger(__name__)

# Config fields whose change invalidates the cached preview
_STRUCTURAL_FIELDS = ("skip_rows", "header_row", "preview_limit", "delimiter", "limits")


class IngestionSession:
    """
    Operator workflow around one upload.

    Example:
        session = IngestionSession()
        session.load_text(text)
        session.update_config(skip_rows=2)
        session.set_global_strategy("median")
        session.set_column_constant("city", "unknown")
        result = session.finalize()
    """

    def __init__(self, config: Optional[IngestionConfig] = None, splitter: Optional[RowSplitter] = None):
        self._initial_config = config or IngestionConfig()
        self._splitter = splitter
        self.raw_text: str = ""
        self.config: IngestionConfig = self._initial_config
        self.dataset = None
        self._preview: Optional[PreviewResult] = None
        self._columns_initialized = False

    @property
    def error(self) -> Optional[str]:
        """Error of the last computed preview, if any."""
        return self._preview.error if self._preview is not None else None

    def load_text(self, text: str) -> None:
        self.raw_text = text or ""
        self._preview = None
        self._columns_initialized = False

    def update_config(self, **changes: Any) -> IngestionConfig:
        """Apply a partial configuration update."""
        structural = any(
            name in changes and changes[name] != getattr(self.config, name)
            for name in _STRUCTURAL_FIELDS
        )
        self.config = self.config.updated(**changes)
        if structural:
            self._preview = None
        return self.config

    def preview(self) -> Optional[PreviewResult]:
        """
        Current preview, regenerated only when text or structural config changed.

        After the first successful preview, target and features are
        initialized once (last column as target, the rest as features) if
        the operator has not set them.

        Returns:
            PreviewResult, or None when no text is loaded
        """
        if not self.raw_text:
            return None
        if self._preview is None:
            self._preview = IngestionPipeline(self.config, self._splitter).preview(self.raw_text)
            if self._preview.success and self._preview.columns and not self._columns_initialized:
                self._initialize_columns(self._preview.columns)
        return self._preview

    def _initialize_columns(self, columns) -> None:
        target = self.config.target_column or columns[-1]
        features = self.config.feature_columns or [c for c in columns if c != target]
        self.config = self.config.updated(target_column=target, feature_columns=features)
        self._columns_initialized = True
        logger.debug(f"Initialized target '{target}' with {len(features)} features")

    def set_target(self, target: str) -> None:
        """Select the target column; it is removed from the features."""
        features = [c for c in (self.config.feature_columns or []) if c != target]
        self.config = self.config.updated(target_column=target, feature_columns=features)

    def toggle_feature(self, feature: str) -> None:
        """Add or remove a feature. The target can never be added."""
        current = list(self.config.feature_columns or [])
        if feature in current:
            current.remove(feature)
        elif feature != self.config.target_column:
            current.append(feature)
        self.config = self.config.updated(feature_columns=current)

    def set_global_strategy(self, strategy: Any) -> None:
        self.config = self.config.updated(global_strategy=strategy)

    def set_column_strategy(self, column: str, strategy: Any) -> None:
        strategies = dict(self.config.column_strategies)
        strategies[column] = strategy
        self.config = self.config.updated(column_strategies=strategies)

    def set_column_constant(self, column: str, value: Any) -> None:
        self.set_column_strategy(column, Strategy.constant(value))

    def finalize(self) -> FinalizeResult:
        """
        Build the final Dataset from the full text.

        Refused while no text is loaded, or while the preview reports limit
        violations. On success the session's dataset is replaced wholesale.
        """
        if not self.raw_text:
            return FinalizeResult(success=False, error="No raw text loaded")

        preview = self.preview()
        if preview is not None and preview.limit_errors:
            messages = "; ".join(v.message for v in preview.limit_errors)
            return FinalizeResult(
                success=False,
                error=f"Dataset exceeds configured limits: {messages}",
                limit_errors=list(preview.limit_errors),
            )

        result = IngestionPipeline(self.config, self._splitter).finalize(self.raw_text)
        if result.success:
            self.dataset = result.dataset
        return result

    def reset(self) -> None:
        """Discard text, preview, dataset and configuration edits."""
        self.raw_text = ""
        self.config = self._initial_config
        self.dataset = None
        self._preview = None
        self._columns_initialized = False

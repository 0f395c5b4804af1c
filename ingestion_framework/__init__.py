"""
Ingestion Framework - interactive ingestion and imputation of delimited tables.

Typical use:
    from ingestion_framework import IngestionConfig, IngestionPipeline

    pipeline = IngestionPipeline(IngestionConfig(global_strategy="median"))
    preview = pipeline.preview(text)
    result = pipeline.finalize(text)
"""

__version__ = "0.1.0"

from ingestion_framework.core.config import DataLimits, IngestionConfig  # noqa: E402
from ingestion_framework.core.pipeline import (  # noqa: E402
    IngestionPipeline,
    finalize_dataset,
    generate_preview,
)
from ingestion_framework.core.policy import Strategy, StrategyKind  # noqa: E402
from ingestion_framework.core.results import (  # noqa: E402
    Dataset,
    FinalizeResult,
    PreviewResult,
    TargetType,
)
from ingestion_framework.core.session import IngestionSession  # noqa: E402

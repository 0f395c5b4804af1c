"""
Training preprocessing - turn a finalized Dataset into numeric arrays.

This is the handoff to model-training code: a float feature matrix, a
target vector (label indices for classification, floats for regression),
per-feature statistics, z-score normalization and one-hot encoding.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

import numpy as np

from ingestion_framework.core.results import Dataset, TargetType
from ingestion_framework.profiler.type_inferrer import coerce_number, is_missing

logger = logging.getLogger(__name__)


@dataclass
class FeatureStats:
    """Per-feature mean and population standard deviation."""
    mean: np.ndarray
    std: np.ndarray


@dataclass
class PreparedData:
    """
    Numeric arrays derived from a Dataset.

    Attributes:
        features: (num_samples, num_features) float64 matrix
        targets: Label indices (classification) or float values (regression)
        feature_stats: Mean/std per feature column
        class_labels: Target value for each label index (classification only)
    """
    features: np.ndarray
    targets: np.ndarray
    feature_stats: FeatureStats
    class_labels: List[Any]


def _as_float(value: Any) -> float:
    number = coerce_number(value)
    return number if number is not None else 0.0


def preprocess_dataset(dataset: Dataset) -> PreparedData:
    """
    Convert a Dataset to numeric arrays.

    Non-numeric or missing feature cells become 0. Classification targets
    are mapped to label indices in first-seen order of the distinct values;
    regression targets are coerced to float (non-numeric -> 0).

    Args:
        dataset: Finalized dataset

    Returns:
        PreparedData
    """
    features = np.array(
        [[_as_float(row.get(f)) for f in dataset.features] for row in dataset.rows],
        dtype=np.float64,
    ).reshape(len(dataset.rows), len(dataset.features))

    target_values = dataset.column_values(dataset.target)
    class_labels: List[Any] = []
    if dataset.target_type is TargetType.CLASSIFICATION:
        label_index: Dict[Any, int] = {}
        for value in target_values:
            if not is_missing(value) and value not in label_index:
                label_index[value] = len(label_index)
        class_labels = list(label_index)
        targets = np.array([label_index.get(v, 0) for v in target_values], dtype=np.int64)
    else:
        targets = np.array([_as_float(v) for v in target_values], dtype=np.float64)

    if len(dataset.rows):
        stats = FeatureStats(mean=features.mean(axis=0), std=features.std(axis=0))
    else:
        zeros = np.zeros(len(dataset.features))
        stats = FeatureStats(mean=zeros, std=zeros.copy())

    logger.debug(f"Prepared {features.shape[0]} x {features.shape[1]} feature matrix")
    return PreparedData(features=features, targets=targets, feature_stats=stats, class_labels=class_labels)


def normalize_features(features: np.ndarray, stats: FeatureStats) -> np.ndarray:
    """Z-score normalize columns; columns with zero std become 0."""
    std = np.asarray(stats.std, dtype=np.float64)
    safe_std = np.where(std == 0, 1.0, std)
    normalized = (features - stats.mean) / safe_std
    normalized[:, std == 0] = 0.0
    return normalized


def one_hot_encode(targets: np.ndarray, num_classes: int) -> np.ndarray:
    """One-hot encode label indices into a (len(targets), num_classes) matrix."""
    targets = np.asarray(targets, dtype=np.int64)
    encoded = np.zeros((len(targets), num_classes), dtype=np.float64)
    encoded[np.arange(len(targets)), targets] = 1.0
    return encoded

"""Configuration parsing and validation."""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from ingestion_framework.core.constants import (
    DEFAULT_MAX_COLUMNS,
    DEFAULT_MAX_FILE_BYTES,
    DEFAULT_MAX_ROWS,
    DEFAULT_PREVIEW_LIMIT,
    MAX_STRING_LENGTH,
    MAX_YAML_FILE_SIZE,
    MAX_YAML_KEY_COUNT,
    MAX_YAML_NESTING_DEPTH,
)
from ingestion_framework.core.exceptions import (
    ConfigError,
    ConfigValidationError,
    YAMLSizeError,
)
from ingestion_framework.core.logging_config import get_logger
from ingestion_framework.core.policy import Strategy

logger = get_logger(__name__)

CONFIG_ROOT_KEY = "ingestion"


def _non_negative_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigValidationError(
            f"'{name}' must be a non-negative integer",
            field=name,
            expected="integer >= 0",
            actual=repr(value)
        )
    return value


def _bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigValidationError(
            f"'{name}' must be true or false",
            field=name,
            expected="boolean",
            actual=repr(value)
        )
    return value


@dataclass(frozen=True)
class DataLimits:
    """
    Dataset size limits enforced before a final dataset is accepted.

    Attributes:
        max_file_bytes: Maximum UTF-8 size of the raw text
        max_columns: Maximum number of header columns
        max_rows: Maximum number of raw rows
    """
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    max_columns: int = DEFAULT_MAX_COLUMNS
    max_rows: int = DEFAULT_MAX_ROWS

    def __post_init__(self):
        for name in ("max_file_bytes", "max_columns", "max_rows"):
            _non_negative_int(getattr(self, name), f"limits.{name}")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "DataLimits":
        data = data or {}
        unknown = set(data) - {"max_file_bytes", "max_columns", "max_rows"}
        if unknown:
            raise ConfigValidationError(
                f"Unknown limit(s): {', '.join(sorted(unknown))}",
                field="limits",
                expected="max_file_bytes, max_columns, max_rows",
                actual=", ".join(sorted(unknown))
            )
        return cls(**data)

    def to_dict(self) -> Dict[str, int]:
        return {
            "max_file_bytes": self.max_file_bytes,
            "max_columns": self.max_columns,
            "max_rows": self.max_rows,
        }


@dataclass
class IngestionConfig:
    """
    Structural assumptions and missing-value policy for one ingestion.

    Strategy fields accept their configuration form ("median",
    {"type": "constant", "value": 0}) and are normalized to Strategy
    objects on construction.

    Invariant: target_column is never a member of feature_columns. If both
    name the same column it is removed from the features.
    """
    skip_rows: int = 0
    header_row: int = 0
    target_column: Optional[str] = None
    feature_columns: Optional[List[str]] = None
    preview_limit: int = DEFAULT_PREVIEW_LIMIT
    global_strategy: Optional[Strategy] = None
    column_strategies: Dict[str, Strategy] = field(default_factory=dict)
    delimiter: Optional[str] = None
    implicit_target_drop: bool = True
    limits: DataLimits = field(default_factory=DataLimits)

    def __post_init__(self):
        _non_negative_int(self.skip_rows, "skip_rows")
        _non_negative_int(self.header_row, "header_row")
        _non_negative_int(self.preview_limit, "preview_limit")
        _bool(self.implicit_target_drop, "implicit_target_drop")

        if self.global_strategy is not None:
            self.global_strategy = Strategy.parse(
                self.global_strategy, field="global_strategy", allow_constant=False
            )
        self.column_strategies = {
            str(col): Strategy.parse(raw, field=f"column_strategies.{col}")
            for col, raw in (self.column_strategies or {}).items()
        }

        if isinstance(self.limits, Mapping):
            self.limits = DataLimits.from_dict(self.limits)

        if self.feature_columns is not None:
            self.feature_columns = [str(c) for c in self.feature_columns]
            if self.target_column is not None and self.target_column in self.feature_columns:
                logger.debug(f"Removing target '{self.target_column}' from feature columns")
                self.feature_columns = [c for c in self.feature_columns if c != self.target_column]

    def updated(self, **changes: Any) -> "IngestionConfig":
        """Return a copy with the given fields replaced (validation re-runs)."""
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, config_dict: Optional[Mapping[str, Any]]) -> "IngestionConfig":
        """
        Build a config from a mapping.

        The mapping may be the full document ({"ingestion": {...}}) or the
        inner section itself.
        """
        if config_dict is None:
            return cls()
        if not isinstance(config_dict, Mapping):
            raise ConfigError("Configuration must be a mapping")

        section = config_dict.get(CONFIG_ROOT_KEY, config_dict)
        if section is None:
            return cls()
        if not isinstance(section, Mapping):
            raise ConfigError(f"'{CONFIG_ROOT_KEY}' section must be a mapping", field=CONFIG_ROOT_KEY)

        known = {
            "skip_rows", "header_row", "target_column", "feature_columns",
            "preview_limit", "global_strategy", "column_strategies",
            "delimiter", "implicit_target_drop", "limits",
        }
        unknown = set(section) - known
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration key(s): {', '.join(sorted(unknown))}",
                field=CONFIG_ROOT_KEY,
                expected=", ".join(sorted(known)),
                actual=", ".join(sorted(unknown))
            )

        column_strategies = section.get("column_strategies") or {}
        if not isinstance(column_strategies, Mapping):
            raise ConfigError("'column_strategies' must be a mapping", field="column_strategies")

        feature_columns = section.get("feature_columns")
        if feature_columns is not None and not isinstance(feature_columns, list):
            raise ConfigError("'feature_columns' must be a list", field="feature_columns")

        return cls(
            skip_rows=section.get("skip_rows", 0),
            header_row=section.get("header_row", 0),
            target_column=section.get("target_column"),
            feature_columns=feature_columns,
            preview_limit=section.get("preview_limit", DEFAULT_PREVIEW_LIMIT),
            global_strategy=section.get("global_strategy"),
            column_strategies=dict(column_strategies),
            delimiter=section.get("delimiter"),
            implicit_target_drop=section.get("implicit_target_drop", True),
            limits=DataLimits.from_dict(section.get("limits")),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "IngestionConfig":
        """
        Load configuration from YAML file with security validations.

        Args:
            config_path: Path to YAML configuration file

        Raises:
            ConfigError: If file not found or invalid
            YAMLSizeError: If file exceeds size limit
            ConfigValidationError: If YAML structure is too complex or values invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        file_size = os.path.getsize(config_file)
        if file_size > MAX_YAML_FILE_SIZE:
            raise YAMLSizeError(
                f"Configuration file too large: {file_size:,} bytes. "
                f"Maximum allowed: {MAX_YAML_FILE_SIZE:,} bytes",
                file_size=file_size,
                max_size=MAX_YAML_FILE_SIZE
            )

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML file: {str(e)}")
        except UnicodeDecodeError as e:
            raise ConfigError(f"Invalid file encoding (expected UTF-8): {str(e)}")

        if config_dict is not None:
            cls._validate_yaml_structure(config_dict)

        logger.info(f"Loaded ingestion configuration from {config_path}")
        return cls.from_dict(config_dict)

    @classmethod
    def _validate_yaml_structure(cls, obj: Any, current_depth: int = 0, total_keys: List[int] = None) -> None:
        """
        Validate YAML structure to prevent resource exhaustion.

        Args:
            obj: Object to validate (dict, list, or primitive)
            current_depth: Current nesting depth
            total_keys: Mutable single-element list tracking total key count

        Raises:
            ConfigValidationError: If structure is too complex
        """
        if total_keys is None:
            total_keys = [0]

        if current_depth > MAX_YAML_NESTING_DEPTH:
            raise ConfigValidationError(
                f"YAML nesting depth exceeds maximum of {MAX_YAML_NESTING_DEPTH} levels."
            )

        if isinstance(obj, dict):
            total_keys[0] += len(obj)
            if total_keys[0] > MAX_YAML_KEY_COUNT:
                raise ConfigValidationError(
                    f"YAML structure contains more than {MAX_YAML_KEY_COUNT:,} keys/items."
                )
            for key, value in obj.items():
                if isinstance(key, str) and len(key) > 1000:
                    raise ConfigValidationError(
                        f"YAML key exceeds maximum length of 1000 characters: '{key[:50]}...'"
                    )
                cls._validate_yaml_structure(value, current_depth + 1, total_keys)

        elif isinstance(obj, list):
            total_keys[0] += len(obj)
            if total_keys[0] > MAX_YAML_KEY_COUNT:
                raise ConfigValidationError(
                    f"YAML structure contains more than {MAX_YAML_KEY_COUNT:,} keys/items."
                )
            for item in obj:
                cls._validate_yaml_structure(item, current_depth + 1, total_keys)

        elif isinstance(obj, str):
            if len(obj) > MAX_STRING_LENGTH:
                raise ConfigValidationError(
                    f"YAML contains string exceeding maximum length ({MAX_STRING_LENGTH:,} bytes): '{obj[:50]}...'"
                )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the same shape from_dict accepts (inner section)."""
        return {
            "skip_rows": self.skip_rows,
            "header_row": self.header_row,
            "target_column": self.target_column,
            "feature_columns": list(self.feature_columns) if self.feature_columns is not None else None,
            "preview_limit": self.preview_limit,
            "global_strategy": self.global_strategy.to_config() if self.global_strategy else None,
            "column_strategies": {c: s.to_config() for c, s in self.column_strategies.items()},
            "delimiter": self.delimiter,
            "implicit_target_drop": self.implicit_target_drop,
            "limits": self.limits.to_dict(),
        }

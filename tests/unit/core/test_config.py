"""
Unit tests for configuration parsing and validation.
"""

import pytest
import yaml

from ingestion_framework.core.config import DataLimits, IngestionConfig
from ingestion_framework.core.constants import DEFAULT_PREVIEW_LIMIT, MAX_YAML_FILE_SIZE
from ingestion_framework.core.exceptions import (
    ConfigError,
    ConfigValidationError,
    YAMLSizeError,
)
from ingestion_framework.core.policy import Strategy, StrategyKind


@pytest.mark.unit
class TestIngestionConfig:
    """Test construction-time validation."""

    def test_defaults(self):
        config = IngestionConfig()

        assert config.skip_rows == 0
        assert config.header_row == 0
        assert config.target_column is None
        assert config.feature_columns is None
        assert config.preview_limit == DEFAULT_PREVIEW_LIMIT
        assert config.global_strategy is None
        assert config.column_strategies == {}
        assert config.implicit_target_drop is True
        assert config.limits == DataLimits()

    def test_strategies_normalized(self):
        config = IngestionConfig(
            global_strategy="median",
            column_strategies={"city": {"type": "constant", "value": "unknown"}},
        )

        assert config.global_strategy == Strategy(StrategyKind.MEDIAN)
        assert config.column_strategies["city"] == Strategy.constant("unknown")

    def test_global_constant_rejected(self):
        with pytest.raises(ConfigValidationError):
            IngestionConfig(global_strategy={"type": "constant", "value": 0})

    @pytest.mark.parametrize("field", ["skip_rows", "header_row", "preview_limit"])
    def test_negative_rejected(self, field):
        with pytest.raises(ConfigValidationError) as exc_info:
            IngestionConfig(**{field: -1})
        assert exc_info.value.field == field

    def test_bool_is_not_an_int(self):
        with pytest.raises(ConfigValidationError):
            IngestionConfig(skip_rows=True)

    @pytest.mark.parametrize("value", ["no", 0, None])
    def test_implicit_target_drop_must_be_bool(self, value):
        with pytest.raises(ConfigValidationError) as exc_info:
            IngestionConfig(implicit_target_drop=value)
        assert exc_info.value.field == "implicit_target_drop"

    def test_empty_feature_list_kept(self):
        assert IngestionConfig(feature_columns=[]).feature_columns == []

    def test_target_removed_from_features(self):
        config = IngestionConfig(target_column="y", feature_columns=["a", "y", "b"])
        assert config.feature_columns == ["a", "b"]

    def test_updated_revalidates(self):
        config = IngestionConfig(feature_columns=["a", "b"])
        updated = config.updated(target_column="b")

        assert updated.feature_columns == ["a"]
        assert config.target_column is None  # original untouched

        with pytest.raises(ConfigValidationError):
            config.updated(header_row=-2)

    def test_limits_mapping(self):
        config = IngestionConfig(limits={"max_rows": 10})

        assert config.limits.max_rows == 10
        assert config.limits.max_columns == DataLimits().max_columns


@pytest.mark.unit
class TestDataLimits:
    """Test size limit parsing."""

    def test_unknown_limit(self):
        with pytest.raises(ConfigValidationError, match="Unknown limit"):
            DataLimits.from_dict({"max_cells": 5})

    def test_negative_limit(self):
        with pytest.raises(ConfigValidationError):
            DataLimits(max_rows=-1)

    def test_to_dict(self):
        limits = DataLimits(max_file_bytes=100, max_columns=2, max_rows=3)
        assert limits.to_dict() == {"max_file_bytes": 100, "max_columns": 2, "max_rows": 3}


@pytest.mark.unit
class TestConfigFromDict:
    """Test mapping-based construction."""

    def test_root_key(self):
        config = IngestionConfig.from_dict({"ingestion": {"skip_rows": 2, "target_column": "label"}})

        assert config.skip_rows == 2
        assert config.target_column == "label"

    def test_inner_section(self):
        config = IngestionConfig.from_dict({"header_row": 1, "global_strategy": "zero"})

        assert config.header_row == 1
        assert config.global_strategy == Strategy(StrategyKind.ZERO)

    def test_none(self):
        assert IngestionConfig.from_dict(None) == IngestionConfig()
        assert IngestionConfig.from_dict({"ingestion": None}) == IngestionConfig()

    def test_unknown_key(self):
        with pytest.raises(ConfigValidationError, match="skiprows"):
            IngestionConfig.from_dict({"ingestion": {"skiprows": 1}})

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError):
            IngestionConfig.from_dict(["skip_rows"])

    def test_feature_columns_must_be_list(self):
        with pytest.raises(ConfigError, match="feature_columns"):
            IngestionConfig.from_dict({"feature_columns": "a,b"})

    def test_quoted_boolean_rejected(self):
        with pytest.raises(ConfigValidationError, match="implicit_target_drop"):
            IngestionConfig.from_dict({"implicit_target_drop": "false"})

    def test_to_dict_round_trip(self):
        config = IngestionConfig(
            skip_rows=1,
            target_column="y",
            feature_columns=["a"],
            global_strategy="mean",
            column_strategies={"a": {"type": "constant", "value": 7}},
            implicit_target_drop=False,
            limits={"max_rows": 99},
        )
        assert IngestionConfig.from_dict(config.to_dict()) == config


@pytest.mark.unit
class TestConfigFromYaml:
    """Test YAML loading and its security checks."""

    def test_load(self, tmp_path):
        path = tmp_path / "ingestion.yaml"
        path.write_text(yaml.safe_dump({
            "ingestion": {
                "skip_rows": 1,
                "global_strategy": "median",
                "column_strategies": {"city": {"type": "constant", "value": "n/a"}},
                "limits": {"max_columns": 20},
            }
        }))

        config = IngestionConfig.from_yaml(str(path))

        assert config.skip_rows == 1
        assert config.global_strategy == Strategy(StrategyKind.MEDIAN)
        assert config.column_strategies["city"].value == "n/a"
        assert config.limits.max_columns == 20

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert IngestionConfig.from_yaml(str(path)) == IngestionConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            IngestionConfig.from_yaml(str(tmp_path / "absent.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("ingestion: [unclosed\n")
        with pytest.raises(ConfigError, match="Failed to parse YAML"):
            IngestionConfig.from_yaml(str(path))

    def test_file_too_large(self, tmp_path):
        path = tmp_path / "huge.yaml"
        path.write_text("#" * (MAX_YAML_FILE_SIZE + 1))
        with pytest.raises(YAMLSizeError):
            IngestionConfig.from_yaml(str(path))

    def test_nesting_too_deep(self, tmp_path):
        nested = "x"
        for _ in range(30):
            nested = {"k": nested}
        path = tmp_path / "deep.yaml"
        path.write_text(yaml.safe_dump({"ingestion": nested}))
        with pytest.raises(ConfigValidationError, match="nesting depth"):
            IngestionConfig.from_yaml(str(path))

    def test_invalid_strategy_in_file(self, tmp_path):
        path = tmp_path / "strategy.yaml"
        path.write_text("ingestion:\n  global_strategy: average\n")
        with pytest.raises(ConfigValidationError, match="average"):
            IngestionConfig.from_yaml(str(path))

"""
End-to-end tests for the preview and finalize paths.
"""

import json
import random

import pytest

from ingestion_framework import (
    IngestionConfig,
    IngestionPipeline,
    TargetType,
    finalize_dataset,
    generate_preview,
)
from ingestion_framework.core.results import CellFlag, InferredType
from ingestion_framework.profiler.type_inferrer import is_missing


def _csv(header, rows):
    return "\n".join(",".join(r) for r in [header] + rows) + "\n"


@pytest.mark.integration
class TestPreview:
    """Test structural previews of raw text."""

    def test_messy_file(self, messy_csv):
        preview = generate_preview(messy_csv, IngestionConfig(skip_rows=2))

        assert preview.success
        assert not preview.blocked
        assert preview.raw_row_count == 8
        assert preview.header_index == 2
        assert preview.data_start_index == 3
        assert preview.columns == ["age", "income", "city", "label"]

        age = preview.stats["age"]
        assert age.inferred_type is InferredType.NUMERIC
        assert age.placeholder == 1
        assert age.numeric_fraction == pytest.approx(0.8)

        income = preview.stats["income"]
        assert income.missing == 1
        assert income.placeholder == 1
        assert income.example_placeholders == ["unknown"]
        assert income.numeric_fraction == pytest.approx(0.75)

        assert preview.stats["city"].inferred_type is InferredType.CATEGORICAL
        assert preview.stats["label"].missing == 1

    def test_window_includes_leading_rows(self, messy_csv):
        preview = generate_preview(messy_csv, IngestionConfig(skip_rows=2, preview_limit=4))

        assert len(preview.preview_records) == 4
        assert preview.preview_records[0]["age"] == "Quarterly export"
        assert preview.cell_flags[3] == [CellFlag.VALID] * 4
        # stats only see the single data row inside the window
        assert preview.stats["age"].missing == 0
        assert preview.stats["age"].unique == 1

    def test_deterministic(self, messy_csv):
        config = IngestionConfig(skip_rows=2)
        assert generate_preview(messy_csv, config).to_dict() == generate_preview(messy_csv, config).to_dict()

    def test_duplicate_headers(self):
        preview = generate_preview("x,x,y\n1,2,3\n")
        assert preview.columns == ["x", "x_1", "y"]

    def test_structural_error(self, simple_csv):
        preview = generate_preview(simple_csv, IngestionConfig(skip_rows=1, header_row=2))

        assert not preview.success
        assert preview.blocked
        assert "header_row" in preview.error
        assert preview.error_details["type"] == "OutOfRangeError"
        assert preview.columns == []

    def test_empty_text(self):
        preview = generate_preview("")

        assert not preview.success
        assert preview.error == "No rows found"

    def test_header_only_previews(self):
        preview = generate_preview("a,b\n")

        assert preview.success
        assert preview.columns == ["a", "b"]
        assert preview.stats["a"].inferred_type is InferredType.EMPTY

    def test_limit_violations_reported(self, simple_csv):
        config = IngestionConfig(limits={"max_rows": 2, "max_columns": 2, "max_file_bytes": 5})
        preview = generate_preview(simple_csv, config)

        assert preview.success
        assert preview.blocked
        assert [v.limit for v in preview.limit_errors] == ["max_rows", "max_columns", "max_file_bytes"]

    def test_byte_size_is_utf8(self):
        text = "a,b\né,ü\n"  # 8 characters, 10 bytes
        preview = generate_preview(text, IngestionConfig(limits={"max_file_bytes": 9}))

        assert [v.limit for v in preview.limit_errors] == ["max_file_bytes"]

    def test_custom_splitter(self):
        def split_semicolons(text):
            return [line.split(";") for line in text.splitlines() if line]

        preview = generate_preview("a;b\n1;2\n", splitter=split_semicolons)
        assert preview.columns == ["a", "b"]

    def test_row_split_error(self):
        preview = generate_preview('a,b\n"1"x,2\n', IngestionConfig(delimiter=","))

        assert not preview.success
        assert preview.error_details["type"] == "RowSplitError"


@pytest.mark.integration
class TestFinalize:
    """Test materialization of the final dataset."""

    def test_zero_scenario(self, simple_csv):
        result = finalize_dataset(simple_csv, IngestionConfig(global_strategy="zero"))

        assert result.success
        dataset = result.dataset
        assert [{k: r[k] for k in ("a", "b")} for r in dataset.rows] == [{"a": 1, "b": 0}, {"a": 2, "b": 3}]
        assert dataset.imputation_summary.dropped_row_count == 0
        assert not dataset.imputation_summary.drop_applied

    def test_drop_row_scenario(self, simple_csv):
        result = finalize_dataset(simple_csv, IngestionConfig(global_strategy="drop-row"))

        dataset = result.dataset
        assert [{k: r[k] for k in ("a", "b")} for r in dataset.rows] == [{"a": 2, "b": 3}]
        assert dataset.imputation_summary.dropped_row_count == 1
        assert dataset.imputation_summary.original_row_count == 2
        assert dataset.imputation_summary.global_drop

    def test_two_column_table_never_imputes_target(self):
        """With two columns the last one is the target and is only ever dropped."""
        text = "a,b\n1,\n2,3\n"

        zero = finalize_dataset(text, IngestionConfig(global_strategy="zero")).dataset
        assert list(zero.rows) == [{"a": 1, "b": None}, {"a": 2, "b": 3}]

        dropped = finalize_dataset(text, IngestionConfig(global_strategy="drop-row")).dataset
        assert list(dropped.rows) == [{"a": 2, "b": 3}]
        assert dropped.imputation_summary.dropped_row_count == 1

    def test_messy_median(self, messy_csv):
        config = IngestionConfig(skip_rows=2, global_strategy="median")
        dataset = finalize_dataset(messy_csv, config).dataset

        assert dataset.target == "label"
        assert dataset.features == ("age", "income", "city")
        assert [r["age"] for r in dataset.rows] == [34, 36.0, 29, 41, 38]
        assert [r["income"] for r in dataset.rows] == [52000, 61000, 52000.0, 48000, 52000.0]
        assert [r["city"] for r in dataset.rows] == ["Leeds", "York", "Leeds", 0, "Hull"]
        assert [r["label"] for r in dataset.rows] == ["yes", "no", "yes", "no", None]
        assert dataset.target_type is TargetType.CLASSIFICATION
        assert dataset.num_classes == 2

    def test_messy_global_drop(self, messy_csv):
        dataset = finalize_dataset(messy_csv, IngestionConfig(skip_rows=2, global_strategy="drop-row")).dataset

        assert list(dataset.rows) == [{"age": 34, "income": 52000, "city": "Leeds", "label": "yes"}]
        assert dataset.imputation_summary.dropped_row_count == 4

    def test_per_column_overrides(self, messy_csv):
        config = IngestionConfig(
            skip_rows=2,
            target_column="label",
            feature_columns=["age", "city"],
            global_strategy="mean",
            column_strategies={"city": {"type": "constant", "value": "Other"}},
        )
        dataset = finalize_dataset(messy_csv, config).dataset

        assert dataset.features == ("age", "city")
        assert set(dataset.rows[0]) == {"age", "city", "label"}
        assert dataset.rows[1]["age"] == pytest.approx(35.5)
        assert dataset.rows[3]["city"] == "Other"

    def test_implicit_target_drop_switch(self, messy_csv):
        base = IngestionConfig(skip_rows=2, column_strategies={"city": "drop-row"})

        on = finalize_dataset(messy_csv, base).dataset
        off = finalize_dataset(messy_csv, base.updated(implicit_target_drop=False)).dataset

        assert on.num_samples == 3
        assert off.num_samples == 4
        assert off.rows[-1]["label"] is None

    def test_preview_limit_does_not_bound_dataset(self, messy_csv):
        config = IngestionConfig(skip_rows=2, preview_limit=1)
        assert finalize_dataset(messy_csv, config).dataset.num_samples == 5

    def test_unknown_target(self, simple_csv):
        result = finalize_dataset(simple_csv, IngestionConfig(target_column="label"))

        assert not result.success
        assert result.dataset is None
        assert "Target 'label' not found" in result.error

    def test_empty_feature_list_selects_no_features(self, simple_csv):
        dataset = finalize_dataset(simple_csv, IngestionConfig(feature_columns=[])).dataset

        assert dataset.features == ()
        assert list(dataset.rows) == [{"y": 0}, {"y": 1}]

    def test_overflowing_number_is_not_numeric(self):
        text = "a,y\n1e999,0\n,1\n2,0\n"
        dataset = finalize_dataset(text, IngestionConfig(global_strategy="mean")).dataset

        assert [r["a"] for r in dataset.rows] == ["1e999", 2.0, 2]
        json.dumps(dataset.to_dict(), allow_nan=False)

    def test_leading_zero_codes_kept_verbatim(self):
        dataset = finalize_dataset("zip,y\n007,a\n0123,b\n+5,c\n").dataset

        assert [r["zip"] for r in dataset.rows] == ["007", "0123", "+5"]

    def test_unknown_feature(self, simple_csv):
        result = finalize_dataset(simple_csv, IngestionConfig(feature_columns=["a", "zz"]))

        assert not result.success
        assert result.error_details["details"]["role"] == "feature"

    def test_no_data_rows(self):
        result = finalize_dataset("a,b\n")

        assert not result.success
        assert result.error == "No data rows found after header"

    def test_limits_refuse(self, simple_csv):
        result = finalize_dataset(simple_csv, IngestionConfig(limits={"max_columns": 2}))

        assert not result.success
        assert result.dataset is None
        assert [v.limit for v in result.limit_errors] == ["max_columns"]
        assert "exceeds configured limits" in result.error

    def test_pipeline_from_yaml(self, tmp_path, simple_csv):
        path = tmp_path / "ingestion.yaml"
        path.write_text("ingestion:\n  global_strategy: zero\n  target_column: y\n")

        result = IngestionPipeline.from_config(str(path)).finalize(simple_csv)
        assert result.dataset.rows[0]["b"] == 0


@pytest.mark.integration
class TestFinalizeProperties:
    """Properties that must hold for any input."""

    @pytest.fixture
    def random_csv(self):
        rng = random.Random(7)
        cells = ["", "NA", "?", "1", "2.5", "-3", "abc", "10", "7"]
        rows = [[rng.choice(cells) for _ in range(4)] for _ in range(60)]
        return _csv(["f1", "f2", "f3", "target"], rows)

    @pytest.mark.parametrize("strategy", ["leave-as-is", "zero", "mean", "median", "mode"])
    def test_imputation_never_removes_rows(self, random_csv, strategy):
        dataset = finalize_dataset(random_csv, IngestionConfig(global_strategy=strategy)).dataset

        assert dataset.num_samples == dataset.imputation_summary.original_row_count == 60

    def test_global_drop_leaves_no_missing(self, random_csv):
        dataset = finalize_dataset(random_csv, IngestionConfig(global_strategy="drop-row")).dataset

        for row in dataset.rows:
            assert not any(is_missing(row[c]) for c in ("f1", "f2", "f3", "target"))

    @pytest.mark.parametrize("strategy", ["mean", "median"])
    def test_replacement_within_observed_range(self, random_csv, strategy):
        pipeline = IngestionPipeline(IngestionConfig(global_strategy=strategy))
        raw = finalize_dataset(random_csv).dataset
        imputed = pipeline.finalize(random_csv).dataset

        for column in ("f1", "f2", "f3"):
            observed = [v for v in raw.column_values(column) if isinstance(v, (int, float))]
            filled = [
                after for before, after in zip(raw.column_values(column), imputed.column_values(column))
                if before is None
            ]
            for value in filled:
                assert min(observed) <= value <= max(observed)

    def test_mode_tie_first_seen(self):
        text = _csv(["c", "y"], [["b", "1"], ["a", "0"], ["", "1"], ["a", "0"], ["b", "1"]])
        dataset = finalize_dataset(text, IngestionConfig(global_strategy="mode")).dataset

        assert dataset.rows[2]["c"] == "b"

    def test_deterministic(self, random_csv):
        config = IngestionConfig(global_strategy="median", column_strategies={"f3": "mode"})
        assert finalize_dataset(random_csv, config) == finalize_dataset(random_csv, config)

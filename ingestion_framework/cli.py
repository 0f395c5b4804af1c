"""
Command-line interface for the Ingestion Framework.

Provides commands for:
- Previewing a delimited file under a structural configuration
- Ingesting a file into a clean, typed dataset
- Generating a sample configuration
"""

import json
import sys
from pathlib import Path

import click

from ingestion_framework import __version__
from ingestion_framework.core.config import IngestionConfig
from ingestion_framework.core.exceptions import IngestionError
from ingestion_framework.core.logging_config import get_logger, setup_logging
from ingestion_framework.core.pipeline import IngestionPipeline
from ingestion_framework.core.pretty_output import PrettyOutput as po
from ingestion_framework.loaders.row_splitter import read_text_file

logger = get_logger(__name__)

LOG_LEVELS = click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False)
STRATEGY_CHOICES = click.Choice(['leave-as-is', 'drop-row', 'zero', 'mean', 'median', 'mode'], case_sensitive=False)


def parse_column_strategy(option: str):
    """
    Parse a COLUMN=STRATEGY option value.

    "age=median" -> ("age", "median")
    "city=constant:unknown" -> ("city", {"type": "constant", "value": "unknown"})
    """
    if "=" not in option:
        raise click.BadParameter(f"Expected COLUMN=STRATEGY, got '{option}'")
    column, strategy = option.split("=", 1)
    column = column.strip()
    if not column:
        raise click.BadParameter(f"Missing column name in '{option}'")
    if strategy.startswith("constant:"):
        return column, {"type": "constant", "value": strategy[len("constant:"):]}
    return column, strategy.strip()


def build_config(config_file, **overrides) -> IngestionConfig:
    """Load the YAML config (if any) and apply command-line overrides."""
    config = IngestionConfig.from_yaml(config_file) if config_file else IngestionConfig()
    changes = {k: v for k, v in overrides.items() if v is not None}
    if changes:
        config = config.updated(**changes)
    return config


def _write_json(data, path):
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=str)


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    Ingestion Framework - turn raw delimited text into a clean, typed dataset.

    Preview the structure of a file, choose skipped rows, header row, target
    and features, pick a missing-value policy, then materialize the dataset.
    """
    pass


@cli.command()
@click.argument('file_path', type=click.Path(exists=True))
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True), help='YAML ingestion configuration')
@click.option('--skip-rows', type=int, default=None, help='Rows to skip before the header search')
@click.option('--header-row', type=int, default=None, help='Header row index after skipped rows')
@click.option('--limit', '-n', 'preview_limit', type=int, default=None, help='Raw rows to show (default: 50)')
@click.option('--delimiter', '-d', default=None, help='Column delimiter (default: auto-detect). Use "\\t" for tab.')
@click.option('--encoding', '-e', default=None, help='File encoding (default: auto-detect)')
@click.option('--json-output', '-j', type=click.Path(), help='Write the full preview as JSON')
@click.option('--log-level', type=LOG_LEVELS, default='WARNING', help='Logging level')
def preview(file_path, config_file, skip_rows, header_row, preview_limit, delimiter, encoding, json_output, log_level):
    """
    Preview FILE_PATH: columns, per-column statistics and limit violations.

    Examples:

    \b
    ingest-tool preview data.csv
    ingest-tool preview data.csv --skip-rows 2 --header-row 0 -j preview.json
    """
    setup_logging(level=log_level)

    try:
        if delimiter:
            delimiter = delimiter.encode().decode('unicode_escape')
        config = build_config(
            config_file,
            skip_rows=skip_rows,
            header_row=header_row,
            preview_limit=preview_limit,
            delimiter=delimiter,
        )
        text = read_text_file(file_path, encoding=encoding)
    except IngestionError as e:
        po.error(e.message)
        sys.exit(1)

    result = IngestionPipeline(config).preview(text)

    if json_output:
        _write_json(result.to_dict(), json_output)

    if not result.success:
        po.error(f"Preview failed: {result.error}")
        sys.exit(1)

    po.section(f"Preview: {Path(file_path).name}")
    po.key_value("Raw rows", f"{result.raw_row_count:,}")
    po.key_value("Header row (absolute)", result.header_index)
    po.key_value("Data starts at row", result.data_start_index)
    po.key_value("Columns", ", ".join(result.columns))
    po.blank_line()
    po.column_stats_table(result.stats)
    if result.raw_row_count > config.preview_limit:
        po.blank_line()
        po.info(f"Statistics cover the first {config.preview_limit:,} raw rows only")

    if result.limit_errors:
        po.blank_line()
        for violation in result.limit_errors:
            po.warning(violation.message)
        po.warning("Dataset cannot be ingested until these limits are resolved")

    if json_output:
        po.blank_line()
        po.output_file("Preview JSON", json_output)


@cli.command()
@click.argument('file_path', type=click.Path(exists=True))
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True), help='YAML ingestion configuration')
@click.option('--skip-rows', type=int, default=None, help='Rows to skip before the header search')
@click.option('--header-row', type=int, default=None, help='Header row index after skipped rows')
@click.option('--target', '-t', default=None, help='Target column (default: last column)')
@click.option('--features', '-f', default=None, help='Comma-separated feature columns (default: all but target)')
@click.option('--strategy', '-s', type=STRATEGY_CHOICES, default=None, help='Global missing-value strategy')
@click.option('--column-strategy', '-S', multiple=True,
              help='Per-column strategy COLUMN=STRATEGY, or COLUMN=constant:VALUE (repeatable)')
@click.option('--delimiter', '-d', default=None, help='Column delimiter (default: auto-detect)')
@click.option('--encoding', '-e', default=None, help='File encoding (default: auto-detect)')
@click.option('--output', '-o', type=click.Path(), help='Write the dataset as CSV')
@click.option('--json-output', '-j', type=click.Path(), help='Write dataset metadata and summary as JSON')
@click.option('--include-rows', is_flag=True, help='Include dataset rows in the JSON output')
@click.option('--log-level', type=LOG_LEVELS, default='WARNING', help='Logging level')
@click.option('--log-file', type=click.Path(), help='Optional log file path')
def ingest(file_path, config_file, skip_rows, header_row, target, features, strategy, column_strategy,
           delimiter, encoding, output, json_output, include_rows, log_level, log_file):
    """
    Ingest FILE_PATH into a clean, typed dataset.

    Examples:

    \b
    ingest-tool ingest data.csv -s median -o clean.csv
    ingest-tool ingest data.csv -t label -S age=drop-row -S city=constant:unknown
    ingest-tool ingest data.csv -c ingestion.yaml -j summary.json
    """
    setup_logging(level=log_level, log_file=log_file)
    logger.info(f"Starting ingestion: {file_path}")

    try:
        if delimiter:
            delimiter = delimiter.encode().decode('unicode_escape')
        config = build_config(
            config_file,
            skip_rows=skip_rows,
            header_row=header_row,
            target_column=target,
            feature_columns=[f.strip() for f in features.split(",") if f.strip()] if features else None,
            global_strategy=strategy.lower() if strategy else None,
            delimiter=delimiter,
        )
        if column_strategy:
            strategies = dict(config.column_strategies)
            strategies.update(parse_column_strategy(option) for option in column_strategy)
            config = config.updated(column_strategies=strategies)
        text = read_text_file(file_path, encoding=encoding)
    except IngestionError as e:
        po.error(e.message)
        sys.exit(1)

    result = IngestionPipeline(config).finalize(text)

    if json_output:
        _write_json(result.to_dict(include_rows=include_rows), json_output)

    if not result.success:
        po.error(f"Ingestion failed: {result.error}")
        for violation in result.limit_errors:
            po.item(violation.message, indent=2)
        sys.exit(1)

    dataset = result.dataset
    po.ingestion_summary(dataset)

    if output:
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        dataset.to_frame().to_csv(output, index=False)
        po.output_file("Dataset CSV", output)
    if json_output:
        po.output_file("Summary JSON", json_output)


@cli.command()
@click.argument('output_path', type=click.Path())
def init_config(output_path):
    """
    Generate a sample configuration file.

    OUTPUT_PATH: Path where sample config should be written

    Example:

    \b
    ingest-tool init-config ingestion.yaml
    """
    sample_config = '''# Ingestion Configuration

ingestion:
  # Rows to ignore before looking for the header (titles, notes, ...)
  skip_rows: 0
  # Header row index counted after the skipped rows
  header_row: 0

  # Defaults: last column is the target, all others are features
  # target_column: "label"
  # feature_columns: ["age", "income", "city"]

  # Raw rows materialized by the preview command
  preview_limit: 50

  # Column delimiter; omit to auto-detect
  # delimiter: ","

  # Fallback for every feature: leave-as-is, drop-row, zero, mean, median, mode
  global_strategy: "leave-as-is"

  # Per-column overrides (constant is only allowed here)
  column_strategies:
    # age: "median"
    # city:
    #   type: "constant"
    #   value: "unknown"

  # Drop rows with a missing target when any feature uses drop-row and
  # the target has no strategy of its own
  implicit_target_drop: true

  limits:
    max_file_bytes: 10485760
    max_columns: 500
    max_rows: 500000
'''

    path = Path(output_path)
    if path.exists():
        po.error(f"Refusing to overwrite existing file: {output_path}")
        sys.exit(1)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(sample_config, encoding="utf-8")
    po.success(f"Sample configuration written to: {output_path}")


if __name__ == '__main__':
    cli()

"""
Ingestion Framework Constants.

This module defines the magic numbers, configuration defaults and token sets
used throughout the ingestion pipeline. Centralizing these values keeps the
preview and finalize paths reading from the same source.
"""

# ============================================================================
# Dataset Size Limits (Defaults)
# ============================================================================

# Maximum raw file size accepted for finalization (10MB)
DEFAULT_MAX_FILE_BYTES: int = 10 * 1024 * 1024

# Maximum number of header columns
DEFAULT_MAX_COLUMNS: int = 500

# Maximum number of raw rows (including skipped and header rows)
DEFAULT_MAX_ROWS: int = 500_000

# Limit keys as they appear in violation summaries
LIMIT_MAX_FILE_BYTES: str = "max_file_bytes"
LIMIT_MAX_COLUMNS: str = "max_columns"
LIMIT_MAX_ROWS: str = "max_rows"


# ============================================================================
# Preview Constants
# ============================================================================

# Number of raw rows materialized for interactive display
DEFAULT_PREVIEW_LIMIT: int = 50

# Maximum number of distinct placeholder examples kept per column
MAX_PLACEHOLDER_EXAMPLES: int = 5

# Name given to header cells that are blank after trimming
EMPTY_COLUMN_NAME: str = "col"


# ============================================================================
# Missing Value Detection
# ============================================================================

# Tokens that are non-empty but mean "missing" (compared trimmed, lowercased)
PLACEHOLDER_TOKENS: frozenset = frozenset({
    "na",
    "n/a",
    "null",
    "none",
    "nil",
    "nan",
    "?",
    "-",
    "missing",
    "unknown",
    ".",
})

# Unified representation of a missing cell after normalization
MISSING_VALUE: str = ""


# ============================================================================
# Target Type Inference
# ============================================================================

# A numeric target is classification only if it has at most this many
# distinct values...
MAX_CLASSIFICATION_UNIQUE: int = 10

# ...and the distinct count is below this fraction of the non-missing values
CLASSIFICATION_UNIQUE_RATIO: float = 0.1


# ============================================================================
# Row Splitting
# ============================================================================

# Bytes sampled for delimiter sniffing
DELIMITER_SAMPLE_SIZE: int = 8192

# Candidate delimiters offered to csv.Sniffer
CANDIDATE_DELIMITERS: str = ",\t|;:"

# Delimiter used when sniffing fails
DEFAULT_DELIMITER: str = ","

# Encodings tried in order when reading text files (utf-8-sig also reads plain utf-8)
CANDIDATE_ENCODINGS: list = ["utf-8-sig", "cp1252", "latin-1"]


# ============================================================================
# Configuration Security Limits
# ============================================================================

# Maximum YAML configuration file size (1MB)
# Security measure: ingestion configs are small; anything larger is suspect
MAX_YAML_FILE_SIZE: int = 1 * 1024 * 1024

# Maximum YAML nesting depth
MAX_YAML_NESTING_DEPTH: int = 20

# Maximum number of keys/items in a YAML document
MAX_YAML_KEY_COUNT: int = 10_000

# Maximum length of any single string in a YAML document
MAX_STRING_LENGTH: int = 1024 * 1024


# ============================================================================
# Logging Constants
# ============================================================================

# Default log message format
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Log date format
LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

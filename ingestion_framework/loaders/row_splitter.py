"""Delimited-text row splitter with delimiter and encoding auto-detection."""

import csv
import io
import logging
from pathlib import Path
from typing import List, Optional

from ingestion_framework.core.constants import (
    CANDIDATE_DELIMITERS,
    CANDIDATE_ENCODINGS,
    DEFAULT_DELIMITER,
    DELIMITER_SAMPLE_SIZE,
)
from ingestion_framework.core.exceptions import DataLoadError, RowSplitError

logger = logging.getLogger(__name__)


def detect_delimiter(text: str, sample_size: int = DELIMITER_SAMPLE_SIZE) -> str:
    """
    Auto-detect the delimiter used in delimited text.

    Args:
        text: Raw text
        sample_size: Number of characters to sample for detection

    Returns:
        Detected delimiter character, defaults to ',' if detection fails
    """
    sample = text[:sample_size]
    if not sample.strip():
        return DEFAULT_DELIMITER

    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS)
        return dialect.delimiter
    except csv.Error:
        return DEFAULT_DELIMITER


def split_rows(text: str, delimiter: Optional[str] = None) -> List[List[str]]:
    """
    Split raw delimited text into rows of string cells.

    The whole document is parsed (never truncated) so callers get accurate
    row counts. Row order is preserved; blank lines are skipped; quoted
    fields may contain delimiters and newlines.

    Args:
        text: Raw text, already decoded
        delimiter: Column delimiter; auto-detected when None

    Returns:
        List of rows, each a list of cell strings

    Raises:
        RowSplitError: If the text is malformed (e.g. broken quoting)
    """
    if not text:
        return []

    if delimiter is None:
        delimiter = detect_delimiter(text)
        if delimiter != DEFAULT_DELIMITER:
            logger.info(f"Auto-detected delimiter: {repr(delimiter)}")

    rows: List[List[str]] = []
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=True)
    try:
        for row in reader:
            if not row or row == [""]:
                continue
            rows.append(row)
    except csv.Error as e:
        raise RowSplitError(
            f"Could not split delimited text at line {reader.line_num}: {str(e)}",
            line_number=reader.line_num,
            original_exception=e
        )

    logger.debug(f"Split {len(rows):,} rows using delimiter {repr(delimiter)}")
    return rows


def read_text_file(file_path: str, encoding: Optional[str] = None) -> str:
    """
    Read a text file, detecting the encoding when none is given.

    Args:
        file_path: Path to the file
        encoding: Encoding name; tries utf-8-sig, cp1252, latin-1 when None

    Returns:
        Decoded file contents

    Raises:
        DataLoadError: If the file is missing or cannot be decoded
    """
    path = Path(file_path)
    if not path.exists():
        raise DataLoadError(f"File not found: {file_path}", source=str(file_path))

    raw = path.read_bytes()
    encodings = [encoding] if encoding else CANDIDATE_ENCODINGS

    for candidate in encodings:
        try:
            text = raw.decode(candidate)
        except UnicodeDecodeError as e:
            if encoding:
                raise DataLoadError(
                    f"Encoding error in {file_path}: Cannot decode file with {encoding} encoding. "
                    f"Try specifying a different encoding (e.g., cp1252, latin-1, utf-16).",
                    source=str(file_path),
                    original_exception=e
                )
            continue
        if candidate != "utf-8-sig":
            logger.info(f"Auto-detected encoding: {candidate}")
        return text

    raise DataLoadError(f"Could not detect encoding of {file_path}", source=str(file_path))

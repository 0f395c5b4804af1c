"""
Shared fixtures for the ingestion framework test suite.
"""

import logging

import pytest

from ingestion_framework.core.logging_config import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so handlers from one test never leak into another."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def simple_csv():
    """Two data rows with one missing cell in column b."""
    return "a,b,y\n1,,0\n2,3,1\n"


@pytest.fixture
def messy_csv():
    """Title and blank-ish lines before the header, placeholders in the data."""
    return (
        "Quarterly export\n"
        "generated 2024-01-01\n"
        "age,income,city,label\n"
        "34,52000,Leeds,yes\n"
        "N/A,61000,York,no\n"
        "29,,Leeds,yes\n"
        "41,48000,?,no\n"
        "38,unknown,Hull,\n"
    )


@pytest.fixture
def csv_file(tmp_path, messy_csv):
    path = tmp_path / "messy.csv"
    path.write_text(messy_csv, encoding="utf-8")
    return path

"""Utility functions for clinic_registry"""
import csv
import logging
import os
from typing import Any, Dict, List, Optional

from .config import CSV_READ_ENCODING
from .exceptions import InvalidPatientRecordError, RosterFileError
from .matching.models import PatientRecord


def read_patient_rows_from_csv(csv_file_path: str, logger: Optional[logging.Logger] = None) -> List[Dict[str, Any]]:
    """
    Read raw patient rows from a CSV file with a header row.

    Header names are expected in the clinic's camelCase form (``firstName``,
    ``lastName``, ``hn``, ``nationalId``, ``dateOfBirth``, ...). Cell values
    are stripped and each row gets a ``_row_number`` (1 = first line after
    the header) for traceability.

    Args:
        csv_file_path (str): Path to the CSV file
        logger (Optional[logging.Logger]): Logger for error reporting

    Returns:
        List[Dict[str, Any]]: One dictionary per data row

    Raises:
        RosterFileError: If the file is missing, unreadable or has no header
    """
    logger = logger or logging.getLogger(__name__)

    if not os.path.exists(csv_file_path):
        logger.error(f"CSV file not found: {csv_file_path}")
        raise RosterFileError(f"CSV file not found: {csv_file_path}")

    rows = []
    try:
        with open(csv_file_path, mode='r', encoding=CSV_READ_ENCODING, newline='') as f:
            reader = csv.DictReader(f)
            if not reader.fieldnames:
                logger.error(f"CSV file '{csv_file_path}' appears to be empty or improperly formatted.")
                raise RosterFileError(f"CSV file '{csv_file_path}' has no header row")

            for row_num, row in enumerate(reader, start=1):
                cleaned = {
                    key.strip(): (value or "").strip()
                    for key, value in row.items()
                    if key is not None
                }
                cleaned["_row_number"] = row_num
                rows.append(cleaned)
    except (csv.Error, OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading CSV file '{csv_file_path}': {e}")
        raise RosterFileError(f"Error reading CSV file '{csv_file_path}': {e}") from e

    logger.info(f"Read {len(rows)} rows from '{csv_file_path}'.")
    return rows


def load_roster_from_csv(csv_file_path: str, logger: Optional[logging.Logger] = None) -> List[PatientRecord]:
    """
    Load an existing roster from CSV. Rows that cannot form a valid record are
    skipped with a warning.
    """
    logger = logger or logging.getLogger(__name__)
    roster = []
    for row in read_patient_rows_from_csv(csv_file_path, logger):
        try:
            roster.append(PatientRecord.from_mapping(row))
        except InvalidPatientRecordError as e:
            logger.warning(f"Skipping roster row {row['_row_number']}: {e}")
    logger.info(f"Loaded roster of {len(roster)} patients.")
    return roster

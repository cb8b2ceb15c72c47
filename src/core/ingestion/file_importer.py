#!/usr/bin/env python3
"""
CSV import of run records.

Accepts the same table the exporter writes: a header row naming run record
fields, one run per row. Either every row parses or the whole import fails.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from core.exceptions import ImportParseError, RecordValidationError
from core.models.run import REQUIRED_FIELDS, RunRecord

logger = logging.getLogger(__name__)


def coerce_scalar(value: str) -> Any:
    """Turn numeric- or boolean-looking cell text into a Python value."""
    text = value.strip()
    if text == '':
        return None
    lowered = text.lower()
    if lowered in ('true', 'false'):
        return lowered == 'true'
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return value


def _coerce_number(column: str, value: str, line: int, integer: bool = False):
    number = coerce_scalar(value)
    if number is None:
        return None
    if isinstance(number, bool) or not isinstance(number, (int, float)):
        raise ImportParseError(f"column '{column}' is not numeric: {value!r}", line=line)
    if integer:
        if isinstance(number, float) and not number.is_integer():
            raise ImportParseError(f"column '{column}' is not an integer: {value!r}", line=line)
        return int(number)
    return number


def _row_to_record(row: Dict[str, Any], line: int) -> RunRecord:
    if None in row:
        raise ImportParseError("row has more fields than the header", line=line)

    data: Dict[str, Any] = {}
    for column, value in row.items():
        if value is None:
            data[column] = None
        elif column in REQUIRED_FIELDS or column == 'url':
            data[column] = value
        elif column == 'id':
            data[column] = _coerce_number(column, value, line, integer=True)
        elif column == 'duration':
            data[column] = _coerce_number(column, value, line)
        else:
            data[column] = coerce_scalar(value)

    try:
        return RunRecord.from_dict(data)
    except RecordValidationError as e:
        raise ImportParseError(e.message, line=line) from e
    except ValueError as e:
        raise ImportParseError(str(e), line=line) from e


def parse_runs_csv(text: str) -> List[RunRecord]:
    """
    Parse CSV text with a header row into run records.

    Raises:
        ImportParseError: On a missing header, missing required columns or
            values, non-numeric id/duration, or malformed CSV
    """
    reader = csv.DictReader(io.StringIO(text.lstrip('\ufeff')))
    try:
        header = reader.fieldnames
        if not header:
            raise ImportParseError("missing header row")

        missing = [column for column in REQUIRED_FIELDS if column not in header]
        if missing:
            raise ImportParseError(f"missing required columns: {', '.join(missing)}")

        records = [_row_to_record(row, reader.line_num) for row in reader]
    except csv.Error as e:
        raise ImportParseError(str(e), line=reader.line_num) from e

    logger.info(f"Parsed {len(records)} runs from CSV")
    return records


def load_runs_csv(path: Union[str, Path]) -> List[RunRecord]:
    """Read and parse a CSV file of run records."""
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8-sig')
    except UnicodeDecodeError as e:
        raise ImportParseError(f"{path} is not UTF-8 text") from e
    return parse_runs_csv(text)

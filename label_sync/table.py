"""
table.py - Label mapping CSV handling

This module reads the label mapping CSV, selects the row for the
triggering label, and turns that row into the list of project field
values to set.

The CSV has one label column; every other column is the name of a
project field and each cell is the option to select for that label.
An empty cell leaves the field untouched.
"""

import csv
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, NamedTuple, Optional, Tuple

from .errors import ConfigError, FileReadError, ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CsvRow:
    """One data row as ordered (column, value) pairs"""

    cells: Tuple[Tuple[str, str], ...]

    def get(self, column, default=None):
        for name, value in self.cells:
            if name == column:
                return value
        return default

    def as_dict(self):
        return dict(self.cells)


@dataclass(frozen=True)
class CsvTable:
    """Header list shared by all rows, plus the rows in file order"""

    path: str
    headers: Tuple[str, ...]
    rows: Tuple[CsvRow, ...]


class FieldAssignment(NamedTuple):
    field: str
    option: str


FieldPlan = List[FieldAssignment]


def load_table(csv_path):
    """
    Load the label mapping CSV
    Returns a CsvTable with trimmed headers and cells; blank rows are dropped
    """
    path = Path(csv_path)
    try:
        # utf-8-sig strips the BOM Excel adds when saving as CSV
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise FileReadError(f"CSV file not found: {csv_path}")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(f"Could not read CSV file {csv_path}: {e}")

    try:
        records = list(csv.reader(io.StringIO(text, newline=""), strict=True))
    except csv.Error as e:
        raise ParseError(f"Malformed CSV file {csv_path}: {e}")

    records = [[cell.strip() for cell in record] for record in records]
    records = [record for record in records if any(record)]
    if not records:
        raise ParseError(f"CSV file {csv_path} has no header row")

    headers = tuple(records[0])
    duplicates = sorted({h for h in headers if headers.count(h) > 1})
    if duplicates:
        raise ParseError(f"CSV file {csv_path} has duplicate columns: {', '.join(duplicates)}")

    rows = []
    for record_number, record in enumerate(records[1:], start=2):
        if len(record) != len(headers):
            raise ParseError(
                f"CSV file {csv_path}: record {record_number} has {len(record)} fields, "
                f"expected {len(headers)}"
            )
        rows.append(CsvRow(cells=tuple(zip(headers, record))))

    logger.debug(f"Loaded {len(rows)} rows with columns {list(headers)} from {csv_path}")
    return CsvTable(path=str(csv_path), headers=headers, rows=tuple(rows))


def select_row(table, label_column, label) -> Optional[CsvRow]:
    """
    Find the row for a label
    Returns the first matching row in file order, or None if the label is not listed
    """
    if label_column not in table.headers:
        raise ConfigError(
            f"Label column '{label_column}' not found in CSV file {table.path}. "
            f"Available columns: {', '.join(table.headers)}"
        )

    for row in table.rows:
        if row.get(label_column) == label:
            return row
    return None


def build_plan(row, label_column) -> FieldPlan:
    """Every non-label column with a value, in column order"""
    return [
        FieldAssignment(column, value)
        for column, value in row.cells
        if column != label_column and value
    ]

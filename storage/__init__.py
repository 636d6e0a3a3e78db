"""
CSVQuery Storage Layer
======================
Public API for the row model and ingestion.

Usage:
    from storage import Dataset, read_csv, coerce_value, compare_values
"""

from storage.types import (
    Value, Row, ValueKind, INTEGER_PATTERN,
    is_numeric, coerce_value, coerce_row, compare_values, value_key, infer_kind,
)
from storage.dataset import Dataset
from storage.csv_reader import read_csv, read_csv_text

__all__ = [
    "Value", "Row", "ValueKind", "INTEGER_PATTERN",
    "is_numeric", "coerce_value", "coerce_row", "compare_values", "value_key", "infer_kind",
    "Dataset",
    "read_csv", "read_csv_text",
]

"""
CSVQuery CSV Reader
===================
Ingestion boundary: turns CSV text into a coerced Dataset.

  - First line is the header row; header order is preserved.
  - Every cell goes through coerce_value (^[0-9]+$ -> int).
  - Empty cells stay as empty strings.
  - Short rows simply lack the trailing columns; extra cells are dropped.
"""

import csv
import io
import os
from typing import Iterable, List, TextIO

from storage.dataset import Dataset


def read_csv(path: str, encoding: str = "utf-8") -> Dataset:
    """Read a CSV file with a header row into a Dataset."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"CSV file not found: {path}")
    # newline="" so the csv module handles quoted newlines itself
    with open(path, "r", encoding=encoding, newline="") as f:
        return _read_stream(f)


def read_csv_text(text: str) -> Dataset:
    """Parse CSV content held in memory (tests, --execute pipelines)."""
    return _read_stream(io.StringIO(text))


def _read_stream(stream: TextIO) -> Dataset:
    reader = csv.reader(stream)
    try:
        headers = [h.strip() for h in next(reader)]
    except StopIteration:
        return Dataset([], [])

    return Dataset.from_rows(_rows(reader, headers), headers)


def _rows(records: Iterable[List[str]], headers: List[str]):
    for record in records:
        if not record:
            continue  # blank line
        yield {
            header: cell
            for header, cell in zip(headers, record)
        }

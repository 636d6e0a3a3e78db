"""
CSVQuery Sorted Index
=====================
Per-column sorted index answering =, <, <=, >, >= in O(log n + k).

Layout per column:
  - positions: row positions into the Dataset, ordered by the column value
  - keys:      the column values, parallel to positions

Rows where the column is absent or None are not indexed.
Duplicate keys keep their Dataset order (stable sort).

Boundary semantics (lower = first key >= v, upper = first key > v):
  <   -> positions[:lower]
  <=  -> positions[:upper]
  >   -> positions[upper:]
  >=  -> positions[lower:]
  =   -> binary search for one match, then expand over the run of equals
"""

from functools import cmp_to_key
from typing import List, Tuple

from indexing.base import BaseIndex, InvalidOperatorError, UnindexedColumnError
from storage.dataset import Dataset
from storage.types import Row, Value, compare_values


ColumnEntries = Tuple[List[int], List[Value]]


class SortedIndex(BaseIndex):
    """Binary-search index over sorted column values."""

    supported_operators = frozenset({"=", "<", "<=", ">", ">="})

    def _build_column(self, dataset: Dataset, column: str) -> ColumnEntries:
        # Filter first so the sort only sees rows that carry the column
        present = [
            (position, row[column])
            for position, row in enumerate(dataset)
            if row.get(column) is not None
        ]
        present.sort(key=cmp_to_key(lambda a, b: compare_values(a[1], b[1])))
        positions = [position for position, _ in present]
        keys = [value for _, value in present]
        return positions, keys

    def _entry_count(self, column: str) -> int:
        positions, _ = self._entries.get(column, ([], []))
        return len(positions)

    def keys(self, column: str) -> List[Value]:
        """Sorted key list for `column` (copy)."""
        if column not in self._indexed_columns:
            raise UnindexedColumnError(column, self._indexed_columns)
        _, keys = self._entries.get(column, ([], []))
        return list(keys)

    def query(self, column: str, value: Value, operator: str = "=") -> List[Row]:
        if column not in self._indexed_columns:
            raise UnindexedColumnError(column, self._indexed_columns)
        if operator not in self.supported_operators:
            raise InvalidOperatorError(operator)

        positions, keys = self._entries.get(column, ([], []))
        if not positions:
            return []

        if operator == "=":
            match = _search(keys, value)
            if match == -1:
                return []
            start, end = _expand_equal_run(keys, match, value)
            return self._rows_at(positions[start:end])

        if operator == "<":
            return self._rows_at(positions[:_lower_bound(keys, value)])
        if operator == "<=":
            return self._rows_at(positions[:_upper_bound(keys, value)])
        if operator == ">":
            return self._rows_at(positions[_upper_bound(keys, value):])
        # >=
        return self._rows_at(positions[_lower_bound(keys, value):])


# ─── Binary search helpers ──────────────────────────────────────────────────

def _search(keys: List[Value], value: Value) -> int:
    """Position of any key equal to value, or -1."""
    left, right = 0, len(keys) - 1
    while left <= right:
        mid = (left + right) // 2
        cmp = compare_values(keys[mid], value)
        if cmp == 0:
            return mid
        if cmp < 0:
            left = mid + 1
        else:
            right = mid - 1
    return -1


def _expand_equal_run(keys: List[Value], match: int, value: Value) -> Tuple[int, int]:
    """
    Widen a single match into the [start, end) run of equal keys.
    Binary search alone lands on an arbitrary member of a duplicate run.
    """
    start = match
    while start > 0 and compare_values(keys[start - 1], value) == 0:
        start -= 1
    end = match + 1
    while end < len(keys) and compare_values(keys[end], value) == 0:
        end += 1
    return start, end


def _lower_bound(keys: List[Value], value: Value) -> int:
    """First position whose key is >= value."""
    left, right = 0, len(keys)
    while left < right:
        mid = (left + right) // 2
        if compare_values(keys[mid], value) < 0:
            left = mid + 1
        else:
            right = mid
    return left


def _upper_bound(keys: List[Value], value: Value) -> int:
    """First position whose key is > value."""
    left, right = 0, len(keys)
    while left < right:
        mid = (left + right) // 2
        if compare_values(keys[mid], value) <= 0:
            left = mid + 1
        else:
            right = mid
    return left

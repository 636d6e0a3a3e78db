"""
CSVQuery Hash Index
===================
Per-column grouping of row positions by the string form of the value.
O(1) equality lookups; no ordering.

Equality only. A lookup on a column that was never indexed returns an
empty result instead of raising.
"""

from typing import Dict, List

from indexing.base import BaseIndex, InvalidOperatorError
from storage.dataset import Dataset
from storage.types import Row, Value, value_key


class HashIndex(BaseIndex):
    """Equality index: value key -> row positions (Dataset order)."""

    supported_operators = frozenset({"="})

    def _build_column(self, dataset: Dataset, column: str) -> Dict[str, List[int]]:
        groups: Dict[str, List[int]] = {}
        for position, row in enumerate(dataset):
            key = value_key(row.get(column))
            if key is None:
                continue  # no convertible value
            groups.setdefault(key, []).append(position)
        return groups

    def _entry_count(self, column: str) -> int:
        return sum(len(group) for group in self._entries.get(column, {}).values())

    def group_count(self, column: str) -> int:
        """Number of distinct keys for `column`."""
        return len(self._entries.get(column, {}))

    def query(self, column: str, value: Value, operator: str = "=") -> List[Row]:
        if operator not in self.supported_operators:
            raise InvalidOperatorError(operator)
        groups = self._entries.get(column)
        if not groups:
            return []
        key = value_key(value)
        if key is None:
            return []
        return self._rows_at(groups.get(key, []))

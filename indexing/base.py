"""
CSVQuery Index Contract
=======================
Capability interface shared by every index implementation, plus the
index-level error types.

Contract:
  - build(dataset, columns=None)      full rebuild from the Dataset arena
  - query(column, value, operator)    -> list of rows
  - set_indexed_columns(dataset, cols) replace the indexed set, then rebuild
  - indexed_columns                   columns currently indexed

Indexes never copy rows. They keep the Dataset they were built from and
store row positions into it.
"""

from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, List, Optional, Sequence

from storage.dataset import Dataset
from storage.types import Row, Value


class IndexQueryError(Exception):
    """Base class for query-scoped index failures."""
    pass


class UnindexedColumnError(IndexQueryError):
    """Query issued against a column the index does not cover."""
    def __init__(self, column: str, available: Sequence[str] = ()):
        message = f"Column '{column}' is not indexed"
        if available:
            message += f". Indexed: {list(available)}"
        super().__init__(message)
        self.column = column


class InvalidOperatorError(IndexQueryError):
    """Comparison operator the index cannot answer."""
    def __init__(self, operator: str):
        super().__init__(f"Invalid comparison operator '{operator}'")
        self.operator = operator


class BaseIndex(ABC):
    """Common state and lifecycle for index implementations."""

    # Operators this index knows how to answer
    supported_operators: FrozenSet[str] = frozenset()

    def __init__(self, dataset: Optional[Dataset] = None,
                 indexed_columns: Optional[Sequence[str]] = None):
        self._indexed_columns: List[str] = list(indexed_columns or [])
        self._dataset: Dataset = dataset if dataset is not None else Dataset()
        self.build(self._dataset)

    @property
    def indexed_columns(self) -> List[str]:
        return list(self._indexed_columns)

    @property
    def is_indexed(self) -> bool:
        return bool(self._indexed_columns)

    def set_indexed_columns(self, dataset: Dataset, columns: Sequence[str]) -> None:
        """Replace the indexed column set and rebuild from scratch."""
        self._indexed_columns = list(columns)
        self.build(dataset)

    def build(self, dataset: Dataset, columns: Optional[Sequence[str]] = None) -> None:
        """
        Rebuild every indexed column from `dataset`.
        Passing `columns` replaces the indexed set first.
        """
        if columns is not None:
            self._indexed_columns = list(columns)
        # Build into fresh structures, then swap, so readers of the previous
        # generation never observe a half-built index.
        entries = {column: self._build_column(dataset, column)
                   for column in self._indexed_columns}
        self._dataset = dataset
        self._entries = entries

    def describe(self) -> Dict[str, int]:
        """Number of indexed rows per column."""
        return {column: self._entry_count(column) for column in self._indexed_columns}

    def _rows_at(self, positions: Sequence[int]) -> List[Row]:
        dataset = self._dataset
        return [dataset[p] for p in positions]

    # ─── Implementation hooks ───────────────────────────────────────

    @abstractmethod
    def _build_column(self, dataset: Dataset, column: str):
        """Return the per-column structure for `column`."""

    @abstractmethod
    def _entry_count(self, column: str) -> int:
        ...

    @abstractmethod
    def query(self, column: str, value: Value, operator: str = "=") -> List[Row]:
        """Return the rows of the indexed Dataset matching `column <operator> value`."""

"""
CSVQuery Dataset
================
The in-memory row arena. A Dataset is the single source of truth for row
contents; indexes only hold row positions into it.

Rows are copied (and coerced) once on the way in and never mutated after.
A Dataset is never patched in place: extending one returns a new Dataset.
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from storage.types import Row, coerce_row, infer_kind, ValueKind


class Dataset:
    """
    Ordered, immutable-by-convention collection of rows.

    Usage:
        ds = Dataset.from_rows([{"id": "1", "name": "a"}])
        ds[0]        # {"id": 1, "name": "a"}
        ds.headers   # ["id", "name"]
    """

    __slots__ = ("_rows", "_headers")

    def __init__(self, rows: Sequence[Row] = (), headers: Optional[Sequence[str]] = None):
        self._rows: List[Row] = list(rows)
        if headers is None:
            headers = _discover_headers(self._rows)
        self._headers: List[str] = list(headers)

    @classmethod
    def from_rows(cls, rows: Iterable[Dict[str, Any]],
                  headers: Optional[Sequence[str]] = None) -> "Dataset":
        """Build a Dataset from raw rows, copying and coercing every cell."""
        return cls([coerce_row(row) for row in rows], headers)

    @property
    def headers(self) -> List[str]:
        return list(self._headers)

    @property
    def rows(self) -> List[Row]:
        """Shallow copy of the row list (rows themselves are shared)."""
        return list(self._rows)

    def extend(self, other: "Dataset") -> "Dataset":
        """Return a new Dataset with other's rows appended after ours."""
        headers = list(self._headers)
        for header in other._headers:
            if header not in headers:
                headers.append(header)
        return Dataset(self._rows + other._rows, headers)

    def column_values(self, column: str) -> Iterator[Any]:
        """Yield the value of `column` for every row that has it."""
        for row in self._rows:
            if column in row:
                yield row[column]

    def column_kind(self, column: str) -> ValueKind:
        return infer_kind(self.column_values(column))

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __getitem__(self, position: int) -> Row:
        return self._rows[position]

    def __repr__(self) -> str:
        return f"Dataset(rows={len(self._rows)}, headers={self._headers})"


def _discover_headers(rows: Iterable[Row]) -> List[str]:
    """Column names in order of first appearance across rows."""
    seen: Dict[str, None] = {}
    for row in rows:
        for column in row:
            seen.setdefault(column, None)
    return list(seen)

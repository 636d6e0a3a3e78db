"""
CSVQuery Index Catalog
======================
The query engine: owns the working Dataset plus one index per role and
routes each structured query to the index that can answer it.

Roles:
  - EQUALITY  (=)              default: HashIndex
  - ORDER     (<, <=, >, >=)   default: SortedIndex

Index coverage is decided once:
  - explicit columns at construction -> every later load rebuilds those columns
  - no columns -> the first non-empty data (constructor or load) is
    discovered and every header gets indexed

Lifecycle per index: unindexed -> indexed (discovery / reindex),
indexed -> indexed (load / reindex). There is no way back to unindexed.

Concurrency: single-writer. Rebuilds run to completion before load()
or reindex() return.
"""

import time
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from indexing.base import BaseIndex, IndexQueryError
from indexing.hash_index import HashIndex
from indexing.sorted_index import SortedIndex
from parser.query import StructuredQuery
from storage.dataset import Dataset
from storage.types import Row, coerce_value


class UnsupportedOperatorError(IndexQueryError):
    """Operator with no index role assigned."""
    def __init__(self, operator: str):
        super().__init__(
            f"Unsupported operator '{operator}'. "
            f"Allowed operators are {', '.join(OPERATOR_ROLES)}"
        )
        self.operator = operator


class IndexRole(Enum):
    EQUALITY = "equality"
    ORDER = "order"


# Static dispatch: operator -> role
OPERATOR_ROLES: Dict[str, IndexRole] = {
    "=": IndexRole.EQUALITY,
    "<": IndexRole.ORDER,
    "<=": IndexRole.ORDER,
    ">": IndexRole.ORDER,
    ">=": IndexRole.ORDER,
}


def project_rows(rows: Iterable[Mapping[str, Any]], columns: Sequence[str]) -> List[Row]:
    """
    Reduce each row to the requested columns.
    Keys keep the row's own order; requested columns a row lacks are omitted.
    """
    wanted = set(columns)
    return [
        {key: value for key, value in row.items() if key in wanted}
        for row in rows
    ]


class IndexCatalog:
    """
    Dataset + index pair, with operator-based dispatch.

    Usage:
        catalog = IndexCatalog(indexed_columns=["id", "name"])
        catalog.load([{"id": "1", "name": "a"}])
        catalog.execute(parse_query('PROJECT name FILTER id >= 1'))
    """

    def __init__(self, dataset: Optional[Iterable[Mapping[str, Any]]] = None,
                 indexed_columns: Optional[Sequence[str]] = None, *,
                 equality_index: Optional[BaseIndex] = None,
                 order_index: Optional[BaseIndex] = None):
        self._dataset = _as_dataset(dataset)
        columns = list(indexed_columns or [])

        if not columns and len(self._dataset):
            columns = self._dataset.headers

        # User-supplied implementations take over their role
        self._indexes: Dict[IndexRole, BaseIndex] = {
            IndexRole.EQUALITY: (equality_index if equality_index is not None
                                 else HashIndex(self._dataset, columns)),
            IndexRole.ORDER: (order_index if order_index is not None
                              else SortedIndex(self._dataset, columns)),
        }
        if columns:
            for supplied in (equality_index, order_index):
                if supplied is not None:
                    supplied.set_indexed_columns(self._dataset, columns)

        self.last_rebuild_seconds: float = 0.0

    # ─── Accessors ──────────────────────────────────────────────────

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def indexes(self) -> Dict[IndexRole, BaseIndex]:
        return dict(self._indexes)

    @property
    def indexed_columns(self) -> Dict[IndexRole, List[str]]:
        return {role: index.indexed_columns for role, index in self._indexes.items()}

    @property
    def state(self) -> Dict[IndexRole, str]:
        return {
            role: "indexed" if index.is_indexed else "unindexed"
            for role, index in self._indexes.items()
        }

    def index_for(self, operator: str) -> BaseIndex:
        """Index responsible for `operator`."""
        role = OPERATOR_ROLES.get(operator)
        if role is None:
            raise UnsupportedOperatorError(operator)
        return self._indexes[role]

    # ─── Loading / Rebuild ──────────────────────────────────────────

    def load(self, rows: Iterable[Mapping[str, Any]],
             headers: Optional[Sequence[str]] = None, *,
             append: bool = False) -> Dataset:
        """
        Make `rows` the working Dataset (or append them) and rebuild indexes.

        If neither index has columns yet, every header of the loaded data
        becomes indexed (discovery). Otherwise the current columns are
        rebuilt over the new data.

        Returns the resident Dataset, post-coercion.
        """
        incoming = _as_dataset(rows, headers)
        dataset = self._dataset.extend(incoming) if append else incoming

        start = time.perf_counter()
        if not any(index.is_indexed for index in self._indexes.values()):
            for index in self._indexes.values():
                index.set_indexed_columns(dataset, dataset.headers)
        else:
            for index in self._indexes.values():
                index.build(dataset)
        self.last_rebuild_seconds = time.perf_counter() - start

        self._dataset = dataset
        return dataset

    def reindex(self, columns: Sequence[str]) -> None:
        """Replace the indexed columns of both indexes and rebuild."""
        columns = list(columns)
        if not columns:
            raise ValueError("reindex requires at least one column")

        start = time.perf_counter()
        for index in self._indexes.values():
            index.set_indexed_columns(self._dataset, columns)
        self.last_rebuild_seconds = time.perf_counter() - start

    # ─── Query Execution ────────────────────────────────────────────

    def execute(self, query: StructuredQuery) -> List[Row]:
        """
        Run a structured query and return projected rows.

        1. operator -> index role
        2. integer-looking text value -> int
        3. index lookup
        4. projection onto query.projected_columns
        """
        condition = query.filter_condition
        index = self.index_for(condition.operator)
        value = coerce_value(condition.value)

        matches = index.query(condition.column, value, condition.operator)
        return project_rows(matches, query.projected_columns)

    def __repr__(self) -> str:
        return (f"IndexCatalog(rows={len(self._dataset)}, "
                f"indexed={self._indexes[IndexRole.ORDER].indexed_columns})")


def build_catalog(columns: Sequence[str],
                  dataset: Optional[Iterable[Mapping[str, Any]]] = None) -> IndexCatalog:
    """Construct an IndexCatalog indexing `columns` over `dataset`."""
    return IndexCatalog(dataset, columns)


def _as_dataset(rows: Optional[Iterable[Mapping[str, Any]]],
                headers: Optional[Sequence[str]] = None) -> Dataset:
    if rows is None:
        return Dataset([], headers or [])
    if isinstance(rows, Dataset) and headers is None:
        headers = rows.headers
    return Dataset.from_rows(rows, headers)

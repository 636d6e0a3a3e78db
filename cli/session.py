"""
CSVQuery Session
================
Per-shell state object that wires the engine components together.

Owns:
  - IndexCatalog (Dataset + indexes)
  - the active parse engine
  - session statistics

The parse engine is plain session state passed into every parse call;
there is no global engine setting.
"""

import os
import time
from typing import List, Optional, Sequence, Tuple

from catalog.index_catalog import IndexCatalog, IndexRole
from parser import PARSERS, get_parser, QueryParser
from storage.csv_reader import read_csv
from storage.types import Row


class SessionError(Exception):
    """Session-level error (loading, configuration)."""
    pass


class Session:
    """
    Query session over one in-memory Dataset.

    Usage:
        with Session("people.csv", indexed_columns=["id"]) as session:
            rows, columns, elapsed = session.execute('PROJECT name FILTER id > 2')
    """

    def __init__(self, csv_path: Optional[str] = None, *,
                 indexed_columns: Optional[Sequence[str]] = None,
                 engine: str = "grammar"):
        self.catalog = IndexCatalog(indexed_columns=indexed_columns)
        self.engine: str = ""
        self._parser: Optional[QueryParser] = None
        self.set_engine(engine)

        self.source_paths: List[str] = []
        self._closed: bool = False

        # ── Statistics ──
        self.stats = {
            "queries_executed": 0,
            "queries_failed": 0,
            "rows_loaded": 0,
            "loads": 0,
        }

        if csv_path:
            self.load_csv(csv_path)

    # ─── Configuration ──────────────────────────────────────────────

    def set_engine(self, engine: str) -> str:
        """Switch the parse engine. Returns status message."""
        self._check_closed()
        if engine not in PARSERS:
            raise SessionError(
                f"Unknown query engine '{engine}'. Choose one of: {', '.join(sorted(PARSERS))}"
            )
        self._parser = get_parser(engine)
        self.engine = engine
        return f'Using "{engine}" query engine'

    def reindex(self, columns: Sequence[str]) -> str:
        """Re-index both indexes over `columns`. Returns status message."""
        self._check_closed()
        columns = [c for c in columns if c]
        if not columns:
            raise SessionError("No columns given to index")
        unknown = [c for c in columns if c not in self.catalog.dataset.headers]
        if unknown and len(self.catalog.dataset):
            raise SessionError(
                f"Column(s) not found: {unknown}. "
                f"Available: {self.catalog.dataset.headers}"
            )
        self.catalog.reindex(columns)
        return (f"Indexed {', '.join(columns)} "
                f"in {self.catalog.last_rebuild_seconds * 1000:.2f}ms")

    # ─── Loading ────────────────────────────────────────────────────

    def load_csv(self, path: str, append: bool = False) -> str:
        """Load a CSV file and rebuild indexes. Returns status message."""
        self._check_closed()
        if not os.path.isfile(path):
            raise SessionError(f"CSV file not found: {path}")

        dataset = read_csv(path)
        resident = self.catalog.load(dataset, append=append)

        self.source_paths = self.source_paths + [path] if append else [path]
        self.stats["loads"] += 1
        self.stats["rows_loaded"] = len(resident)

        verb = "Appended" if append else "Loaded"
        return (f"{verb} {len(dataset)} row(s) from {path}; "
                f"indexes rebuilt in {self.catalog.last_rebuild_seconds * 1000:.2f}ms")

    # ─── Query Execution ────────────────────────────────────────────

    def execute(self, text: str) -> Tuple[List[Row], List[str], float]:
        """
        Parse and run one query.

        Returns: (rows, projected_column_names, elapsed_seconds)
        Elapsed time covers parsing and execution, not rendering.
        """
        self._check_closed()
        start = time.perf_counter()
        try:
            query = self._parser.parse(text.strip())
            rows = self.catalog.execute(query)
        except Exception:
            self.stats["queries_failed"] += 1
            raise
        elapsed = time.perf_counter() - start
        self.stats["queries_executed"] += 1
        return rows, list(query.projected_columns), elapsed

    # ─── Introspection ──────────────────────────────────────────────

    @property
    def headers(self) -> List[str]:
        return self.catalog.dataset.headers

    def index_summary(self) -> List[Tuple[str, str, int]]:
        """(role, column, indexed_row_count) for every indexed column."""
        summary = []
        for role, index in self.catalog.indexes.items():
            for column, count in index.describe().items():
                summary.append((role.value, column, count))
        return summary

    def column_summary(self) -> List[Tuple[str, str, bool]]:
        """(column, value kind, is_indexed) for every header."""
        indexed = set(self.catalog.indexed_columns[IndexRole.ORDER])
        dataset = self.catalog.dataset
        return [
            (column, dataset.column_kind(column).value.lower(), column in indexed)
            for column in dataset.headers
        ]

    def _check_closed(self):
        if self._closed:
            raise SessionError("Session is closed")

    # ─── Lifecycle ──────────────────────────────────────────────────

    def close(self) -> None:
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

"""
CSVQuery Indexing Module
========================
In-memory secondary indexes over a Dataset.

Components:
  - base: shared index contract and index errors
  - sorted_index: binary-search index for ordered comparisons
  - hash_index: grouped index for equality lookups
"""

from indexing.base import (
    BaseIndex, IndexQueryError, UnindexedColumnError, InvalidOperatorError,
)
from indexing.sorted_index import SortedIndex
from indexing.hash_index import HashIndex

__all__ = [
    "BaseIndex", "IndexQueryError", "UnindexedColumnError", "InvalidOperatorError",
    "SortedIndex", "HashIndex",
]

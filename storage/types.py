"""
CSVQuery Value Model
====================
Defines the scalar values a Row can hold and the rules every index relies on:
numeric coercion, cross-value ordering and hash-key normalization.

Values:
  - int / float  (numeric; bool is NOT numeric)
  - str

Ordering rule:
  numeric vs numeric compares numerically, anything else compares the
  str() forms lexicographically. Mixing numbers and strings inside one
  column is undefined territory: the order is deterministic but carries
  no meaning.
"""

import re
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union

Value = Union[int, float, str]
Row = Dict[str, Value]


class ValueKind(Enum):
    """Kinds of values a column may hold."""
    NUMBER = "NUMBER"
    STRING = "STRING"
    MIXED = "MIXED"
    EMPTY = "EMPTY"


# Same rule at ingestion and at query-value normalization.
INTEGER_PATTERN = re.compile(r"[0-9]+")


# ─── Coercion ───────────────────────────────────────────────────────────────

def is_numeric(value: Any) -> bool:
    """Return True for int/float values (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_value(value: Any) -> Any:
    """
    Coerce integer-looking text to an int.
    Anything that is not a string matching ^[0-9]+$ passes through unchanged.
    """
    if isinstance(value, str) and INTEGER_PATTERN.fullmatch(value):
        return int(value)
    return value


def coerce_row(row: Dict[str, Any]) -> Row:
    """Return a new row with every cell coerced."""
    return {column: coerce_value(cell) for column, cell in row.items()}


# ─── Ordering ───────────────────────────────────────────────────────────────

def compare_values(a: Value, b: Value) -> int:
    """
    Three-way compare two Values. Returns -1, 0 or 1.
    Numeric if both are numeric, otherwise string comparison.
    """
    if is_numeric(a) and is_numeric(b):
        left, right = a, b
    else:
        left, right = str(a), str(b)
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


# ─── Hash keys ──────────────────────────────────────────────────────────────

def value_key(value: Any) -> Optional[str]:
    """
    Normalize a Value to the string form used as a hash-index key.
    Integral floats drop their fractional part so 3.0 and 3 share a key.
    Returns None for values that have no key (None).
    """
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def infer_kind(values: Iterable[Any]) -> ValueKind:
    """Infer the ValueKind of a column from its non-None values."""
    kinds = set()
    for value in values:
        if value is None:
            continue
        kinds.add(ValueKind.NUMBER if is_numeric(value) else ValueKind.STRING)
        if len(kinds) > 1:
            return ValueKind.MIXED
    if not kinds:
        return ValueKind.EMPTY
    return kinds.pop()

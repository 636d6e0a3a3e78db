"""
CSVQuery Query Nodes
====================
Structured representation produced by every parse engine.

The filter value stays as text (quotes removed). Turning "42" into 42 is
the engine's job, not the parser's.
"""

from dataclasses import dataclass, field
from typing import List, Union


# Allowed comparison operators, longest first for prefix matching
OPERATORS = ("<=", ">=", "<", ">", "=")


@dataclass(frozen=True)
class FilterCondition:
    """Single-column comparison: column <operator> value."""
    column: str
    operator: str
    value: Union[str, int, float]

    def __str__(self) -> str:
        if isinstance(self.value, str):
            quote = "'" if '"' in self.value else '"'
            return f"{self.column} {self.operator} {quote}{self.value}{quote}"
        return f"{self.column} {self.operator} {self.value}"


@dataclass(frozen=True)
class StructuredQuery:
    """PROJECT <projected_columns> FILTER <filter_condition>."""
    projected_columns: List[str] = field(hash=False)
    filter_condition: FilterCondition

    def __str__(self) -> str:
        return f"PROJECT {', '.join(self.projected_columns)} FILTER {self.filter_condition}"


class QueryParser:
    """
    Parse engine interface: text in, StructuredQuery out.
    Raises InvalidSyntaxError (or a subclass) on malformed input.
    """

    name = ""

    def parse(self, text: str) -> StructuredQuery:
        raise NotImplementedError

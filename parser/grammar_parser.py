"""
CSVQuery Grammar Parser
=======================
Clause-by-clause parser with a specific error for every failure.

Grammar:
    query       := "PROJECT" ws column-list ws "FILTER" ws column ws operator ws value
    column-list := column ("," ws? column)*
    column      := [A-Za-z0-9_]+
    operator    := "<=" | ">=" | "<" | ">" | "="
    value       := quoted-string | integer-literal

Tokenization splits on whitespace; a quoted string is kept as one token
even when it contains spaces. Keywords are case-sensitive.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from parser.errors import ClauseSyntaxError
from parser.query import OPERATORS, FilterCondition, QueryParser, StructuredQuery


COLUMN_PATTERN = re.compile(r"[A-Za-z0-9_]+")
VALUE_PATTERN = re.compile(r"\"[^\"]*\"|'[^']*'|[0-9]+")
TOKEN_PATTERN = re.compile(r"\"[^\"]*\"|'[^']*'|\S+")


@dataclass(frozen=True)
class Token:
    """Whitespace-delimited word with its offset in the query text."""
    value: str
    pos: int

    def __repr__(self) -> str:
        return f"Token('{self.value}', {self.pos})"


def tokenize(text: str) -> List[Token]:
    """Split query text into whitespace-delimited tokens."""
    return [Token(m.group(0), m.start()) for m in TOKEN_PATTERN.finditer(text)]


class GrammarParser(QueryParser):
    """
    Validates PROJECT, FILTER, column, operator and value independently.
    Each instance is stateless; parse() may be called repeatedly.
    """

    name = "grammar"

    def parse(self, text: str) -> StructuredQuery:
        tokens = tokenize(text)
        end = len(text.rstrip())

        columns, rest = self._parse_project(tokens, end)
        column, rest = self._parse_filter_column(rest, end)
        operator, rest = self._parse_operator(rest, column, end)
        value, rest = self._parse_value(rest, end)

        if rest:
            raise ClauseSyntaxError(
                f"unexpected token '{rest[0].value}' after value", "value", rest[0].pos
            )

        return StructuredQuery(
            projected_columns=columns,
            filter_condition=FilterCondition(column=column, operator=operator, value=value),
        )

    # ─── Clauses ────────────────────────────────────────────────────

    def _parse_project(self, tokens: List[Token], end: int) -> Tuple[List[str], List[Token]]:
        if not tokens or tokens[0].value != "PROJECT":
            pos = tokens[0].pos if tokens else 0
            raise ClauseSyntaxError("query must start with PROJECT", "PROJECT", pos)

        # The filter clause is exactly four tokens, so a well-formed query has
        # its keyword at len - 4 even when FILTER is also a projected column.
        filter_at = len(tokens) - 4
        if filter_at < 1 or tokens[filter_at].value != "FILTER":
            filter_at = self._find_keyword(tokens, "FILTER", start=1)
        if filter_at is None:
            raise ClauseSyntaxError("missing FILTER clause", "FILTER", end)

        column_tokens = tokens[1:filter_at]
        columns = self._split_columns(column_tokens)
        if columns is None:
            pos = column_tokens[0].pos if column_tokens else tokens[filter_at].pos
            raise ClauseSyntaxError("no columns specified", "PROJECT", pos)

        return columns, tokens[filter_at + 1:]

    def _parse_filter_column(self, tokens: List[Token], end: int) -> Tuple[str, List[Token]]:
        if not tokens or not COLUMN_PATTERN.fullmatch(tokens[0].value):
            pos = tokens[0].pos if tokens else end
            raise ClauseSyntaxError("expected a column name after FILTER", "FILTER", pos)
        return tokens[0].value, tokens[1:]

    def _parse_operator(self, tokens: List[Token], column: str,
                        end: int) -> Tuple[str, List[Token]]:
        if not tokens:
            raise ClauseSyntaxError(
                f"missing comparison operator after '{column}'", "operator", end
            )
        operator = tokens[0].value
        if operator not in OPERATORS:
            raise ClauseSyntaxError(
                f"unsupported operator '{operator}'. "
                f"Allowed operators are {', '.join(OPERATORS)}",
                "operator", tokens[0].pos,
            )
        return operator, tokens[1:]

    def _parse_value(self, tokens: List[Token], end: int) -> Tuple[str, List[Token]]:
        if not tokens or not VALUE_PATTERN.fullmatch(tokens[0].value):
            pos = tokens[0].pos if tokens else end
            raise ClauseSyntaxError(
                "value must be a number or a quoted string", "value", pos
            )
        value = tokens[0].value
        if value[0] in "\"'":
            value = value[1:-1]
        return value, tokens[1:]

    # ─── Helpers ────────────────────────────────────────────────────

    def _find_keyword(self, tokens: List[Token], keyword: str, start: int = 0) -> Optional[int]:
        for i in range(start, len(tokens)):
            if tokens[i].value == keyword:
                return i
        return None

    def _split_columns(self, tokens: List[Token]) -> Optional[List[str]]:
        """
        Rebuild the column list from its tokens and validate it.
        Whitespace may follow a comma but never precede one.
        Returns None when the list is empty or malformed.
        """
        if not tokens:
            return None
        columns = []
        for part in " ".join(t.value for t in tokens).split(","):
            name = part.lstrip()
            if not COLUMN_PATTERN.fullmatch(name):
                return None
            columns.append(name)
        return columns

"""
CSVQuery Query Parser
=====================
Public API for the query language.

Usage:
    from parser import parse_query, InvalidSyntaxError

    query = parse_query('PROJECT id, name FILTER id >= 2', engine="grammar")
    print(query.filter_condition.operator)

Engines:
    pattern  single compiled pattern, one generic error
    grammar  clause-by-clause validation, specific errors
"""

from typing import Dict, Type

from parser.errors import InvalidSyntaxError, ClauseSyntaxError
from parser.query import OPERATORS, FilterCondition, StructuredQuery, QueryParser
from parser.pattern_parser import PatternParser
from parser.grammar_parser import GrammarParser

PARSERS: Dict[str, Type[QueryParser]] = {
    PatternParser.name: PatternParser,
    GrammarParser.name: GrammarParser,
}

DEFAULT_ENGINE = PatternParser.name


def get_parser(engine: str) -> QueryParser:
    """Instantiate the parser registered under `engine`."""
    try:
        return PARSERS[engine]()
    except KeyError:
        raise ValueError(
            f"Unknown query engine {engine!r}. Valid engines: {sorted(PARSERS)}"
        ) from None


def parse_query(text: str, engine: str = DEFAULT_ENGINE) -> StructuredQuery:
    """
    Parse query text into a StructuredQuery.
    Raises InvalidSyntaxError if syntax is invalid.
    """
    return get_parser(engine).parse(text)


__all__ = [
    "parse_query", "get_parser", "PARSERS", "DEFAULT_ENGINE",
    "InvalidSyntaxError", "ClauseSyntaxError",
    "OPERATORS", "FilterCondition", "StructuredQuery", "QueryParser",
    "PatternParser", "GrammarParser",
]

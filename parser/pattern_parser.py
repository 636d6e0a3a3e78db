"""
CSVQuery Pattern Parser
=======================
Matches the whole query against one compiled pattern.
Cheap, but every failure is reported as the same generic error.
"""

import re

from parser.errors import InvalidSyntaxError
from parser.query import FilterCondition, QueryParser, StructuredQuery


QUERY_PATTERN = re.compile(
    r"PROJECT\s+"
    r"(?P<columns>[A-Za-z0-9_]+(?:,\s*[A-Za-z0-9_]+)*)"
    r"\s+FILTER\s+"
    r"(?P<column>[A-Za-z0-9_]+)"
    r"\s+(?P<operator><=|>=|<|>|=)\s+"
    r"(?P<value>\"[^\"]*\"|'[^']*'|[0-9]+)"
)


class PatternParser(QueryParser):
    """Single-pattern query parser."""

    name = "pattern"

    def parse(self, text: str) -> StructuredQuery:
        match = QUERY_PATTERN.fullmatch(text.strip())
        if match is None:
            raise InvalidSyntaxError("Invalid query syntax")

        columns = [column.strip() for column in match.group("columns").split(",")]
        value = match.group("value")
        if value[0] in "\"'":
            value = value[1:-1]

        return StructuredQuery(
            projected_columns=columns,
            filter_condition=FilterCondition(
                column=match.group("column"),
                operator=match.group("operator"),
                value=value,
            ),
        )

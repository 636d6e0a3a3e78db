"""
CSVQuery Parser Errors
======================
InvalidSyntaxError is the one type callers need to catch. The grammar
engine raises the ClauseSyntaxError subclass, which also says which
clause failed and where.
"""

from typing import Optional


class InvalidSyntaxError(Exception):
    """Malformed query text."""
    pass


class ClauseSyntaxError(InvalidSyntaxError):
    """Syntax error tied to one clause of the query."""
    def __init__(self, message: str, clause: str, position: Optional[int] = None):
        text = f"Invalid query: {message}"
        if position is not None:
            text += f" (at column {position + 1})"
        super().__init__(text)
        self.reason = message
        self.clause = clause
        self.position = position

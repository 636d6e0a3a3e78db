"""
CSVQuery Result Renderer
========================
Formats query results for the terminal.

Features:
  - Modes: table (aligned ASCII), vertical (one key: value per line), raw (pipe separated)
  - Columns follow the PROJECT order; a column a row lacks renders empty
  - Row count + elapsed time footer
  - Error classification prefixes
  - Debug status lines on a separate stream (stderr by default)
"""

import sys
from typing import Any, Dict, List, Optional, Sequence, TextIO


class Renderer:
    """
    Result renderer with configurable display modes.
    """

    MODES = ("table", "vertical", "raw")

    def __init__(self, output: TextIO = None, status_output: TextIO = None):
        self.output = output or sys.stdout
        self.status_output = status_output or sys.stderr
        self.mode: str = "table"
        self.show_headers: bool = True
        self.show_timer: bool = True
        self.show_status: bool = False    # debug lines
        self.display_limit: Optional[int] = None  # None = no limit
        self.max_col_width: int = 50

    # ─── Public API ─────────────────────────────────────────────────

    def render_rows(self, rows: Sequence[Dict[str, Any]],
                    column_names: Optional[List[str]] = None,
                    elapsed: Optional[float] = None) -> int:
        """
        Render query results. Returns number of rows rendered.
        `elapsed` is the query time in seconds, shown when the timer is on.
        """
        headers = list(column_names) if column_names else _headers_from_rows(rows)
        shown = list(rows)
        truncated = False
        if self.display_limit is not None and len(shown) > self.display_limit:
            shown = shown[:self.display_limit]
            truncated = True

        if self.mode == "raw":
            self._render_raw(shown, headers)
        elif self.mode == "vertical":
            self._render_vertical(shown, headers)
        else:
            self._render_table(shown, headers)

        if truncated:
            self._print(f"... (display limit {self.display_limit} reached)")

        footer = f"\nRetrieved {len(rows)} row(s)"
        if self.show_timer and elapsed is not None:
            footer += f" in {elapsed * 1000:.3f}ms"
        self._print(footer)
        return len(shown)

    def render_message(self, message: str):
        """Render a status message (load, index, configuration)."""
        if message:
            self._print(message)

    def render_status(self, message: str):
        """Render a debug status line when status output is enabled."""
        if self.show_status and message:
            print(message, file=self.status_output)

    def render_error(self, error: Exception):
        """Render an error with classification prefix."""
        prefix = self._classify_error(type(error).__name__)
        print(f"{prefix}: {error}", file=self.status_output)

    # ─── Table Mode ─────────────────────────────────────────────────

    def _render_table(self, rows: List[Dict[str, Any]], headers: List[str]):
        if not headers:
            return
        widths = self._calculate_widths(headers, rows)

        if self.show_headers:
            self._print_table_separator(widths, headers)
            self._print_table_row(widths, headers, {h: h for h in headers})
        self._print_table_separator(widths, headers)

        for row in rows:
            self._print_table_row(widths, headers, row)

        if rows:
            self._print_table_separator(widths, headers)

    def _calculate_widths(self, headers: List[str], rows: List[Dict]) -> Dict[str, int]:
        """Calculate column widths from headers and rows."""
        widths = {h: min(len(h), self.max_col_width) for h in headers}
        for row in rows:
            for h in headers:
                val = self._format_value(row.get(h))
                widths[h] = max(widths[h], min(len(val), self.max_col_width))
        return widths

    def _print_table_separator(self, widths: Dict[str, int], headers: List[str]):
        """Print +----+------+ separator line."""
        self._print("+" + "".join("-" * (widths[h] + 2) + "+" for h in headers))

    def _print_table_row(self, widths: Dict[str, int], headers: List[str], vals: Dict):
        """Print | col1 | col2 | row."""
        parts = ["|"]
        for h in headers:
            raw_val = vals.get(h)
            val_str = self._format_value(raw_val)
            if len(val_str) > self.max_col_width:
                val_str = val_str[:self.max_col_width - 3] + "..."
            w = widths[h]
            # Right-align numbers, left-align strings
            if isinstance(raw_val, (int, float)) and not isinstance(raw_val, bool):
                parts.append(f" {val_str:>{w}} |")
            else:
                parts.append(f" {val_str:<{w}} |")
        self._print("".join(parts))

    # ─── Vertical Mode ──────────────────────────────────────────────

    def _render_vertical(self, rows: List[Dict[str, Any]], headers: List[str]):
        max_key_len = max((len(h) for h in headers), default=0)
        for count, row in enumerate(rows, start=1):
            self._print(f"*** Row {count} ***")
            for h in headers:
                if h in row:
                    self._print(f"  {h:>{max_key_len}}: {self._format_value(row[h])}")

    # ─── Raw Mode ───────────────────────────────────────────────────

    def _render_raw(self, rows: List[Dict[str, Any]], headers: List[str]):
        if self.show_headers and headers:
            self._print("|".join(headers))
        for row in rows:
            self._print("|".join(self._format_value(row.get(h)) for h in headers))

    # ─── Helpers ────────────────────────────────────────────────────

    def _format_value(self, value) -> str:
        """Format a single value for display. Absent values render empty."""
        if value is None:
            return ""
        if isinstance(value, float):
            if value.is_integer():
                return str(int(value))
            return f"{value:.6g}"
        return str(value)

    def _classify_error(self, error_type: str) -> str:
        """Map error class name to user-friendly prefix."""
        mapping = {
            "InvalidSyntaxError": "SyntaxError",
            "ClauseSyntaxError": "SyntaxError",
            "UnindexedColumnError": "IndexError",
            "InvalidOperatorError": "QueryError",
            "UnsupportedOperatorError": "QueryError",
            "SessionError": "SessionError",
            "FileNotFoundError": "LoadError",
            "UnicodeDecodeError": "LoadError",
            "ValueError": "QueryError",
            "KeyboardInterrupt": "Interrupted",
        }
        return mapping.get(error_type, f"Error[{error_type}]")

    def _print(self, text: str):
        """Print a line to the output stream."""
        print(text, file=self.output)


def _headers_from_rows(rows: Sequence[Dict[str, Any]]) -> List[str]:
    seen: Dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(key, None)
    return list(seen)

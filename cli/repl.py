"""
CSVQuery Interactive REPL
=========================
Interactive shell with csvquery> prompt.

Features:
  - One query per line (PROJECT ... FILTER ...)
  - Meta-commands (dot-prefixed)
  - Ctrl+C: cancel current input
  - Ctrl+D/EOF: exit
  - Persistent readline history (~/.csvquery_history)
  - Error classification and display; a failed query never ends the session
"""

import os
from typing import Optional

from cli.session import Session
from cli.renderer import Renderer


# ─── History ────────────────────────────────────────────────────────
HISTORY_FILE = os.path.expanduser("~/.csvquery_history")
HISTORY_MAX = 1000

try:
    import readline
    _HAS_READLINE = True
except ImportError:
    _HAS_READLINE = False


def _load_history():
    if _HAS_READLINE and os.path.exists(HISTORY_FILE):
        try:
            readline.read_history_file(HISTORY_FILE)
        except OSError:
            pass


def _save_history():
    if _HAS_READLINE:
        try:
            readline.set_history_length(HISTORY_MAX)
            readline.write_history_file(HISTORY_FILE)
        except OSError:
            pass


# ─── REPL ───────────────────────────────────────────────────────────

class REPL:
    """
    Interactive CSVQuery shell.

    Usage:
        repl = REPL(Session("data.csv"))
        repl.run()
    """

    PROMPT = "csvquery> "

    def __init__(self, session: Session, renderer: Optional[Renderer] = None):
        self.session = session
        self.renderer = renderer or Renderer()
        self._running = False

    def run(self):
        """Main REPL loop."""
        _load_history()
        self._running = True

        print("CSVQuery v0.3.0")
        if self.session.source_paths:
            print(f"Data: {', '.join(self.session.source_paths)} "
                  f"({len(self.session.catalog.dataset)} rows)")
        print(f'Using "{self.session.engine}" query engine')
        print('Type ".help" for usage hints.')
        print()

        try:
            while self._running:
                try:
                    line = input(self.PROMPT)
                except KeyboardInterrupt:
                    # Ctrl+C: cancel current input
                    print()
                    continue
                except EOFError:
                    print()
                    break
                self.handle_line(line)
        finally:
            _save_history()
            self._shutdown()

    def handle_line(self, line: str):
        """Dispatch one line of input: meta-command or query."""
        stripped = line.strip()
        if not stripped:
            return
        if stripped.startswith("."):
            self._handle_meta_command(stripped)
        else:
            self._execute_query(stripped)

    # ─── Query Execution ────────────────────────────────────────────

    def _execute_query(self, text: str):
        """Execute a single query with error handling."""
        try:
            rows, columns, elapsed = self.session.execute(text)
            self.renderer.render_rows(rows, columns, elapsed)
        except KeyboardInterrupt:
            print("\nQuery interrupted.")
        except Exception as e:
            self.renderer.render_error(e)

    # ─── Meta-Commands ──────────────────────────────────────────────

    def _handle_meta_command(self, line: str):
        """Handle dot-prefixed meta-commands."""
        parts = line.split(None, 1)
        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        try:
            if cmd in (".quit", ".exit", ".q"):
                self._running = False
            elif cmd == ".help":
                self._cmd_help()
            elif cmd == ".load":
                self._cmd_load(arg)
            elif cmd == ".engine":
                self._cmd_engine(arg)
            elif cmd == ".index":
                self._cmd_index(arg)
            elif cmd == ".indexes":
                self._cmd_indexes()
            elif cmd == ".columns":
                self._cmd_columns()
            elif cmd == ".mode":
                self._cmd_mode(arg)
            elif cmd == ".timer":
                self._cmd_timer(arg)
            elif cmd == ".headers":
                self._cmd_headers(arg)
            elif cmd == ".limit":
                self._cmd_limit(arg)
            elif cmd == ".stats":
                self._cmd_stats()
            else:
                print(f"Unknown command: {cmd}. Type .help for available commands.")
        except Exception as e:
            self.renderer.render_error(e)

    def _cmd_help(self):
        print("""CSVQuery Commands:
  .help                     Show this help
  .load PATH [append]       Load a CSV file (replace, or append to current data)
  .engine [pattern|grammar] Show or switch the query parsing engine
  .index COL [COL ...]      Re-index the given columns
  .indexes                  List indexed columns per index
  .columns                  List columns with inferred kinds
  .mode table|vertical|raw  Set output mode (default: table)
  .timer on|off             Toggle query timing display
  .headers on|off           Toggle column headers
  .limit N|off              Set display row limit
  .stats                    Show session statistics
  .quit                     Exit (aliases: .exit, .q)

Query syntax:
  PROJECT col1, col2 FILTER col OP value
  OP is one of <=, >=, <, >, =
  value is an integer or a "quoted"/'quoted' string

Tips:
  - Ctrl+C cancels current input
  - Ctrl+D exits the shell""")

    def _cmd_load(self, arg: str):
        parts = arg.split()
        if not parts:
            print("Usage: .load PATH [append]")
            return
        append = len(parts) > 1 and parts[1].lower() == "append"
        self.renderer.render_status("Loading CSV file...")
        message = self.session.load_csv(parts[0], append=append)
        self.renderer.render_message(message)

    def _cmd_engine(self, arg: str):
        if not arg:
            print(f'Using "{self.session.engine}" query engine')
            return
        self.renderer.render_message(self.session.set_engine(arg.lower()))

    def _cmd_index(self, arg: str):
        columns = [c for c in arg.replace(",", " ").split() if c]
        if not columns:
            print("Usage: .index COL [COL ...]")
            return
        self.renderer.render_message(self.session.reindex(columns))

    def _cmd_indexes(self):
        summary = self.session.index_summary()
        if not summary:
            print("No indexes.")
            return
        for role, column, count in summary:
            print(f"  {role:<9} {column:<20} {count} row(s)")

    def _cmd_columns(self):
        columns = self.session.column_summary()
        if not columns:
            print("No columns.")
            return
        for column, kind, indexed in columns:
            marker = " (indexed)" if indexed else ""
            print(f"  {column:<20} {kind:<7}{marker}")

    def _cmd_mode(self, arg: str):
        valid = Renderer.MODES
        if arg.lower() in valid:
            self.renderer.mode = arg.lower()
            print(f"Output mode: {arg.lower()}")
        else:
            print(f"Usage: .mode {{{' | '.join(valid)}}}")
            print(f"Current: {self.renderer.mode}")

    def _cmd_timer(self, arg: str):
        if arg.lower() in ("on", "1", "true"):
            self.renderer.show_timer = True
            print("Timer ON")
        elif arg.lower() in ("off", "0", "false"):
            self.renderer.show_timer = False
            print("Timer OFF")
        else:
            print(f"Timer is {'ON' if self.renderer.show_timer else 'OFF'}")

    def _cmd_headers(self, arg: str):
        if arg.lower() in ("on", "1", "true"):
            self.renderer.show_headers = True
            print("Headers ON")
        elif arg.lower() in ("off", "0", "false"):
            self.renderer.show_headers = False
            print("Headers OFF")
        else:
            print(f"Headers are {'ON' if self.renderer.show_headers else 'OFF'}")

    def _cmd_limit(self, arg: str):
        if arg.lower() in ("off", "none", "0"):
            self.renderer.display_limit = None
            print("Display limit OFF")
        elif arg.isdigit() and int(arg) > 0:
            self.renderer.display_limit = int(arg)
            print(f"Display limit: {arg} rows")
        else:
            current = self.renderer.display_limit or "OFF"
            print("Usage: .limit N | .limit off")
            print(f"Current: {current}")

    def _cmd_stats(self):
        s = self.session.stats
        print("Session Statistics:")
        print(f"  Queries executed: {s['queries_executed']}")
        print(f"  Queries failed:   {s['queries_failed']}")
        print(f"  Loads:            {s['loads']}")
        print(f"  Rows resident:    {s['rows_loaded']}")
        print(f"  Query engine:     {self.session.engine}")

    def _shutdown(self):
        self.session.close()
        print("Goodbye.")

"""
CSVQuery: In-Memory Indexed CSV Query Engine
=============================================
Entry point for the query shell.

Usage:
    python main.py [options] CSV_FILE

Options:
    --help              Show help
    --engine NAME       Query parsing engine: grammar (default) or pattern
    --index COLS        Columns to index, comma separated (repeatable)
    --execute QUERY     Execute a single query and exit
    --file PATH         Execute a query script (one query per line) and exit
    --debug             Print load/rebuild diagnostics to stderr

Default:
    Interactive REPL over CSV_FILE, every column indexed.
"""

import os
import sys


def print_help():
    print("""
CSVQuery: In-Memory Indexed CSV Query Engine

Usage:
    python main.py CSV_FILE                          Interactive REPL
    python main.py --execute "QUERY" CSV_FILE        Execute single query
    python main.py --file queries.txt CSV_FILE       Execute query script

Options:
    --help           Show this help
    --engine NAME    Query parsing engine: grammar (detailed errors, default)
                     or pattern (single generic error, slightly faster)
    --index COLS     Columns to index, comma separated; repeatable.
                     Default: index every column of the CSV header
    --execute QUERY  Execute QUERY and exit
    --file PATH      Execute queries from PATH (one per line) and exit
    --debug          Print load and index rebuild diagnostics

Query syntax:
    PROJECT col1, col2 FILTER col OP value      OP: <= >= < > =

Meta-Commands (REPL only):
    .help           Command reference
    .load PATH      Load another CSV file
    .engine NAME    Switch parsing engine
    .index COLS     Re-index columns
    .indexes        List indexes
    .mode M         Set output mode (table/vertical/raw)
    .timer on|off   Toggle timing
    .stats          Session statistics
    .quit           Exit
""")


def open_session(csv_path, engine, indexed_columns, renderer):
    """Create a Session and load the CSV file, reporting progress."""
    from cli.session import Session

    session = Session(indexed_columns=indexed_columns, engine=engine)
    renderer.render_status(f'Using "{engine}" query engine')
    if csv_path:
        renderer.render_status("Loading CSV file...")
        message = session.load_csv(csv_path)
        renderer.render_status(message)
    return session


def execute_single(session, renderer, query: str):
    """Execute a single query and exit."""
    try:
        rows, columns, elapsed = session.execute(query)
        renderer.render_rows(rows, columns, elapsed)
    except Exception as e:
        renderer.render_error(e)
        sys.exit(1)


def execute_script(session, renderer, script_path: str):
    """
    Execute a query script and exit.

    One query per line. Blank lines and lines starting with -- are skipped.
    Meta-commands are not supported in scripts.
    Errors stop execution.
    """
    if not os.path.isfile(script_path):
        print(f"Error: script file not found: {script_path}", file=sys.stderr)
        sys.exit(1)

    with open(script_path, "r", encoding="utf-8") as f:
        lines = f.readlines()

    renderer.show_timer = False  # Cleaner script output

    for line_no, line in enumerate(lines, start=1):
        text = line.strip()
        if not text or text.startswith("--"):
            continue
        if text.startswith("."):
            print(f"-- meta-command not supported in script mode: {text}",
                  file=sys.stderr)
            continue

        try:
            rows, columns, elapsed = session.execute(text)
            renderer.render_rows(rows, columns, elapsed)
        except Exception as e:
            renderer.render_error(e)
            print(f"Error in query on line {line_no}: {text[:80]}", file=sys.stderr)
            sys.exit(1)


def parse_args(args):
    """
    Parse command-line arguments into an options dict.
    Raises ValueError on unknown options or missing option values.
    """
    options = {
        "help": False,
        "csv_path": None,
        "engine": "grammar",
        "indexed_columns": [],
        "execute": None,
        "file": None,
        "debug": False,
    }

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("--help", "-h"):
            options["help"] = True
            i += 1
        elif arg == "--debug":
            options["debug"] = True
            i += 1
        elif arg in ("--engine", "--index", "--execute", "--file"):
            if i + 1 >= len(args):
                raise ValueError(f"Option {arg} requires a value")
            value = args[i + 1]
            if arg == "--engine":
                options["engine"] = value
            elif arg == "--index":
                options["indexed_columns"].extend(
                    c.strip() for c in value.split(",") if c.strip()
                )
            elif arg == "--execute":
                options["execute"] = value
            else:
                options["file"] = value
            i += 2
        elif arg.startswith("-"):
            raise ValueError(f"Unknown option: {arg}")
        else:
            options["csv_path"] = arg
            i += 1

    return options


def main(argv=None) -> None:
    """Parse CLI arguments and dispatch."""
    from cli.renderer import Renderer

    args = sys.argv[1:] if argv is None else argv

    try:
        options = parse_args(args)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        print_help()
        sys.exit(1)

    if options["help"]:
        print_help()
        return

    renderer = Renderer()
    renderer.show_status = options["debug"]

    try:
        session = open_session(
            options["csv_path"], options["engine"],
            options["indexed_columns"], renderer,
        )
    except Exception as e:
        renderer.render_error(e)
        sys.exit(1)

    with session:
        if options["execute"]:
            execute_single(session, renderer, options["execute"])
        elif options["file"]:
            execute_script(session, renderer, options["file"])
        else:
            # Interactive REPL
            from cli.repl import REPL
            REPL(session, renderer).run()


if __name__ == "__main__":
    main()

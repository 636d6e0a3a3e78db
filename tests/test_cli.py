"""
CSVQuery CLI Tests
==================
Tests for Session, Renderer, REPL meta-commands, and the main entry point
(argument parsing, --execute, --file).
"""

import contextlib
import io
import os
import shutil
import tempfile
import unittest

from catalog import IndexRole
from cli.session import Session, SessionError
from cli.renderer import Renderer
from cli.repl import REPL
from indexing import UnindexedColumnError
from parser import InvalidSyntaxError
import main


PEOPLE_CSV = """id,name,age,city
1,alice,30,Paris
2,bob,25,Berlin
3,carol,35,Paris
4,dave,25,Rome
"""

MORE_CSV = """id,name,age,city
5,erin,41,Oslo
"""


class SessionTestBase(unittest.TestCase):
    """Base with a temp directory holding sample CSV files."""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="csvquery_cli_test_")
        self.csv_path = self._write("people.csv", PEOPLE_CSV)
        self.more_path = self._write("more.csv", MORE_CSV)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _write(self, name, content):
        path = os.path.join(self.test_dir, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path


# ═══════════════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════════════

class TestSessionLifecycle(SessionTestBase):

    def test_open_with_csv(self):
        with Session(self.csv_path) as session:
            self.assertEqual(len(session.catalog.dataset), 4)
            self.assertEqual(session.headers, ["id", "name", "age", "city"])
            self.assertEqual(session.source_paths, [self.csv_path])

    def test_context_manager_closes(self):
        with Session(self.csv_path) as session:
            pass
        with self.assertRaisesRegex(SessionError, "closed"):
            session.execute("PROJECT id FILTER id = 1")

    def test_missing_csv(self):
        with self.assertRaisesRegex(SessionError, "not found"):
            Session(os.path.join(self.test_dir, "missing.csv"))

    def test_default_engine_is_grammar(self):
        with Session() as session:
            self.assertEqual(session.engine, "grammar")


class TestSessionQueries(SessionTestBase):

    def setUp(self):
        super().setUp()
        self.session = Session(self.csv_path)

    def tearDown(self):
        self.session.close()
        super().tearDown()

    def test_execute_range(self):
        rows, columns, elapsed = self.session.execute("PROJECT name FILTER age <= 25")
        self.assertEqual(rows, [{"name": "bob"}, {"name": "dave"}])
        self.assertEqual(columns, ["name"])
        self.assertGreaterEqual(elapsed, 0.0)

    def test_execute_equality(self):
        rows, _, _ = self.session.execute('PROJECT id, name FILTER city = "Paris"')
        self.assertEqual(rows, [{"id": 1, "name": "alice"}, {"id": 3, "name": "carol"}])

    def test_stats_track_success_and_failure(self):
        self.session.execute("PROJECT id FILTER id = 1")
        with self.assertRaises(InvalidSyntaxError):
            self.session.execute("PROJECT id FILTER")
        self.assertEqual(self.session.stats["queries_executed"], 1)
        self.assertEqual(self.session.stats["queries_failed"], 1)

    def test_switch_engine(self):
        message = self.session.set_engine("pattern")
        self.assertIn("pattern", message)
        with self.assertRaisesRegex(InvalidSyntaxError, "Invalid query syntax"):
            self.session.execute("PROJECT FILTER id = 1")

    def test_unknown_engine(self):
        with self.assertRaisesRegex(SessionError, "Unknown query engine"):
            self.session.set_engine("regex")
        self.assertEqual(self.session.engine, "grammar")

    def test_reindex(self):
        message = self.session.reindex(["name"])
        self.assertIn("Indexed name", message)
        with self.assertRaises(UnindexedColumnError):
            self.session.execute("PROJECT name FILTER age > 1")

    def test_reindex_unknown_column(self):
        with self.assertRaisesRegex(SessionError, "not found"):
            self.session.reindex(["salary"])

    def test_load_replaces(self):
        message = self.session.load_csv(self.more_path)
        self.assertIn("Loaded 1 row(s)", message)
        rows, _, _ = self.session.execute("PROJECT name FILTER id > 0")
        self.assertEqual(rows, [{"name": "erin"}])

    def test_load_append(self):
        message = self.session.load_csv(self.more_path, append=True)
        self.assertIn("Appended 1 row(s)", message)
        rows, _, _ = self.session.execute("PROJECT name FILTER id >= 4")
        self.assertEqual(rows, [{"name": "dave"}, {"name": "erin"}])
        self.assertEqual(self.session.stats["rows_loaded"], 5)
        self.assertEqual(self.session.source_paths, [self.csv_path, self.more_path])

    def test_index_summary(self):
        summary = self.session.index_summary()
        self.assertIn(("equality", "id", 4), summary)
        self.assertIn(("order", "city", 4), summary)

    def test_column_summary(self):
        summary = dict((c, (k, i)) for c, k, i in self.session.column_summary())
        self.assertEqual(summary["age"], ("number", True))
        self.assertEqual(summary["name"], ("string", True))


class TestSessionNamedIndexes(SessionTestBase):

    def test_only_named_columns_indexed(self):
        with Session(self.csv_path, indexed_columns=["age"]) as session:
            rows, _, _ = session.execute("PROJECT name FILTER age > 30")
            self.assertEqual(rows, [{"name": "carol"}])
            with self.assertRaises(UnindexedColumnError):
                session.execute("PROJECT name FILTER id > 1")
            # Equality on an unindexed column degrades to an empty result
            rows, _, _ = session.execute("PROJECT name FILTER id = 1")
            self.assertEqual(rows, [])


# ═══════════════════════════════════════════════════════════════════════════
# Renderer
# ═══════════════════════════════════════════════════════════════════════════

class TestRenderer(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.renderer = Renderer(output=self.out, status_output=self.err)

    def test_table_mode(self):
        count = self.renderer.render_rows(
            [{"id": 1, "name": "alice"}, {"id": 20, "name": "bo"}], ["id", "name"], 0.0012
        )
        text = self.out.getvalue()
        self.assertEqual(count, 2)
        self.assertIn("| id | name  |", text)
        self.assertIn("|  1 | alice |", text)
        self.assertIn("| 20 | bo    |", text)
        self.assertIn("Retrieved 2 row(s) in 1.200ms", text)

    def test_absent_column_renders_empty(self):
        self.renderer.render_rows([{"a": 1}], ["a", "b"])
        self.assertIn("| 1 |   |", self.out.getvalue())

    def test_vertical_mode(self):
        self.renderer.mode = "vertical"
        self.renderer.render_rows([{"id": 1, "name": "x"}], ["id", "name"])
        text = self.out.getvalue()
        self.assertIn("*** Row 1 ***", text)
        self.assertIn("name: x", text)

    def test_raw_mode(self):
        self.renderer.mode = "raw"
        self.renderer.render_rows([{"id": 1, "name": "x"}], ["id", "name"])
        lines = self.out.getvalue().splitlines()
        self.assertEqual(lines[:2], ["id|name", "1|x"])

    def test_display_limit(self):
        self.renderer.display_limit = 1
        count = self.renderer.render_rows([{"a": 1}, {"a": 2}], ["a"])
        self.assertEqual(count, 1)
        self.assertIn("display limit 1 reached", self.out.getvalue())
        self.assertIn("Retrieved 2 row(s)", self.out.getvalue())

    def test_timer_off(self):
        self.renderer.show_timer = False
        self.renderer.render_rows([], ["a"], 0.5)
        self.assertNotIn("ms", self.out.getvalue())

    def test_error_classification(self):
        self.renderer.render_error(InvalidSyntaxError("Invalid query syntax"))
        self.renderer.render_error(UnindexedColumnError("age"))
        text = self.err.getvalue()
        self.assertIn("SyntaxError: Invalid query syntax", text)
        self.assertIn("IndexError: Column 'age' is not indexed", text)

    def test_status_only_when_enabled(self):
        self.renderer.render_status("Loading CSV file...")
        self.assertEqual(self.err.getvalue(), "")
        self.renderer.show_status = True
        self.renderer.render_status("Loading CSV file...")
        self.assertIn("Loading CSV file...", self.err.getvalue())

    def test_float_formatting(self):
        self.renderer.mode = "raw"
        self.renderer.show_headers = False
        self.renderer.render_rows([{"a": 2.0}, {"a": 2.5}], ["a"])
        self.assertEqual(self.out.getvalue().splitlines()[:2], ["2", "2.5"])


# ═══════════════════════════════════════════════════════════════════════════
# REPL
# ═══════════════════════════════════════════════════════════════════════════

class TestREPL(SessionTestBase):

    def setUp(self):
        super().setUp()
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.session = Session(self.csv_path)
        self.repl = REPL(self.session, Renderer(output=self.out, status_output=self.err))

    def tearDown(self):
        self.session.close()
        super().tearDown()

    def _run(self, line):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            self.repl.handle_line(line)
        return stdout.getvalue()

    def test_query_line(self):
        self._run("PROJECT name FILTER id = 2")
        self.assertIn("bob", self.out.getvalue())

    def test_bad_query_keeps_running(self):
        self._run("PROJECT FILTER id = 2")
        self.assertIn("no columns specified", self.err.getvalue())
        self._run("PROJECT name FILTER id = 3")
        self.assertIn("carol", self.out.getvalue())

    def test_blank_line_ignored(self):
        self.assertEqual(self._run("   "), "")

    def test_engine_command(self):
        self._run(".engine pattern")
        self.assertEqual(self.session.engine, "pattern")
        self.assertIn('"pattern"', self._run(".engine"))

    def test_bad_engine_reports_error(self):
        self._run(".engine regex")
        self.assertIn("Unknown query engine", self.err.getvalue())

    def test_index_command(self):
        self._run(".index name, city")
        indexed = self.session.catalog.indexed_columns
        self.assertEqual(indexed[IndexRole.ORDER], ["name", "city"])
        self.assertEqual(indexed[IndexRole.EQUALITY], ["name", "city"])
        self.assertIn("Indexed name, city", self.out.getvalue())

    def test_indexes_command(self):
        text = self._run(".indexes")
        self.assertIn("equality", text)
        self.assertIn("order", text)

    def test_columns_command(self):
        text = self._run(".columns")
        self.assertIn("age", text)
        self.assertIn("(indexed)", text)

    def test_load_command(self):
        self._run(f".load {self.more_path} append")
        self.assertIn("Appended 1 row(s)", self.out.getvalue())
        self.assertEqual(len(self.session.catalog.dataset), 5)

    def test_mode_and_limit_commands(self):
        self._run(".mode raw")
        self.assertEqual(self.repl.renderer.mode, "raw")
        self._run(".limit 3")
        self.assertEqual(self.repl.renderer.display_limit, 3)
        self._run(".limit off")
        self.assertIsNone(self.repl.renderer.display_limit)

    def test_stats_command(self):
        self._run("PROJECT id FILTER id = 1")
        text = self._run(".stats")
        self.assertIn("Queries executed: 1", text)

    def test_quit(self):
        self.repl._running = True
        self._run(".quit")
        self.assertFalse(self.repl._running)

    def test_unknown_command(self):
        self.assertIn("Unknown command", self._run(".bogus"))


# ═══════════════════════════════════════════════════════════════════════════
# Entry Point
# ═══════════════════════════════════════════════════════════════════════════

class TestMain(SessionTestBase):

    def _main(self, *args):
        stdout, stderr = io.StringIO(), io.StringIO()
        code = 0
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            try:
                main.main(list(args))
            except SystemExit as e:
                code = e.code
        return code, stdout.getvalue(), stderr.getvalue()

    def test_parse_args(self):
        options = main.parse_args([
            "--engine", "pattern", "--index", "id,name", "--index", "age",
            "--debug", "data.csv",
        ])
        self.assertEqual(options["engine"], "pattern")
        self.assertEqual(options["indexed_columns"], ["id", "name", "age"])
        self.assertTrue(options["debug"])
        self.assertEqual(options["csv_path"], "data.csv")

    def test_parse_args_rejects_unknown_option(self):
        with self.assertRaisesRegex(ValueError, "Unknown option"):
            main.parse_args(["--verbose"])

    def test_parse_args_requires_value(self):
        with self.assertRaisesRegex(ValueError, "requires a value"):
            main.parse_args(["--engine"])

    def test_execute_single(self):
        code, out, _ = self._main("--execute", 'PROJECT name FILTER city = "Rome"', self.csv_path)
        self.assertEqual(code, 0)
        self.assertIn("dave", out)
        self.assertIn("Retrieved 1 row(s)", out)

    def test_execute_failure_exits_nonzero(self):
        code, _, err = self._main("--execute", "PROJECT name", self.csv_path)
        self.assertEqual(code, 1)
        self.assertIn("missing FILTER clause", err)

    def test_execute_with_named_index(self):
        code, _, err = self._main(
            "--index", "name", "--execute", "PROJECT name FILTER age > 1", self.csv_path
        )
        self.assertEqual(code, 1)
        self.assertIn("not indexed", err)

    def test_script(self):
        script = self._write("queries.txt", "-- ages\nPROJECT name FILTER age >= 35\n\n"
                                            "PROJECT id FILTER name = 'bob'\n")
        code, out, _ = self._main("--file", script, self.csv_path)
        self.assertEqual(code, 0)
        self.assertIn("carol", out)
        self.assertIn("|  2 |", out)

    def test_script_stops_on_error(self):
        script = self._write("bad.txt", "PROJECT name FILTER age ~ 1\nPROJECT id FILTER id = 1\n")
        code, out, err = self._main("--file", script, self.csv_path)
        self.assertEqual(code, 1)
        self.assertIn("line 1", err)
        self.assertNotIn("Retrieved", out)

    def test_missing_csv_exits(self):
        code, _, err = self._main("--execute", "PROJECT a FILTER a = 1",
                                  os.path.join(self.test_dir, "nope.csv"))
        self.assertEqual(code, 1)
        self.assertIn("not found", err)

    def test_debug_status_lines(self):
        code, _, err = self._main("--debug", "--execute", "PROJECT id FILTER id = 1", self.csv_path)
        self.assertEqual(code, 0)
        self.assertIn("Loading CSV file...", err)
        self.assertIn("indexes rebuilt in", err)

    def test_help(self):
        code, out, _ = self._main("--help")
        self.assertEqual(code, 0)
        self.assertIn("Usage:", out)


if __name__ == "__main__":
    unittest.main()

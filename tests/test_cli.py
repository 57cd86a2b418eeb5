"""
MiniKV CLI Tests
================
Tests for Session, Renderer, REPL dispatch, and script/one-shot execution.
"""

import io
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from cli.session import Session, SessionError, NO_TXN_WARNING
from cli.renderer import Renderer, format_value, ABSENT
from cli.repl import REPL, split_commands
from parser import ParseError
from store import LayeredStore

import main


# ═══════════════════════════════════════════════════════════════════════════
# Session Lifecycle
# ═══════════════════════════════════════════════════════════════════════════

class TestSessionLifecycle(unittest.TestCase):

    def test_open_close(self):
        session = Session()
        self.assertFalse(session._closed)
        self.assertIsNone(session.close())
        self.assertTrue(session._closed)

    def test_context_manager(self):
        with Session() as session:
            self.assertFalse(session._closed)
        self.assertTrue(session._closed)

    def test_wraps_given_store(self):
        store = LayeredStore()
        store.set("a", 1)
        with Session(store) as session:
            self.assertEqual(session.execute("GET a"), "1")

    def test_close_rolls_back_open_transactions(self):
        session = Session()
        session.execute("SET a 1")
        session.execute("BEGIN")
        session.execute("BEGIN")
        session.execute("SET a 2")
        with self.assertLogs("cli.session", level="WARNING"):
            warning = session.close()
        self.assertIn("2 open transaction(s) rolled back", warning)
        self.assertEqual(session.store.depth, 0)
        self.assertEqual(session.store.get("a"), 1)
        self.assertEqual(session.stats["transactions_rolled_back"], 2)

    def test_double_close_safe(self):
        session = Session()
        session.close()
        self.assertIsNone(session.close())

    def test_execute_after_close(self):
        session = Session()
        session.close()
        with self.assertRaises(SessionError):
            session.execute("GET a")


# ═══════════════════════════════════════════════════════════════════════════
# Session Commands
# ═══════════════════════════════════════════════════════════════════════════

class TestSessionCommands(unittest.TestCase):

    def setUp(self):
        self.session = Session()

    def tearDown(self):
        self.session.close()

    def test_set_get(self):
        self.assertEqual(self.session.execute("SET name 'alice'"), "OK")
        self.assertEqual(self.session.execute("GET name"), "'alice'")

    def test_get_absent_vs_null(self):
        self.session.execute("SET nothing NULL")
        self.assertEqual(self.session.execute("GET nothing"), "NULL")
        self.assertEqual(self.session.execute("GET missing"), "(absent)")

    def test_exists(self):
        self.session.execute("SET n NULL")
        self.assertEqual(self.session.execute("EXISTS n"), "TRUE")
        self.session.execute("DELETE n")
        self.assertEqual(self.session.execute("EXISTS n"), "FALSE")

    def test_begin_commit_messages(self):
        self.assertEqual(self.session.execute("BEGIN"), "BEGIN (depth 1)")
        self.assertEqual(self.session.execute("BEGIN"), "BEGIN (depth 2)")
        self.assertEqual(self.session.execute("COMMIT"), "COMMIT (depth 1)")
        self.assertEqual(self.session.execute("ROLLBACK"), "ROLLBACK (depth 0)")

    def test_commit_without_transaction_warns(self):
        self.assertEqual(self.session.execute("COMMIT"), NO_TXN_WARNING)
        self.assertEqual(self.session.execute("ROLLBACK"), NO_TXN_WARNING)
        self.assertEqual(self.session.stats["transactions_committed"], 0)
        self.assertEqual(self.session.stats["transactions_rolled_back"], 0)

    def test_nested_rollback_through_session(self):
        for line in ("SET a 1", "BEGIN", "SET a 10", "BEGIN", "SET a 100", "ROLLBACK"):
            self.session.execute(line)
        self.assertEqual(self.session.execute("GET a"), "10")
        self.session.execute("COMMIT")
        self.assertEqual(self.session.execute("GET a"), "10")
        self.assertEqual(self.session.depth, 0)

    def test_stats(self):
        self.session.execute("BEGIN")
        self.session.execute("SET a 1")
        self.session.execute("COMMIT")
        self.assertEqual(self.session.stats["commands_executed"], 3)
        self.assertEqual(self.session.stats["transactions_committed"], 1)

    def test_parse_error_propagates(self):
        with self.assertRaises(ParseError):
            self.session.execute("SET a")
        self.assertEqual(self.session.stats["commands_executed"], 0)

    def test_dump(self):
        self.session.execute("SET a 1")
        self.session.execute("BEGIN")
        self.session.execute("DELETE a")
        self.session.execute("SET b TRUE")
        self.assertEqual(self.session.dump(), {"b": True})


# ═══════════════════════════════════════════════════════════════════════════
# Renderer
# ═══════════════════════════════════════════════════════════════════════════

class TestRenderer(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.renderer = Renderer(self.out)

    def test_format_value(self):
        self.assertEqual(format_value(ABSENT), "(absent)")
        self.assertEqual(format_value(None), "NULL")
        self.assertEqual(format_value(True), "TRUE")
        self.assertEqual(format_value(False), "FALSE")
        self.assertEqual(format_value(3), "3")
        self.assertEqual(format_value(2.5), "2.5")
        self.assertEqual(format_value("it's"), "'it''s'")

    def test_render_message(self):
        self.renderer.render_message("OK")
        self.renderer.render_message("")
        self.assertEqual(self.out.getvalue(), "OK\n")

    def test_render_error_classified(self):
        self.renderer.render_error(SessionError("Session is closed"))
        self.renderer.render_error(ValueError("boom"))
        lines = self.out.getvalue().splitlines()
        self.assertEqual(lines[0], "SessionError: Session is closed")
        self.assertEqual(lines[1], "Error: boom")

    def test_render_parse_error(self):
        with Session() as session:
            try:
                session.execute("GET")
            except ParseError as e:
                self.renderer.render_error(e)
        self.assertTrue(self.out.getvalue().startswith("SyntaxError: GET requires a key"))

    def test_render_unexpected_character_as_syntax_error(self):
        with Session() as session:
            with self.assertRaises(ParseError) as cm:
                session.execute("GET $a")
        self.renderer.render_error(cm.exception)
        self.assertTrue(self.out.getvalue().startswith(
            "SyntaxError: Unexpected character '$' at line 1:5"))

    def test_render_dump(self):
        count = self.renderer.render_dump({"a": 1, "name": "x"})
        self.assertEqual(count, 2)
        text = self.out.getvalue()
        self.assertIn("  a     1", text)
        self.assertIn("  name  'x'", text)
        self.assertIn("2 key(s)", text)

    def test_render_empty_dump(self):
        self.assertEqual(self.renderer.render_dump({}), 0)
        self.assertEqual(self.out.getvalue(), "(empty)\n")


# ═══════════════════════════════════════════════════════════════════════════
# REPL
# ═══════════════════════════════════════════════════════════════════════════

class TestREPL(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.repl = REPL(renderer=Renderer(self.out))

    def tearDown(self):
        self.repl.session.close()

    def test_split_commands(self):
        self.assertEqual(split_commands("SET a 1; GET a;"), ["SET a 1", "GET a"])
        self.assertEqual(split_commands("SET a 'x;y'; GET a"), ["SET a 'x;y'", "GET a"])
        self.assertEqual(split_commands(" ; "), [])

    def test_split_commands_respects_quoted_keys(self):
        self.assertEqual(split_commands('SET "a;b" 1; GET "a;b"'),
                         ['SET "a;b" 1', 'GET "a;b"'])
        # Each quote kind is literal inside the other
        self.assertEqual(split_commands("SET \"k'1\" 'x;\"y'; GET z"),
                         ["SET \"k'1\" 'x;\"y'", "GET z"])

    def test_prompt_shows_depth(self):
        self.assertEqual(self.repl.prompt(), "minikv> ")
        self.repl.handle_line("BEGIN; BEGIN")
        self.assertEqual(self.repl.prompt(), "minikv[txn:2]> ")

    def test_multiple_commands_per_line(self):
        self.repl.handle_line("SET a 1; GET a")
        self.assertEqual(self.out.getvalue().splitlines(), ["OK", "1"])

    def test_error_does_not_stop_line(self):
        self.repl.handle_line("FETCH a; SET b 2")
        lines = self.out.getvalue().splitlines()
        self.assertTrue(lines[0].startswith("SyntaxError: Unknown command"))
        self.assertEqual(lines[1], "OK")

    def test_meta_depth_and_dump(self):
        self.repl.handle_line("SET a 1; BEGIN")
        self.repl.handle_line(".depth")
        self.repl.handle_line(".dump")
        text = self.out.getvalue()
        self.assertIn("Depth: 1", text)
        self.assertIn("1 key(s)", text)

    def test_meta_stats(self):
        self.repl.handle_line("BEGIN; ROLLBACK")
        self.repl.handle_line(".stats")
        self.assertIn("Transactions rolled back: 1", self.out.getvalue())

    def test_meta_quit(self):
        self.repl._running = True
        self.repl.handle_line(".quit")
        self.assertFalse(self.repl.running)

    def test_unknown_meta(self):
        self.repl.handle_line(".bogus")
        self.assertIn("Unknown command: .bogus", self.out.getvalue())

    def test_blank_line_ignored(self):
        self.repl.handle_line("   ")
        self.assertEqual(self.out.getvalue(), "")


# ═══════════════════════════════════════════════════════════════════════════
# One-shot and Script Execution
# ═══════════════════════════════════════════════════════════════════════════

class TestMainEntryPoint(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="minikv_cli_test_")

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _write_script(self, content: str) -> str:
        path = os.path.join(self.test_dir, "script.kv")
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def _run(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main.main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_execute_single(self):
        code, out, _ = self._run(["--execute", "SET x 1; BEGIN; DELETE x; COMMIT; GET x"])
        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines(),
                         ["OK", "BEGIN (depth 1)", "OK", "COMMIT (depth 0)", "(absent)"])

    def test_execute_single_quoted_key_with_semicolon(self):
        code, out, _ = self._run(["--execute", 'SET "a;b" 1; GET "a;b"'])
        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines(), ["OK", "1"])

    def test_execute_single_error(self):
        code, out, _ = self._run(["--execute", "GET"])
        self.assertEqual(code, 1)
        self.assertIn("SyntaxError", out)

    def test_script(self):
        path = self._write_script(
            "-- seed\n"
            "SET k 1\n"
            "BEGIN\n"
            "# rewrite within a transaction\n"
            "SET k 2; COMMIT\n"
            "GET k\n"
        )
        code, out, _ = self._run(["--file", path])
        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines()[-1], "2")

    def test_script_meta_command_skipped(self):
        path = self._write_script(".dump\nGET a\n")
        code, out, err = self._run(["--file", path])
        self.assertEqual(code, 0)
        self.assertIn("meta-command not supported", err)
        self.assertEqual(out.strip(), "(absent)")

    def test_script_error_stops(self):
        path = self._write_script("SET a 1\nSET b\nSET c 3\n")
        code, out, err = self._run(["--file", path])
        self.assertEqual(code, 1)
        self.assertIn(":2:", err)
        self.assertEqual(out.count("OK"), 1)

    def test_script_missing_file(self):
        code, _, err = self._run(["--file", os.path.join(self.test_dir, "nope.kv")])
        self.assertEqual(code, 1)
        self.assertIn("script file not found", err)


if __name__ == "__main__":
    unittest.main()

"""
MiniKV Interactive REPL
=======================
Interactive command-line shell with minikv> prompt.

Features:
  - Several commands per line, separated by ;
  - Meta-commands (dot-prefixed)
  - Ctrl+C: cancel current input
  - Ctrl+D/EOF: exit, discarding open transactions
  - Persistent readline history (~/.minikv_history)
"""

import logging
import os
import sys
from typing import List, Optional

from cli.session import Session
from cli.renderer import Renderer

logger = logging.getLogger(__name__)


# ─── History ────────────────────────────────────────────────────────
HISTORY_FILE = os.path.expanduser("~/.minikv_history")
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
        except OSError as e:
            logger.debug("could not read history file: %s", e)


def _save_history():
    if _HAS_READLINE:
        try:
            readline.set_history_length(HISTORY_MAX)
            readline.write_history_file(HISTORY_FILE)
        except OSError as e:
            logger.debug("could not write history file: %s", e)


def split_commands(line: str) -> List[str]:
    """Split a line on ; outside quoted strings and keys. Drops empty pieces."""
    parts = []
    current = []
    in_string = False   # '...'
    in_key = False      # "..."
    for ch in line:
        if ch == "'" and not in_key:
            # an escaped '' toggles twice
            in_string = not in_string
        elif ch == '"' and not in_string:
            in_key = not in_key
        if ch == ";" and not (in_string or in_key):
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


# ─── REPL ───────────────────────────────────────────────────────────

class REPL:
    """
    Interactive MiniKV shell.

    Usage:
        repl = REPL()
        repl.run()
    """

    PROMPT = "minikv> "

    def __init__(self, session: Optional[Session] = None, renderer: Optional[Renderer] = None):
        self.session = session or Session()
        self.renderer = renderer or Renderer()
        self._running = False

    def run(self):
        """Main REPL loop."""
        _load_history()
        self._running = True

        print("MiniKV v0.1.0")
        print('Type ".help" for usage hints.')
        print()

        try:
            while self._running:
                try:
                    line = input(self.prompt())
                except KeyboardInterrupt:
                    print()
                    continue
                except EOFError:
                    print()
                    break

                self.handle_line(line)
        finally:
            _save_history()
            self._shutdown()

    def prompt(self) -> str:
        depth = self.session.depth
        if depth:
            return f"minikv[txn:{depth}]> "
        return self.PROMPT

    def handle_line(self, line: str):
        """Dispatch one input line: meta-command or ;-separated commands."""
        stripped = line.strip()
        if not stripped:
            return
        if stripped.startswith("."):
            self._handle_meta_command(stripped)
            return
        for command in split_commands(stripped):
            self._execute_command(command)

    # ─── Command Execution ──────────────────────────────────────────

    def _execute_command(self, text: str):
        try:
            self.renderer.render_message(self.session.execute(text))
        except Exception as e:
            self.renderer.render_error(e)

    # ─── Meta-Commands ──────────────────────────────────────────────

    def _handle_meta_command(self, line: str):
        """Handle dot-prefixed meta-commands."""
        cmd = line.split(None, 1)[0].lower()

        if cmd in (".quit", ".exit", ".q"):
            self._running = False
        elif cmd == ".help":
            self._cmd_help()
        elif cmd == ".dump":
            self.renderer.render_dump(self.session.dump())
        elif cmd == ".depth":
            self.renderer.render_message(f"Depth: {self.session.depth}")
        elif cmd == ".stats":
            self._cmd_stats()
        else:
            self.renderer.render_message(
                f"Unknown command: {cmd}. Type .help for available commands.")

    def _cmd_help(self):
        self.renderer.render_message("""MiniKV Commands:
  .help                Show this help
  .dump                List visible keys and values
  .depth               Show transaction nesting depth
  .stats               Show session statistics
  .quit                Exit (aliases: .exit, .q)

Data Commands:
  GET key              Show value, NULL, or (absent)
  SET key value        value: 42, -1.5, 'text', word, NULL, TRUE, FALSE
  DELETE key           Remove key (alias: UNSET)
  EXISTS key           TRUE if key has a visible value

Transaction Commands:
  BEGIN                Open a (nested) transaction
  COMMIT               Merge innermost transaction into its parent
  ROLLBACK             Discard innermost transaction

Tips:
  - Separate several commands on one line with ;
  - Quote keys containing spaces: GET "my key"
  - Ctrl+D exits the shell""")

    def _cmd_stats(self):
        s = self.session.stats
        self.renderer.render_message("\n".join([
            "Session Statistics:",
            f"  Commands executed:        {s['commands_executed']}",
            f"  Transactions committed:   {s['transactions_committed']}",
            f"  Transactions rolled back: {s['transactions_rolled_back']}",
            f"  Transaction depth:        {self.session.depth}",
        ]))

    # ─── Helpers ────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._running

    def _shutdown(self):
        """Clean shutdown: close session, warn about open transactions."""
        warning = self.session.close()
        if warning:
            print(warning, file=sys.stderr)
        print("Goodbye.")

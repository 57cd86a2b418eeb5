"""
MiniKV Session
==============
Per-connection state object that wires the command parser to one store.

Owns:
  - LayeredStore (one store per logical namespace)
  - Statistics counters

Transaction semantics:
  - Outside BEGIN, SET/DELETE apply directly to the committed state
  - BEGIN nests; COMMIT/ROLLBACK resolve the innermost level only
  - COMMIT/ROLLBACK with nothing open is a warning, not an error
"""

import logging
from typing import Optional

from store import LayeredStore
from parser import parse
from parser.ast_nodes import (
    Command, GetCmd, SetCmd, DeleteCmd, ExistsCmd,
    BeginCmd, CommitCmd, RollbackCmd,
)
from cli.renderer import format_value, ABSENT

logger = logging.getLogger(__name__)

NO_TXN_WARNING = "WARNING: no transaction in progress"


class SessionError(Exception):
    """Session-level error (closed session, unsupported command)."""
    pass


class Session:
    """
    Store session: parses and executes MiniKV commands.

    Usage:
        with Session() as session:
            session.execute("SET a 1")
            print(session.execute("GET a"))
    """

    def __init__(self, store: Optional[LayeredStore] = None):
        self.store = store if store is not None else LayeredStore()
        self._closed: bool = False

        # ── Statistics ──
        self.stats = {
            "commands_executed": 0,
            "transactions_committed": 0,
            "transactions_rolled_back": 0,
        }

    @property
    def depth(self) -> int:
        return self.store.depth

    # ─── Transaction Control ────────────────────────────────────────

    def begin(self) -> str:
        """Open a (possibly nested) transaction. Returns status message."""
        self._check_closed()
        self.store.begin()
        return f"BEGIN (depth {self.store.depth})"

    def commit(self) -> str:
        """Commit the innermost transaction. Returns status message."""
        self._check_closed()
        if not self.store.commit():
            return NO_TXN_WARNING
        self.stats["transactions_committed"] += 1
        return f"COMMIT (depth {self.store.depth})"

    def rollback(self) -> str:
        """Roll back the innermost transaction. Returns status message."""
        self._check_closed()
        if not self.store.rollback():
            return NO_TXN_WARNING
        self.stats["transactions_rolled_back"] += 1
        return f"ROLLBACK (depth {self.store.depth})"

    # ─── Command Execution ──────────────────────────────────────────

    def execute(self, text: str) -> str:
        """
        Execute one command string and return the message to display.

          - GET:    formatted value, NULL, or (absent)
          - EXISTS: TRUE / FALSE
          - SET/DELETE: OK
          - Txn control: BEGIN (depth N) / COMMIT ... / ROLLBACK ...

        Raises ParseError for bad syntax, SessionError if closed.
        """
        self._check_closed()
        cmd = parse(text)
        self.stats["commands_executed"] += 1
        return self.execute_command(cmd)

    def execute_command(self, cmd: Command) -> str:
        self._check_closed()

        if isinstance(cmd, BeginCmd):
            return self.begin()
        if isinstance(cmd, CommitCmd):
            return self.commit()
        if isinstance(cmd, RollbackCmd):
            return self.rollback()

        if isinstance(cmd, GetCmd):
            return format_value(self.store.get(cmd.key, ABSENT))
        if isinstance(cmd, ExistsCmd):
            return format_value(self.store.exists(cmd.key))
        if isinstance(cmd, SetCmd):
            self.store.set(cmd.key, cmd.value)
            return "OK"
        if isinstance(cmd, DeleteCmd):
            self.store.delete(cmd.key)
            return "OK"

        raise SessionError(f"Unsupported command: {type(cmd).__name__}")

    def dump(self) -> dict:
        """Visible key/value state at the current depth."""
        self._check_closed()
        return self.store.snapshot()

    def _check_closed(self):
        if self._closed:
            raise SessionError("Session is closed")

    # ─── Lifecycle ──────────────────────────────────────────────────

    def close(self) -> Optional[str]:
        """
        Close the session. Open transactions are discarded.
        Returns a warning message if any were rolled back.
        """
        if self._closed:
            return None

        warning = None
        open_levels = self.store.depth
        if open_levels:
            while self.store.rollback():
                self.stats["transactions_rolled_back"] += 1
            warning = (f"WARNING: {open_levels} open transaction(s) "
                       f"rolled back on close")
            logger.warning("session closed with %d open transaction(s)", open_levels)

        self._closed = True
        return warning

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

"""
MiniKV Result Renderer
======================
Formats command results for the shell.

Features:
  - NULL (a stored None) displayed distinctly from an absent key
  - Strings quoted, booleans as TRUE/FALSE
  - Key dump as an aligned two-column listing
  - Error rendering with classification prefix
"""

import sys
from typing import Any, Dict, TextIO


class _Absent:
    """Lookup default meaning "no visible value"."""
    __slots__ = ()

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


def format_value(value: Any) -> str:
    """Render one stored value for display."""
    if value is ABSENT:
        return "(absent)"
    if value is None:
        return "NULL"
    if value is True:
        return "TRUE"
    if value is False:
        return "FALSE"
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    return repr(value)


class Renderer:
    """Writes messages, key dumps, and errors to an output stream."""

    def __init__(self, output: TextIO = None):
        self.output = output or sys.stdout
        self.max_key_width: int = 40

    # ─── Public API ─────────────────────────────────────────────────

    def render_message(self, message: str):
        """Render a command result message."""
        if message:
            self._print(message)

    def render_dump(self, entries: Dict[Any, Any]) -> int:
        """Render visible key/value pairs. Returns number of entries."""
        if not entries:
            self._print("(empty)")
            return 0

        keys = [str(k) for k in entries]
        width = min(max(len(k) for k in keys), self.max_key_width)
        for key, value in zip(keys, entries.values()):
            if len(key) > width:
                key = key[:width - 3] + "..."
            self._print(f"  {key:<{width}}  {format_value(value)}")
        self._print(f"\n{len(entries)} key(s)")
        return len(entries)

    def render_error(self, error: Exception):
        """Render an error with classification prefix."""
        prefix = self._classify_error(type(error).__name__)
        self._print(f"{prefix}: {error}")

    # ─── Internal ───────────────────────────────────────────────────

    def _classify_error(self, error_type: str) -> str:
        """Map error class name to user-friendly prefix."""
        mapping = {
            "ParseError": "SyntaxError",
            "SyntaxError": "SyntaxError",
            "SessionError": "SessionError",
        }
        return mapping.get(error_type, "Error")

    def _print(self, text: str):
        print(text, file=self.output)

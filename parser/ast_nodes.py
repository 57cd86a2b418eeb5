"""
MiniKV AST Nodes
================
Parsed command definitions.

Design:
- Immutable dataclasses
- One node per command; keys are plain strings
- Values are already-converted Python objects (int, float, str, bool, None)
"""

from dataclasses import dataclass
from typing import Any


class Command:
    """Base class for all parsed commands."""
    pass


# ═══════════════════════════════════════════════════════════════════════════
# Data Commands
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GetCmd(Command):
    key: str


@dataclass(frozen=True)
class SetCmd(Command):
    key: str
    value: Any

    def __str__(self) -> str:
        return f"SET {self.key} {self.value!r}"


@dataclass(frozen=True)
class DeleteCmd(Command):
    key: str


@dataclass(frozen=True)
class ExistsCmd(Command):
    key: str


# ═══════════════════════════════════════════════════════════════════════════
# Transaction Control
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BeginCmd(Command):
    pass


@dataclass(frozen=True)
class CommitCmd(Command):
    pass


@dataclass(frozen=True)
class RollbackCmd(Command):
    pass

"""
MiniKV Layered Store
====================
Base mapping plus a stack of transaction layers (innermost last).

Invariants:
  - get() scans innermost layer -> outermost layer -> base; the first
    layer holding an entry for the key decides, value or tombstone.
  - commit() pops the innermost layer and merges it into the next layer
    down, or into the base when the stack becomes empty. Never skips a level.
  - rollback() pops and discards the innermost layer.
  - commit()/rollback() with no active transaction return False and
    mutate nothing. No other operation can fail.

Single caller only. Embedders needing concurrent access must serialize
calls themselves.
"""

import logging
from typing import Any, Dict, Hashable, List

from store.layers import TransactionLayer, TOMBSTONE

logger = logging.getLogger(__name__)


class LayeredStore:
    """
    In-memory associative store with nested transactions.

    Usage:
        store = LayeredStore()
        store.set("a", 1)
        store.begin()
        store.set("a", 2)
        store.rollback()
        store.get("a")   # -> 1
    """

    def __init__(self):
        self._base: Dict[Hashable, Any] = {}
        self._layers: List[TransactionLayer] = []

    # ─── Reads ───────────────────────────────────────────────────────────

    def get(self, key: Hashable, default: Any = None) -> Any:
        """
        Return the value visible for key at the current depth.
        Returns default when the key is unset or deleted.
        """
        for layer in reversed(self._layers):
            if key in layer:
                value = layer[key]
                return default if value is TOMBSTONE else value
        return self._base.get(key, default)

    def exists(self, key: Hashable) -> bool:
        """True if get() would find a present value (a stored None counts)."""
        for layer in reversed(self._layers):
            if key in layer:
                return layer[key] is not TOMBSTONE
        return key in self._base

    def __contains__(self, key: Hashable) -> bool:
        return self.exists(key)

    def snapshot(self) -> Dict[Hashable, Any]:
        """Full visible state at the current depth, as a new dict."""
        view = dict(self._base)
        for layer in self._layers:
            layer.apply_to(view)
        return view

    @property
    def depth(self) -> int:
        return len(self._layers)

    @property
    def in_transaction(self) -> bool:
        return bool(self._layers)

    # ─── Writes ──────────────────────────────────────────────────────────

    def set(self, key: Hashable, value: Any) -> None:
        if self._layers:
            self._layers[-1].put(key, value)
        else:
            self._base[key] = value

    def delete(self, key: Hashable) -> None:
        """Delete key. Inside a transaction this records a tombstone."""
        if self._layers:
            self._layers[-1].tombstone(key)
        else:
            self._base.pop(key, None)

    # ─── Transaction Control ─────────────────────────────────────────────

    def begin(self) -> bool:
        """Push a new empty layer. Nesting depth is unbounded."""
        self._layers.append(TransactionLayer())
        logger.debug("begin: depth %d", len(self._layers))
        return True

    def commit(self) -> bool:
        """
        Merge the innermost layer into its parent.
        Returns False (and changes nothing) when no transaction is active.
        """
        if not self._layers:
            logger.debug("commit rejected: no transaction in progress")
            return False

        layer = self._layers.pop()
        if self._layers:
            self._layers[-1].absorb(layer)
        else:
            layer.apply_to(self._base)
        logger.debug("commit: %d entr%s merged, depth %d",
                     len(layer), "y" if len(layer) == 1 else "ies",
                     len(self._layers))
        return True

    def rollback(self) -> bool:
        """
        Discard the innermost layer.
        Returns False (and changes nothing) when no transaction is active.
        """
        if not self._layers:
            logger.debug("rollback rejected: no transaction in progress")
            return False

        layer = self._layers.pop()
        logger.debug("rollback: %d entr%s discarded, depth %d",
                     len(layer), "y" if len(layer) == 1 else "ies",
                     len(self._layers))
        return True

    def __repr__(self) -> str:
        return f"LayeredStore(keys={len(self._base)}, depth={self.depth})"

"""
MiniKV Store Module
===================
In-memory key-value store with nested, rollback-capable transactions.

Components:
  - layers.py: TransactionLayer (one stack frame of pending writes/tombstones)
  - layered_store.py: LayeredStore (base mapping + transaction stack)
"""

from store.layers import TransactionLayer, TOMBSTONE
from store.layered_store import LayeredStore

__all__ = ["LayeredStore", "TransactionLayer", "TOMBSTONE"]

"""
MiniKV Transaction Layer
========================
One frame of the transaction stack.

A layer maps each key it has touched to either a present value or the
TOMBSTONE marker. A key missing from the layer entirely means "not touched
here", so lookups fall through to the next-outer layer.
"""

from typing import Any, Dict, Hashable, Iterator, Tuple


class _Tombstone:
    """Marker for a key deleted inside a transaction layer."""
    __slots__ = ()

    def __repr__(self) -> str:
        return "TOMBSTONE"

    def __bool__(self) -> bool:
        return False


# Never equal to a storable value; None stays a legitimate value.
TOMBSTONE = _Tombstone()


class TransactionLayer:
    """Pending writes and deletes for one nesting level."""
    __slots__ = ('_entries',)

    def __init__(self):
        self._entries: Dict[Hashable, Any] = {}

    def put(self, key: Hashable, value: Any) -> None:
        self._entries[key] = value

    def tombstone(self, key: Hashable) -> None:
        self._entries[key] = TOMBSTONE

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __getitem__(self, key: Hashable) -> Any:
        """Return the entry for key: a value or TOMBSTONE. KeyError if untouched."""
        return self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> Iterator[Tuple[Hashable, Any]]:
        return iter(self._entries.items())

    # ─── Merging ────────────────────────────────────────────────────────

    def absorb(self, child: 'TransactionLayer') -> None:
        """
        Fold a committed child layer into this one.
        Child entries win; tombstones stay tombstones so they keep
        shadowing whatever lies further out.
        """
        self._entries.update(child._entries)

    def apply_to(self, base: Dict[Hashable, Any]) -> None:
        """Fold this layer into the base mapping. Tombstones delete."""
        for key, value in self._entries.items():
            if value is TOMBSTONE:
                base.pop(key, None)
            else:
                base[key] = value

    def __repr__(self) -> str:
        return f"TransactionLayer({self._entries!r})"

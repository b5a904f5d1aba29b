"""Identity-preserving reconciliation of model snapshots.

The layout engine writes positions and velocities into the very record
objects it is given, and the views bind scene elements to those same
objects. Replacing a record with a fresh copy on every update throws that
state away, so incoming snapshots are merged into the existing records
by ``id`` instead of swapped in.

Records are plain JSON-like dicts. Dicts are merged recursively, every
other value (lists included) is overwritten as a whole.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, MutableMapping
from typing import Any

Record = MutableMapping[str, Any]


def same_ids(ids_a: Iterable[Hashable], ids_b: Iterable[Hashable]) -> bool:
    """Return True if both sequences hold the same ids, ignoring order and duplicates.

    Examples:
        >>> same_ids([1, 1, 2], [2, 1])
        True
        >>> same_ids([], [1])
        False
        >>> same_ids([], [])
        True
    """
    set_a = set(ids_a)
    set_b = set(ids_b)
    # Zero records never match a non-empty set
    if bool(set_a) != bool(set_b):
        return False
    return set_a == set_b


def update_in_place(old: Record, new: Record) -> Record:
    """Merge ``new`` into ``old`` and return ``old``.

    Nested dicts present on both sides are merged recursively so their
    identity survives. Keys missing from ``new`` are left alone.
    """
    for key, value in new.items():
        current = old.get(key)
        if isinstance(current, MutableMapping) and isinstance(value, MutableMapping):
            old[key] = update_in_place(current, value)
        else:
            old[key] = value
    return old


def update_records(old_records: list[Record], new_records: list[Record]) -> list[Record]:
    """Update ``old_records`` in place from ``new_records``, matching on ``id``.

    If the two id sets differ, ``new_records`` is returned as-is and the old
    list (and every reference into it) is abandoned.

    Otherwise each new record is merged into the first old record with the
    same id, and old records whose id is gone are dropped with survivors kept
    in order. Duplicate ids are not rejected: only the first match is updated.
    """
    if not same_ids((r["id"] for r in old_records), (r["id"] for r in new_records)):
        return new_records

    for new in new_records:
        for i, old in enumerate(old_records):
            if old["id"] == new["id"]:
                old_records[i] = update_in_place(old, new)
                break
        else:
            old_records.append(new)

    wanted = {r["id"] for r in new_records}
    old_records[:] = [r for r in old_records if r["id"] in wanted]
    return old_records

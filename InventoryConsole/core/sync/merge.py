"""
Reconciliation of fetched snapshots into locally held collections.

Every store in the console merges its poll results through ``reconcile``
instead of replacing its list wholesale, so that a routine refresh never
reorders rows and never drops an optimistic entry that the server has not
confirmed yet.
"""
from typing import Callable, Dict, Hashable, Iterable, List, Optional, TypeVar

T = TypeVar("T")

KeyFunc = Callable[[T], Hashable]
PendingPredicate = Callable[[T], bool]
Resolver = Callable[[T, T], T]


def reconcile(
    local: Iterable[T],
    snapshot: Iterable[T],
    key: KeyFunc,
    is_pending: Optional[PendingPredicate] = None,
    resolve: Optional[Resolver] = None,
    partial: bool = False,
) -> List[T]:
    """
    Merge ``snapshot`` into ``local`` and return the new collection.

    - Keys present in both take the snapshot value at their local position.
      ``resolve(local_item, snapshot_item)`` may choose or combine the value.
    - Keys only in the snapshot are appended in snapshot order.
    - Keys only in ``local`` are dropped, unless ``is_pending`` says the item
      is an unconfirmed local entry or ``partial`` is set (the snapshot only
      covers a subset of the collection).

    Duplicate keys in the snapshot collapse to their last value, placed at
    the first occurrence. Duplicate keys in ``local`` keep the first one.
    Neither input is modified.
    """
    fresh: Dict[Hashable, T] = {}
    fresh_order: List[Hashable] = []
    for item in snapshot:
        k = key(item)
        if k not in fresh:
            fresh_order.append(k)
        fresh[k] = item

    merged: List[T] = []
    placed = set()
    for item in local:
        k = key(item)
        if k in placed:
            continue
        if k in fresh:
            incoming = fresh[k]
            merged.append(resolve(item, incoming) if resolve else incoming)
            placed.add(k)
        elif partial or (is_pending is not None and is_pending(item)):
            merged.append(item)
            placed.add(k)

    for k in fresh_order:
        if k not in placed:
            merged.append(fresh[k])
            placed.add(k)

    return merged


def replace_where(items: Iterable[T], key: KeyFunc, target: Hashable, replacement: T) -> List[T]:
    """Return ``items`` with the entry keyed ``target`` swapped for ``replacement`` in place."""
    return [replacement if key(item) == target else item for item in items]


def remove_where(items: Iterable[T], key: KeyFunc, target: Hashable) -> List[T]:
    """Return ``items`` without the entry keyed ``target``."""
    return [item for item in items if key(item) != target]
